class DomainValidationError(Exception):
    """
    Raised when business logic validation fails.
    Subclasses narrow the failure with an `error_code` that callers can map to
    their own transport (command exit message, API status, task result).
    """

    error_code = "validation_error"

    def as_dict(self) -> dict[str, object]:
        return {
            "success": False,
            "message": str(self),
            "error": self.error_code,
        }


class InvalidTransitionError(DomainValidationError):
    error_code = "invalid_transition"


class StaffNotFoundError(DomainValidationError):
    error_code = "staff_not_found"


class TicketNotFoundError(DomainValidationError):
    error_code = "ticket_not_found"


class ItemNotFoundError(DomainValidationError):
    error_code = "item_not_found"


class PriceMismatchError(DomainValidationError):
    error_code = "price_mismatch"


class InsufficientPointsError(DomainValidationError):
    error_code = "insufficient_points"

    def __init__(self, *, required: int, available: int):
        self.required = int(required)
        self.available = int(available)
        super().__init__(
            f"Insufficient points: required={self.required} available={self.available}."
        )

    @property
    def shortfall(self) -> int:
        return max(self.required - self.available, 0)

    def as_dict(self) -> dict[str, object]:
        payload = super().as_dict()
        payload.update(
            {
                "required": self.required,
                "available": self.available,
                "shortfall": self.shortfall,
            }
        )
        return payload


class ConcurrentModificationError(DomainValidationError):
    error_code = "concurrent_modification"
