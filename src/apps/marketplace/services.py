import logging
from dataclasses import dataclass

from django.db import transaction

from account.services import StaffDirectoryService
from core.exceptions import ItemNotFoundError, PriceMismatchError
from core.utils.constants import PointsEntryType
from gamification.services import PointsLedgerService
from marketplace import catalog
from marketplace.models import Purchase

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PurchaseResult:
    purchase: Purchase
    points: int
    level: int
    points_deducted: int


class MarketplaceService:
    """Spends ledger points on catalog items and records the purchase."""

    @staticmethod
    def _resolve_item(*, item_id, expected_cost: int) -> catalog.MarketplaceItem:
        item = catalog.get_item(item_id)
        if item is None:
            raise ItemNotFoundError(f"Item {item_id!r} was not found.")
        try:
            normalized_cost = int(expected_cost)
        except (TypeError, ValueError) as exc:
            raise PriceMismatchError(
                f"Expected cost must be an integer: {expected_cost!r}."
            ) from exc
        if normalized_cost != item.points_cost:
            raise PriceMismatchError(
                f"Item price mismatch: expected={expected_cost} actual={item.points_cost}."
            )
        return item

    @classmethod
    @transaction.atomic
    def purchase(cls, *, staff_id: int, item_id, expected_cost: int) -> PurchaseResult:
        item = cls._resolve_item(item_id=item_id, expected_cost=expected_cost)
        reference = PointsLedgerService.reference_for(PointsEntryType.MARKETPLACE_PURCHASE)
        balance = PointsLedgerService.spend(
            staff_id=staff_id,
            cost=item.points_cost,
            reference=reference,
            description=f"Marketplace purchase: {item.name}",
            payload={"item_id": item.id, "item_name": item.name},
        )
        purchase = Purchase.objects.create(
            user_id=staff_id,
            item_id=item.id,
            item_name=item.name,
            category=item.category,
            vendor=item.vendor,
            points_cost=item.points_cost,
            reference=reference,
            balance_after=balance.points,
        )
        logger.info(
            "Marketplace purchase recorded: staff_id=%s item_id=%s cost=%s points=%s level=%s",
            staff_id,
            item.id,
            item.points_cost,
            balance.points,
            balance.level,
        )
        return PurchaseResult(
            purchase=purchase,
            points=balance.points,
            level=balance.level,
            points_deducted=item.points_cost,
        )

    @staticmethod
    def catalog_for(staff_id: int) -> dict[str, object]:
        staff = StaffDirectoryService.get_staff(staff_id)
        return {
            "items": [
                {
                    "id": item.id,
                    "name": item.name,
                    "points_cost": item.points_cost,
                    "category": item.category,
                    "vendor": item.vendor,
                    "can_afford": staff.points >= item.points_cost,
                }
                for item in catalog.all_items()
            ],
            "user_points": staff.points,
            "user_level": staff.level,
        }

    @staticmethod
    def purchase_history(staff_id: int) -> list[Purchase]:
        return list(Purchase.objects.history_for(user_id=staff_id))
