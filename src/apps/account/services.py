from account.models import Role, User, UserRole
from core.exceptions import StaffNotFoundError
from core.utils.constants import RoleSlug


class StaffDirectoryService:
    """Identity and role lookups consumed from the auth layer."""

    ROLE_NAMES = {
        RoleSlug.CUSTOMER: "Customer",
        RoleSlug.STAFF: "Staff",
        RoleSlug.ADMIN: "Admin",
    }

    @staticmethod
    def get_staff(staff_id: int) -> User:
        staff = User.objects.support_staff().filter(pk=staff_id).first()
        if staff is None:
            raise StaffNotFoundError(f"Staff member #{staff_id} was not found.")
        return staff

    @staticmethod
    def is_staff_member(user_id: int | None) -> bool:
        if not user_id:
            return False
        return User.objects.support_staff().filter(pk=user_id).exists()

    @classmethod
    def grant_role(cls, *, user: User, slug: str) -> UserRole:
        role, _ = Role.objects.get_or_create(
            slug=slug,
            defaults={"name": cls.ROLE_NAMES.get(slug, str(slug))},
        )
        link, _ = UserRole.objects.get_or_create(user=user, role=role)
        return link
