from django.contrib.auth.base_user import BaseUserManager

from core.utils.constants import STAFF_ROLE_SLUGS


class UserManager(BaseUserManager):
    def get_by_natural_key(self, username):
        """Returns the user by their username field."""
        return self.get(**{self.model.USERNAME_FIELD: username})

    def create_user(self, username, password=None, **extra_fields):
        """
        Creates and returns a user with given username, password.
        """
        if not username:
            raise ValueError(
                f"The username field must be set: {self.model.USERNAME_FIELD}"
            )

        user = self.model(**{self.model.USERNAME_FIELD: username}, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def support_staff(self):
        return (
            self.get_queryset()
            .filter(
                deleted_at__isnull=True,
                is_active=True,
                user_roles__deleted_at__isnull=True,
                user_roles__role__slug__in=STAFF_ROLE_SLUGS,
                user_roles__role__deleted_at__isnull=True,
            )
            .distinct()
        )

    def support_staff_ids(self) -> list[int]:
        return list(self.support_staff().values_list("id", flat=True))
