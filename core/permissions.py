from rest_framework.permissions import BasePermission

from .generics import ROLE_ADMIN, ROLE_ORGANIZER, user_has_role, user_is_admin


class HasRole(BasePermission):
    """
    Role allow-list check on the authenticated user.

    Subclasses set `allowed_roles`; the 403 message names the caller's role.
    """
    allowed_roles = ()

    def has_permission(self, request, view):
        user = request.user
        if user_has_role(user, *self.allowed_roles):
            return True
        if ROLE_ADMIN in self.allowed_roles and user_is_admin(user):
            return True

        self.message = (
            f"Forbidden: Role '{getattr(user, 'role', None)}' is not "
            "authorized to access this resource"
        )
        return False


class IsOrganizer(HasRole):
    allowed_roles = (ROLE_ORGANIZER, ROLE_ADMIN)


class IsOrganizerOnly(HasRole):
    allowed_roles = (ROLE_ORGANIZER,)


class IsPlatformAdmin(HasRole):
    allowed_roles = (ROLE_ADMIN,)
