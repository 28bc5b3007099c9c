# users/roles.py
from core.generics import user_is_admin
from .models import User


class RoleTransitionError(Exception):
    def __init__(self, message, status_code=400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def upgrade_to_organizer(user):
    """
    The only role transition there is: user -> organizer.

    Admin is immutable and nothing moves back to user. The write is a
    conditional update on role=user, so a second concurrent call finds
    nothing to update.
    """
    if user_is_admin(user):
        raise RoleTransitionError("Admins cannot change their role", status_code=403)

    updated = User.objects.filter(pk=user.pk, role=User.ROLE_USER).update(
        role=User.ROLE_ORGANIZER
    )
    if not updated:
        raise RoleTransitionError("You are already an organizer")

    user.role = User.ROLE_ORGANIZER
    return user
