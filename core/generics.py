from rest_framework.response import Response
from rest_framework import status


ROLE_USER = "user"
ROLE_ORGANIZER = "organizer"
ROLE_ADMIN = "admin"


def api_error(message: str, status_code=status.HTTP_400_BAD_REQUEST):
    """
    Small helper to standardize error responses across the apps.
    Always returns: {"message": "<message>"} with the given status code.
    """
    return Response({"message": message}, status=status_code)


def user_has_role(user, *roles) -> bool:
    if not user or not getattr(user, "is_authenticated", False):
        return False
    return getattr(user, "role", None) in roles


def user_is_admin(user) -> bool:
    """
    Platform admin: role == 'admin' (superusers count as admins too).
    """
    if getattr(user, "is_superuser", False):
        return True
    return user_has_role(user, ROLE_ADMIN)
