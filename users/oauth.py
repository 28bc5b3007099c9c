# users/oauth.py
"""
Google and GitHub sign-in (authorization code flow).

Google: the code is exchanged for an id_token which google-auth verifies.
GitHub: the code is exchanged for an access token, then the user and
email APIs are read.
"""
import logging
from dataclasses import dataclass
from urllib.parse import urlencode

import requests
from django.conf import settings
from django.db import transaction
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from .models import User

logger = logging.getLogger("spot.auth")

GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"

GITHUB_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"
GITHUB_API_URL = "https://api.github.com"

PROVIDERS = ("google", "github")
HTTP_TIMEOUT = 10


class OAuthError(Exception):
    """The provider refused the code or returned an unusable identity."""


@dataclass
class Identity:
    provider: str
    provider_id: str
    email: str
    name: str = ""
    avatar: str = ""


def role_from_state(state) -> str:
    return User.ROLE_ORGANIZER if state == User.ROLE_ORGANIZER else User.ROLE_USER


def callback_url(provider: str) -> str:
    return f"{settings.BACKEND_URL.rstrip('/')}/api/users/auth/{provider}/callback/"


def authorization_url(provider: str, role: str) -> str:
    state = role_from_state(role)
    if provider == "google":
        params = {
            "client_id": settings.GOOGLE_CLIENT_ID,
            "redirect_uri": callback_url("google"),
            "response_type": "code",
            "scope": "openid email profile",
            "state": state,
        }
        return f"{GOOGLE_AUTHORIZE_URL}?{urlencode(params)}"

    params = {
        "client_id": settings.GITHUB_CLIENT_ID,
        "redirect_uri": callback_url("github"),
        "scope": "user:email",
        "state": state,
    }
    return f"{GITHUB_AUTHORIZE_URL}?{urlencode(params)}"


def google_identity(code: str) -> Identity:
    resp = requests.post(
        GOOGLE_TOKEN_URL,
        data={
            "code": code,
            "client_id": settings.GOOGLE_CLIENT_ID,
            "client_secret": settings.GOOGLE_CLIENT_SECRET,
            "redirect_uri": callback_url("google"),
            "grant_type": "authorization_code",
        },
        timeout=HTTP_TIMEOUT,
    )
    if resp.status_code != 200:
        raise OAuthError(f"Google token exchange failed ({resp.status_code})")

    raw_id_token = resp.json().get("id_token")
    if not raw_id_token:
        raise OAuthError("Google did not return an id_token")

    try:
        info = id_token.verify_oauth2_token(
            raw_id_token,
            google_requests.Request(),
            settings.GOOGLE_CLIENT_ID,
        )
    except ValueError as exc:
        raise OAuthError(f"Invalid Google id_token: {exc}") from exc

    email = info.get("email")
    if not email:
        raise OAuthError("No email found from Google")

    return Identity(
        provider="google",
        provider_id=str(info["sub"]),
        email=email.lower(),
        name=info.get("name", ""),
        avatar=info.get("picture", ""),
    )


def github_identity(code: str) -> Identity:
    resp = requests.post(
        GITHUB_TOKEN_URL,
        data={
            "code": code,
            "client_id": settings.GITHUB_CLIENT_ID,
            "client_secret": settings.GITHUB_CLIENT_SECRET,
            "redirect_uri": callback_url("github"),
        },
        headers={"Accept": "application/json"},
        timeout=HTTP_TIMEOUT,
    )
    access_token = resp.json().get("access_token") if resp.status_code == 200 else None
    if not access_token:
        raise OAuthError(f"GitHub token exchange failed ({resp.status_code})")

    headers = {
        "Authorization": f"Bearer {access_token}",
        "Accept": "application/vnd.github+json",
    }
    profile = requests.get(f"{GITHUB_API_URL}/user", headers=headers, timeout=HTTP_TIMEOUT)
    if profile.status_code != 200:
        raise OAuthError(f"GitHub user lookup failed ({profile.status_code})")
    profile = profile.json()

    email = profile.get("email")
    if not email:
        emails = requests.get(
            f"{GITHUB_API_URL}/user/emails", headers=headers, timeout=HTTP_TIMEOUT
        )
        if emails.status_code == 200:
            verified = [e for e in emails.json() if e.get("verified")]
            primary = [e for e in verified if e.get("primary")]
            if primary or verified:
                email = (primary or verified)[0]["email"]
    if not email:
        raise OAuthError("No email found from GitHub")

    return Identity(
        provider="github",
        provider_id=str(profile["id"]),
        email=email.lower(),
        name=profile.get("name") or profile.get("login") or "",
        avatar=profile.get("avatar_url", ""),
    )


def fetch_identity(provider: str, code: str) -> Identity:
    if provider == "google":
        return google_identity(code)
    return github_identity(code)


def _unique_name(base: str) -> str:
    base = (base or "user").strip()[:140] or "user"
    name, suffix = base, 1
    while User.objects.filter(name=name).exists():
        suffix += 1
        name = f"{base}{suffix}"
    return name


@transaction.atomic
def resolve_user(identity: Identity, role: str):
    """
    Provider id first, then email (links the provider to an existing
    account), otherwise a new passwordless account with the requested role.
    """
    id_field = f"{identity.provider}_id"

    user = User.objects.filter(**{id_field: identity.provider_id}).first()
    if user is not None:
        return user

    user = User.objects.filter(email__iexact=identity.email).first()
    if user is not None:
        setattr(user, id_field, identity.provider_id)
        update_fields = [id_field]
        if not user.profile_image and identity.avatar:
            user.profile_image = identity.avatar
            update_fields.append("profile_image")
        user.save(update_fields=update_fields)
        logger.info("Linked %s identity to user %s", identity.provider, user.pk)
        return user

    user = User.objects.create_user(
        email=identity.email,
        password=None,
        name=_unique_name(identity.name or identity.email.split("@")[0]),
        role=role_from_state(role),
        profile_image=identity.avatar or None,
        **{id_field: identity.provider_id},
    )
    logger.info("Created user %s from %s sign-in", user.pk, identity.provider)
    return user
