"""Cookie helpers with consistent options for authentication cookies."""

from starlette.responses import Response

from admin_panel.config import settings
from admin_panel.utils.constants import (
    AUTH_COOKIES,
    AUTH_TOKEN_COOKIE,
    AUTH_USERNAME_COOKIE,
    TEMP_2FA_SECRET_COOKIE,
)


def set_cookie(response: Response, name: str, value: str, max_age: int | None = None) -> None:
    response.set_cookie(
        key=name,
        value=value,
        max_age=settings.cookie_max_age_seconds if max_age is None else max_age,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
    )


def delete_cookie(response: Response, name: str) -> None:
    response.delete_cookie(
        key=name,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
    )


def set_session_cookies(response: Response, token: str, username: str) -> None:
    """Store a freshly minted session token alongside the display username."""
    set_cookie(response, AUTH_TOKEN_COOKIE, token)
    set_cookie(response, AUTH_USERNAME_COOKIE, username)


def set_temp_secret_marker(response: Response) -> None:
    # Only its presence is read; the secret itself never leaves the server in a cookie.
    set_cookie(response, TEMP_2FA_SECRET_COOKIE, "1")


def clear_auth_cookies(response: Response) -> None:
    for name in AUTH_COOKIES:
        delete_cookie(response, name)
