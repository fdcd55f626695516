"""Redirect decision table for the route guard.

Pure functions over (path, session flags, temp-secret marker). No I/O, no
shared state, safe to evaluate concurrently for any number of requests.
Rules are evaluated top to bottom and the first match wins.
"""

from dataclasses import dataclass
from enum import Enum

from admin_panel.services.session_token import SessionFlags
from admin_panel.utils.constants import (
    AUTH_PAGES,
    HOME_PATH,
    LOGIN_PATH,
    QUICK_EXIT_PATHS,
    QUICK_EXIT_PREFIXES,
    SETUP_2FA_PATH,
    STATIC_EXTENSIONS,
    VERIFY_2FA_PATH,
)


class RouteAction(str, Enum):
    ALLOW = "allow"
    REDIRECT = "redirect"


class PathClass(str, Enum):
    SKIP = "skip"  # API, static assets: never gated here
    AUTH_PAGE = "auth-page"
    PROTECTED = "protected"


@dataclass(frozen=True)
class RouteDecision:
    action: RouteAction
    location: str | None = None
    clear_session: bool = False  # delete session cookies along with the redirect

    @property
    def allowed(self) -> bool:
        return self.action == RouteAction.ALLOW


ALLOW = RouteDecision(RouteAction.ALLOW)


def redirect(location: str, clear_session: bool = False) -> RouteDecision:
    return RouteDecision(RouteAction.REDIRECT, location, clear_session)


def auth_page_for(path: str) -> str | None:
    for page in AUTH_PAGES:
        if path == page or path.startswith(page + "/"):
            return page
    return None


def classify_path(path: str) -> PathClass:
    if path in QUICK_EXIT_PATHS or path.startswith(QUICK_EXIT_PREFIXES) or path.lower().endswith(STATIC_EXTENSIONS):
        return PathClass.SKIP
    if auth_page_for(path) is not None:
        return PathClass.AUTH_PAGE
    return PathClass.PROTECTED


def _stay_or_redirect(page: str, target: str) -> RouteDecision:
    return ALLOW if page == target else redirect(target)


def decide_auth_page(page: str, flags: SessionFlags | None, has_temp_marker: bool = False) -> RouteDecision:
    """Decision for the login, 2FA-setup and 2FA-verify pages."""
    if flags is None:
        return _stay_or_redirect(page, LOGIN_PATH)

    if not flags.is_2fa_enabled:
        return redirect(HOME_PATH)

    if flags.has_setup_2fa and flags.is_2fa_verified and not flags.needs_verification:
        return redirect(HOME_PATH)

    if page == SETUP_2FA_PATH:
        # A pending secret to confirm moves on to verify; otherwise the caller
        # still has to scan the QR code (or has not enrolled at all).
        if flags.has_setup_2fa and not flags.is_2fa_verified and has_temp_marker:
            return redirect(VERIFY_2FA_PATH)
        return ALLOW

    if page == VERIFY_2FA_PATH:
        # Claims setup but holds no secret: nothing to verify against
        if flags.has_setup_2fa and not flags.secret_2fa_has_value and not flags.temp_secret_2fa_has_value:
            return redirect(SETUP_2FA_PATH)
        return ALLOW

    if flags.has_setup_2fa and not flags.is_2fa_verified:
        return redirect(VERIFY_2FA_PATH)
    if flags.needs_verification:
        return redirect(VERIFY_2FA_PATH)
    # Not enrolled yet: verify forwards on to setup when no secret exists
    return redirect(VERIFY_2FA_PATH)


def decide_protected(flags: SessionFlags | None) -> RouteDecision:
    """Decision for every gated path that is not an auth page."""
    if flags is None:
        return redirect(LOGIN_PATH)

    if (
        flags.is_2fa_enabled
        and flags.has_setup_2fa
        and not flags.secret_2fa_has_value
        and not flags.temp_secret_2fa_has_value
    ):
        # Corrupted enrollment: no way to tell which secret was meant, so end the session
        return redirect(LOGIN_PATH, clear_session=True)

    if flags.is_2fa_enabled and flags.has_setup_2fa and not flags.is_2fa_verified:
        return redirect(VERIFY_2FA_PATH)

    if flags.is_2fa_enabled and not flags.has_setup_2fa:
        return redirect(SETUP_2FA_PATH)

    return ALLOW


def decide(path: str, flags: SessionFlags | None, has_temp_marker: bool = False) -> RouteDecision:
    kind = classify_path(path)
    if kind == PathClass.SKIP:
        return ALLOW
    if kind == PathClass.AUTH_PAGE:
        return decide_auth_page(auth_page_for(path), flags, has_temp_marker)
    return decide_protected(flags)
