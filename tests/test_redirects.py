"""Tests for the route guard's redirect decision table."""

import pytest

from admin_panel.engine.redirects import (
    ALLOW,
    PathClass,
    RouteAction,
    classify_path,
    decide,
    decide_auth_page,
    decide_protected,
    redirect,
)
from admin_panel.services.session_token import SessionFlags
from admin_panel.utils.constants import HOME_PATH, LOGIN_PATH, SETUP_2FA_PATH, VERIFY_2FA_PATH


def _flags(
    enabled=True,
    has_setup=False,
    verified=False,
    secret=False,
    temp=False,
) -> SessionFlags:
    return SessionFlags(
        user_id="u-1",
        username="alice01",
        is_2fa_enabled=enabled,
        has_setup_2fa=has_setup,
        is_2fa_verified=verified,
        needs_verification=enabled and has_setup and not verified,
        secret_2fa_has_value=secret,
        temp_secret_2fa_has_value=temp,
    )


FULLY_VERIFIED = _flags(has_setup=True, verified=True, secret=True)
PENDING_VERIFY = _flags(has_setup=True, secret=True)
NOT_ENROLLED = _flags()
CORRUPTED = _flags(has_setup=True)
TWO_FA_OFF = _flags(enabled=False)


# ---------------------------------------------------------------------------
# 1. Path classification
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "path",
    ["/api", "/api/v1/auth/login", "/_next/chunk.js", "/favicon.ico", "/logo.svg", "/static/app.css", "/.well-known/x"],
)
def test_skipped_paths(path):
    assert classify_path(path) == PathClass.SKIP
    assert decide(path, None) == ALLOW


@pytest.mark.parametrize("path", [LOGIN_PATH, SETUP_2FA_PATH, VERIFY_2FA_PATH, "/auth/2fa-verify/step"])
def test_auth_pages(path):
    assert classify_path(path) == PathClass.AUTH_PAGE


@pytest.mark.parametrize("path", ["/", "/dashboard", "/tables/users", "/auth/2fa-setupx", "/apis"])
def test_protected_paths(path):
    assert classify_path(path) == PathClass.PROTECTED


# ---------------------------------------------------------------------------
# 2. Protected routes
# ---------------------------------------------------------------------------

class TestProtected:
    def test_no_session_goes_to_login(self):
        assert decide_protected(None) == redirect(LOGIN_PATH)

    def test_corrupted_enrollment_ends_session(self):
        decision = decide("/dashboard", CORRUPTED)
        assert decision.action == RouteAction.REDIRECT
        assert decision.location == LOGIN_PATH
        assert decision.clear_session is True

    def test_pending_verification_goes_to_verify(self):
        assert decide_protected(PENDING_VERIFY) == redirect(VERIFY_2FA_PATH)

    def test_pending_enrollment_with_temp_secret_goes_to_verify(self):
        assert decide_protected(_flags(has_setup=True, temp=True)) == redirect(VERIFY_2FA_PATH)

    def test_not_enrolled_goes_to_setup(self):
        assert decide_protected(NOT_ENROLLED) == redirect(SETUP_2FA_PATH)

    def test_fully_verified_allowed(self):
        assert decide_protected(FULLY_VERIFIED).allowed

    def test_2fa_disabled_allowed(self):
        assert decide_protected(TWO_FA_OFF).allowed

    def test_2fa_disabled_with_inconsistent_flags_allowed(self):
        assert decide_protected(_flags(enabled=False, has_setup=True)).allowed


# ---------------------------------------------------------------------------
# 3. Auth pages
# ---------------------------------------------------------------------------

class TestAuthPages:
    def test_no_session_stays_on_login(self):
        assert decide(LOGIN_PATH, None).allowed

    @pytest.mark.parametrize("page", [SETUP_2FA_PATH, VERIFY_2FA_PATH])
    def test_no_session_on_other_auth_pages_goes_to_login(self, page):
        assert decide(page, None) == redirect(LOGIN_PATH)

    @pytest.mark.parametrize("page", [LOGIN_PATH, SETUP_2FA_PATH, VERIFY_2FA_PATH])
    def test_2fa_disabled_goes_home(self, page):
        assert decide_auth_page(page, TWO_FA_OFF) == redirect(HOME_PATH)

    @pytest.mark.parametrize("page", [LOGIN_PATH, SETUP_2FA_PATH, VERIFY_2FA_PATH])
    def test_fully_verified_goes_home(self, page):
        assert decide_auth_page(page, FULLY_VERIFIED) == redirect(HOME_PATH)

    def test_login_page_with_pending_verification_goes_to_verify(self):
        assert decide_auth_page(LOGIN_PATH, PENDING_VERIFY) == redirect(VERIFY_2FA_PATH)

    def test_login_page_not_enrolled_goes_to_verify(self):
        assert decide_auth_page(LOGIN_PATH, NOT_ENROLLED) == redirect(VERIFY_2FA_PATH)

    def test_verify_page_with_pending_verification_stays(self):
        assert decide_auth_page(VERIFY_2FA_PATH, PENDING_VERIFY).allowed

    def test_setup_page_without_marker_stays(self):
        assert decide_auth_page(SETUP_2FA_PATH, PENDING_VERIFY, has_temp_marker=False).allowed

    def test_setup_page_with_marker_goes_to_verify(self):
        decision = decide_auth_page(SETUP_2FA_PATH, PENDING_VERIFY, has_temp_marker=True)
        assert decision == redirect(VERIFY_2FA_PATH)

    def test_setup_page_not_enrolled_stays(self):
        assert decide_auth_page(SETUP_2FA_PATH, NOT_ENROLLED, has_temp_marker=True).allowed

    def test_verify_page_without_any_secret_goes_to_setup(self):
        assert decide_auth_page(VERIFY_2FA_PATH, CORRUPTED) == redirect(SETUP_2FA_PATH)

    def test_verify_page_with_only_temp_secret_stays(self):
        assert decide_auth_page(VERIFY_2FA_PATH, _flags(has_setup=True, temp=True)).allowed


def test_decide_is_deterministic():
    for path in ("/", LOGIN_PATH, SETUP_2FA_PATH, VERIFY_2FA_PATH):
        for flags in (None, FULLY_VERIFIED, PENDING_VERIFY, NOT_ENROLLED, CORRUPTED, TWO_FA_OFF):
            assert decide(path, flags, True) == decide(path, flags, True)
