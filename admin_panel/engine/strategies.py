"""Authentication strategies — one state transition each, against the user status store.

Strategies report every domain failure through `AuthResult.fail` instead of
raising. Storage errors are logged and collapsed into a generic failure.
"""

import hmac
import logging

from sqlalchemy.exc import SQLAlchemyError

from admin_panel.engine.steps import AuthError, AuthResult, AuthStep, LoginData, Setup2FAData, Verify2FAData
from admin_panel.models.user import UserAccount
from admin_panel.services.auth import (
    burn_password_check,
    generate_qr_code,
    generate_totp_secret,
    get_totp_uri,
    hash_password,
    verify_password,
    verify_totp,
)
from admin_panel.services.user_store import UserStatusStore

logger = logging.getLogger(__name__)


def _user_payload(user: UserAccount) -> dict:
    return {"userId": user.id, "username": user.username}


class LoginStrategy:
    """Checks username/password and decides which step follows.

    The only strategy allowed to create an account: when the username is
    unknown and matches the configured bootstrap admin credentials, the admin
    account is provisioned on first login.
    """

    def __init__(self, store: UserStatusStore, bootstrap_username: str = "", bootstrap_password: str = ""):
        self._store = store
        self._bootstrap_username = bootstrap_username
        self._bootstrap_password = bootstrap_password

    def execute(self, data: LoginData) -> AuthResult:
        try:
            user = self._store.get_by_username(data.username)
            if user is None:
                user = self._provision_bootstrap_admin(data)
                if user is None:
                    return AuthResult.fail(AuthError.INVALID_CREDENTIALS)
            elif not verify_password(data.password, user.password_hash):
                logger.info(f"Password check failed for user id={user.id}")
                return AuthResult.fail(AuthError.INVALID_CREDENTIALS)
        except SQLAlchemyError:
            logger.exception("Login failed on storage error")
            return AuthResult.fail("Authentication failed")

        if not user.is_2fa_enabled:
            return AuthResult.ok(AuthStep.COMPLETE, _user_payload(user))

        next_step = AuthStep.VERIFY_2FA if user.has_setup_2fa else AuthStep.SETUP_2FA
        return AuthResult.ok(next_step, _user_payload(user))

    def _provision_bootstrap_admin(self, data: LoginData) -> UserAccount | None:
        if not (self._bootstrap_username and self._bootstrap_password) or data.username != self._bootstrap_username:
            burn_password_check(data.password)
            return None
        if not hmac.compare_digest(data.password.encode("utf-8"), self._bootstrap_password.encode("utf-8")):
            burn_password_check(data.password)
            return None

        logger.info(f"Provisioning bootstrap admin account '{data.username}'")
        return self._store.create_user(data.username, hash_password(data.password))


class Setup2FAStrategy:
    """Issues a fresh provisional secret and its QR code. Never touches the committed secret."""

    def __init__(self, store: UserStatusStore):
        self._store = store

    def execute(self, data: Setup2FAData) -> AuthResult:
        try:
            user = self._store.get_by_id(data.user_id)
            if user is None:
                return AuthResult.fail(AuthError.USER_NOT_FOUND)

            # Refuse to silently replace a live secret
            if user.has_setup_2fa and user.secret_2fa:
                return AuthResult.fail(AuthError.ALREADY_SET_UP)

            secret = generate_totp_secret()
            qr_code = generate_qr_code(get_totp_uri(secret, user.username))
            self._store.update_temp_secret(user.id, secret)
        except SQLAlchemyError:
            logger.exception(f"2FA setup failed on storage error for user id={data.user_id}")
            return AuthResult.fail("2FA setup failed")

        logger.info(f"Issued provisional 2FA secret for user id={user.id}")
        return AuthResult.ok(
            AuthStep.SETUP_2FA,
            {"qrCode": qr_code, "secret": secret, "user": _user_payload(user)},
        )


class Verify2FAStrategy:
    """Checks a TOTP code, confirming a pending enrollment or a routine login.

    A pending temp secret is always tried first; a code that matches it
    promotes it to the committed secret in one conditional write. If that
    write finds the temp secret already replaced by a newer setup request,
    the attempt fails as an invalid code. A code that does not match the temp
    secret is then tried against the committed secret, which leaves the
    pending enrollment untouched.
    """

    def __init__(self, store: UserStatusStore):
        self._store = store

    def execute(self, data: Verify2FAData) -> AuthResult:
        try:
            user = self._store.get_by_id(data.user_id)
            if user is None:
                return AuthResult.fail(AuthError.USER_NOT_FOUND)

            if not user.secret_2fa and not user.temp_secret_2fa:
                return AuthResult.fail(AuthError.NOT_SETUP)

            if user.temp_secret_2fa and verify_totp(user.temp_secret_2fa, data.verification_code):
                if not self._store.complete_2fa_setup(user.id, user.temp_secret_2fa):
                    logger.warning(f"2FA enrollment for user id={user.id} was superseded by a newer setup")
                    return AuthResult.fail(AuthError.INVALID_CODE)
                logger.info(f"2FA enrollment confirmed for user id={user.id}")
            elif user.secret_2fa and verify_totp(user.secret_2fa, data.verification_code):
                self._store.set_2fa_verified(user.id, True)
            else:
                return AuthResult.fail(AuthError.INVALID_CODE)

            self._store.update_last_login(user.id)
        except SQLAlchemyError:
            logger.exception(f"2FA verification failed on storage error for user id={data.user_id}")
            return AuthResult.fail("2FA verification failed")

        return AuthResult.ok(AuthStep.COMPLETE, _user_payload(user))
