"""Authentication manager: step dispatch and starting-step computation."""

import logging

from admin_panel.config import Settings
from admin_panel.engine.steps import (
    AuthData,
    AuthError,
    AuthResult,
    AuthStep,
    LoginData,
    Setup2FAData,
    Verify2FAData,
)
from admin_panel.engine.strategies import LoginStrategy, Setup2FAStrategy, Verify2FAStrategy
from admin_panel.services.user_store import UserStatusStore

logger = logging.getLogger(__name__)


class AuthenticationManager:
    def __init__(
        self,
        store: UserStatusStore,
        login: LoginStrategy,
        setup_2fa: Setup2FAStrategy,
        verify_2fa: Verify2FAStrategy,
    ):
        self._store = store
        self._login = login
        self._setup_2fa = setup_2fa
        self._verify_2fa = verify_2fa

    def execute_step(self, step: AuthStep, data: AuthData) -> AuthResult:
        """Run the strategy for `step` and return its result unchanged.

        A step without a strategy (COMPLETE) or data of the wrong shape for
        the step fails as an invalid step.
        """
        match step, data:
            case AuthStep.LOGIN, LoginData():
                return self._login.execute(data)
            case AuthStep.SETUP_2FA, Setup2FAData():
                return self._setup_2fa.execute(data)
            case AuthStep.VERIFY_2FA, Verify2FAData():
                return self._verify_2fa.execute(data)
            case _:
                logger.warning(f"Rejected step {step!r} with {type(data).__name__}")
                return AuthResult.fail(AuthError.INVALID_STEP)

    def determine_initial_step(self, user_id: str | None) -> AuthStep:
        """Where a caller should start, from persisted state. Read-only."""
        if not user_id:
            return AuthStep.LOGIN

        status = self._store.get_status(user_id)
        if status is None:
            return AuthStep.LOGIN

        if not status.is_2fa_enabled:
            return AuthStep.COMPLETE

        return AuthStep.VERIFY_2FA if status.has_setup_2fa else AuthStep.SETUP_2FA


def build_authentication_manager(store: UserStatusStore, settings: Settings) -> AuthenticationManager:
    return AuthenticationManager(
        store=store,
        login=LoginStrategy(
            store,
            bootstrap_username=settings.admin_username,
            bootstrap_password=settings.admin_password,
        ),
        setup_2fa=Setup2FAStrategy(store),
        verify_2fa=Verify2FAStrategy(store),
    )
