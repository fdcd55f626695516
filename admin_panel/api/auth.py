"""Authentication API — login, 2FA setup/verification, status check, logout.

Every successful state transition re-mints the auth-token cookie from the
user's fresh state, so the route guard always sees the latest flags.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from admin_panel.api.deps import (
    get_auth_manager,
    get_session_flags,
    get_token_codec,
    get_user_store,
    rate_limited,
)
from admin_panel.engine.manager import AuthenticationManager
from admin_panel.engine.steps import AuthError, AuthStep, LoginData, Setup2FAData, Verify2FAData
from admin_panel.schemas.auth import (
    ApiResponse,
    LoginRequest,
    LoginResult,
    SessionUser,
    Setup2FAResult,
    TwoFactorStatus,
    Verify2FARequest,
)
from admin_panel.services.session_token import SessionFlags, SessionTokenCodec
from admin_panel.services.user_store import UserStatusStore
from admin_panel.utils.constants import TEMP_2FA_SECRET_COOKIE
from admin_panel.utils.cookies import (
    clear_auth_cookies,
    delete_cookie,
    set_session_cookies,
    set_temp_secret_marker,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])

_STATUS_MESSAGES = {
    AuthStep.LOGIN: "Login required",
    AuthStep.SETUP_2FA: "First 2FA setup required",
    AuthStep.VERIFY_2FA: "2FA verification required",
    AuthStep.COMPLETE: "2FA not required",
}


def _refresh_session(
    response: Response,
    store: UserStatusStore,
    codec: SessionTokenCodec,
    user_id: str,
    session_verified: bool = True,
) -> SessionFlags:
    """Mint a new session token from the user's current state and set it on the response.

    `session_verified` caps the token's verification: callers pass the
    existing session's flag, so only a successful verify-2fa raises it.
    """
    user = store.get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=AuthError.USER_NOT_FOUND.value)
    flags = SessionFlags.from_user(user, session_verified=session_verified)
    set_session_cookies(response, codec.encode(flags), user.username)
    return flags


@router.post("/login", response_model=ApiResponse[LoginResult], dependencies=[Depends(rate_limited)])
def login(
    body: LoginRequest,
    response: Response,
    manager: AuthenticationManager = Depends(get_auth_manager),
    store: UserStatusStore = Depends(get_user_store),
    codec: SessionTokenCodec = Depends(get_token_codec),
):
    result = manager.execute_step(AuthStep.LOGIN, LoginData(username=body.username, password=body.password))
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=result.error or "Login failed",
        )

    user_id = result.data["userId"]
    if result.next_step != AuthStep.COMPLETE:
        # A password login opens a new session that has not passed 2FA yet
        store.reset_2fa_verification(user_id)
    _refresh_session(response, store, codec, user_id, session_verified=result.next_step == AuthStep.COMPLETE)

    logger.info(f"Login succeeded for user id={user_id}, next step {result.next_step.value}")
    return ApiResponse(
        message="Login successful",
        data=LoginResult(
            next_step=result.next_step.value,
            user=SessionUser(user_id=user_id, username=result.data["username"]),
        ),
    )


@router.post("/setup-2fa", response_model=ApiResponse[Setup2FAResult], dependencies=[Depends(rate_limited)])
def setup_2fa(
    response: Response,
    flags: SessionFlags = Depends(get_session_flags),
    manager: AuthenticationManager = Depends(get_auth_manager),
    store: UserStatusStore = Depends(get_user_store),
    codec: SessionTokenCodec = Depends(get_token_codec),
):
    result = manager.execute_step(AuthStep.SETUP_2FA, Setup2FAData(user_id=flags.user_id))
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=result.error or "2FA setup failed",
        )

    fresh = _refresh_session(response, store, codec, flags.user_id, session_verified=flags.is_2fa_verified)
    set_temp_secret_marker(response)

    return ApiResponse(
        message="QR code generated for 2FA setup",
        data=Setup2FAResult(
            qr_code=result.data["qrCode"],
            secret=result.data["secret"],
            needs_setup=not fresh.has_setup_2fa,
            is_first_setup=not fresh.secret_2fa_has_value,
        ),
    )


@router.post("/verify-2fa", response_model=ApiResponse[SessionUser], dependencies=[Depends(rate_limited)])
def verify_2fa(
    body: Verify2FARequest,
    response: Response,
    flags: SessionFlags = Depends(get_session_flags),
    manager: AuthenticationManager = Depends(get_auth_manager),
    store: UserStatusStore = Depends(get_user_store),
    codec: SessionTokenCodec = Depends(get_token_codec),
):
    result = manager.execute_step(
        AuthStep.VERIFY_2FA,
        Verify2FAData(user_id=flags.user_id, verification_code=body.verification_code),
    )
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=result.error or "2FA verification failed",
        )

    _refresh_session(response, store, codec, flags.user_id)
    delete_cookie(response, TEMP_2FA_SECRET_COOKIE)

    return ApiResponse(
        message="2FA verification successful",
        data=SessionUser(user_id=result.data["userId"], username=result.data["username"]),
    )


@router.post("/check-2fa-status", response_model=ApiResponse[TwoFactorStatus])
def check_2fa_status(
    response: Response,
    flags: SessionFlags = Depends(get_session_flags),
    manager: AuthenticationManager = Depends(get_auth_manager),
    store: UserStatusStore = Depends(get_user_store),
    codec: SessionTokenCodec = Depends(get_token_codec),
):
    user = store.get_by_id(flags.user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=AuthError.USER_NOT_FOUND.value)

    step = manager.determine_initial_step(user.id)
    fresh = _refresh_session(response, store, codec, user.id, session_verified=flags.is_2fa_verified)

    return ApiResponse(
        message=_STATUS_MESSAGES[step],
        data=TwoFactorStatus(
            next_step=step.value,
            has_setup_2fa=fresh.has_setup_2fa,
            needs_setup=step == AuthStep.SETUP_2FA,
            needs_verification=fresh.needs_verification,
            is_first_setup=step == AuthStep.SETUP_2FA,
            is_2fa_enabled=fresh.is_2fa_enabled,
            is_2fa_verified=fresh.is_2fa_verified,
            is_active=user.is_active,
            secret_2fa_has_value=fresh.secret_2fa_has_value,
            temp_secret_2fa_has_value=fresh.temp_secret_2fa_has_value,
        ),
    )


@router.post("/logout", response_model=ApiResponse[dict])
def logout(response: Response):
    # Tokens are not revocable server-side; dropping the cookies ends the session
    clear_auth_cookies(response)
    return ApiResponse(message="Logged out")
