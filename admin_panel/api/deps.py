"""Shared API dependencies."""

from fastapi import Depends, HTTPException, Request, status

from admin_panel.config import settings
from admin_panel.database import engine
from admin_panel.engine.guard import EdgeRouteGuard, legacy_flags_lookup
from admin_panel.engine.manager import AuthenticationManager, build_authentication_manager
from admin_panel.engine.redirects import decide_protected
from admin_panel.services.rate_limit import RateLimiter
from admin_panel.services.session_token import SessionFlags, SessionTokenCodec
from admin_panel.services.user_store import SqlUserStatusStore, UserStatusStore
from admin_panel.utils.constants import AUTH_TOKEN_COOKIE

_user_store = SqlUserStatusStore(engine)
_rate_limiter = RateLimiter(
    max_requests=settings.rate_limit_max_requests,
    window_seconds=settings.rate_limit_window_seconds,
)


def get_user_store() -> UserStatusStore:
    return _user_store


def get_token_codec() -> SessionTokenCodec:
    return SessionTokenCodec(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expire_minutes=settings.jwt_expire_minutes,
    )


def get_auth_manager(store: UserStatusStore = Depends(get_user_store)) -> AuthenticationManager:
    return build_authentication_manager(store, settings)


def build_route_guard(store: UserStatusStore, codec: SessionTokenCodec) -> EdgeRouteGuard:
    lookup = legacy_flags_lookup(store) if settings.legacy_tokens_enabled else None
    return EdgeRouteGuard(codec, legacy_lookup=lookup)


def get_rate_limiter() -> RateLimiter:
    return _rate_limiter


def client_ip(request: Request) -> str:
    """Rate-limit key. Forwarding headers are client-controlled unless a trusted proxy rewrites them."""
    if settings.trust_forwarded_headers:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
        real_ip = request.headers.get("x-real-ip")
        if real_ip:
            return real_ip.strip()
    return request.client.host if request.client else "unknown"


def rate_limited(request: Request, limiter: RateLimiter = Depends(get_rate_limiter)) -> None:
    """Reject the request with 429 once the caller's window is used up."""
    result = limiter.check(client_ip(request))
    if not result.allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests. Please try again later.",
            headers={"Retry-After": str(result.retry_after)},
        )


def get_session_flags(
    request: Request,
    store: UserStatusStore = Depends(get_user_store),
    codec: SessionTokenCodec = Depends(get_token_codec),
) -> SessionFlags:
    """Resolve the caller's session from the auth-token cookie, at any step."""
    guard = build_route_guard(store, codec)
    flags = guard.resolve_flags(request.cookies.get(AUTH_TOKEN_COOKIE))
    if flags is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return flags


def get_current_session(flags: SessionFlags = Depends(get_session_flags)) -> SessionFlags:
    """Require a session that has completed every authentication step."""
    if not decide_protected(flags).allowed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="2FA verification required",
        )
    return flags
