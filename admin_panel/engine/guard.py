"""Edge route guard: per-request allow/redirect from the session cookie alone.

Signed tokens are decoded locally. A token that is not in the signed format
is a legacy raw user id; only then does the guard call out to the user
store, through the optional `legacy_lookup`. That path exists for migration
and is disabled by passing no lookup.
"""

import logging
from typing import Callable, Mapping

from sqlalchemy.exc import SQLAlchemyError

from admin_panel.engine.redirects import ALLOW, PathClass, RouteDecision, classify_path, decide
from admin_panel.services.session_token import SessionFlags, SessionTokenCodec, is_signed_format
from admin_panel.services.user_store import UserStatusStore
from admin_panel.utils.constants import AUTH_TOKEN_COOKIE, TEMP_2FA_SECRET_COOKIE

logger = logging.getLogger(__name__)

LegacyLookup = Callable[[str], SessionFlags | None]


def legacy_flags_lookup(store: UserStatusStore) -> LegacyLookup:
    """Resolve a legacy token (the raw user id) into the same flags a signed token would carry."""

    def lookup(raw_token: str) -> SessionFlags | None:
        user = store.get_by_id(raw_token)
        if user is None:
            return None
        return SessionFlags.from_user(user)

    return lookup


class EdgeRouteGuard:
    def __init__(self, codec: SessionTokenCodec, legacy_lookup: LegacyLookup | None = None):
        self._codec = codec
        self._legacy_lookup = legacy_lookup

    def needs_lookup(self, token: str | None) -> bool:
        """True when resolving `token` would hit the user store."""
        return bool(token) and self._legacy_lookup is not None and not is_signed_format(token)

    def resolve_flags(self, token: str | None) -> SessionFlags | None:
        """Flags for the session, or None when there is no usable session."""
        if not token:
            return None
        if is_signed_format(token):
            return self._codec.decode(token)
        if self._legacy_lookup is None:
            return None

        logger.warning("Legacy session token in use; resolving flags from the user store")
        try:
            return self._legacy_lookup(token)
        except SQLAlchemyError:
            logger.exception("Legacy session lookup failed; treating request as unauthenticated")
            return None

    def evaluate(self, path: str, cookies: Mapping[str, str]) -> RouteDecision:
        if classify_path(path) == PathClass.SKIP:
            return ALLOW

        flags = self.resolve_flags(cookies.get(AUTH_TOKEN_COOKIE))
        decision = decide(path, flags, has_temp_marker=TEMP_2FA_SECRET_COOKIE in cookies)

        if decision.clear_session:
            logger.warning(
                f"Ending session for user id={flags.user_id}: 2FA marked set up but no secret stored"
            )
        logger.debug(f"Route guard {path} -> {decision.action.value} {decision.location or ''}".rstrip())
        return decision
