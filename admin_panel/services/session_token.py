"""Signed session tokens carrying a flattened snapshot of a user's 2FA state.

The route guard reads these flags on every request without touching the
database, so everything it needs is pre-computed here at mint time. Secrets
are never embedded, only whether they are present.
"""

import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from admin_panel.models.user import UserAccount

logger = logging.getLogger(__name__)

# Claim name for each SessionFlags field
_CLAIMS = {
    "user_id": "userId",
    "username": "username",
    "is_2fa_enabled": "is2FAEnabled",
    "has_setup_2fa": "hasSetup2FA",
    "is_2fa_verified": "is2FAVerified",
    "needs_verification": "needsVerification",
    "secret_2fa_has_value": "secret2FAHasValue",
    "temp_secret_2fa_has_value": "tempSecret2FAHasValue",
}
_BOOL_FIELDS = tuple(name for name in _CLAIMS if name not in ("user_id", "username"))


def _has_value(secret: str | None) -> bool:
    return bool(secret and secret.strip())


@dataclass(frozen=True)
class SessionFlags:
    user_id: str
    username: str
    is_2fa_enabled: bool
    has_setup_2fa: bool
    is_2fa_verified: bool
    needs_verification: bool
    secret_2fa_has_value: bool
    temp_secret_2fa_has_value: bool

    @classmethod
    def from_user(cls, user: UserAccount, session_verified: bool = True) -> "SessionFlags":
        """Snapshot a user's current state. The one place needs_verification is derived.

        `is_2fa_verified` is stored per user, so a re-mint for an existing
        session passes `session_verified=False` to keep an unverified session
        unverified when another session of the same user has since verified.
        """
        verified = user.is_2fa_verified and session_verified
        return cls(
            user_id=user.id,
            username=user.username,
            is_2fa_enabled=user.is_2fa_enabled,
            has_setup_2fa=user.has_setup_2fa,
            is_2fa_verified=verified,
            needs_verification=user.is_2fa_enabled and user.has_setup_2fa and not verified,
            secret_2fa_has_value=_has_value(user.secret_2fa),
            temp_secret_2fa_has_value=_has_value(user.temp_secret_2fa),
        )

    def to_claims(self) -> dict:
        return {_CLAIMS[name]: value for name, value in asdict(self).items()}

    @classmethod
    def from_claims(cls, claims: dict) -> "SessionFlags | None":
        """Rebuild flags from decoded claims; None if any claim is missing or mistyped."""
        values = {}
        for name, claim in _CLAIMS.items():
            value = claims.get(claim)
            if name in _BOOL_FIELDS:
                if not isinstance(value, bool):
                    return None
            elif not isinstance(value, str) or (name == "user_id" and not value):
                return None
            values[name] = value
        return cls(**values)


def is_signed_format(token: str) -> bool:
    """True when the token looks like a compact JWS (base64url JSON header + 2 dots)."""
    return token.startswith("eyJ") and token.count(".") == 2


class SessionTokenCodec:
    """Encodes SessionFlags into a signed, expiring token and back. Performs no I/O."""

    def __init__(self, secret: str, algorithm: str = "HS256", expire_minutes: int = 1440):
        self._secret = secret
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes

    def encode(self, flags: SessionFlags, now: datetime | None = None) -> str:
        issued = now or datetime.now(timezone.utc)
        expire = issued + timedelta(minutes=self._expire_minutes)
        payload = flags.to_claims()
        payload["iat"] = int(issued.timestamp())
        payload["exp"] = int(expire.timestamp())
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode(self, token: str | None) -> SessionFlags | None:
        """Return the embedded flags, or None for any missing, tampered, malformed or expired token."""
        if not token:
            return None
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require_exp": True},
            )
        except JWTError as e:
            logger.debug(f"Rejected session token: {e}")
            return None
        return SessionFlags.from_claims(claims)
