"""Authentication steps, step inputs, and the result every step produces."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class AuthStep(str, Enum):
    LOGIN = "login"
    SETUP_2FA = "setup-2fa"
    VERIFY_2FA = "verify-2fa"
    COMPLETE = "complete"


class AuthError(str, Enum):
    """User-facing failure messages."""

    INVALID_CREDENTIALS = "Invalid credentials"
    USER_NOT_FOUND = "User not found"
    ALREADY_SET_UP = "2FA is already set up for this user"
    NOT_SETUP = "2FA not setup"
    INVALID_CODE = "Invalid verification code"
    INVALID_STEP = "Invalid authentication step"
    INVALID_OR_EXPIRED_TOKEN = "Invalid or expired token"


@dataclass(frozen=True)
class LoginData:
    username: str
    password: str


@dataclass(frozen=True)
class Setup2FAData:
    user_id: str


@dataclass(frozen=True)
class Verify2FAData:
    user_id: str
    verification_code: str


AuthData = LoginData | Setup2FAData | Verify2FAData


@dataclass
class AuthResult:
    success: bool
    next_step: AuthStep | None = None
    data: dict[str, Any] | None = None
    error: str | None = None

    @classmethod
    def ok(cls, next_step: AuthStep, data: dict[str, Any] | None = None) -> "AuthResult":
        return cls(success=True, next_step=next_step, data=data)

    @classmethod
    def fail(cls, error: AuthError | str) -> "AuthResult":
        message = error.value if isinstance(error, AuthError) else error
        return cls(success=False, error=message)
