"""Pydantic schemas for the authentication API.

Field names are snake_case in Python and camelCase on the wire.
"""

import re
from typing import Generic, TypeVar

from pydantic import BaseModel, Field, field_validator

_CODE_RE = re.compile(r"^\d{6}$")

T = TypeVar("T")


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join("2FA" if part == "2fa" else part.capitalize() for part in rest)


class CamelModel(BaseModel):
    model_config = {"alias_generator": _camel, "populate_by_name": True}


class LoginRequest(CamelModel):
    username: str = Field(min_length=5, max_length=50)
    password: str = Field(min_length=5, max_length=128)

    @field_validator("username")
    @classmethod
    def _trim_username(cls, value: str) -> str:
        text = value.strip()
        if len(text) < 5:
            raise ValueError("must be at least 5 characters")
        return text


class Verify2FARequest(CamelModel):
    verification_code: str

    @field_validator("verification_code")
    @classmethod
    def _validate_code(cls, value: str) -> str:
        code = value.strip()
        if not _CODE_RE.fullmatch(code):
            raise ValueError("must be 6 digits")
        return code


class SessionUser(CamelModel):
    user_id: str
    username: str


class LoginResult(CamelModel):
    next_step: str
    user: SessionUser


class Setup2FAResult(CamelModel):
    qr_code: str
    secret: str
    needs_setup: bool
    is_first_setup: bool = True


class TwoFactorStatus(CamelModel):
    next_step: str
    has_setup_2fa: bool
    needs_setup: bool
    needs_verification: bool
    is_first_setup: bool
    is_2fa_enabled: bool
    is_2fa_verified: bool
    is_active: bool
    secret_2fa_has_value: bool
    temp_secret_2fa_has_value: bool


class SessionRead(CamelModel):
    user_id: str
    username: str
    is_2fa_enabled: bool
    has_setup_2fa: bool
    is_2fa_verified: bool
    needs_verification: bool

    model_config = {"alias_generator": _camel, "populate_by_name": True, "from_attributes": True}


class ApiResponse(CamelModel, Generic[T]):
    success: bool = True
    message: str | None = None
    data: T | None = None
