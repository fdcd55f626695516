"""User account model — credentials and 2FA enrollment state."""

import uuid
from datetime import datetime, timezone
from sqlmodel import SQLModel, Field


class UserAccount(SQLModel, table=True):
    __tablename__ = "users"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    username: str = Field(unique=True, index=True)
    password_hash: str  # bcrypt hash (salt included)

    # 2FA state
    has_setup_2fa: bool = False
    is_2fa_enabled: bool = True  # per-user bypass when False
    is_2fa_verified: bool = False  # verified in the current session
    secret_2fa: str | None = None  # committed secret
    temp_secret_2fa: str | None = None  # provisional secret awaiting confirmation

    is_active: bool = True
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    last_login_at: datetime | None = None
