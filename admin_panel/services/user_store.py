"""User status persistence.

`UserStatusStore` is the narrow read/write contract the authentication
strategies depend on. `SqlUserStatusStore` implements it on top of the
SQLModel engine. Every write is a single UPDATE in its own transaction, so
concurrent writes for the same user are serialized by the database row lock
rather than by any in-process lock.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol

from sqlalchemy import update
from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from admin_panel.models.user import UserAccount

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserStatus:
    """Projection used to compute a caller's starting step."""

    id: str
    has_setup_2fa: bool
    is_2fa_enabled: bool


class UserStatusStore(Protocol):
    def get_by_id(self, user_id: str) -> UserAccount | None: ...

    def get_by_username(self, username: str) -> UserAccount | None: ...

    def get_status(self, user_id: str) -> UserStatus | None: ...

    def create_user(self, username: str, password_hash: str, is_2fa_enabled: bool = True) -> UserAccount: ...

    def update_temp_secret(self, user_id: str, secret: str) -> None: ...

    def complete_2fa_setup(self, user_id: str, expected_temp_secret: str) -> bool: ...

    def set_2fa_verified(self, user_id: str, verified: bool) -> None: ...

    def reset_2fa_verification(self, user_id: str) -> None: ...

    def set_2fa_enabled(self, user_id: str, enabled: bool) -> None: ...

    def reset_2fa(self, user_id: str) -> None: ...

    def update_last_login(self, user_id: str) -> None: ...

    def list_users(self) -> list[UserAccount]: ...


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SqlUserStatusStore:
    """UserStatusStore backed by the `users` table. Only active users are visible."""

    def __init__(self, engine: Engine):
        self._engine = engine

    def _session(self) -> Session:
        return Session(self._engine, expire_on_commit=False)

    def get_by_id(self, user_id: str) -> UserAccount | None:
        with self._session() as session:
            return session.exec(
                select(UserAccount).where(UserAccount.id == user_id, UserAccount.is_active == True)  # noqa: E712
            ).first()

    def get_by_username(self, username: str) -> UserAccount | None:
        with self._session() as session:
            return session.exec(
                select(UserAccount).where(UserAccount.username == username, UserAccount.is_active == True)  # noqa: E712
            ).first()

    def get_status(self, user_id: str) -> UserStatus | None:
        with self._session() as session:
            row = session.exec(
                select(UserAccount.id, UserAccount.has_setup_2fa, UserAccount.is_2fa_enabled).where(
                    UserAccount.id == user_id, UserAccount.is_active == True  # noqa: E712
                )
            ).first()
        if row is None:
            return None
        return UserStatus(id=row[0], has_setup_2fa=bool(row[1]), is_2fa_enabled=bool(row[2]))

    def create_user(self, username: str, password_hash: str, is_2fa_enabled: bool = True) -> UserAccount:
        user = UserAccount(
            username=username,
            password_hash=password_hash,
            is_2fa_enabled=is_2fa_enabled,
        )
        with self._session() as session:
            session.add(user)
            session.commit()
            session.refresh(user)
        logger.info(f"Created user {username} (id={user.id})")
        return user

    def _update(self, user_id: str, *conditions, **values) -> bool:
        stmt = (
            update(UserAccount)
            .where(UserAccount.id == user_id, *conditions)
            .values(updated_at=_now(), **values)
        )
        with self._engine.begin() as conn:
            result = conn.execute(stmt)
        return result.rowcount == 1

    def update_temp_secret(self, user_id: str, secret: str) -> None:
        self._update(user_id, temp_secret_2fa=secret)

    def complete_2fa_setup(self, user_id: str, expected_temp_secret: str) -> bool:
        """Promote the temp secret to permanent, clear it and mark the user set up and verified.

        Applies only if the stored temp secret still equals `expected_temp_secret`;
        returns False when a newer enrollment replaced it in the meantime.
        """
        return self._update(
            user_id,
            UserAccount.temp_secret_2fa == expected_temp_secret,
            secret_2fa=expected_temp_secret,
            temp_secret_2fa=None,
            has_setup_2fa=True,
            is_2fa_verified=True,
        )

    def set_2fa_verified(self, user_id: str, verified: bool) -> None:
        self._update(user_id, is_2fa_verified=verified)

    def reset_2fa_verification(self, user_id: str) -> None:
        self._update(user_id, is_2fa_verified=False)

    def set_2fa_enabled(self, user_id: str, enabled: bool) -> None:
        self._update(user_id, is_2fa_enabled=enabled)

    def reset_2fa(self, user_id: str) -> None:
        self._update(
            user_id,
            secret_2fa=None,
            temp_secret_2fa=None,
            has_setup_2fa=False,
            is_2fa_verified=False,
        )

    def update_last_login(self, user_id: str) -> None:
        self._update(user_id, last_login_at=_now())

    def list_users(self) -> list[UserAccount]:
        with self._session() as session:
            return list(session.exec(select(UserAccount).order_by(UserAccount.username)).all())
