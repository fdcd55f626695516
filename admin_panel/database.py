"""SQLModel database engine and session management."""

import logging

from sqlalchemy import inspect, text
from sqlmodel import SQLModel, create_engine

from admin_panel.config import settings

logger = logging.getLogger(__name__)

# SQLite needs check_same_thread=False; PostgreSQL does not
connect_args = {}
if settings.database_url.startswith("sqlite"):
    connect_args["check_same_thread"] = False

engine = create_engine(
    settings.database_url,
    echo=False,
    connect_args=connect_args,
)


def _run_migrations():
    """Run lightweight schema migrations for columns added after the first release."""
    inspector = inspect(engine)

    if "users" not in inspector.get_table_names():
        return

    columns = {col["name"] for col in inspector.get_columns("users")}
    if "is_2fa_enabled" not in columns:
        logger.info("Migrating: adding users.is_2fa_enabled")
        with engine.connect() as conn:
            conn.execute(text("ALTER TABLE users ADD COLUMN is_2fa_enabled BOOLEAN NOT NULL DEFAULT 1"))
            conn.commit()
    if "temp_secret_2fa" not in columns:
        logger.info("Migrating: adding users.temp_secret_2fa")
        with engine.connect() as conn:
            conn.execute(text("ALTER TABLE users ADD COLUMN temp_secret_2fa VARCHAR"))
            conn.commit()


def create_db_and_tables():
    """Create all tables. Called on startup."""
    import admin_panel.models  # noqa: F401  (registers tables on the metadata)

    SQLModel.metadata.create_all(engine)
    _run_migrations()
