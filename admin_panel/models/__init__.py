"""Database models."""

from admin_panel.models.user import UserAccount

__all__ = [
    "UserAccount",
]
