"""CLI tool for admin operations.

Usage:
    python -m admin_panel.cli create-admin
    python -m admin_panel.cli list-users
    python -m admin_panel.cli enable-2fa <username>
    python -m admin_panel.cli disable-2fa <username>
    python -m admin_panel.cli reset-2fa <username>
"""

import sys
import getpass

from admin_panel.database import engine, create_db_and_tables
from admin_panel.services.auth import hash_password
from admin_panel.services.user_store import SqlUserStatusStore
from admin_panel.utils.logging import setup_logging

COMMANDS = ("create-admin", "list-users", "enable-2fa", "disable-2fa", "reset-2fa")


def create_admin(store: SqlUserStatusStore):
    """Create an admin user. 2FA enrollment happens on first login."""
    username = input("Username: ").strip()
    if len(username) < 5:
        print("Username must be at least 5 characters.")
        sys.exit(1)

    if store.get_by_username(username):
        print(f"User '{username}' already exists.")
        sys.exit(1)

    password = getpass.getpass("Password: ")
    password_confirm = getpass.getpass("Confirm password: ")
    if password != password_confirm:
        print("Passwords do not match.")
        sys.exit(1)
    if len(password) < 5:
        print("Password must be at least 5 characters.")
        sys.exit(1)

    disable = input("Disable 2FA for this user? [y/N]: ").strip().lower() == "y"
    user = store.create_user(username, hash_password(password), is_2fa_enabled=not disable)

    print(f"\nAdmin user '{username}' created successfully (id={user.id}).")
    if user.is_2fa_enabled:
        print("Scan the QR code shown after the first login with your authenticator app.")


def list_users(store: SqlUserStatusStore):
    users = store.list_users()
    if not users:
        print("No users.")
        return
    print(f"{'USERNAME':<24} {'2FA':<9} {'SET UP':<7} {'ACTIVE':<7} LAST LOGIN")
    for user in users:
        last_login = user.last_login_at.isoformat(timespec="seconds") if user.last_login_at else "-"
        print(
            f"{user.username:<24} {'enabled' if user.is_2fa_enabled else 'disabled':<9} "
            f"{'yes' if user.has_setup_2fa else 'no':<7} {'yes' if user.is_active else 'no':<7} {last_login}"
        )


def _require_user(store: SqlUserStatusStore, username: str):
    user = store.get_by_username(username)
    if user is None:
        print(f"User '{username}' not found.")
        sys.exit(1)
    return user


def set_2fa_enabled(store: SqlUserStatusStore, username: str, enabled: bool):
    user = _require_user(store, username)
    store.set_2fa_enabled(user.id, enabled)
    print(f"2FA {'enabled' if enabled else 'disabled'} for '{username}'.")


def reset_2fa(store: SqlUserStatusStore, username: str):
    """Drop the user's secrets so the next login starts a fresh enrollment."""
    user = _require_user(store, username)
    store.reset_2fa(user.id)
    print(f"2FA reset for '{username}'. A new QR code will be issued on next login.")


def main(argv: list[str] | None = None):
    args = sys.argv[1:] if argv is None else argv
    if not args or args[0] not in COMMANDS:
        if args:
            print(f"Unknown command: {args[0]}")
        print("Usage: python -m admin_panel.cli <command> [username]")
        print(f"Commands: {', '.join(COMMANDS)}")
        sys.exit(1)

    setup_logging()
    create_db_and_tables()
    store = SqlUserStatusStore(engine)

    command = args[0]
    if command == "create-admin":
        create_admin(store)
        return
    if command == "list-users":
        list_users(store)
        return

    if len(args) < 2:
        print(f"Usage: python -m admin_panel.cli {command} <username>")
        sys.exit(1)
    username = args[1]
    if command == "enable-2fa":
        set_2fa_enabled(store, username, True)
    elif command == "disable-2fa":
        set_2fa_enabled(store, username, False)
    else:
        reset_2fa(store, username)


if __name__ == "__main__":
    main()
