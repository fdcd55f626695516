"""Tests for the SQL-backed user status store."""

import pytest
from sqlalchemy.exc import IntegrityError

from admin_panel.services.user_store import UserStatus

SECRET = "JBSWY3DPEHPK3PXPJBSWY3DPEHPK3PXP"


def test_create_user_defaults(store, password_hash):
    user = store.create_user("alice01", password_hash)
    assert user.id
    assert user.is_2fa_enabled is True
    assert user.has_setup_2fa is False
    assert user.secret_2fa is None
    assert store.get_by_username("alice01").id == user.id


def test_duplicate_username_rejected(store, password_hash):
    store.create_user("alice01", password_hash)
    with pytest.raises(IntegrityError):
        store.create_user("alice01", password_hash)


def test_get_status(store, make_user):
    user = make_user(is_2fa_enabled=False, has_setup_2fa=True)
    assert store.get_status(user.id) == UserStatus(id=user.id, has_setup_2fa=True, is_2fa_enabled=False)
    assert store.get_status("missing") is None


def test_inactive_users_are_invisible(store, make_user):
    user = make_user(is_active=False)
    assert store.get_by_id(user.id) is None
    assert store.get_by_username(user.username) is None
    assert store.get_status(user.id) is None
    assert [u.id for u in store.list_users()] == [user.id]


def test_complete_2fa_setup_promotes_matching_temp_secret(store, make_user):
    user = make_user(temp_secret_2fa=SECRET)
    assert store.complete_2fa_setup(user.id, SECRET) is True

    stored = store.get_by_id(user.id)
    assert stored.secret_2fa == SECRET
    assert stored.temp_secret_2fa is None
    assert stored.has_setup_2fa is True
    assert stored.is_2fa_verified is True


def test_complete_2fa_setup_refuses_replaced_temp_secret(store, make_user):
    user = make_user(temp_secret_2fa="NEWERSECRETNEWERSECRET")
    assert store.complete_2fa_setup(user.id, SECRET) is False

    stored = store.get_by_id(user.id)
    assert stored.secret_2fa is None
    assert stored.has_setup_2fa is False


def test_reset_2fa_verification(store, make_user):
    user = make_user(has_setup_2fa=True, secret_2fa=SECRET, is_2fa_verified=True)
    store.reset_2fa_verification(user.id)
    assert store.get_by_id(user.id).is_2fa_verified is False


def test_reset_2fa_drops_secrets(store, make_user):
    user = make_user(has_setup_2fa=True, secret_2fa=SECRET, temp_secret_2fa=SECRET, is_2fa_verified=True)
    store.reset_2fa(user.id)
    stored = store.get_by_id(user.id)
    assert (stored.secret_2fa, stored.temp_secret_2fa) == (None, None)
    assert stored.has_setup_2fa is False
    assert stored.is_2fa_verified is False
    assert stored.is_2fa_enabled is True


def test_set_2fa_enabled_and_last_login(store, make_user):
    user = make_user()
    store.set_2fa_enabled(user.id, False)
    store.update_last_login(user.id)
    stored = store.get_by_id(user.id)
    assert stored.is_2fa_enabled is False
    assert stored.last_login_at is not None
