"""Tests for the admin CLI commands."""

import pytest

from admin_panel import cli

SECRET = "JBSWY3DPEHPK3PXPJBSWY3DPEHPK3PXP"


@pytest.fixture
def cli_store(monkeypatch, engine, store):
    monkeypatch.setattr(cli, "engine", engine)
    monkeypatch.setattr(cli, "create_db_and_tables", lambda: None)
    monkeypatch.setattr(cli, "setup_logging", lambda: None)
    return store


def test_create_admin(monkeypatch, cli_store, capsys):
    answers = iter(["admin01", "n"])
    monkeypatch.setattr("builtins.input", lambda prompt: next(answers))
    monkeypatch.setattr(cli.getpass, "getpass", lambda prompt: "s3cret-pass")

    cli.main(["create-admin"])

    user = cli_store.get_by_username("admin01")
    assert user is not None
    assert user.is_2fa_enabled is True
    assert "created successfully" in capsys.readouterr().out


def test_create_admin_password_mismatch(monkeypatch, cli_store):
    monkeypatch.setattr("builtins.input", lambda prompt: "admin01")
    passwords = iter(["s3cret-pass", "other-pass"])
    monkeypatch.setattr(cli.getpass, "getpass", lambda prompt: next(passwords))

    with pytest.raises(SystemExit):
        cli.main(["create-admin"])
    assert cli_store.get_by_username("admin01") is None


def test_toggle_and_reset_2fa(cli_store, make_user, capsys):
    user = make_user(has_setup_2fa=True, secret_2fa=SECRET, is_2fa_verified=True)

    cli.main(["disable-2fa", user.username])
    assert cli_store.get_by_id(user.id).is_2fa_enabled is False
    cli.main(["enable-2fa", user.username])
    assert cli_store.get_by_id(user.id).is_2fa_enabled is True

    cli.main(["reset-2fa", user.username])
    stored = cli_store.get_by_id(user.id)
    assert stored.secret_2fa is None
    assert stored.has_setup_2fa is False

    cli.main(["list-users"])
    assert user.username in capsys.readouterr().out


def test_unknown_user(cli_store, capsys):
    with pytest.raises(SystemExit):
        cli.main(["reset-2fa", "ghost01"])
    assert "not found" in capsys.readouterr().out


def test_unknown_command(capsys):
    with pytest.raises(SystemExit):
        cli.main(["drop-everything"])
    assert "Unknown command" in capsys.readouterr().out
