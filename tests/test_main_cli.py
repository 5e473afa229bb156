from __future__ import annotations

from pathlib import Path

import pytest

import main
from main import _parse_args
from landingbuilder.database import Database


def test_default_command_invokes_serve() -> None:
    args = _parse_args([])
    assert args.command == "serve"


def test_default_command_accepts_options_without_subcommand() -> None:
    args = _parse_args(["--host", "127.0.0.1", "--port", "9000"])
    assert args.command == "serve"
    assert args.host == "127.0.0.1"
    assert args.port == 9000


def test_create_user_subcommand_takes_email() -> None:
    args = _parse_args(["create-user", "alice@example.com"])
    assert args.command == "create-user"
    assert args.email == "alice@example.com"


@pytest.fixture()
def cli_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    db_path = tmp_path / "cli.sqlite3"
    monkeypatch.setenv("LANDING_DB_PATH", str(db_path))
    monkeypatch.delenv("LANDING_CONFIG", raising=False)
    monkeypatch.setattr(main, "getpass", lambda prompt="": "CliPassword123!")
    return db_path


def test_create_user_registers_account_and_refuses_duplicates(cli_env: Path, capsys) -> None:
    assert main.main(["create-user", "Alice@Example.com"]) == 0
    assert "Created user #1: alice@example.com (USER)" in capsys.readouterr().out

    assert main.main(["create-user", "alice@example.com"]) == 1
    assert "Email already exists" in capsys.readouterr().err

    users = Database(cli_env).list_users()
    assert [user.email for user in users] == ["alice@example.com"]
    assert users[0].password != "CliPassword123!"


def test_list_users_prints_accounts(cli_env: Path, capsys) -> None:
    assert main.main(["list-users"]) == 0
    assert "No users are currently registered." in capsys.readouterr().out

    main.main(["create-user", "bob@example.com"])
    capsys.readouterr()

    assert main.main(["list-users"]) == 0
    output = capsys.readouterr().out
    assert "1 user(s) found:" in output
    assert "bob@example.com" in output


def test_create_user_rejects_password_over_bcrypt_limit(
    cli_env: Path, monkeypatch: pytest.MonkeyPatch, capsys
) -> None:
    monkeypatch.setattr(main, "getpass", lambda prompt="": "é" * 36 + "a")

    assert main.main(["create-user", "long@example.com"]) == 1
    assert "must not exceed 72 bytes" in capsys.readouterr().err
    assert Database(cli_env).list_users() == []
