"""Operator console commands against an isolated data directory."""

import pytest

from memberauth import cli
from memberauth.app import MemberAuthApp
from memberauth.utils.config import load_settings


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    path = tmp_path / "settings.yaml"
    path.write_text(
        "storage:\n"
        f"  data_dir: {tmp_path / 'data'}\n"
        "security:\n"
        "  bcrypt_rounds: 4\n"
        "logging:\n"
        "  level: WARNING\n"
        "  format: console\n"
        "  file_path: null\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("MEMBERAUTH_CONFIG", str(path))
    return path


def _answers(monkeypatch, *values):
    replies = iter(values)
    monkeypatch.setattr(cli.Prompt, "ask", lambda *a, **kw: next(replies))


def test_create_admin_then_list(config_file, monkeypatch):
    _answers(monkeypatch, "adminpass", "adminpass")
    assert cli.main(["create-admin", "--name", "Ops", "--email", "Ops@X.com"]) == 0

    app = MemberAuthApp(load_settings())
    record = app.users.find_by_email("ops@x.com")
    assert record.role == "admin"
    assert app.auth.authenticate("ops@x.com", "adminpass").user.role == "admin"

    assert cli.main(["list"]) == 0


def test_create_admin_password_mismatch(config_file, monkeypatch):
    _answers(monkeypatch, "adminpass", "different")
    assert cli.main(["create-admin", "--name", "Ops", "--email", "ops@x.com"]) == 1
    assert MemberAuthApp(load_settings()).users.count() == 0


def test_create_admin_rejects_duplicate(config_file, monkeypatch):
    _answers(monkeypatch, "adminpass", "adminpass", "adminpass", "adminpass")
    assert cli.main(["create-admin", "--name", "Ops", "--email", "ops@x.com"]) == 0
    assert cli.main(["create-admin", "--name", "Ops", "--email", "ops@x.com"]) == 1


def test_set_role(config_file):
    app = MemberAuthApp(load_settings())
    app.data_dir.mkdir(parents=True, exist_ok=True)
    app.auth.register("Bob", "bob@x.com", "bobpass1")

    assert cli.main(["set-role", "BOB@x.com", "admin"]) == 0
    assert app.users.find_by_email("bob@x.com").role == "admin"


def test_set_role_unknown_account(config_file):
    assert cli.main(["set-role", "ghost@x.com", "admin"]) == 1
