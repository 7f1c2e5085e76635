from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from memberauth.app import MemberAuthApp
from memberauth.utils.config import (
    AdminSeedSettings,
    LoggingSettings,
    SecuritySettings,
    Settings,
    StorageSettings,
)
from memberauth_web.main import create_app

# Must match the credentials used in test_web_routes.py
ADMIN_EMAIL = "root@example.com"
ADMIN_PASSWORD = "rootpass1"


def make_settings(data_dir: Path, **overrides) -> Settings:
    """Fast, isolated settings: bcrypt cost 4, no log file."""
    values = dict(
        storage=StorageSettings(data_dir=str(data_dir)),
        security=SecuritySettings(bcrypt_rounds=4),
        logging=LoggingSettings(level="WARNING", format="console", file_path=None),
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings_factory(tmp_path):
    def factory(**overrides):
        return make_settings(tmp_path / "data", **overrides)
    return factory


@pytest.fixture
def settings(settings_factory):
    return settings_factory()


@pytest.fixture
def ctx(settings):
    app = MemberAuthApp(settings)
    app.data_dir.mkdir(parents=True, exist_ok=True)
    return app


@pytest.fixture
def auth(ctx):
    return ctx.auth


@pytest.fixture
def client(tmp_path):
    settings = make_settings(
        tmp_path / "data",
        admin=AdminSeedSettings(email=ADMIN_EMAIL, password=ADMIN_PASSWORD, name="Root"),
    )
    with TestClient(create_app(settings)) as c:
        yield c
