"""
Configuration management with schema validation.
Settings come from a YAML file with ${VAR:default} environment substitution.
"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ConfigError
from .logger import get_logger

logger = get_logger(__name__)

DEFAULT_SETTINGS_FILE = Path("config") / "settings.yaml"


class AppSettings(BaseModel):
    name: str = "MemberAuth"
    environment: str = "development"

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"


class ServerSettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 1002
    workers: int = 1


class StorageSettings(BaseModel):
    data_dir: str = "data"


class SessionSettings(BaseModel):
    cookie_name: str = "memberauth_session"
    ttl_minutes: int = Field(default=60, gt=0)
    sliding: bool = False  # False: fixed TTL from creation


class SecuritySettings(BaseModel):
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)
    min_password_length: int = Field(default=6, ge=1)


class AdminSeedSettings(BaseModel):
    """First admin account, created only when the user store is empty"""
    email: Optional[str] = None
    password: Optional[str] = None
    name: str = "Admin"


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = "json"
    file_path: Optional[str] = None
    max_bytes: int = 10485760
    backup_count: int = 5


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    session: SessionSettings = Field(default_factory=SessionSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    admin: AdminSeedSettings = Field(default_factory=AdminSeedSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


class ConfigManager:
    """Loads and validates settings.yaml"""

    def __init__(self, settings_path: Optional[Path] = None):
        load_dotenv()
        env_path = os.getenv("MEMBERAUTH_CONFIG")
        self.explicit = settings_path is not None or bool(env_path)
        if settings_path is not None:
            self.settings_path = Path(settings_path)
        elif env_path:
            self.settings_path = Path(env_path)
        else:
            self.settings_path = DEFAULT_SETTINGS_FILE
        self._settings: Optional[Settings] = None

    def _substitute_env_vars(self, value: Any) -> Any:
        """Recursively substitute environment variables"""
        if isinstance(value, str):
            if value.startswith("${") and value.endswith("}"):
                var_expr = value[2:-1]
                if ":" in var_expr:
                    var_name, default = var_expr.split(":", 1)
                    return os.getenv(var_name.strip(), default.strip())
                else:
                    return os.getenv(var_expr, value)
        elif isinstance(value, dict):
            return {k: self._substitute_env_vars(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [self._substitute_env_vars(item) for item in value]
        return value

    def load_settings(self) -> Settings:
        """Load and validate settings. A missing default file means built-in defaults."""
        if not self.settings_path.exists():
            if self.explicit:
                raise ConfigError(f"Settings file not found: {self.settings_path}")
            self._settings = Settings()
            return self._settings

        try:
            with open(self.settings_path, "r", encoding="utf-8") as f:
                raw_data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to read settings from {self.settings_path}: {e}")

        if not isinstance(raw_data, dict):
            raise ConfigError(f"Settings file must contain a mapping: {self.settings_path}")

        processed_data = self._substitute_env_vars(raw_data)
        # Empty substitutions ("${VAR:}") mean "not set"
        admin = processed_data.get("admin") or {}
        for key in ("email", "password"):
            if admin.get(key) == "":
                admin[key] = None

        try:
            self._settings = Settings(**processed_data)
        except PydanticValidationError as e:
            raise ConfigError(f"Invalid settings in {self.settings_path}: {e}")

        logger.debug("Settings loaded", path=str(self.settings_path))
        return self._settings


def load_settings(settings_path: Optional[Path] = None) -> Settings:
    return ConfigManager(settings_path).load_settings()
