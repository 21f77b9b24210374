"""grantsync - 统一配置读取与校验.

目标:
- 将环境变量读取、默认值、校验集中到单一入口,避免散落在各模块中重复解析.
- CLI 与同步服务只消费 Settings,不再直接读取环境变量.

说明:
- Settings 使用 `pydantic-settings` 的 `BaseSettings` 从环境变量与本地 `.env`(可选)读取配置.
- system 账号用于执行 GRANT/REVOKE,regular 账号用于 SHOW GRANTS 与 FLUSH PRIVILEGES;
  未配置 regular 账号时回退到 system 账号.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from grantsync.core.constants.database_types import DatabaseType
from grantsync.core.constants.system_constants import LogLevel

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DOTENV_PATH = PROJECT_ROOT / ".env"

APP_NAME = "grantsync"
APP_VERSION = "0.3.0"

DEFAULT_MYSQL_HOST = "127.0.0.1"
DEFAULT_MYSQL_CONNECT_TIMEOUT_SECONDS = 20
DEFAULT_MYSQL_READ_TIMEOUT_SECONDS = 300
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_GRANTS_FILE = "grants.yaml"

PORT_MIN = 1
PORT_MAX = 65535


class Settings(BaseSettings):
    """运行时设置集合."""

    model_config = SettingsConfigDict(
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
        str_strip_whitespace=True,
    )

    mysql_host: str = Field(default=DEFAULT_MYSQL_HOST, validation_alias="MYSQL_HOST")
    mysql_port: int = Field(default=DatabaseType.DEFAULT_PORTS[DatabaseType.MYSQL], validation_alias="MYSQL_PORT")
    mysql_system_user: str = Field(default="root", validation_alias="MYSQL_SYSTEM_USER")
    mysql_system_password: str = Field(default="", validation_alias="MYSQL_SYSTEM_PASSWORD")
    mysql_user: str | None = Field(default=None, validation_alias="MYSQL_USER")
    mysql_password: str | None = Field(default=None, validation_alias="MYSQL_PASSWORD")
    mysql_connect_timeout: int = Field(
        default=DEFAULT_MYSQL_CONNECT_TIMEOUT_SECONDS,
        validation_alias="MYSQL_CONNECT_TIMEOUT",
    )
    mysql_read_timeout: int = Field(default=DEFAULT_MYSQL_READ_TIMEOUT_SECONDS, validation_alias="MYSQL_READ_TIMEOUT")

    log_level: str = Field(default=DEFAULT_LOG_LEVEL, validation_alias="LOG_LEVEL")
    log_json: bool = Field(default=False, validation_alias="LOG_JSON")

    grants_file: str = Field(default=DEFAULT_GRANTS_FILE, validation_alias="GRANTS_FILE")

    @field_validator("mysql_port")
    @classmethod
    def _validate_port(cls, value: int) -> int:
        if not PORT_MIN <= value <= PORT_MAX:
            msg = f"MYSQL_PORT 超出范围: {value}"
            raise ValueError(msg)
        return value

    @field_validator("mysql_connect_timeout", "mysql_read_timeout")
    @classmethod
    def _validate_timeout(cls, value: int) -> int:
        if value <= 0:
            msg = "超时时间必须为正整数"
            raise ValueError(msg)
        return value

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized = value.upper()
        if normalized not in LogLevel.__members__:
            msg = f"LOG_LEVEL 无效: {value}"
            raise ValueError(msg)
        return normalized

    @property
    def regular_user(self) -> str:
        return self.mysql_user or self.mysql_system_user

    @property
    def regular_password(self) -> str:
        if self.mysql_user:
            return self.mysql_password or ""
        return self.mysql_system_password


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """读取 `.env` 与环境变量,返回缓存的 Settings."""
    load_dotenv(DOTENV_PATH, override=False)
    return Settings()


__all__ = ["APP_NAME", "APP_VERSION", "Settings", "get_settings"]
