import pytest
from pydantic import ValidationError

from grantsync.settings import Settings, get_settings


@pytest.mark.unit
def test_settings_defaults_fall_back_to_system_account(monkeypatch) -> None:
    monkeypatch.setenv("MYSQL_SYSTEM_USER", "admin")
    monkeypatch.setenv("MYSQL_SYSTEM_PASSWORD", "secret")

    settings = Settings()

    assert settings.mysql_port == 3306
    assert settings.regular_user == "admin"
    assert settings.regular_password == "secret"


@pytest.mark.unit
def test_settings_regular_account(monkeypatch) -> None:
    monkeypatch.setenv("MYSQL_USER", "monitor")
    monkeypatch.setenv("MYSQL_PASSWORD", "monitor-pass")
    monkeypatch.setenv("LOG_LEVEL", "warning")

    settings = Settings()

    assert settings.regular_user == "monitor"
    assert settings.regular_password == "monitor-pass"
    assert settings.log_level == "WARNING"


@pytest.mark.unit
@pytest.mark.parametrize(
    ("name", "value"),
    [("MYSQL_PORT", "70000"), ("MYSQL_CONNECT_TIMEOUT", "0"), ("LOG_LEVEL", "VERBOSE")],
)
def test_settings_validation(monkeypatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ValidationError):
        Settings()


@pytest.mark.unit
def test_get_settings_is_cached() -> None:
    assert get_settings() is get_settings()
