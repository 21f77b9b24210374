import pytest

from grantsync.core.exceptions import StatementExecutionFailedError
from grantsync.utils.structlog_config import StructlogConfig, get_sync_logger, log_error_payload


@pytest.mark.unit
def test_log_error_payload_includes_app_error_metadata() -> None:
    error = StatementExecutionFailedError("boom", extra={"sql": "FLUSH PRIVILEGES", "applied": 0})

    payload = log_error_payload(error)

    assert payload == {
        "error": "boom",
        "error_type": "StatementExecutionFailedError",
        "category": "database",
        "severity": "high",
        "extra": {"sql": "FLUSH PRIVILEGES", "applied": 0},
    }


@pytest.mark.unit
def test_log_error_payload_plain_exception() -> None:
    assert log_error_payload(RuntimeError("lost")) == {"error": "lost", "error_type": "RuntimeError"}


@pytest.mark.unit
def test_configure_is_idempotent_unless_forced() -> None:
    config = StructlogConfig()

    config.configure(level="debug", json_logs=True)
    config.configure(level="error", json_logs=False)
    assert config.level == "DEBUG"
    assert config.json_logs is True

    config.configure(level="warning", force=True)
    assert config.level == "WARNING"
    assert config.json_logs is True


@pytest.mark.unit
def test_get_sync_logger_returns_bound_logger() -> None:
    logger = get_sync_logger()

    logger.info("grantsync_test_event", module="tests")
