# tests/unit/conftest.py
"""单元测试专用 fixtures.

提供 stub 执行器等通用 fixtures。
"""

import pytest

from grantsync.services.connection_adapters.base import ConnectionAdapterError, ExecutionMode
from grantsync.settings import get_settings


@pytest.fixture(autouse=True)
def _unit_test_env(monkeypatch):
    """为 unit tests 强制注入隔离环境变量.

    目标:
    - unit tests 不依赖真实 MySQL
    - 避免开发者本机环境变量影响测试稳定性
    """
    monkeypatch.setenv("MYSQL_HOST", "127.0.0.1")
    monkeypatch.setenv("MYSQL_PORT", "3306")
    monkeypatch.delenv("MYSQL_USER", raising=False)
    monkeypatch.delenv("MYSQL_PASSWORD", raising=False)
    monkeypatch.delenv("GRANTS_FILE", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class StubGrantExecutor:
    """按账户返回预置 SHOW GRANTS 输出的执行器."""

    def __init__(
        self,
        grants: dict[str, str] | None = None,
        *,
        version: str | None = "8.0.32",
        query_errors: dict[str, str] | None = None,
        failing_statements: set[str] | None = None,
        principals: list[str] | None = None,
    ) -> None:
        self.grants = dict(grants or {})
        self.version = version
        self.query_errors = dict(query_errors or {})
        self.failing_statements = set(failing_statements or ())
        self.principals = list(principals if principals is not None else self.grants)
        self.queried: list[str] = []
        self.statements: list[tuple[str, ExecutionMode]] = []

    def run_grant_query(self, principal: str) -> str:
        self.queried.append(principal)
        if principal in self.query_errors:
            raise ConnectionAdapterError(self.query_errors[principal])
        if principal not in self.grants:
            user, _, host = principal.rpartition("@")
            raise ConnectionAdapterError(
                f"(1141, \"There is no such grant defined for user '{user}' on host '{host}'\")",
            )
        return self.grants[principal]

    def run_statement(self, sql: str, mode: ExecutionMode = ExecutionMode.SYSTEM):
        if sql in self.failing_statements:
            raise ConnectionAdapterError(f"(1044, \"Access denied while executing: {sql}\")")
        self.statements.append((sql, mode))
        return []

    def get_version(self) -> str | None:
        return self.version

    def list_principals(self) -> list[str]:
        return list(self.principals)


@pytest.fixture
def stub_executor_factory():
    """返回 StubGrantExecutor 构造器."""
    return StubGrantExecutor
