"""授权执行器接口与公共类型."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Any, Protocol, TypeAlias, runtime_checkable

QueryResultRow: TypeAlias = Sequence[Any]
QueryResult: TypeAlias = list[QueryResultRow]


class ConnectionAdapterError(RuntimeError):
    """数据库连接适配器异常,消息中保留服务端原始错误文本."""


class ExecutionMode(str, Enum):
    """语句执行上下文.

    SYSTEM 使用具备授权能力的管理账号,REGULAR 使用普通账号.
    """

    SYSTEM = "system"
    REGULAR = "regular"


@runtime_checkable
class GrantExecutor(Protocol):
    """同步服务依赖的数据库执行器."""

    def run_grant_query(self, principal: str) -> str:
        """执行 SHOW GRANTS FOR principal,返回多行文本."""

    def run_statement(self, sql: str, mode: ExecutionMode = ExecutionMode.SYSTEM) -> QueryResult:
        """执行 GRANT/REVOKE/FLUSH 等语句."""

    def get_version(self) -> str | None:
        """返回 SELECT VERSION() 的结果."""

    def list_principals(self) -> list[str]:
        """返回实例上所有账户,格式 ``user@host``."""


__all__ = [
    "ConnectionAdapterError",
    "ExecutionMode",
    "GrantExecutor",
    "QueryResult",
    "QueryResultRow",
]
