"""grantsync - 统一异常定义(Shared Kernel).

说明:
- 本模块只负责定义异常类型与语义字段,不包含 CLI 输出等展示细节.
- "账户没有任何授权" 与 "无法识别的 GRANT 行" 都不是异常,分别由解析器返回空结果和跳过处理.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from grantsync.core.constants.system_constants import ErrorCategory, ErrorMessages, ErrorSeverity


@dataclass(frozen=True, slots=True)
class ExceptionMetadata:
    """异常的元信息."""

    category: ErrorCategory
    severity: ErrorSeverity
    default_message_key: str


class AppError(Exception):
    """统一的基础业务异常.

    Args:
        message: 自定义错误文案,若为空则根据 ``message_key`` 推导.
        message_key: 自定义消息键.
        extra: 结构化日志附加字段.
        severity: 错误严重度.
        category: 错误分类.
    """

    metadata = ExceptionMetadata(
        category=ErrorCategory.SYSTEM,
        severity=ErrorSeverity.HIGH,
        default_message_key="INTERNAL_ERROR",
    )

    def __init__(
        self,
        message: str | None = None,
        *,
        message_key: str | None = None,
        extra: dict[str, Any] | None = None,
        severity: ErrorSeverity | None = None,
        category: ErrorCategory | None = None,
    ) -> None:
        self.message_key = message_key or self.metadata.default_message_key
        self.message = message or getattr(ErrorMessages, self.message_key, ErrorMessages.INTERNAL_ERROR)
        self.extra = dict(extra or {})
        self.severity = severity or self.metadata.severity
        self.category = category or self.metadata.category
        super().__init__(self.message)

    @property
    def recoverable(self) -> bool:
        """表示该异常是否可恢复."""

        return self.severity in (ErrorSeverity.LOW, ErrorSeverity.MEDIUM)


class ValidationError(AppError):
    """表示授权声明等输入验证失败."""

    metadata = ExceptionMetadata(
        category=ErrorCategory.VALIDATION,
        severity=ErrorSeverity.LOW,
        default_message_key="VALIDATION_ERROR",
    )


class DatabaseError(AppError):
    """表示数据库查询或语句执行失败."""

    metadata = ExceptionMetadata(
        category=ErrorCategory.DATABASE,
        severity=ErrorSeverity.HIGH,
        default_message_key="DATABASE_QUERY_ERROR",
    )


class EngineQueryFailedError(DatabaseError):
    """SHOW GRANTS 查询失败(非"无授权"场景),终止该账户本轮同步.

    原始错误文本保存在 ``extra["engine_error"]`` 中.
    """

    metadata = ExceptionMetadata(
        category=ErrorCategory.DATABASE,
        severity=ErrorSeverity.HIGH,
        default_message_key="GRANT_QUERY_FAILED",
    )


class StatementExecutionFailedError(DatabaseError):
    """GRANT/REVOKE/FLUSH 语句执行失败.

    同一授权已执行的语句不会回滚,``extra["applied"]`` 记录失败前已成功执行的语句数.
    """

    metadata = ExceptionMetadata(
        category=ErrorCategory.DATABASE,
        severity=ErrorSeverity.HIGH,
        default_message_key="STATEMENT_EXECUTION_FAILED",
    )

    @property
    def partially_applied(self) -> bool:
        return bool(self.extra.get("applied"))


class SystemError(AppError):
    """表示系统级未知错误或底层故障."""


__all__ = [
    "AppError",
    "DatabaseError",
    "EngineQueryFailedError",
    "StatementExecutionFailedError",
    "SystemError",
    "ValidationError",
]
