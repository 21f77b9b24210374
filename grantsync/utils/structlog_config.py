"""grantsync 的结构化日志配置与辅助函数."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any, cast

import structlog

from grantsync.settings import APP_NAME, APP_VERSION, DEFAULT_LOG_LEVEL

if TYPE_CHECKING:
    from structlog.typing import EventDict, Processor, WrappedLogger


class StructlogConfig:
    """structlog 配置核心类.

    负责配置 structlog 的处理器链与标准库 logging 的输出级别.

    Attributes:
        configured: 是否已配置标志.
        level: 当前日志级别.
        json_logs: 是否输出 JSON 行.

    Example:
        >>> config = StructlogConfig()
        >>> config.configure(level="DEBUG")
        >>> logger = get_logger('my_module')

    """

    def __init__(self) -> None:
        self.configured = False
        self.level = DEFAULT_LOG_LEVEL
        self.json_logs = False

    def configure(self, *, level: str | None = None, json_logs: bool | None = None, force: bool = False) -> None:
        """初始化 structlog 处理器(幂等).

        Args:
            level: 日志级别名称,缺省沿用当前设置.
            json_logs: 是否输出 JSON,缺省沿用当前设置.
            force: 已配置时是否重新配置.

        Returns:
            None.

        """
        if self.configured and not force:
            return

        if level is not None:
            self.level = level.upper()
        if json_logs is not None:
            self.json_logs = json_logs

        log_level = getattr(logging, self.level, logging.INFO)
        logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level)
        logging.getLogger().setLevel(log_level)

        processors = [
            structlog.stdlib.filter_by_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            self._add_global_context,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            self._get_renderer(),
        ]
        structlog.configure(
            processors=cast("list[Processor]", processors),
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        self.configured = True

    @staticmethod
    def _add_global_context(
        _logger: WrappedLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        """附加应用名称与版本."""
        event_dict.setdefault("app_name", APP_NAME)
        event_dict.setdefault("app_version", APP_VERSION)
        return event_dict

    def _get_renderer(self) -> Processor:
        """根据配置与终端能力返回渲染器."""
        if self.json_logs:
            return structlog.processors.JSONRenderer()
        return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


structlog_config = StructlogConfig()


def configure_structlog(level: str | None = None, *, json_logs: bool | None = None) -> None:
    """按运行时设置重新配置日志.

    Args:
        level: 日志级别.
        json_logs: 是否输出 JSON 行.

    Returns:
        None.

    """
    structlog_config.configure(level=level, json_logs=json_logs, force=True)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """获取结构化日志记录器.

    Args:
        name: 日志记录器名称,通常使用模块名.

    Returns:
        绑定的 structlog 日志记录器实例.

    Example:
        >>> logger = get_logger('my_module')
        >>> logger.info('grant_applied', identity='app@%/db.*')

    """
    structlog_config.configure()
    return structlog.get_logger(name)


def get_system_logger() -> structlog.stdlib.BoundLogger:
    """返回系统级 logger."""
    return get_logger("system")


def get_db_logger() -> structlog.stdlib.BoundLogger:
    """返回数据库操作 logger."""
    return get_logger("database")


def get_sync_logger() -> structlog.stdlib.BoundLogger:
    """返回授权同步 logger."""
    return get_logger("sync")


def log_error_payload(error: Exception) -> dict[str, Any]:
    """把异常转换为结构化日志字段.

    AppError 子类会带上分类、严重度与附加字段.

    Args:
        error: 捕获的异常.

    Returns:
        可直接展开到日志调用中的字段字典.

    """
    payload: dict[str, Any] = {"error": str(error), "error_type": type(error).__name__}
    category = getattr(error, "category", None)
    severity = getattr(error, "severity", None)
    if category is not None:
        payload["category"] = getattr(category, "value", category)
    if severity is not None:
        payload["severity"] = getattr(severity, "value", severity)
    extra = getattr(error, "extra", None)
    if extra:
        payload["extra"] = extra
    return payload


__all__ = [
    "StructlogConfig",
    "configure_structlog",
    "get_db_logger",
    "get_logger",
    "get_sync_logger",
    "get_system_logger",
    "log_error_payload",
    "structlog_config",
]
