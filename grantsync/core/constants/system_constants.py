"""grantsync - 系统常量定义

统一管理错误分类、严重度与错误消息.
"""

from enum import Enum


class LogLevel(Enum):
    """日志级别枚举."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class ErrorCategory(Enum):
    """错误分类枚举."""

    VALIDATION = "validation"
    DATABASE = "database"
    EXTERNAL = "external"
    SYSTEM = "system"


class ErrorSeverity(Enum):
    """错误严重程度枚举."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorMessages:
    """错误消息常量."""

    INTERNAL_ERROR = "内部错误"
    VALIDATION_ERROR = "数据验证失败"
    CONFIG_FILE_NOT_FOUND = "授权声明文件不存在"
    CONFIG_FILE_INVALID = "授权声明文件格式错误"

    # 数据库错误
    DATABASE_CONNECTION_ERROR = "数据库连接失败"
    DATABASE_QUERY_ERROR = "数据库查询错误"
    GRANT_QUERY_FAILED = "查询账户授权失败"
    STATEMENT_EXECUTION_FAILED = "授权语句执行失败"
