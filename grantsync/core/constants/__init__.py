"""常量模块.

主要常量:
- DatabaseType: 数据库类型常量
- ErrorMessages / ErrorCategory / ErrorSeverity: 错误相关常量
- MySQLPrivilegeTable: 按版本登记的 MySQL 权限参考清单
"""

from .database_types import DatabaseType
from .mysql_privileges import (
    ALL_PRIVILEGES_LONG_FORM,
    ALL_PRIVILEGES_TOKEN,
    GRANT_OPTION,
    NO_OPTION,
    NO_SUCH_GRANT_MESSAGE,
    PROXY_PRIVILEGE,
    MySQLPrivilegeTable,
    PrivilegeReference,
)
from .system_constants import ErrorCategory, ErrorMessages, ErrorSeverity, LogLevel

__all__ = [
    "ALL_PRIVILEGES_LONG_FORM",
    "ALL_PRIVILEGES_TOKEN",
    "GRANT_OPTION",
    "NO_OPTION",
    "NO_SUCH_GRANT_MESSAGE",
    "PROXY_PRIVILEGE",
    "DatabaseType",
    "ErrorCategory",
    "ErrorMessages",
    "ErrorSeverity",
    "LogLevel",
    "MySQLPrivilegeTable",
    "PrivilegeReference",
]
