"""MySQL 权限参考表.

SHOW GRANTS 在部分版本上不会输出 ``ALL PRIVILEGES``,而是把它展开成完整的权限清单.
解析器依赖本模块的参考表把展开后的清单重新折叠为 ``ALL``.

说明:
- 参考表按版本键(主版本号,例如 ``"8.0"``)登记,新版本新增权限时只需在此追加一行.
- 列表内容必须与服务端实际输出完全一致,且保持升序,解析器直接做相等比较.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

ALL_PRIVILEGES_TOKEN = "ALL"
ALL_PRIVILEGES_LONG_FORM = "ALL PRIVILEGES"
PROXY_PRIVILEGE = "PROXY"

GRANT_OPTION = "GRANT"
NO_OPTION = "NONE"

# SHOW GRANTS 对不存在授权的账户返回的错误文本
NO_SUCH_GRANT_MESSAGE = "There is no such grant defined for user"

MYSQL_V8_STATIC_PRIVILEGES: tuple[str, ...] = (
    "ALTER",
    "ALTER ROUTINE",
    "CREATE",
    "CREATE ROLE",
    "CREATE ROUTINE",
    "CREATE TABLESPACE",
    "CREATE TEMPORARY TABLES",
    "CREATE USER",
    "CREATE VIEW",
    "DELETE",
    "DROP",
    "DROP ROLE",
    "EVENT",
    "EXECUTE",
    "FILE",
    "INDEX",
    "INSERT",
    "LOCK TABLES",
    "PROCESS",
    "REFERENCES",
    "RELOAD",
    "REPLICATION CLIENT",
    "REPLICATION SLAVE",
    "SELECT",
    "SHOW DATABASES",
    "SHOW VIEW",
    "SHUTDOWN",
    "SUPER",
    "TRIGGER",
    "UPDATE",
)

MYSQL_V8_DYNAMIC_PRIVILEGES: tuple[str, ...] = (
    "APPLICATION_PASSWORD_ADMIN",
    "AUDIT_ABORT_EXEMPT",
    "AUDIT_ADMIN",
    "AUTHENTICATION_POLICY_ADMIN",
    "BACKUP_ADMIN",
    "BINLOG_ADMIN",
    "BINLOG_ENCRYPTION_ADMIN",
    "CLONE_ADMIN",
    "CONNECTION_ADMIN",
    "ENCRYPTION_KEY_ADMIN",
    "FIREWALL_EXEMPT",
    "FLUSH_OPTIMIZER_COSTS",
    "FLUSH_STATUS",
    "FLUSH_TABLES",
    "FLUSH_USER_RESOURCES",
    "GROUP_REPLICATION_ADMIN",
    "GROUP_REPLICATION_STREAM",
    "INNODB_REDO_LOG_ARCHIVE",
    "INNODB_REDO_LOG_ENABLE",
    "NDB_STORED_USER",
    "PASSWORDLESS_USER_ADMIN",
    "PERSIST_RO_VARIABLES_ADMIN",
    "REPLICATION_APPLIER",
    "REPLICATION_SLAVE_ADMIN",
    "RESOURCE_GROUP_ADMIN",
    "RESOURCE_GROUP_USER",
    "ROLE_ADMIN",
    "SENSITIVE_VARIABLES_OBSERVER",
    "SERVICE_CONNECTION_ADMIN",
    "SESSION_VARIABLES_ADMIN",
    "SET_USER_ID",
    "SHOW_ROUTINE",
    "SYSTEM_USER",
    "SYSTEM_VARIABLES_ADMIN",
    "TABLE_ENCRYPTION_ADMIN",
    "XA_RECOVER_ADMIN",
)


@dataclass(frozen=True, slots=True)
class PrivilegeReference:
    """某个版本的权限参考清单."""

    version_key: str
    static_privileges: tuple[str, ...]
    dynamic_privileges: tuple[str, ...]


class MySQLPrivilegeTable:
    """按版本键查找权限参考清单.

    Attributes:
        COLLAPSE_THRESHOLD: 启用静态清单折叠的最低版本.
        DEFAULT_VERSION_KEY: 动态权限折叠规则使用的版本键.
        REFERENCES: 版本键到参考清单的映射.

    Example:
        >>> reference = MySQLPrivilegeTable.latest_before("8.4")
        >>> "SELECT" in reference.static_privileges
        True

    """

    COLLAPSE_THRESHOLD = "8.0.0"
    DEFAULT_VERSION_KEY = "8.0"

    REFERENCES: ClassVar[dict[str, PrivilegeReference]] = {
        "8.0": PrivilegeReference(
            version_key="8.0",
            static_privileges=MYSQL_V8_STATIC_PRIVILEGES,
            dynamic_privileges=MYSQL_V8_DYNAMIC_PRIVILEGES,
        ),
    }

    @classmethod
    def latest_before(cls, version_key: str) -> PrivilegeReference | None:
        """返回不晚于给定版本键的最新参考清单.

        8.4 等尚未单独登记的版本沿用 8.0 的清单.

        Args:
            version_key: 形如 ``"8.4"`` 的主版本号.

        Returns:
            PrivilegeReference | None: 匹配的参考清单,低于所有登记版本时返回 None.

        """
        target = _version_key_tuple(version_key)
        if target is None:
            return None
        candidates = [
            (key_tuple, reference)
            for key, reference in cls.REFERENCES.items()
            if (key_tuple := _version_key_tuple(key)) is not None and key_tuple <= target
        ]
        if not candidates:
            return None
        return max(candidates, key=lambda item: item[0])[1]

    @classmethod
    def dynamic_privileges(cls) -> tuple[str, ...]:
        reference = cls.REFERENCES[cls.DEFAULT_VERSION_KEY]
        return reference.dynamic_privileges


def _version_key_tuple(version_key: str) -> tuple[int, ...] | None:
    try:
        return tuple(int(part) for part in version_key.split("."))
    except ValueError:
        return None


__all__ = [
    "ALL_PRIVILEGES_LONG_FORM",
    "ALL_PRIVILEGES_TOKEN",
    "GRANT_OPTION",
    "MYSQL_V8_DYNAMIC_PRIVILEGES",
    "MYSQL_V8_STATIC_PRIVILEGES",
    "NO_OPTION",
    "NO_SUCH_GRANT_MESSAGE",
    "PROXY_PRIVILEGE",
    "MySQLPrivilegeTable",
    "PrivilegeReference",
]
