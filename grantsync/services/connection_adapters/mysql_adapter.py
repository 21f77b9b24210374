"""MySQL 授权执行器(pymysql)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pymysql

from grantsync.core.types.grants import split_principal
from grantsync.utils.structlog_config import get_db_logger

from .base import ConnectionAdapterError, ExecutionMode, QueryResult

if TYPE_CHECKING:
    from grantsync.settings import Settings

MYSQL_DRIVER_EXCEPTIONS: tuple[type[BaseException], ...] = (pymysql.MySQLError,)

MYSQL_CONNECTION_EXCEPTIONS: tuple[type[BaseException], ...] = (
    ConnectionAdapterError,
    ConnectionError,
    TimeoutError,
    OSError,
    *MYSQL_DRIVER_EXCEPTIONS,
)

LIST_PRINCIPALS_SQL = "SELECT CONCAT(User, '@', Host) AS principal FROM mysql.user ORDER BY User, Host"


class MySQLGrantConnection:
    """MySQL 授权执行器.

    system 与 regular 两种执行上下文各自维护一个惰性建立的连接.

    Attributes:
        settings: 运行时设置.
        connections: 执行上下文到 pymysql 连接的映射.

    Example:
        >>> with MySQLGrantConnection(get_settings()) as executor:
        ...     executor.run_grant_query('app@%')

    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.db_logger = get_db_logger()
        self.connections: dict[ExecutionMode, Any] = {}

    def __enter__(self) -> MySQLGrantConnection:
        return self

    def __exit__(self, *_exc_info: object) -> None:
        self.close()

    def connect(self, mode: ExecutionMode = ExecutionMode.SYSTEM) -> Any:
        """建立(或复用)指定执行上下文的连接.

        Args:
            mode: 执行上下文.

        Returns:
            pymysql 连接对象.

        Raises:
            ConnectionAdapterError: 连接失败时抛出,保留驱动错误文本.

        """
        existing = self.connections.get(mode)
        if existing is not None:
            return existing

        if mode is ExecutionMode.SYSTEM:
            user, password = self.settings.mysql_system_user, self.settings.mysql_system_password
        else:
            user, password = self.settings.regular_user, self.settings.regular_password

        try:
            connection = pymysql.connect(
                host=self.settings.mysql_host,
                port=self.settings.mysql_port,
                user=user,
                password=password,
                charset="utf8mb4",
                autocommit=True,
                connect_timeout=self.settings.mysql_connect_timeout,
                read_timeout=self.settings.mysql_read_timeout,
                write_timeout=self.settings.mysql_read_timeout,
            )
        except MYSQL_CONNECTION_EXCEPTIONS as exc:
            self.db_logger.exception(
                "mysql_connect_failed",
                module="connection",
                host=self.settings.mysql_host,
                port=self.settings.mysql_port,
                mode=mode.value,
                error=str(exc),
            )
            raise ConnectionAdapterError(str(exc)) from exc
        self.connections[mode] = connection
        return connection

    def close(self) -> None:
        """关闭所有连接."""
        for mode, connection in list(self.connections.items()):
            try:
                connection.close()
            except MYSQL_CONNECTION_EXCEPTIONS as exc:
                self.db_logger.warning(
                    "mysql_disconnect_failed",
                    module="connection",
                    mode=mode.value,
                    error=str(exc),
                )
            finally:
                self.connections.pop(mode, None)

    def execute_query(
        self,
        query: str,
        params: tuple[Any, ...] | None = None,
        *,
        mode: ExecutionMode = ExecutionMode.REGULAR,
    ) -> QueryResult:
        """执行 SQL 并返回全部结果.

        Raises:
            ConnectionAdapterError: 驱动报错时抛出,消息为服务端原始错误.

        """
        connection = self.connect(mode)
        cursor = connection.cursor()
        try:
            cursor.execute(query, params)
            return list(cursor.fetchall())
        except MYSQL_DRIVER_EXCEPTIONS as exc:
            raise ConnectionAdapterError(str(exc)) from exc
        finally:
            cursor.close()

    def run_grant_query(self, principal: str) -> str:
        user, host = split_principal(principal)
        rows = self.execute_query("SHOW GRANTS FOR %s@%s", (user, host), mode=ExecutionMode.REGULAR)
        return "\n".join(str(row[0]) for row in rows if row)

    def run_statement(self, sql: str, mode: ExecutionMode = ExecutionMode.SYSTEM) -> QueryResult:
        self.db_logger.debug("mysql_statement_execute", module="connection", sql=sql, mode=mode.value)
        return self.execute_query(sql, mode=mode)

    def get_version(self) -> str | None:
        """查询数据库版本,失败时返回 None."""
        try:
            result = self.execute_query("SELECT VERSION()")
        except ConnectionAdapterError:
            return None
        if result and result[0]:
            value = result[0][0]
            return value if isinstance(value, str) else None
        return None

    def list_principals(self) -> list[str]:
        rows = self.execute_query(LIST_PRINCIPALS_SQL, mode=ExecutionMode.SYSTEM)
        return [str(row[0]) for row in rows if row and row[0]]


__all__ = ["MySQLGrantConnection"]
