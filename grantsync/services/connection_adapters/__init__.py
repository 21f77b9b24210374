"""数据库执行器模块.

主要组件:
- GrantExecutor: 同步服务依赖的执行器协议
- MySQLGrantConnection: 基于 pymysql 的实现
"""

from .base import ConnectionAdapterError, ExecutionMode, GrantExecutor
from .mysql_adapter import MySQLGrantConnection

__all__ = [
    "ConnectionAdapterError",
    "ExecutionMode",
    "GrantExecutor",
    "MySQLGrantConnection",
]
