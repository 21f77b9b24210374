"""数据库类型常量.

grantsync 只处理 MySQL 语法族的授权,MariaDB 作为同一语法的分支识别.
"""

from __future__ import annotations

from typing import ClassVar


class DatabaseType:
    """数据库类型常量."""

    MYSQL = "mysql"
    MARIADB = "mariadb"

    DEFAULT_PORTS: ClassVar[dict[str, int]] = {
        MYSQL: 3306,
        MARIADB: 3306,
    }
