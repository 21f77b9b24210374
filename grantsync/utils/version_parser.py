"""数据库版本解析工具
使用正则表达式从 SELECT VERSION() 的输出中提取版本信息.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from grantsync.core.constants.database_types import DatabaseType

_VERSION_PATTERN = re.compile(r"(\d+)\.(\d+)(?:\.(\d+))?")


@dataclass(frozen=True, slots=True)
class EngineVersion:
    """数据库引擎版本与发行分支.

    Attributes:
        flavor: 发行分支,``mysql`` 或 ``mariadb``.
        numbers: 版本号三元组,例如 (8, 0, 32).
        original: 原始版本字符串.

    Example:
        >>> version = EngineVersion.parse('8.0.32-community')
        >>> version.newer_than('8.0.0')
        True
        >>> EngineVersion.parse('10.6.12-MariaDB').newer_than('8.0.0')
        False

    """

    flavor: str
    numbers: tuple[int, int, int]
    original: str = ""

    @classmethod
    def parse(cls, version_string: str | None) -> EngineVersion:
        """解析版本字符串.

        无法识别的输入按 MySQL 0.0.0 处理,不会触发任何依赖版本的规则.

        Args:
            version_string: 原始版本字符串,例如 '8.0.32' 或 '10.11.2-MariaDB-log'.

        Returns:
            EngineVersion: 解析结果.

        """
        text = (version_string or "").strip()
        flavor = DatabaseType.MARIADB if "mariadb" in text.lower() else DatabaseType.MYSQL
        match = _VERSION_PATTERN.search(text)
        if not match:
            return cls(flavor=flavor, numbers=(0, 0, 0), original=text)
        major, minor, patch = match.groups()
        return cls(flavor=flavor, numbers=(int(major), int(minor), int(patch or 0)), original=text)

    @classmethod
    def unknown(cls) -> EngineVersion:
        return cls.parse(None)

    @property
    def version_key(self) -> str:
        """主版本号,例如 '8.0'."""
        return f"{self.numbers[0]}.{self.numbers[1]}"

    def newer_than(self, minimum: str, *, flavor: str = DatabaseType.MYSQL) -> bool:
        """判断是否为指定分支且版本不低于 ``minimum``.

        Args:
            minimum: 最低版本,例如 '8.0.0'.
            flavor: 需要匹配的发行分支.

        Returns:
            bool: 分支一致且版本 >= minimum 时返回 True.

        """
        if self.flavor != flavor:
            return False
        return self.numbers >= _parse_numbers(minimum)

    def __str__(self) -> str:
        return self.original or ".".join(str(part) for part in self.numbers)


def _parse_numbers(value: str) -> tuple[int, int, int]:
    parts = [int(part) for part in value.split(".")[:3]]
    while len(parts) < 3:
        parts.append(0)
    return parts[0], parts[1], parts[2]


__all__ = ["EngineVersion"]
