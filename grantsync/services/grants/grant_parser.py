"""MySQL SHOW GRANTS 输出解析器.

把 ``SHOW GRANTS FOR user@host`` 返回的自由文本转换为按授权标识聚合的 GrantRecord.
解析是纯函数,不做任何 I/O.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from grantsync.core.constants.mysql_privileges import (
    ALL_PRIVILEGES_LONG_FORM,
    ALL_PRIVILEGES_TOKEN,
    GRANT_OPTION,
    NO_OPTION,
    NO_SUCH_GRANT_MESSAGE,
    MySQLPrivilegeTable,
)
from grantsync.core.exceptions import EngineQueryFailedError
from grantsync.core.types.grants import (
    GrantIdentity,
    GrantOptions,
    GrantRecord,
    MatchedLine,
    ParsedLine,
    PrivilegeSet,
    SkippedLine,
    normalize_options,
    normalize_privileges,
)
from grantsync.utils.structlog_config import get_sync_logger
from grantsync.utils.version_parser import EngineVersion

# 匹配: GRANT (SELECT, UPDATE) ON (*.*) TO (root)@(127.0.0.1)( WITH GRANT OPTION)
GRANT_LINE_PATTERN = re.compile(r"^GRANT\s(.+)\sON\s(.+)\sTO\s(.*)@(.*?)(\s.*)?$")
# 只在不位于括号内的逗号处切分
PRIVILEGE_SEPARATOR_PATTERN = re.compile(r"\s*,\s*(?![^(]*\))")
COLUMN_PRIVILEGE_PATTERN = re.compile(r"^(\w+)\s*\((.*)\)$", re.DOTALL)
COLUMN_SEPARATOR_PATTERN = re.compile(r"\s*,\s*")
GRANT_OPTION_PATTERN = re.compile(r"WITH\s+GRANT\s+OPTION", re.IGNORECASE)
WHITESPACE_PATTERN = re.compile(r"\s+")

QUOTE_CHARACTERS = str.maketrans("", "", "'`\"")


def strip_quotes(text: str) -> str:
    """移除单引号、反引号和双引号."""
    return text.translate(QUOTE_CHARACTERS)


def normalize_scope(scope: str) -> str:
    """把 MySQL 输出的双反斜杠还原为单反斜杠."""
    return scope.strip().replace("\\\\", "\\")


def normalize_privilege_token(token: str) -> str:
    """规范化单个权限.

    - 列级权限: ``insert (b,a,a)`` -> ``INSERT (a, b)``
    - ``ALL PRIVILEGES`` -> ``ALL``
    - 其余权限转为大写并压缩内部空白

    Args:
        token: 已按顶层逗号切分后的单个权限文本.

    Returns:
        str: 规范化后的权限.

    """
    stripped = token.strip()
    if "(" in stripped:
        column_match = COLUMN_PRIVILEGE_PATTERN.match(stripped)
        if column_match:
            privilege_type, columns_text = column_match.groups()
            columns = sorted({column for column in COLUMN_SEPARATOR_PATTERN.split(columns_text.strip()) if column})
            return f"{privilege_type.upper()} ({', '.join(columns)})"
    collapsed = WHITESPACE_PATTERN.sub(" ", stripped).upper()
    if collapsed == ALL_PRIVILEGES_LONG_FORM:
        return ALL_PRIVILEGES_TOKEN
    return collapsed


def split_privileges(privileges_text: str) -> list[str]:
    """按顶层逗号切分权限列表并逐项规范化.

    Example:
        >>> split_privileges("SELECT (a,b), UPDATE (c)")
        ['SELECT (a, b)', 'UPDATE (c)']

    """
    tokens = PRIVILEGE_SEPARATOR_PATTERN.split(privileges_text.strip())
    return [normalize_privilege_token(token) for token in tokens if token.strip()]


def parse_grant_options(modifiers: str | None) -> GrantOptions:
    """根据尾部修饰判断是否带 WITH GRANT OPTION."""
    if modifiers and GRANT_OPTION_PATTERN.search(modifiers):
        return (GRANT_OPTION,)
    return (NO_OPTION,)


def parse_line(line: str) -> ParsedLine:
    """识别单行 GRANT 语句.

    引号统一剔除后再匹配;无法匹配的行返回 SkippedLine,不视为错误.

    Args:
        line: SHOW GRANTS 输出中的一行.

    Returns:
        ParsedLine: MatchedLine 或 SkippedLine.

    """
    munged = strip_quotes(line).strip()
    if not munged:
        return SkippedLine(raw=line, reason="blank")
    match = GRANT_LINE_PATTERN.match(munged)
    if not match:
        return SkippedLine(raw=line)
    privileges_text, scope, user, host, modifiers = match.groups()
    return MatchedLine(
        user=user,
        host=host,
        scope=normalize_scope(scope),
        privileges_text=privileges_text,
        modifiers=(modifiers or "").strip(),
    )


def merge_records(existing: GrantRecord | None, incoming: GrantRecord) -> GrantRecord:
    """合并同一授权标识的两条记录: 权限取并集,授权选项取或."""
    if existing is None:
        return incoming
    return GrantRecord(
        identity=incoming.identity,
        privileges=normalize_privileges((*existing.privileges, *incoming.privileges)),
        options=normalize_options((*existing.options, *incoming.options)),
    )


def collapse_all_privileges(privileges: PrivilegeSet, version: EngineVersion) -> PrivilegeSet:
    """把 SHOW GRANTS 展开后的权限清单重新折叠为 ALL.

    两条规则取或:
    - MySQL >= 8.0.0 且权限集合恰好等于该版本的静态权限清单;
    - 去掉动态权限后只剩 ``ALL``(与版本无关).

    Args:
        privileges: 已排序去重的权限集合.
        version: 引擎版本.

    Returns:
        PrivilegeSet: 折叠后的权限集合.

    """
    # 逐行合并后立即折叠: 依赖 MySQL 先输出静态权限行、后输出动态权限行的顺序.
    # 动态行在前时合并结果两条规则都不命中,保持展开形式.
    if version.newer_than(MySQLPrivilegeTable.COLLAPSE_THRESHOLD):
        reference = MySQLPrivilegeTable.latest_before(version.version_key)
        if reference is not None and privileges == reference.static_privileges:
            return (ALL_PRIVILEGES_TOKEN,)

    dynamic = set(MySQLPrivilegeTable.dynamic_privileges())
    remainder = [privilege for privilege in privileges if privilege not in dynamic]
    if remainder == [ALL_PRIVILEGES_TOKEN]:
        return (ALL_PRIVILEGES_TOKEN,)
    return privileges


def is_no_grants_error(error: BaseException | str | None) -> bool:
    """判断错误是否为 "账户没有任何授权"."""
    if error is None:
        return False
    return NO_SUCH_GRANT_MESSAGE in (error if isinstance(error, str) else f"{error!r} {error}")


class GrantParser:
    """SHOW GRANTS 输出解析器.

    Attributes:
        version: 引擎版本,决定 ALL 折叠规则.
        logger: 同步日志记录器.

    Example:
        >>> parser = GrantParser(EngineVersion.parse('8.0.32'))
        >>> records = parser.parse("GRANT SELECT ON `db`.* TO `app`@`%`")
        >>> records['app@%/db.*'].privileges
        ('SELECT',)

    """

    def __init__(self, version: EngineVersion | None = None) -> None:
        self.version = version or EngineVersion.unknown()
        self.logger = get_sync_logger()

    def parse(self, raw_output: str | Iterable[str]) -> dict[str, GrantRecord]:
        """解析一个或多个账户的 SHOW GRANTS 输出.

        Args:
            raw_output: 多行文本或逐行字符串序列.

        Returns:
            dict[str, GrantRecord]: 以 ``user@host/scope`` 为键,每个授权标识一条记录.

        """
        lines = raw_output.splitlines() if isinstance(raw_output, str) else list(raw_output)
        records: dict[str, GrantRecord] = {}
        for line in lines:
            parsed = parse_line(line)
            if isinstance(parsed, SkippedLine):
                if parsed.reason != "blank":
                    self.logger.debug(
                        "mysql_grant_line_skipped",
                        module="grant_parser",
                        line=parsed.raw,
                        reason=parsed.reason,
                    )
                continue
            record = self._build_record(parsed)
            merged = merge_records(records.get(record.name), record)
            records[record.name] = GrantRecord(
                identity=merged.identity,
                privileges=collapse_all_privileges(merged.privileges, self.version),
                options=merged.options,
            )
        return records

    def parse_principal_output(
        self,
        principal: str,
        raw_output: str | Iterable[str] | None = None,
        error: BaseException | str | None = None,
    ) -> dict[str, GrantRecord]:
        """按失败策略解析单个账户的查询结果.

        Args:
            principal: 账户,``user@host``.
            raw_output: 查询成功时的原始输出.
            error: 查询失败时的错误.

        Returns:
            dict[str, GrantRecord]: 解析结果;"没有授权" 错误返回空字典.

        Raises:
            EngineQueryFailedError: 其余查询错误,附带原始错误文本.

        """
        if error is not None:
            if is_no_grants_error(error):
                self.logger.info(
                    "mysql_grants_not_defined",
                    module="grant_parser",
                    principal=principal,
                )
                return {}
            engine_error = str(error)
            raise EngineQueryFailedError(
                f"查询账户授权失败: {principal}: {engine_error}",
                extra={"principal": principal, "engine_error": engine_error},
            ) from (error if isinstance(error, BaseException) else None)
        if raw_output is None:
            return {}
        return self.parse(raw_output)

    @staticmethod
    def _build_record(line: MatchedLine) -> GrantRecord:
        return GrantRecord(
            identity=GrantIdentity(user=line.user, host=line.host, scope=line.scope),
            privileges=normalize_privileges(split_privileges(line.privileges_text)),
            options=parse_grant_options(line.modifiers),
        )


__all__ = [
    "GrantParser",
    "collapse_all_privileges",
    "is_no_grants_error",
    "merge_records",
    "normalize_privilege_token",
    "normalize_scope",
    "parse_grant_options",
    "parse_line",
    "split_privileges",
    "strip_quotes",
]
