"""GRANT/REVOKE 语句拼装."""

from __future__ import annotations

import re
from collections.abc import Iterable

from grantsync.core.constants.mysql_privileges import (
    ALL_PRIVILEGES_LONG_FORM,
    ALL_PRIVILEGES_TOKEN,
    GRANT_OPTION,
    NO_OPTION,
    PROXY_PRIVILEGE,
)
from grantsync.core.types.grants import GrantAction, GrantIdentity, GrantOptions, PrivilegeSet, split_principal

FLUSH_PRIVILEGES = "FLUSH PRIVILEGES"

_ROUTINE_SCOPE_PATTERN = re.compile(r"^(FUNCTION|PROCEDURE) (.*)(\..*)$")
_SCOPE_PATTERN = re.compile(r"^(.*?)(\..*)$")


def quote_principal(principal: str) -> str:
    """``user@host`` -> ``'user'@'host'``."""
    user, host = split_principal(principal)
    return f"'{_escape_literal(user)}'@'{_escape_literal(host)}'"


def quote_scope(scope: str) -> str:
    """给作用对象的库名加反引号.

    ``*.*`` 原样返回;``FUNCTION db.f`` / ``PROCEDURE db.p`` 保留关键字,只给库名加引号.

    Example:
        >>> quote_scope('app_db.*')
        '`app_db`.*'

    """
    if scope == "*.*":
        return scope
    routine_match = _ROUTINE_SCOPE_PATTERN.match(scope)
    if routine_match:
        keyword, database, rest = routine_match.groups()
        return f"{keyword} {_quote_identifier(database)}{rest}"
    scope_match = _SCOPE_PATTERN.match(scope)
    if scope_match:
        database, rest = scope_match.groups()
        return f"{_quote_identifier(database)}{rest}"
    return _quote_identifier(scope)


def render_privileges(privileges: Iterable[str]) -> str:
    """权限列表 -> SQL 片段;含 ALL 时输出 ``ALL PRIVILEGES``."""
    values = list(privileges)
    if ALL_PRIVILEGES_TOKEN in values:
        return ALL_PRIVILEGES_LONG_FORM
    return ", ".join(values)


def render_options(options: GrantOptions | None) -> str:
    if options and GRANT_OPTION in options:
        return " WITH GRANT OPTION"
    return ""


def render_target(identity: GrantIdentity, privileges: Iterable[str]) -> str:
    """PROXY 授权的作用对象本身是账户,其余按库表处理."""
    if PROXY_PRIVILEGE in privileges:
        return quote_principal(identity.scope)
    return quote_scope(identity.scope)


def build_grant(identity: GrantIdentity, privileges: PrivilegeSet, options: GrantOptions | None = None) -> GrantAction:
    """生成 GRANT 语句.

    Args:
        identity: 授权标识.
        privileges: 需要授予的权限.
        options: 授权选项,含 GRANT 时追加 WITH GRANT OPTION.

    Returns:
        GrantAction: kind 为 ``grant`` 的动作.

    """
    sql = (
        f"GRANT {render_privileges(privileges)}"
        f" ON {render_target(identity, privileges)}"
        f" TO {quote_principal(identity.principal)}"
        f"{render_options(options)}"
    )
    return GrantAction(
        kind="grant",
        identity=identity,
        sql=sql,
        privileges=tuple(privileges),
        options=tuple(options) if options else (NO_OPTION,),
    )


def build_revoke(
    identity: GrantIdentity,
    privileges: PrivilegeSet = (ALL_PRIVILEGES_TOKEN,),
) -> list[GrantAction]:
    """生成 REVOKE 语句.

    回收 ALL 时,``REVOKE GRANT OPTION`` 必须作为单独语句先执行:
    ``REVOKE ALL PRIVILEGES, GRANT OPTION`` 只在不带 ON 子句时合法,
    且 GRANT OPTION 的回收要求授权仍然存在.PROXY 授权不需要这一步.

    Args:
        identity: 授权标识.
        privileges: 需要回收的权限,缺省为 ALL.

    Returns:
        list[GrantAction]: 按执行顺序排列的 1~2 条动作.

    """
    target = render_target(identity, privileges)
    principal = quote_principal(identity.principal)
    actions: list[GrantAction] = []
    if ALL_PRIVILEGES_TOKEN in privileges and PROXY_PRIVILEGE not in privileges:
        actions.append(
            GrantAction(
                kind="revoke_grant_option",
                identity=identity,
                sql=f"REVOKE GRANT OPTION ON {target} FROM {principal}",
                privileges=(GRANT_OPTION,),
            ),
        )
    actions.append(
        GrantAction(
            kind="revoke",
            identity=identity,
            sql=f"REVOKE {render_privileges(privileges)} ON {target} FROM {principal}",
            privileges=tuple(privileges),
        ),
    )
    return actions


def _quote_identifier(name: str) -> str:
    if name == "*":
        return name
    return f"`{name.replace('`', '``')}`"


def _escape_literal(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "''")


__all__ = [
    "FLUSH_PRIVILEGES",
    "build_grant",
    "build_revoke",
    "quote_principal",
    "quote_scope",
    "render_options",
    "render_privileges",
    "render_target",
]
