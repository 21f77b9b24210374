"""权限差异计算."""

from __future__ import annotations

from grantsync.core.constants.mysql_privileges import ALL_PRIVILEGES_TOKEN
from grantsync.core.types.grants import DiffResult, GrantOptions, PrivilegeSet, normalize_options, normalize_privileges


def diff_privileges(previous: PrivilegeSet, desired: PrivilegeSet) -> DiffResult:
    """计算从 previous 收敛到 desired 所需的回收/授予权限.

    规则按顺序匹配,先命中者生效:

    1. previous 含 ALL: 回收 previous 全部(含 ALL),再授予 desired.
       对 ALL 做逐项差集没有意义,只能先全部回收再按需授予.
    2. desired 含 ALL: 不回收,直接授予 desired.
    3. 其余情况: 回收 previous - desired,授予 desired - previous.

    Args:
        previous: 当前权限集合.
        desired: 目标权限集合.

    Returns:
        DiffResult: 回收与授予的权限.

    Example:
        >>> diff_privileges(('INSERT', 'SELECT'), ('INSERT', 'UPDATE'))
        DiffResult(revoke=('SELECT',), grant=('UPDATE',))

    """
    previous = normalize_privileges(previous)
    desired = normalize_privileges(desired)
    if ALL_PRIVILEGES_TOKEN in previous:
        return DiffResult(revoke=previous, grant=desired)
    if ALL_PRIVILEGES_TOKEN in desired:
        return DiffResult(revoke=(), grant=desired)
    return DiffResult(
        revoke=normalize_privileges(set(previous) - set(desired)),
        grant=normalize_privileges(set(desired) - set(previous)),
    )


def options_changed(previous: GrantOptions, desired: GrantOptions) -> bool:
    """判断授权选项(WITH GRANT OPTION)是否变化."""
    return normalize_options(previous) != normalize_options(desired)


__all__ = ["diff_privileges", "options_changed"]
