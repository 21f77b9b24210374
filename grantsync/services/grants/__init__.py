"""授权同步模块.

主要组件:
- GrantParser: SHOW GRANTS 输出解析
- diff_privileges: 权限差异计算
- build_grant / build_revoke: 语句拼装
- load_desired_grants: 授权声明加载
- GrantReconcileService: 同步编排
"""

from .desired_state import DesiredGrant, DesiredState, build_desired_state, load_desired_grants
from .grant_parser import GrantParser
from .privilege_differ import diff_privileges, options_changed
from .reconcile_service import GrantReconcileService, ObservedState
from .statement_builder import FLUSH_PRIVILEGES, build_grant, build_revoke

__all__ = [
    "FLUSH_PRIVILEGES",
    "DesiredGrant",
    "DesiredState",
    "GrantParser",
    "GrantReconcileService",
    "ObservedState",
    "build_desired_state",
    "build_grant",
    "build_revoke",
    "diff_privileges",
    "load_desired_grants",
    "options_changed",
]
