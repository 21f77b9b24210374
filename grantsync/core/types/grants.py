"""授权同步使用的值对象."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Literal, TypeAlias

from grantsync.core.constants.mysql_privileges import (
    GRANT_OPTION,
    NO_OPTION,
    PROXY_PRIVILEGE,
)

PrivilegeSet: TypeAlias = tuple[str, ...]
GrantOptions: TypeAlias = tuple[str, ...]

ActionKind = Literal["grant", "revoke", "revoke_grant_option"]
OutcomeStatus = Literal["unchanged", "planned", "applied", "failed"]


def normalize_privileges(privileges: Iterable[str]) -> PrivilegeSet:
    """去重并排序权限集合,得到确定性的元组表示."""
    return tuple(sorted(set(privileges)))


def normalize_options(options: Iterable[str]) -> GrantOptions:
    """合并授权选项: 只要出现 GRANT 即视为带 WITH GRANT OPTION."""
    values = set(options)
    if GRANT_OPTION in values:
        return (GRANT_OPTION,)
    return (NO_OPTION,)


def split_principal(principal: str) -> tuple[str, str]:
    """把 ``user@host`` 拆成 (user, host),以最后一个 @ 为界."""
    user, sep, host = principal.rpartition("@")
    if not sep:
        return principal, "%"
    return user, host


@dataclass(frozen=True, slots=True)
class GrantIdentity:
    """授权的唯一标识: 账户(user@host) + 作用对象."""

    user: str
    host: str
    scope: str

    @property
    def principal(self) -> str:
        return f"{self.user}@{self.host}"

    @property
    def name(self) -> str:
        return f"{self.principal}/{self.scope}"

    @classmethod
    def from_principal(cls, principal: str, scope: str) -> GrantIdentity:
        user, host = split_principal(principal)
        return cls(user=user, host=host, scope=scope)


@dataclass(frozen=True, slots=True)
class GrantRecord:
    """某个授权标识上的规范化权限快照."""

    identity: GrantIdentity
    privileges: PrivilegeSet
    options: GrantOptions = (NO_OPTION,)

    @property
    def name(self) -> str:
        return self.identity.name

    @property
    def has_grant_option(self) -> bool:
        return GRANT_OPTION in self.options

    @property
    def is_proxy(self) -> bool:
        return PROXY_PRIVILEGE in self.privileges


@dataclass(frozen=True, slots=True)
class DiffResult:
    """权限差异: 需要回收与需要授予的权限."""

    revoke: PrivilegeSet = ()
    grant: PrivilegeSet = ()

    @property
    def is_empty(self) -> bool:
        return not self.revoke and not self.grant


@dataclass(frozen=True, slots=True)
class MatchedLine:
    """成功识别的 GRANT 行."""

    user: str
    host: str
    scope: str
    privileges_text: str
    modifiers: str = ""


@dataclass(frozen=True, slots=True)
class SkippedLine:
    """无法识别而被跳过的行(横幅、空行、REVOKE 等)."""

    raw: str
    reason: str = "no_match"


ParsedLine: TypeAlias = MatchedLine | SkippedLine


@dataclass(frozen=True, slots=True)
class GrantAction:
    """一条待执行的授权语句."""

    kind: ActionKind
    identity: GrantIdentity
    sql: str
    privileges: PrivilegeSet = ()
    options: GrantOptions = (NO_OPTION,)


@dataclass(frozen=True, slots=True)
class ReconcilePlan:
    """单个授权标识的同步计划."""

    identity: GrantIdentity
    change: Literal["create", "destroy", "privileges", "options", "none"]
    actions: tuple[GrantAction, ...] = ()
    diff: DiffResult = field(default_factory=DiffResult)

    @property
    def name(self) -> str:
        return self.identity.name


@dataclass(slots=True)
class ReconcileOutcome:
    """单个授权标识的同步结果."""

    name: str
    status: OutcomeStatus
    actions: list[GrantAction] = field(default_factory=list)
    applied: int = 0
    error: str | None = None


@dataclass(slots=True)
class ReconcileReport:
    """一轮同步的汇总结果."""

    outcomes: list[ReconcileOutcome] = field(default_factory=list)
    failed_principals: dict[str, str] = field(default_factory=dict)
    flushed: bool = False
    flush_error: str | None = None

    @property
    def failed(self) -> list[ReconcileOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status == "failed"]

    @property
    def ok(self) -> bool:
        return not self.failed and not self.failed_principals and self.flush_error is None


__all__ = [
    "ActionKind",
    "DiffResult",
    "GrantAction",
    "GrantIdentity",
    "GrantOptions",
    "GrantRecord",
    "MatchedLine",
    "OutcomeStatus",
    "ParsedLine",
    "PrivilegeSet",
    "ReconcileOutcome",
    "ReconcileReport",
    "ReconcilePlan",
    "SkippedLine",
    "normalize_options",
    "normalize_privileges",
    "split_principal",
]
