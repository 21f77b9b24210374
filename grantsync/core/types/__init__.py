"""核心类型导出."""

from .grants import (
    ActionKind,
    DiffResult,
    GrantAction,
    GrantIdentity,
    GrantOptions,
    GrantRecord,
    MatchedLine,
    OutcomeStatus,
    ParsedLine,
    PrivilegeSet,
    ReconcileOutcome,
    ReconcileReport,
    ReconcilePlan,
    SkippedLine,
    normalize_options,
    normalize_privileges,
    split_principal,
)

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
