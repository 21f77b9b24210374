"""授权同步编排服务.

一轮同步: 查询现状 -> 与声明比对 -> 执行 GRANT/REVOKE -> FLUSH PRIVILEGES.
每个授权标识独立处理,单个标识失败不影响其他标识.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from grantsync.core.constants.mysql_privileges import ALL_PRIVILEGES_TOKEN
from grantsync.core.exceptions import EngineQueryFailedError, StatementExecutionFailedError
from grantsync.core.types.grants import (
    DiffResult,
    GrantAction,
    GrantIdentity,
    GrantRecord,
    ReconcileOutcome,
    ReconcilePlan,
    ReconcileReport,
)
from grantsync.services.connection_adapters.base import ConnectionAdapterError, ExecutionMode
from grantsync.services.grants.grant_parser import GrantParser
from grantsync.services.grants.privilege_differ import diff_privileges, options_changed
from grantsync.services.grants.statement_builder import FLUSH_PRIVILEGES, build_grant, build_revoke
from grantsync.utils.structlog_config import get_sync_logger, log_error_payload
from grantsync.utils.version_parser import EngineVersion

if TYPE_CHECKING:
    from grantsync.services.connection_adapters.base import GrantExecutor
    from grantsync.services.grants.desired_state import DesiredState


@dataclass(slots=True)
class ObservedState:
    """现状快照: 已解析的授权与查询失败的账户."""

    records: dict[str, GrantRecord] = field(default_factory=dict)
    failed_principals: dict[str, EngineQueryFailedError] = field(default_factory=dict)


class GrantReconcileService:
    """授权同步服务.

    Attributes:
        executor: 数据库执行器.
        logger: 同步日志记录器.

    Example:
        >>> service = GrantReconcileService(executor)
        >>> report = service.reconcile(load_desired_grants('grants.yaml'), dry_run=True)
        >>> report.ok
        True

    """

    def __init__(self, executor: GrantExecutor, *, version: EngineVersion | None = None) -> None:
        self.executor = executor
        self.logger = get_sync_logger()
        self._version = version

    @property
    def version(self) -> EngineVersion:
        """引擎版本,首次访问时查询."""
        if self._version is None:
            self._version = EngineVersion.parse(self.executor.get_version())
            self.logger.info(
                "mysql_version_detected",
                module="grant_reconcile",
                flavor=self._version.flavor,
                version=str(self._version),
            )
        return self._version

    # ------------------------------------------------------------------
    # 现状采集
    # ------------------------------------------------------------------
    def collect_observed(self, principals: Iterable[str] | None = None) -> ObservedState:
        """逐个账户执行 SHOW GRANTS 并解析.

        Args:
            principals: 需要采集的账户;为 None 时采集 mysql.user 中的全部账户.

        Returns:
            ObservedState: 解析结果.查询失败的账户记录在 failed_principals 中,不影响其他账户.

        """
        targets = list(self.executor.list_principals() if principals is None else principals)
        parser = GrantParser(self.version)
        state = ObservedState()
        for principal in targets:
            try:
                records = self._collect_principal(parser, principal)
            except EngineQueryFailedError as exc:
                self.logger.error(
                    "mysql_grant_query_failed",
                    module="grant_reconcile",
                    principal=principal,
                    **log_error_payload(exc),
                )
                state.failed_principals[principal] = exc
                continue
            state.records.update(records)

        self.logger.info(
            "mysql_grants_collected",
            module="grant_reconcile",
            principal_count=len(targets),
            grant_count=len(state.records),
            failed_principal_count=len(state.failed_principals),
        )
        return state

    def _collect_principal(self, parser: GrantParser, principal: str) -> dict[str, GrantRecord]:
        try:
            raw_output = self.executor.run_grant_query(principal)
        except ConnectionAdapterError as exc:
            return parser.parse_principal_output(principal, error=exc)
        return parser.parse_principal_output(principal, raw_output)

    # ------------------------------------------------------------------
    # 计划
    # ------------------------------------------------------------------
    def plan(self, observed: Mapping[str, GrantRecord], desired: DesiredState) -> list[ReconcilePlan]:
        """为每条声明生成同步计划.

        未声明的现有授权保持不动.

        Args:
            observed: 现有授权,以授权标识为键.
            desired: 授权声明.

        Returns:
            list[ReconcilePlan]: 按声明顺序排列的计划.

        """
        plans: list[ReconcilePlan] = []
        present = desired.present()
        absent = desired.absent()
        for grant in desired.grants:
            key = f"{grant.user}/{grant.table}"
            if key in absent:
                plans.append(self.plan_destroy(absent[key], observed.get(absent[key].name)))
            else:
                record = present[key]
                plans.append(self.plan_identity(observed.get(record.name), record))
        return plans

    @staticmethod
    def plan_identity(current: GrantRecord | None, target: GrantRecord) -> ReconcilePlan:
        """计算单个授权标识从 current 到 target 的计划.

        - 不存在: 直接 GRANT.
        - 授权选项变化: 先整体回收,再按目标权限与选项重新授予.
        - 权限变化: 按 diff_privileges 回收/授予,沿用当前授权选项.

        Args:
            current: 现有授权,不存在时为 None.
            target: 期望授权.

        Returns:
            ReconcilePlan: 同步计划.

        """
        identity = target.identity
        if current is None:
            action = build_grant(identity, target.privileges, target.options)
            return ReconcilePlan(
                identity=identity,
                change="create",
                actions=(action,),
                diff=DiffResult(grant=target.privileges),
            )

        if options_changed(current.options, target.options):
            actions = [*_revoke_everything(current), build_grant(identity, target.privileges, target.options)]
            return ReconcilePlan(
                identity=identity,
                change="options",
                actions=tuple(actions),
                diff=DiffResult(revoke=current.privileges, grant=target.privileges),
            )

        if current.privileges == target.privileges:
            return ReconcilePlan(identity=identity, change="none")

        diff = diff_privileges(current.privileges, target.privileges)
        actions = []
        if diff.revoke:
            actions.extend(build_revoke(identity, diff.revoke))
        if diff.grant:
            actions.append(build_grant(identity, diff.grant, current.options))
        return ReconcilePlan(identity=identity, change="privileges", actions=tuple(actions), diff=diff)

    @staticmethod
    def plan_destroy(identity: GrantIdentity, current: GrantRecord | None) -> ReconcilePlan:
        """ensure=absent: 回收现有授权;不存在时无需操作."""
        if current is None:
            return ReconcilePlan(identity=identity, change="none")
        return ReconcilePlan(
            identity=identity,
            change="destroy",
            actions=tuple(_revoke_everything(current)),
            diff=DiffResult(revoke=current.privileges),
        )

    # ------------------------------------------------------------------
    # 执行
    # ------------------------------------------------------------------
    def apply(self, plans: Iterable[ReconcilePlan], *, dry_run: bool = False) -> ReconcileReport:
        """依次执行计划.

        单个授权标识的语句失败时记录为 failed(已执行的语句不回滚),继续处理其他标识.
        有语句成功执行时最后发送一次 FLUSH PRIVILEGES.

        Args:
            plans: 同步计划.
            dry_run: 只生成语句,不执行.

        Returns:
            ReconcileReport: 汇总结果.

        """
        report = ReconcileReport()
        for plan in plans:
            report.outcomes.append(self._apply_plan(plan, dry_run=dry_run))

        if dry_run or not any(outcome.applied for outcome in report.outcomes):
            return report

        try:
            self.executor.run_statement(FLUSH_PRIVILEGES, ExecutionMode.REGULAR)
        except ConnectionAdapterError as exc:
            error = StatementExecutionFailedError(
                f"{FLUSH_PRIVILEGES} 执行失败: {exc}",
                extra={"sql": FLUSH_PRIVILEGES},
            )
            self.logger.error("mysql_flush_privileges_failed", module="grant_reconcile", **log_error_payload(error))
            report.flush_error = error.message
        else:
            report.flushed = True
        return report

    def _apply_plan(self, plan: ReconcilePlan, *, dry_run: bool) -> ReconcileOutcome:
        outcome = ReconcileOutcome(name=plan.name, status="unchanged", actions=list(plan.actions))
        if not plan.actions:
            return outcome
        if dry_run:
            outcome.status = "planned"
            return outcome

        try:
            outcome.applied = self._execute_actions(plan.actions)
        except StatementExecutionFailedError as exc:
            outcome.status = "failed"
            outcome.applied = int(exc.extra.get("applied", 0))
            outcome.error = exc.message
            self.logger.error(
                "mysql_grant_apply_failed",
                module="grant_reconcile",
                identity=plan.name,
                change=plan.change,
                partially_applied=exc.partially_applied,
                **log_error_payload(exc),
            )
            return outcome

        outcome.status = "applied"
        self.logger.info(
            "mysql_grant_applied",
            module="grant_reconcile",
            identity=plan.name,
            change=plan.change,
            revoke=list(plan.diff.revoke),
            grant=list(plan.diff.grant),
        )
        return outcome

    def _execute_actions(self, actions: Iterable[GrantAction]) -> int:
        applied = 0
        for action in actions:
            try:
                self.executor.run_statement(action.sql, ExecutionMode.SYSTEM)
            except ConnectionAdapterError as exc:
                raise StatementExecutionFailedError(
                    f"授权语句执行失败: {action.sql}: {exc}",
                    extra={"sql": action.sql, "identity": action.identity.name, "applied": applied},
                ) from exc
            applied += 1
        return applied

    def reconcile(
        self,
        desired: DesiredState,
        *,
        dry_run: bool = False,
        principals: Iterable[str] | None = None,
    ) -> ReconcileReport:
        """执行一轮完整同步.

        Args:
            desired: 授权声明.
            dry_run: 只生成语句,不执行.
            principals: 需要采集的账户,缺省为声明中出现的账户.

        Returns:
            ReconcileReport: 汇总结果;查询失败账户下的声明不会被执行.

        """
        if principals is None:
            principals = sorted({grant.user for grant in desired.grants})
        observed = self.collect_observed(principals)

        plans = []
        skipped: list[ReconcileOutcome] = []
        for plan in self.plan(observed.records, desired):
            failure = observed.failed_principals.get(plan.identity.principal)
            if failure is not None:
                skipped.append(ReconcileOutcome(name=plan.name, status="failed", error=failure.message))
                continue
            plans.append(plan)

        report = self.apply(plans, dry_run=dry_run)
        report.outcomes.extend(skipped)
        report.failed_principals.update(
            {principal: error.message for principal, error in observed.failed_principals.items()},
        )
        return report


def _revoke_everything(current: GrantRecord) -> list[GrantAction]:
    """整体回收现有授权;PROXY 授权按原权限回收,其余回收 ALL."""
    if current.is_proxy:
        return build_revoke(current.identity, current.privileges)
    return build_revoke(current.identity, (ALL_PRIVILEGES_TOKEN,))


__all__ = ["GrantReconcileService", "ObservedState"]
