"""grantsync 命令行入口.

用法:
    grantsync plan --grants grants.yaml
    grantsync apply --grants grants.yaml --format json
"""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Sequence

from grantsync.core.exceptions import AppError
from grantsync.core.types.grants import ReconcileReport
from grantsync.services.connection_adapters.base import ConnectionAdapterError
from grantsync.services.connection_adapters.mysql_adapter import MySQLGrantConnection
from grantsync.services.grants.desired_state import load_desired_grants
from grantsync.services.grants.reconcile_service import GrantReconcileService
from grantsync.settings import APP_VERSION, get_settings
from grantsync.utils.structlog_config import configure_structlog, get_system_logger, log_error_payload

SUPPORTED_FORMATS = {"table", "json"}
EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="grantsync",
        description="Reconcile declared MySQL grants against SHOW GRANTS output.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for command, help_text in (
        ("plan", "Print the GRANT/REVOKE statements without executing them."),
        ("apply", "Execute the GRANT/REVOKE statements and flush privileges."),
    ):
        sub = subparsers.add_parser(command, help=help_text)
        sub.add_argument(
            "--grants",
            default=None,
            help="Path to the grants YAML file (defaults to GRANTS_FILE).",
        )
        sub.add_argument(
            "--principal",
            action="append",
            default=None,
            help="Only collect grants for this user@host (repeatable).",
        )
        sub.add_argument(
            "--format",
            choices=sorted(SUPPORTED_FORMATS),
            default="table",
            help="Output format (default: table).",
        )
    return parser.parse_args(argv)


def report_to_dict(report: ReconcileReport) -> dict:
    return {
        "ok": report.ok,
        "flushed": report.flushed,
        "flush_error": report.flush_error,
        "failed_principals": report.failed_principals,
        "outcomes": [
            {
                "name": outcome.name,
                "status": outcome.status,
                "applied": outcome.applied,
                "error": outcome.error,
                "statements": [action.sql for action in outcome.actions],
            }
            for outcome in report.outcomes
        ],
    }


def print_table(report: ReconcileReport) -> None:
    changed = [outcome for outcome in report.outcomes if outcome.status != "unchanged"]
    if not changed and report.ok:
        print("All grants are in sync.")
        return

    for outcome in changed:
        print(f"[{outcome.status}] {outcome.name}")
        for action in outcome.actions:
            print(f"    {action.sql};")
        if outcome.error:
            print(f"    error: {outcome.error}")
    for principal, error in report.failed_principals.items():
        print(f"[failed] {principal}: {error}")
    if report.flush_error:
        print(f"[failed] FLUSH PRIVILEGES: {report.flush_error}")


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    settings = get_settings()
    configure_structlog(settings.log_level, json_logs=settings.log_json)
    logger = get_system_logger()

    try:
        desired = load_desired_grants(args.grants or settings.grants_file)
        with MySQLGrantConnection(settings) as executor:
            service = GrantReconcileService(executor)
            report = service.reconcile(desired, dry_run=args.command == "plan", principals=args.principal)
    except (AppError, ConnectionAdapterError) as exc:
        logger.error("grantsync_run_failed", module="cli", command=args.command, **log_error_payload(exc))
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_USAGE if isinstance(exc, AppError) and exc.recoverable else EXIT_FAILED

    if args.format == "json":
        print(json.dumps(report_to_dict(report), indent=2, ensure_ascii=False))
    else:
        print_table(report)
    return EXIT_OK if report.ok else EXIT_FAILED


if __name__ == "__main__":
    raise SystemExit(main())
