"""CLI adapter to recompute account balances and report integrity issues.

This module wires the ReconcileAccountsUseCase to the configured ledger
store and prints a short report. Set ``RECONCILE_WRITE_BACK=1`` to rewrite
stale cached balances.
"""

import asyncio
import os

from balanze_ledger.application.use_cases.reconcile_accounts import (
    ReconcileAccountsUseCase,
    ReconciliationReport,
)
from balanze_ledger.domain.errors import LedgerError
from balanze_ledger.infrastructure.container import build_ledger_store
from balanze_ledger.infrastructure.logging.logger import get_app_logger
from balanze_ledger.infrastructure.settings import LedgerSettings
from balanze_ledger.utils.decimal_utils import format_amount


def _format_report(report: ReconciliationReport) -> list[str]:
    """Render the report as printable lines."""
    lines = [
        f"Reconciled {len(report.accounts)} accounts: "
        f"{len(report.orphaned_transactions)} orphaned transactions, "
        f"{len(report.mismatches)} stale balances, "
        f"{len(report.link_violations)} DPS link issues."
    ]
    for account in report.accounts:
        lines.append(
            f"  {account.name}: "
            f"{format_amount(account.calculated_balance, account.currency)}"
        )
    for mismatch in report.mismatches:
        lines.append(
            f"  stale: {mismatch.account_name} cached {mismatch.cached}, "
            f"ledger {mismatch.recomputed}"
        )
    for orphan in report.orphaned_transactions:
        lines.append(
            f"  orphan: transaction {orphan.id} -> account "
            f"{orphan.account_id}"
        )
    for violation in report.link_violations:
        lines.append(f"  link: {violation}")
    if report.written_back:
        lines.append(f"Rewrote {report.written_back} cached balances.")
    return lines


def main() -> None:
    """Run the reconciliation use case."""
    logger = get_app_logger()
    settings = LedgerSettings.from_env()
    write_back = os.getenv("RECONCILE_WRITE_BACK", "").strip().lower() in (
        "1",
        "true",
        "yes",
    )
    try:
        store = build_ledger_store(settings)
        use_case = ReconcileAccountsUseCase(store, logger=logger)
        report = asyncio.run(use_case.execute(write_back=write_back))
    except (LedgerError, RuntimeError) as exc:
        logger.error(f"Reconciliation failed: {exc}")
        print(f"Reconciliation failed: {exc}")
        return

    for line in _format_report(report):
        print(line)


if __name__ == "__main__":  # pragma: no cover
    main()
