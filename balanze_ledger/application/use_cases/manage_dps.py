"""Use cases managing the DPS (recurring deposit) savings sub-account.

A parent account with DPS enabled links to a ``savings`` sub-account through
``dps_savings_account_id``. This module enables, edits and disables that
plan, moves money into it, and retires it through a named-step saga that
relocates the remaining balance:

1. resolve the destination (the parent, or a cash wallet in the same
   currency, created when missing);
2. clear the DPS fields on the parent;
3. delete the savings account (its transactions cascade);
4. credit the captured balance to the destination;
5. refresh accounts and recompute balances.

Steps 2 and 3 run concurrently. Step 4 waits for both and is never
attempted when either failed. Step 5 always runs. The store has no
multi-call transaction and the saga issues no compensation, so a failure
between steps leaves partial state that the returned step outcomes
describe.
"""

import asyncio
from datetime import datetime
from decimal import Decimal
from typing import Callable
from uuid import uuid4

from balanze_ledger.application.ports.ledger_store import LedgerStorePort
from balanze_ledger.domain.constants import (
    CASH_ACCOUNT_TYPE,
    DEFAULT_CASH_WALLET_NAME,
    DPS_ACCOUNT_SUFFIX,
    DPS_CATEGORY,
    DPS_CLEARED_FIELDS,
    DPS_DELETION_TAG,
    DPS_TRANSFER_TAG_PREFIX,
    EXPENSE,
    INCOME,
    SAVINGS_ACCOUNT_TYPE,
)
from balanze_ledger.domain.errors import (
    AccountNotFoundError,
    DPSBalanceDriftError,
    DPSBusyError,
    DPSConfirmationRequiredError,
    DPSDeletionError,
    DPSLinkError,
    LedgerValidationError,
)
from balanze_ledger.domain.models import (
    Account,
    DPSConfig,
    DPSDeletionResult,
    DPSDeletionSnapshot,
    DPSDestination,
    DPSState,
    DPSTransferResult,
    NewAccount,
    NewTransaction,
    SagaStep,
    StepStatus,
)
from balanze_ledger.domain.policies import (
    dps_savings_account_ids,
    dps_state,
    ensure_linked,
    is_dps_savings_account,
)
from balanze_ledger.domain.services.ledger import (
    apply_balances,
    current_balance,
    reconcile_balances,
)
from balanze_ledger.domain.services.validation import (
    validate_amount,
    validate_dps_config,
)
from balanze_ledger.infrastructure.logging.logger import (
    get_app_logger,
    get_usage_logger,
)
from balanze_ledger.utils.time_utils import to_timestamp, utc_now


_DEFAULT_FAILURE_MESSAGE = "Failed to delete DPS account"


class DPSLifecycleManager:
    """Enable, edit, disable and retire DPS savings sub-accounts."""

    def __init__(
        self,
        store: LedgerStorePort,
        logger=None,
        usage_logger=None,
        *,
        reject_on_drift: bool = False,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize the manager.

        Args:
            store: Ledger store used for every read and write.
            logger: Optional logger compatible with logging.Logger-like API.
            usage_logger: Optional logger for user-triggered operations.
            reject_on_drift: Abort a deletion when the live DPS balance no
                longer matches the captured snapshot.
            clock: Source of timestamps for synthetic transactions.
        """
        self._store = store
        self._logger = logger or get_app_logger()
        self._usage_logger = usage_logger or get_usage_logger()
        self._reject_on_drift = reject_on_drift
        self._clock = clock
        self._locks: dict[str, asyncio.Lock] = {}
        self._transient: dict[str, DPSState] = {}

    def state_of(self, account: Account) -> DPSState:
        """Return the lifecycle state, including in-flight transitions."""
        return self._transient.get(account.id, dps_state(account))

    def is_deleting(self, dps_account_id: str) -> bool:
        lock = self._locks.get(dps_account_id)
        return lock is not None and lock.locked()

    async def enable_dps(self, account: Account, config: DPSConfig) -> Account:
        """Enable DPS on an account and link its savings sub-account.

        Args:
            account: Parent account, currently without DPS.
            config: Plan settings, validated before any store call.

        Returns:
            Account: The parent as stored after the update.

        Raises:
            LedgerValidationError: If the config is invalid or DPS is
                already enabled.
            DPSLinkError: If the account is itself a DPS savings account,
                or its linked savings account belongs to another parent.
        """
        validate_dps_config(config)
        if account.has_dps:
            raise LedgerValidationError(
                f"DPS is already enabled for account {account.id}"
            )
        accounts = await self._store.list_accounts()
        if is_dps_savings_account(account, accounts):
            raise DPSLinkError(
                f"Account {account.id} is already a DPS savings account"
            )
        savings = await self._resolve_savings_account(
            account,
            config,
            accounts,
        )
        changes = config.to_account_fields()
        changes["dps_savings_account_id"] = savings.id
        await self._store.update_account(account.id, changes)
        self._logger.info(
            f"DPS enabled on account {account.id} "
            f"(type={config.dps_type}, savings={savings.id})"
        )
        return await self._require_account(account.id)

    async def update_dps(self, account: Account, config: DPSConfig) -> Account:
        """Change the plan settings of an account with DPS enabled."""
        validate_dps_config(config)
        if self.state_of(account) is not DPSState.DPS_ENABLED:
            raise LedgerValidationError(
                f"DPS is not enabled for account {account.id}"
            )
        self._transient[account.id] = DPSState.DPS_EDITING
        try:
            await self._store.update_account(
                account.id,
                config.to_account_fields(),
            )
        finally:
            self._transient.pop(account.id, None)
        self._logger.info(f"DPS settings updated on account {account.id}")
        return await self._require_account(account.id)

    async def disable_dps(
        self,
        account: Account,
        *,
        confirmed: bool,
    ) -> Account:
        """Clear every DPS field on the parent without deleting the savings.

        The former savings account becomes an ordinary, visible account, so
        no balance is lost.

        Raises:
            DPSConfirmationRequiredError: If the user did not confirm.
        """
        if not confirmed:
            raise DPSConfirmationRequiredError(
                f"Disabling DPS on account {account.id} requires confirmation"
            )
        if not account.has_dps and not account.dps_savings_account_id:
            raise LedgerValidationError(
                f"DPS is not enabled for account {account.id}"
            )
        await self._store.update_account(account.id, dict(DPS_CLEARED_FIELDS))
        self._logger.info(
            f"DPS disabled on account {account.id}; savings account "
            f"{account.dps_savings_account_id} kept"
        )
        return await self._require_account(account.id)

    async def capture_deletion(
        self,
        parent: Account,
        dps_account: Account | None = None,
    ) -> DPSDeletionSnapshot:
        """Capture the balance to transfer when the deletion dialog opens.

        The balance is recomputed from the savings account's transactions;
        the cached ``calculated_balance`` is not trusted.

        Args:
            parent: Account owning the DPS plan.
            dps_account: Savings account; looked up from the link if omitted.

        Returns:
            DPSDeletionSnapshot: Amount and currency credited by the saga.
        """
        if dps_account is None:
            if not parent.dps_savings_account_id:
                raise DPSLinkError(
                    f"Account {parent.id} has no DPS savings account"
                )
            dps_account = await self._require_account(
                parent.dps_savings_account_id
            )
        ensure_linked(parent, dps_account)
        transactions = await self._store.list_transactions(dps_account.id)
        balance = current_balance(dps_account, transactions)
        return DPSDeletionSnapshot(
            parent_id=parent.id,
            dps_account_id=dps_account.id,
            dps_account_name=dps_account.name,
            balance=balance,
            currency=dps_account.currency,
            captured_at=self._clock(),
        )

    async def delete_dps_with_transfer(
        self,
        snapshot: DPSDeletionSnapshot,
        destination: DPSDestination | str,
    ) -> DPSDeletionResult:
        """Retire the savings account and credit its captured balance.

        Args:
            snapshot: Values captured when the confirmation dialog opened.
            destination: Main account or cash wallet.

        Returns:
            DPSDeletionResult: Outcome of every step.

        Raises:
            DPSBusyError: If a deletion is already running for the account.
            DPSDeletionError: If a ledger-mutating step failed; the error
                carries the raw collaborator message and the step outcomes.
        """
        destination = DPSDestination(destination)
        dps_id = snapshot.dps_account_id
        if self.is_deleting(dps_id):
            raise DPSBusyError(dps_id)
        lock = self._locks.setdefault(dps_id, asyncio.Lock())
        try:
            async with lock:
                self._transient[snapshot.parent_id] = DPSState.DELETING
                try:
                    return await self._run_deletion_saga(snapshot, destination)
                finally:
                    self._transient.pop(snapshot.parent_id, None)
        finally:
            self._locks.pop(dps_id, None)

    async def transfer_to_dps(
        self,
        parent: Account,
        amount: Decimal,
    ) -> DPSTransferResult:
        """Move money from the parent into its DPS savings account.

        Creates an expense on the parent and an income on the savings
        account with a shared ``dps_transfer_<id>`` tag. When the income
        cannot be written, the expense is deleted again before re-raising.
        """
        validate_amount(amount)
        if amount == 0:
            raise LedgerValidationError("Transfer amount must be positive")
        if not parent.has_dps or not parent.dps_savings_account_id:
            raise DPSLinkError(
                f"Account {parent.id} does not have DPS enabled"
            )
        dps_account = await self._store.get_account(
            parent.dps_savings_account_id
        )
        if dps_account is None:
            raise DPSLinkError("DPS savings account not found")

        transfer_id = uuid4().hex
        tags = frozenset({f"{DPS_TRANSFER_TAG_PREFIX}{transfer_id}"})
        now = self._clock()
        expense = await self._store.create_transaction(
            NewTransaction(
                account_id=parent.id,
                type=EXPENSE,
                amount=amount,
                date=now,
                category=DPS_CATEGORY,
                description=f"DPS Transfer to {dps_account.name}",
                tags=tags,
            )
        )
        try:
            income = await self._store.create_transaction(
                NewTransaction(
                    account_id=dps_account.id,
                    type=INCOME,
                    amount=amount,
                    date=now,
                    category=DPS_CATEGORY,
                    description=f"DPS Transfer from {parent.name}",
                    tags=tags,
                )
            )
        except Exception as exc:
            self._logger.error(
                f"DPS transfer {transfer_id} failed on the savings side: "
                f"{exc}; removing expense {expense.id}"
            )
            try:
                await self._store.delete_transaction(expense.id)
            except Exception as cleanup_exc:
                self._logger.error(
                    f"Could not remove expense {expense.id} of DPS transfer "
                    f"{transfer_id}: {cleanup_exc}"
                )
            raise
        self._usage_logger.info(
            f"DPS transfer {transfer_id}: {amount} from {parent.id} "
            f"to {dps_account.id}"
        )
        return DPSTransferResult(
            transfer_id=transfer_id,
            expense_transaction_id=expense.id,
            income_transaction_id=income.id,
            amount=amount,
        )

    async def _run_deletion_saga(
        self,
        snapshot: DPSDeletionSnapshot,
        destination: DPSDestination,
    ) -> DPSDeletionResult:
        result = DPSDeletionResult(snapshot=snapshot, destination=destination)
        try:
            destination_account = await self._resolve_destination(
                result,
                snapshot,
                destination,
            )
            await self._unlink_and_delete(result, snapshot)
            await self._credit_destination(
                result,
                snapshot,
                destination_account,
            )
        finally:
            await self._refresh(result)
        self._usage_logger.info(
            f"DPS account {snapshot.dps_account_id} deleted; "
            f"{snapshot.balance} {snapshot.currency} moved to "
            f"{result.destination_account_id} ({destination.value})"
        )
        return result

    async def _resolve_destination(
        self,
        result: DPSDeletionResult,
        snapshot: DPSDeletionSnapshot,
        destination: DPSDestination,
    ) -> Account:
        step = SagaStep.RESOLVE_DESTINATION
        try:
            parent = await self._store.get_account(snapshot.parent_id)
            if parent is None:
                raise AccountNotFoundError(snapshot.parent_id)
            dps_account = await self._store.get_account(
                snapshot.dps_account_id
            )
            if dps_account is None:
                raise AccountNotFoundError(snapshot.dps_account_id)
            ensure_linked(parent, dps_account)
            await self._check_drift(result, snapshot, dps_account)
            if destination is DPSDestination.MAIN_ACCOUNT:
                target = parent
            else:
                target = await self._find_or_create_cash_wallet(
                    result,
                    snapshot,
                )
        except DPSBalanceDriftError as exc:
            result.mark(step, StepStatus.FAILED, exc)
            exc.result = result
            self._skip_remaining(result, step)
            raise
        except Exception as exc:
            raise self._fail(result, step, exc) from exc
        result.destination_account_id = target.id
        result.mark(step, StepStatus.SUCCEEDED)
        return target

    async def _check_drift(
        self,
        result: DPSDeletionResult,
        snapshot: DPSDeletionSnapshot,
        dps_account: Account,
    ) -> None:
        transactions = await self._store.list_transactions(dps_account.id)
        live_balance = current_balance(dps_account, transactions)
        drift = live_balance - snapshot.balance
        result.balance_drift = drift
        if not drift:
            return
        self._logger.warning(
            f"DPS account {dps_account.id} balance moved from "
            f"{snapshot.balance} to {live_balance} since the snapshot; "
            f"crediting the captured amount"
        )
        if self._reject_on_drift:
            raise DPSBalanceDriftError(
                f"DPS balance changed by {drift} since the deletion was "
                f"confirmed; reopen the dialog to capture it again"
            )

    async def _find_or_create_cash_wallet(
        self,
        result: DPSDeletionResult,
        snapshot: DPSDeletionSnapshot,
    ) -> Account:
        accounts = await self._store.list_accounts()
        savings_ids = dps_savings_account_ids(accounts)
        candidates = sorted(
            (
                account
                for account in accounts
                if account.type == CASH_ACCOUNT_TYPE
                and account.currency == snapshot.currency
                and account.id != snapshot.dps_account_id
                and account.id not in savings_ids
            ),
            key=lambda account: (
                account.sort_position,
                to_timestamp(account.created_at),
                account.id,
            ),
        )
        if candidates:
            return candidates[0]
        wallet = await self._store.create_account(
            NewAccount(
                name=DEFAULT_CASH_WALLET_NAME,
                type=CASH_ACCOUNT_TYPE,
                currency=snapshot.currency,
                description="Default cash account for tracking physical money",
            )
        )
        result.created_cash_wallet = True
        self._logger.info(
            f"Created cash wallet {wallet.id} for {snapshot.currency}"
        )
        return wallet

    async def _unlink_and_delete(
        self,
        result: DPSDeletionResult,
        snapshot: DPSDeletionSnapshot,
    ) -> None:
        steps = (SagaStep.CLEAR_PARENT_LINK, SagaStep.DELETE_DPS_ACCOUNT)
        outcomes = await asyncio.gather(
            self._store.update_account(
                snapshot.parent_id,
                dict(DPS_CLEARED_FIELDS),
            ),
            self._store.delete_account(snapshot.dps_account_id),
            return_exceptions=True,
        )
        failures = []
        for step, outcome in zip(steps, outcomes):
            if isinstance(outcome, BaseException):
                result.mark(step, StepStatus.FAILED, outcome)
                failures.append(outcome)
                self._logger.error(
                    f"DPS deletion step {step.value} failed: {outcome}"
                )
            else:
                result.mark(step, StepStatus.SUCCEEDED)
        if not failures:
            return
        if result.needs_manual_reconciliation:
            self._logger.error(
                f"DPS deletion of {snapshot.dps_account_id} partially "
                f"applied; parent {snapshot.parent_id} needs manual "
                "reconciliation"
            )
        self._skip_remaining(result, SagaStep.DELETE_DPS_ACCOUNT)
        error = failures[0]
        raise DPSDeletionError(_message_of(error), result) from error

    async def _credit_destination(
        self,
        result: DPSDeletionResult,
        snapshot: DPSDeletionSnapshot,
        destination_account: Account,
    ) -> None:
        step = SagaStep.CREDIT_DESTINATION
        if snapshot.balance == 0:
            result.mark(
                step,
                StepStatus.SKIPPED,
                "Captured DPS balance is zero",
            )
            return
        transaction_type = INCOME if snapshot.balance > 0 else EXPENSE
        try:
            credit = await self._store.create_transaction(
                NewTransaction(
                    account_id=destination_account.id,
                    type=transaction_type,
                    amount=abs(snapshot.balance),
                    date=self._clock(),
                    category=DPS_CATEGORY,
                    description=(
                        f"DPS balance transferred from "
                        f"{snapshot.dps_account_name}"
                    ),
                    tags=frozenset({DPS_DELETION_TAG}),
                )
            )
        except Exception as exc:
            raise self._fail(result, step, exc) from exc
        result.credit_transaction_id = credit.id
        result.mark(step, StepStatus.SUCCEEDED)

    async def _refresh(self, result: DPSDeletionResult) -> None:
        step = SagaStep.REFRESH
        try:
            accounts = await self._store.list_accounts()
            transactions = await self._store.list_transactions()
        except Exception as exc:
            result.mark(step, StepStatus.FAILED, exc)
            self._logger.error(f"Refresh after DPS deletion failed: {exc}")
            return
        balances = reconcile_balances(accounts, transactions, self._logger)
        result.accounts = tuple(apply_balances(accounts, balances))
        result.mark(step, StepStatus.SUCCEEDED)

    def _fail(
        self,
        result: DPSDeletionResult,
        step: SagaStep,
        error: Exception,
    ) -> DPSDeletionError:
        result.mark(step, StepStatus.FAILED, error)
        self._skip_remaining(result, step)
        self._logger.error(f"DPS deletion step {step.value} failed: {error}")
        return DPSDeletionError(_message_of(error), result)

    @staticmethod
    def _skip_remaining(
        result: DPSDeletionResult,
        failed_step: SagaStep,
    ) -> None:
        reached = False
        for step in SagaStep:
            if step is SagaStep.REFRESH:
                continue
            if reached and result.steps[step].status is StepStatus.PENDING:
                result.mark(step, StepStatus.SKIPPED, "Not attempted")
            if step is failed_step:
                reached = True

    async def _resolve_savings_account(
        self,
        account: Account,
        config: DPSConfig,
        accounts: list[Account],
    ) -> Account:
        linked_id = account.dps_savings_account_id
        if linked_id and linked_id != account.id:
            existing = await self._store.get_account(linked_id)
            other_parents = [
                other.id
                for other in accounts
                if other.id != account.id
                and other.dps_savings_account_id == linked_id
            ]
            if existing is not None and other_parents:
                raise DPSLinkError(
                    f"Savings account {linked_id} is already linked to "
                    f"account {other_parents[0]}"
                )
            if existing is not None and existing.currency == account.currency:
                self._logger.info(
                    f"Reusing DPS savings account {existing.id} "
                    f"for account {account.id}"
                )
                return existing
        savings = await self._store.create_account(
            NewAccount(
                name=f"{account.name}{DPS_ACCOUNT_SUFFIX}",
                type=SAVINGS_ACCOUNT_TYPE,
                currency=account.currency,
                initial_balance=config.initial_balance,
                description=f"DPS account for {account.name}",
            )
        )
        self._logger.info(
            f"Created DPS savings account {savings.id} for {account.id}"
        )
        return savings

    async def _require_account(self, account_id: str) -> Account:
        account = await self._store.get_account(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account


def _message_of(error: BaseException) -> str:
    return str(error) or _DEFAULT_FAILURE_MESSAGE


__all__ = ["DPSLifecycleManager"]
