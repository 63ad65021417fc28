"""Domain models for the DPS (recurring deposit) lifecycle."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from balanze_ledger.domain.models.accounts import Account


class DPSState(str, Enum):
    """Lifecycle state of a parent account's DPS plan."""

    NO_DPS = "no_dps"
    DPS_ENABLED = "dps_enabled"
    DPS_EDITING = "dps_editing"
    DELETING = "deleting"


class DPSDestination(str, Enum):
    """Where the DPS balance goes when the savings account is retired."""

    MAIN_ACCOUNT = "main_account"
    CASH_WALLET = "cash_wallet"


class SagaStep(str, Enum):
    """Named steps of the DPS deletion saga, in execution order."""

    RESOLVE_DESTINATION = "resolve_destination"
    CLEAR_PARENT_LINK = "clear_parent_link"
    DELETE_DPS_ACCOUNT = "delete_dps_account"
    CREDIT_DESTINATION = "credit_destination"
    REFRESH = "refresh"


class StepStatus(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class DPSConfig:
    """User-supplied DPS plan settings.

    Attributes:
        dps_type: monthly or flexible.
        amount_type: fixed or custom.
        fixed_amount: Deposit amount, required for monthly or fixed plans.
        initial_balance: Opening balance of a newly created savings account.
    """

    dps_type: str
    amount_type: str = "fixed"
    fixed_amount: Decimal | None = None
    initial_balance: Decimal = Decimal("0")

    def requires_fixed_amount(self) -> bool:
        return self.dps_type == "monthly" or self.amount_type == "fixed"

    def to_account_fields(self) -> dict:
        """Return the dps_* account fields described by this config."""
        return {
            "has_dps": True,
            "dps_type": self.dps_type,
            "dps_amount_type": self.amount_type,
            "dps_fixed_amount": (
                self.fixed_amount if self.requires_fixed_amount() else None
            ),
        }


@dataclass(frozen=True)
class DPSDeletionSnapshot:
    """Balance and currency captured when the deletion dialog opens."""

    parent_id: str
    dps_account_id: str
    dps_account_name: str
    balance: Decimal
    currency: str
    captured_at: datetime


@dataclass
class StepOutcome:
    """Result of one saga step."""

    step: SagaStep
    status: StepStatus = StepStatus.PENDING
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is StepStatus.SUCCEEDED


@dataclass
class DPSDeletionResult:
    """Outcome of a DPS deletion saga, one entry per named step."""

    snapshot: DPSDeletionSnapshot
    destination: DPSDestination
    steps: dict[SagaStep, StepOutcome] = field(
        default_factory=lambda: {step: StepOutcome(step) for step in SagaStep}
    )
    destination_account_id: str | None = None
    created_cash_wallet: bool = False
    credit_transaction_id: str | None = None
    balance_drift: Decimal = Decimal("0")
    accounts: tuple[Account, ...] = ()

    @property
    def succeeded(self) -> bool:
        """True when every ledger-mutating step completed or was skipped."""
        core_steps = (
            SagaStep.RESOLVE_DESTINATION,
            SagaStep.CLEAR_PARENT_LINK,
            SagaStep.DELETE_DPS_ACCOUNT,
            SagaStep.CREDIT_DESTINATION,
        )
        return all(
            self.steps[step].status
            in (StepStatus.SUCCEEDED, StepStatus.SKIPPED)
            for step in core_steps
        )

    @property
    def needs_manual_reconciliation(self) -> bool:
        """True when exactly one of the link-clear and delete steps applied."""
        cleared = self.steps[SagaStep.CLEAR_PARENT_LINK].succeeded
        deleted = self.steps[SagaStep.DELETE_DPS_ACCOUNT].succeeded
        return cleared != deleted

    def mark(
        self,
        step: SagaStep,
        status: StepStatus,
        error: BaseException | str | None = None,
    ) -> None:
        self.steps[step] = StepOutcome(
            step=step,
            status=status,
            error=str(error) if error is not None else None,
        )


@dataclass(frozen=True)
class DPSTransferResult:
    """Pair of transactions created by a transfer into the DPS account."""

    transfer_id: str
    expense_transaction_id: str
    income_transaction_id: str
    amount: Decimal


__all__ = [
    "DPSState",
    "DPSDestination",
    "SagaStep",
    "StepStatus",
    "DPSConfig",
    "DPSDeletionSnapshot",
    "StepOutcome",
    "DPSDeletionResult",
    "DPSTransferResult",
]
