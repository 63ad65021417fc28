"""Error taxonomy for ledger operations."""


class LedgerError(Exception):
    """Base class for ledger errors surfaced to callers."""


class LedgerValidationError(LedgerError, ValueError):
    """Input rejected before any store call."""


class DPSConfirmationRequiredError(LedgerValidationError):
    """A destructive DPS operation was not confirmed by the user."""


class DPSLinkError(LedgerValidationError):
    """The parent and DPS savings account are not linked as expected."""


class AccountNotFoundError(LedgerError, LookupError):
    """An account id does not resolve to a stored account."""

    def __init__(self, account_id: str) -> None:
        super().__init__(f"Account not found: {account_id}")
        self.account_id = account_id


class DPSBusyError(LedgerError):
    """A DPS deletion is already in flight for the same account."""

    def __init__(self, dps_account_id: str) -> None:
        super().__init__(
            f"DPS deletion already in progress for account {dps_account_id}"
        )
        self.dps_account_id = dps_account_id


class DPSDeletionError(LedgerError):
    """The DPS deletion saga stopped on a failed step.

    Attributes:
        result: Outcome of every saga step up to the failure.
    """

    def __init__(self, message: str, result=None) -> None:
        super().__init__(message)
        self.result = result


class DPSBalanceDriftError(DPSDeletionError):
    """The live DPS balance no longer matches the captured snapshot."""


__all__ = [
    "LedgerError",
    "LedgerValidationError",
    "DPSConfirmationRequiredError",
    "DPSLinkError",
    "AccountNotFoundError",
    "DPSBusyError",
    "DPSDeletionError",
    "DPSBalanceDriftError",
]
