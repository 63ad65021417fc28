"""Account ledger reconciliation and DPS lifecycle core."""

__version__ = "0.1.0"
