"""Domain constants for the account ledger."""

ACCOUNT_TYPES = (
    "cash",
    "bank",
    "card",
    "savings",
    "investment",
    "credit",
    "other",
)
CASH_ACCOUNT_TYPE = "cash"
SAVINGS_ACCOUNT_TYPE = "savings"

INCOME = "income"
EXPENSE = "expense"
TRANSACTION_TYPES = (INCOME, EXPENSE)

DPS_TYPES = ("monthly", "flexible")
DPS_AMOUNT_TYPES = ("fixed", "custom")

DPS_CATEGORY = "DPS"
DPS_DELETION_TAG = "dps_deletion"
DPS_TRANSFER_TAG_PREFIX = "dps_transfer_"
DPS_ACCOUNT_SUFFIX = " (DPS)"
DEFAULT_CASH_WALLET_NAME = "Cash Wallet"

FILTER_STATE_VERSION = 1
ALL = "all"
STATUS_ACTIVE = "active"
STATUS_VALUES = (STATUS_ACTIVE, ALL)

SORT_KEYS = ("name", "type", "currency", "balance", "transactions", "dps")
ASCENDING = "asc"
DESCENDING = "desc"

DPS_CLEARED_FIELDS = {
    "has_dps": False,
    "dps_type": None,
    "dps_amount_type": None,
    "dps_fixed_amount": None,
    "dps_savings_account_id": None,
}

ACCOUNT_MUTABLE_FIELDS = (
    "name",
    "type",
    "currency",
    "initial_balance",
    "calculated_balance",
    "is_active",
    "position",
    "has_dps",
    "dps_type",
    "dps_amount_type",
    "dps_fixed_amount",
    "dps_savings_account_id",
    "description",
)


__all__ = [
    "ACCOUNT_TYPES",
    "CASH_ACCOUNT_TYPE",
    "SAVINGS_ACCOUNT_TYPE",
    "INCOME",
    "EXPENSE",
    "TRANSACTION_TYPES",
    "DPS_TYPES",
    "DPS_AMOUNT_TYPES",
    "DPS_CATEGORY",
    "DPS_DELETION_TAG",
    "DPS_TRANSFER_TAG_PREFIX",
    "DPS_ACCOUNT_SUFFIX",
    "DEFAULT_CASH_WALLET_NAME",
    "FILTER_STATE_VERSION",
    "ALL",
    "STATUS_ACTIVE",
    "STATUS_VALUES",
    "SORT_KEYS",
    "ASCENDING",
    "DESCENDING",
    "DPS_CLEARED_FIELDS",
    "ACCOUNT_MUTABLE_FIELDS",
]
