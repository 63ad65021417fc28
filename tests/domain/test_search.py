"""Tests for weighted fuzzy search."""

from decimal import Decimal

from balanze_ledger.domain.models import FilterState
from balanze_ledger.domain.services.account_view import filter_accounts
from balanze_ledger.domain.services.search import (
    ACCOUNT_SEARCH_CONFIG,
    TRANSACTION_SEARCH_CONFIG,
    SearchConfig,
    SearchField,
    rank_records,
    search_records,
)


def test_search_matches_name_fuzzily(make_account):
    """'wallet' finds the cash wallet but not the bank account."""
    accounts = [
        make_account("bank", name="Bank Account", type="bank"),
        make_account("cash", name="Cash Wallet", type="cash"),
    ]

    result = search_records(accounts, "wallet", ACCOUNT_SEARCH_CONFIG)

    assert [a.id for a in result] == ["cash"]


def test_blank_term_returns_records_unchanged(make_account):
    """Whitespace-only terms leave the input untouched."""
    accounts = [make_account("b"), make_account("a")]

    assert search_records(accounts, "   ", ACCOUNT_SEARCH_CONFIG) == accounts
    assert rank_records(accounts, "", ACCOUNT_SEARCH_CONFIG) == []


def test_rank_prefers_records_matching_more_weighted_fields(make_account):
    """A name plus type match outranks a name-only match."""
    accounts = [
        make_account("one", name="Savings jar", type="cash"),
        make_account("two", name="Savings", type="savings"),
    ]

    ranked = rank_records(accounts, "savings", ACCOUNT_SEARCH_CONFIG)

    assert [r.item.id for r in ranked] == ["two", "one"]
    assert ranked[0].matched_fields == ("name", "type")
    assert ranked[0].score > ranked[1].score


def test_equal_scores_keep_input_order(make_account):
    """Ties are broken by the position in the input."""
    accounts = [
        make_account("b", name="Travel"),
        make_account("a", name="Travel"),
    ]

    result = search_records(accounts, "travel", ACCOUNT_SEARCH_CONFIG)

    assert [a.id for a in result] == ["b", "a"]


def test_transaction_search_reads_tags(make_transaction):
    """Tag sets are searched element by element."""
    transactions = [
        make_transaction(
            "t1",
            "a",
            "5",
            tags=frozenset({"groceries", "weekly"}),
        ),
        make_transaction("t2", "a", "5", description="Rent"),
    ]

    result = search_records(
        transactions,
        "grocer",
        TRANSACTION_SEARCH_CONFIG,
    )

    assert [t.id for t in result] == ["t1"]


def test_custom_config_cutoff_filters_weak_matches(make_account):
    """A strict cutoff rejects partial similarities below it."""
    config = SearchConfig(
        fields=(SearchField("name", 1.0),),
        score_cutoff=100.0,
    )
    accounts = [
        make_account("a", name="Checking", initial_balance=Decimal("1")),
    ]

    assert search_records(accounts, "chekc", config) == []
    assert search_records(accounts, "check", config) == accounts


def test_longer_unrelated_query_matches_nothing(make_account):
    """Short field values are not matched inside a longer query."""
    accounts = [
        make_account("cash", name="Cash Wallet", type="cash"),
        make_account("bank", name="Bank Account", type="bank"),
    ]

    for term in ("busdriver", "cashback rewards"):
        shown = filter_accounts(accounts, FilterState(search=term))
        assert shown == [], term


def test_query_matches_inside_longer_field(make_account):
    """A currency code query still finds the accounts holding it."""
    accounts = [
        make_account("usd", name="Checking"),
        make_account("eur", name="Girokonto", currency="EUR"),
    ]

    result = search_records(accounts, "usd", ACCOUNT_SEARCH_CONFIG)

    assert [a.id for a in result] == ["usd"]
