"""Weighted fuzzy search over record fields."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from rapidfuzz import fuzz
from rapidfuzz.utils import default_process


T = TypeVar("T")


@dataclass(frozen=True)
class SearchField:
    name: str
    weight: float


@dataclass(frozen=True)
class SearchConfig:
    """Fields searched and the similarity a field needs to count as a match.

    Attributes:
        fields: Weighted record attributes to search.
        score_cutoff: Minimum partial-ratio similarity (0-100) per field.
    """

    fields: tuple[SearchField, ...]
    score_cutoff: float = 80.0


@dataclass(frozen=True)
class SearchResult(Generic[T]):
    item: T
    score: float
    matched_fields: tuple[str, ...]


ACCOUNT_SEARCH_CONFIG = SearchConfig(
    fields=(
        SearchField("name", 0.4),
        SearchField("type", 0.25),
        SearchField("currency", 0.15),
        SearchField("description", 0.1),
        SearchField("tags", 0.1),
    ),
)

TRANSACTION_SEARCH_CONFIG = SearchConfig(
    fields=(
        SearchField("description", 0.5),
        SearchField("category", 0.3),
        SearchField("tags", 0.2),
    ),
)


def rank_records(
    records: Sequence[T],
    term: str,
    config: SearchConfig,
) -> list[SearchResult[T]]:
    """Score records against a search term and rank them.

    A field contributes ``weight * similarity`` when its similarity reaches
    the cutoff. Records without any matching field are dropped. Ties keep
    the input order.

    Args:
        records: Records to search, already filtered by the caller.
        term: Search term; blank terms match nothing.
        config: Weighted fields and cutoff.

    Returns:
        list[SearchResult[T]]: Matches, best first.
    """
    query = term.strip()
    if not query:
        return []
    scored = []
    for index, record in enumerate(records):
        score = 0.0
        matched = []
        for search_field in config.fields:
            similarity = _field_similarity(
                query,
                getattr(record, search_field.name, None),
                config.score_cutoff,
            )
            if similarity:
                score += search_field.weight * similarity / 100
                matched.append(search_field.name)
        if matched:
            scored.append((index, SearchResult(record, score, tuple(matched))))
    scored.sort(key=lambda pair: (-pair[1].score, pair[0]))
    return [result for _, result in scored]


def search_records(
    records: Sequence[T],
    term: str,
    config: SearchConfig,
) -> list[T]:
    """Return the records matching ``term``, best match first.

    A blank term returns the records unchanged.
    """
    if not term or not term.strip():
        return list(records)
    return [result.item for result in rank_records(records, term, config)]


def _field_similarity(query: str, value, score_cutoff: float) -> float:
    """Best similarity of the query found inside one of the field values.

    Values shorter than the query never match.
    """
    processed_query = default_process(query)
    if not processed_query:
        return 0.0
    best = 0.0
    for candidate in _field_strings(value):
        processed = default_process(candidate)
        if len(processed) < len(processed_query):
            continue
        similarity = fuzz.partial_ratio(
            processed_query,
            processed,
            score_cutoff=score_cutoff,
        )
        best = max(best, similarity)
    return best


def _field_strings(value) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value else []
    if isinstance(value, Iterable):
        return sorted(item for item in value if isinstance(item, str) and item)
    return [str(value)]


__all__ = [
    "SearchField",
    "SearchConfig",
    "SearchResult",
    "ACCOUNT_SEARCH_CONFIG",
    "TRANSACTION_SEARCH_CONFIG",
    "rank_records",
    "search_records",
]
