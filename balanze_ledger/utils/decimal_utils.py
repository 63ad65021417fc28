"""Helpers for Decimal normalization and display rounding."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation


def coerce_decimal(value) -> Decimal:
    """Normalize numeric values to Decimal.

    Args:
        value: Raw numeric value from SQL, JSON or adapters.

    Returns:
        Decimal: Normalized numeric value.

    Raises:
        ValueError: If the value cannot be read as a finite number.
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, bool):
        raise ValueError(f"Boolean is not a numeric amount: {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise ValueError(f"Non-numeric amount: {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"Non-finite amount: {value!r}")
    return result


def coerce_optional_decimal(value) -> Decimal | None:
    """Return None for missing values, a Decimal otherwise."""
    if value is None or value == "":
        return None
    return coerce_decimal(value)


def quantize_amount(value: Decimal, places: int = 2) -> Decimal:
    """Round a value half away from zero to a fixed number of places.

    Only meant for display; ledger sums are never rounded.
    """
    exponent = Decimal(1).scaleb(-places)
    return value.quantize(exponent, rounding=ROUND_HALF_UP)


def format_amount(
    value: Decimal,
    currency_code: str | None = None,
    places: int = 2,
) -> str:
    """Format an amount for display with thousands separators.

    Args:
        value: Amount to format.
        currency_code: Optional currency code appended after the number.
        places: Fractional digits to keep.

    Returns:
        str: Display string such as ``1,234.50 USD``.
    """
    rounded = quantize_amount(value, places)
    text = f"{rounded:,.{places}f}"
    if currency_code:
        return f"{text} {currency_code}"
    return text


__all__ = [
    "coerce_decimal",
    "coerce_optional_decimal",
    "quantize_amount",
    "format_amount",
]
