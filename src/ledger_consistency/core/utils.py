"""Core utility functions for Ledger Consistency Tools.

This module provides shared utilities used across the project.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Any

_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_check_key(name: str) -> str:
    """Turn a check display name into its lookup key.

    Lowercases the name and collapses every run of whitespace into a single
    underscore. Surrounding whitespace is dropped first.

    Args:
        name: Display name or user-supplied check name.

    Returns:
        Normalized key.

    Examples:
        >>> normalize_check_key("Account Types")
        'account_types'
        >>> normalize_check_key("Journal  Entry\\tBalance")
        'journal_entry_balance'
    """
    return _WHITESPACE_RUN.sub("_", name.strip().lower())


def to_decimal(value: Any) -> Decimal:
    """Convert a stored numeric value to ``Decimal`` without passing through float.

    Raises:
        ValueError: If the value is not a number.
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # repr() keeps the shortest exact decimal form of the float literal
        value = repr(value)
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Not a decimal value: {value!r}") from e


def format_amount(value: Decimal) -> str:
    """Render a Decimal for messages, dropping a trailing ``.0`` exponent noise."""
    normalized = value.normalize()
    if normalized == normalized.to_integral_value():
        return str(normalized.quantize(Decimal(1)))
    return format(normalized, "f")
