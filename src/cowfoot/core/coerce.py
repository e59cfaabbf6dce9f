"""Scalar coercion helpers for loosely-typed records.

Farm records arrive from CSV readers and source results from models
that do not agree on types. These helpers turn whatever is there into
a finite float, a string, or None, without raising.
"""

import math
import numbers
from collections.abc import Iterator, Mapping, Sequence
from typing import Any

# Tokens that mean "no value" in tabular input
MISSING_TOKENS = frozenset({"", "na", "n/a", "nan", "null", "none"})


def is_absent(value: Any) -> bool:
    """Check whether a value means "not provided"."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and value.strip().lower() in MISSING_TOKENS:
        return True
    return False


def first_non_null(*values: Any) -> Any:
    """Return the first value that is not absent, or None."""
    for value in values:
        if not is_absent(value):
            return value
    return None


def scalar_num(value: Any) -> float | None:
    """Coerce a value to a finite float.

    Accepts real numbers, numeric strings, and one-element sequences of
    either. Booleans, absent values and non-finite numbers give None.
    """
    if isinstance(value, bool) or is_absent(value):
        return None
    if isinstance(value, numbers.Real):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    elif hasattr(value, "tolist") and not isinstance(value, Mapping):
        # numpy arrays and scalars
        return scalar_num(value.tolist())
    elif isinstance(value, Sequence) and len(value) == 1:
        return scalar_num(value[0])
    else:
        return None
    return number if math.isfinite(number) else None


def scalar_str(value: Any) -> str | None:
    """Coerce a value to a stripped, non-empty string, or None."""
    if is_absent(value):
        return None
    if isinstance(value, Sequence) and not isinstance(value, str):
        if len(value) != 1:
            return None
        return scalar_str(value[0])
    text = str(value).strip()
    return text or None


def numeric_leaves(value: Any) -> Iterator[float]:
    """Yield every finite numeric leaf of a nested structure.

    Mappings and sequences are walked recursively. Strings, booleans
    and non-finite numbers are skipped.
    """
    if isinstance(value, bool) or value is None or isinstance(value, str | bytes):
        return
    if isinstance(value, numbers.Real):
        number = float(value)
        if math.isfinite(number):
            yield number
        return
    if isinstance(value, Mapping):
        for item in value.values():
            yield from numeric_leaves(item)
        return
    if hasattr(value, "tolist"):
        yield from numeric_leaves(value.tolist())
        return
    if isinstance(value, Sequence | set | frozenset):
        for item in value:
            yield from numeric_leaves(item)
