"""Input validation shared by the source models and derivers."""

import math
from collections.abc import Collection
from typing import Any


class InputValidationError(ValueError):
    """A quantity or category supplied to a model is out of range."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


def check_non_negative(value: Any, field: str) -> float:
    """Return value as a float, raising unless it is finite and >= 0."""
    if isinstance(value, bool):
        raise InputValidationError(f"{field} must be numeric, got {value!r}", field)
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise InputValidationError(f"{field} must be numeric, got {value!r}", field) from e
    if not math.isfinite(number):
        raise InputValidationError(f"{field} must be finite, got {value!r}", field)
    if number < 0:
        raise InputValidationError(f"{field} must be >= 0, got {number}", field)
    return number


def check_positive(value: Any, field: str) -> float:
    """Return value as a float, raising unless it is finite and > 0."""
    number = check_non_negative(value, field)
    if number == 0:
        raise InputValidationError(f"{field} must be > 0", field)
    return number


def check_choice(value: str, choices: Collection[str], field: str) -> str:
    """Raise unless value is one of choices."""
    if value not in choices:
        valid = ", ".join(sorted(choices))
        raise InputValidationError(f"Invalid {field} {value!r}. Valid: {valid}", field)
    return value


def check_percentage(value: Any, field: str) -> float:
    """Return value as a float, raising unless it lies in [0, 100]."""
    number = check_non_negative(value, field)
    if number > 100:
        raise InputValidationError(f"{field} must be between 0 and 100, got {number}", field)
    return number
