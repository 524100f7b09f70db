"""
app/domain/fields.py

Typed results for reading one column out of a loosely-typed row.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

from app.validators.value_normalizer import clean, is_number


class FieldStatus(str, Enum):
    """
    Outcome of reading a column value.
    """

    PRESENT = "present"
    MISSING = "missing"
    INVALID = "invalid"


@dataclass(frozen=True)
class TextField:
    """
    A column read as text. ``value`` is ``None`` unless the field is present.
    """

    status: FieldStatus
    value: str | None = None

    @property
    def is_present(self) -> bool:
        return self.status is FieldStatus.PRESENT

    def or_default(self, default: str) -> str:
        return self.value if self.value is not None else default


@dataclass(frozen=True)
class NumericField:
    """
    A column read as a number.

    ``value`` is only populated for present, finite numbers. Consumers must
    check :attr:`is_valid` before accumulating.
    """

    status: FieldStatus
    value: float | None = None
    raw: object = None

    @property
    def is_valid(self) -> bool:
        return (
            self.status is FieldStatus.PRESENT
            and self.value is not None
            and not math.isnan(self.value)
        )

    def or_zero(self) -> float:
        """Return the value, or ``0.0`` when missing or invalid."""
        return self.value if self.is_valid else 0.0  # type: ignore[return-value]


def normalize(value: Any) -> NumericField:
    """
    Wrap :func:`~app.validators.value_normalizer.clean` with an explicit
    missing/invalid status.
    """

    if value is None or (isinstance(value, str) and not value.strip()):
        return NumericField(status=FieldStatus.MISSING, raw=value)

    cleaned = clean(value)
    if not is_number(cleaned):
        return NumericField(status=FieldStatus.INVALID, raw=value)
    return NumericField(status=FieldStatus.PRESENT, value=float(cleaned), raw=value)
