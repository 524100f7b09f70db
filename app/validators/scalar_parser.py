"""
app/validators/scalar_parser.py

Type inference for raw delimited-text cell values.
"""

from __future__ import annotations

import re
from typing import Mapping

Scalar = int | float | bool | str | None

_NUMERIC_PATTERN = re.compile(r"^\s*-?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?\s*$")
_INTEGER_PATTERN = re.compile(r"^\s*-?\d+\s*$")

# Integers past this magnitude lose precision as floats elsewhere; keep as text.
MAX_SAFE_INTEGER = 2**53 - 1


class ScalarParser:
    """
    Infers booleans, numbers, and nulls from raw cell text.
    """

    def infer(self, value: str | None) -> Scalar:
        """
        Return the typed form of one cell.

        ``"true"``/``"false"`` become booleans, numeric-looking text becomes
        ``int`` or ``float``, empty cells become ``None``. Comma-decimal text
        such as ``"1234,56"`` is not numeric here and stays a string.
        """

        if value is None or value == "":
            return None

        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False

        if _INTEGER_PATTERN.match(value):
            parsed = int(value)
            if abs(parsed) > MAX_SAFE_INTEGER:
                return value
            return parsed

        if _NUMERIC_PATTERN.match(value):
            return float(value)

        return value

    def infer_row(self, row: Mapping[str, str | None]) -> dict[str, Scalar]:
        return {key: self.infer(value) for key, value in row.items()}
