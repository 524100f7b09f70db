"""
app/validators/value_normalizer.py

Normalization of locale-formatted monetary and quantity values.

Source files write decimals with a comma (``"1234,56"``) and amounts may
carry a currency symbol and padding (``"$ 1 234,56"``). :func:`clean`
turns any such value into a float, or ``NaN`` when it cannot.
"""

from __future__ import annotations

import math
import re
from typing import Any

CURRENCY_SYMBOLS = "$€£¥"

_STRIP_PATTERN = re.compile(rf"[{re.escape(CURRENCY_SYMBOLS)}\s]")
_NUMBER_PATTERN = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

NOT_A_NUMBER = math.nan


def is_number(value: Any) -> bool:
    """
    Return True for a real, finite int/float. Booleans are not numbers here.
    """

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def clean(value: Any) -> float:
    """
    Convert *value* to a number.

    Numbers are returned unchanged. Strings lose currency symbols and
    whitespace, then the first comma becomes the decimal point. The longest
    leading number is kept and any trailing text is ignored, so
    ``"12,5 kg"`` gives 12.5 and ``"1.234,56"`` gives 1.234. A string with
    no leading number yields ``NaN``.
    """

    if isinstance(value, bool):
        return NOT_A_NUMBER
    if isinstance(value, (int, float)):
        return value
    if not isinstance(value, str):
        return NOT_A_NUMBER

    normalized = _STRIP_PATTERN.sub("", value).replace(",", ".", 1)
    match = _NUMBER_PATTERN.match(normalized)
    if match is None:
        return NOT_A_NUMBER
    return float(match.group())

