"""
app/validators package marker.
"""

from app.validators.scalar_parser import ScalarParser
from app.validators.value_normalizer import clean, is_number

__all__ = [
    "ScalarParser",
    "clean",
    "is_number",
]
