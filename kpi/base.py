"""
kpi/base.py

Shared contract for the inventory formulas.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar


class BaseKPIFormula(ABC):
    """
    A pure formula over totals accumulated by one aggregation pass.

    ``required_inputs`` names the keys :meth:`calculate` reads. Subclasses
    must not perform I/O or log.
    """

    required_inputs: ClassVar[tuple[str, ...]] = ()

    @abstractmethod
    def calculate(self, inputs: dict[str, Any]) -> dict[str, float]:
        """
        Return the derived metrics for one bucket, keyed by metric name.
        """

    def require(self, inputs: dict[str, Any]) -> None:
        """
        Raise KeyError naming every required input absent from *inputs*.
        """

        missing = [name for name in self.required_inputs if name not in inputs]
        if missing:
            raise KeyError(f"{type(self).__name__} missing inputs: {', '.join(missing)}")
