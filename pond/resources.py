"""Algae/nitrogen/oxygen resource pool.

Each tick algae grows in proportion to the nitrogen available to it and
then converts nitrogen into oxygen one unit per alga. Frogs eat algae and
return nitrogen when they die. The pool is pure state: no I/O, no clock.
"""

from __future__ import annotations

import logging
from typing import Optional

from pond.config.simulation_config import ResourceConfig

logger = logging.getLogger(__name__)


class ResourcePool:
    """Tracks algae, nitrogen and oxygen levels and their exchange rule.

    Invariants:
        - All three levels stay non-negative.
        - ``advance`` moves nitrogen into oxygen without changing their sum;
          only ``credit`` increases it.
    """

    __slots__ = ("algae", "nitrogen", "oxygen", "_config")

    def __init__(self, config: Optional[ResourceConfig] = None) -> None:
        self._config = config or ResourceConfig()
        self.algae: int = self._config.initial_algae
        self.nitrogen: int = self._config.initial_nitrogen
        self.oxygen: int = self._config.initial_oxygen

    def growth_factor(self) -> float:
        """Return this tick's algae growth multiplier.

        An empty pond has nothing to divide by, so it uses the lower bound.
        """
        if self.algae <= 0:
            return self._config.growth_min
        ratio = self.nitrogen / self.algae
        return max(self._config.growth_min, min(ratio, self._config.growth_max))

    def advance(self) -> int:
        """Grow algae and convert nitrogen to oxygen.

        Returns:
            The amount of nitrogen converted this tick.
        """
        self.algae = round(self.algae * self.growth_factor())

        consumption = min(self.algae, self.nitrogen)
        self.nitrogen -= consumption
        self.oxygen += consumption
        return consumption

    def feed(self, amount: int) -> int:
        """Remove up to ``amount`` algae, clamping at zero.

        Returns:
            The algae actually eaten. Running out is not an error.
        """
        eaten = min(amount, self.algae)
        self.algae -= eaten
        return eaten

    def credit(self, amount: int) -> None:
        """Return nutrients to the pool (a frog decomposing)."""
        self.nitrogen += amount

    def reset(self) -> None:
        """Restore the initial levels."""
        self.algae = self._config.initial_algae
        self.nitrogen = self._config.initial_nitrogen
        self.oxygen = self._config.initial_oxygen
        logger.debug("Resource pool reset to initial levels")

    def levels(self) -> dict[str, int]:
        return {"algae": self.algae, "nitrogen": self.nitrogen, "oxygen": self.oxygen}

    def __repr__(self) -> str:
        return (
            f"ResourcePool(algae={self.algae}, nitrogen={self.nitrogen}, "
            f"oxygen={self.oxygen})"
        )
