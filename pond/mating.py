"""Mating policy: request buffering, pair resolution and cooldowns.

Renderers detect proximity on their own frame clock and may all ask for
the same pair to mate. Requests are buffered here and resolved once per
tick, so a pair's eligibility can only be spent once.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from pond.config.simulation_config import LifecycleConfig
from pond.entities.frog import Frog

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatingAttempt:
    """A request for two frogs to mate. Order matters: the offspring
    appears at the first frog's position."""

    first_id: str
    second_id: str

    @property
    def pair_key(self) -> frozenset[str]:
        return frozenset((self.first_id, self.second_id))


class MateRequestQueue:
    """Collects mate requests between ticks for deferred resolution."""

    def __init__(self) -> None:
        self._pending: list[MatingAttempt] = []
        self._pair_keys: set[frozenset[str]] = set()

    def submit(self, first_id: str, second_id: str) -> bool:
        """Queue a request.

        Returns False for a frog paired with itself or a pair that is
        already waiting (in either order).
        """
        if first_id == second_id:
            return False
        attempt = MatingAttempt(first_id, second_id)
        if attempt.pair_key in self._pair_keys:
            return False
        self._pair_keys.add(attempt.pair_key)
        self._pending.append(attempt)
        return True

    def drain(self) -> list[MatingAttempt]:
        """Return and clear pending requests in arrival order."""
        pending = self._pending
        self._pending = []
        self._pair_keys.clear()
        return pending

    def clear(self) -> None:
        self._pending.clear()
        self._pair_keys.clear()

    def __len__(self) -> int:
        return len(self._pending)


class CooldownSchedule:
    """Per-frog cooldown expiries keyed by frog id, on the engine's tick clock.

    Each parent gets its own entry, so a cooldown ends for one frog even
    if its former partner has died or been reset.
    """

    def __init__(self) -> None:
        self._expiries: dict[str, int] = {}

    def schedule(self, frog_id: str, expires_at: int) -> None:
        self._expiries[frog_id] = expires_at

    def cancel(self, frog_id: str) -> bool:
        return self._expiries.pop(frog_id, None) is not None

    def pop_expired(self, tick: int) -> list[str]:
        """Remove and return ids whose cooldown has ended by ``tick``."""
        expired = [frog_id for frog_id, at in self._expiries.items() if at <= tick]
        for frog_id in expired:
            del self._expiries[frog_id]
        return expired

    def expires_at(self, frog_id: str) -> Optional[int]:
        return self._expiries.get(frog_id)

    def clear(self) -> None:
        self._expiries.clear()

    def __len__(self) -> int:
        return len(self._expiries)


class MatingCoordinator:
    """Decides whether two frogs may mate and produces the offspring.

    A request succeeds only if both frogs are present and eligible. Anything
    else is a silent no-op: mating is opportunistic, never contractual.
    """

    def __init__(
        self,
        rng: random.Random,
        lifecycle: Optional[LifecycleConfig] = None,
        cooldowns: Optional[CooldownSchedule] = None,
    ) -> None:
        self._rng = rng
        self._lifecycle = lifecycle or LifecycleConfig()
        self.cooldowns = cooldowns if cooldowns is not None else CooldownSchedule()

    def attempt(
        self,
        request: MatingAttempt,
        frogs: "Mapping[str, Frog]",
        tick: int,
        cooldown_ticks: int,
    ) -> Optional[Frog]:
        """Resolve one mate request.

        Args:
            request: The pair to mate
            frogs: Live frogs by id
            tick: Current engine tick
            cooldown_ticks: Ticks both parents stay ineligible afterwards

        Returns:
            The offspring, or None if the request was dropped
        """
        first = frogs.get(request.first_id)
        second = frogs.get(request.second_id)
        if first is None or second is None or first is second:
            logger.debug("Dropping mate request %s: frog missing", request)
            return None
        if not (first.can_mate and second.can_mate):
            logger.debug("Dropping mate request %s: not eligible", request)
            return None

        offspring = Frog.spawn(self._rng, position=first.position, lifecycle=self._lifecycle)

        expires_at = tick + cooldown_ticks
        for parent in (first, second):
            parent.begin_cooldown(expires_at)
            self.cooldowns.schedule(parent.id, expires_at)

        logger.debug(
            "Frogs %s and %s mated at tick %d, offspring %s",
            first.id[:8],
            second.id[:8],
            tick,
            offspring.id[:8],
        )
        return offspring
