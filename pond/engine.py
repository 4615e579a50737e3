"""Authoritative pond simulation engine.

The engine owns the frog collection and the resource pool of one session
and advances them in discrete ticks. Every tick runs the same fixed
phases under a single lock:

    1. resources advance (algae grow, nitrogen becomes oxygen)
    2. every frog eats, ages and recomputes eligibility; deaths collected
    3. expired mating cooldowns restore eligibility
    4. queued mate requests resolve (at most once per pair)
    5. dead frogs are removed and their nitrogen credited
    6. update/create/remove events, then one stats event, are emitted

Renderers never mutate frogs directly. Mate requests are queued for the
next tick; position reports are the only write applied immediately.
"""

from __future__ import annotations

import logging
import math
import random
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Optional

from pond.config.simulation_config import PondConfig
from pond.entities.frog import Frog, FrogSnapshot, Position
from pond.events import (
    POND_EVENT_TYPES,
    EventBus,
    FrogCreatedEvent,
    FrogRemovedEvent,
    FrogUpdatedEvent,
    PondStatsEvent,
)
from pond.exceptions import SimulationError, StaleReferenceError
from pond.mating import CooldownSchedule, MateRequestQueue, MatingCoordinator
from pond.resources import ResourcePool

logger = logging.getLogger(__name__)


@dataclass
class TickResult:
    """Summary of one tick, in the order its events were emitted."""

    tick: int
    updated: list[FrogSnapshot] = field(default_factory=list)
    created: list[FrogSnapshot] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    stats: Optional[PondStatsEvent] = None


class SimulationEngine:
    """Runs one pond session: frogs, resources, mating and the tick clock.

    Args:
        config: Engine configuration (defaults from ``pond.config``)
        rng: Random source for genders, ids and spawn positions
        seed: Seed for a private ``random.Random`` when ``rng`` is not given
        event_bus: Bus to emit on; a private one is created if omitted
    """

    # Seconds stop() and start() wait for a previous tick thread to exit
    join_timeout = 2.0

    def __init__(
        self,
        config: Optional[PondConfig] = None,
        *,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        self.config = config or PondConfig()
        self._rng = rng if rng is not None else random.Random(seed)
        self.event_bus = event_bus or EventBus()

        self.pool = ResourcePool(self.config.resources)
        self._frogs: dict[str, Frog] = {}
        self._requests = MateRequestQueue()
        self._cooldowns = CooldownSchedule()
        self._coordinator = MatingCoordinator(
            self._rng, self.config.lifecycle, cooldowns=self._cooldowns
        )

        self._tick = 0
        self._period = self.config.tick_period

        # Re-entrant so event handlers may call back into the engine
        self._lock = threading.RLock()
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._running = False

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._running

    @property
    def tick_count(self) -> int:
        return self._tick

    @property
    def period(self) -> float:
        return self._period

    @property
    def population(self) -> int:
        with self._lock:
            return len(self._frogs)

    @property
    def cooldown_ticks(self) -> int:
        """Mating cooldown expressed in ticks of the current period."""
        seconds = self.config.lifecycle.mating_cooldown_seconds
        return max(1, math.ceil(seconds / self._period))

    def snapshot(self) -> list[FrogSnapshot]:
        """Return snapshots of every live frog."""
        with self._lock:
            return [frog.snapshot() for frog in self._frogs.values()]

    def get_frog(self, frog_id: str) -> Optional[FrogSnapshot]:
        with self._lock:
            frog = self._frogs.get(frog_id)
            return frog.snapshot() if frog is not None else None

    def stats(self) -> dict[str, Any]:
        with self._lock:
            return {
                "running": self._running,
                "tick": self._tick,
                "population": len(self._frogs),
                **self.pool.levels(),
            }

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def attach(self, handler: Callable[[Any], None]) -> int:
        """Replay every live frog to ``handler`` and subscribe it to pond events.

        Each live frog is first delivered as a ``FrogCreatedEvent``; the
        handler is then subscribed. Both happen under the engine lock, so no
        tick can interleave: a late joiner sees exactly one create per frog
        before any update or removal for it.

        Returns:
            Number of frogs replayed
        """
        with self._lock:
            frogs = list(self._frogs.values())
            for frog in frogs:
                handler(FrogCreatedEvent(frog=frog.snapshot(), parent_ids=(), tick=self._tick))
            self.event_bus.subscribe_many(POND_EVENT_TYPES, handler)
            return len(frogs)

    def detach(self, handler: Callable[[Any], None]) -> None:
        with self._lock:
            self.event_bus.unsubscribe_all(handler)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def populate(self, count: Optional[int] = None) -> list[FrogSnapshot]:
        """Add ``count`` newborn frogs at random positions.

        Defaults to the configured initial population.
        """
        if count is None:
            count = self.config.initial_population
        with self._lock:
            created = [
                self.add_frog(Frog.spawn(self._rng, lifecycle=self.config.lifecycle))
                for _ in range(count)
            ]
            logger.info("Populated pond with %d frogs (population %d)", count, len(self._frogs))
            return created

    def add_frog(self, frog: Frog) -> FrogSnapshot:
        """Put an existing frog into the pond and announce it."""
        with self._lock:
            self._spawn(frog)
            snapshot = frog.snapshot()
            self.event_bus.emit(FrogCreatedEvent(frog=snapshot, parent_ids=(), tick=self._tick))
            return snapshot

    def start(self, period: Optional[float] = None) -> bool:
        """Begin ticking every ``period`` seconds on a background thread.

        Seeds the initial population if the pond is empty. Calling start
        on a running engine does nothing.

        Returns:
            True if the engine was started by this call

        Raises:
            SimulationError: if the tick thread of a previous run is still alive
        """
        if period is not None and period <= 0:
            raise ValueError(f"Tick period must be positive, got {period}")
        if not self._running:
            self._wait_for_previous_thread()

        with self._lock:
            if self._running:
                return False
            if period is not None:
                self._period = period
            if not self._frogs:
                self.populate()

            self._running = True
            # Each run gets its own stop signal so a late-exiting loop never revives
            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._run_loop, args=(self._stop_event,), name="pond-tick", daemon=True
            )
            self._thread.start()
            logger.info("Simulation started (period %.3fs)", self._period)
            return True

    def stop(self) -> None:
        """Halt ticking and reset the session.

        Frogs are cleared, resources return to their initial levels and
        pending requests and cooldowns are discarded.
        """
        with self._lock:
            was_running = self._running
            self._running = False
            self._stop_event.set()
            thread = self._thread

        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.join_timeout)
            if thread.is_alive():
                logger.warning("Tick thread did not exit within %.1fs", self.join_timeout)

        with self._lock:
            self._frogs.clear()
            self._requests.clear()
            self._cooldowns.clear()
            self.pool.reset()
            self._tick = 0
            self._period = self.config.tick_period

        logger.info("Simulation %s and reset", "stopped" if was_running else "reset")

    # ------------------------------------------------------------------
    # Inbound intents
    # ------------------------------------------------------------------

    def submit_mate_request(self, first_id: str, second_id: str) -> bool:
        """Queue a mate request for the next tick.

        Returns:
            False if the request duplicates one already waiting
        """
        with self._lock:
            return self._requests.submit(first_id, second_id)

    def report_position(self, frog_id: str, position: Position) -> None:
        """Record a renderer's position for a frog.

        Raises:
            StaleReferenceError: if the frog is no longer in the pond
        """
        with self._lock:
            frog = self._frogs.get(frog_id)
            if frog is None:
                raise StaleReferenceError(frog_id)
            frog.position = Position.clamped(position.x, position.y)

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def tick(self) -> TickResult:
        """Advance the simulation by one tick and emit its events."""
        lifecycle = self.config.lifecycle
        with self._lock:
            self._tick += 1
            tick = self._tick
            result = TickResult(tick=tick)

            self.pool.advance()

            survivors: list[Frog] = []
            dead: list[Frog] = []
            for frog in self._frogs.values():
                self.pool.feed(lifecycle.algae_per_frog)
                frog.grow_older(tick)
                if frog.is_dead:
                    dead.append(frog)
                else:
                    survivors.append(frog)

            for frog_id in self._cooldowns.pop_expired(tick):
                frog = self._frogs.get(frog_id)
                if frog is not None and not frog.is_dead:
                    frog.end_cooldown(tick)

            offspring: list[tuple[Frog, tuple[str, str]]] = []
            cooldown_ticks = self.cooldown_ticks
            for request in self._requests.drain():
                child = self._coordinator.attempt(request, self._frogs, tick, cooldown_ticks)
                if child is not None:
                    self._spawn(child)
                    offspring.append((child, (request.first_id, request.second_id)))

            for frog in dead:
                del self._frogs[frog.id]
                self._cooldowns.cancel(frog.id)
                self.pool.credit(lifecycle.death_nitrogen_credit)

            for frog in survivors:
                snapshot = frog.snapshot()
                result.updated.append(snapshot)
                self.event_bus.emit(FrogUpdatedEvent(frog=snapshot, tick=tick))
            for child, parents in offspring:
                snapshot = child.snapshot()
                result.created.append(snapshot)
                self.event_bus.emit(FrogCreatedEvent(frog=snapshot, parent_ids=parents, tick=tick))
            for frog in dead:
                result.removed.append(frog.id)
                self.event_bus.emit(
                    FrogRemovedEvent(frog_id=frog.id, age=frog.age, reason="old_age", tick=tick)
                )

            result.stats = PondStatsEvent(
                population=len(self._frogs),
                algae=self.pool.algae,
                oxygen=self.pool.oxygen,
                nitrogen=self.pool.nitrogen,
                tick=tick,
            )
            self.event_bus.emit(result.stats)

        if dead or offspring:
            logger.debug(
                "Tick %d: %d born, %d died, population %d",
                tick,
                len(offspring),
                len(dead),
                result.stats.population,
            )
        interval = self.config.status_log_interval
        if interval > 0 and tick % interval == 0:
            logger.info(
                "Pond status tick=%d frogs=%d algae=%d nitrogen=%d oxygen=%d",
                tick,
                result.stats.population,
                result.stats.algae,
                result.stats.nitrogen,
                result.stats.oxygen,
            )
        return result

    def _spawn(self, frog: Frog) -> Frog:
        while frog.id in self._frogs:
            frog.id = Frog.spawn(self._rng).id
        self._frogs[frog.id] = frog
        return frog

    def _wait_for_previous_thread(self) -> None:
        thread = self._thread
        if thread is None or thread is threading.current_thread():
            return
        thread.join(timeout=self.join_timeout)
        if thread.is_alive():
            raise SimulationError("Tick thread from the previous run is still alive")

    def _run_loop(self, stop_event: threading.Event) -> None:
        """Tick at the configured period until ``stop_event`` is set."""
        logger.info("Tick loop: starting")
        ticks = 0
        next_tick_time = time.monotonic()
        try:
            while not stop_event.is_set():
                next_tick_time += self._period
                sleep_time = next_tick_time - time.monotonic()
                if sleep_time < -self._period:
                    # Too far behind: resync instead of bursting ticks to catch up
                    next_tick_time = time.monotonic()
                elif sleep_time > 0 and stop_event.wait(sleep_time):
                    break

                try:
                    self.tick()
                    ticks += 1
                except Exception as e:
                    logger.error("Tick loop: error at tick %d: %s", self._tick, e, exc_info=True)
        finally:
            logger.info("Tick loop: ended after %d ticks", ticks)
