"""Tests for the authoritative tick engine."""

import threading
import time

import pytest

from pond.config.simulation_config import PondConfig
from pond.engine import SimulationEngine
from pond.entities.frog import Frog, Gender, Position
from pond.events import FrogCreatedEvent, FrogRemovedEvent, FrogUpdatedEvent, PondStatsEvent
from pond.exceptions import SimulationError, StaleReferenceError
from tests.helpers import make_frog


def _assert_eligibility_invariant(engine: SimulationEngine) -> None:
    tick = engine.tick_count
    for snapshot in engine.snapshot():
        fertile = 0.2 * snapshot.max_age < snapshot.age < 0.8 * snapshot.max_age
        expires = engine._cooldowns.expires_at(snapshot.id)
        cooling = expires is not None and tick < expires
        assert snapshot.can_mate == (fertile and not cooling), snapshot


class TestTickResources:
    """Resource accounting inside a tick."""

    def test_first_tick_with_initial_population(self, seeded_rng) -> None:
        engine = SimulationEngine(rng=seeded_rng)
        engine.populate()
        assert engine.population == 20

        result = engine.tick()

        assert engine.pool.nitrogen == 9850
        assert engine.pool.oxygen == 250
        # 150 after growth, then each of the 20 frogs eats one
        assert engine.pool.algae == 130
        assert result.stats.population == 20
        assert result.stats.algae == 130

    def test_nitrogen_plus_oxygen_grows_only_by_death_credits(self, engine) -> None:
        engine.add_frog(make_frog("old", age=97))
        engine.add_frog(make_frog("young", age=0))

        for _ in range(6):
            before = engine.pool.nitrogen + engine.pool.oxygen
            result = engine.tick()
            after = engine.pool.nitrogen + engine.pool.oxygen
            assert after - before == 100 * len(result.removed)

    def test_algae_never_negative_with_many_frogs(self, engine) -> None:
        engine.populate(500)

        engine.tick()

        assert engine.pool.algae == 0
        assert engine.population == 500


class TestLifecycle:
    """Aging, eligibility and death across ticks."""

    def test_eligibility_boundary(self, engine) -> None:
        engine.add_frog(make_frog("a", age=0))

        for _ in range(20):
            engine.tick()
        assert engine.get_frog("a").can_mate is False

        engine.tick()
        assert engine.get_frog("a").can_mate is True

    def test_frog_removed_in_the_tick_it_reaches_max_age(self, engine, recorded_events) -> None:
        engine.add_frog(make_frog("a", age=98))

        engine.tick()
        assert engine.get_frog("a") is not None

        result = engine.tick()

        assert result.removed == ["a"]
        assert engine.get_frog("a") is None
        assert all(s.id != "a" for s in result.updated)

        engine.tick()
        removals = [e for e in recorded_events if isinstance(e, FrogRemovedEvent)]
        assert [e.frog_id for e in removals] == ["a"]
        assert removals[0].reason == "old_age"
        last_update = max(
            e.tick for e in recorded_events if isinstance(e, FrogUpdatedEvent) and e.frog.id == "a"
        )
        assert last_update < removals[0].tick

    def test_invariant_holds_through_a_long_run(self, engine) -> None:
        engine.populate(30)
        for _ in range(150):
            frogs = engine.snapshot()
            for first, second in zip(frogs[::2], frogs[1::2]):
                engine.submit_mate_request(first.id, second.id)
            engine.tick()
            _assert_eligibility_invariant(engine)
            assert all(s.age < s.max_age for s in engine.snapshot())

    def test_events_emitted_in_tick_order(self, engine, recorded_events) -> None:
        engine.add_frog(make_frog("dying", age=99))
        engine.add_frog(make_frog("m", Gender.MALE, age=30))
        engine.add_frog(make_frog("f", Gender.FEMALE, age=30))
        recorded_events.clear()
        engine.submit_mate_request("m", "f")

        engine.tick()

        kinds = [type(e) for e in recorded_events]
        assert kinds == [
            FrogUpdatedEvent,
            FrogUpdatedEvent,
            FrogCreatedEvent,
            FrogRemovedEvent,
            PondStatsEvent,
        ]
        stats = recorded_events[-1]
        assert stats.population == 3


class TestMating:
    """Mate requests resolved at the tick boundary."""

    def test_request_applied_on_next_tick_not_immediately(self, engine) -> None:
        engine.add_frog(make_frog("m", Gender.MALE, age=30))
        engine.add_frog(make_frog("f", Gender.FEMALE, age=30))

        engine.submit_mate_request("m", "f")
        assert engine.population == 2

        result = engine.tick()

        assert engine.population == 3
        assert len(result.created) == 1
        assert result.created[0].position == Position(0.5, 0.5)

    def test_ineligible_request_changes_nothing(self, engine) -> None:
        engine.add_frog(make_frog("m", Gender.MALE, age=30))
        engine.add_frog(make_frog("f", Gender.FEMALE, age=2))

        engine.submit_mate_request("m", "f")
        result = engine.tick()

        assert result.created == []
        assert result.stats.population == 2
        assert engine.get_frog("m").can_mate is True

    def test_concurrent_mutual_requests_create_one_offspring(self, engine) -> None:
        engine.add_frog(make_frog("m", Gender.MALE, age=30))
        engine.add_frog(make_frog("f", Gender.FEMALE, age=30))

        # Two renderers each detect the pair, from both sides
        engine.submit_mate_request("m", "f")
        engine.submit_mate_request("f", "m")
        engine.submit_mate_request("m", "f")
        result = engine.tick()

        assert len(result.created) == 1
        assert engine.population == 3

    def test_cooldown_restores_eligibility_no_earlier_than_period(self, engine) -> None:
        engine.add_frog(make_frog("m", Gender.MALE, age=30))
        engine.add_frog(make_frog("f", Gender.FEMALE, age=30))
        engine.submit_mate_request("m", "f")
        mated_at = engine.tick().tick
        assert engine.cooldown_ticks == 10

        for _ in range(9):
            engine.tick()
            assert engine.get_frog("m").can_mate is False
            assert engine.get_frog("f").can_mate is False

        engine.tick()
        assert engine.tick_count == mated_at + 10
        assert engine.get_frog("m").can_mate is True
        assert engine.get_frog("f").can_mate is True

    def test_cooldown_survives_partner_death(self, engine) -> None:
        engine.add_frog(make_frog("m", Gender.MALE, age=30))
        # Short-lived partner: fertile between ages 2 and 8, dies at 10
        engine.add_frog(Frog("f", Gender.FEMALE, Position(0.5, 0.5), age=6, max_age=10))
        engine.submit_mate_request("m", "f")
        engine.tick()

        for _ in range(5):
            engine.tick()
        assert engine.get_frog("f") is None
        assert engine.get_frog("m").can_mate is False

        for _ in range(4):
            engine.tick()
        assert engine.tick_count == 10
        assert engine.get_frog("m").can_mate is False

        engine.tick()
        assert engine.get_frog("m").can_mate is True

    def test_cooldown_ticks_follow_period(self) -> None:
        engine = SimulationEngine(PondConfig(tick_period=0.25))

        assert engine.cooldown_ticks == 40


class TestReportPosition:
    """The one write applied outside the tick."""

    def test_updates_existing_frog(self, engine) -> None:
        engine.add_frog(make_frog("a"))

        engine.report_position("a", Position(0.2, 0.3))

        assert engine.get_frog("a").position == Position(0.2, 0.3)

    def test_clamps_to_unit_square(self, engine) -> None:
        engine.add_frog(make_frog("a"))

        engine.report_position("a", Position(1.7, -0.1))

        assert engine.get_frog("a").position == Position(1.0, 0.0)

    def test_unknown_frog_is_stale_reference(self, engine) -> None:
        with pytest.raises(StaleReferenceError) as exc_info:
            engine.report_position("ghost", Position(0.1, 0.1))

        assert exc_info.value.frog_id == "ghost"

    def test_concurrent_reports_while_ticking(self, seeded_rng) -> None:
        engine = SimulationEngine(PondConfig(initial_population=0, tick_period=0.001), rng=seeded_rng)
        frog_ids = [f"frog-{i}" for i in range(80)]
        for frog_id in frog_ids:
            # Long-lived so nothing dies while the reporters run
            engine.add_frog(Frog(frog_id, Gender.MALE, Position(0.5, 0.5), max_age=10**9))

        workers = 4
        rounds = 150
        unexpected: list = []
        stale: list = []
        last_reported: dict = {}

        def report(worker: int) -> None:
            try:
                for n in range(rounds):
                    for frog_id in frog_ids[worker::workers]:
                        position = Position((worker + n) % 100 / 100, n / rounds)
                        engine.report_position(frog_id, position)
                        last_reported[frog_id] = position
                    try:
                        engine.report_position("gone", Position(0.1, 0.1))
                    except StaleReferenceError as e:
                        stale.append(e.frog_id)
            except Exception as e:
                unexpected.append(e)

        threads = [threading.Thread(target=report, args=(w,)) for w in range(workers)]
        try:
            engine.start()
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join(timeout=10)

            deadline = time.monotonic() + 2.0
            while engine.tick_count < 3 and time.monotonic() < deadline:
                time.sleep(0.005)

            assert unexpected == []
            assert len(stale) == workers * rounds
            assert engine.tick_count >= 3
            for frog_id in frog_ids:
                assert engine.get_frog(frog_id).position == last_reported[frog_id]
        finally:
            engine.stop()


class TestAttach:
    """Snapshot replay for late joiners."""

    def test_late_joiner_gets_one_create_per_frog_first(self, engine) -> None:
        engine.populate(5)
        engine.tick()
        engine.tick()

        events: list = []
        replayed = engine.attach(events.append)
        engine.tick()

        assert replayed == 5
        assert all(isinstance(e, FrogCreatedEvent) for e in events[:5])
        assert {e.frog.id for e in events[:5]} == {s.id for s in engine.snapshot()}
        assert isinstance(events[5], FrogUpdatedEvent)

    def test_detach_stops_delivery(self, engine) -> None:
        events: list = []
        engine.attach(events.append)
        engine.detach(events.append)

        engine.tick()

        assert events == []


class TestStartStop:
    """Background ticking and session reset."""

    def test_start_is_idempotent_and_ticks(self, seeded_rng) -> None:
        engine = SimulationEngine(PondConfig(initial_population=4), rng=seeded_rng)
        try:
            assert engine.start(0.01) is True
            assert engine.start(0.01) is False
            assert engine.population == 4

            deadline = time.monotonic() + 2.0
            while engine.tick_count < 3 and time.monotonic() < deadline:
                time.sleep(0.01)
            assert engine.tick_count >= 3
        finally:
            engine.stop()

    def test_stop_resets_everything(self, seeded_rng) -> None:
        engine = SimulationEngine(PondConfig(initial_population=4), rng=seeded_rng)
        engine.add_frog(make_frog("m", Gender.MALE, age=30))
        engine.add_frog(make_frog("f", Gender.FEMALE, age=30))
        engine.submit_mate_request("m", "f")
        engine.tick()
        engine.submit_mate_request("m", "f")

        engine.stop()

        assert engine.running is False
        assert engine.population == 0
        assert engine.tick_count == 0
        assert engine.pool.levels() == {"algae": 100, "nitrogen": 10000, "oxygen": 100}
        assert len(engine._cooldowns) == 0
        assert len(engine._requests) == 0

    def test_restart_after_stop_repopulates(self, seeded_rng) -> None:
        engine = SimulationEngine(PondConfig(initial_population=3, tick_period=60), rng=seeded_rng)
        try:
            engine.start()
            engine.stop()
            assert engine.population == 0

            assert engine.start() is True
            assert engine.population == 3
        finally:
            engine.stop()

    def test_rejects_non_positive_period(self, engine) -> None:
        with pytest.raises(ValueError):
            engine.start(0)
        assert engine.running is False

    def test_restart_refused_while_previous_tick_thread_alive(self, seeded_rng) -> None:
        engine = SimulationEngine(PondConfig(initial_population=1, tick_period=0.01), rng=seeded_rng)
        engine.join_timeout = 0.05
        entered = threading.Event()
        release = threading.Event()
        real_tick = engine.tick

        def slow_tick():
            entered.set()
            release.wait(5)
            return real_tick()

        engine.tick = slow_tick
        try:
            engine.start()
            assert entered.wait(2)
            old_thread = engine._thread

            engine.stop()
            assert old_thread.is_alive()

            with pytest.raises(SimulationError):
                engine.start()
            assert engine.running is False

            release.set()
            old_thread.join(timeout=2)
            assert not old_thread.is_alive()

            del engine.tick
            assert engine.start() is True
            assert engine._thread is not old_thread
            assert engine._thread.is_alive()
        finally:
            release.set()
            engine.stop()
