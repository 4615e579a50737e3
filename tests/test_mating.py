"""Tests for mate request buffering, pair resolution and cooldowns."""

import random

from pond.entities.frog import Gender, Position
from pond.mating import CooldownSchedule, MateRequestQueue, MatingAttempt, MatingCoordinator
from tests.helpers import make_frog


class TestMateRequestQueue:
    """Requests are buffered once per unordered pair."""

    def test_duplicate_pair_rejected_in_either_order(self) -> None:
        queue = MateRequestQueue()

        assert queue.submit("a", "b") is True
        assert queue.submit("a", "b") is False
        assert queue.submit("b", "a") is False
        assert len(queue) == 1

    def test_self_pairing_rejected(self) -> None:
        queue = MateRequestQueue()

        assert queue.submit("a", "a") is False
        assert len(queue) == 0

    def test_drain_returns_arrival_order_and_clears(self) -> None:
        queue = MateRequestQueue()
        queue.submit("a", "b")
        queue.submit("c", "d")

        drained = queue.drain()

        assert drained == [MatingAttempt("a", "b"), MatingAttempt("c", "d")]
        assert len(queue) == 0
        # The same pair may ask again after a drain
        assert queue.submit("b", "a") is True


class TestCooldownSchedule:
    """Per-frog expiry tracking."""

    def test_pop_expired_returns_due_entries_only(self) -> None:
        schedule = CooldownSchedule()
        schedule.schedule("a", 5)
        schedule.schedule("b", 8)

        assert schedule.pop_expired(4) == []
        assert schedule.pop_expired(5) == ["a"]
        assert schedule.expires_at("a") is None
        assert schedule.expires_at("b") == 8

    def test_cancel(self) -> None:
        schedule = CooldownSchedule()
        schedule.schedule("a", 5)

        assert schedule.cancel("a") is True
        assert schedule.cancel("a") is False
        assert schedule.pop_expired(10) == []


class TestMatingCoordinator:
    """Resolution of a single mate request."""

    def _coordinator(self) -> MatingCoordinator:
        return MatingCoordinator(random.Random(5))

    def test_eligible_pair_produces_one_offspring(self) -> None:
        coordinator = self._coordinator()
        first = make_frog("a", Gender.MALE, age=30, x=0.1, y=0.9)
        second = make_frog("b", Gender.FEMALE, age=40)
        frogs = {"a": first, "b": second}

        child = coordinator.attempt(MatingAttempt("a", "b"), frogs, tick=12, cooldown_ticks=10)

        assert child is not None
        assert child.age == 0
        assert child.max_age == 100
        assert child.position == Position(0.1, 0.9)
        assert child.id not in frogs
        assert child.gender in (Gender.MALE, Gender.FEMALE)

    def test_parents_enter_independent_cooldowns(self) -> None:
        coordinator = self._coordinator()
        first = make_frog("a", Gender.MALE, age=30)
        second = make_frog("b", Gender.FEMALE, age=40)

        coordinator.attempt(MatingAttempt("a", "b"), {"a": first, "b": second}, tick=12, cooldown_ticks=10)

        assert first.can_mate is False
        assert second.can_mate is False
        assert first.mating_cooldown_until == 22
        assert coordinator.cooldowns.expires_at("a") == 22
        assert coordinator.cooldowns.expires_at("b") == 22

    def test_ineligible_partner_is_a_no_op(self) -> None:
        coordinator = self._coordinator()
        first = make_frog("a", Gender.MALE, age=30)
        young = make_frog("b", Gender.FEMALE, age=5)

        child = coordinator.attempt(MatingAttempt("a", "b"), {"a": first, "b": young}, tick=1, cooldown_ticks=10)

        assert child is None
        assert first.can_mate is True
        assert len(coordinator.cooldowns) == 0

    def test_missing_frog_is_a_no_op(self) -> None:
        coordinator = self._coordinator()
        first = make_frog("a", Gender.MALE, age=30)

        child = coordinator.attempt(MatingAttempt("a", "gone"), {"a": first}, tick=1, cooldown_ticks=10)

        assert child is None
        assert first.can_mate is True

    def test_second_attempt_for_same_pair_fails(self) -> None:
        coordinator = self._coordinator()
        frogs = {
            "a": make_frog("a", Gender.MALE, age=30),
            "b": make_frog("b", Gender.FEMALE, age=30),
        }

        assert coordinator.attempt(MatingAttempt("a", "b"), frogs, tick=1, cooldown_ticks=10) is not None
        assert coordinator.attempt(MatingAttempt("b", "a"), frogs, tick=1, cooldown_ticks=10) is None
