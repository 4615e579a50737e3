"""Shared test helpers."""

from pond.entities.frog import Frog, Gender, Position


def make_frog(
    frog_id: str,
    gender: Gender = Gender.MALE,
    age: int = 0,
    x: float = 0.5,
    y: float = 0.5,
) -> Frog:
    return Frog(frog_id, gender, Position(x, y), age=age)
