"""Simulation entities."""

from pond.entities.frog import Frog, FrogSnapshot, Gender, LifeStage, Position

__all__ = ["Frog", "FrogSnapshot", "Gender", "LifeStage", "Position"]
