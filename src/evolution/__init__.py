"""Evolution log tracking (usage patterns, config evolution events)."""

from src.evolution.tracker import EvolutionTracker

__all__ = ["EvolutionTracker"]
