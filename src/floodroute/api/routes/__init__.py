"""Route group exports."""

from . import hazards, health, navigation

__all__ = ["navigation", "hazards", "health"]
