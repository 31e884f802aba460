"""
Shot counter combat engine.

This package contains the combat resolution core for running turn-based
tabletop-RPG fights: the shot ledger, wound routing, batched combat actions,
vehicle chases, boosts and up-checks, on top of a pluggable record store.
"""

from .engine import CombatEngine

__version__ = "0.4.0"

__all__ = ["CombatEngine"]
