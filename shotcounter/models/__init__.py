"""
Record models for the shot counter combat engine.

This module contains the pydantic models for fights, shots, fight events,
chase relationships, character effects and the actors they reference.
"""

from .action_values import ActionValues
from .actors import Actor, Character, Vehicle
from .effects import CharacterEffect
from .fight import ChaseRelationship, Fight, FightEvent, Shot

__all__ = [
    "ActionValues",
    "Actor",
    "Character",
    "Vehicle",
    "CharacterEffect",
    "ChaseRelationship",
    "Fight",
    "FightEvent",
    "Shot",
]
