"""
Constants and enumerations for the combat engine.

Defines the actor classifications, status tags, chase positions, boost types
and the other core values used throughout the engine.
"""

from enum import Enum


class NiceEnum(Enum):
    """An enumeration that provides a nicer string representation."""

    def __str__(self) -> str:
        return str(self.value)

    @property
    def display_name(self) -> str:
        return self.name.replace("_", " ").lower().capitalize()


class CharacterType(NiceEnum):
    """Defines the classification of an actor taking part in a fight."""

    PC = "PC"
    MOOK = "Mook"
    FEATURED_FOE = "Featured Foe"
    BOSS = "Boss"
    UBER_BOSS = "Uber-Boss"
    ALLY = "Ally"
    VEHICLE = "Vehicle"
    UNCLASSIFIED = "Unclassified"

    @classmethod
    def parse(cls, value: object) -> "CharacterType":
        """
        Maps a free-form "Type" action value onto a classification.

        Args:
            value (object):
                The raw value stored under the actor's "Type" key.

        Returns:
            CharacterType:
                The matching classification, or UNCLASSIFIED when nothing
                matches.

        """
        if isinstance(value, CharacterType):
            return value
        for member in cls:
            if member.value == value:
                return member
        return cls.UNCLASSIFIED

    @property
    def color(self) -> str:
        """Returns the color string associated with this character type."""
        return {
            CharacterType.PC: "bold blue",
            CharacterType.MOOK: "dim red",
            CharacterType.FEATURED_FOE: "red",
            CharacterType.BOSS: "bold red",
            CharacterType.UBER_BOSS: "bold magenta",
            CharacterType.ALLY: "bold green",
            CharacterType.VEHICLE: "bold yellow",
        }.get(self, "dim white")

    def colorize(self, message: str) -> str:
        """Applies character type color formatting to a message."""
        return f"[{self.color}]{message}[/]"


class Status(NiceEnum):
    """Status tags the engine reads and writes on actors."""

    UP_CHECK_REQUIRED = "up_check_required"
    OUT_OF_FIGHT = "out_of_fight"


class ChasePosition(NiceEnum):
    """Relative distance between a pursuer and an evader."""

    NEAR = "near"
    FAR = "far"


class ChaseRole(NiceEnum):
    """Which side of a chase relationship the updating shot is on."""

    PURSUER = "pursuer"
    EVADER = "evader"


class BoostType(NiceEnum):
    """The kind of bonus a boost grants."""

    ATTACK = "attack"
    DEFENSE = "defense"


class EffectSeverity(NiceEnum):
    """Display severity for character effects."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class EventType(NiceEnum):
    """Well-known fight event tags. Events may carry any other tag too."""

    COMBAT_ACTION = "combat_action"
    CHASE_ACTION = "chase_action"
    UP_CHECK = "up_check"
    BOOST = "boost"


# Action value keys the engine understands.
WOUNDS = "Wounds"
FORTUNE = "Fortune"
TYPE = "Type"
MAIN_ATTACK = "MainAttack"
DEFENSE = "Defense"
CHASE_POINTS = "Chase Points"
CONDITION_POINTS = "Condition Points"

# Number of shots in one sequence of the shot clock.
SHOTS_PER_SEQUENCE = 18
