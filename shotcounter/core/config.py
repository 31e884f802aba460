"""
Rules configuration for the combat engine.

Holds the tunable numbers the services read (wound thresholds, boost costs,
additive chase fields, the shot clock length) in a single validated model that
can be loaded from a JSON file.
"""

import json
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from .constants import (
    CHASE_POINTS,
    CONDITION_POINTS,
    SHOTS_PER_SEQUENCE,
    BoostType,
    CharacterType,
)
from .error_handling import validation_failure_from


class BoostValues(BaseModel):
    """Bonus granted by one boost type, with and without spending Fortune."""

    base: int = Field(description="Bonus granted by a plain boost.")
    fortune: int = Field(description="Bonus granted when Fortune is spent.")


class CombatRules(BaseModel):
    """
    The set of numbers the combat services are parameterised by.

    Attributes:
        wound_thresholds (dict[str, int]):
            Wound total at which an actor type must make an up-check, keyed by
            the actor's "Type" action value. Types not listed never do.
        boost_cost (int):
            Shots the booster spends.
        boost_values (dict[str, BoostValues]):
            Bonus per boost type.
        default_main_attack (str):
            Attribute an attack boost targets when the target has no
            "MainAttack" action value.
        additive_chase_fields (list[str]):
            Vehicle action values that accumulate instead of being replaced.
        shots_per_sequence (int):
            Value the shot counter wraps to at the start of a sequence.

    """

    wound_thresholds: dict[str, int] = Field(
        default_factory=lambda: {
            CharacterType.PC.value: 35,
            CharacterType.BOSS.value: 50,
            CharacterType.UBER_BOSS.value: 50,
        },
        description="Up-check wound threshold per actor type.",
    )
    boost_cost: int = Field(default=3, ge=0, description="Shot cost of a boost.")
    boost_values: dict[str, BoostValues] = Field(
        default_factory=lambda: {
            BoostType.ATTACK.value: BoostValues(base=1, fortune=2),
            BoostType.DEFENSE.value: BoostValues(base=3, fortune=5),
        },
        description="Bonus granted per boost type.",
    )
    default_main_attack: str = Field(
        default="Guns",
        description="Attack attribute used when the target names none.",
    )
    additive_chase_fields: list[str] = Field(
        default_factory=lambda: [CHASE_POINTS, CONDITION_POINTS],
        description="Vehicle action values that accumulate.",
    )
    shots_per_sequence: int = Field(
        default=SHOTS_PER_SEQUENCE,
        gt=0,
        description="Shot counter value at the start of each sequence.",
    )

    def threshold_for(self, char_type: CharacterType) -> int | None:
        """Returns the up-check threshold for a type, or None if it has none."""
        return self.wound_thresholds.get(char_type.value)

    def boost_values_for(self, boost_type: BoostType) -> BoostValues:
        """Returns the bonus table for a boost type, falling back to attack."""
        return self.boost_values.get(
            boost_type.value, self.boost_values[BoostType.ATTACK.value]
        )


DEFAULT_RULES = CombatRules()


def load_rules(path: Path) -> CombatRules:
    """
    Loads a rules file, filling unspecified values with the defaults.

    Args:
        path (Path):
            The JSON file to read.

    Returns:
        CombatRules:
            The validated rules.

    Raises:
        ValidationFailureError:
            If the file content does not describe valid rules.

    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    try:
        return CombatRules.model_validate(data)
    except ValidationError as e:
        raise validation_failure_from(e, {"path": str(path)}) from e
