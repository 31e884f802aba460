"""
Action values module for the combat engine.

Actors carry a free-form, string-keyed attribute map ("action values") that
mixes numbers and text. ActionValues wraps that map with accessors for the
keys the engine understands and leaves every other key untouched, so content
the engine does not know about survives a round-trip.
"""

from __future__ import annotations

from typing import Any, Iterator, Mapping

from pydantic import Field, RootModel

from ..core.constants import (
    CHASE_POINTS,
    CONDITION_POINTS,
    DEFENSE,
    FORTUNE,
    MAIN_ATTACK,
    TYPE,
    WOUNDS,
    CharacterType,
)
from ..core.utils import parse_integer


class ActionValues(RootModel[dict[str, Any]]):
    """
    Typed view over an actor's attribute map.

    Known keys are exposed as read-only properties; unknown keys are reached
    through ``get``, item access and ``items``. Instances are treated as
    values: ``merged`` and ``with_value`` return new containers instead of
    mutating this one.
    """

    root: dict[str, Any] = Field(default_factory=dict)

    # ============================================================================
    # KNOWN KEYS
    # ============================================================================

    @property
    def type(self) -> CharacterType:
        """Returns the actor classification stored under "Type"."""
        return CharacterType.parse(self.root.get(TYPE))

    @property
    def wounds(self) -> int:
        """Returns the wound total stored under "Wounds"."""
        return parse_integer(self.root.get(WOUNDS))

    @property
    def fortune(self) -> int:
        """Returns the Fortune pool stored under "Fortune"."""
        return parse_integer(self.root.get(FORTUNE))

    @property
    def main_attack(self) -> str | None:
        """Returns the name of the actor's main attack attribute, if set."""
        value = self.root.get(MAIN_ATTACK)
        return str(value) if value else None

    @property
    def defense(self) -> int:
        return parse_integer(self.root.get(DEFENSE))

    @property
    def chase_points(self) -> int:
        return parse_integer(self.root.get(CHASE_POINTS))

    @property
    def condition_points(self) -> int:
        return parse_integer(self.root.get(CONDITION_POINTS))

    # ============================================================================
    # GENERIC ACCESS
    # ============================================================================

    def get(self, key: str, default: Any = None) -> Any:
        """Returns the raw value for any key."""
        return self.root.get(key, default)

    def get_int(self, key: str) -> int:
        """Returns the value for any key read as an integer (0 when absent)."""
        return parse_integer(self.root.get(key))

    def items(self) -> Iterator[tuple[str, Any]]:
        return iter(self.root.items())

    def to_dict(self) -> dict[str, Any]:
        return dict(self.root)

    def __getitem__(self, key: str) -> Any:
        return self.root[key]

    def __contains__(self, key: object) -> bool:
        return key in self.root

    def __len__(self) -> int:
        return len(self.root)

    # ============================================================================
    # DERIVING NEW VALUES
    # ============================================================================

    def with_value(self, key: str, value: Any) -> ActionValues:
        """
        Returns a copy with a single key replaced.

        Args:
            key (str): The key to set.
            value (Any): The new value.

        Returns:
            ActionValues: The updated copy.

        """
        return ActionValues({**self.root, key: value})

    def merged(self, updates: Mapping[str, Any]) -> ActionValues:
        """
        Returns a copy with every key of ``updates`` replaced.

        Args:
            updates (Mapping[str, Any]): The keys to overwrite.

        Returns:
            ActionValues: The updated copy.

        """
        return ActionValues({**self.root, **dict(updates)})
