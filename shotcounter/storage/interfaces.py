"""
Store interfaces the combat engine reads from and writes to.

The engine never talks to a database directly. It is handed an object that
satisfies these protocols; the in-memory store in this package is the
reference implementation.
"""

from contextlib import AbstractContextManager
from typing import Any, Mapping, Optional, Protocol

from ..models import (
    Actor,
    ChaseRelationship,
    Character,
    CharacterEffect,
    Fight,
    FightEvent,
    Shot,
    Vehicle,
)


class ActorStore(Protocol):

    def get_character(self, character_id: str) -> Optional[Character]:
        """Return the character with the given id, or None."""
        ...

    def get_vehicle(self, vehicle_id: str) -> Optional[Vehicle]:
        """Return the vehicle with the given id, or None."""
        ...

    def update_actor(self, actor: Actor, fields: Mapping[str, Any]) -> Actor:
        """Write ``fields`` onto the actor and return the stored result.

        Raises:
            ValidationFailureError: If the result breaks an invariant.
            PersistenceFailureError: If the write is rejected.
        """
        ...


class ShotStore(Protocol):

    def get_shot(self, shot_id: str) -> Optional[Shot]:
        ...

    def update_shot(self, shot: Shot, fields: Mapping[str, Any]) -> Shot:
        """Write ``fields`` onto the shot and return the stored result."""
        ...

    def find_shot_by_fight_and_actor(
        self, fight_id: str, actor_id: str
    ) -> Optional[Shot]:
        """Return the shot an actor holds in a fight, or None."""
        ...

    def list_shots(self, fight_id: str) -> list[Shot]:
        """Return every shot of a fight in insertion order."""
        ...


class ChaseRelationshipStore(Protocol):

    def find_or_create_relationship(
        self, fight_id: str, pursuer_shot_id: str, evader_shot_id: str
    ) -> ChaseRelationship:
        """Return the active relationship for the pair, creating it if needed."""
        ...

    def update_relationship(
        self, relationship: ChaseRelationship, fields: Mapping[str, Any]
    ) -> ChaseRelationship:
        ...

    def list_relationships(
        self,
        fight_id: str,
        shot_id: Optional[str] = None,
        active: Optional[bool] = True,
    ) -> list[ChaseRelationship]:
        ...


class EventStore(Protocol):

    def append_event(
        self,
        fight_id: str,
        event_type: str,
        description: str,
        details: Mapping[str, Any],
    ) -> FightEvent:
        ...

    def list_events(self, fight_id: str) -> list[FightEvent]:
        """Return a fight's events in creation order."""
        ...


class EffectStore(Protocol):

    def add_effect(self, effect: CharacterEffect) -> CharacterEffect:
        ...

    def list_effects(self, fight_id: str) -> list[CharacterEffect]:
        ...

    def remove_effect(self, effect: CharacterEffect) -> None:
        ...


class FightStore(Protocol):

    def get_fight(self, fight_id: str) -> Optional[Fight]:
        ...

    def update_fight(self, fight: Fight, fields: Mapping[str, Any]) -> Fight:
        ...

    def touch_fight(self, fight: Fight) -> Fight:
        """Bump the fight's freshness marker in a single atomic write."""
        ...


class CombatStore(
    ActorStore,
    ShotStore,
    ChaseRelationshipStore,
    EventStore,
    EffectStore,
    FightStore,
    Protocol,
):
    """Everything a combat service needs, plus the transaction boundary."""

    def transaction(self) -> AbstractContextManager[Any]:
        """
        Open an all-or-nothing unit of work.

        Writes made inside the block are discarded if the block raises; the
        exception is then re-raised unchanged.
        """
        ...


class NotificationSink(Protocol):

    def notify(self, fight_id: str, payload: dict[str, Any]) -> None:
        """Tell subscribers a fight changed. Called after commit only."""
        ...
