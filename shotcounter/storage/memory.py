"""
In-memory record store.

Implements every store protocol the combat services need on top of plain
dictionaries. Records are pydantic models that are never mutated in place:
each write validates and stores a fresh copy, so a transaction snapshot is a
shallow copy of the tables and rolling back is swapping them back in.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from ..core.error_handling import NotFoundError, validation_failure_from
from ..core.logging import log_debug
from ..core.utils import utc_now
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

M = TypeVar("M", bound=BaseModel)

_TABLES = (
    "fights",
    "shots",
    "characters",
    "vehicles",
    "events",
    "relationships",
    "effects",
)


def _revalidate(record: M, fields: Mapping[str, Any]) -> M:
    """Returns a validated copy of ``record`` with ``fields`` applied."""
    data = record.model_dump()
    data.update(fields)
    data["updated_at"] = utc_now()
    try:
        return type(record).model_validate(data)
    except ValidationError as e:
        raise validation_failure_from(
            e, {"record": type(record).__name__, "id": data.get("id")}
        ) from e


class InMemoryStore:
    """
    Dictionary-backed implementation of CombatStore.

    A single re-entrant lock serialises transactions, which stands in for the
    row-level locking a database would provide. Reads and writes made outside
    a transaction take the same lock for their own duration, so another thread
    never sees the writes of a transaction that has not finished.
    """

    def __init__(self) -> None:
        self.fights: dict[str, Fight] = {}
        self.shots: dict[str, Shot] = {}
        self.characters: dict[str, Character] = {}
        self.vehicles: dict[str, Vehicle] = {}
        self.events: dict[str, FightEvent] = {}
        self.relationships: dict[str, ChaseRelationship] = {}
        self.effects: dict[str, CharacterEffect] = {}
        self._lock = threading.RLock()
        self._depth = 0

    # === Transactions ===

    @contextmanager
    def transaction(self) -> Iterator[InMemoryStore]:
        with self._lock:
            outermost = self._depth == 0
            snapshot = self._snapshot() if outermost else None
            self._depth += 1
            try:
                yield self
            except BaseException:
                if snapshot is not None:
                    self._restore(snapshot)
                    log_debug("Transaction rolled back")
                raise
            finally:
                self._depth -= 1

    def _snapshot(self) -> dict[str, dict[str, Any]]:
        return {name: dict(getattr(self, name)) for name in _TABLES}

    def _restore(self, snapshot: dict[str, dict[str, Any]]) -> None:
        for name, table in snapshot.items():
            setattr(self, name, table)

    # === Seeding ===

    def add_fight(self, fight: Fight) -> Fight:
        with self._lock:
            self.fights[fight.id] = fight
        return fight

    def add_character(self, character: Character) -> Character:
        with self._lock:
            self.characters[character.id] = character
        return character

    def add_vehicle(self, vehicle: Vehicle) -> Vehicle:
        with self._lock:
            self.vehicles[vehicle.id] = vehicle
        return vehicle

    def add_shot(self, shot: Shot) -> Shot:
        with self._lock:
            if shot.fight_id not in self.fights:
                raise NotFoundError(f"Fight {shot.fight_id} not found")
            self.shots[shot.id] = shot
        return shot

    # === Fights ===

    def get_fight(self, fight_id: str) -> Optional[Fight]:
        with self._lock:
            return self.fights.get(fight_id)

    def update_fight(self, fight: Fight, fields: Mapping[str, Any]) -> Fight:
        with self._lock:
            if fight.id not in self.fights:
                raise NotFoundError(f"Fight {fight.id} not found")
            updated = _revalidate(self.fights[fight.id], fields)
            self.fights[fight.id] = updated
        return updated

    def touch_fight(self, fight: Fight) -> Fight:
        return self.update_fight(fight, {})

    # === Actors ===

    def get_character(self, character_id: str) -> Optional[Character]:
        with self._lock:
            return self.characters.get(character_id)

    def get_vehicle(self, vehicle_id: str) -> Optional[Vehicle]:
        with self._lock:
            return self.vehicles.get(vehicle_id)

    def update_actor(self, actor: Actor, fields: Mapping[str, Any]) -> Actor:
        with self._lock:
            table: dict[str, Any] = (
                self.vehicles if isinstance(actor, Vehicle) else self.characters
            )
            current = table.get(actor.id)
            if current is None:
                raise NotFoundError(f"{type(actor).__name__} {actor.id} not found")
            updated = _revalidate(current, fields)
            table[actor.id] = updated
        return updated

    # === Shots ===

    def get_shot(self, shot_id: str) -> Optional[Shot]:
        with self._lock:
            return self.shots.get(shot_id)

    def update_shot(self, shot: Shot, fields: Mapping[str, Any]) -> Shot:
        with self._lock:
            current = self.shots.get(shot.id)
            if current is None:
                raise NotFoundError(f"Shot {shot.id} not found")
            updated = _revalidate(current, fields)
            self.shots[shot.id] = updated
        return updated

    def find_shot_by_fight_and_actor(
        self, fight_id: str, actor_id: str
    ) -> Optional[Shot]:
        with self._lock:
            for shot in self.shots.values():
                if shot.fight_id == fight_id and actor_id in (
                    shot.character_id,
                    shot.vehicle_id,
                ):
                    return shot
        return None

    def list_shots(self, fight_id: str) -> list[Shot]:
        with self._lock:
            return [shot for shot in self.shots.values() if shot.fight_id == fight_id]

    # === Chase relationships ===

    def find_or_create_relationship(
        self, fight_id: str, pursuer_shot_id: str, evader_shot_id: str
    ) -> ChaseRelationship:
        with self._lock:
            for relationship in self.relationships.values():
                if (
                    relationship.active
                    and relationship.fight_id == fight_id
                    and relationship.pursuer_id == pursuer_shot_id
                    and relationship.evader_id == evader_shot_id
                ):
                    return relationship
            try:
                relationship = ChaseRelationship(
                    fight_id=fight_id,
                    pursuer_id=pursuer_shot_id,
                    evader_id=evader_shot_id,
                )
            except ValidationError as e:
                raise validation_failure_from(
                    e, {"pursuer_id": pursuer_shot_id, "evader_id": evader_shot_id}
                ) from e
            self.relationships[relationship.id] = relationship
        return relationship

    def update_relationship(
        self, relationship: ChaseRelationship, fields: Mapping[str, Any]
    ) -> ChaseRelationship:
        with self._lock:
            current = self.relationships.get(relationship.id)
            if current is None:
                raise NotFoundError(f"Chase relationship {relationship.id} not found")
            updated = _revalidate(current, fields)
            self.relationships[relationship.id] = updated
        return updated

    def list_relationships(
        self,
        fight_id: str,
        shot_id: Optional[str] = None,
        active: Optional[bool] = True,
    ) -> list[ChaseRelationship]:
        with self._lock:
            return [
                relationship
                for relationship in self.relationships.values()
                if relationship.fight_id == fight_id
                and (active is None or relationship.active == active)
                and (shot_id is None or shot_id in (relationship.pursuer_id, relationship.evader_id))
            ]

    # === Events ===

    def append_event(
        self,
        fight_id: str,
        event_type: str,
        description: str,
        details: Mapping[str, Any],
    ) -> FightEvent:
        try:
            event = FightEvent(
                fight_id=fight_id,
                event_type=event_type,
                description=description,
                details=dict(details),
            )
        except ValidationError as e:
            raise validation_failure_from(e, {"fight_id": fight_id}) from e
        with self._lock:
            if fight_id not in self.fights:
                raise NotFoundError(f"Fight {fight_id} not found")
            self.events[event.id] = event
        return event

    def list_events(self, fight_id: str) -> list[FightEvent]:
        with self._lock:
            return [event for event in self.events.values() if event.fight_id == fight_id]

    # === Effects ===

    def add_effect(self, effect: CharacterEffect) -> CharacterEffect:
        with self._lock:
            if effect.shot_id not in self.shots:
                raise NotFoundError(f"Shot {effect.shot_id} not found")
            self.effects[effect.id] = effect
        return effect

    def list_effects(self, fight_id: str) -> list[CharacterEffect]:
        with self._lock:
            shot_ids = {shot.id for shot in self.list_shots(fight_id)}
            return [effect for effect in self.effects.values() if effect.shot_id in shot_ids]

    def remove_effect(self, effect: CharacterEffect) -> None:
        with self._lock:
            if self.effects.pop(effect.id, None) is None:
                raise NotFoundError(f"Effect {effect.id} not found")
