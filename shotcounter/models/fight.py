"""
Fight aggregate records for the combat engine.

Defines the fight itself, the per-actor shot entries, the append-only fight
event log and the chase relationships between shots.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..core.constants import ChasePosition
from ..core.utils import new_id, utc_now


class Fight(BaseModel):
    """
    Aggregate root for one combat encounter.

    The ``sequence`` counts completed passes over the shot clock and
    ``shot_counter`` is the shot currently being resolved within it.
    """

    id: str = Field(default_factory=new_id)
    name: str = Field(description="Name of the encounter.")
    campaign_id: str | None = Field(default=None)
    description: str | None = Field(default=None)
    active: bool = Field(default=True)
    archived: bool = Field(default=False)
    sequence: int = Field(default=0, ge=0, description="Sequence number.")
    shot_counter: int = Field(default=0, ge=0, description="Current shot.")
    started_at: datetime | None = Field(default=None)
    ended_at: datetime | None = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class Shot(BaseModel):
    """
    One actor-instance's entry on a fight's shot clock.

    Attributes:
        shot (int | None):
            Current turn-order count. Higher acts sooner; negative counts are
            allowed; None means initiative has not been rolled.
        count (int):
            Mook head-count, or the fight-local wound pool for non-PC
            characters.
        impairments (int):
            Impairment counter for this entry.
        character_id (str | None):
            Owning character. Exactly one of character_id and vehicle_id is set.
        vehicle_id (str | None):
            Owning vehicle.
        driver_id (str | None):
            On a vehicle shot, the shot of the character driving it.
        driving_id (str | None):
            On a character shot, the vehicle shot being driven.

    """

    id: str = Field(default_factory=new_id)
    fight_id: str
    shot: int | None = Field(default=None)
    count: int = Field(default=0, ge=0)
    impairments: int = Field(default=0, ge=0)
    location: str | None = Field(default=None)
    character_id: str | None = Field(default=None)
    vehicle_id: str | None = Field(default=None)
    driver_id: str | None = Field(default=None)
    driving_id: str | None = Field(default=None)
    was_rammed_or_damaged: bool = Field(default=False)
    acted: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def _check_actor_presence(self) -> "Shot":
        if self.character_id is None and self.vehicle_id is None:
            raise ValueError("must have either character or vehicle")
        if self.character_id is not None and self.vehicle_id is not None:
            raise ValueError("cannot have both character and vehicle")
        return self

    @property
    def actor_id(self) -> str:
        return self.character_id or self.vehicle_id  # type: ignore[return-value]


class FightEvent(BaseModel):
    """Append-only narrative entry documenting one state change."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    fight_id: str
    event_type: str = Field(description="Free-form tag, e.g. 'boost'.")
    description: str = Field(default="")
    details: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utc_now)


class ChaseRelationship(BaseModel):
    """Ordered pursuer/evader pairing between two shots of the same fight."""

    id: str = Field(default_factory=new_id)
    fight_id: str
    pursuer_id: str = Field(description="Shot id of the pursuer.")
    evader_id: str = Field(description="Shot id of the evader.")
    position: ChasePosition = Field(default=ChasePosition.FAR)
    active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def _check_different_shots(self) -> "ChaseRelationship":
        if self.pursuer_id == self.evader_id:
            raise ValueError("pursuer and evader cannot be the same")
        return self
