"""
Actor records for the combat engine.

Characters and vehicles are owned by the wider application; the engine only
reads them and writes back a handful of fields (wounds, Fortune, status tags,
impairments, chase points). These models describe that shared shape.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from ..core.constants import CharacterType, Status
from ..core.utils import new_id, unique, utc_now
from .action_values import ActionValues


class Actor(BaseModel):
    """
    Common shape of every actor that can hold a shot in a fight.

    Attributes:
        id (str):
            Identifier of the actor record.
        name (str):
            Display name.
        campaign_id (str | None):
            Campaign the actor belongs to.
        action_values (ActionValues):
            Free-form attribute map.
        status (list[str]):
            Status tags, order preserving and free of duplicates.
        impairments (int):
            Impairment counter.

    """

    id: str = Field(default_factory=new_id)
    name: str = Field(description="Display name of the actor.")
    campaign_id: str | None = Field(default=None)
    action_values: ActionValues = Field(default_factory=ActionValues)
    status: list[str] = Field(default_factory=list)
    impairments: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("status")
    @classmethod
    def _dedupe_status(cls, value: list[str]) -> list[str]:
        return unique(value)

    @property
    def classification(self) -> CharacterType:
        """Returns how the engine should treat this actor."""
        return self.action_values.type

    @property
    def colored_name(self) -> str:
        return self.classification.colorize(self.name)

    def has_status(self, status: Status | str) -> bool:
        return str(status) in self.status


class Character(Actor):
    """A character actor. Its classification comes from the "Type" value."""

    kind: Literal["character"] = "character"

    @property
    def is_pc(self) -> bool:
        return self.classification == CharacterType.PC


class Vehicle(Actor):
    """A vehicle actor. Vehicles are always classified as such."""

    kind: Literal["vehicle"] = "vehicle"

    @property
    def classification(self) -> CharacterType:
        return CharacterType.VEHICLE
