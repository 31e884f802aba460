"""
Character effect records for the combat engine.

A character effect is a timed numeric bonus attached to a shot, such as the
one a boost grants. It expires at a point on the fight's shot clock.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from ..core.constants import EffectSeverity
from ..core.utils import new_id, utc_now


class CharacterEffect(BaseModel):
    """
    Represents a timed bonus or penalty on one shot.

    Attributes:
        action_value (str | None):
            The attribute the change applies to (e.g. "Guns", "Defense").
        change (str | None):
            Signed change, e.g. "+1".
        end_sequence (int | None):
            Sequence in which the effect runs out. None never expires.
        end_shot (int | None):
            Shot within ``end_sequence`` at which it runs out. None means the
            effect lasts through the whole of ``end_sequence``.

    """

    id: str = Field(default_factory=new_id)
    name: str = Field(description="The name of the effect.")
    description: str = Field(default="")
    severity: EffectSeverity = Field(default=EffectSeverity.INFO)
    action_value: str | None = Field(default=None)
    change: str | None = Field(default=None)
    shot_id: str
    character_id: str | None = Field(default=None)
    vehicle_id: str | None = Field(default=None)
    end_sequence: int | None = Field(default=None)
    end_shot: int | None = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def is_expired(self, sequence: int, shot_counter: int) -> bool:
        """
        Check whether the shot clock has reached the effect's end point.

        The clock moves forward as the sequence grows and, within a sequence,
        as the shot counter falls.

        Args:
            sequence (int): The fight's current sequence.
            shot_counter (int): The fight's current shot.

        Returns:
            bool: True if the effect should be removed.

        """
        if self.end_sequence is None:
            return False
        if sequence > self.end_sequence:
            return True
        if sequence < self.end_sequence or self.end_shot is None:
            return False
        return shot_counter <= self.end_shot
