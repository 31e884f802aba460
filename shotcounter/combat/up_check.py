"""
Up-check resolution for the combat engine.

An actor whose wounds reach the threshold must roll an up-check. The state is
read from the actor's status tags rather than stored separately:

- ``up_check_required`` present: the check is pending.
- ``out_of_fight`` present without it: the actor has left the fight.
- neither present: the actor is active.

A passed check only clears the pending tag; wounds are left alone. A failed
check clears the pending tag and takes the actor out of the fight.
"""

from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from ..core.constants import EventType, NiceEnum, Status
from ..core.error_handling import (
    NotFoundError,
    TenancyViolationError,
    validation_failure_from,
)
from ..core.logging import log_info
from ..core.utils import unique
from ..models import Actor, Fight
from ..storage.interfaces import CombatStore, NotificationSink
from ..storage.unit_of_work import UnitOfWork


class UpCheckState(NiceEnum):
    """Recovery state of an actor, derived from its status tags."""

    ACTIVE = "active"
    UP_CHECK_REQUIRED = "up_check_required"
    OUT_OF_FIGHT = "out_of_fight"


def up_check_state(actor: Actor) -> UpCheckState:
    """Returns the recovery state an actor's status tags describe."""
    if actor.has_status(Status.UP_CHECK_REQUIRED):
        return UpCheckState.UP_CHECK_REQUIRED
    if actor.has_status(Status.OUT_OF_FIGHT):
        return UpCheckState.OUT_OF_FIGHT
    return UpCheckState.ACTIVE


def resolve_status(status: list[str], success: bool) -> list[str]:
    """
    Applies an up-check result to a status list.

    Args:
        status (list[str]):
            The actor's current status tags.
        success (bool):
            Whether the roll succeeded.

    Returns:
        list[str]:
            The new status tags, free of duplicates.

    """
    result = [tag for tag in status if tag != Status.UP_CHECK_REQUIRED.value]
    if not success:
        result.append(Status.OUT_OF_FIGHT.value)
    return unique(result)


class UpCheckRequest(BaseModel):
    """The outcome of one up-check roll."""

    character_id: str = Field(description="The character who rolled.")
    success: bool = Field(description="Whether the roll passed.")
    result: Optional[int] = Field(default=None, description="The rolled total.")


class UpCheckService:
    """
    Resolves up-check rolls into status changes.

    Attributes:
        store (CombatStore):
            Record store.
        notifier (NotificationSink | None):
            Informed after the check commits.

    """

    def __init__(
        self, store: CombatStore, notifier: Optional[NotificationSink] = None
    ) -> None:
        self.store: CombatStore = store
        self.notifier: Optional[NotificationSink] = notifier

    def apply_up_check(
        self, fight: Fight, request: Union[UpCheckRequest, Mapping[str, Any]]
    ) -> Fight:
        """
        Records an up-check roll and moves the character to its new state.

        Args:
            fight (Fight):
                The fight the character is in.
            request (UpCheckRequest | Mapping[str, Any]):
                Who rolled, the result, and whether it passed.

        Returns:
            Fight:
                The fight after it has been touched.

        Raises:
            NotFoundError:
                If the character does not exist.
            TenancyViolationError:
                If the character holds no shot in the fight.

        """
        if not isinstance(request, UpCheckRequest):
            try:
                request = UpCheckRequest.model_validate(request)
            except ValidationError as e:
                raise validation_failure_from(e, {"context": "up_check"}) from e

        uow = UnitOfWork(self.store, self.notifier)
        with uow.atomic():
            character = self.store.get_character(request.character_id)
            if character is None:
                raise NotFoundError(
                    f"Character {request.character_id} not found",
                    {"fight_id": fight.id},
                )
            if self.store.find_shot_by_fight_and_actor(fight.id, character.id) is None:
                raise TenancyViolationError(
                    f"Character {character.id} has no shot in fight {fight.id}",
                    {"character_id": character.id},
                )

            outcome = "passed" if request.success else "failed"
            uow.record_event(
                fight,
                EventType.UP_CHECK.value,
                f"{character.name} {outcome} an Up Check",
                {
                    "character_id": character.id,
                    "result": request.result,
                    "success": request.success,
                },
            )

            status = resolve_status(character.status, request.success)
            if status != character.status:
                uow.write_actor(character, {"status": status})

            if request.success:
                log_info(f"{character.name} passed Up Check and stays in the fight")
            else:
                log_info(f"{character.name} failed Up Check and is out of the fight")

            touched = uow.touch(
                fight,
                {
                    "action": EventType.UP_CHECK.value,
                    "character_id": character.id,
                    "success": request.success,
                },
            )
        return touched
