"""
Combat action processing for the combat engine.

A combat action is a batch of per-shot updates sent by the game table after
an attack or other exchange: shot spends, wounds, impairments, mook counts,
status changes and narrative events. The whole batch is applied in a single
unit of work, so either every update lands or none does.
"""

from typing import Any, Iterable, Mapping, Optional, Union

from catchery import log_warning
from pydantic import BaseModel, Field, ValidationError

from ..core.config import DEFAULT_RULES, CombatRules
from ..core.constants import EventType
from ..core.error_handling import (
    CombatError,
    NotFoundError,
    TenancyViolationError,
    validation_failure_from,
)
from ..core.logging import log_error, log_info
from ..models import Actor, Fight, Shot
from ..storage.interfaces import CombatStore, NotificationSink
from ..storage.unit_of_work import UnitOfWork
from .wound_router import WoundStatusRouter


class CombatUpdate(BaseModel):
    """
    One entry of a combat action batch.

    Every field is optional; only the ones present are applied.
    """

    shot_id: Optional[str] = Field(
        default=None,
        description="The shot being updated. Updates without one are skipped.",
    )
    character_id: Optional[str] = Field(
        default=None,
        description="The character the caller believes owns the shot.",
    )
    shot: Optional[int] = Field(default=None, description="New shot count.")
    wounds: Optional[int] = Field(default=None, description="Wound delta.")
    impairments: Optional[int] = Field(default=None, description="New impairment count.")
    count: Optional[int] = Field(default=None, description="New mook count.")
    action_values: Optional[dict[str, Any]] = Field(
        default=None,
        description="Action values to overwrite on the actor.",
    )
    add_status: list[str] = Field(default_factory=list)
    remove_status: list[str] = Field(default_factory=list)
    event: Optional[dict[str, Any]] = Field(
        default=None,
        description="Narrative event to record alongside the update.",
    )


class CombatActionProcessor:
    """
    Applies batches of combat updates to a fight.

    Attributes:
        store (CombatStore):
            Record store the updates are written to.
        router (WoundStatusRouter):
            Decides where wounds land and enforces the up-check threshold.
        notifier (NotificationSink | None):
            Informed after a batch commits.

    """

    def __init__(
        self,
        store: CombatStore,
        rules: CombatRules = DEFAULT_RULES,
        notifier: Optional[NotificationSink] = None,
    ) -> None:
        self.store: CombatStore = store
        self.router: WoundStatusRouter = WoundStatusRouter(rules)
        self.notifier: Optional[NotificationSink] = notifier

    def apply_combat_action(
        self,
        fight: Fight,
        updates: Iterable[Union[CombatUpdate, Mapping[str, Any]]],
    ) -> Fight:
        """
        Applies a batch of updates as one all-or-nothing unit.

        Args:
            fight (Fight):
                The fight every update must belong to.
            updates (Iterable[CombatUpdate | Mapping[str, Any]]):
                The batch, as models or raw mappings.

        Returns:
            Fight:
                The fight after it has been touched.

        Raises:
            NotFoundError:
                If an update names a shot that does not exist.
            TenancyViolationError:
                If an update names a shot from another fight.
            ValidationFailureError:
                If an update is malformed or a write breaks an invariant.
            PersistenceFailureError:
                If the store rejects a write.

        """
        batch = [self._parse(update) for update in updates]
        log_info(f"Processing {len(batch)} combat updates for fight {fight.id}")

        uow = UnitOfWork(self.store, self.notifier)
        with uow.atomic():
            for update in batch:
                try:
                    self._process_update(uow, fight, update)
                except CombatError as e:
                    log_error(
                        f"Failed to process combat update: {e.reason}",
                        {"fight_id": fight.id, "shot_id": update.shot_id},
                    )
                    raise
            touched = uow.touch(
                fight,
                {"action": EventType.COMBAT_ACTION.value, "updates": len(batch)},
            )
        return touched

    # === Single updates ===

    @staticmethod
    def _parse(update: Union[CombatUpdate, Mapping[str, Any]]) -> CombatUpdate:
        if isinstance(update, CombatUpdate):
            return update
        try:
            return CombatUpdate.model_validate(update)
        except ValidationError as e:
            raise validation_failure_from(e, {"context": "combat_update"}) from e

    def _process_update(self, uow: UnitOfWork, fight: Fight, update: CombatUpdate) -> None:
        if update.shot_id is None:
            log_warning(
                "Combat update missing shot_id, skipping",
                {"fight_id": fight.id, "character_id": update.character_id},
            )
            return

        shot = self.store.get_shot(update.shot_id)
        if shot is None:
            raise NotFoundError(
                f"Shot {update.shot_id} not found", {"fight_id": fight.id}
            )
        if shot.fight_id != fight.id:
            raise TenancyViolationError(
                f"Shot {shot.id} does not belong to fight {fight.id}",
                {"shot_fight_id": shot.fight_id},
            )

        actor = self._resolve_actor(shot)

        if update.event is not None:
            self._record_event(uow, fight, update.event)

        routing = self.router.route(
            actor,
            shot,
            wounds=update.wounds,
            count=update.count,
            action_values=update.action_values,
        )

        shot_fields: dict[str, Any] = {}
        if update.shot is not None:
            shot_fields["shot"] = update.shot
        if update.impairments is not None:
            shot_fields["impairments"] = update.impairments
        shot_fields.update(routing.shot_fields)

        actor_fields: dict[str, Any] = {}
        if actor is not None:
            if routing.action_values is not None:
                actor_fields["action_values"] = routing.action_values
            outcome = self.router.threshold_outcome(actor, routing.wounds)
            status = self.router.merge_status(
                actor.status, update.add_status, update.remove_status, outcome
            )
            if status != actor.status:
                actor_fields["status"] = status

        updated_shot = uow.write_shot(shot, shot_fields)
        for key, value in shot_fields.items():
            log_info(f"  Updated shot {updated_shot.id}: {key} = {value}")
        if actor is not None and actor_fields:
            updated_actor = uow.write_actor(actor, actor_fields)
            for key, value in actor_fields.items():
                log_info(f"  Updated {updated_actor.name}: {key} = {value!r}")

    def _resolve_actor(self, shot: Shot) -> Optional[Actor]:
        actor: Optional[Actor]
        if shot.character_id is not None:
            actor = self.store.get_character(shot.character_id)
        else:
            actor = self.store.get_vehicle(shot.vehicle_id)  # type: ignore[arg-type]
        if actor is None:
            log_warning(
                f"Actor {shot.actor_id} for shot {shot.id} not found; "
                "applying shot-level changes only",
                {"shot_id": shot.id, "actor_id": shot.actor_id},
            )
        return actor

    @staticmethod
    def _record_event(uow: UnitOfWork, fight: Fight, event: Mapping[str, Any]) -> None:
        event_type = event.get("event_type") or event.get("type") or EventType.COMBAT_ACTION.value
        description = event.get("description") or "Combat action"
        details = event.get("details") or dict(event)
        uow.record_event(fight, str(event_type), str(description), details)
