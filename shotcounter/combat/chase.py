"""
Chase subsystem for the combat engine.

During a vehicular chase each vehicle's action values change as the chase
unfolds, pursuer/evader pairs move between near and far, and drivers pay shots
to act. Chase Points and Condition Points accumulate onto the stored value;
every other key is replaced. Relationships are keyed by shot pair, since the
same vehicle can hold more than one shot in a fight.
"""

from typing import Any, Iterable, Mapping, Optional, Union

from catchery import log_warning
from pydantic import AliasChoices, BaseModel, Field, ValidationError

from ..core.config import DEFAULT_RULES, CombatRules
from ..core.constants import ChasePosition, ChaseRole, EventType
from ..core.error_handling import TenancyViolationError, validation_failure_from
from ..core.logging import log_debug, log_info
from ..core.utils import parse_integer
from ..models import ActionValues, ChaseRelationship, Fight, Shot, Vehicle
from ..storage.interfaces import CombatStore, NotificationSink
from ..storage.unit_of_work import UnitOfWork
from .shot_ledger import ShotLedger


class ChaseUpdate(BaseModel):
    """One vehicle's part of a chase action."""

    vehicle_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("vehicle_id", "id"),
        description="The vehicle whose action values change.",
    )
    shot_id: Optional[str] = Field(
        default=None,
        description="The vehicle's shot. Looked up from the fight when absent.",
    )
    action_values: dict[str, Any] = Field(default_factory=dict)
    position: Optional[ChasePosition] = Field(default=None)
    target_shot_id: Optional[str] = Field(
        default=None,
        description="The other side of the chase relationship.",
    )
    role: ChaseRole = Field(default=ChaseRole.PURSUER)
    character_id: Optional[str] = Field(
        default=None,
        description="Driver paying the shot cost.",
    )
    shot_cost: Optional[int] = Field(default=None)


def merge_chase_values(
    current: ActionValues,
    updates: Mapping[str, Any],
    additive_fields: Iterable[str],
) -> ActionValues:
    """
    Merges chase deltas into a vehicle's action values.

    Args:
        current (ActionValues):
            The stored values.
        updates (Mapping[str, Any]):
            Values sent by the caller.
        additive_fields (Iterable[str]):
            Keys whose update is added to the stored value.

    Returns:
        ActionValues:
            The merged values.

    """
    additive = set(additive_fields)
    merged: dict[str, Any] = {}
    for key, value in updates.items():
        if key in additive:
            merged[key] = current.get_int(key) + parse_integer(value)
        else:
            merged[key] = value
    return current.merged(merged)


class ChaseService:
    """
    Applies chase actions to a fight.

    Attributes:
        store (CombatStore):
            Record store.
        rules (CombatRules):
            Supplies the additive chase fields.
        ledger (ShotLedger):
            Used for driver shot spends.
        notifier (NotificationSink | None):
            Informed after a chase action commits.

    """

    def __init__(
        self,
        store: CombatStore,
        rules: CombatRules = DEFAULT_RULES,
        notifier: Optional[NotificationSink] = None,
    ) -> None:
        self.store: CombatStore = store
        self.rules: CombatRules = rules
        self.ledger: ShotLedger = ShotLedger(store, rules)
        self.notifier: Optional[NotificationSink] = notifier

    def apply_chase_action(
        self,
        fight: Fight,
        updates: Iterable[Union[ChaseUpdate, Mapping[str, Any]]],
    ) -> Fight:
        """
        Applies a batch of vehicle updates as one all-or-nothing unit.

        Updates naming an unknown vehicle are logged and skipped. A failing
        position change or driver spend rolls back the whole batch.

        Args:
            fight (Fight):
                The fight the chase takes place in.
            updates (Iterable[ChaseUpdate | Mapping[str, Any]]):
                The per-vehicle updates.

        Returns:
            Fight:
                The fight after it has been touched.

        Raises:
            TenancyViolationError:
                If a position update involves a shot from another fight.
            ValidationFailureError:
                If a relationship would pair a shot with itself.

        """
        batch = [self._parse(update) for update in updates]
        log_info(f"Processing {len(batch)} chase updates for fight {fight.id}")

        uow = UnitOfWork(self.store, self.notifier)
        with uow.atomic():
            uow.record_event(
                fight,
                EventType.CHASE_ACTION.value,
                f"Chase action performed with {len(batch)} updates",
                {"updates_count": len(batch)},
            )
            for update in batch:
                self._process_update(uow, fight, update)
            touched = uow.touch(
                fight,
                {"action": EventType.CHASE_ACTION.value, "updates": len(batch)},
            )
        return touched

    def list_relationships(
        self,
        fight: Fight,
        shot_id: Optional[str] = None,
        active: Optional[bool] = True,
    ) -> list[ChaseRelationship]:
        """Returns the fight's chase relationships, optionally for one shot."""
        return self.store.list_relationships(fight.id, shot_id=shot_id, active=active)

    def deactivate_relationship(self, relationship: ChaseRelationship) -> ChaseRelationship:
        """Ends a chase relationship without deleting it."""
        with self.store.transaction():
            updated = self.store.update_relationship(relationship, {"active": False})
        log_info(
            "Chase relationship deactivated",
            {"pursuer_id": updated.pursuer_id, "evader_id": updated.evader_id},
        )
        return updated

    # === Single updates ===

    @staticmethod
    def _parse(update: Union[ChaseUpdate, Mapping[str, Any]]) -> ChaseUpdate:
        if isinstance(update, ChaseUpdate):
            return update
        try:
            return ChaseUpdate.model_validate(update)
        except ValidationError as e:
            raise validation_failure_from(e, {"context": "chase_update"}) from e

    def _process_update(self, uow: UnitOfWork, fight: Fight, update: ChaseUpdate) -> None:
        vehicle = self.store.get_vehicle(update.vehicle_id) if update.vehicle_id else None
        if vehicle is None:
            log_warning(
                f"Vehicle {update.vehicle_id} not found, skipping chase update",
                {"fight_id": fight.id, "vehicle_id": update.vehicle_id},
            )
            return

        if update.action_values:
            merged = merge_chase_values(
                vehicle.action_values,
                update.action_values,
                self.rules.additive_chase_fields,
            )
            uow.write_actor(vehicle, {"action_values": merged.to_dict()})
            log_debug(f"Updated chase values for {vehicle.name}", update.action_values)

        if update.position is not None and update.target_shot_id is not None:
            self._update_position(fight, vehicle, update)

        if update.character_id is not None and update.shot_cost and update.shot_cost > 0:
            self._spend_driver_shots(fight, update.character_id, update.shot_cost)

    def _update_position(self, fight: Fight, vehicle: Vehicle, update: ChaseUpdate) -> None:
        vehicle_shot = self._shot_in_fight(fight, update.shot_id, vehicle.id)
        target_shot = self._shot_in_fight(fight, update.target_shot_id, None)
        if vehicle_shot is None or target_shot is None:
            log_warning(
                "Chase position update names a missing shot, skipping",
                {
                    "fight_id": fight.id,
                    "vehicle_id": vehicle.id,
                    "target_shot_id": update.target_shot_id,
                },
            )
            return

        if update.role == ChaseRole.EVADER:
            pursuer, evader = target_shot, vehicle_shot
        else:
            pursuer, evader = vehicle_shot, target_shot

        relationship = self.store.find_or_create_relationship(fight.id, pursuer.id, evader.id)
        if relationship.position != update.position:
            self.store.update_relationship(relationship, {"position": update.position})
        log_info(
            f"Chase position set to {update.position}",
            {"pursuer_id": pursuer.id, "evader_id": evader.id},
        )

    def _shot_in_fight(
        self, fight: Fight, shot_id: Optional[str], actor_id: Optional[str]
    ) -> Optional[Shot]:
        if shot_id is None:
            if actor_id is None:
                return None
            return self.store.find_shot_by_fight_and_actor(fight.id, actor_id)
        shot = self.store.get_shot(shot_id)
        if shot is not None and shot.fight_id != fight.id:
            raise TenancyViolationError(
                f"Shot {shot.id} does not belong to fight {fight.id}",
                {"shot_fight_id": shot.fight_id},
            )
        return shot

    def _spend_driver_shots(self, fight: Fight, character_id: str, cost: int) -> None:
        driver_shot = self.store.find_shot_by_fight_and_actor(fight.id, character_id)
        if driver_shot is None:
            log_warning(
                f"Driver {character_id} has no shot in fight {fight.id}, skipping spend",
                {"fight_id": fight.id, "character_id": character_id},
            )
            return
        self.ledger.spend(driver_shot, cost)

