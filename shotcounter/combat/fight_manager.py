"""
Fight aggregate management for the combat engine.

The FightManager handles the lifecycle of one encounter (starting, ending,
archiving and resetting it), the shot clock, turn-order reads, driver links
and the freshness marker that tells subscribers a fight changed.
"""

from typing import Optional

from ..core.config import DEFAULT_RULES, CombatRules
from ..core.error_handling import NotFoundError, TenancyViolationError
from ..core.logging import log_info
from ..core.utils import utc_now
from ..models import CharacterEffect, Fight, FightEvent, Shot
from ..storage.interfaces import CombatStore, NotificationSink
from ..storage.unit_of_work import UnitOfWork
from .shot_ledger import ShotLedger


class FightManager:
    """Manages the lifecycle, shot clock and turn order of fights.

    Every write goes through a unit of work, so the fight is touched once and
    subscribers are notified only after the change has been committed.
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

    # ============================================================================
    # LOOKUPS
    # ============================================================================

    def get_fight(self, fight_id: str) -> Fight:
        """Returns a fight, raising NotFoundError if it does not exist."""
        fight = self.store.get_fight(fight_id)
        if fight is None:
            raise NotFoundError(f"Fight {fight_id} not found")
        return fight

    def get_shot(self, fight: Fight, shot_id: str) -> Shot:
        """
        Returns one of the fight's shots.

        Raises:
            NotFoundError: If the shot does not exist.
            TenancyViolationError: If it belongs to another fight.

        """
        shot = self.store.get_shot(shot_id)
        if shot is None:
            raise NotFoundError(f"Shot {shot_id} not found", {"fight_id": fight.id})
        if shot.fight_id != fight.id:
            raise TenancyViolationError(
                f"Shot {shot_id} does not belong to fight {fight.id}",
                {"shot_fight_id": shot.fight_id},
            )
        return shot

    def list_events(self, fight: Fight) -> list[FightEvent]:
        return self.store.list_events(fight.id)

    def turn_order(self, fight: Fight) -> list[Shot]:
        """Returns the fight's shots in the order they act."""
        return self.ledger.turn_order(self.store.list_shots(fight.id))

    def next_to_act(self, fight: Fight) -> list[Shot]:
        return self.ledger.next_to_act(self.store.list_shots(fight.id))

    # ============================================================================
    # LIFECYCLE
    # ============================================================================

    def touch(self, fight: Fight) -> Fight:
        """Bumps the fight's freshness marker and notifies subscribers."""
        uow = UnitOfWork(self.store, self.notifier)
        with uow.atomic():
            touched = uow.touch(fight, {"action": "touch"})
        return touched

    def start(self, fight: Fight) -> Fight:
        """Starts the fight at the top of the shot clock."""
        return self._update(
            fight,
            {
                "active": True,
                "started_at": utc_now(),
                "ended_at": None,
                "shot_counter": self.rules.shots_per_sequence,
            },
            "start",
        )

    def end(self, fight: Fight) -> Fight:
        """Ends the fight. It stays readable but is no longer active."""
        return self._update(fight, {"active": False, "ended_at": utc_now()}, "end")

    def archive(self, fight: Fight) -> Fight:
        """Soft-deletes the fight. Its events and shots are kept."""
        return self._update(fight, {"active": False, "archived": True}, "archive")

    def reset(self, fight: Fight) -> Fight:
        """
        Returns the fight to its pre-combat state.

        The sequence and shot clock go back to zero and every shot loses its
        initiative, count and impairments. The event log is left untouched.
        """
        uow = UnitOfWork(self.store, self.notifier)
        with uow.atomic():
            self.store.update_fight(
                fight,
                {
                    "sequence": 0,
                    "shot_counter": 0,
                    "active": True,
                    "started_at": None,
                    "ended_at": None,
                },
            )
            shots = self.store.list_shots(fight.id)
            for shot in shots:
                uow.write_shot(
                    shot,
                    {
                        "shot": None,
                        "count": 0,
                        "impairments": 0,
                        "acted": False,
                        "was_rammed_or_damaged": False,
                    },
                )
            touched = uow.touch(fight, {"action": "reset"})
        log_info(f"Fight {fight.name} reset", {"shots": len(shots)})
        return touched

    # ============================================================================
    # SHOT CLOCK AND SHOTS
    # ============================================================================

    def advance_shot_counter(self, fight: Fight) -> tuple[Fight, list[CharacterEffect]]:
        """Moves the shot clock forward one shot and expires finished effects."""
        uow = UnitOfWork(self.store, self.notifier)
        with uow.atomic():
            _, expired = self.ledger.advance_shot_counter(self.get_fight(fight.id))
            touched = uow.touch(
                fight,
                {"action": "advance_shot_counter", "expired_effects": len(expired)},
            )
        return touched, expired

    def spend_shots(self, fight: Fight, shot_id: str, cost: int) -> Shot:
        """Deducts a cost from one of the fight's shots outside any batch."""
        uow = UnitOfWork(self.store, self.notifier)
        with uow.atomic():
            shot = self.ledger.spend(self.get_shot(fight, shot_id), cost)
            uow.touch(fight, {"action": "spend", "shot_id": shot_id, "cost": cost})
        return shot

    def assign_driver(
        self, fight: Fight, driver_shot_id: str, vehicle_shot_id: str
    ) -> tuple[Shot, Shot]:
        """Makes a character shot the driver of a vehicle shot."""
        uow = UnitOfWork(self.store, self.notifier)
        with uow.atomic():
            driver, vehicle = self.ledger.assign_driver(
                self.get_shot(fight, driver_shot_id),
                self.get_shot(fight, vehicle_shot_id),
            )
            uow.touch(fight, {"action": "assign_driver", "vehicle_shot_id": vehicle.id})
        return driver, vehicle

    def clear_vehicle_drivers(self, fight: Fight, vehicle_shot_id: str) -> int:
        """Removes every driver link to a vehicle shot."""
        uow = UnitOfWork(self.store, self.notifier)
        with uow.atomic():
            cleared = self.ledger.clear_vehicle_drivers(
                fight, self.get_shot(fight, vehicle_shot_id)
            )
            uow.touch(fight, {"action": "clear_drivers", "vehicle_shot_id": vehicle_shot_id})
        return cleared

    def _update(self, fight: Fight, fields: dict, action: str) -> Fight:
        uow = UnitOfWork(self.store, self.notifier)
        with uow.atomic():
            self.store.update_fight(fight, fields)
            touched = uow.touch(fight, {"action": action})
        log_info(f"Fight {fight.name}: {action}")
        return touched
