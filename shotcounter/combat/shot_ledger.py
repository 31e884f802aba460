"""
Shot ledger module for the combat engine.

Owns turn-order semantics for a fight: spending and refunding shots, the
derived turn order, the fight's shot clock, and the driver links between
character shots and vehicle shots.
"""

from typing import Iterable, Optional

from ..core.config import DEFAULT_RULES, CombatRules
from ..core.error_handling import TenancyViolationError, ValidationFailureError
from ..core.logging import log_debug, log_info
from ..models import CharacterEffect, Fight, Shot
from ..storage.interfaces import CombatStore


class ShotLedger:
    """
    Spends, refunds and orders shots.

    The ledger never clamps: a shot count may go negative, which only means
    the actor is deep in deficit and sorts after everyone with a positive
    count.

    Attributes:
        store (CombatStore):
            Where shots, fights and effects are read and written.
        rules (CombatRules):
            Supplies the length of a sequence on the shot clock.

    """

    def __init__(self, store: CombatStore, rules: CombatRules = DEFAULT_RULES) -> None:
        self.store: CombatStore = store
        self.rules: CombatRules = rules

    # ============================================================================
    # SPENDING
    # ============================================================================

    def spend(self, shot: Shot, cost: int) -> Shot:
        """
        Deducts a cost from a shot and marks it as having acted.

        Args:
            shot (Shot):
                The shot paying the cost. A shot without a count pays from 0.
            cost (int):
                Number of shots to deduct.

        Returns:
            Shot:
                The stored shot after the deduction.

        Raises:
            ValidationFailureError:
                If the cost is negative.

        """
        if cost < 0:
            raise ValidationFailureError(
                f"Shot cost must be non-negative, got {cost}",
                {"shot_id": shot.id},
            )
        new_count = (shot.shot or 0) - cost
        updated = self.store.update_shot(shot, {"shot": new_count, "acted": True})
        log_debug(
            f"Shot {shot.id} spent {cost}",
            {"from": shot.shot, "to": new_count},
        )
        return updated

    def refund(self, shot: Shot, amount: int) -> Shot:
        """Gives shots back, e.g. when an action is cancelled."""
        if amount < 0:
            raise ValidationFailureError(
                f"Refund must be non-negative, got {amount}",
                {"shot_id": shot.id},
            )
        return self.store.update_shot(shot, {"shot": (shot.shot or 0) + amount})

    def set(self, shot: Shot, value: Optional[int]) -> Shot:
        """Replaces a shot count outright. None clears rolled initiative."""
        return self.store.update_shot(shot, {"shot": value})

    # ============================================================================
    # TURN ORDER
    # ============================================================================

    @staticmethod
    def turn_order(shots: Iterable[Shot]) -> list[Shot]:
        """
        Returns shots in the order they act.

        Higher counts come first, negative counts after positive ones, and
        shots that have not rolled initiative last. Ties keep their input
        order.
        """
        return sorted(
            shots,
            key=lambda shot: (shot.shot is None, -(shot.shot or 0)),
        )

    @staticmethod
    def next_to_act(shots: Iterable[Shot]) -> list[Shot]:
        """
        Returns every shot sharing the highest positive count.

        An empty list means nobody can act until the next sequence.
        """
        ready = [shot for shot in shots if shot.shot is not None and shot.shot > 0]
        if not ready:
            return []
        top = max(shot.shot for shot in ready)  # type: ignore[type-var]
        return [shot for shot in ready if shot.shot == top]

    # ============================================================================
    # SHOT CLOCK
    # ============================================================================

    def advance_shot_counter(self, fight: Fight) -> tuple[Fight, list[CharacterEffect]]:
        """
        Moves the fight's shot clock forward by one shot.

        When the counter is already at 0 it wraps to the start of the next
        sequence. Character effects whose end point has been reached are
        removed.

        Args:
            fight (Fight):
                The fight whose clock advances.

        Returns:
            tuple[Fight, list[CharacterEffect]]:
                The updated fight and the effects that expired.

        """
        if fight.shot_counter > 0:
            fields = {"shot_counter": fight.shot_counter - 1}
        else:
            fields = {
                "shot_counter": self.rules.shots_per_sequence,
                "sequence": fight.sequence + 1,
            }
        updated = self.store.update_fight(fight, fields)

        expired = [
            effect
            for effect in self.store.list_effects(updated.id)
            if effect.is_expired(updated.sequence, updated.shot_counter)
        ]
        for effect in expired:
            self.store.remove_effect(effect)
            log_info(
                f"Effect '{effect.name}' expired",
                {"shot_id": effect.shot_id, "sequence": updated.sequence},
            )
        return updated, expired

    def reset_shot_counter(self, fight: Fight) -> Fight:
        """Puts the shot clock back at the start of the current sequence."""
        return self.store.update_fight(
            fight, {"shot_counter": self.rules.shots_per_sequence}
        )

    # ============================================================================
    # DRIVERS
    # ============================================================================

    def assign_driver(self, driver_shot: Shot, vehicle_shot: Shot) -> tuple[Shot, Shot]:
        """
        Links a character shot to the vehicle shot it drives.

        Any previous driver of the vehicle, and any vehicle the character was
        driving before, are unlinked first.

        Args:
            driver_shot (Shot): The character's shot.
            vehicle_shot (Shot): The vehicle's shot.

        Returns:
            tuple[Shot, Shot]: The updated driver and vehicle shots.

        Raises:
            TenancyViolationError: If the shots are in different fights.
            ValidationFailureError: If the shots are of the wrong kinds.

        """
        if driver_shot.fight_id != vehicle_shot.fight_id:
            raise TenancyViolationError(
                f"Shots {driver_shot.id} and {vehicle_shot.id} are in different fights"
            )
        if driver_shot.character_id is None or vehicle_shot.vehicle_id is None:
            raise ValidationFailureError(
                "A driver must be a character shot and the vehicle a vehicle shot",
                {"driver_shot_id": driver_shot.id, "vehicle_shot_id": vehicle_shot.id},
            )

        if vehicle_shot.driver_id and vehicle_shot.driver_id != driver_shot.id:
            previous = self.store.get_shot(vehicle_shot.driver_id)
            if previous is not None:
                self.store.update_shot(previous, {"driving_id": None})
        if driver_shot.driving_id and driver_shot.driving_id != vehicle_shot.id:
            previous = self.store.get_shot(driver_shot.driving_id)
            if previous is not None:
                self.store.update_shot(previous, {"driver_id": None})

        driver = self.store.update_shot(driver_shot, {"driving_id": vehicle_shot.id})
        vehicle = self.store.update_shot(vehicle_shot, {"driver_id": driver_shot.id})
        return driver, vehicle

    def clear_vehicle_drivers(self, fight: Fight, vehicle_shot: Shot) -> int:
        """
        Unlinks every character shot driving a vehicle shot.

        Returns:
            int: The number of driver shots that were unlinked.

        """
        cleared = 0
        for shot in self.store.list_shots(fight.id):
            if shot.driving_id == vehicle_shot.id:
                self.store.update_shot(shot, {"driving_id": None})
                cleared += 1
        current = self.store.get_shot(vehicle_shot.id)
        if current is not None and current.driver_id is not None:
            self.store.update_shot(current, {"driver_id": None})
        return cleared
