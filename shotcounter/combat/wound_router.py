"""
Wound and status routing for the combat engine.

Where a wound lands depends on what kind of actor takes it. PCs keep wounds on
their own record, Bosses keep them on their shot because the total is local
to the fight, and Mooks are a head-count on their shot. This module keeps that
decision in one place as a strategy per classification, and enforces the
up-check threshold on the resulting wound total.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Optional

from ..core.config import DEFAULT_RULES, CombatRules
from ..core.constants import WOUNDS, CharacterType, Status
from ..core.logging import log_info
from ..core.utils import parse_integer, unique
from ..models import Actor, Shot


class ThresholdOutcome(Enum):
    """What the up-check threshold asks for after a wound change."""

    UNCHANGED = "unchanged"
    REQUIRE = "require"
    CLEAR = "clear"


@dataclass
class WoundRouting:
    """
    Result of routing one update's wound-related fields.

    Attributes:
        shot_fields (dict[str, Any]):
            Changes to write on the shot.
        action_values (dict[str, Any] | None):
            New action values for the actor, or None when unchanged.
        wounds (int | None):
            Final wound total used for the threshold, or None when the update
            did not affect wounds.

    """

    shot_fields: dict[str, Any] = field(default_factory=dict)
    action_values: Optional[dict[str, Any]] = None
    wounds: Optional[int] = None


class WoundStrategy:
    """
    Base strategy: wounds accumulate on the shot's count.

    Used for Featured Foes, Allies, vehicles and anything unclassified.
    """

    def current_wounds(self, actor: Optional[Actor], shot: Shot) -> int:
        return shot.count

    def route(
        self,
        actor: Optional[Actor],
        shot: Shot,
        wounds: Optional[int],
        count: Optional[int],
        action_values: Optional[Mapping[str, Any]],
    ) -> WoundRouting:
        """
        Decides where the wound-related fields of one update are written.

        A wound delta is applied to the stored count and takes precedence over
        an explicit count in the same update.

        Args:
            actor (Optional[Actor]):
                The actor owning the shot, None if it could not be resolved.
            shot (Shot):
                The shot being updated.
            wounds (Optional[int]):
                Wound delta.
            count (Optional[int]):
                Explicit new value for the shot's count.
            action_values (Optional[Mapping[str, Any]]):
                Explicit action value replacements.

        Returns:
            WoundRouting:
                The shot and actor changes, and the final wound total.

        """
        routing = WoundRouting()
        if wounds is not None:
            routing.shot_fields["count"] = max(0, shot.count + wounds)
            routing.wounds = routing.shot_fields["count"]
        elif count is not None:
            routing.shot_fields["count"] = count
            routing.wounds = count
        if action_values and actor is not None:
            routing.action_values = {**actor.action_values.to_dict(), **action_values}
        return routing


class PCWounds(WoundStrategy):
    """PCs keep wounds in their own "Wounds" action value."""

    def current_wounds(self, actor: Optional[Actor], shot: Shot) -> int:
        return actor.action_values.wounds if actor is not None else 0

    def route(
        self,
        actor: Optional[Actor],
        shot: Shot,
        wounds: Optional[int],
        count: Optional[int],
        action_values: Optional[Mapping[str, Any]],
    ) -> WoundRouting:
        routing = WoundRouting()
        if count is not None:
            routing.shot_fields["count"] = count
        if actor is None:
            return routing

        merged = actor.action_values.merged(action_values or {})
        if action_values and WOUNDS in action_values:
            routing.wounds = parse_integer(action_values[WOUNDS])
        elif wounds is not None:
            routing.wounds = max(0, actor.action_values.wounds + wounds)
            merged = merged.with_value(WOUNDS, routing.wounds)
        if action_values or routing.wounds is not None:
            routing.action_values = merged.to_dict()
        return routing


class BossWounds(WoundStrategy):
    """Bosses and Uber-Bosses keep their wound total on their shot's count."""


class MookWounds(WoundStrategy):
    """Mooks are a head-count; each wound removes one mook from the group."""

    def route(
        self,
        actor: Optional[Actor],
        shot: Shot,
        wounds: Optional[int],
        count: Optional[int],
        action_values: Optional[Mapping[str, Any]],
    ) -> WoundRouting:
        routing = WoundRouting()
        if wounds is not None:
            routing.shot_fields["count"] = max(0, shot.count - wounds)
        elif count is not None:
            routing.shot_fields["count"] = count
        if action_values and actor is not None:
            routing.action_values = {**actor.action_values.to_dict(), **action_values}
        return routing


_ACCUMULATING = WoundStrategy()

STRATEGIES: dict[CharacterType, WoundStrategy] = {
    CharacterType.PC: PCWounds(),
    CharacterType.BOSS: BossWounds(),
    CharacterType.UBER_BOSS: BossWounds(),
    CharacterType.MOOK: MookWounds(),
    CharacterType.FEATURED_FOE: _ACCUMULATING,
    CharacterType.ALLY: _ACCUMULATING,
    CharacterType.VEHICLE: _ACCUMULATING,
    CharacterType.UNCLASSIFIED: _ACCUMULATING,
}


class WoundStatusRouter:
    """
    Routes wound changes and enforces the up-check threshold.

    Attributes:
        rules (CombatRules):
            Supplies the wound threshold per classification.

    """

    def __init__(self, rules: CombatRules = DEFAULT_RULES) -> None:
        self.rules: CombatRules = rules

    def strategy_for(self, actor: Optional[Actor]) -> WoundStrategy:
        if actor is None:
            return _ACCUMULATING
        return STRATEGIES.get(actor.classification, _ACCUMULATING)

    def route(
        self,
        actor: Optional[Actor],
        shot: Shot,
        wounds: Optional[int] = None,
        count: Optional[int] = None,
        action_values: Optional[Mapping[str, Any]] = None,
    ) -> WoundRouting:
        """Applies the actor's wound strategy to one update."""
        return self.strategy_for(actor).route(actor, shot, wounds, count, action_values)

    def threshold_outcome(self, actor: Optional[Actor], wounds: Optional[int]) -> ThresholdOutcome:
        """
        Compares a final wound total with the actor's up-check threshold.

        Args:
            actor (Optional[Actor]):
                The wounded actor.
            wounds (Optional[int]):
                The final wound total, None if wounds were not touched.

        Returns:
            ThresholdOutcome:
                REQUIRE at or above the threshold, CLEAR below it, UNCHANGED
                when the actor has no threshold or wounds were not touched.

        """
        if actor is None or wounds is None:
            return ThresholdOutcome.UNCHANGED
        threshold = self.rules.threshold_for(actor.classification)
        if threshold is None:
            return ThresholdOutcome.UNCHANGED
        if wounds >= threshold:
            if not actor.has_status(Status.UP_CHECK_REQUIRED):
                log_info(
                    f"{actor.name} is at or above the wound threshold, enforcing Up Check",
                    {"wounds": wounds, "threshold": threshold},
                )
            return ThresholdOutcome.REQUIRE
        return ThresholdOutcome.CLEAR

    @staticmethod
    def merge_status(
        current: Iterable[str],
        add: Iterable[str] = (),
        remove: Iterable[str] = (),
        outcome: ThresholdOutcome = ThresholdOutcome.UNCHANGED,
    ) -> list[str]:
        """
        Combines explicit status changes with the threshold outcome.

        The result is (current + add) - remove, then up_check_required is
        added or dropped as the threshold asks. Order is preserved and
        duplicates are dropped.
        """
        removed = set(remove)
        status = [tag for tag in unique([*current, *add]) if tag not in removed]
        tag = Status.UP_CHECK_REQUIRED.value
        if outcome == ThresholdOutcome.REQUIRE and tag not in status:
            status.append(tag)
        elif outcome == ThresholdOutcome.CLEAR:
            status = [s for s in status if s != tag]
        return status
