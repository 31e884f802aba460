"""
Entry point of the combat engine.

CombatEngine wires every combat service to one store, one rules set and one
notification sink, and accepts fight ids so callers do not have to load the
fight themselves.
"""

from typing import Any, Iterable, Mapping, Optional

from .core.config import DEFAULT_RULES, CombatRules
from .combat import (
    BoostService,
    ChaseService,
    CombatActionProcessor,
    FightManager,
    UpCheckService,
)
from .models import Fight
from .storage.interfaces import CombatStore, NotificationSink


class CombatEngine:
    """
    Facade over the combat services.

    Attributes:
        fights (FightManager):
            Lifecycle, shot clock and turn order.
        combat (CombatActionProcessor):
            Batched combat actions.
        chase (ChaseService):
            Chase actions and relationships.
        boosts (BoostService):
            Boosts.
        up_checks (UpCheckService):
            Up-check rolls.

    """

    def __init__(
        self,
        store: CombatStore,
        rules: CombatRules = DEFAULT_RULES,
        notifier: Optional[NotificationSink] = None,
    ) -> None:
        self.store: CombatStore = store
        self.rules: CombatRules = rules
        self.fights: FightManager = FightManager(store, rules, notifier)
        self.combat: CombatActionProcessor = CombatActionProcessor(store, rules, notifier)
        self.chase: ChaseService = ChaseService(store, rules, notifier)
        self.boosts: BoostService = BoostService(store, rules, notifier)
        self.up_checks: UpCheckService = UpCheckService(store, notifier)

    def apply_combat_action(
        self, fight_id: str, updates: Iterable[Mapping[str, Any]]
    ) -> Fight:
        return self.combat.apply_combat_action(self.fights.get_fight(fight_id), updates)

    def apply_chase_action(
        self, fight_id: str, updates: Iterable[Mapping[str, Any]]
    ) -> Fight:
        return self.chase.apply_chase_action(self.fights.get_fight(fight_id), updates)

    def apply_boost(self, fight_id: str, request: Mapping[str, Any]) -> Fight:
        return self.boosts.apply_boost(self.fights.get_fight(fight_id), request)

    def apply_up_check(self, fight_id: str, request: Mapping[str, Any]) -> Fight:
        return self.up_checks.apply_up_check(self.fights.get_fight(fight_id), request)
