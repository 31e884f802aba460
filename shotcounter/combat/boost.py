"""
Boost resolution for the combat engine.

A boost spends shots from one character to give another a temporary bonus to
their main attack or their defense. PCs may also spend a point of Fortune for
a bigger bonus.
"""

from typing import Any, Mapping, Optional, Union

from pydantic import AliasChoices, BaseModel, Field, ValidationError

from ..core.config import DEFAULT_RULES, CombatRules
from ..core.constants import DEFENSE, FORTUNE, BoostType, EffectSeverity, EventType
from ..core.error_handling import (
    InsufficientResourceError,
    NotFoundError,
    validation_failure_from,
)
from ..core.logging import log_info
from ..models import Character, CharacterEffect, Fight, Shot
from ..storage.interfaces import CombatStore, NotificationSink
from ..storage.unit_of_work import UnitOfWork
from .shot_ledger import ShotLedger


class BoostRequest(BaseModel):
    """Who boosts whom, and how."""

    booster_id: str = Field(
        validation_alias=AliasChoices("booster_id", "character_id"),
        description="The character paying for the boost.",
    )
    target_id: str = Field(description="The character receiving the bonus.")
    boost_type: BoostType = Field(default=BoostType.ATTACK)
    use_fortune: bool = Field(default=False)


class BoostService:
    """
    Resolves boosts into a shot spend and a timed character effect.

    Attributes:
        store (CombatStore):
            Record store.
        rules (CombatRules):
            Supplies the boost cost and bonus values.
        ledger (ShotLedger):
            Deducts the cost from the booster's shot.
        notifier (NotificationSink | None):
            Informed after the boost commits.

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

    def apply_boost(
        self, fight: Fight, request: Union[BoostRequest, Mapping[str, Any]]
    ) -> Fight:
        """
        Spends the booster's shots and grants the target a timed bonus.

        The effect lasts until the current shot of the next sequence.

        Args:
            fight (Fight):
                The fight both characters are in.
            request (BoostRequest | Mapping[str, Any]):
                The boost to resolve.

        Returns:
            Fight:
                The fight after it has been touched.

        Raises:
            NotFoundError:
                If either character, or its shot in the fight, is missing.
            InsufficientResourceError:
                If Fortune was requested and the booster has none. Nothing is
                spent in that case.

        """
        if not isinstance(request, BoostRequest):
            try:
                request = BoostRequest.model_validate(request)
            except ValidationError as e:
                raise validation_failure_from(e, {"context": "boost"}) from e

        uow = UnitOfWork(self.store, self.notifier)
        with uow.atomic():
            booster, booster_shot = self._participant(fight, request.booster_id)
            target, target_shot = self._participant(fight, request.target_id)

            use_fortune = request.use_fortune and booster.is_pc
            if use_fortune and booster.action_values.fortune < 1:
                raise InsufficientResourceError(
                    "Insufficient Fortune",
                    {"booster_id": booster.id, "fortune": booster.action_values.fortune},
                )

            self.ledger.spend(booster_shot, self.rules.boost_cost)
            if use_fortune:
                fortune = booster.action_values.fortune - 1
                uow.write_actor(
                    booster,
                    {"action_values": booster.action_values.with_value(FORTUNE, fortune).to_dict()},
                )

            values = self.rules.boost_values_for(request.boost_type)
            boost_value = values.fortune if use_fortune else values.base
            current = self.store.get_fight(fight.id) or fight
            effect = self.store.add_effect(
                CharacterEffect(
                    name=self._effect_name(request.boost_type, use_fortune),
                    description=f"Boost from {booster.name}",
                    severity=EffectSeverity.INFO,
                    action_value=self._boosted_value(request.boost_type, target),
                    change=f"+{boost_value}",
                    shot_id=target_shot.id,
                    character_id=target.id,
                    end_sequence=current.sequence + 1,
                    end_shot=current.shot_counter,
                )
            )

            uow.record_event(
                fight,
                EventType.BOOST.value,
                f"{booster.name} boosted {target.name}'s {request.boost_type} (+{boost_value})",
                {
                    "booster_id": booster.id,
                    "target_id": target.id,
                    "boost_type": request.boost_type.value,
                    "boost_value": boost_value,
                    "fortune_used": use_fortune,
                },
            )
            log_info(
                f"{booster.name} boosted {target.name}",
                {"effect": effect.name, "action_value": effect.action_value},
            )
            touched = uow.touch(
                fight,
                {"action": EventType.BOOST.value, "booster_id": booster.id, "target_id": target.id},
            )
        return touched

    def _participant(self, fight: Fight, character_id: str) -> tuple[Character, Shot]:
        character = self.store.get_character(character_id)
        if character is None:
            raise NotFoundError(f"Character {character_id} not found", {"fight_id": fight.id})
        shot = self.store.find_shot_by_fight_and_actor(fight.id, character_id)
        if shot is None:
            raise NotFoundError(
                f"Character {character.name} has no shot in fight {fight.id}",
                {"character_id": character_id},
            )
        return character, shot

    def _boosted_value(self, boost_type: BoostType, target: Character) -> str:
        if boost_type == BoostType.ATTACK:
            return target.action_values.main_attack or self.rules.default_main_attack
        return DEFENSE

    @staticmethod
    def _effect_name(boost_type: BoostType, use_fortune: bool) -> str:
        name = "Attack Boost" if boost_type == BoostType.ATTACK else "Defense Boost"
        return f"{name} (Fortune)" if use_fortune else name
