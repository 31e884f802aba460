"""
Tests for the record models.
"""

import pytest
from pydantic import ValidationError

from shotcounter.core.constants import CharacterType, ChasePosition
from shotcounter.models import (
    ActionValues,
    Character,
    CharacterEffect,
    ChaseRelationship,
    Fight,
    FightEvent,
    Shot,
    Vehicle,
)


def test_shot_requires_an_actor():
    """Test that a shot without character or vehicle is rejected."""
    with pytest.raises(ValidationError, match="must have either character or vehicle"):
        Shot(fight_id="f1")


def test_shot_rejects_both_actors():
    """Test that a shot cannot point at a character and a vehicle."""
    with pytest.raises(ValidationError, match="cannot have both character and vehicle"):
        Shot(fight_id="f1", character_id="c1", vehicle_id="v1")


def test_shot_allows_negative_shot_count():
    shot = Shot(fight_id="f1", character_id="c1", shot=-3)
    assert shot.shot == -3
    assert shot.actor_id == "c1"


def test_shot_rejects_negative_count_and_impairments():
    with pytest.raises(ValidationError):
        Shot(fight_id="f1", character_id="c1", count=-1)
    with pytest.raises(ValidationError):
        Shot(fight_id="f1", character_id="c1", impairments=-1)


def test_fight_sequence_cannot_be_negative():
    with pytest.raises(ValidationError):
        Fight(name="Bad", sequence=-1)


def test_fight_event_is_immutable():
    """Test that events cannot be changed once created."""
    event = FightEvent(fight_id="f1", event_type="boost", description="Boost")
    with pytest.raises(ValidationError):
        event.description = "Changed"


def test_chase_relationship_needs_two_shots():
    with pytest.raises(ValidationError, match="pursuer and evader cannot be the same"):
        ChaseRelationship(fight_id="f1", pursuer_id="s1", evader_id="s1")


def test_chase_relationship_defaults_to_far():
    relationship = ChaseRelationship(fight_id="f1", pursuer_id="s1", evader_id="s2")
    assert relationship.position == ChasePosition.FAR
    assert relationship.active is True


def test_action_values_known_keys():
    """Test the typed accessors over the free-form attribute map."""
    values = ActionValues(
        {"Type": "Boss", "Wounds": "12", "Fortune": 3, "MainAttack": "Guns", "Lair": "Temple"}
    )
    assert values.type == CharacterType.BOSS
    assert values.wounds == 12
    assert values.fortune == 3
    assert values.main_attack == "Guns"
    assert values.get("Lair") == "Temple"
    assert "Lair" in values


def test_action_values_derive_new_containers():
    values = ActionValues({"Wounds": 5, "Notes": "keep me"})
    updated = values.with_value("Wounds", 8)
    assert values.wounds == 5
    assert updated.wounds == 8
    assert updated["Notes"] == "keep me"
    assert values.merged({"Fortune": 1}).to_dict() == {
        "Wounds": 5,
        "Notes": "keep me",
        "Fortune": 1,
    }


def test_unknown_type_is_unclassified():
    character = Character(name="Stranger", action_values={"Type": "Sidekick"})
    assert character.classification == CharacterType.UNCLASSIFIED
    assert not character.is_pc


def test_vehicle_is_always_a_vehicle():
    vehicle = Vehicle(name="Jeep", action_values={"Type": "PC"})
    assert vehicle.classification == CharacterType.VEHICLE


def test_actor_status_is_deduplicated():
    character = Character(name="Dup", status=["out_of_fight", "out_of_fight"])
    assert character.status == ["out_of_fight"]


@pytest.mark.parametrize(
    "sequence, shot_counter, expected",
    [
        (1, 12, False),
        (2, 18, False),
        (2, 13, False),
        (2, 12, True),
        (2, 5, True),
        (3, 18, True),
    ],
)
def test_effect_expiry(sequence, shot_counter, expected):
    """Test that an effect runs out at its end shot in its end sequence."""
    effect = CharacterEffect(name="Attack Boost", shot_id="s1", end_sequence=2, end_shot=12)
    assert effect.is_expired(sequence, shot_counter) is expected


def test_effect_without_end_never_expires():
    effect = CharacterEffect(name="Scar", shot_id="s1")
    assert not effect.is_expired(99, 0)
