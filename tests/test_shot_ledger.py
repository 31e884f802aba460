"""
Tests for the shot ledger.
"""

import pytest

from shotcounter.combat import ShotLedger
from shotcounter.core.error_handling import TenancyViolationError, ValidationFailureError
from shotcounter.models import CharacterEffect, Shot


@pytest.fixture
def ledger(store):
    return ShotLedger(store)


def test_spend_deducts_and_marks_acted(ledger, fight, pc, add_shot):
    shot = add_shot(fight, pc, shot=10)

    updated = ledger.spend(shot, 3)

    assert updated.shot == 7
    assert updated.acted is True


def test_spend_may_go_negative(ledger, fight, pc, add_shot):
    """Test that the ledger never clamps shot counts."""
    shot = add_shot(fight, pc, shot=2)
    assert ledger.spend(shot, 5).shot == -3


def test_spend_from_unrolled_initiative(ledger, fight, pc, add_shot):
    shot = add_shot(fight, pc)
    assert ledger.spend(shot, 3).shot == -3


def test_spend_rejects_negative_cost(ledger, fight, pc, add_shot):
    shot = add_shot(fight, pc, shot=10)
    with pytest.raises(ValidationFailureError):
        ledger.spend(shot, -1)


def test_refund_and_set(ledger, fight, pc, add_shot):
    shot = add_shot(fight, pc, shot=4)
    assert ledger.refund(shot, 3).shot == 7
    assert ledger.set(shot, None).shot is None


def test_turn_order():
    """Test that higher counts act first and unrolled shots come last."""
    shots = [
        Shot(id="a", fight_id="f", character_id="c1", shot=5),
        Shot(id="b", fight_id="f", character_id="c2", shot=None),
        Shot(id="c", fight_id="f", character_id="c3", shot=-2),
        Shot(id="d", fight_id="f", character_id="c4", shot=12),
        Shot(id="e", fight_id="f", character_id="c5", shot=5),
    ]
    assert [shot.id for shot in ShotLedger.turn_order(shots)] == ["d", "a", "e", "c", "b"]


def test_next_to_act_returns_ties():
    shots = [
        Shot(id="a", fight_id="f", character_id="c1", shot=9),
        Shot(id="b", fight_id="f", character_id="c2", shot=9),
        Shot(id="c", fight_id="f", character_id="c3", shot=3),
    ]
    assert [shot.id for shot in ShotLedger.next_to_act(shots)] == ["a", "b"]


def test_next_to_act_empty_when_everyone_is_spent():
    shots = [
        Shot(fight_id="f", character_id="c1", shot=0),
        Shot(fight_id="f", character_id="c2", shot=-4),
    ]
    assert ShotLedger.next_to_act(shots) == []


def test_advance_shot_counter(ledger, store, fight):
    updated, expired = ledger.advance_shot_counter(fight)
    assert updated.shot_counter == 11
    assert updated.sequence == 1
    assert expired == []


def test_advance_shot_counter_wraps(ledger, store, fight):
    """Test that the clock wraps to the next sequence after shot 0."""
    fight = store.update_fight(fight, {"shot_counter": 0})

    updated, _ = ledger.advance_shot_counter(fight)

    assert updated.shot_counter == 18
    assert updated.sequence == 2


def test_advance_shot_counter_expires_effects(ledger, store, fight, pc, add_shot):
    shot = add_shot(fight, pc)
    fight = store.update_fight(fight, {"sequence": 2, "shot_counter": 13})
    ending = store.add_effect(
        CharacterEffect(name="Attack Boost", shot_id=shot.id, end_sequence=2, end_shot=12)
    )
    lasting = store.add_effect(
        CharacterEffect(name="Defense Boost", shot_id=shot.id, end_sequence=3, end_shot=12)
    )

    _, expired = ledger.advance_shot_counter(fight)

    assert expired == [ending]
    assert store.list_effects(fight.id) == [lasting]


def test_assign_driver(ledger, store, fight, pc, second_pc, car, add_shot):
    """Test that assigning a new driver unlinks the previous one."""
    first_driver = add_shot(fight, pc)
    second_driver = add_shot(fight, second_pc)
    car_shot = add_shot(fight, car)

    ledger.assign_driver(first_driver, car_shot)
    driver, vehicle = ledger.assign_driver(second_driver, store.get_shot(car_shot.id))

    assert driver.driving_id == car_shot.id
    assert vehicle.driver_id == second_driver.id
    assert store.get_shot(first_driver.id).driving_id is None


def test_assign_driver_across_fights(ledger, fight, other_fight, pc, car, add_shot):
    with pytest.raises(TenancyViolationError):
        ledger.assign_driver(add_shot(fight, pc), add_shot(other_fight, car))


def test_assign_driver_checks_kinds(ledger, fight, car, truck, add_shot):
    with pytest.raises(ValidationFailureError):
        ledger.assign_driver(add_shot(fight, car), add_shot(fight, truck))


def test_clear_vehicle_drivers(ledger, store, fight, pc, car, add_shot):
    driver = add_shot(fight, pc)
    car_shot = add_shot(fight, car)
    ledger.assign_driver(driver, car_shot)

    assert ledger.clear_vehicle_drivers(fight, car_shot) == 1
    assert store.get_shot(driver.id).driving_id is None
    assert store.get_shot(car_shot.id).driver_id is None
