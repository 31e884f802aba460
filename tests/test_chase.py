"""
Tests for the chase subsystem.
"""

import pytest

from shotcounter.combat import ChaseService, merge_chase_values
from shotcounter.core.constants import ChasePosition
from shotcounter.core.error_handling import TenancyViolationError, ValidationFailureError
from shotcounter.models import ActionValues


@pytest.fixture
def chase(store, sink):
    return ChaseService(store, notifier=sink)


def test_merge_chase_values():
    """Test that chase pools accumulate and other keys are replaced."""
    merged = merge_chase_values(
        ActionValues({"Chase Points": 2, "Acceleration": 7, "Handling": 8}),
        {"Chase Points": "+3", "Condition Points": "junk", "Acceleration": 9},
        ["Chase Points", "Condition Points"],
    )
    assert merged.to_dict() == {
        "Chase Points": 5,
        "Condition Points": 0,
        "Acceleration": 9,
        "Handling": 8,
    }


def test_chase_points_accumulate(chase, store, fight, car):
    chase.apply_chase_action(fight, [{"vehicle_id": car.id, "action_values": {"Chase Points": "+3"}}])
    chase.apply_chase_action(fight, [{"vehicle_id": car.id, "action_values": {"Chase Points": "+3"}}])

    assert store.get_vehicle(car.id).action_values.chase_points == 8


def test_one_event_per_call(chase, store, fight, car, truck, sink):
    chase.apply_chase_action(
        fight,
        [
            {"vehicle_id": car.id, "action_values": {"Condition Points": 2}},
            {"id": truck.id, "action_values": {"Condition Points": 4}},
        ],
    )

    events = store.list_events(fight.id)
    assert len(events) == 1
    assert events[0].event_type == "chase_action"
    assert events[0].details == {"updates_count": 2}
    assert store.get_vehicle(truck.id).action_values.condition_points == 4
    assert sink.notifications == [(fight.id, {"action": "chase_action", "updates": 2})]


def test_role_swap_finds_same_relationship(chase, store, fight, car, truck, add_shot):
    """Test that both sides of a chase resolve to one relationship."""
    car_shot = add_shot(fight, car, shot=10)
    truck_shot = add_shot(fight, truck, shot=8)

    chase.apply_chase_action(
        fight,
        [{"vehicle_id": car.id, "position": "near", "target_shot_id": truck_shot.id}],
    )
    chase.apply_chase_action(
        fight,
        [
            {
                "vehicle_id": truck.id,
                "shot_id": truck_shot.id,
                "position": "far",
                "target_shot_id": car_shot.id,
                "role": "evader",
            }
        ],
    )

    relationships = chase.list_relationships(fight)
    assert len(relationships) == 1
    assert relationships[0].pursuer_id == car_shot.id
    assert relationships[0].evader_id == truck_shot.id
    assert relationships[0].position == ChasePosition.FAR


def test_position_with_shot_from_other_fight(
    chase, store, fight, other_fight, car, truck, add_shot
):
    add_shot(fight, car)
    stray_shot = add_shot(other_fight, truck)

    with pytest.raises(TenancyViolationError):
        chase.apply_chase_action(
            fight,
            [
                {
                    "vehicle_id": car.id,
                    "action_values": {"Chase Points": 3},
                    "position": "near",
                    "target_shot_id": stray_shot.id,
                }
            ],
        )

    assert store.get_vehicle(car.id).action_values.chase_points == 2
    assert store.list_events(fight.id) == []


def test_relationship_with_itself(chase, fight, car, add_shot):
    car_shot = add_shot(fight, car)
    with pytest.raises(ValidationFailureError):
        chase.apply_chase_action(
            fight,
            [{"vehicle_id": car.id, "position": "near", "target_shot_id": car_shot.id}],
        )


def test_unknown_vehicle_is_skipped(chase, store, fight, car, mocker):
    mock_log_warning = mocker.patch("shotcounter.combat.chase.log_warning")

    chase.apply_chase_action(
        fight,
        [
            {"vehicle_id": "missing", "action_values": {"Chase Points": 3}},
            {"vehicle_id": car.id, "action_values": {"Chase Points": 3}},
        ],
    )

    mock_log_warning.assert_called_once()
    assert store.get_vehicle(car.id).action_values.chase_points == 5


def test_driver_pays_shot_cost(chase, store, fight, pc, car, add_shot):
    driver_shot = add_shot(fight, pc, shot=12)

    chase.apply_chase_action(
        fight,
        [{"vehicle_id": car.id, "character_id": pc.id, "shot_cost": 3}],
    )

    assert store.get_shot(driver_shot.id).shot == 9


def test_non_positive_shot_cost_is_not_spent(chase, store, fight, pc, car, add_shot):
    driver_shot = add_shot(fight, pc, shot=12)

    chase.apply_chase_action(
        fight,
        [
            {
                "vehicle_id": car.id,
                "action_values": {"Chase Points": 1},
                "character_id": pc.id,
                "shot_cost": -2,
            }
        ],
    )

    assert store.get_shot(driver_shot.id).shot == 12
    assert store.get_vehicle(car.id).action_values.chase_points == 3


def test_driver_without_shot_is_skipped(chase, store, fight, pc, car, mocker):
    mock_log_warning = mocker.patch("shotcounter.combat.chase.log_warning")

    chase.apply_chase_action(
        fight,
        [{"vehicle_id": car.id, "character_id": pc.id, "shot_cost": 3}],
    )

    mock_log_warning.assert_called_once()


def test_failed_driver_spend_rolls_back(chase, store, fight, pc, car, add_shot, mocker):
    add_shot(fight, pc, shot=12)
    mocker.patch.object(chase.ledger, "spend", side_effect=ValidationFailureError("bad spend"))

    with pytest.raises(ValidationFailureError):
        chase.apply_chase_action(
            fight,
            [
                {
                    "vehicle_id": car.id,
                    "action_values": {"Chase Points": 4},
                    "character_id": pc.id,
                    "shot_cost": 3,
                }
            ],
        )

    assert store.get_vehicle(car.id).action_values.chase_points == 2
    assert store.list_events(fight.id) == []


def test_deactivate_relationship(chase, store, fight, car, truck, add_shot):
    car_shot = add_shot(fight, car)
    truck_shot = add_shot(fight, truck)
    relationship = store.find_or_create_relationship(fight.id, car_shot.id, truck_shot.id)

    chase.deactivate_relationship(relationship)

    assert chase.list_relationships(fight) == []
    assert len(chase.list_relationships(fight, shot_id=car_shot.id, active=None)) == 1
    fresh = store.find_or_create_relationship(fight.id, car_shot.id, truck_shot.id)
    assert fresh.id != relationship.id
