"""
Tests for the in-memory store and the unit of work.
"""

import pytest

from shotcounter.core.error_handling import (
    NotFoundError,
    PersistenceFailureError,
    ValidationFailureError,
)
from shotcounter.models import CharacterEffect
from shotcounter.storage import UnitOfWork


def test_transaction_rolls_back_on_error(store, fight, pc, add_shot):
    """Test that nothing written inside a failed transaction is kept."""
    shot = add_shot(fight, pc, shot=10)

    with pytest.raises(RuntimeError):
        with store.transaction():
            store.update_shot(shot, {"shot": 4})
            store.append_event(fight.id, "combat_action", "Hit", {})
            raise RuntimeError("boom")

    assert store.get_shot(shot.id).shot == 10
    assert store.list_events(fight.id) == []


def test_nested_transaction_is_part_of_outer(store, fight, pc, add_shot):
    shot = add_shot(fight, pc, shot=10)

    with pytest.raises(RuntimeError):
        with store.transaction():
            with store.transaction():
                store.update_shot(shot, {"shot": 4})
            raise RuntimeError("boom")

    assert store.get_shot(shot.id).shot == 10


def test_update_rejects_broken_invariant(store, fight, pc, add_shot):
    """Test that a negative count is a validation failure, not a clamp."""
    shot = add_shot(fight, pc)
    with pytest.raises(ValidationFailureError):
        store.update_shot(shot, {"count": -1})
    with pytest.raises(ValidationFailureError):
        store.update_fight(fight, {"sequence": -1})


def test_update_unknown_records(store, fight, pc, add_shot):
    shot = add_shot(fight, pc)
    store.shots.pop(shot.id)
    with pytest.raises(NotFoundError):
        store.update_shot(shot, {"shot": 1})
    with pytest.raises(NotFoundError):
        store.append_event("missing", "boost", "Boost", {})


def test_update_sets_updated_at(store, fight, pc, add_shot, mocker):
    shot = add_shot(fight, pc)
    later = shot.updated_at.replace(year=shot.updated_at.year + 1)
    mocker.patch("shotcounter.storage.memory.utc_now", return_value=later)

    assert store.update_shot(shot, {"shot": 5}).updated_at == later


def test_find_or_create_relationship_is_unique(store, fight, car, truck, add_shot):
    car_shot = add_shot(fight, car)
    truck_shot = add_shot(fight, truck)

    first = store.find_or_create_relationship(fight.id, car_shot.id, truck_shot.id)
    second = store.find_or_create_relationship(fight.id, car_shot.id, truck_shot.id)

    assert first.id == second.id
    assert len(store.list_relationships(fight.id)) == 1


def test_effects_are_listed_per_fight(store, fight, other_fight, pc, add_shot):
    shot = add_shot(fight, pc)
    other_shot = add_shot(other_fight, pc)
    effect = store.add_effect(CharacterEffect(name="Boost", shot_id=shot.id))
    store.add_effect(CharacterEffect(name="Other", shot_id=other_shot.id))

    assert store.list_effects(fight.id) == [effect]
    store.remove_effect(effect)
    assert store.list_effects(fight.id) == []
    with pytest.raises(NotFoundError):
        store.remove_effect(effect)


def test_unit_of_work_touches_once(store, fight, sink):
    """Test that a fight is touched and announced once per unit."""
    uow = UnitOfWork(store, sink)
    with uow.atomic():
        uow.touch(fight, {"action": "first"})
        uow.touch(fight, {"action": "second"})

    assert sink.notifications == [(fight.id, {"action": "first"})]


def test_unit_of_work_skips_empty_writes(store, fight, pc, add_shot, mocker):
    shot = add_shot(fight, pc)
    update_shot = mocker.spy(store, "update_shot")
    uow = UnitOfWork(store)

    with uow.atomic():
        assert uow.write_shot(shot, {}) is shot

    update_shot.assert_not_called()


def test_unit_of_work_does_not_notify_on_rollback(store, fight, pc, add_shot, sink, mocker):
    shot = add_shot(fight, pc, shot=8)
    mocker.patch.object(store, "update_actor", side_effect=PersistenceFailureError("disk full"))
    uow = UnitOfWork(store, sink)

    with pytest.raises(PersistenceFailureError):
        with uow.atomic():
            uow.write_shot(shot, {"shot": 5})
            uow.record_event(fight, "combat_action", "Hit")
            uow.touch(fight)
            uow.write_actor(pc, {"status": ["out_of_fight"]})

    assert store.get_shot(shot.id).shot == 8
    assert store.list_events(fight.id) == []
    assert uow.events == []
    assert sink.notifications == []


def test_notification_failure_is_logged_not_raised(store, fight, mocker):
    """Test that a failing sink never undoes a committed action."""
    notifier = mocker.Mock()
    notifier.notify.side_effect = RuntimeError("socket closed")
    mock_log_warning = mocker.patch("shotcounter.storage.unit_of_work.log_warning")
    uow = UnitOfWork(store, notifier)

    with uow.atomic():
        uow.record_event(fight, "combat_action", "Hit")
        uow.touch(fight)

    mock_log_warning.assert_called_once()
    assert mock_log_warning.call_args.args[1]["fight_id"] == fight.id
    assert len(store.list_events(fight.id)) == 1
