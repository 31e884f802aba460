"""
Shared fixtures for the combat engine tests.
"""

import pytest

from shotcounter.models import Character, Fight, Shot, Vehicle
from shotcounter.storage import InMemoryStore, RecordingNotificationSink


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def sink():
    return RecordingNotificationSink()


@pytest.fixture
def fight(store):
    """A fight in its first sequence, on shot 12."""
    return store.add_fight(Fight(name="Warehouse Brawl", sequence=1, shot_counter=12))


@pytest.fixture
def other_fight(store):
    return store.add_fight(Fight(name="Rooftop Chase"))


@pytest.fixture
def add_shot(store):
    """Returns a helper that seeds a shot for an actor in a fight."""

    def _add_shot(fight, actor, **fields):
        if isinstance(actor, Vehicle):
            fields["vehicle_id"] = actor.id
        else:
            fields["character_id"] = actor.id
        return store.add_shot(Shot(fight_id=fight.id, **fields))

    return _add_shot


@pytest.fixture
def pc(store):
    return store.add_character(
        Character(
            name="Johnny Tso",
            action_values={
                "Type": "PC",
                "Wounds": 30,
                "Fortune": 2,
                "MainAttack": "Martial Arts",
                "Martial Arts": 14,
            },
        )
    )


@pytest.fixture
def second_pc(store):
    return store.add_character(
        Character(name="Big Bruiser", action_values={"Type": "PC", "Guns": 13})
    )


@pytest.fixture
def boss(store):
    return store.add_character(
        Character(name="Ugly Shing", action_values={"Type": "Boss", "Guns": 15})
    )


@pytest.fixture
def mook(store):
    return store.add_character(
        Character(name="Ninja Mooks", action_values={"Type": "Mook", "Guns": 8})
    )


@pytest.fixture
def featured_foe(store):
    return store.add_character(
        Character(name="Hitman", action_values={"Type": "Featured Foe"})
    )


@pytest.fixture
def car(store):
    return store.add_vehicle(
        Vehicle(
            name="Muscle Car",
            action_values={"Chase Points": 2, "Condition Points": 0, "Acceleration": 7},
        )
    )


@pytest.fixture
def truck(store):
    return store.add_vehicle(Vehicle(name="Armored Truck", action_values={"Acceleration": 5}))
