"""
Storage layer for the shot counter combat engine.

This module contains the store protocols the services depend on, the
in-memory reference store, the unit of work that wraps each action in a
single transaction, and the notification sinks.
"""

from .interfaces import (
    ActorStore,
    ChaseRelationshipStore,
    CombatStore,
    EffectStore,
    EventStore,
    FightStore,
    NotificationSink,
    ShotStore,
)
from .memory import InMemoryStore
from .notifications import LoggingNotificationSink, RecordingNotificationSink
from .unit_of_work import UnitOfWork

__all__ = [
    "ActorStore",
    "ChaseRelationshipStore",
    "CombatStore",
    "EffectStore",
    "EventStore",
    "FightStore",
    "NotificationSink",
    "ShotStore",
    "InMemoryStore",
    "LoggingNotificationSink",
    "RecordingNotificationSink",
    "UnitOfWork",
]
