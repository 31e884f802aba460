"""
Unit of work for combat actions.

Every service runs its reads and writes for one logical action inside a
UnitOfWork. State writes and the fight events that document them go through
the same store transaction, so they commit or roll back together. Touching
the fight happens once per fight per unit, and notifications queued during
the unit are only delivered after a successful commit.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional

from catchery import log_warning

from ..core.logging import log_debug
from ..models import Actor, Fight, FightEvent, Shot
from .interfaces import CombatStore, NotificationSink


class UnitOfWork:
    """
    Collects the writes of one combat action and commits them as a whole.

    Attributes:
        store (CombatStore):
            The store the writes go to.
        notifier (NotificationSink | None):
            Told about touched fights after commit.
        events (list[FightEvent]):
            Events recorded during the current unit.

    """

    def __init__(
        self, store: CombatStore, notifier: Optional[NotificationSink] = None
    ) -> None:
        self.store: CombatStore = store
        self.notifier: Optional[NotificationSink] = notifier
        self.events: list[FightEvent] = []
        self._touched: dict[str, Fight] = {}
        self._notifications: list[tuple[str, dict[str, Any]]] = []

    @contextmanager
    def atomic(self) -> Iterator[UnitOfWork]:
        """
        Runs the enclosed block as one transaction.

        If the block raises, nothing it wrote is kept and the exception
        propagates. Queued notifications are delivered only when the block
        completes.
        """
        self.events = []
        self._touched = {}
        self._notifications = []
        try:
            with self.store.transaction():
                yield self
        except BaseException:
            self.events = []
            self._touched = {}
            self._notifications = []
            raise
        self._deliver_notifications()

    # === Writes ===

    def write_shot(self, shot: Shot, fields: Mapping[str, Any]) -> Shot:
        """Writes shot fields. An empty change set is skipped."""
        if not fields:
            return shot
        return self.store.update_shot(shot, fields)

    def write_actor(self, actor: Actor, fields: Mapping[str, Any]) -> Actor:
        """Writes actor fields. An empty change set is skipped."""
        if not fields:
            return actor
        return self.store.update_actor(actor, fields)

    def record_event(
        self,
        fight: Fight,
        event_type: str,
        description: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> FightEvent:
        """Appends a fight event inside the current transaction."""
        event = self.store.append_event(fight.id, event_type, description, details or {})
        self.events.append(event)
        return event

    def touch(self, fight: Fight, summary: Optional[dict[str, Any]] = None) -> Fight:
        """
        Bumps the fight's freshness marker once per unit and queues a
        notification for it.

        Args:
            fight (Fight): The fight to touch.
            summary (Optional[dict[str, Any]]): Payload for the notification.

        Returns:
            Fight: The touched fight.

        """
        if fight.id in self._touched:
            return self._touched[fight.id]
        touched = self.store.touch_fight(fight)
        self._touched[fight.id] = touched
        self._notifications.append((fight.id, summary or {}))
        return touched

    # === Notifications ===

    def _deliver_notifications(self) -> None:
        if self.notifier is None:
            return
        for fight_id, payload in self._notifications:
            try:
                self.notifier.notify(fight_id, payload)
            except Exception as e:
                log_warning(
                    f"Notification for fight {fight_id} failed: {e}",
                    {"fight_id": fight_id, "context": "notification_sink"},
                )
            else:
                log_debug(f"Notified subscribers of fight {fight_id}")
        self._notifications = []
