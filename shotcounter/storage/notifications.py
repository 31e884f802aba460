"""
Notification sinks.

The engine informs the outside world that a fight changed through a
NotificationSink. Delivery is fire-and-forget; the sinks here are the ones
the engine ships with.
"""

from typing import Any

from ..core.logging import log_info


class LoggingNotificationSink:
    """Writes each notification to the engine log."""

    def notify(self, fight_id: str, payload: dict[str, Any]) -> None:
        log_info(f"Fight {fight_id} updated", payload)


class RecordingNotificationSink:
    """Keeps every notification in memory, in delivery order."""

    def __init__(self) -> None:
        self.notifications: list[tuple[str, dict[str, Any]]] = []

    def notify(self, fight_id: str, payload: dict[str, Any]) -> None:
        self.notifications.append((fight_id, dict(payload)))
