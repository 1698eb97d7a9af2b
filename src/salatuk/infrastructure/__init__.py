"""Infrastructure layer - Adapters and implementations."""

from salatuk.infrastructure.event_bus import InMemoryEventBus
from salatuk.infrastructure.notification_center import APSchedulerNotificationCenter
from salatuk.infrastructure.settings_repository import JsonSettingsRepository

__all__ = [
    "APSchedulerNotificationCenter",
    "InMemoryEventBus",
    "JsonSettingsRepository",
]
