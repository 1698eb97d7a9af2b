"""Service layer - Business logic."""

from salatuk.services.clock_service import ClockService, DisplayState
from salatuk.services.notification_service import NotificationService
from salatuk.services.ports import (
    EventBusPort,
    NotificationCenterPort,
    PrayerTimeCalculatorPort,
    SettingsRepositoryPort,
)
from salatuk.services.prayer_service import PrayerService

__all__ = [
    "ClockService",
    "DisplayState",
    "EventBusPort",
    "NotificationCenterPort",
    "NotificationService",
    "PrayerService",
    "PrayerTimeCalculatorPort",
    "SettingsRepositoryPort",
]
