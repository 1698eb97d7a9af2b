"""Application state and dependencies."""

import asyncio
import contextlib
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from salatuk.domain.models import AppSettings
from salatuk.infrastructure.event_bus import InMemoryEventBus
from salatuk.infrastructure.notification_center import APSchedulerNotificationCenter
from salatuk.infrastructure.settings_repository import JsonSettingsRepository
from salatuk.services.clock_service import ClockService
from salatuk.services.notification_service import NotificationService
from salatuk.services.prayer_service import PrayerService


@dataclass
class AppState:
    """Application state container."""

    settings: AppSettings
    settings_repository: JsonSettingsRepository
    prayer_service: PrayerService
    notification_service: NotificationService
    notification_center: APSchedulerNotificationCenter
    clock_service: ClockService
    event_bus: InMemoryEventBus
    started_at: datetime
    clock_task: asyncio.Task | None = None


# Global application state (singleton)
_app_state: AppState | None = None


async def initialize_app_state(settings_path: Path | None = None) -> AppState:
    """
    Initialize application state.

    Args:
        settings_path: Settings file path

    Returns:
        Initialized AppState
    """
    global _app_state

    if _app_state is not None:
        return _app_state

    settings_repo = JsonSettingsRepository(settings_path)
    settings = await settings_repo.load()

    # Services
    prayer_service = PrayerService(
        location=settings.location,
        parameters=settings.calculation_parameters,
        timezone_name=settings.timezone,
    )

    # Infrastructure
    event_bus = InMemoryEventBus()
    notification_center = APSchedulerNotificationCenter(
        timezone_provider=lambda: prayer_service.timezone
    )

    notification_service = NotificationService(
        notification_center=notification_center,
        event_bus=event_bus,
    )

    clock_service = ClockService(
        prayer_service=prayer_service,
        notification_service=notification_service,
        settings=settings,
        event_bus=event_bus,
    )

    _app_state = AppState(
        settings=settings,
        settings_repository=settings_repo,
        prayer_service=prayer_service,
        notification_service=notification_service,
        notification_center=notification_center,
        clock_service=clock_service,
        event_bus=event_bus,
        started_at=datetime.now(),
    )

    return _app_state


def get_app_state() -> AppState:
    """Get current application state."""
    if _app_state is None:
        raise RuntimeError("Application state not initialized")
    return _app_state


async def shutdown_app_state() -> None:
    """Shutdown application state."""
    global _app_state

    if _app_state is not None:
        _app_state.clock_service.stop()
        if _app_state.clock_task is not None:
            _app_state.clock_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await _app_state.clock_task
        _app_state.notification_center.shutdown()
        _app_state = None
