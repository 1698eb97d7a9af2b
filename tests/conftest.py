"""Shared fixtures."""

from datetime import date, datetime, timedelta, timezone

import pytest

from salatuk.domain.models import GeoCoordinate, NotificationTrigger, PrayerTimes
from salatuk.services.ports import CompletionHandler, NotificationCenterPort

UTC_PLUS_3 = timezone(timedelta(hours=3))


class FakeNotificationCenter(NotificationCenterPort):
    """Notification center that keeps triggers in a dict and can reject identifiers."""

    def __init__(self, failing: set[str] | None = None) -> None:
        self.triggers: dict[str, NotificationTrigger] = {}
        self.failing = failing or set()
        self.remove_all_calls = 0

    def add(self, trigger: NotificationTrigger, completion: CompletionHandler) -> None:
        if trigger.identifier in self.failing:
            completion(RuntimeError(f"rejected {trigger.identifier}"))
            return
        self.triggers[trigger.identifier] = trigger
        completion(None)

    def remove_pending(self, identifiers: list[str]) -> None:
        for identifier in identifiers:
            self.triggers.pop(identifier, None)

    def remove_all_pending(self) -> None:
        self.remove_all_calls += 1
        self.triggers.clear()

    def pending(self) -> list[NotificationTrigger]:
        return sorted(self.triggers.values(), key=lambda t: (t.hour, t.minute, t.identifier))


@pytest.fixture
def mecca() -> GeoCoordinate:
    """Masjid al-Haram."""
    return GeoCoordinate(latitude=21.4225, longitude=39.8262)


@pytest.fixture
def new_york() -> GeoCoordinate:
    return GeoCoordinate(latitude=40.7128, longitude=-74.0060)


@pytest.fixture
def center() -> FakeNotificationCenter:
    return FakeNotificationCenter()


@pytest.fixture
def sample_times() -> PrayerTimes:
    """A plausible day in UTC+3."""

    def at(hour: int, minute: int) -> datetime:
        return datetime(2024, 6, 15, hour, minute, tzinfo=UTC_PLUS_3)

    return PrayerTimes(
        date=date(2024, 6, 15),
        fajr=at(4, 15),
        sunrise=at(5, 39),
        dhuhr=at(12, 0),
        asr=at(15, 40),
        maghrib=at(19, 5),
        isha=at(20, 30),
    )
