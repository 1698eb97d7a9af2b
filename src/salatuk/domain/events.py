"""Domain events for event-driven architecture."""

from dataclasses import dataclass, field
from datetime import date, datetime
from uuid import UUID, uuid4

from salatuk.domain.models import GeoCoordinate, NotificationTrigger, PrayerTimes


@dataclass(frozen=True, kw_only=True)
class DomainEvent:
    """Base class for domain events."""

    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True, kw_only=True)
class LocationChangedEvent(DomainEvent):
    """A new location fix was applied."""

    location: GeoCoordinate
    qibla_bearing: float


@dataclass(frozen=True, kw_only=True)
class PrayerTimesComputedEvent(DomainEvent):
    """Prayer times were (re)computed for a day."""

    prayer_times: PrayerTimes


@dataclass(frozen=True, kw_only=True)
class DayRolloverEvent(DomainEvent):
    """The clock crossed local midnight."""

    previous_date: date | None
    current_date: date


@dataclass(frozen=True, kw_only=True)
class NotificationsResyncedEvent(DomainEvent):
    """Pending notifications were replaced with a fresh set."""

    identifiers: tuple[str, ...]


@dataclass(frozen=True, kw_only=True)
class NotificationFailedEvent(DomainEvent):
    """The notification collaborator rejected one trigger."""

    trigger: NotificationTrigger
    error_message: str


@dataclass(frozen=True, kw_only=True)
class SettingsChangedEvent(DomainEvent):
    """Settings changed."""

    changed_fields: tuple[str, ...]
