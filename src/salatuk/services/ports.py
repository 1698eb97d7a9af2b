"""Service layer interfaces (ports)."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import date

from salatuk.domain.events import DomainEvent
from salatuk.domain.models import AppSettings, NotificationTrigger, PrayerTimes

# Called once per registration with None on success or the failure
CompletionHandler = Callable[[Exception | None], None]


class PrayerTimeCalculatorPort(ABC):
    """Prayer time calculation interface (port)."""

    @abstractmethod
    def calculate(self, target_date: date) -> PrayerTimes:
        """Calculate prayer times for the given date."""

    @abstractmethod
    def calculate_range(self, start_date: date, days: int) -> list[PrayerTimes]:
        """Calculate prayer times for *days* consecutive days."""


class NotificationCenterPort(ABC):
    """Notification collaborator interface (port)."""

    @abstractmethod
    def add(self, trigger: NotificationTrigger, completion: CompletionHandler) -> None:
        """Register a trigger, replacing any pending one with the same identifier."""

    @abstractmethod
    def remove_pending(self, identifiers: list[str]) -> None:
        """Remove pending triggers by identifier."""

    @abstractmethod
    def remove_all_pending(self) -> None:
        """Remove every pending trigger."""

    @abstractmethod
    def pending(self) -> list[NotificationTrigger]:
        """List pending triggers."""


class SettingsRepositoryPort(ABC):
    """Settings repository interface (port)."""

    @abstractmethod
    async def load(self) -> AppSettings:
        """Load settings."""

    @abstractmethod
    async def save(self, settings: AppSettings) -> None:
        """Save settings."""


class EventBusPort(ABC):
    """Event bus interface (port)."""

    @abstractmethod
    def publish(self, event: DomainEvent) -> None:
        """Publish an event."""

    @abstractmethod
    def subscribe(
        self,
        event_type: type[DomainEvent],
        handler: Callable[[DomainEvent], None],
    ) -> None:
        """Subscribe to an event type."""
