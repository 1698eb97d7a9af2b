"""Clock driven lifecycle: location fixes, day rollover and display state."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime

from salatuk.domain.errors import PrayerTimesUncomputableError
from salatuk.domain.events import (
    DayRolloverEvent,
    LocationChangedEvent,
    PrayerTimesComputedEvent,
    SettingsChangedEvent,
)
from salatuk.domain.models import (
    AppSettings,
    GeoCoordinate,
    IqamaStatus,
    PrayerName,
    PrayerTimes,
)
from salatuk.domain.policy import (
    adjusted_prayer_times,
    countdown_seconds,
    highlighted_prayer,
    iqama_info,
    is_countdown_visible,
)
from salatuk.services.notification_service import NotificationService
from salatuk.services.ports import EventBusPort
from salatuk.services.prayer_service import PrayerService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DisplayState:
    """Everything a presentation layer needs for one clock tick."""

    now: datetime
    location: GeoCoordinate | None = None
    qibla_bearing: float | None = None
    prayer_times: PrayerTimes | None = None
    azan_times: PrayerTimes | None = None
    current_prayer: PrayerName | None = None
    next_prayer: PrayerName | None = None
    highlighted_prayer: PrayerName | None = None
    countdowns: dict[PrayerName, int] = field(default_factory=dict)
    iqama: dict[PrayerName, IqamaStatus] = field(default_factory=dict)
    error: str | None = None

    @property
    def has_times(self) -> bool:
        """False while waiting for a location fix or when times are uncomputable."""
        return self.prayer_times is not None


class ClockService:
    """Recomputes prayer times when needed and derives display state every tick."""

    def __init__(
        self,
        prayer_service: PrayerService,
        notification_service: NotificationService,
        settings: AppSettings,
        event_bus: EventBusPort | None = None,
    ) -> None:
        """
        Initialize clock service.

        Args:
            prayer_service: Prayer time calculation service
            notification_service: Notification translator
            settings: Current user settings
            event_bus: Event bus (optional)
        """
        self._prayer_service = prayer_service
        self._notification_service = notification_service
        self._settings = settings
        self._event_bus = event_bus
        self._has_fix = False
        self._times: PrayerTimes | None = None
        self._computed_date: date | None = None
        self._error: str | None = None
        self._running = False

    @property
    def settings(self) -> AppSettings:
        return self._settings

    @property
    def prayer_times(self) -> PrayerTimes | None:
        """Times of the last computed day, None before the first fix."""
        return self._times

    @property
    def is_running(self) -> bool:
        return self._running

    def _now(self) -> datetime:
        return datetime.now(self._prayer_service.timezone)

    def _publish(self, event) -> None:
        if self._event_bus:
            self._event_bus.publish(event)

    def update_location(self, location: GeoCoordinate) -> PrayerTimes | None:
        """Apply a location fix and recompute today's times."""
        self._prayer_service.update_location(location, self._settings.timezone)
        self._has_fix = True
        self._publish(
            LocationChangedEvent(
                location=location, qibla_bearing=self._prayer_service.qibla_bearing
            )
        )
        return self._recompute(self._now().date())

    def apply_settings(self, settings: AppSettings) -> PrayerTimes | None:
        """
        Switch to new settings; recompute and resync when a fix is available.

        Raises:
            ZoneInfoNotFoundError: the time zone is unknown; current settings are kept
        """
        old = self._settings.to_dict()
        new = settings.to_dict()
        changed = tuple(key for key in new if old.get(key) != new[key])

        if "location" in changed or "timezone" in changed:
            self._prayer_service.update_location(settings.location, settings.timezone)
        self._prayer_service.update_parameters(settings.calculation_parameters)
        self._settings = settings

        if "dhikr_reminders_enabled" in changed and not settings.dhikr_reminders_enabled:
            self._notification_service.cancel_dhikr_reminders()

        self._publish(SettingsChangedEvent(changed_fields=changed))
        return self.refresh()

    def refresh(self) -> PrayerTimes | None:
        """Recompute today's times and resync notifications; no-op before the first fix."""
        if not self._has_fix:
            return None
        return self._recompute(self._now().date())

    def _recompute(self, target_date: date) -> PrayerTimes | None:
        self._computed_date = target_date
        try:
            times = self._prayer_service.calculate(target_date)
        except PrayerTimesUncomputableError as e:
            logger.warning(f"Prayer times unavailable for {target_date}: {e}")
            self._times = None
            self._error = str(e)
            # Triggers of the previous day or place no longer apply
            self._notification_service.clear()
            return None

        self._times = times
        self._error = None
        logger.info(f"Prayer times computed for {target_date}: {times.to_dict()}")
        self._publish(PrayerTimesComputedEvent(prayer_times=times))
        self._notification_service.resync(times, self._settings)
        return times

    def tick(self, now: datetime | None = None) -> DisplayState:
        """Advance the clock to *now*, recomputing on day rollover."""
        if now is None:
            now = self._now()
        elif now.tzinfo is None:
            now = now.replace(tzinfo=self._prayer_service.timezone)
        else:
            now = now.astimezone(self._prayer_service.timezone)

        if self._has_fix and now.date() != self._computed_date:
            logger.info(f"Day rollover: {self._computed_date} -> {now.date()}")
            self._publish(
                DayRolloverEvent(previous_date=self._computed_date, current_date=now.date())
            )
            self._recompute(now.date())

        return self._derive(now)

    def _derive(self, now: datetime) -> DisplayState:
        if not self._has_fix:
            return DisplayState(now=now)

        location = self._prayer_service.location
        bearing = self._prayer_service.qibla_bearing
        if self._times is None:
            return DisplayState(
                now=now, location=location, qibla_bearing=bearing, error=self._error
            )

        offsets = self._settings.azan_offsets
        azan_times = adjusted_prayer_times(self._times, offsets)
        countdowns: dict[PrayerName, int] = {}
        iqama: dict[PrayerName, IqamaStatus] = {}

        for prayer in PrayerName:
            raw = self._times.get_time(prayer)
            seconds = countdown_seconds(raw, prayer, offsets, now)
            if is_countdown_visible(seconds):
                countdowns[prayer] = seconds
            status = iqama_info(raw, prayer, offsets, self._settings.iqama_offsets, now)
            if status is not None:
                iqama[prayer] = status

        return DisplayState(
            now=now,
            location=location,
            qibla_bearing=bearing,
            prayer_times=self._times,
            azan_times=azan_times,
            current_prayer=azan_times.current_prayer(now),
            next_prayer=azan_times.next_prayer(now),
            highlighted_prayer=highlighted_prayer(azan_times, now),
            countdowns=countdowns,
            iqama=iqama,
        )

    async def run(
        self,
        interval: float = 1.0,
        on_tick: Callable[[DisplayState], None] | None = None,
    ) -> None:
        """Tick every *interval* seconds until stopped."""
        if self._running:
            logger.warning("Clock is already running.")
            return

        self._running = True
        logger.info("Clock started.")

        while self._running:
            state = self.tick()
            if on_tick is not None:
                on_tick(state)
            try:
                await asyncio.sleep(interval)
            except asyncio.CancelledError:
                break

        self._running = False

    def stop(self) -> None:
        """Stop the tick loop."""
        self._running = False
        logger.info("Clock stopped.")
