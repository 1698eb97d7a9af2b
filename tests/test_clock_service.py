"""Tests for the clock service."""

import asyncio
from datetime import date, datetime, timedelta
from unittest.mock import patch
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pytest

from salatuk.domain.events import (
    DayRolloverEvent,
    LocationChangedEvent,
    PrayerTimesComputedEvent,
    SettingsChangedEvent,
)
from salatuk.domain.models import (
    AppSettings,
    GeoCoordinate,
    IqamaPhase,
    Madhab,
    PrayerName,
    PrayerOffsets,
)
from salatuk.infrastructure.event_bus import InMemoryEventBus
from salatuk.services.clock_service import ClockService, DisplayState
from salatuk.services.notification_service import NotificationService
from salatuk.services.prayer_service import PrayerService

from conftest import FakeNotificationCenter

RIYADH = ZoneInfo("Asia/Riyadh")


class RecordingBus(InMemoryEventBus):
    """Event bus that remembers every published event."""

    def __init__(self) -> None:
        super().__init__()
        self.events = []

    def publish(self, event) -> None:
        self.events.append(event)
        super().publish(event)

    def of_type(self, event_type: type) -> list:
        return [e for e in self.events if isinstance(e, event_type)]


def _at(day: date, hour: int, minute: int = 0) -> datetime:
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=RIYADH)


class TestClockService:
    """Location fix, rollover and display state tests."""

    @pytest.fixture
    def settings(self) -> AppSettings:
        return AppSettings(timezone="Asia/Riyadh")

    @pytest.fixture
    def bus(self) -> RecordingBus:
        return RecordingBus()

    @pytest.fixture
    def clock(
        self,
        mecca: GeoCoordinate,
        settings: AppSettings,
        center: FakeNotificationCenter,
        bus: RecordingBus,
    ) -> ClockService:
        prayer_service = PrayerService(
            mecca, settings.calculation_parameters, timezone_name="Asia/Riyadh"
        )
        notification_service = NotificationService(center, bus)
        return ClockService(prayer_service, notification_service, settings, bus)

    def test_no_data_before_fix(self, clock: ClockService, center: FakeNotificationCenter) -> None:
        state = clock.tick(_at(date(2024, 6, 15), 12))

        assert isinstance(state, DisplayState)
        assert not state.has_times
        assert state.location is None
        assert state.qibla_bearing is None
        assert clock.prayer_times is None
        assert center.pending() == []

    def test_location_fix_computes_and_schedules(
        self,
        clock: ClockService,
        mecca: GeoCoordinate,
        center: FakeNotificationCenter,
        bus: RecordingBus,
    ) -> None:
        times = clock.update_location(mecca)

        assert times is not None
        assert times.date == datetime.now(RIYADH).date()
        assert len(center.pending()) == 11
        assert len(bus.of_type(LocationChangedEvent)) == 1
        assert len(bus.of_type(PrayerTimesComputedEvent)) == 1
        assert bus.of_type(LocationChangedEvent)[0].qibla_bearing == 0.0

    def test_rollover_recomputes_once_per_day(
        self, clock: ClockService, mecca: GeoCoordinate, bus: RecordingBus
    ) -> None:
        clock.update_location(mecca)
        day = date(2024, 6, 15)

        clock.tick(_at(day, 0, 1))
        clock.tick(_at(day, 12))
        clock.tick(_at(day, 23, 59))

        rollovers = bus.of_type(DayRolloverEvent)
        assert len(rollovers) == 1
        assert rollovers[0].current_date == day
        assert clock.prayer_times is not None
        assert clock.prayer_times.date == day

        clock.tick(_at(day + timedelta(days=1), 0, 0))

        assert len(bus.of_type(DayRolloverEvent)) == 2
        assert clock.prayer_times.date == day + timedelta(days=1)

    def test_rollover_resyncs_notifications(
        self, clock: ClockService, mecca: GeoCoordinate, center: FakeNotificationCenter
    ) -> None:
        clock.update_location(mecca)
        calls = center.remove_all_calls

        clock.tick(_at(date(2024, 6, 15), 0, 1))

        assert center.remove_all_calls == calls + 1
        assert len(center.pending()) == 11

    def test_aware_time_in_other_zone_is_converted(
        self, clock: ClockService, mecca: GeoCoordinate
    ) -> None:
        clock.update_location(mecca)
        # 22:30 UTC on the 14th is already the 15th in Riyadh
        state = clock.tick(datetime(2024, 6, 14, 22, 30, tzinfo=ZoneInfo("UTC")))

        assert state.now.date() == date(2024, 6, 15)
        assert clock.prayer_times.date == date(2024, 6, 15)

    def test_display_state_at_noon(self, clock: ClockService, mecca: GeoCoordinate) -> None:
        clock.update_location(mecca)
        day = date(2024, 6, 15)
        state = clock.tick(_at(day, 12))

        assert state.has_times
        assert state.location == mecca
        assert state.current_prayer is PrayerName.SUNRISE
        assert state.next_prayer is PrayerName.DHUHR
        assert state.highlighted_prayer is PrayerName.DHUHR
        assert PrayerName.DHUHR in state.countdowns
        assert PrayerName.ASR not in state.countdowns
        assert state.iqama == {}

    def test_iqama_after_azan(self, clock: ClockService, mecca: GeoCoordinate) -> None:
        clock.update_location(mecca)
        day = date(2024, 6, 15)
        clock.tick(_at(day, 1))
        dhuhr = clock.prayer_times.dhuhr

        state = clock.tick(dhuhr + timedelta(minutes=5))

        status = state.iqama[PrayerName.DHUHR]
        assert status.phase is IqamaPhase.COUNTING
        assert status.duration == timedelta(minutes=15)
        assert state.current_prayer is PrayerName.DHUHR
        assert PrayerName.DHUHR not in state.countdowns

    def test_azan_offsets_shift_display(
        self, clock: ClockService, settings: AppSettings, mecca: GeoCoordinate
    ) -> None:
        clock.update_location(mecca)
        day = date(2024, 6, 15)
        clock.tick(_at(day, 1))
        dhuhr = clock.prayer_times.dhuhr

        clock.apply_settings(
            AppSettings(timezone="Asia/Riyadh", azan_offsets=PrayerOffsets(dhuhr=10))
        )
        state = clock.tick(dhuhr + timedelta(minutes=5))

        assert state.azan_times.dhuhr == dhuhr + timedelta(minutes=10)
        assert state.current_prayer is PrayerName.SUNRISE
        assert PrayerName.DHUHR not in state.iqama

    def test_apply_settings_before_fix(
        self, clock: ClockService, center: FakeNotificationCenter, bus: RecordingBus
    ) -> None:
        result = clock.apply_settings(
            AppSettings(timezone="Asia/Riyadh", dhikr_reminders_enabled=False)
        )

        assert result is None
        assert center.pending() == []
        assert bus.of_type(SettingsChangedEvent)[0].changed_fields == ("dhikr_reminders_enabled",)

    def test_apply_settings_resyncs(
        self, clock: ClockService, mecca: GeoCoordinate, center: FakeNotificationCenter
    ) -> None:
        clock.update_location(mecca)
        clock.apply_settings(AppSettings(timezone="Asia/Riyadh", dhikr_reminders_enabled=False))

        assert len(center.pending()) == 6
        assert not clock.settings.dhikr_reminders_enabled

    def test_uncomputable_location(self, center: FakeNotificationCenter, bus: RecordingBus) -> None:
        settings = AppSettings(timezone="Arctic/Longyearbyen")
        longyearbyen = GeoCoordinate(latitude=78.22, longitude=15.65)
        clock = ClockService(
            PrayerService(longyearbyen, timezone_name="Arctic/Longyearbyen"),
            NotificationService(center, bus),
            settings,
            bus,
        )
        clock.update_location(longyearbyen)
        center.triggers["stale"] = None

        state = clock.tick(datetime(2024, 6, 21, 12, tzinfo=ZoneInfo("Arctic/Longyearbyen")))

        assert not state.has_times
        assert state.error
        assert state.location == longyearbyen
        assert center.triggers == {}

    def test_refresh_before_fix_is_noop(self, clock: ClockService) -> None:
        assert clock.refresh() is None

    def test_run_ticks_until_stopped(self, clock: ClockService) -> None:
        states: list[DisplayState] = []

        async def scenario() -> None:
            task = asyncio.create_task(clock.run(interval=0.01, on_tick=states.append))
            await asyncio.sleep(0.05)
            assert clock.is_running
            clock.stop()
            await asyncio.wait_for(task, timeout=1)

        asyncio.run(scenario())

        assert states
        assert not clock.is_running

    def test_unknown_timezone_keeps_settings(
        self, clock: ClockService, mecca: GeoCoordinate, center: FakeNotificationCenter
    ) -> None:
        clock.update_location(mecca)

        with pytest.raises(ZoneInfoNotFoundError):
            clock.apply_settings(AppSettings(timezone="Not/AZone", madhab=Madhab.HANAFI))

        assert clock.settings.timezone == "Asia/Riyadh"
        assert clock.settings.madhab is Madhab.SHAFI
        assert clock.update_location(GeoCoordinate(latitude=24.45, longitude=54.38)) is not None
        assert len(center.pending()) == 11

    def test_disabling_dhikr_cancels_reminders(
        self, clock: ClockService, mecca: GeoCoordinate, center: FakeNotificationCenter
    ) -> None:
        clock.update_location(mecca)

        with patch.object(
            NotificationService, "cancel_dhikr_reminders", autospec=True
        ) as cancel:
            clock.apply_settings(AppSettings(timezone="Asia/Riyadh", dhikr_reminders_enabled=False))
            clock.apply_settings(AppSettings(timezone="Asia/Riyadh", dhikr_reminders_enabled=False))

        cancel.assert_called_once()
        assert not any(t.startswith("dhikr_") for t in center.triggers)


class TestClockServiceDateLine:
    """Clock behaviour in zones a day ahead of local solar time."""

    def test_current_prayer_on_same_civil_day(
        self, center: FakeNotificationCenter
    ) -> None:
        apia = GeoCoordinate(latitude=-13.83, longitude=-171.76)
        clock = ClockService(
            PrayerService(apia, timezone_name="Pacific/Apia"),
            NotificationService(center),
            AppSettings(location=apia, timezone="Pacific/Apia"),
        )
        clock.update_location(apia)

        state = clock.tick(datetime(2024, 6, 15, 13, tzinfo=ZoneInfo("Pacific/Apia")))

        assert state.has_times
        assert state.prayer_times.dhuhr.date() == date(2024, 6, 15)
        assert state.current_prayer is PrayerName.DHUHR
        assert state.next_prayer is PrayerName.ASR
