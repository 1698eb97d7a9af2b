"""Prayer time calculation service."""

import logging
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from timezonefinder import TimezoneFinder

from salatuk.domain.geodesy import qibla_bearing
from salatuk.domain.models import (
    CalculationParameters,
    GeoCoordinate,
    PrayerName,
    PrayerOffsets,
    PrayerTime,
    PrayerTimes,
    SunnahTimes,
)
from salatuk.domain.policy import adjusted_prayer_times
from salatuk.domain.solar import PrayerTimeCalculator, compute_sunnah_times
from salatuk.services.ports import PrayerTimeCalculatorPort

logger = logging.getLogger(__name__)


class PrayerService(PrayerTimeCalculatorPort):
    """Prayer time calculation service bound to one location."""

    def __init__(
        self,
        location: GeoCoordinate,
        parameters: CalculationParameters | None = None,
        *,
        timezone_name: str | None = None,
    ) -> None:
        """
        Initialize prayer service.

        Args:
            location: Observer coordinate
            parameters: Calculation method, madhab, high-latitude rule and adjustments
            timezone_name: IANA zone; looked up from the coordinate when omitted
        """
        self._tzf = TimezoneFinder()
        self._calculator = PrayerTimeCalculator(parameters or CalculationParameters())
        self._location = location
        self._tz_name, self._tz = self._resolve_timezone(location, timezone_name)

    def _resolve_timezone(
        self, location: GeoCoordinate, override: str | None
    ) -> tuple[str, ZoneInfo]:
        tz_name = override or self._tzf.timezone_at(lat=location.latitude, lng=location.longitude)
        if tz_name is None:
            logger.warning(f"No time zone found for {location}, using UTC.")
            tz_name = "UTC"
        return tz_name, ZoneInfo(tz_name)

    @property
    def timezone(self) -> ZoneInfo:
        """Time zone object."""
        return self._tz

    @property
    def timezone_name(self) -> str:
        """Time zone name."""
        return self._tz_name

    @property
    def location(self) -> GeoCoordinate:
        return self._location

    @property
    def parameters(self) -> CalculationParameters:
        return self._calculator.parameters

    @property
    def qibla_bearing(self) -> float:
        """Bearing from the current location to the Kaaba."""
        return qibla_bearing(self._location)

    def utc_offset_minutes(self, target_date: date) -> int:
        """UTC offset in effect at local noon of *target_date*."""
        offset = datetime.combine(target_date, time(12), tzinfo=self._tz).utcoffset()
        if offset is None:
            return 0
        return int(offset.total_seconds() // 60)

    def update_location(self, location: GeoCoordinate, timezone_name: str | None = None) -> None:
        """Update the location and resolve its time zone again; unchanged on failure."""
        self._tz_name, self._tz = self._resolve_timezone(location, timezone_name)
        self._location = location
        logger.info(
            f"Location updated: {location.latitude:.4f}, {location.longitude:.4f} "
            f"({self._tz_name})"
        )

    def update_parameters(self, parameters: CalculationParameters) -> None:
        self._calculator = PrayerTimeCalculator(parameters)

    def calculate(self, target_date: date) -> PrayerTimes:
        """Calculate prayer times for the given date in the location's time zone."""
        times = self._calculator.calculate(
            self._location, target_date, self.utc_offset_minutes(target_date)
        )
        return PrayerTimes(
            date=target_date,
            **{prayer.value: times.get_time(prayer).astimezone(self._tz) for prayer in PrayerName},
        )

    def calculate_range(self, start_date: date, days: int) -> list[PrayerTimes]:
        """Calculate prayer times for *days* consecutive days."""
        return [self.calculate(start_date + timedelta(days=i)) for i in range(days)]

    def sunnah_times(self, target_date: date) -> SunnahTimes:
        """Night divisions starting at the maghrib of *target_date*."""
        return compute_sunnah_times(
            self.calculate(target_date), self.calculate(target_date + timedelta(days=1))
        )

    def get_next_prayer(
        self, now: datetime | None = None, azan_offsets: PrayerOffsets | None = None
    ) -> PrayerTime:
        """
        Return the next azan, tomorrow's fajr after isha.

        Args:
            now: Reference time (default: now in the location's time zone)
            azan_offsets: Offsets applied before comparing with *now*

        Raises:
            PrayerTimesUncomputableError: today's or tomorrow's times are uncomputable
        """
        if now is None:
            now = datetime.now(self._tz)
        azan_offsets = azan_offsets or PrayerOffsets()

        today_times = adjusted_prayer_times(self.calculate(now.date()), azan_offsets)
        upcoming = today_times.next_prayer(now)
        if upcoming is not None:
            return today_times.get_prayer_time(upcoming)

        tomorrow = self.calculate(now.date() + timedelta(days=1))
        return adjusted_prayer_times(tomorrow, azan_offsets).get_prayer_time(PrayerName.FAJR)
