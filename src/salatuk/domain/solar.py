"""Solar position based prayer time calculation.

Low precision solar ephemeris (accurate to about a minute between 1950 and
2050) combined with the hour-angle equations used by the published prayer
time conventions. All angles are in degrees and all clock values are
fractional hours unless a name says otherwise.
"""

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

from salatuk.domain.errors import PrayerTimesUncomputableError, PrayerTimeUndefinedError
from salatuk.domain.models import (
    CalculationParameters,
    GeoCoordinate,
    PrayerName,
    PrayerTimes,
    SunnahTimes,
)

logger = logging.getLogger(__name__)

J2000 = 2451545.0

# Apparent solar radius plus standard atmospheric refraction
SUNRISE_ANGLE = 0.833

# Initial guesses (local solar hours) at which the sun position is sampled
_GUESSES = {
    PrayerName.FAJR: 5.0,
    PrayerName.SUNRISE: 6.0,
    PrayerName.DHUHR: 12.0,
    PrayerName.ASR: 13.0,
    PrayerName.MAGHRIB: 18.0,
    PrayerName.ISHA: 18.0,
}


def _sin(degrees: float) -> float:
    return math.sin(math.radians(degrees))


def _cos(degrees: float) -> float:
    return math.cos(math.radians(degrees))


def _tan(degrees: float) -> float:
    return math.tan(math.radians(degrees))


def _fix(value: float, mode: float) -> float:
    value -= mode * math.floor(value / mode)
    return value + mode if value < 0 else value


def julian_date(year: int, month: int, day: int) -> float:
    """Julian date at 0h UT of a Gregorian calendar day (Meeus)."""
    if month <= 2:
        year -= 1
        month += 12
    a = math.floor(year / 100)
    b = 2 - a + math.floor(a / 4)
    return math.floor(365.25 * (year + 4716)) + math.floor(30.6001 * (month + 1)) + day + b - 1524.5


@dataclass(frozen=True)
class SolarPosition:
    """Declination (degrees) and equation of time (hours) of the sun."""

    declination: float
    equation_of_time: float


def solar_position(jd: float) -> SolarPosition:
    """Sun declination and equation of time for a Julian date."""
    d = jd - J2000
    mean_anomaly = _fix(357.529 + 0.98560028 * d, 360.0)
    mean_longitude = _fix(280.459 + 0.98564736 * d, 360.0)
    ecliptic_longitude = _fix(
        mean_longitude + 1.915 * _sin(mean_anomaly) + 0.020 * _sin(2 * mean_anomaly), 360.0
    )
    obliquity = 23.439 - 0.00000036 * d

    right_ascension = math.degrees(
        math.atan2(_cos(obliquity) * _sin(ecliptic_longitude), _cos(ecliptic_longitude))
    )
    right_ascension = _fix(right_ascension / 15.0, 24.0)
    equation_of_time = mean_longitude / 15.0 - right_ascension
    # keep it in [-12, 12) so a wrap of the right ascension does not shift noon by a day
    equation_of_time = _fix(equation_of_time + 12.0, 24.0) - 12.0
    declination = math.degrees(math.asin(_sin(obliquity) * _sin(ecliptic_longitude)))
    return SolarPosition(declination=declination, equation_of_time=equation_of_time)


def hour_angle(angle: float, latitude: float, declination: float) -> float:
    """
    Hours between solar noon and the moment the sun is *angle* degrees below the horizon.

    Raises:
        PrayerTimeUndefinedError: the sun never reaches that angle on this day.
    """
    denominator = _cos(latitude) * _cos(declination)
    if abs(denominator) < 1e-12:
        raise PrayerTimeUndefinedError(angle, latitude, declination)
    cos_h = (-_sin(angle) - _sin(latitude) * _sin(declination)) / denominator
    if not -1.0 <= cos_h <= 1.0:
        raise PrayerTimeUndefinedError(angle, latitude, declination)
    return math.degrees(math.acos(cos_h)) / 15.0


def _round_to_minute(value: datetime) -> datetime:
    return (value + timedelta(seconds=30)).replace(second=0, microsecond=0)


class PrayerTimeCalculator:
    """Computes the six daily times for a set of calculation parameters."""

    def __init__(self, parameters: CalculationParameters | None = None) -> None:
        self._parameters = parameters or CalculationParameters()

    @property
    def parameters(self) -> CalculationParameters:
        return self._parameters

    def calculate(
        self,
        location: GeoCoordinate,
        target_date: date,
        utc_offset_minutes: int,
    ) -> PrayerTimes:
        """
        Calculate prayer times for a day.

        Args:
            location: Observer coordinate
            target_date: Calendar day in the observer's time zone
            utc_offset_minutes: Offset of local civil time from UTC

        Returns:
            Times as aware datetimes in the given fixed offset, rounded to the minute

        Raises:
            PrayerTimesUncomputableError: sunrise, sunset or asr has no solution
        """
        # Whole days between the civil day and the local solar day (date-line zones)
        zone_shift = utc_offset_minutes / 60.0 - location.longitude / 15.0
        day_shift = round(zone_shift / 24.0)

        jdate = julian_date(target_date.year, target_date.month, target_date.day)
        jdate -= location.longitude / (15.0 * 24.0) + day_shift
        latitude = location.latitude
        method = self._parameters.method_parameters

        def position(guess: float) -> SolarPosition:
            return solar_position(jdate + guess / 24.0)

        def noon(guess: float) -> float:
            return 12.0 - position(guess).equation_of_time

        def angle_time(angle: float, guess: float, *, before_noon: bool) -> float:
            sun = position(guess)
            offset = hour_angle(angle, latitude, sun.declination)
            solar_noon = 12.0 - sun.equation_of_time
            return solar_noon - offset if before_noon else solar_noon + offset

        def asr_time(guess: float) -> float:
            sun = position(guess)
            shadow = self._parameters.madhab.shadow_factor + _tan(abs(latitude - sun.declination))
            altitude = math.degrees(math.atan(1.0 / shadow))
            return 12.0 - sun.equation_of_time + hour_angle(-altitude, latitude, sun.declination)

        try:
            sunrise = angle_time(SUNRISE_ANGLE, _GUESSES[PrayerName.SUNRISE], before_noon=True)
            sunset = angle_time(SUNRISE_ANGLE, _GUESSES[PrayerName.MAGHRIB], before_noon=False)
            asr = asr_time(_GUESSES[PrayerName.ASR])
        except PrayerTimeUndefinedError as e:
            raise PrayerTimesUncomputableError(
                f"No sunrise, sunset or asr at {location} on {target_date}: {e}"
            ) from e

        dhuhr = noon(_GUESSES[PrayerName.DHUHR])

        fajr: float | None
        try:
            fajr = angle_time(method.fajr_angle, _GUESSES[PrayerName.FAJR], before_noon=True)
        except PrayerTimeUndefinedError:
            fajr = None

        maghrib = sunset
        if method.maghrib_angle is not None:
            try:
                angle_maghrib = angle_time(
                    method.maghrib_angle, _GUESSES[PrayerName.MAGHRIB], before_noon=False
                )
                if angle_maghrib > sunset:
                    maghrib = angle_maghrib
            except PrayerTimeUndefinedError:
                pass  # stays at sunset

        isha: float | None = None
        if method.isha_interval is None:
            try:
                isha = angle_time(method.isha_angle, _GUESSES[PrayerName.ISHA], before_noon=False)
            except PrayerTimeUndefinedError:
                isha = None

        # High-latitude rule bounds fajr and isha by a portion of the night
        rule = self._parameters.high_latitude_rule
        night = 24.0 - (sunset - sunrise)

        safe_fajr = sunrise - rule.night_portion(method.fajr_angle) * night
        if fajr is None or fajr < safe_fajr:
            logger.debug(f"{rule.value} applied to fajr at {location} on {target_date}")
            fajr = safe_fajr

        if method.isha_interval is not None:
            isha = maghrib + method.isha_interval / 60.0
        else:
            safe_isha = sunset + rule.night_portion(method.isha_angle) * night
            if isha is None or isha > safe_isha:
                logger.debug(f"{rule.value} applied to isha at {location} on {target_date}")
                isha = safe_isha

        solar_hours = {
            PrayerName.FAJR: fajr,
            PrayerName.SUNRISE: sunrise,
            PrayerName.DHUHR: dhuhr,
            PrayerName.ASR: asr,
            PrayerName.MAGHRIB: maghrib,
            PrayerName.ISHA: isha,
        }

        tz = timezone(timedelta(minutes=utc_offset_minutes))
        local_midnight = datetime.combine(target_date, time(), tzinfo=tz)
        adjustments = self._parameters.total_adjustments

        result: dict[str, datetime] = {}
        for prayer, hours in solar_hours.items():
            local_hours = hours + zone_shift - 24.0 * day_shift
            local_hours += adjustments.get_offset(prayer) / 60.0
            result[prayer.value] = _round_to_minute(local_midnight + timedelta(hours=local_hours))

        return PrayerTimes(date=target_date, **result)


def compute_prayer_times(
    location: GeoCoordinate,
    target_date: date,
    parameters: CalculationParameters,
    utc_offset_minutes: int,
) -> PrayerTimes:
    """Calculate the six prayer times of *target_date* at *location*."""
    return PrayerTimeCalculator(parameters).calculate(location, target_date, utc_offset_minutes)


def compute_sunnah_times(today: PrayerTimes, tomorrow: PrayerTimes) -> SunnahTimes:
    """Middle and last third of the night running from today's maghrib to tomorrow's fajr."""
    night = tomorrow.fajr - today.maghrib
    return SunnahTimes(
        middle_of_the_night=_round_to_minute(today.maghrib + night / 2),
        last_third_of_the_night=_round_to_minute(today.maghrib + night * 2 / 3),
    )
