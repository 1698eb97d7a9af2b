"""Tests for the solar prayer time calculation."""

from datetime import date, datetime, time, timedelta

import pytest

from salatuk.domain.errors import PrayerTimesUncomputableError, PrayerTimeUndefinedError
from salatuk.domain.models import (
    CalculationMethod,
    CalculationParameters,
    GeoCoordinate,
    HighLatitudeRule,
    Madhab,
    PrayerName,
    PrayerOffsets,
    PrayerTimes,
)
from salatuk.domain.solar import (
    J2000,
    PrayerTimeCalculator,
    compute_prayer_times,
    compute_sunnah_times,
    hour_angle,
    julian_date,
    solar_position,
)

MECCA_DAY = date(2024, 6, 15)


def _assert_ordered(times: PrayerTimes) -> None:
    values = [times.get_time(prayer) for prayer in PrayerName]
    assert values == sorted(values)
    assert len(set(values)) == len(values)


def _between(value: datetime, start: str, end: str) -> bool:
    return time.fromisoformat(start) <= value.time() <= time.fromisoformat(end)


class TestEphemeris:
    """Julian date and sun position tests."""

    def test_julian_date_j2000(self) -> None:
        assert julian_date(2000, 1, 1) == 2451544.5

    def test_julian_date_february(self) -> None:
        assert julian_date(2024, 3, 1) - julian_date(2024, 2, 28) == 2

    def test_declination_at_j2000(self) -> None:
        sun = solar_position(J2000)
        assert sun.declination == pytest.approx(-23.03, abs=0.1)

    def test_equation_of_time_at_j2000(self) -> None:
        """About -3.3 minutes on January 1st."""
        sun = solar_position(J2000)
        assert -0.1 < sun.equation_of_time < 0.0

    def test_equation_of_time_bounded(self) -> None:
        for day in range(0, 366, 5):
            assert abs(solar_position(J2000 + day).equation_of_time) < 0.3

    def test_declination_at_june_solstice(self) -> None:
        sun = solar_position(julian_date(2024, 6, 21))
        assert sun.declination == pytest.approx(23.44, abs=0.1)


class TestHourAngle:
    """Hour-angle solver tests."""

    def test_equator_equinox_horizon(self) -> None:
        assert hour_angle(0.0, 0.0, 0.0) == pytest.approx(6.0)

    def test_unreachable_angle(self) -> None:
        with pytest.raises(PrayerTimeUndefinedError):
            hour_angle(18.0, 70.0, 23.0)

    def test_pole(self) -> None:
        with pytest.raises(PrayerTimeUndefinedError):
            hour_angle(0.833, 90.0, 10.0)


class TestMeccaReference:
    """End-to-end sanity check against published tables for Mecca."""

    @pytest.fixture
    def times(self, mecca: GeoCoordinate) -> PrayerTimes:
        return compute_prayer_times(mecca, MECCA_DAY, CalculationParameters(), 180)

    def test_date(self, times: PrayerTimes) -> None:
        assert times.date == MECCA_DAY

    def test_ordering(self, times: PrayerTimes) -> None:
        _assert_ordered(times)

    def test_fajr(self, times: PrayerTimes) -> None:
        assert _between(times.fajr, "04:00", "04:45")

    def test_sunrise(self, times: PrayerTimes) -> None:
        assert _between(times.sunrise, "05:25", "05:55")

    def test_dhuhr(self, times: PrayerTimes) -> None:
        assert _between(times.dhuhr, "12:10", "12:30")

    def test_asr(self, times: PrayerTimes) -> None:
        assert _between(times.asr, "15:20", "15:55")

    def test_maghrib(self, times: PrayerTimes) -> None:
        assert _between(times.maghrib, "18:45", "19:15")

    def test_isha(self, times: PrayerTimes) -> None:
        assert _between(times.isha, "20:10", "20:50")

    def test_rounded_to_minute_in_fixed_offset(self, times: PrayerTimes) -> None:
        for prayer in PrayerName:
            value = times.get_time(prayer)
            assert value.second == 0
            assert value.microsecond == 0
            assert value.utcoffset() == timedelta(hours=3)


class TestCalculationOptions:
    """Madhab, method and adjustment tests."""

    @pytest.mark.parametrize(
        ("latitude", "longitude", "offset"),
        [(21.4225, 39.8262, 180), (41.0082, 28.9784, 180), (-33.87, 151.21, 600), (51.5, -0.12, 60)],
    )
    def test_hanafi_asr_not_earlier(self, latitude: float, longitude: float, offset: int) -> None:
        location = GeoCoordinate(latitude=latitude, longitude=longitude)
        shafi = compute_prayer_times(location, MECCA_DAY, CalculationParameters(), offset)
        hanafi = compute_prayer_times(
            location, MECCA_DAY, CalculationParameters(madhab=Madhab.HANAFI), offset
        )
        assert hanafi.asr >= shafi.asr
        assert hanafi.fajr == shafi.fajr

    def test_user_adjustment_shifts_exactly(self, mecca: GeoCoordinate) -> None:
        base = compute_prayer_times(mecca, MECCA_DAY, CalculationParameters(), 180)
        shifted = compute_prayer_times(
            mecca,
            MECCA_DAY,
            CalculationParameters(adjustments=PrayerOffsets(asr=10, isha=-3)),
            180,
        )
        assert shifted.asr - base.asr == timedelta(minutes=10)
        assert shifted.isha - base.isha == timedelta(minutes=-3)
        assert shifted.dhuhr == base.dhuhr

    def test_interval_isha(self, mecca: GeoCoordinate) -> None:
        params = CalculationParameters(method=CalculationMethod.UMM_AL_QURA)
        times = compute_prayer_times(mecca, MECCA_DAY, params, 180)
        assert times.isha - times.maghrib == timedelta(minutes=90)

    def test_maghrib_angle_delays_maghrib(self, mecca: GeoCoordinate) -> None:
        mwl = compute_prayer_times(mecca, MECCA_DAY, CalculationParameters(), 180)
        tehran = compute_prayer_times(
            mecca, MECCA_DAY, CalculationParameters(method=CalculationMethod.TEHRAN), 180
        )
        assert tehran.maghrib > mwl.maghrib

    def test_larger_fajr_angle_is_earlier(self, mecca: GeoCoordinate) -> None:
        mwl = compute_prayer_times(mecca, MECCA_DAY, CalculationParameters(), 180)
        egyptian = compute_prayer_times(
            mecca, MECCA_DAY, CalculationParameters(method=CalculationMethod.EGYPTIAN), 180
        )
        assert egyptian.fajr < mwl.fajr

    @pytest.mark.parametrize("method", list(CalculationMethod))
    def test_every_method_is_ordered(self, mecca: GeoCoordinate, method: CalculationMethod) -> None:
        times = compute_prayer_times(mecca, MECCA_DAY, CalculationParameters(method=method), 180)
        _assert_ordered(times)

    def test_calculator_matches_function(self, mecca: GeoCoordinate) -> None:
        params = CalculationParameters(madhab=Madhab.HANAFI)
        calculator = PrayerTimeCalculator(params)
        assert calculator.parameters == params
        assert calculator.calculate(mecca, MECCA_DAY, 180) == compute_prayer_times(
            mecca, MECCA_DAY, params, 180
        )


class TestHighLatitudes:
    """Fallback and failure at high latitudes."""

    @pytest.fixture
    def oslo(self) -> GeoCoordinate:
        return GeoCoordinate(latitude=59.91, longitude=10.75)

    @pytest.mark.parametrize("rule", list(HighLatitudeRule))
    def test_fallback_yields_ordered_times(self, oslo: GeoCoordinate, rule: HighLatitudeRule) -> None:
        params = CalculationParameters(high_latitude_rule=rule)
        times = compute_prayer_times(oslo, date(2024, 6, 21), params, 120)
        _assert_ordered(times)

    def test_middle_of_the_night_bounds_fajr(self, oslo: GeoCoordinate) -> None:
        times = compute_prayer_times(oslo, date(2024, 6, 21), CalculationParameters(), 120)
        night = timedelta(hours=24) - (times.maghrib - times.sunrise)
        assert times.sunrise - times.fajr <= night / 2 + timedelta(minutes=2)

    def test_isha_may_pass_midnight(self, oslo: GeoCoordinate) -> None:
        times = compute_prayer_times(oslo, date(2024, 6, 21), CalculationParameters(), 120)
        assert times.isha > times.maghrib
        assert times.isha.date() >= date(2024, 6, 21)

    def test_polar_day_is_uncomputable(self) -> None:
        longyearbyen = GeoCoordinate(latitude=78.22, longitude=15.65)
        with pytest.raises(PrayerTimesUncomputableError):
            compute_prayer_times(longyearbyen, date(2024, 6, 21), CalculationParameters(), 120)

    def test_polar_night_is_uncomputable(self) -> None:
        longyearbyen = GeoCoordinate(latitude=78.22, longitude=15.65)
        with pytest.raises(PrayerTimesUncomputableError):
            compute_prayer_times(longyearbyen, date(2024, 12, 21), CalculationParameters(), 60)


class TestSunnahTimes:
    """Night division tests."""

    def test_night_divisions(self, mecca: GeoCoordinate) -> None:
        today = compute_prayer_times(mecca, MECCA_DAY, CalculationParameters(), 180)
        tomorrow = compute_prayer_times(
            mecca, MECCA_DAY + timedelta(days=1), CalculationParameters(), 180
        )
        sunnah = compute_sunnah_times(today, tomorrow)

        assert today.maghrib < sunnah.middle_of_the_night < sunnah.last_third_of_the_night
        assert sunnah.last_third_of_the_night < tomorrow.fajr
        assert sunnah.middle_of_the_night.second == 0


class TestDateLineZones:
    """Zones whose civil day runs a full day ahead of local solar time."""

    @pytest.mark.parametrize(
        ("latitude", "longitude", "offset"),
        [(-13.83, -171.76, 780), (1.87, -157.47, 840)],
        ids=["apia", "kiritimati"],
    )
    def test_times_land_on_requested_day(
        self, latitude: float, longitude: float, offset: int
    ) -> None:
        day = date(2024, 6, 15)
        location = GeoCoordinate(latitude=latitude, longitude=longitude)
        times = compute_prayer_times(location, day, CalculationParameters(), offset)

        assert times.date == day
        assert times.fajr.date() == day
        assert times.dhuhr.date() == day
        assert _between(times.dhuhr, "12:00", "13:00")
        _assert_ordered(times)

    def test_consecutive_days_advance_by_a_day(self) -> None:
        apia = GeoCoordinate(latitude=-13.83, longitude=-171.76)
        today = compute_prayer_times(apia, date(2024, 6, 15), CalculationParameters(), 780)
        tomorrow = compute_prayer_times(apia, date(2024, 6, 16), CalculationParameters(), 780)

        gap = tomorrow.dhuhr - today.dhuhr
        assert timedelta(hours=23, minutes=58) <= gap <= timedelta(hours=24, minutes=2)
