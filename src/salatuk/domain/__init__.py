"""Domain layer - Business entities, value objects and calculations."""

from salatuk.domain.errors import (
    InvalidCoordinateError,
    PrayerTimesUncomputableError,
    PrayerTimeUndefinedError,
    SalatukError,
)
from salatuk.domain.models import (
    AppSettings,
    CalculationMethod,
    CalculationParameters,
    GeoCoordinate,
    HighLatitudeRule,
    IqamaOffsets,
    IqamaPhase,
    IqamaStatus,
    Madhab,
    MuteSettings,
    NotificationTrigger,
    PrayerName,
    PrayerOffsets,
    PrayerTime,
    PrayerTimes,
    SunnahTimes,
)

__all__ = [
    "AppSettings",
    "CalculationMethod",
    "CalculationParameters",
    "GeoCoordinate",
    "HighLatitudeRule",
    "InvalidCoordinateError",
    "IqamaOffsets",
    "IqamaPhase",
    "IqamaStatus",
    "Madhab",
    "MuteSettings",
    "NotificationTrigger",
    "PrayerName",
    "PrayerOffsets",
    "PrayerTime",
    "PrayerTimeUndefinedError",
    "PrayerTimes",
    "PrayerTimesUncomputableError",
    "SalatukError",
    "SunnahTimes",
]
