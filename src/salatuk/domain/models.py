"""Domain models and value objects."""

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Self

from salatuk.domain.errors import InvalidCoordinateError


class PrayerName(str, Enum):
    """The six daily prayer slots, in chronological order."""

    FAJR = "fajr"
    SUNRISE = "sunrise"
    DHUHR = "dhuhr"
    ASR = "asr"
    MAGHRIB = "maghrib"
    ISHA = "isha"

    @property
    def display_name(self) -> str:
        """English display name."""
        names = {
            PrayerName.FAJR: "Fajr",
            PrayerName.SUNRISE: "Sunrise",
            PrayerName.DHUHR: "Dhuhr",
            PrayerName.ASR: "Asr",
            PrayerName.MAGHRIB: "Maghrib",
            PrayerName.ISHA: "Isha",
        }
        return names[self]

    @property
    def icon(self) -> str:
        """Emoji icon."""
        icons = {
            PrayerName.FAJR: "🌙",
            PrayerName.SUNRISE: "🌅",
            PrayerName.DHUHR: "☀️",
            PrayerName.ASR: "🌤️",
            PrayerName.MAGHRIB: "🌇",
            PrayerName.ISHA: "🌃",
        }
        return icons[self]

    @property
    def has_iqama(self) -> bool:
        """Sunrise is not a prayer, so it has no congregational iqama."""
        return self is not PrayerName.SUNRISE


class Madhab(str, Enum):
    """Jurisprudential school, selects the asr shadow convention."""

    SHAFI = "shafi"
    HANAFI = "hanafi"

    @property
    def display_name(self) -> str:
        return "Shafi" if self is Madhab.SHAFI else "Hanafi"

    @property
    def shadow_factor(self) -> int:
        """Shadow length multiplier used for asr."""
        return 1 if self is Madhab.SHAFI else 2


@dataclass(frozen=True)
class GeoCoordinate:
    """Geographic coordinate (immutable value object)."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        """Coordinate validation."""
        if not math.isfinite(self.latitude) or not -90 <= self.latitude <= 90:
            raise InvalidCoordinateError(f"Invalid latitude: {self.latitude}")
        if not math.isfinite(self.longitude) or not -180 <= self.longitude <= 180:
            raise InvalidCoordinateError(f"Invalid longitude: {self.longitude}")


# Used when no location fix is available yet (Raleigh, NC)
DEFAULT_LOCATION = GeoCoordinate(latitude=35.78056, longitude=-78.6389)


class HighLatitudeRule(str, Enum):
    """Fallback for fajr and isha when twilight angles are not reached."""

    MIDDLE_OF_THE_NIGHT = "middle_of_the_night"
    SEVENTH_OF_THE_NIGHT = "seventh_of_the_night"
    TWILIGHT_ANGLE = "twilight_angle"

    def night_portion(self, angle: float) -> float:
        """Fraction of the night between sunset and sunrise allotted to the twilight."""
        if self is HighLatitudeRule.SEVENTH_OF_THE_NIGHT:
            return 1 / 7
        if self is HighLatitudeRule.TWILIGHT_ANGLE:
            return angle / 60
        return 1 / 2

    @classmethod
    def recommended(cls, coordinate: GeoCoordinate) -> Self:
        """Seventh of the night above 48 degrees, middle of the night elsewhere."""
        if abs(coordinate.latitude) > 48:
            return cls.SEVENTH_OF_THE_NIGHT
        return cls.MIDDLE_OF_THE_NIGHT


@dataclass(frozen=True)
class PrayerOffsets:
    """Per-prayer minute offsets. Negative values move a time earlier."""

    fajr: int = 0
    sunrise: int = 0
    dhuhr: int = 0
    asr: int = 0
    maghrib: int = 0
    isha: int = 0

    def get_offset(self, prayer: PrayerName) -> int:
        """Return the offset for the given prayer."""
        mapping = {
            PrayerName.FAJR: self.fajr,
            PrayerName.SUNRISE: self.sunrise,
            PrayerName.DHUHR: self.dhuhr,
            PrayerName.ASR: self.asr,
            PrayerName.MAGHRIB: self.maghrib,
            PrayerName.ISHA: self.isha,
        }
        return mapping[prayer]

    def __add__(self, other: "PrayerOffsets") -> "PrayerOffsets":
        return PrayerOffsets(
            fajr=self.fajr + other.fajr,
            sunrise=self.sunrise + other.sunrise,
            dhuhr=self.dhuhr + other.dhuhr,
            asr=self.asr + other.asr,
            maghrib=self.maghrib + other.maghrib,
            isha=self.isha + other.isha,
        )

    def to_dict(self) -> dict[str, int]:
        return {prayer.value: self.get_offset(prayer) for prayer in PrayerName}

    @classmethod
    def from_dict(cls, data: dict[str, int]) -> Self:
        return cls(**{prayer.value: int(data.get(prayer.value, 0)) for prayer in PrayerName})


# Temkin durations published by the Turkish Presidency of Religious Affairs
DIYANET_OFFSETS = PrayerOffsets(fajr=0, sunrise=-7, dhuhr=5, asr=4, maghrib=7, isha=0)


@dataclass(frozen=True)
class IqamaOffsets:
    """Minutes between the azan and the iqama of each congregational prayer."""

    fajr: int = 20
    dhuhr: int = 20
    asr: int = 20
    maghrib: int = 10
    isha: int = 20

    def get_offset(self, prayer: PrayerName) -> int:
        """Return the iqama offset for the given prayer."""
        if not prayer.has_iqama:
            raise ValueError(f"{prayer.display_name} has no iqama")
        return getattr(self, prayer.value)

    def to_dict(self) -> dict[str, int]:
        return {
            prayer.value: self.get_offset(prayer) for prayer in PrayerName if prayer.has_iqama
        }

    @classmethod
    def from_dict(cls, data: dict[str, int]) -> Self:
        defaults = cls()
        return cls(
            **{
                prayer.value: int(data.get(prayer.value, defaults.get_offset(prayer)))
                for prayer in PrayerName
                if prayer.has_iqama
            }
        )


@dataclass(frozen=True)
class MethodParameters:
    """Sun angles, intervals and fixed adjustments of a calculation method."""

    fajr_angle: float
    isha_angle: float = 0.0
    isha_interval: int | None = None
    maghrib_angle: float | None = None
    adjustments: PrayerOffsets = field(default_factory=PrayerOffsets)


class CalculationMethod(str, Enum):
    """Published prayer time conventions."""

    MUSLIM_WORLD_LEAGUE = "muslim_world_league"
    EGYPTIAN = "egyptian"
    KARACHI = "karachi"
    UMM_AL_QURA = "umm_al_qura"
    DUBAI = "dubai"
    MOONSIGHTING_COMMITTEE = "moonsighting_committee"
    NORTH_AMERICA = "north_america"
    KUWAIT = "kuwait"
    QATAR = "qatar"
    SINGAPORE = "singapore"
    TEHRAN = "tehran"
    TURKEY = "turkey"

    @property
    def display_name(self) -> str:
        names = {
            CalculationMethod.MUSLIM_WORLD_LEAGUE: "Muslim World League",
            CalculationMethod.EGYPTIAN: "Egyptian General Authority of Survey",
            CalculationMethod.KARACHI: "University of Islamic Sciences, Karachi",
            CalculationMethod.UMM_AL_QURA: "Umm al-Qura University, Makkah",
            CalculationMethod.DUBAI: "Dubai",
            CalculationMethod.MOONSIGHTING_COMMITTEE: "Moonsighting Committee",
            CalculationMethod.NORTH_AMERICA: "Islamic Society of North America",
            CalculationMethod.KUWAIT: "Kuwait",
            CalculationMethod.QATAR: "Qatar",
            CalculationMethod.SINGAPORE: "Majlis Ugama Islam Singapura",
            CalculationMethod.TEHRAN: "Institute of Geophysics, University of Tehran",
            CalculationMethod.TURKEY: "Diyanet İşleri Başkanlığı",
        }
        return names[self]

    @property
    def parameters(self) -> MethodParameters:
        return _METHOD_PARAMETERS[self]


_METHOD_PARAMETERS: dict[CalculationMethod, MethodParameters] = {
    CalculationMethod.MUSLIM_WORLD_LEAGUE: MethodParameters(
        fajr_angle=18, isha_angle=17, adjustments=PrayerOffsets(dhuhr=1)
    ),
    CalculationMethod.EGYPTIAN: MethodParameters(
        fajr_angle=19.5, isha_angle=17.5, adjustments=PrayerOffsets(dhuhr=1)
    ),
    CalculationMethod.KARACHI: MethodParameters(
        fajr_angle=18, isha_angle=18, adjustments=PrayerOffsets(dhuhr=1)
    ),
    CalculationMethod.UMM_AL_QURA: MethodParameters(fajr_angle=18.5, isha_interval=90),
    CalculationMethod.DUBAI: MethodParameters(
        fajr_angle=18.2,
        isha_angle=18.2,
        adjustments=PrayerOffsets(sunrise=-3, dhuhr=3, asr=3, maghrib=3),
    ),
    CalculationMethod.MOONSIGHTING_COMMITTEE: MethodParameters(
        fajr_angle=18, isha_angle=18, adjustments=PrayerOffsets(dhuhr=5, maghrib=3)
    ),
    CalculationMethod.NORTH_AMERICA: MethodParameters(
        fajr_angle=15, isha_angle=15, adjustments=PrayerOffsets(dhuhr=1)
    ),
    CalculationMethod.KUWAIT: MethodParameters(fajr_angle=18, isha_angle=17.5),
    CalculationMethod.QATAR: MethodParameters(fajr_angle=18, isha_interval=90),
    CalculationMethod.SINGAPORE: MethodParameters(
        fajr_angle=20, isha_angle=18, adjustments=PrayerOffsets(dhuhr=1)
    ),
    CalculationMethod.TEHRAN: MethodParameters(fajr_angle=17.7, isha_angle=14, maghrib_angle=4.5),
    CalculationMethod.TURKEY: MethodParameters(
        fajr_angle=18, isha_angle=17, adjustments=DIYANET_OFFSETS
    ),
}


@dataclass(frozen=True)
class CalculationParameters:
    """Everything the solar calculation needs besides place and date."""

    method: CalculationMethod = CalculationMethod.MUSLIM_WORLD_LEAGUE
    madhab: Madhab = Madhab.SHAFI
    high_latitude_rule: HighLatitudeRule = HighLatitudeRule.MIDDLE_OF_THE_NIGHT
    adjustments: PrayerOffsets = field(default_factory=PrayerOffsets)

    @property
    def method_parameters(self) -> MethodParameters:
        return self.method.parameters

    @property
    def total_adjustments(self) -> PrayerOffsets:
        """Method adjustments combined with the user's own adjustments."""
        return self.method.parameters.adjustments + self.adjustments


@dataclass(frozen=True)
class PrayerTime:
    """A single prayer time."""

    name: PrayerName
    time: datetime

    @property
    def time_str(self) -> str:
        """HH:MM format."""
        return self.time.strftime("%H:%M")


@dataclass(frozen=True)
class PrayerTimes:
    """All prayer times of one calendar day, as aware local datetimes."""

    date: date
    fajr: datetime
    sunrise: datetime
    dhuhr: datetime
    asr: datetime
    maghrib: datetime
    isha: datetime

    def get_time(self, prayer: PrayerName) -> datetime:
        """Return the time of the given prayer."""
        mapping = {
            PrayerName.FAJR: self.fajr,
            PrayerName.SUNRISE: self.sunrise,
            PrayerName.DHUHR: self.dhuhr,
            PrayerName.ASR: self.asr,
            PrayerName.MAGHRIB: self.maghrib,
            PrayerName.ISHA: self.isha,
        }
        return mapping[prayer]

    def get_prayer_time(self, prayer: PrayerName) -> PrayerTime:
        return PrayerTime(name=prayer, time=self.get_time(prayer))

    def all_prayer_times(self) -> list[PrayerTime]:
        """All six times in chronological order."""
        return [self.get_prayer_time(prayer) for prayer in PrayerName]

    def current_prayer(self, at: datetime) -> PrayerName | None:
        """The latest prayer whose time has started, None before fajr."""
        for prayer in reversed(PrayerName):
            if at >= self.get_time(prayer):
                return prayer
        return None

    def next_prayer(self, at: datetime) -> PrayerName | None:
        """The first prayer still ahead of *at*, None after isha."""
        for prayer in PrayerName:
            if at < self.get_time(prayer):
                return prayer
        return None

    def to_dict(self) -> dict[str, str]:
        data = {"date": self.date.isoformat()}
        data.update(
            {prayer.value: self.get_time(prayer).strftime("%H:%M") for prayer in PrayerName}
        )
        return data


@dataclass(frozen=True)
class SunnahTimes:
    """Night divisions between maghrib and the following fajr."""

    middle_of_the_night: datetime
    last_third_of_the_night: datetime


@dataclass(frozen=True)
class MuteSettings:
    """Which prayers have a silenced azan and which have no notification at all."""

    muted_azan: frozenset[PrayerName] = frozenset()
    muted_notifications: frozenset[PrayerName] = frozenset()

    def is_azan_muted(self, prayer: PrayerName) -> bool:
        return prayer in self.muted_azan

    def is_notification_muted(self, prayer: PrayerName) -> bool:
        return prayer in self.muted_notifications

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "muted_azan": [p.value for p in PrayerName if p in self.muted_azan],
            "muted_notifications": [p.value for p in PrayerName if p in self.muted_notifications],
        }

    @classmethod
    def from_dict(cls, data: dict[str, list[str]]) -> Self:
        return cls(
            muted_azan=frozenset(PrayerName(p) for p in data.get("muted_azan", [])),
            muted_notifications=frozenset(
                PrayerName(p) for p in data.get("muted_notifications", [])
            ),
        )


class IqamaPhase(str, Enum):
    """Iqama label state shown under a prayer."""

    HIDDEN = "hidden"
    COUNTING = "counting"
    LATE = "late"


@dataclass(frozen=True)
class IqamaStatus:
    """Time left until the iqama (COUNTING) or elapsed since it (LATE)."""

    prayer: PrayerName
    phase: IqamaPhase
    duration: timedelta
    label: str


@dataclass(frozen=True)
class NotificationTrigger:
    """A daily repeating notification for the notification collaborator."""

    identifier: str
    hour: int
    minute: int
    title: str
    body: str = ""
    sound: str | None = None
    repeats: bool = True

    def to_dict(self) -> dict:
        return {
            "identifier": self.identifier,
            "hour": self.hour,
            "minute": self.minute,
            "repeats": self.repeats,
            "title": self.title,
            "body": self.body,
            "sound": self.sound,
        }


@dataclass
class AppSettings:
    """User configuration snapshot."""

    location: GeoCoordinate = DEFAULT_LOCATION
    city: str = ""
    timezone: str | None = None
    calculation_method: CalculationMethod = CalculationMethod.MUSLIM_WORLD_LEAGUE
    madhab: Madhab = Madhab.SHAFI
    high_latitude_rule: HighLatitudeRule = HighLatitudeRule.MIDDLE_OF_THE_NIGHT
    adjustments: PrayerOffsets = field(default_factory=PrayerOffsets)
    azan_offsets: PrayerOffsets = field(default_factory=PrayerOffsets)
    iqama_offsets: IqamaOffsets = field(default_factory=IqamaOffsets)
    mutes: MuteSettings = field(default_factory=MuteSettings)
    dhikr_reminders_enabled: bool = True

    @property
    def calculation_parameters(self) -> CalculationParameters:
        return CalculationParameters(
            method=self.calculation_method,
            madhab=self.madhab,
            high_latitude_rule=self.high_latitude_rule,
            adjustments=self.adjustments,
        )

    def to_dict(self) -> dict:
        """Dictionary representation."""
        return {
            "location": {
                "latitude": self.location.latitude,
                "longitude": self.location.longitude,
                "city": self.city,
            },
            "timezone": self.timezone,
            "calculation_method": self.calculation_method.value,
            "madhab": self.madhab.value,
            "high_latitude_rule": self.high_latitude_rule.value,
            "adjustments": self.adjustments.to_dict(),
            "azan_offsets": self.azan_offsets.to_dict(),
            "iqama_offsets": self.iqama_offsets.to_dict(),
            "mutes": self.mutes.to_dict(),
            "dhikr_reminders_enabled": self.dhikr_reminders_enabled,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Build from a dictionary, filling gaps with defaults."""
        location_data = data.get("location", {})
        return cls(
            location=GeoCoordinate(
                latitude=location_data.get("latitude", DEFAULT_LOCATION.latitude),
                longitude=location_data.get("longitude", DEFAULT_LOCATION.longitude),
            ),
            city=location_data.get("city", ""),
            timezone=data.get("timezone"),
            calculation_method=CalculationMethod(
                data.get("calculation_method", CalculationMethod.MUSLIM_WORLD_LEAGUE.value)
            ),
            madhab=Madhab(data.get("madhab", Madhab.SHAFI.value)),
            high_latitude_rule=HighLatitudeRule(
                data.get("high_latitude_rule", HighLatitudeRule.MIDDLE_OF_THE_NIGHT.value)
            ),
            adjustments=PrayerOffsets.from_dict(data.get("adjustments", {})),
            azan_offsets=PrayerOffsets.from_dict(data.get("azan_offsets", {})),
            iqama_offsets=IqamaOffsets.from_dict(data.get("iqama_offsets", {})),
            mutes=MuteSettings.from_dict(data.get("mutes", {})),
            dhikr_reminders_enabled=data.get("dhikr_reminders_enabled", True),
        )
