"""Pydantic schemas for API."""

from datetime import date
from typing import Annotated
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator

from salatuk.domain.models import (
    CalculationMethod,
    HighLatitudeRule,
    IqamaPhase,
    Madhab,
    PrayerName,
)


class LocationSchema(BaseModel):
    """Location schema."""

    latitude: Annotated[float, Field(ge=-90, le=90, description="Latitude")]
    longitude: Annotated[float, Field(ge=-180, le=180, description="Longitude")]
    city: str = Field(default="", description="City name")


class PrayerOffsetsSchema(BaseModel):
    """Per-prayer minute offsets."""

    fajr: int = 0
    sunrise: int = 0
    dhuhr: int = 0
    asr: int = 0
    maghrib: int = 0
    isha: int = 0


class IqamaOffsetsSchema(BaseModel):
    """Minutes from azan to iqama."""

    fajr: Annotated[int, Field(ge=0, le=120)] = 20
    dhuhr: Annotated[int, Field(ge=0, le=120)] = 20
    asr: Annotated[int, Field(ge=0, le=120)] = 20
    maghrib: Annotated[int, Field(ge=0, le=120)] = 10
    isha: Annotated[int, Field(ge=0, le=120)] = 20


class MuteSettingsSchema(BaseModel):
    """Muted azans and notifications."""

    muted_azan: list[PrayerName] = Field(default_factory=list)
    muted_notifications: list[PrayerName] = Field(default_factory=list)


class SettingsSchema(BaseModel):
    """Full settings schema."""

    location: LocationSchema
    timezone: str | None = None
    calculation_method: CalculationMethod = CalculationMethod.MUSLIM_WORLD_LEAGUE
    madhab: Madhab = Madhab.SHAFI
    high_latitude_rule: HighLatitudeRule = HighLatitudeRule.MIDDLE_OF_THE_NIGHT
    adjustments: PrayerOffsetsSchema = Field(default_factory=PrayerOffsetsSchema)
    azan_offsets: PrayerOffsetsSchema = Field(default_factory=PrayerOffsetsSchema)
    iqama_offsets: IqamaOffsetsSchema = Field(default_factory=IqamaOffsetsSchema)
    mutes: MuteSettingsSchema = Field(default_factory=MuteSettingsSchema)
    dhikr_reminders_enabled: bool = True


class SettingsUpdateSchema(BaseModel):
    """Settings update schema (partial update)."""

    location: LocationSchema | None = None
    timezone: str | None = None
    calculation_method: CalculationMethod | None = None
    madhab: Madhab | None = None
    high_latitude_rule: HighLatitudeRule | None = None
    adjustments: PrayerOffsetsSchema | None = None
    azan_offsets: PrayerOffsetsSchema | None = None
    iqama_offsets: IqamaOffsetsSchema | None = None
    mutes: MuteSettingsSchema | None = None
    dhikr_reminders_enabled: bool | None = None

    @field_validator("timezone")
    @classmethod
    def known_timezone(cls, value: str | None) -> str | None:
        if value is not None:
            try:
                ZoneInfo(value)
            except (ZoneInfoNotFoundError, ValueError) as e:
                raise ValueError(f"Unknown time zone: {value}") from e
        return value


class PrayerTimeSchema(BaseModel):
    """A single prayer time."""

    name: PrayerName
    display_name: str
    icon: str
    time: str  # HH:MM, azan offset applied
    calculated_time: str  # HH:MM
    iqama_time: str | None = None


class SunnahTimesSchema(BaseModel):
    """Night divisions."""

    middle_of_the_night: str
    last_third_of_the_night: str


class PrayerTimesSchema(BaseModel):
    """Prayer times of one day."""

    date: date
    date_formatted: str
    hijri_date: str
    timezone: str
    prayers: list[PrayerTimeSchema]
    sunnah: SunnahTimesSchema | None = None


class IqamaSchema(BaseModel):
    """Iqama label state."""

    prayer: PrayerName
    phase: IqamaPhase
    seconds: int
    label: str


class CurrentStateSchema(BaseModel):
    """Current display state."""

    current_time: str
    current_date: str
    hijri_date: str
    location: LocationSchema | None
    qibla_bearing: float | None
    has_times: bool
    error: str | None = None
    current_prayer: PrayerName | None = None
    next_prayer: PrayerName | None = None
    next_prayer_time: str | None = None
    countdown: str | None = None
    highlighted_prayer: PrayerName | None = None
    countdowns: dict[PrayerName, int] = Field(default_factory=dict)
    iqama: list[IqamaSchema] = Field(default_factory=list)


class QiblaSchema(BaseModel):
    """Qibla bearing for a location."""

    location: LocationSchema
    bearing: float
    kaaba: LocationSchema
    heading: float | None = None
    relative_angle: float | None = None
    facing_qibla: bool | None = None


class NotificationSchema(BaseModel):
    """Pending notification."""

    identifier: str
    hour: int
    minute: int
    title: str
    body: str
    sound: str | None
    repeats: bool


class CalculationMethodSchema(BaseModel):
    """Calculation method description."""

    value: CalculationMethod
    display_name: str
    fajr_angle: float
    isha_angle: float
    isha_interval: int | None
    maghrib_angle: float | None


class SystemStatusSchema(BaseModel):
    """System status."""

    version: str
    uptime: str
    clock_running: bool
    notification_center_running: bool
    pending_notifications: int
    timezone: str
    settings_path: str
    recent_events: list[str] = Field(default_factory=list)


class ApiResponse(BaseModel):
    """Generic API response."""

    success: bool
    message: str
    data: dict | list | None = None
