"""API Routes."""

import dataclasses
from datetime import date, datetime, timedelta
from typing import Annotated

from babel.dates import format_date
from fastapi import APIRouter, Depends, Query

from salatuk import __version__
from salatuk.api.dependencies import AppState, get_app_state
from salatuk.api.schemas import (
    ApiResponse,
    CalculationMethodSchema,
    CurrentStateSchema,
    IqamaOffsetsSchema,
    IqamaSchema,
    LocationSchema,
    MuteSettingsSchema,
    NotificationSchema,
    PrayerOffsetsSchema,
    PrayerTimeSchema,
    PrayerTimesSchema,
    QiblaSchema,
    SettingsSchema,
    SettingsUpdateSchema,
    SunnahTimesSchema,
    SystemStatusSchema,
)
from salatuk.domain.errors import PrayerTimesUncomputableError
from salatuk.domain.geodesy import KAABA, is_facing_qibla, qibla_bearing, relative_qibla_angle
from salatuk.domain.models import (
    AppSettings,
    CalculationMethod,
    CalculationParameters,
    GeoCoordinate,
    HighLatitudeRule,
    IqamaOffsets,
    Madhab,
    MuteSettings,
    PrayerName,
    PrayerOffsets,
    PrayerTimes,
    SunnahTimes,
)
from salatuk.domain.policy import adjusted_prayer_times
from salatuk.services.prayer_service import PrayerService

router = APIRouter()

HIJRI_MONTHS = [
    "Muharram",
    "Safar",
    "Rabi al-Awwal",
    "Rabi al-Thani",
    "Jumada al-Ula",
    "Jumada al-Akhirah",
    "Rajab",
    "Shaban",
    "Ramadan",
    "Shawwal",
    "Dhu al-Qadah",
    "Dhu al-Hijjah",
]


def _format_timedelta(td: timedelta) -> str:
    """Timedelta as HH:MM:SS."""
    total_seconds = max(int(td.total_seconds()), 0)
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def _get_hijri_date(day: date) -> str:
    """Approximate (tabular) Hijri date."""
    jd = day.toordinal() + 1721425
    l_val = jd - 1948440 + 10632
    n = (l_val - 1) // 10631
    l2 = l_val - 10631 * n + 354
    j = ((10985 - l2) // 5316) * ((50 * l2) // 17719) + (l2 // 5670) * ((43 * l2) // 15238)
    l3 = l2 - ((30 - j) // 15) * ((17719 * j) // 50) - (j // 16) * ((15238 * j) // 43) + 29
    month = (24 * l3) // 709
    hijri_day = l3 - (709 * month) // 24
    year = 30 * n + j - 30
    return f"{hijri_day} {HIJRI_MONTHS[month - 1]} {year} AH"


def _format_day(day: date) -> str:
    return format_date(day, "EEEE, d MMMM yyyy", locale="en")


def _location_schema(location: GeoCoordinate, city: str = "") -> LocationSchema:
    return LocationSchema(latitude=location.latitude, longitude=location.longitude, city=city)


def _times_schema(
    times: PrayerTimes,
    timezone_name: str,
    azan_offsets: PrayerOffsets | None = None,
    iqama_offsets: IqamaOffsets | None = None,
    sunnah: SunnahTimes | None = None,
) -> PrayerTimesSchema:
    azan_times = adjusted_prayer_times(times, azan_offsets or PrayerOffsets())
    prayers = []
    for raw, azan in zip(times.all_prayer_times(), azan_times.all_prayer_times()):
        prayer = azan.name
        iqama_time = None
        if iqama_offsets is not None and prayer.has_iqama:
            iqama_time = azan.time + timedelta(minutes=iqama_offsets.get_offset(prayer))
        prayers.append(
            PrayerTimeSchema(
                name=prayer,
                display_name=prayer.display_name,
                icon=prayer.icon,
                time=azan.time_str,
                calculated_time=raw.time_str,
                iqama_time=iqama_time.strftime("%H:%M") if iqama_time else None,
            )
        )

    return PrayerTimesSchema(
        date=times.date,
        date_formatted=_format_day(times.date),
        hijri_date=_get_hijri_date(times.date),
        timezone=timezone_name,
        prayers=prayers,
        sunnah=SunnahTimesSchema(
            middle_of_the_night=sunnah.middle_of_the_night.strftime("%H:%M"),
            last_third_of_the_night=sunnah.last_third_of_the_night.strftime("%H:%M"),
        )
        if sunnah
        else None,
    )


# ============== State & Status ==============


@router.get("/status", response_model=SystemStatusSchema)
async def get_status(state: Annotated[AppState, Depends(get_app_state)]) -> SystemStatusSchema:
    """System status."""
    uptime = datetime.now() - state.started_at

    return SystemStatusSchema(
        version=__version__,
        uptime=str(uptime).split(".")[0],
        clock_running=state.clock_service.is_running,
        notification_center_running=state.notification_center.is_started,
        pending_notifications=len(state.notification_service.pending()),
        timezone=state.prayer_service.timezone_name,
        settings_path=str(state.settings_repository.file_path),
        recent_events=[type(event).__name__ for event in state.event_bus.recent(10)],
    )


@router.get("/current", response_model=CurrentStateSchema)
async def get_current_state(
    state: Annotated[AppState, Depends(get_app_state)],
) -> CurrentStateSchema:
    """Current display state (clock, prayer, countdowns, iqama)."""
    display = state.clock_service.tick()
    now = display.now

    upcoming = None
    if display.has_times:
        try:
            upcoming = state.prayer_service.get_next_prayer(now, state.settings.azan_offsets)
        except PrayerTimesUncomputableError:
            upcoming = None

    return CurrentStateSchema(
        current_time=now.strftime("%H:%M:%S"),
        current_date=_format_day(now.date()),
        hijri_date=_get_hijri_date(now.date()),
        location=_location_schema(display.location, state.settings.city)
        if display.location
        else None,
        qibla_bearing=display.qibla_bearing,
        has_times=display.has_times,
        error=display.error,
        current_prayer=display.current_prayer,
        next_prayer=upcoming.name if upcoming else None,
        next_prayer_time=upcoming.time_str if upcoming else None,
        countdown=_format_timedelta(upcoming.time - now) if upcoming else None,
        highlighted_prayer=display.highlighted_prayer,
        countdowns=display.countdowns,
        iqama=[
            IqamaSchema(
                prayer=status.prayer,
                phase=status.phase,
                seconds=int(status.duration.total_seconds()),
                label=status.label,
            )
            for status in display.iqama.values()
        ],
    )


# ============== Prayer Times ==============


@router.get("/times/today", response_model=PrayerTimesSchema)
async def get_today_times(state: Annotated[AppState, Depends(get_app_state)]) -> PrayerTimesSchema:
    """Today's prayer times with azan offsets and iqama times."""
    today = datetime.now(state.prayer_service.timezone).date()
    times = state.prayer_service.calculate(today)

    return _times_schema(
        times,
        state.prayer_service.timezone_name,
        state.settings.azan_offsets,
        state.settings.iqama_offsets,
        sunnah=state.prayer_service.sunnah_times(today),
    )


@router.get("/times/week", response_model=list[PrayerTimesSchema])
async def get_week_times(
    state: Annotated[AppState, Depends(get_app_state)],
) -> list[PrayerTimesSchema]:
    """Prayer times for the coming seven days."""
    today = datetime.now(state.prayer_service.timezone).date()
    week_times = state.prayer_service.calculate_range(today, 7)

    return [
        _times_schema(
            times,
            state.prayer_service.timezone_name,
            state.settings.azan_offsets,
            state.settings.iqama_offsets,
        )
        for times in week_times
    ]


@router.get("/times", response_model=PrayerTimesSchema)
async def query_times(
    lat: Annotated[float, Query(ge=-90, le=90)],
    lng: Annotated[float, Query(ge=-180, le=180)],
    day: date | None = None,
    method: CalculationMethod = CalculationMethod.MUSLIM_WORLD_LEAGUE,
    madhab: Madhab = Madhab.SHAFI,
    high_latitude_rule: HighLatitudeRule = HighLatitudeRule.MIDDLE_OF_THE_NIGHT,
    timezone: str | None = None,
) -> PrayerTimesSchema:
    """Calculated times for any place and day, without user offsets."""
    service = PrayerService(
        GeoCoordinate(latitude=lat, longitude=lng),
        CalculationParameters(method=method, madhab=madhab, high_latitude_rule=high_latitude_rule),
        timezone_name=timezone,
    )
    target = day or datetime.now(service.timezone).date()
    return _times_schema(service.calculate(target), service.timezone_name)


# ============== Qibla ==============


@router.get("/qibla", response_model=QiblaSchema)
async def get_qibla(
    state: Annotated[AppState, Depends(get_app_state)],
    lat: Annotated[float | None, Query(ge=-90, le=90)] = None,
    lng: Annotated[float | None, Query(ge=-180, le=180)] = None,
    heading: Annotated[float | None, Query(ge=0, lt=360)] = None,
) -> QiblaSchema:
    """Qibla bearing for the current location, or for *lat*/*lng* when both are given."""
    if lat is not None and lng is not None:
        location = GeoCoordinate(latitude=lat, longitude=lng)
        city = ""
    else:
        location = state.prayer_service.location
        city = state.settings.city

    bearing = qibla_bearing(location)
    result = QiblaSchema(
        location=_location_schema(location, city),
        bearing=bearing,
        kaaba=_location_schema(KAABA, "Makkah"),
    )
    if heading is not None:
        result.heading = heading
        result.relative_angle = relative_qibla_angle(bearing, heading)
        result.facing_qibla = is_facing_qibla(bearing, heading)
    return result


# ============== Settings ==============


@router.get("/settings", response_model=SettingsSchema)
async def get_settings(state: Annotated[AppState, Depends(get_app_state)]) -> SettingsSchema:
    """Current settings."""
    s = state.settings
    return SettingsSchema(
        location=_location_schema(s.location, s.city),
        timezone=s.timezone,
        calculation_method=s.calculation_method,
        madhab=s.madhab,
        high_latitude_rule=s.high_latitude_rule,
        adjustments=PrayerOffsetsSchema(**s.adjustments.to_dict()),
        azan_offsets=PrayerOffsetsSchema(**s.azan_offsets.to_dict()),
        iqama_offsets=IqamaOffsetsSchema(**s.iqama_offsets.to_dict()),
        mutes=MuteSettingsSchema(
            muted_azan=sorted(s.mutes.muted_azan, key=list(PrayerName).index),
            muted_notifications=sorted(s.mutes.muted_notifications, key=list(PrayerName).index),
        ),
        dhikr_reminders_enabled=s.dhikr_reminders_enabled,
    )


@router.put("/settings", response_model=ApiResponse)
async def update_settings(
    update: SettingsUpdateSchema,
    state: Annotated[AppState, Depends(get_app_state)],
) -> ApiResponse:
    """Update settings, recompute times and reschedule notifications."""
    current = state.settings
    changes: dict = {}

    if update.location:
        changes["location"] = GeoCoordinate(
            latitude=update.location.latitude, longitude=update.location.longitude
        )
        changes["city"] = update.location.city
    if "timezone" in update.model_fields_set:
        changes["timezone"] = update.timezone
    if update.calculation_method is not None:
        changes["calculation_method"] = update.calculation_method
    if update.madhab is not None:
        changes["madhab"] = update.madhab
    if update.high_latitude_rule is not None:
        changes["high_latitude_rule"] = update.high_latitude_rule
    if update.adjustments:
        changes["adjustments"] = PrayerOffsets(**update.adjustments.model_dump())
    if update.azan_offsets:
        changes["azan_offsets"] = PrayerOffsets(**update.azan_offsets.model_dump())
    if update.iqama_offsets:
        changes["iqama_offsets"] = IqamaOffsets(**update.iqama_offsets.model_dump())
    if update.mutes:
        changes["mutes"] = MuteSettings(
            muted_azan=frozenset(update.mutes.muted_azan),
            muted_notifications=frozenset(update.mutes.muted_notifications),
        )
    if update.dhikr_reminders_enabled is not None:
        changes["dhikr_reminders_enabled"] = update.dhikr_reminders_enabled

    new_settings: AppSettings = dataclasses.replace(current, **changes)

    state.clock_service.apply_settings(new_settings)
    state.settings = new_settings
    await state.settings_repository.save(new_settings)

    return ApiResponse(
        success=True,
        message="Settings updated.",
        data={"changed": sorted(changes)},
    )


# ============== Notifications ==============


@router.get("/notifications", response_model=list[NotificationSchema])
async def get_notifications(
    state: Annotated[AppState, Depends(get_app_state)],
) -> list[NotificationSchema]:
    """Pending notifications ordered by fire time."""
    return [NotificationSchema(**t.to_dict()) for t in state.notification_service.pending()]


@router.post("/notifications/reschedule", response_model=ApiResponse)
async def reschedule(state: Annotated[AppState, Depends(get_app_state)]) -> ApiResponse:
    """Recompute today's times and replace all pending notifications."""
    times = state.clock_service.refresh()
    count = len(state.notification_service.pending())
    return ApiResponse(
        success=times is not None,
        message=f"{count} notifications scheduled."
        if times is not None
        else "Prayer times are not available for this location.",
        data={"scheduled_count": count},
    )


# ============== Utility ==============


@router.get("/methods", response_model=list[CalculationMethodSchema])
async def get_methods() -> list[CalculationMethodSchema]:
    """Available calculation methods."""
    return [
        CalculationMethodSchema(
            value=method,
            display_name=method.display_name,
            fajr_angle=method.parameters.fajr_angle,
            isha_angle=method.parameters.isha_angle,
            isha_interval=method.parameters.isha_interval,
            maghrib_angle=method.parameters.maghrib_angle,
        )
        for method in CalculationMethod
    ]


@router.get("/prayers")
async def get_prayer_names() -> list[dict[str, str]]:
    """Prayer names."""
    return [{"value": p.value, "display_name": p.display_name, "icon": p.icon} for p in PrayerName]
