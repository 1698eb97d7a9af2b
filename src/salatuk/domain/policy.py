"""Azan offsets, iqama countdown and countdown visibility rules."""

from datetime import datetime, timedelta

from salatuk.domain.models import (
    IqamaOffsets,
    IqamaPhase,
    IqamaStatus,
    PrayerName,
    PrayerOffsets,
    PrayerTimes,
)

# How long after the iqama the "late for iqama" label stays visible
IQAMA_GRACE = timedelta(minutes=30)

# Countdowns are only shown when the azan is at most this far away
COUNTDOWN_WINDOW = timedelta(minutes=80)

# A prayer stays highlighted this long after its azan
HIGHLIGHT_GRACE = timedelta(minutes=30)


def adjusted_azan_time(raw: datetime, prayer: PrayerName, azan_offsets: PrayerOffsets) -> datetime:
    """Calculated time shifted by the user's azan offset. Offsets are not clamped."""
    return raw + timedelta(minutes=azan_offsets.get_offset(prayer))


def adjusted_prayer_times(times: PrayerTimes, azan_offsets: PrayerOffsets) -> PrayerTimes:
    """All six times shifted by their azan offsets."""
    return PrayerTimes(
        date=times.date,
        **{
            prayer.value: adjusted_azan_time(times.get_time(prayer), prayer, azan_offsets)
            for prayer in PrayerName
        },
    )


def format_minutes_seconds(duration: timedelta) -> str:
    """MM:SS of the absolute duration, minutes are not wrapped at 60."""
    total = int(abs(duration.total_seconds()))
    minutes, seconds = divmod(total, 60)
    return f"{minutes:02d}:{seconds:02d}"


def iqama_info(
    raw: datetime,
    prayer: PrayerName,
    azan_offsets: PrayerOffsets,
    iqama_offsets: IqamaOffsets,
    now: datetime,
) -> IqamaStatus | None:
    """
    Iqama label for a prayer at *now*.

    Visible from the azan until 30 minutes after the iqama, both ends
    included. Before and at the iqama the status counts down, afterwards
    it reports how late the observer is.

    Returns:
        None outside the window and always for sunrise
    """
    if not prayer.has_iqama:
        return None

    adhan_time = adjusted_azan_time(raw, prayer, azan_offsets)
    iqama_time = adhan_time + timedelta(minutes=iqama_offsets.get_offset(prayer))

    if now < adhan_time or now > iqama_time + IQAMA_GRACE:
        return None

    if now <= iqama_time:
        remaining = iqama_time - now
        return IqamaStatus(
            prayer=prayer,
            phase=IqamaPhase.COUNTING,
            duration=remaining,
            label=f"Iqama in {format_minutes_seconds(remaining)}",
        )

    overdue = now - iqama_time
    return IqamaStatus(
        prayer=prayer,
        phase=IqamaPhase.LATE,
        duration=overdue,
        label=f"Late for Iqama by {format_minutes_seconds(overdue)}",
    )


def countdown_seconds(
    raw: datetime,
    prayer: PrayerName,
    azan_offsets: PrayerOffsets,
    now: datetime,
) -> int:
    """Whole seconds from *now* until the adjusted azan, negative once it has passed."""
    return int((adjusted_azan_time(raw, prayer, azan_offsets) - now).total_seconds())


def is_countdown_visible(seconds: int) -> bool:
    return 0 < seconds <= COUNTDOWN_WINDOW.total_seconds()


def highlighted_prayer(adjusted_times: PrayerTimes, now: datetime) -> PrayerName:
    """
    The prayer to emphasise in a day listing.

    The first prayer that has not yet started, or started less than
    30 minutes ago. After isha's grace it wraps around to fajr.
    """
    for prayer in PrayerName:
        if now < adjusted_times.get_time(prayer) + HIGHLIGHT_GRACE:
            return prayer
    return PrayerName.FAJR
