"""Translation of prayer times into daily notification triggers."""

import logging
from datetime import timedelta

from salatuk.domain.events import NotificationFailedEvent, NotificationsResyncedEvent
from salatuk.domain.models import (
    AppSettings,
    MuteSettings,
    NotificationTrigger,
    PrayerName,
    PrayerOffsets,
    PrayerTimes,
)
from salatuk.domain.policy import adjusted_azan_time
from salatuk.services.ports import EventBusPort, NotificationCenterPort

logger = logging.getLogger(__name__)

AZAN_SOUND = "azan.m4a"
DEFAULT_SOUND = "default"

# Minutes relative to the adjusted azan at which the dhikr reminder fires
DHIKR_OFFSETS = {
    PrayerName.FAJR: 30,
    PrayerName.DHUHR: -20,
    PrayerName.ASR: -20,
    PrayerName.MAGHRIB: -30,
    PrayerName.ISHA: -20,
}

DHIKR_PHRASES: dict[PrayerName, tuple[str, ...]] = {
    PrayerName.FAJR: ("Time for your morning adhkar",),
    PrayerName.DHUHR: (
        "SubhanAllah",
        "My Lord, forgive and have mercy, You are the best of the merciful",
        "Alhamdulillah",
    ),
    PrayerName.ASR: (
        "La ilaha illa Allah",
        "O Allah, send blessings and peace upon our Prophet Muhammad",
        "SubhanAllah wa bihamdihi",
    ),
    PrayerName.MAGHRIB: ("Time for your evening adhkar",),
    PrayerName.ISHA: (
        "I seek refuge in the perfect words of Allah from the evil of what He created",
        "SubhanAllah wa bihamdihi",
        "There is no might nor power except with Allah",
    ),
}


def prayer_identifier(prayer: PrayerName) -> str:
    """Stable identifier of a prayer's azan notification."""
    return "sunrise" if prayer is PrayerName.SUNRISE else f"azan_{prayer.value}"


def dhikr_identifier(prayer: PrayerName) -> str:
    return f"dhikr_{prayer.value}"


DHIKR_IDENTIFIERS = [dhikr_identifier(prayer) for prayer in DHIKR_OFFSETS]


def build_prayer_triggers(
    times: PrayerTimes,
    azan_offsets: PrayerOffsets,
    mutes: MuteSettings,
) -> list[NotificationTrigger]:
    """
    Daily azan triggers for every prayer whose notification is not muted.

    Fire times are the adjusted azan times truncated to hour and minute.
    Sunrise is silent and carries only a title; other prayers play the azan
    unless their azan is muted.
    """
    triggers = []
    for prayer in PrayerName:
        if mutes.is_notification_muted(prayer):
            continue

        fire_at = adjusted_azan_time(times.get_time(prayer), prayer, azan_offsets)

        if prayer is PrayerName.SUNRISE:
            trigger = NotificationTrigger(
                identifier=prayer_identifier(prayer),
                hour=fire_at.hour,
                minute=fire_at.minute,
                title=prayer.display_name,
            )
        else:
            trigger = NotificationTrigger(
                identifier=prayer_identifier(prayer),
                hour=fire_at.hour,
                minute=fire_at.minute,
                title=f"{prayer.display_name} Azan",
                body=f"It is time for the {prayer.display_name} azan",
                sound=None if mutes.is_azan_muted(prayer) else AZAN_SOUND,
            )
        triggers.append(trigger)
    return triggers


def build_dhikr_triggers(
    times: PrayerTimes,
    azan_offsets: PrayerOffsets,
    day_of_month: int,
) -> list[NotificationTrigger]:
    """Remembrance reminders around each prayer, phrases rotated by day of month."""
    triggers = []
    for rotation, (prayer, minutes) in enumerate(DHIKR_OFFSETS.items()):
        adhan_time = adjusted_azan_time(times.get_time(prayer), prayer, azan_offsets)
        fire_at = adhan_time + timedelta(minutes=minutes)
        phrases = DHIKR_PHRASES[prayer]
        triggers.append(
            NotificationTrigger(
                identifier=dhikr_identifier(prayer),
                hour=fire_at.hour,
                minute=fire_at.minute,
                title="Adhkar",
                body=phrases[(day_of_month - 1 + rotation) % len(phrases)],
                sound=DEFAULT_SOUND,
            )
        )
    return triggers


class NotificationService:
    """Keeps the notification collaborator in sync with the current prayer times."""

    def __init__(
        self,
        notification_center: NotificationCenterPort,
        event_bus: EventBusPort | None = None,
    ) -> None:
        self._center = notification_center
        self._event_bus = event_bus

    def resync(self, times: PrayerTimes, settings: AppSettings) -> list[NotificationTrigger]:
        """
        Replace all pending notifications with a set built from *times*.

        A trigger the collaborator rejects is logged and reported; the
        remaining triggers are still registered.

        Returns:
            The triggers submitted for registration
        """
        self._center.remove_all_pending()

        triggers = build_prayer_triggers(times, settings.azan_offsets, settings.mutes)
        if settings.dhikr_reminders_enabled:
            triggers += build_dhikr_triggers(times, settings.azan_offsets, times.date.day)

        for trigger in triggers:
            self._register(trigger)

        logger.info(f"{len(triggers)} notifications scheduled for {times.date}.")
        if self._event_bus:
            self._event_bus.publish(
                NotificationsResyncedEvent(identifiers=tuple(t.identifier for t in triggers))
            )
        return triggers

    def clear(self) -> None:
        """Remove every pending notification."""
        self._center.remove_all_pending()
        logger.info("All pending notifications removed.")

    def cancel_dhikr_reminders(self) -> None:
        """Remove only the dhikr reminders."""
        self._center.remove_pending(DHIKR_IDENTIFIERS)

    def pending(self) -> list[NotificationTrigger]:
        return self._center.pending()

    def _register(self, trigger: NotificationTrigger) -> None:
        try:
            self._center.add(trigger, lambda error: self._on_registered(trigger, error))
        except Exception as e:
            self._on_registered(trigger, e)

    def _on_registered(self, trigger: NotificationTrigger, error: Exception | None) -> None:
        if error is None:
            logger.debug(
                f"Scheduled {trigger.identifier} at {trigger.hour:02d}:{trigger.minute:02d}"
            )
            return

        logger.error(f"Failed to add {trigger.identifier}: {error}")
        if self._event_bus:
            self._event_bus.publish(
                NotificationFailedEvent(trigger=trigger, error_message=str(error))
            )
