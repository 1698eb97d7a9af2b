"""APScheduler based notification center."""

import logging
from collections.abc import Callable
from datetime import tzinfo

from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from salatuk.domain.models import NotificationTrigger
from salatuk.services.ports import CompletionHandler, NotificationCenterPort

logger = logging.getLogger(__name__)


def log_delivery(trigger: NotificationTrigger) -> None:
    """Default delivery: write the notification to the log."""
    sound = f" [{trigger.sound}]" if trigger.sound else ""
    body = f": {trigger.body}" if trigger.body else ""
    logger.info(f"Notification {trigger.identifier}{sound} {trigger.title}{body}")


class APSchedulerNotificationCenter(NotificationCenterPort):
    """Fires each registered trigger every day at its hour and minute."""

    def __init__(
        self,
        deliver: Callable[[NotificationTrigger], None] | None = None,
        timezone_provider: Callable[[], tzinfo] | None = None,
    ) -> None:
        """
        Initialize notification center.

        Args:
            deliver: Called with the trigger when it fires (default: log it)
            timezone_provider: Returns the zone trigger wall-clock times are in
        """
        jobstores = {"default": MemoryJobStore()}
        self._scheduler = AsyncIOScheduler(jobstores=jobstores)
        self._deliver = deliver or log_delivery
        self._timezone_provider = timezone_provider
        self._triggers: dict[str, NotificationTrigger] = {}
        self._started = False

    @property
    def is_started(self) -> bool:
        return self._started

    def start(self) -> None:
        """Start firing triggers; must be called from a running event loop."""
        if not self._started:
            self._scheduler.start()
            self._started = True
            logger.info("Notification center started.")

    def shutdown(self) -> None:
        """Stop the scheduler; pending triggers are kept."""
        if self._started:
            self._scheduler.shutdown(wait=False)
            self._started = False
            logger.info("Notification center stopped.")

    def add(self, trigger: NotificationTrigger, completion: CompletionHandler) -> None:
        """Register a daily trigger, replacing one with the same identifier."""
        try:
            if self._scheduler.get_job(trigger.identifier):
                self._scheduler.remove_job(trigger.identifier)

            timezone = self._timezone_provider() if self._timezone_provider else None
            self._scheduler.add_job(
                self._deliver,
                trigger=CronTrigger(hour=trigger.hour, minute=trigger.minute, timezone=timezone),
                args=[trigger],
                id=trigger.identifier,
                replace_existing=True,
                misfire_grace_time=60,
            )
        except Exception as e:
            completion(e)
            return

        self._triggers[trigger.identifier] = trigger
        completion(None)

    def remove_pending(self, identifiers: list[str]) -> None:
        """Remove pending triggers by identifier; unknown identifiers are ignored."""
        for identifier in identifiers:
            if self._triggers.pop(identifier, None) is not None:
                self._scheduler.remove_job(identifier)
                logger.debug(f"Notification removed: {identifier}")

    def remove_all_pending(self) -> None:
        """Remove every pending trigger."""
        self._scheduler.remove_all_jobs()
        self._triggers.clear()
        logger.debug("All pending notifications removed.")

    def pending(self) -> list[NotificationTrigger]:
        """Pending triggers ordered by fire time."""
        return sorted(self._triggers.values(), key=lambda t: (t.hour, t.minute, t.identifier))
