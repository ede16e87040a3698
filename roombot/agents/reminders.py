"""
Meeting reminders.

Every hour (minute 50) the bookings of the next 24 hours are fetched and
each one starting within the hour is pushed to its owner's chat.
Runs are not deduplicated.
"""
import logging
from datetime import datetime, timedelta
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from roombot.config import CHANNEL_TYPE, KST, SITE_ID
from roombot.graph.window import day_ahead
from roombot.providers.base import BookingProvider, ChatProvider
from roombot.store import ConversationStore
from roombot.utils.timefmt import format_reservation, from_epoch_ms, to_epoch_ms

logger = logging.getLogger(__name__)

ALERT_LEAD = timedelta(minutes=60)


class ReminderJob:
    def __init__(self, booking: BookingProvider, store: ConversationStore, chat: ChatProvider,
                 siteid: str = SITE_ID):
        self.booking = booking
        self.store = store
        self.chat = chat
        self.siteid = siteid

    def run(self, now: Optional[datetime] = None) -> int:
        """Send alerts for bookings starting within the hour. Returns the number sent."""
        now = now or datetime.now(KST)
        start, end = day_ahead(now)

        resvs = self.booking.search_by_site(self.siteid, to_epoch_ms(start), to_epoch_ms(end))
        sent = 0
        for resv in resvs:
            if from_epoch_ms(resv["start"]) - now >= ALERT_LEAD:
                continue

            user_id = (resv.get("user") or {}).get("userid")
            if not user_id:
                continue

            try:
                doc = self.store.find_by_user_id(user_id, channel=CHANNEL_TYPE)
                if not doc:
                    logger.info("No chat registered for booking user %s", user_id)
                    continue

                self.chat.send_message(doc["user_key"], f"[Meeting Alert] {format_reservation(resv)}")
            except Exception:
                # one unreachable chat must not hold back the other alerts
                logger.exception("Meeting alert for booking %s failed", resv.get("id"))
                continue
            sent += 1

        logger.info("Reminder run: %d booking(s) in the next day, %d alert(s) sent", len(resvs), sent)
        return sent


class ReminderScheduler:
    """In-process hourly trigger for ReminderJob."""

    def __init__(self, job: ReminderJob, minute: int = 50):
        self.job = job
        self.minute = minute
        self.scheduler = BackgroundScheduler()

    def send_reminders(self):
        try:
            self.job.run()
        except Exception as e:
            logger.error(f"Error sending meeting reminders: {e}")

    def start(self):
        self.scheduler.add_job(
            self.send_reminders,
            CronTrigger(minute=self.minute),
            id='meeting_reminders',
            name='Meeting Reminders',
            replace_existing=True
        )
        self.scheduler.start()
        logger.info(f"Reminder scheduler started (hourly at :{self.minute:02d})")

    def stop(self):
        self.scheduler.shutdown()
        logger.info("Reminder scheduler stopped")
