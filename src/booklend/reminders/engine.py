"""Reminder engine: one sweep finds loans needing a reminder and e-mails owners.

A sweep has two independent phases:

- upcoming: active loans due exactly ``upcoming_lead_days`` from today get a
  single-loan e-mail each;
- overdue: active loans due before today are grouped into one digest per
  owner.

Both phases share the loan's ``last_reminder_sent_at`` as a cooldown token.
A loan is marked only after its e-mail was accepted, so a failed send is
retried on a later sweep once the cooldown allows it.
"""

import threading
from datetime import datetime, timedelta
from typing import Optional

from ..config import Config
from ..db.sqlite import Database
from ..exceptions import ReminderStoreError
from ..notify.base import Notifier
from ..notify.mailer import EmailNotifier
from ..notify.schemas import DeliveryResult, LoanNotice, ReminderKind
from ..settings.schemas import NotificationPreferences
from ..utils.clock import Clock, utcnow
from ..utils.logging import get_logger
from .digest import build_digests
from .schemas import ReminderCandidate, SweepResult
from .store import ReminderStore, SqlReminderStore

logger = get_logger(__name__)

DEFAULT_COOLDOWN = timedelta(hours=24)
DEFAULT_UPCOMING_LEAD_DAYS = 3


class ReminderEngine:
    """Runs reminder sweeps against a store and a notifier."""

    def __init__(
        self,
        store: ReminderStore,
        notifier: Notifier,
        clock: Clock = utcnow,
        cooldown: timedelta = DEFAULT_COOLDOWN,
        upcoming_lead_days: int = DEFAULT_UPCOMING_LEAD_DAYS,
    ):
        """Initialize the engine.

        Args:
            store: Lending store the engine reads and marks
            notifier: Channel used to deliver reminders
            clock: Returns "now" as a naive UTC datetime
            cooldown: Minimum time between two reminders for one loan
            upcoming_lead_days: How many days before the due date to remind
        """
        self.store = store
        self.notifier = notifier
        self.clock = clock
        self.cooldown = cooldown
        self.upcoming_lead_days = upcoming_lead_days
        self._running = threading.Lock()

    def run_sweep(self) -> SweepResult:
        """Run one complete sweep and return its summary.

        Never raises. If another sweep is already running in this process the
        call returns immediately with ``skipped=True``.
        """
        now = self.clock()
        result = SweepResult(started_at=now)

        if not self._running.acquire(blocking=False):
            logger.warning("Reminder sweep already in progress, skipping this trigger")
            result.skipped = True
            result.finished_at = now
            return result

        try:
            logger.info("Starting reminder check...")
            preferences: dict[str, Optional[NotificationPreferences]] = {}

            try:
                self._send_upcoming(now, result, preferences)
            except Exception as exc:
                logger.exception("Error sending upcoming due reminders")
                result.errors.append(f"upcoming: {exc}")

            try:
                self._send_overdue(now, result, preferences)
            except Exception as exc:
                logger.exception("Error sending overdue reminders")
                result.errors.append(f"overdue: {exc}")

            result.finished_at = self.clock()
            logger.info(
                "Reminder check completed: %d upcoming, %d digest(s) covering %d loan(s)",
                result.upcoming_sent,
                result.overdue_digests_sent,
                result.overdue_loans_covered,
            )
            return result
        finally:
            self._running.release()

    # -------------------------------------------------------------------------
    # Phases
    # -------------------------------------------------------------------------

    def _send_upcoming(
        self,
        now: datetime,
        result: SweepResult,
        preferences: dict[str, Optional[NotificationPreferences]],
    ) -> None:
        target = now.date() + timedelta(days=self.upcoming_lead_days)
        candidates = self.store.list_active_loans_due_on(target)

        for candidate in candidates:
            if not candidate.is_eligible(now, self.cooldown):
                continue
            prefs = self._preferences(candidate.owner_id, preferences, result)
            if prefs is None or not prefs.wants_upcoming:
                continue

            notice = LoanNotice(
                loan_id=candidate.loan_id,
                book_title=candidate.book_title,
                book_author=candidate.book_author,
                borrower_name=candidate.borrower_name,
                lent_at=candidate.lent_at,
                due_at=candidate.due_at,
                days_until_due=(candidate.due_at.date() - now.date()).days,
            )
            try:
                delivery = self.notifier.send_single(
                    candidate.owner_email, ReminderKind.UPCOMING, notice
                )
            except Exception as exc:
                logger.exception(
                    "Notifier raised for upcoming due reminder for loan %s", candidate.loan_id
                )
                delivery = DeliveryResult.failure(str(exc) or exc.__class__.__name__)
            if not delivery.ok:
                logger.warning(
                    "Failed to send upcoming due reminder for loan %s: %s",
                    candidate.loan_id,
                    delivery.error,
                )
                result.upcoming_failed += 1
                continue

            result.upcoming_sent += 1
            try:
                marked = self.store.mark_reminder_sent(
                    candidate.loan_id, now, now - self.cooldown
                )
            except ReminderStoreError as exc:
                logger.error(
                    "Failed to update last_reminder_sent for loan %s: %s",
                    candidate.loan_id,
                    exc,
                )
                result.errors.append(f"mark {candidate.loan_id}: {exc}")
                continue
            if not marked:
                logger.info("Loan %s was reminded concurrently or returned", candidate.loan_id)

        logger.info("Sent %d upcoming due reminders", result.upcoming_sent)

    def _send_overdue(
        self,
        now: datetime,
        result: SweepResult,
        preferences: dict[str, Optional[NotificationPreferences]],
    ) -> None:
        candidates = self.store.list_active_overdue_loans(now.date())

        eligible: list[ReminderCandidate] = []
        for candidate in candidates:
            if not candidate.is_eligible(now, self.cooldown):
                continue
            prefs = self._preferences(candidate.owner_id, preferences, result)
            if prefs is None or not prefs.wants_overdue:
                continue
            eligible.append(candidate)

        for digest in build_digests(eligible, now):
            try:
                delivery = self.notifier.send_digest(digest.address, digest.items)
            except Exception as exc:
                logger.exception("Notifier raised for overdue digest to owner %s", digest.owner_id)
                delivery = DeliveryResult.failure(str(exc) or exc.__class__.__name__)
            if not delivery.ok:
                logger.warning(
                    "Failed to send overdue digest to owner %s: %s",
                    digest.owner_id,
                    delivery.error,
                )
                result.overdue_digests_failed += 1
                continue

            result.overdue_digests_sent += 1
            result.overdue_loans_covered += len(digest.loan_ids)
            try:
                self.store.mark_reminders_sent_batch(digest.loan_ids, now, now - self.cooldown)
            except ReminderStoreError as exc:
                logger.error(
                    "Failed to update last_reminder_sent for owner %s digest: %s",
                    digest.owner_id,
                    exc,
                )
                result.errors.append(f"mark digest {digest.owner_id}: {exc}")

        logger.info(
            "Sent %d overdue digest email(s) covering %d book(s)",
            result.overdue_digests_sent,
            result.overdue_loans_covered,
        )

    def _preferences(
        self,
        owner_id: str,
        cache: dict[str, Optional[NotificationPreferences]],
        result: SweepResult,
    ) -> Optional[NotificationPreferences]:
        # None in the cache means the lookup failed; that owner is skipped
        # for the rest of the sweep.
        if owner_id not in cache:
            try:
                cache[owner_id] = self.store.get_owner_preferences(owner_id)
            except ReminderStoreError as exc:
                logger.error("Failed to load preferences for owner %s: %s", owner_id, exc)
                result.errors.append(f"preferences {owner_id}: {exc}")
                cache[owner_id] = None
        return cache[owner_id]


def build_engine(
    db: Database,
    config: Config,
    notifier: Optional[Notifier] = None,
    clock: Clock = utcnow,
) -> ReminderEngine:
    """Wire the SQL store, the e-mail notifier and the engine from config."""
    return ReminderEngine(
        store=SqlReminderStore(db),
        notifier=notifier or EmailNotifier(config),
        clock=clock,
        cooldown=timedelta(hours=config.reminder_cooldown_hours),
        upcoming_lead_days=config.upcoming_lead_days,
    )
