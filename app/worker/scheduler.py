# app/worker/scheduler.py

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import List, Optional

from app.schemas.events import EventResult, SchedulerRunOut, UpcomingEvent
from app.worker.dispatcher import NotificationDispatcher
from app.worker.errors import FatalError, ParseError
from app.worker.occurrences import plan_reminder
from app.worker.preferences import resolve_email_eligibility
from app.worker.results import ResultCollector, build_result, error_result
from app.worker.special_dates import plan_special_date

logger = logging.getLogger(__name__)


def _row_id(row):
    return row.get("id") if isinstance(row, dict) else getattr(row, "id", None)


def default_max_workers() -> int:
    try:
        return max(1, int(os.getenv("SCHEDULER_MAX_WORKERS", "4")))
    except ValueError:
        return 4


class UpcomingEventScheduler:
    """
    Un barrido por invocación: dos lecturas masivas, expansión a eventos
    dentro de [now, now+24h) y procesamiento aislado de cada evento.

    No hay guardia de idempotencia: invocarlo dos veces dentro de la misma
    ventana vuelve a enviar emails y a insertar notificaciones in-app.
    """

    def __init__(self, store, mailer, now: Optional[datetime] = None, max_workers: int = 1):
        self.store = store
        self.mailer = mailer
        self.dispatcher = NotificationDispatcher(store, mailer)
        self._now = now
        self.max_workers = max(1, max_workers)

    def now(self) -> datetime:
        if self._now is None:
            return datetime.now(timezone.utc)
        if self._now.tzinfo is None:
            return self._now.replace(tzinfo=timezone.utc)
        return self._now.astimezone(timezone.utc)

    # -------------------------
    # Expansión
    # -------------------------
    def collect_events(self, now: datetime) -> List[UpcomingEvent]:
        try:
            reminder_rows = self.store.fetch_reminders()
            special_rows = self.store.fetch_special_dates()
        except FatalError:
            raise
        except Exception as e:
            raise FatalError(f"Bulk read failed: {e}") from e

        logger.info(
            "[scheduler] %d reminders and %d special dates to check at %s",
            len(reminder_rows), len(special_rows), now.isoformat(),
        )

        events: List[UpcomingEvent] = []
        for row in reminder_rows:
            try:
                event = plan_reminder(row, now)
            except ParseError as e:
                logger.warning("[scheduler] skipping reminder %s: %s", e.record_id, e.detail)
                continue
            except Exception:
                logger.exception("[scheduler] skipping reminder %s: unexpected error", _row_id(row))
                continue
            if event is not None:
                events.append(event)

        for row in special_rows:
            try:
                events.extend(plan_special_date(row, now))
            except ParseError as e:
                logger.warning("[scheduler] skipping special date %s: %s", e.record_id, e.detail)
            except Exception:
                logger.exception("[scheduler] skipping special date %s: unexpected error", _row_id(row))

        return events

    # -------------------------
    # Procesamiento por evento
    # -------------------------
    def _recipient_for(self, event) -> Optional[str]:
        try:
            return self.store.get_user_email(event.user_id)
        except Exception as e:
            logger.warning("[scheduler] email lookup failed for user %s: %s", event.user_id, e)
            return None

    def process_event(self, event) -> EventResult:
        try:
            eligible = resolve_email_eligibility(event, self.store)
            recipient = self._recipient_for(event) if eligible else None
            outcome = self.dispatcher.dispatch(event, eligible, recipient)
            return build_result(event, outcome)
        except Exception as e:
            logger.exception("[scheduler] unexpected error processing %s", event.id)
            return error_result(event, str(e) or type(e).__name__)

    def run(self) -> SchedulerRunOut:
        """Lanza FatalError solo si falla alguna de las lecturas masivas."""
        now = self.now()
        events = self.collect_events(now)
        if not events:
            logger.info("[scheduler] no upcoming events")
            return SchedulerRunOut(message="No upcoming events found", results=[])

        collector = ResultCollector()

        def _work(index: int, event) -> None:
            collector.add(index, self.process_event(event))

        if self.max_workers > 1 and len(events) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                futures = [pool.submit(_work, i, ev) for i, ev in enumerate(events)]
                for f in futures:
                    f.result()
        else:
            for i, ev in enumerate(events):
                _work(i, ev)

        results: List[EventResult] = collector.results
        failed = sum(1 for r in results if r.status == "error")
        logger.info("[scheduler] processed %d events (%d errors)", len(results), failed)
        return SchedulerRunOut(message=f"Processed {len(results)} upcoming events", results=results)
