# app/api/routers/scheduler.py

import logging

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from app.core.auth import require_scheduler_token
from app.core.cors import CORS_HEADERS
from app.core.mailer import ResendMailer, get_mailer
from app.schemas.events import SchedulerRunOut
from app.worker.errors import FatalError
from app.worker.scheduler import UpcomingEventScheduler, default_max_workers
from app.worker.store import SupabaseNotificationStore, get_notification_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/scheduler", tags=["Scheduler"])


def get_scheduler(
    store: SupabaseNotificationStore = Depends(get_notification_store),
    mailer: ResendMailer = Depends(get_mailer),
) -> UpcomingEventScheduler:
    return UpcomingEventScheduler(store, mailer, max_workers=default_max_workers())


@router.options("/check-upcoming-reminders", include_in_schema=False)
def check_upcoming_reminders_preflight():
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post(
    "/check-upcoming-reminders",
    response_model=SchedulerRunOut,
    dependencies=[Depends(require_scheduler_token)],
    responses={500: {"description": "Bulk read failed", "content": {"application/json": {"example": {"error": "..."}}}}},
)
def check_upcoming_reminders(
    response: Response,
    scheduler: UpcomingEventScheduler = Depends(get_scheduler),
):
    """
    Barrido único de recordatorios y fechas especiales que vencen en las
    próximas 24 h. Cada evento se procesa por separado; solo un fallo en las
    lecturas masivas devuelve 500.
    """
    try:
        report = scheduler.run()
    except FatalError as e:
        logger.error("[scheduler] run aborted: %s", e)
        return JSONResponse(status_code=500, content={"error": str(e)}, headers=CORS_HEADERS)

    response.headers.update(CORS_HEADERS)
    return report
