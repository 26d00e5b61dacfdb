# main.py

import logging
import os
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from dotenv import load_dotenv

from app.api.routers import scheduler, notifications_email
from app.core.cors import CORS_HEADERS

# -------------------------------------------------------------------
# Cargar variables de entorno y app base
# -------------------------------------------------------------------
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

app = FastAPI(
    title="ContactRemind Notifications",
    description="""
Supabase-backed notification service for the ContactRemind contact manager.

**What it does**
- **Upcoming-event sweep:** one batch run per call. Expands recurring reminders (daily/weekly/monthly/yearly) and annual special dates into the events due in the next 24 hours.
- **Special dates:** advance notices 30 days, 1 week and 1 day before each birthday/anniversary.
- **Channels:** transactional email (Resend) when the user opted in, plus an in-app row in `notifications` for every event.
- **Partial failures:** every event gets its own status (`success`, `partial_success`, `success_no_email`, `error`); only a failed bulk read aborts the run.

**Notes**
- Meant to be triggered by cron. Set `SCHEDULER_TOKEN` and send it as `Authorization: Bearer <token>` or `X-Admin-Token`.
- There is no dedupe guard: calling the sweep twice in the same window sends duplicates.
""",
    version="1.0.0",
)

app.include_router(scheduler.router)            # /api/scheduler/...
app.include_router(notifications_email.router)  # /api/notify/email/...


# 422 con las mismas cabeceras CORS que el resto de respuestas
@app.exception_handler(RequestValidationError)
async def validation_error_with_cors(request: Request, exc: RequestValidationError):
    response = await request_validation_exception_handler(request, exc)
    response.headers.update(CORS_HEADERS)
    return response


# -------------------------------------------------------------------
# Endpoints públicos
# -------------------------------------------------------------------
@app.get("/")
def read_root():
    return {"message": "Welcome to ContactRemind Notifications"}


@app.get("/health/scheduler", tags=["Health"])
def health_scheduler():
    return {"status": "ok", "time": datetime.now(timezone.utc).isoformat()}
