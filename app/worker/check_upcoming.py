# app/worker/check_upcoming.py
"""
Un solo barrido de eventos próximos, para cron:

    python -m app.worker.check_upcoming
"""
import json
import logging
import os

from dotenv import load_dotenv

from app.core.mailer import ResendMailer
from app.worker.errors import FatalError
from app.worker.scheduler import UpcomingEventScheduler, default_max_workers
from app.worker.store import SupabaseNotificationStore


def main() -> int:
    load_dotenv()
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    scheduler = UpcomingEventScheduler(
        SupabaseNotificationStore(),
        ResendMailer(),
        max_workers=default_max_workers(),
    )
    try:
        report = scheduler.run()
    except FatalError as e:
        logging.getLogger(__name__).error("[check_upcoming] run aborted: %s", e)
        print(json.dumps({"error": str(e)}))
        return 1

    print(report.model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
