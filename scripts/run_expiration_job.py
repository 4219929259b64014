"""
Periodic job runner: package expiry alerts and waitlist offer timeouts.

Meant to be invoked by cron (or any scheduler) at least once a day.
Both jobs are idempotent, so overlapping or retried runs are harmless.
A non-zero exit code signals a failed run to the scheduler.

Usage:
    python scripts/run_expiration_job.py [--date YYYY-MM-DD]
"""

import argparse
import datetime
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv

load_dotenv()

from sqlmodel import Session

from app.core.config import settings
from app.db.session import engine
from app.services.expiration_service import PackageExpirationService
from app.services.optimization_service import OptimizationService
from app.services.waitlist_service import WaitlistService

log = logging.getLogger("run_expiration_job")


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--date", type=datetime.date.fromisoformat, default=None,
                        help="Evaluate thresholds as of this date (default: today)")
    args = parser.parse_args()

    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        with Session(engine) as session:
            result = PackageExpirationService(session).process_expiration_alerts(today=args.date)
            reopened = WaitlistService(session).process_expired_offers()
            expired = OptimizationService(session).expire_stale_suggestions()
    except Exception:
        log.exception("[jobs] run failed")
        return 1

    log.info("[jobs] done: checked=%d alerted=%d reopened_offers=%d expired_suggestions=%d", result.checked,
             result.alerted, reopened, expired)
    return 0


if __name__ == "__main__":
    sys.exit(main())
