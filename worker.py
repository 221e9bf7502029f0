#!/usr/bin/env python3
"""
Package expiry worker: marks stale packages as EXPIRED every
SWEEP_INTERVAL_SECONDS until interrupted.
"""
import sys
import signal
import logging

from core.config import settings
from database.connection import create_tables
from services.expiry_worker import ExpiryWorker

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def main():
    try:
        create_tables()
    except Exception as e:
        logger.error(f"Failed to prepare database: {str(e)}")
        return 1

    worker = ExpiryWorker()

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}")
        worker.stop()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    worker.run_forever()
    return 0


if __name__ == "__main__":
    sys.exit(main())
