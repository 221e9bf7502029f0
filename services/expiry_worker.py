import logging
import threading
from typing import Callable, Optional

from sqlalchemy.orm import Session

from core.config import settings
from core.exceptions import BaseCustomException
from database.connection import SessionLocal
from repositories.package_repository import PackageRepository
from schemas.package import SweepResult
from services.package_service import PackageService

logger = logging.getLogger(__name__)


class ExpiryWorker:
    """Runs the expiry sweep at start-up and then on a fixed interval."""

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        interval_seconds: Optional[float] = None,
        service_factory: Callable[[Session], PackageService] = None
    ):
        self.session_factory = session_factory
        self.interval_seconds = interval_seconds if interval_seconds is not None else settings.SWEEP_INTERVAL_SECONDS
        self.service_factory = service_factory or (lambda db: PackageService(PackageRepository(db)))
        self._stop_event = threading.Event()

    def run_once(self) -> Optional[SweepResult]:
        """Run a single sweep in its own session; None if it could not run"""
        db = self.session_factory()
        try:
            return self.service_factory(db).sweep_expired()
        except BaseCustomException as e:
            logger.error(f"Error marking expired packages: {e.message}")
            return None
        except Exception as e:
            logger.error(f"Unexpected error marking expired packages: {str(e)}", exc_info=True)
            return None
        finally:
            db.close()

    def run_forever(self):
        logger.info("Package expiry worker started")
        if self.run_once() is not None:
            logger.info("Initial expired packages check completed")

        while not self._stop_event.wait(self.interval_seconds):
            logger.info("Running expired packages check...")
            if self.run_once() is not None:
                logger.info("Expired packages check completed")

        logger.info("Package expiry worker stopped")

    def stop(self):
        logger.info("Shutting down worker...")
        self._stop_event.set()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()
