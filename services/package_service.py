import uuid
import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from core.config import settings
from core.exceptions import (
    BaseCustomException,
    ConcurrentUpdateError,
    DuplicateOrderRefError,
    InvalidTransitionError,
    ResourceNotFoundError,
    ValidationError,
)
from models.package import Package, PackageStatus, can_transition
from repositories.package_repository import (
    DuplicateKeyError,
    PackageRepository,
    RecordNotFoundError,
    StaleRecordError,
)
from schemas.package import PackageStats, SweepFailure, SweepResult

logger = logging.getLogger(__name__)


class PackageService:
    """Business rules for the pickup queue on top of a PackageRepository."""

    def __init__(
        self,
        repository: PackageRepository,
        clock: Callable[[], datetime] = datetime.utcnow,
        expiry_threshold: Optional[timedelta] = None
    ):
        self.repository = repository
        self.clock = clock
        self.expiry_threshold = expiry_threshold or timedelta(hours=settings.EXPIRY_THRESHOLD_HOURS)

    def create(self, order_ref: str, driver_code: Optional[str] = None) -> Package:
        """Register a new package in WAITING status"""
        if not order_ref or not order_ref.strip():
            raise ValidationError("Order reference is required", field="order_reference")

        if self.repository.get_by_order_ref(order_ref) is not None:
            raise DuplicateOrderRefError(order_ref)

        now = self.clock()
        package = Package(
            id=str(uuid.uuid4()),
            order_ref=order_ref,
            driver_code=driver_code or None,
            status=PackageStatus.WAITING,
            created_at=now,
            updated_at=now
        )

        try:
            package = self.repository.create(package)
        except DuplicateKeyError:
            # Lost a race with another create for the same reference
            raise DuplicateOrderRefError(order_ref)

        logger.info(f"Package created: {package.id} for order {order_ref}")
        return package

    def get_by_id(self, package_id: str) -> Package:
        package = self.repository.get_by_id(package_id)
        if package is None:
            raise ResourceNotFoundError("Package", package_id)
        return package

    def get_by_order_ref(self, order_ref: str) -> Package:
        package = self.repository.get_by_order_ref(order_ref)
        if package is None:
            raise ResourceNotFoundError("Package", order_ref)
        return package

    def list(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        status: Optional[PackageStatus] = None
    ) -> List[Package]:
        return self.repository.list(limit=limit, offset=offset, status=status)

    def update_status(self, package_id: str, new_status: PackageStatus) -> Package:
        """Move a package to ``new_status`` if the transition is allowed.

        The first entry into PICKED, HANDED_OVER or EXPIRED stamps the matching
        timestamp; an already stamped value is never overwritten.
        """
        package = self.get_by_id(package_id)
        new_status = PackageStatus(new_status)
        current_status = PackageStatus(package.status)

        if not can_transition(current_status, new_status):
            raise InvalidTransitionError(current_status.value, new_status.value)

        now = self.clock()
        package.status = new_status
        package.updated_at = now

        timestamp_field = Package.STATUS_TIMESTAMP_FIELDS.get(new_status)
        if timestamp_field and getattr(package, timestamp_field) is None:
            setattr(package, timestamp_field, now)

        try:
            package = self.repository.update(package)
        except RecordNotFoundError:
            raise ResourceNotFoundError("Package", package_id)
        except StaleRecordError:
            raise ConcurrentUpdateError("Package", package_id)

        logger.info(f"Package {package_id} status changed: {current_status.value} -> {new_status.value}")
        return package

    def delete(self, package_id: str) -> None:
        self.get_by_id(package_id)
        try:
            self.repository.delete(package_id)
        except RecordNotFoundError:
            raise ResourceNotFoundError("Package", package_id)
        logger.info(f"Package deleted: {package_id}")

    def stats(self) -> PackageStats:
        return PackageStats(**self.repository.count_by_status())

    def sweep_expired(self) -> SweepResult:
        """Expire every stale package, continuing past individual failures.

        Failures are logged and returned in the result instead of raised.
        Only a failure to look up the stale packages themselves propagates.
        """
        stale_packages = self.repository.find_stale(self.expiry_threshold)
        # Detach the work list from ORM state that later commits expire
        stale_ids = [package.id for package in stale_packages]
        result = SweepResult(scanned=len(stale_ids))

        for package_id in stale_ids:
            try:
                self.update_status(package_id, PackageStatus.EXPIRED)
            except BaseCustomException as e:
                logger.warning(f"Failed to expire package {package_id}: {e.message}")
                result.failures.append(SweepFailure(
                    package_id=package_id,
                    error_code=e.__class__.__name__,
                    message=e.message
                ))
                continue
            result.expired_ids.append(package_id)

        logger.info(
            f"Expiry sweep finished: {len(result.expired_ids)} expired, "
            f"{len(result.failures)} failed, {result.scanned} scanned"
        )
        return result
