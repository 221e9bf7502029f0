"""Repository for the packages table.

Wraps every SQLAlchemy query the service layer needs and turns driver
failures into the errors callers can act on.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from sqlalchemy import func, desc
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from core.exceptions import StoreError
from models.package import Package, PackageStatus, STALE_CANDIDATE_STATUSES

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50
MAX_LIMIT = 100


class DuplicateKeyError(Exception):
    """A unique column already holds the value being inserted."""

    def __init__(self, field: str, value: str):
        self.field = field
        self.value = value
        super().__init__(f"{field} '{value}' already exists")


class RecordNotFoundError(Exception):
    """The targeted row does not exist (any more)."""

    def __init__(self, package_id: str):
        self.package_id = package_id
        super().__init__(f"Package '{package_id}' not found")


class StaleRecordError(Exception):
    """The row changed since it was read."""

    def __init__(self, package_id: str):
        self.package_id = package_id
        super().__init__(f"Package '{package_id}' was modified by another writer")


def clamp_pagination(limit: Optional[int], offset: Optional[int]) -> tuple:
    """Clamp limit into [1, MAX_LIMIT] and offset to >= 0, applying defaults."""
    limit = DEFAULT_LIMIT if limit is None else max(1, min(int(limit), MAX_LIMIT))
    offset = 0 if offset is None else max(0, int(offset))
    return limit, offset


class PackageRepository:
    """Data access for Package rows, bound to one session."""

    def __init__(self, db: Session, clock: Callable[[], datetime] = datetime.utcnow):
        self.db = db
        self.clock = clock

    def create(self, package: Package) -> Package:
        """Insert a new package.

        Raises:
            DuplicateKeyError: If the order reference is already taken.
            StoreError: For any other database failure.
        """
        order_ref = package.order_ref
        try:
            self.db.add(package)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            # Only a clash on order_ref is a duplicate; other constraints are store failures
            if order_ref is not None and self.get_by_order_ref(order_ref) is not None:
                raise DuplicateKeyError("order_reference", order_ref) from e
            logger.error(f"Integrity error creating package {order_ref}: {str(e)}")
            raise StoreError("could not create package") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error creating package {order_ref}: {str(e)}")
            raise StoreError("could not create package") from e

        self._refresh(package)
        return package

    def get_by_id(self, package_id: str) -> Optional[Package]:
        try:
            return self.db.query(Package).filter(Package.id == package_id).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError("could not load package") from e

    def get_by_order_ref(self, order_ref: str) -> Optional[Package]:
        try:
            return self.db.query(Package).filter(Package.order_ref == order_ref).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError("could not load package") from e

    def list(
        self,
        limit: Optional[int] = DEFAULT_LIMIT,
        offset: Optional[int] = 0,
        status: Optional[PackageStatus] = None
    ) -> List[Package]:
        """Packages ordered newest first, optionally filtered by status."""
        limit, offset = clamp_pagination(limit, offset)

        query = self.db.query(Package)
        if status is not None:
            query = query.filter(Package.status == status)

        try:
            return query.order_by(desc(Package.created_at), desc(Package.id)).offset(offset).limit(limit).all()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError("could not list packages") from e

    def update(self, package: Package) -> Package:
        """Persist the mutable fields of a loaded package.

        Raises:
            RecordNotFoundError: If the row was deleted in the meantime.
            StaleRecordError: If another writer updated the row first.
            StoreError: For any other database failure.
        """
        package_id = package.id
        try:
            self.db.commit()
        except StaleDataError as e:
            self.db.rollback()
            if self._exists(package_id):
                raise StaleRecordError(package_id) from e
            raise RecordNotFoundError(package_id) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error updating package {package_id}: {str(e)}")
            raise StoreError("could not update package") from e

        self._refresh(package)
        return package

    def delete(self, package_id: str) -> None:
        """Hard delete a package.

        Raises:
            RecordNotFoundError: If no package has this id.
        """
        try:
            deleted = self.db.query(Package).filter(Package.id == package_id).delete(synchronize_session="fetch")
            if not deleted:
                self.db.rollback()
                raise RecordNotFoundError(package_id)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error deleting package {package_id}: {str(e)}")
            raise StoreError("could not delete package") from e

    def count_by_status(self) -> Dict[str, int]:
        """Totals per status plus the overall total."""
        try:
            rows = self.db.query(
                Package.status,
                func.count(Package.id).label('count')
            ).group_by(Package.status).all()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError("could not count packages") from e

        counts = {status.value.lower(): 0 for status in PackageStatus}
        for status, count in rows:
            counts[PackageStatus(status).value.lower()] = count
        counts["total"] = sum(counts.values())
        return counts

    def find_stale(self, threshold: timedelta) -> List[Package]:
        """WAITING or PICKED packages created before now - threshold."""
        cutoff = self.clock() - threshold
        try:
            return self.db.query(Package).filter(
                Package.status.in_(STALE_CANDIDATE_STATUSES),
                Package.created_at < cutoff
            ).order_by(Package.created_at).all()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError("could not query stale packages") from e

    def _exists(self, package_id: str) -> bool:
        try:
            return self.db.query(Package.id).filter(Package.id == package_id).first() is not None
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError("could not load package") from e

    def _refresh(self, package: Package) -> None:
        """Reload a just-committed package, reporting driver failures as StoreError."""
        try:
            self.db.refresh(package)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error reloading package: {str(e)}")
            raise StoreError("could not reload package") from e
