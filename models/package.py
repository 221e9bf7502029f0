import uuid
import enum
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Integer, Enum
from database.base import Base

class PackageStatus(str, enum.Enum):
    WAITING = "WAITING"
    PICKED = "PICKED"
    HANDED_OVER = "HANDED_OVER"
    EXPIRED = "EXPIRED"

# Statuses a package may move to from each status
ALLOWED_TRANSITIONS = {
    PackageStatus.WAITING: frozenset({PackageStatus.PICKED, PackageStatus.EXPIRED}),
    PackageStatus.PICKED: frozenset({PackageStatus.HANDED_OVER, PackageStatus.EXPIRED}),
    PackageStatus.HANDED_OVER: frozenset(),
    PackageStatus.EXPIRED: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)

# Statuses the expiry sweep looks at
STALE_CANDIDATE_STATUSES = (PackageStatus.WAITING, PackageStatus.PICKED)


def can_transition(current: PackageStatus, new: PackageStatus) -> bool:
    """Return True if a package in ``current`` may move to ``new``"""
    return new in ALLOWED_TRANSITIONS.get(current, frozenset())


class Package(Base):
    __tablename__ = "packages"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    order_ref = Column(String(255), unique=True, nullable=False, index=True)
    driver_code = Column(String(255), nullable=True)
    status = Column(Enum(PackageStatus, name="package_status"), default=PackageStatus.WAITING, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    picked_up_at = Column(DateTime, nullable=True)
    handed_over_at = Column(DateTime, nullable=True)
    expired_at = Column(DateTime, nullable=True)
    version = Column(Integer, nullable=False, default=1)

    # Rejects writes based on a stale read instead of overwriting them
    __mapper_args__ = {"version_id_col": version}

    # Nullable timestamp stamped when the package first enters each status
    STATUS_TIMESTAMP_FIELDS = {
        PackageStatus.PICKED: "picked_up_at",
        PackageStatus.HANDED_OVER: "handed_over_at",
        PackageStatus.EXPIRED: "expired_at",
    }

    def __repr__(self):
        return f"<Package(id={self.id}, order_ref={self.order_ref}, status={self.status})>"
