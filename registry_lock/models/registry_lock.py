from datetime import datetime, timedelta

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from registry_lock.core.db import LedgerBase, UtcDateTime

_REVISION_FIELDS = (
    "repo_id",
    "domain_name",
    "registrar_id",
    "registrar_poc_id",
    "verification_code",
    "is_superuser",
    "lock_requested_at",
    "lock_completed_at",
    "unlock_requested_at",
    "unlock_completed_at",
)


# Rows are never updated in place; the highest revision_id per repo_id is current.
class RegistryLock(LedgerBase):
    __tablename__ = "registry_locks"

    revision_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    repo_id: Mapped[str] = mapped_column(String(64), index=True)
    domain_name: Mapped[str] = mapped_column(String(255), index=True)
    registrar_id: Mapped[str] = mapped_column(String(64), index=True)
    registrar_poc_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    verification_code: Mapped[str] = mapped_column(String(64), index=True)
    is_superuser: Mapped[bool] = mapped_column(Boolean, default=False)
    lock_requested_at: Mapped[datetime | None] = mapped_column(UtcDateTime, nullable=True)
    lock_completed_at: Mapped[datetime | None] = mapped_column(UtcDateTime, nullable=True)
    unlock_requested_at: Mapped[datetime | None] = mapped_column(UtcDateTime, nullable=True)
    unlock_completed_at: Mapped[datetime | None] = mapped_column(UtcDateTime, nullable=True)

    @property
    def is_locked(self) -> bool:
        return self.lock_completed_at is not None and self.unlock_completed_at is None

    def is_lock_request_expired(self, now: datetime, window: timedelta) -> bool:
        if self.lock_completed_at is not None or self.lock_requested_at is None:
            return False
        return now - self.lock_requested_at > window

    def is_unlock_request_expired(self, now: datetime, window: timedelta) -> bool:
        if self.unlock_completed_at is not None or self.unlock_requested_at is None:
            return False
        return now - self.unlock_requested_at > window

    def new_revision(self, **changes) -> "RegistryLock":
        values = {field: getattr(self, field) for field in _REVISION_FIELDS}
        unknown = set(changes) - set(_REVISION_FIELDS)
        if unknown:
            raise TypeError(f"Unknown registry lock fields: {sorted(unknown)}")
        values.update(changes)
        return RegistryLock(**values)
