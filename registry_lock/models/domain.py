from datetime import datetime

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from registry_lock.core.db import RegistryBase, UtcDateTime

REGISTRY_LOCK_STATUSES = frozenset(
    {
        "serverDeleteProhibited",
        "serverTransferProhibited",
        "serverUpdateProhibited",
    }
)


class Domain(RegistryBase):
    __tablename__ = "domains"

    repo_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    domain_name: Mapped[str] = mapped_column(String(255), index=True)
    tld: Mapped[str] = mapped_column(String(64))
    current_sponsor_client_id: Mapped[str] = mapped_column(String(64), index=True)
    status_values: Mapped[list[str]] = mapped_column(JSON, default=list)
    creation_time: Mapped[datetime] = mapped_column(UtcDateTime)
    deletion_time: Mapped[datetime | None] = mapped_column(UtcDateTime, nullable=True)

    @property
    def statuses(self) -> frozenset[str]:
        return frozenset(self.status_values or ())

    def set_statuses(self, statuses: frozenset[str] | set[str]) -> None:
        # Reassign so the JSON column is flagged dirty.
        self.status_values = sorted(statuses)
