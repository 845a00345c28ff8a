from datetime import datetime
from decimal import Decimal

from sqlalchemy import ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from registry_lock.core.db import RegistryBase, UtcDateTime


class BillingEvent(RegistryBase):
    __tablename__ = "billing_events"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    reason: Mapped[str] = mapped_column(String(32))
    target_id: Mapped[str] = mapped_column(String(255), index=True)
    client_id: Mapped[str] = mapped_column(String(64), index=True)
    cost_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    currency: Mapped[str] = mapped_column(String(3))
    event_time: Mapped[datetime] = mapped_column(UtcDateTime)
    billing_time: Mapped[datetime] = mapped_column(UtcDateTime)
    history_entry_id: Mapped[int] = mapped_column(ForeignKey("history_entries.id"))
