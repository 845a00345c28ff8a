from datetime import datetime
from decimal import Decimal
import logging

from sqlalchemy.orm import Session

from registry_lock.models.billing_event import BillingEvent

logger = logging.getLogger(__name__)

SERVER_STATUS = "SERVER_STATUS"


def append_billing_event(
    db: Session,
    target_id: str,
    client_id: str,
    cost_amount: Decimal,
    currency: str,
    event_time: datetime,
    history_entry_id: int,
) -> BillingEvent:
    record = BillingEvent(
        reason=SERVER_STATUS,
        target_id=target_id,
        client_id=client_id,
        cost_amount=cost_amount,
        currency=currency,
        event_time=event_time,
        billing_time=event_time,
        history_entry_id=history_entry_id,
    )
    db.add(record)
    db.flush()
    logger.info(
        "crud_append_billing_event target_id=%s client_id=%s cost=%s %s",
        target_id,
        client_id,
        cost_amount,
        currency,
    )
    return record
