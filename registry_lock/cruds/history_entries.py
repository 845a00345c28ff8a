from datetime import datetime
import logging

from sqlalchemy.orm import Session

from registry_lock.models.history_entry import HistoryEntry

logger = logging.getLogger(__name__)

DOMAIN_UPDATE = "DOMAIN_UPDATE"


def append_history_entry(
    db: Session,
    repo_id: str,
    client_id: str,
    by_superuser: bool,
    modification_time: datetime,
    reason: str,
    entry_type: str = DOMAIN_UPDATE,
) -> HistoryEntry:
    record = HistoryEntry(
        repo_id=repo_id,
        client_id=client_id,
        by_superuser=by_superuser,
        requested_by_registrar=not by_superuser,
        type=entry_type,
        modification_time=modification_time,
        reason=reason,
    )
    db.add(record)
    db.flush()
    logger.info(
        "crud_append_history_entry repo_id=%s client_id=%s by_superuser=%s type=%s history_entry_id=%s",
        repo_id,
        client_id,
        by_superuser,
        entry_type,
        record.id,
    )
    return record
