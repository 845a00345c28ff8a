import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from registry_lock.models.registry_lock import RegistryLock

logger = logging.getLogger(__name__)


def get_by_verification_code(db: Session, verification_code: str) -> RegistryLock | None:
    query = (
        select(RegistryLock)
        .where(RegistryLock.verification_code == verification_code)
        .order_by(RegistryLock.revision_id.desc())
        .limit(1)
    )
    record = db.execute(query).scalar_one_or_none()
    logger.info(
        "crud_get_by_verification_code found=%s revision_id=%s",
        record is not None,
        record.revision_id if record is not None else None,
    )
    return record


def get_most_recent_by_repo_id(db: Session, repo_id: str) -> RegistryLock | None:
    query = (
        select(RegistryLock)
        .where(RegistryLock.repo_id == repo_id)
        .order_by(RegistryLock.revision_id.desc())
        .limit(1)
    )
    record = db.execute(query).scalar_one_or_none()
    logger.info("crud_get_most_recent_by_repo_id repo_id=%s found=%s", repo_id, record is not None)
    return record


def get_most_recent_verified_lock_by_repo_id(db: Session, repo_id: str) -> RegistryLock | None:
    query = (
        select(RegistryLock)
        .where(
            RegistryLock.repo_id == repo_id,
            RegistryLock.lock_completed_at.is_not(None),
        )
        .order_by(RegistryLock.revision_id.desc())
        .limit(1)
    )
    record = db.execute(query).scalar_one_or_none()
    logger.info(
        "crud_get_most_recent_verified_lock_by_repo_id repo_id=%s found=%s",
        repo_id,
        record is not None,
    )
    return record


def get_locked_domains_by_registrar_id(db: Session, registrar_id: str) -> list[RegistryLock]:
    # Older revisions keep an empty unlock timestamp, so only the newest revision per repo id counts.
    current = (
        select(RegistryLock.repo_id, func.max(RegistryLock.revision_id).label("revision_id"))
        .group_by(RegistryLock.repo_id)
        .subquery()
    )
    query = (
        select(RegistryLock)
        .join(current, RegistryLock.revision_id == current.c.revision_id)
        .where(
            RegistryLock.registrar_id == registrar_id,
            RegistryLock.lock_completed_at.is_not(None),
            RegistryLock.unlock_completed_at.is_(None),
        )
    )
    records = list(db.execute(query).scalars().all())
    logger.info("crud_get_locked_domains_by_registrar_id registrar_id=%s count=%s", registrar_id, len(records))
    return records


def save_registry_lock(db: Session, lock: RegistryLock, commit: bool = True) -> RegistryLock:
    if lock is None:
        raise ValueError("Null registry lock cannot be saved")
    if lock.revision_id is not None:
        raise ValueError("Registry lock revisions are immutable; use new_revision()")

    db.add(lock)
    if commit:
        db.commit()
        db.refresh(lock)
    else:
        db.flush()
    logger.info(
        "crud_save_registry_lock repo_id=%s revision_id=%s committed=%s",
        lock.repo_id,
        lock.revision_id,
        commit,
    )
    return lock
