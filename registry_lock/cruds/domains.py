from datetime import datetime
import logging

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from registry_lock.models.domain import Domain
from registry_lock.utils.domain_names import normalize_domain_name

logger = logging.getLogger(__name__)


def _active_at(as_of: datetime):
    return (
        Domain.creation_time <= as_of,
        or_(Domain.deletion_time.is_(None), Domain.deletion_time > as_of),
    )


def get_domain_by_name(db: Session, domain_name: str, as_of: datetime) -> Domain | None:
    normalized_name = normalize_domain_name(domain_name)
    query = select(Domain).where(Domain.domain_name == normalized_name, *_active_at(as_of))
    record = db.execute(query).scalar_one_or_none()
    logger.info("crud_get_domain_by_name normalized_name=%s found=%s", normalized_name, record is not None)
    return record


def get_domain_by_repo_id(
    db: Session,
    repo_id: str,
    as_of: datetime,
    for_update: bool = False,
) -> Domain | None:
    query = select(Domain).where(Domain.repo_id == repo_id, *_active_at(as_of))
    if for_update:
        query = query.with_for_update()
    record = db.execute(query).scalar_one_or_none()
    logger.info(
        "crud_get_domain_by_repo_id repo_id=%s for_update=%s found=%s",
        repo_id,
        for_update,
        record is not None,
    )
    return record


def save_domain(db: Session, domain: Domain, commit: bool = True) -> Domain:
    db.add(domain)
    if commit:
        db.commit()
        db.refresh(domain)
    else:
        db.flush()
    logger.info(
        "crud_save_domain repo_id=%s domain_name=%s statuses=%s committed=%s",
        domain.repo_id,
        domain.domain_name,
        ",".join(sorted(domain.statuses)),
        commit,
    )
    return domain
