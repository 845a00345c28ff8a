import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from registry_lock.models.registrar import Registrar, RegistrarContact

logger = logging.getLogger(__name__)


def get_registrar(db: Session, client_id: str) -> Registrar | None:
    record = db.get(Registrar, client_id)
    logger.info("crud_get_registrar client_id=%s found=%s", client_id, record is not None)
    return record


def get_registrar_contact(db: Session, client_id: str, email_address: str) -> RegistrarContact | None:
    query = select(RegistrarContact).where(
        RegistrarContact.registrar_client_id == client_id,
        RegistrarContact.email_address == email_address,
    )
    record = db.execute(query).scalar_one_or_none()
    logger.info("crud_get_registrar_contact client_id=%s found=%s", client_id, record is not None)
    return record
