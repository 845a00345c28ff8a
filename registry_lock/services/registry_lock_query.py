import logging

from sqlalchemy.orm import Session

from registry_lock.core.caller_auth import AuthenticatedUser
from registry_lock.cruds.registrars import get_registrar, get_registrar_contact
from registry_lock.cruds.registry_locks import get_locked_domains_by_registrar_id
from registry_lock.models.registrar import Registrar, RegistrarContact
from registry_lock.models.registry_lock import RegistryLock
from registry_lock.schemas.registry_lock import LockView, RegistryLockStatus
from registry_lock.services.errors import RegistrarAccessDeniedError, RegistryLockNotAllowedError

logger = logging.getLogger(__name__)

ADMIN_LOCKED_BY = "admin"


def get_registrar_for_caller(
    registry_db: Session,
    client_id: str,
    user: AuthenticatedUser,
) -> tuple[Registrar, RegistrarContact | None]:
    registrar = get_registrar(registry_db, client_id)
    if registrar is None:
        raise RegistrarAccessDeniedError(f"Registrar {client_id} not found")

    contact = get_registrar_contact(registry_db, client_id, user.email)
    if contact is None and not user.is_admin:
        raise RegistrarAccessDeniedError(f"{user.email} doesn't have access to registrar {client_id}")
    logger.info(
        "service_get_registrar_for_caller client_id=%s is_admin=%s is_contact=%s",
        client_id,
        user.is_admin,
        contact is not None,
    )
    return registrar, contact


def is_registry_lock_allowed(registrar: Registrar, contact: RegistrarContact | None, user: AuthenticatedUser) -> bool:
    if user.is_admin:
        return True
    return registrar.registry_lock_allowed and contact is not None and contact.registry_lock_allowed


def lock_to_view(lock: RegistryLock, is_admin: bool) -> LockView:
    return LockView(
        domain_name=lock.domain_name,
        locked_time=lock.lock_completed_at.isoformat() if lock.lock_completed_at is not None else "",
        locked_by=ADMIN_LOCKED_BY if lock.is_superuser else lock.registrar_poc_id,
        user_can_unlock=is_admin or not lock.is_superuser,
    )


def get_lock_status_for_caller(
    ledger_db: Session,
    registry_db: Session,
    client_id: str,
    user: AuthenticatedUser,
) -> RegistryLockStatus:
    registrar, contact = get_registrar_for_caller(registry_db, client_id, user)
    if not user.is_admin and not registrar.registry_lock_allowed:
        raise RegistryLockNotAllowedError("Registry lock not allowed for this registrar")

    lock_enabled = is_registry_lock_allowed(registrar, contact, user)
    locks = [
        lock_to_view(lock, user.is_admin)
        for lock in get_locked_domains_by_registrar_id(ledger_db, registrar.client_id)
    ]
    logger.info(
        "service_get_lock_status_for_caller client_id=%s lock_enabled=%s locks=%s",
        registrar.client_id,
        lock_enabled,
        len(locks),
    )
    return RegistryLockStatus(
        lock_enabled_for_contact=lock_enabled,
        email=user.email,
        client_id=registrar.client_id,
        locks=locks,
    )
