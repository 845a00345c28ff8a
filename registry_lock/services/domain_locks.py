from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
import logging

from sqlalchemy.orm import Session

from registry_lock.core.clock import Clock, SystemClock
from registry_lock.core.settings import settings
from registry_lock.core.tokens import Base58StringGenerator, StringGenerator
from registry_lock.cruds.billing_events import append_billing_event
from registry_lock.cruds.domains import get_domain_by_name, get_domain_by_repo_id, save_domain
from registry_lock.cruds.history_entries import append_history_entry
from registry_lock.cruds.registry_locks import (
    get_by_verification_code,
    get_most_recent_by_repo_id,
    get_most_recent_verified_lock_by_repo_id,
    save_registry_lock,
)
from registry_lock.models.domain import REGISTRY_LOCK_STATUSES, Domain
from registry_lock.models.registry_lock import RegistryLock
from registry_lock.services.errors import (
    AdminLockRequiresAdminError,
    AdminUnlockRequiresAdminError,
    ConflictingPendingActionError,
    DomainAlreadyLockedError,
    DomainAlreadyUnlockedError,
    DomainNotLockedError,
    InvalidVerificationCodeError,
    NoLockOnRecordError,
    RegistrarMismatchError,
    RequestExpiredError,
    UnknownDomainError,
)

logger = logging.getLogger(__name__)

LOCK_STATUS_CHANGE_REASON = "Lock or unlock of a domain through a RegistryLock operation"


@dataclass(frozen=True)
class CallerCapability:
    is_admin: bool
    registrar_id: str | None = None
    registrar_poc_id: str | None = None

    @classmethod
    def admin(cls, registrar_id: str | None = None) -> "CallerCapability":
        return cls(is_admin=True, registrar_id=registrar_id)

    @classmethod
    def registrar_contact(cls, registrar_id: str, registrar_poc_id: str) -> "CallerCapability":
        return cls(is_admin=False, registrar_id=registrar_id, registrar_poc_id=registrar_poc_id)

    def can_complete(self, lock: RegistryLock) -> bool:
        return self.is_admin or not lock.is_superuser


class DomainLockService:
    def __init__(
        self,
        clock: Clock,
        string_generator: StringGenerator,
        lock_expiry: timedelta = timedelta(hours=1),
        unlock_expiry: timedelta = timedelta(hours=1),
        verification_code_length: int = 32,
        server_status_change_cost: Decimal = Decimal("20.00"),
        currency: str = "USD",
        tld_server_status_change_costs: dict[str, Decimal] | None = None,
    ) -> None:
        self.clock = clock
        self.string_generator = string_generator
        self.lock_expiry = lock_expiry
        self.unlock_expiry = unlock_expiry
        self.verification_code_length = verification_code_length
        self.server_status_change_cost = server_status_change_cost
        self.currency = currency
        self.tld_server_status_change_costs = dict(tld_server_status_change_costs or {})

    def request_lock(
        self, ledger_db: Session, registry_db: Session, domain_name: str, caller: CallerCapability
    ) -> RegistryLock:
        self._require_registrar_id(caller)
        now = self.clock.now_utc()
        domain = self._get_domain(registry_db, domain_name, now)
        self._verify_domain_not_locked(domain)

        # Multiple pending actions are not allowed.
        previous = get_most_recent_by_repo_id(ledger_db, domain.repo_id)
        if previous is not None and not (
            previous.is_lock_request_expired(now, self.lock_expiry) or previous.unlock_completed_at is not None
        ):
            raise ConflictingPendingActionError(
                f"A pending or completed lock action already exists for {previous.domain_name}"
            )

        lock = RegistryLock(
            verification_code=self._new_verification_code(),
            domain_name=domain.domain_name,
            repo_id=domain.repo_id,
            registrar_id=caller.registrar_id,
            registrar_poc_id=None if caller.is_admin else caller.registrar_poc_id,
            is_superuser=caller.is_admin,
            lock_requested_at=now,
        )
        saved = save_registry_lock(ledger_db, lock)
        logger.info(
            "service_request_lock domain_name=%s registrar_id=%s is_admin=%s revision_id=%s",
            domain.domain_name,
            caller.registrar_id,
            caller.is_admin,
            saved.revision_id,
        )
        return saved

    def request_unlock(
        self, ledger_db: Session, registry_db: Session, domain_name: str, caller: CallerCapability
    ) -> RegistryLock:
        self._require_registrar_id(caller)
        now = self.clock.now_utc()
        domain = self._get_domain(registry_db, domain_name, now)
        verified = get_most_recent_verified_lock_by_repo_id(ledger_db, domain.repo_id)
        try:
            if caller.is_admin:
                # Admins can always unlock, even when the ledger and the domain disagree.
                if verified is not None:
                    base = verified
                else:
                    base = self._synthesize_completed_lock(ledger_db, domain, caller, now)
            else:
                self._verify_domain_locked(domain)
                if verified is None:
                    raise NoLockOnRecordError(f"No lock object for domain {domain.domain_name}")
                if not verified.is_locked:
                    raise DomainNotLockedError(f"Lock object for domain {domain.domain_name} is not currently locked")
                pending_unlock = verified.unlock_requested_at is not None and not verified.is_unlock_request_expired(
                    now, self.unlock_expiry
                )
                if pending_unlock:
                    raise ConflictingPendingActionError(
                        f"A pending unlock action already exists for {domain.domain_name}"
                    )
                if verified.registrar_id != caller.registrar_id:
                    raise RegistrarMismatchError(f"Lock object does not have registrar ID {caller.registrar_id}")
                if verified.is_superuser:
                    raise AdminUnlockRequiresAdminError(
                        f"Non-admin user cannot unlock admin-locked domain {domain.domain_name}"
                    )
                base = verified

            unlock = base.new_revision(
                verification_code=self._new_verification_code(),
                is_superuser=caller.is_admin,
                registrar_id=caller.registrar_id,
                unlock_requested_at=now,
                unlock_completed_at=None,
            )
            save_registry_lock(ledger_db, unlock, commit=False)
            ledger_db.commit()
        except Exception:
            ledger_db.rollback()
            raise

        ledger_db.refresh(unlock)
        logger.info(
            "service_request_unlock domain_name=%s registrar_id=%s is_admin=%s revision_id=%s synthesized=%s",
            domain.domain_name,
            caller.registrar_id,
            caller.is_admin,
            unlock.revision_id,
            verified is None,
        )
        return unlock

    def verify_and_apply_lock(
        self, ledger_db: Session, registry_db: Session, verification_code: str, caller: CallerCapability
    ) -> RegistryLock:
        now = self.clock.now_utc()
        try:
            lock = self._get_by_verification_code(ledger_db, verification_code)
            if lock.lock_completed_at is not None:
                raise DomainAlreadyLockedError(f"Domain {lock.domain_name} is already locked")
            if lock.is_lock_request_expired(now, self.lock_expiry):
                raise RequestExpiredError("The pending lock has expired; please try again")
            if not caller.can_complete(lock):
                raise AdminLockRequiresAdminError("Non-admin user cannot complete admin lock")

            # Ledger revision is flushed here and committed only after the registry commit.
            new_lock = save_registry_lock(ledger_db, lock.new_revision(lock_completed_at=now), commit=False)
            self._apply_lock_statuses(registry_db, new_lock, now)
            ledger_db.commit()
        except Exception:
            registry_db.rollback()
            ledger_db.rollback()
            raise

        ledger_db.refresh(new_lock)
        logger.info(
            "service_verify_and_apply_lock domain_name=%s revision_id=%s is_admin=%s",
            new_lock.domain_name,
            new_lock.revision_id,
            caller.is_admin,
        )
        return new_lock

    def verify_and_apply_unlock(
        self, ledger_db: Session, registry_db: Session, verification_code: str, caller: CallerCapability
    ) -> RegistryLock:
        now = self.clock.now_utc()
        try:
            lock = self._get_by_verification_code(ledger_db, verification_code)
            if lock.unlock_requested_at is None:
                raise InvalidVerificationCodeError("Verification code does not belong to an unlock request")
            if lock.unlock_completed_at is not None:
                raise DomainAlreadyUnlockedError(f"Domain {lock.domain_name} is already unlocked")
            if lock.is_unlock_request_expired(now, self.unlock_expiry):
                raise RequestExpiredError("The pending unlock has expired; please try again")
            if not caller.can_complete(lock):
                raise AdminUnlockRequiresAdminError("Non-admin user cannot complete admin unlock")

            new_lock = save_registry_lock(ledger_db, lock.new_revision(unlock_completed_at=now), commit=False)
            self._remove_lock_statuses(registry_db, new_lock, caller, now)
            ledger_db.commit()
        except Exception:
            registry_db.rollback()
            ledger_db.rollback()
            raise

        ledger_db.refresh(new_lock)
        logger.info(
            "service_verify_and_apply_unlock domain_name=%s revision_id=%s is_admin=%s",
            new_lock.domain_name,
            new_lock.revision_id,
            caller.is_admin,
        )
        return new_lock

    def server_status_change_cost_for(self, tld: str) -> Decimal:
        return self.tld_server_status_change_costs.get(tld, self.server_status_change_cost)

    @staticmethod
    def _require_registrar_id(caller: CallerCapability) -> None:
        if not caller.registrar_id:
            raise ValueError("A registrar ID is required to request a lock or unlock")

    def _new_verification_code(self) -> str:
        return self.string_generator.create_string(self.verification_code_length)

    def _synthesize_completed_lock(
        self, ledger_db: Session, domain: Domain, caller: CallerCapability, now: datetime
    ) -> RegistryLock:
        lock = RegistryLock(
            verification_code=self._new_verification_code(),
            domain_name=domain.domain_name,
            repo_id=domain.repo_id,
            registrar_id=caller.registrar_id,
            registrar_poc_id=None,
            is_superuser=True,
            lock_requested_at=now,
            lock_completed_at=now,
        )
        logger.info("service_synthesize_completed_lock domain_name=%s", domain.domain_name)
        return save_registry_lock(ledger_db, lock, commit=False)

    def _apply_lock_statuses(self, registry_db: Session, lock: RegistryLock, now: datetime) -> None:
        domain = self._get_domain_for_update(registry_db, lock, now)
        self._verify_domain_not_locked(domain)
        domain.set_statuses(domain.statuses | REGISTRY_LOCK_STATUSES)
        self._save_entities(registry_db, domain, lock, now)

    def _remove_lock_statuses(
        self, registry_db: Session, lock: RegistryLock, caller: CallerCapability, now: datetime
    ) -> None:
        domain = self._get_domain_for_update(registry_db, lock, now)
        if not caller.is_admin:
            self._verify_domain_locked(domain)
        domain.set_statuses(domain.statuses - REGISTRY_LOCK_STATUSES)
        self._save_entities(registry_db, domain, lock, now)

    def _save_entities(self, registry_db: Session, domain: Domain, lock: RegistryLock, now: datetime) -> None:
        save_domain(registry_db, domain, commit=False)
        history_entry = append_history_entry(
            registry_db,
            repo_id=domain.repo_id,
            client_id=domain.current_sponsor_client_id,
            by_superuser=lock.is_superuser,
            modification_time=now,
            reason=LOCK_STATUS_CHANGE_REASON,
        )
        # Admin actions are not billed.
        if not lock.is_superuser:
            append_billing_event(
                registry_db,
                target_id=domain.domain_name,
                client_id=domain.current_sponsor_client_id,
                cost_amount=self.server_status_change_cost_for(domain.tld),
                currency=self.currency,
                event_time=now,
                history_entry_id=history_entry.id,
            )
        registry_db.commit()

    @staticmethod
    def _get_domain(registry_db: Session, domain_name: str, now: datetime) -> Domain:
        domain = get_domain_by_name(registry_db, domain_name, as_of=now)
        if domain is None:
            raise UnknownDomainError(f"Unknown domain {domain_name}")
        return domain

    @staticmethod
    def _get_domain_for_update(registry_db: Session, lock: RegistryLock, now: datetime) -> Domain:
        domain = get_domain_by_repo_id(registry_db, lock.repo_id, as_of=now, for_update=True)
        if domain is None:
            raise UnknownDomainError(f"Unknown domain {lock.domain_name}")
        return domain

    @staticmethod
    def _get_by_verification_code(ledger_db: Session, verification_code: str) -> RegistryLock:
        lock = get_by_verification_code(ledger_db, verification_code)
        if lock is None:
            raise InvalidVerificationCodeError("Invalid verification code")
        return lock

    @staticmethod
    def _verify_domain_not_locked(domain: Domain) -> None:
        if domain.statuses >= REGISTRY_LOCK_STATUSES:
            raise DomainAlreadyLockedError(f"Domain {domain.domain_name} is already locked")

    @staticmethod
    def _verify_domain_locked(domain: Domain) -> None:
        if not domain.statuses & REGISTRY_LOCK_STATUSES:
            raise DomainNotLockedError(f"Domain {domain.domain_name} is already unlocked")


def get_domain_lock_service() -> DomainLockService:
    service = DomainLockService(
        clock=SystemClock(),
        string_generator=Base58StringGenerator(),
        lock_expiry=timedelta(minutes=settings.lock_expiry_minutes),
        unlock_expiry=timedelta(minutes=settings.unlock_expiry_minutes),
        verification_code_length=settings.verification_code_length,
        server_status_change_cost=settings.server_status_change_cost,
        currency=settings.server_status_change_currency,
        tld_server_status_change_costs=settings.tld_server_status_change_costs,
    )
    logger.info(
        "service_get_domain_lock_service lock_expiry_minutes=%s unlock_expiry_minutes=%s",
        settings.lock_expiry_minutes,
        settings.unlock_expiry_minutes,
    )
    return service
