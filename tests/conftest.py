from collections.abc import Generator
from datetime import datetime, timedelta, timezone
from decimal import Decimal
import os

os.environ.setdefault("LEDGER_DATABASE_URL", "sqlite:///./test_registry_lock_ledger.db")
os.environ.setdefault("REGISTRY_DATABASE_URL", "sqlite:///./test_registry.db")

import pytest  # noqa: E402
from sqlalchemy import delete  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from registry_lock.core.db import LedgerSessionLocal, RegistrySessionLocal, init_db  # noqa: E402
from registry_lock.models.billing_event import BillingEvent  # noqa: E402
from registry_lock.models.domain import Domain  # noqa: E402
from registry_lock.models.history_entry import HistoryEntry  # noqa: E402
from registry_lock.models.registrar import Registrar, RegistrarContact  # noqa: E402
from registry_lock.models.registry_lock import RegistryLock  # noqa: E402
from registry_lock.services.domain_locks import DomainLockService  # noqa: E402

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)
REGISTRAR_ID = "registrar-7"
LOCK_CONTACT = "lock@registrar7.example"
VIEW_CONTACT = "viewer@registrar7.example"
ADMIN_EMAIL = "admin@registry.example"


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def now_utc(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


class SequenceStringGenerator:
    def __init__(self) -> None:
        self.count = 0

    def create_string(self, length: int) -> str:
        self.count += 1
        return f"T{self.count}"


def _clean() -> None:
    with LedgerSessionLocal() as db:
        db.execute(delete(RegistryLock))
        db.commit()
    with RegistrySessionLocal() as db:
        db.execute(delete(BillingEvent))
        db.execute(delete(HistoryEntry))
        db.execute(delete(Domain))
        db.execute(delete(RegistrarContact))
        db.execute(delete(Registrar))
        db.commit()


@pytest.fixture(autouse=True)
def clean_tables() -> Generator[None, None, None]:
    init_db()
    _clean()
    yield
    _clean()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture
def lock_service(clock: FakeClock) -> DomainLockService:
    return DomainLockService(
        clock=clock,
        string_generator=SequenceStringGenerator(),
        lock_expiry=timedelta(hours=1),
        unlock_expiry=timedelta(hours=1),
        server_status_change_cost=Decimal("20.00"),
        currency="USD",
    )


@pytest.fixture
def ledger_db() -> Generator[Session, None, None]:
    with LedgerSessionLocal() as db:
        yield db


@pytest.fixture
def registry_db() -> Generator[Session, None, None]:
    with RegistrySessionLocal() as db:
        yield db


def create_domain(
    domain_name: str = "example.tld",
    repo_id: str = "D1-TLD",
    sponsor: str = REGISTRAR_ID,
    statuses: list[str] | None = None,
) -> None:
    with RegistrySessionLocal() as db:
        db.add(
            Domain(
                repo_id=repo_id,
                domain_name=domain_name,
                tld=domain_name.rsplit(".", 1)[-1],
                current_sponsor_client_id=sponsor,
                status_values=list(statuses or []),
                creation_time=NOW - timedelta(days=30),
            )
        )
        db.commit()


def create_registrar(client_id: str = REGISTRAR_ID, registry_lock_allowed: bool = True) -> None:
    with RegistrySessionLocal() as db:
        db.add(Registrar(client_id=client_id, registry_lock_allowed=registry_lock_allowed))
        db.flush()
        db.add(RegistrarContact(registrar_client_id=client_id, email_address=LOCK_CONTACT, registry_lock_allowed=True))
        db.add(RegistrarContact(registrar_client_id=client_id, email_address=VIEW_CONTACT, registry_lock_allowed=False))
        db.commit()


def load_domain(repo_id: str = "D1-TLD") -> Domain:
    with RegistrySessionLocal(expire_on_commit=False) as db:
        domain = db.get(Domain, repo_id)
        db.expunge(domain)
        return domain


def count_rows(model) -> int:
    session_factory = LedgerSessionLocal if model is RegistryLock else RegistrySessionLocal
    with session_factory() as db:
        return db.query(model).count()
