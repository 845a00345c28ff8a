from collections.abc import Generator
from datetime import datetime, timezone
import logging

from sqlalchemy import DateTime, create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.types import TypeDecorator

from registry_lock.core.settings import settings

# The lock ledger and the registry (domains, history, billing, registrars) are
# separate databases, each with its own transactions.
LedgerBase = declarative_base()
RegistryBase = declarative_base()
logger = logging.getLogger(__name__)


class UtcDateTime(TypeDecorator):
    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect) -> datetime | None:
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value: datetime | None, dialect) -> datetime | None:
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


def _engine_kwargs(database_url: str) -> dict:
    kwargs: dict = {"future": True}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
    return kwargs


ledger_engine = create_engine(settings.ledger_database_url, **_engine_kwargs(settings.ledger_database_url))
registry_engine = create_engine(settings.registry_database_url, **_engine_kwargs(settings.registry_database_url))

LedgerSessionLocal = sessionmaker(bind=ledger_engine, autoflush=False, autocommit=False, future=True)
RegistrySessionLocal = sessionmaker(bind=registry_engine, autoflush=False, autocommit=False, future=True)


def get_ledger_db() -> Generator[Session, None, None]:
    db = LedgerSessionLocal()
    try:
        yield db
    finally:
        logger.info("db_session_closed database=ledger")
        db.close()


def get_registry_db() -> Generator[Session, None, None]:
    db = RegistrySessionLocal()
    try:
        yield db
    finally:
        logger.info("db_session_closed database=registry")
        db.close()


def init_db() -> None:
    # Import models before create_all so metadata is populated.
    from registry_lock.models import registry_lock  # noqa: F401
    from registry_lock.models import domain  # noqa: F401
    from registry_lock.models import history_entry  # noqa: F401
    from registry_lock.models import billing_event  # noqa: F401
    from registry_lock.models import registrar  # noqa: F401

    LedgerBase.metadata.create_all(bind=ledger_engine)
    RegistryBase.metadata.create_all(bind=registry_engine)
    logger.info("db_initialized")
