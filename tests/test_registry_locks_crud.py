from datetime import timedelta

import pytest

from conftest import NOW
from registry_lock.cruds.registry_locks import (
    get_by_verification_code,
    get_locked_domains_by_registrar_id,
    get_most_recent_by_repo_id,
    get_most_recent_verified_lock_by_repo_id,
    save_registry_lock,
)
from registry_lock.models.registry_lock import RegistryLock


def _pending_lock(repo_id: str = "D1-TLD", code: str = "code-1", registrar_id: str = "registrar-7") -> RegistryLock:
    return RegistryLock(
        repo_id=repo_id,
        domain_name=f"{repo_id.lower()}.tld",
        registrar_id=registrar_id,
        registrar_poc_id="lock@registrar7.example",
        verification_code=code,
        is_superuser=False,
        lock_requested_at=NOW,
    )


def test_get_by_verification_code_returns_newest_revision(ledger_db) -> None:
    pending = save_registry_lock(ledger_db, _pending_lock())
    verified = save_registry_lock(ledger_db, pending.new_revision(lock_completed_at=NOW))

    record = get_by_verification_code(ledger_db, "code-1")

    assert record is not None
    assert record.revision_id == verified.revision_id
    assert record.lock_completed_at == NOW
    assert get_by_verification_code(ledger_db, "unknown") is None


def test_get_most_recent_by_repo_id_ignores_other_domains(ledger_db) -> None:
    first = save_registry_lock(ledger_db, _pending_lock(code="code-1"))
    save_registry_lock(ledger_db, _pending_lock(repo_id="D2-TLD", code="code-2"))

    record = get_most_recent_by_repo_id(ledger_db, "D1-TLD")

    assert record is not None
    assert record.revision_id == first.revision_id
    assert get_most_recent_by_repo_id(ledger_db, "D3-TLD") is None


def test_get_most_recent_verified_lock_skips_pending_requests(ledger_db) -> None:
    pending = save_registry_lock(ledger_db, _pending_lock(code="code-1"))
    verified = save_registry_lock(ledger_db, pending.new_revision(lock_completed_at=NOW))
    save_registry_lock(ledger_db, _pending_lock(code="code-2"))

    record = get_most_recent_verified_lock_by_repo_id(ledger_db, "D1-TLD")

    assert record is not None
    assert record.revision_id == verified.revision_id
    assert get_most_recent_by_repo_id(ledger_db, "D1-TLD").verification_code == "code-2"


def test_get_locked_domains_by_registrar_id_uses_current_revision(ledger_db) -> None:
    first = save_registry_lock(ledger_db, _pending_lock(code="code-1"))
    locked = save_registry_lock(ledger_db, first.new_revision(lock_completed_at=NOW))
    unlock_requested = save_registry_lock(
        ledger_db,
        locked.new_revision(verification_code="code-2", unlock_requested_at=NOW + timedelta(minutes=1)),
    )
    other = save_registry_lock(ledger_db, _pending_lock(repo_id="D2-TLD", code="code-3"))
    save_registry_lock(ledger_db, other.new_revision(lock_completed_at=NOW))
    foreign = save_registry_lock(ledger_db, _pending_lock(repo_id="D3-TLD", code="code-4", registrar_id="registrar-9"))
    save_registry_lock(ledger_db, foreign.new_revision(lock_completed_at=NOW))

    active = get_locked_domains_by_registrar_id(ledger_db, "registrar-7")
    assert sorted(lock.repo_id for lock in active) == ["D1-TLD", "D2-TLD"]

    save_registry_lock(ledger_db, unlock_requested.new_revision(unlock_completed_at=NOW + timedelta(minutes=2)))

    active = get_locked_domains_by_registrar_id(ledger_db, "registrar-7")
    assert [lock.repo_id for lock in active] == ["D2-TLD"]


def test_save_registry_lock_rejects_none_and_persisted_rows(ledger_db) -> None:
    with pytest.raises(ValueError):
        save_registry_lock(ledger_db, None)

    saved = save_registry_lock(ledger_db, _pending_lock())
    with pytest.raises(ValueError):
        save_registry_lock(ledger_db, saved)


def test_save_registry_lock_without_commit_is_rolled_back_with_caller(ledger_db) -> None:
    save_registry_lock(ledger_db, _pending_lock(), commit=False)
    assert get_by_verification_code(ledger_db, "code-1") is not None

    ledger_db.rollback()

    assert get_by_verification_code(ledger_db, "code-1") is None


def test_new_revision_copies_fields_and_rejects_unknown_ones() -> None:
    original = _pending_lock()

    revision = original.new_revision(lock_completed_at=NOW)

    assert revision.revision_id is None
    assert revision.verification_code == original.verification_code
    assert revision.lock_requested_at == NOW
    assert revision.lock_completed_at == NOW
    assert original.lock_completed_at is None
    with pytest.raises(TypeError):
        original.new_revision(revision_id=5)


def test_request_expiry_predicates() -> None:
    lock = _pending_lock()
    window = timedelta(hours=1)

    assert lock.is_lock_request_expired(NOW + window, window) is False
    assert lock.is_lock_request_expired(NOW + window + timedelta(microseconds=1), window) is True
    assert lock.is_unlock_request_expired(NOW + 2 * window, window) is False

    completed = lock.new_revision(lock_completed_at=NOW, unlock_requested_at=NOW)
    assert completed.is_lock_request_expired(NOW + 2 * window, window) is False
    assert completed.is_unlock_request_expired(NOW + 2 * window, window) is True
    assert completed.is_locked is True
