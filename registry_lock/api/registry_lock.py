import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from registry_lock.core.caller_auth import AuthenticatedUser, get_authenticated_user
from registry_lock.core.db import get_ledger_db, get_registry_db
from registry_lock.schemas.registry_lock import (
    LockActionResponse,
    LockActionResult,
    RegistryLockGetResponse,
    RegistryLockPostRequest,
)
from registry_lock.services.domain_locks import CallerCapability, DomainLockService, get_domain_lock_service
from registry_lock.services.errors import (
    RegistrarAccessDeniedError,
    RegistryLockError,
    RegistryLockNotAllowedError,
)
from registry_lock.services.registry_lock_query import (
    get_lock_status_for_caller,
    get_registrar_for_caller,
    is_registry_lock_allowed,
)

router = APIRouter(tags=["registry-lock"])
logger = logging.getLogger(__name__)


@router.get(
    "/registry-lock-get",
    response_model=RegistryLockGetResponse,
    responses={
        200: {
            "description": "Locked domains of the registrar",
            "content": {
                "application/json": {
                    "examples": {
                        "locks": {
                            "value": {
                                "status": "SUCCESS",
                                "message": "Successful locks retrieval",
                                "results": [
                                    {
                                        "lockEnabledForContact": True,
                                        "email": "contact@registrar.example",
                                        "clientId": "registrar-7",
                                        "locks": [
                                            {
                                                "fullyQualifiedDomainName": "example.tld",
                                                "lockedTime": "2026-01-01T00:00:00+00:00",
                                                "lockedBy": "contact@registrar.example",
                                                "userCanUnlock": True,
                                            }
                                        ],
                                    }
                                ],
                            }
                        },
                    }
                }
            },
        },
        403: {"description": "Caller has no access to the registrar"},
    },
)
def get_registry_locks(
    client_id: str = Query(alias="clientId", min_length=1, max_length=64),
    ledger_db: Session = Depends(get_ledger_db),
    registry_db: Session = Depends(get_registry_db),
    user: AuthenticatedUser = Depends(get_authenticated_user),
) -> RegistryLockGetResponse:
    outcome = "unknown"
    try:
        result = get_lock_status_for_caller(
            ledger_db=ledger_db,
            registry_db=registry_db,
            client_id=client_id,
            user=user,
        )
        outcome = "ok"
        return RegistryLockGetResponse(message="Successful locks retrieval", results=[result])
    except RegistrarAccessDeniedError as exc:
        outcome = "access_denied"
        logger.warning("route_get_registry_locks_access_denied client_id=%s is_admin=%s", client_id, user.is_admin)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden") from exc
    except Exception as exc:
        # Failure details stay in the logs.
        outcome = f"error:{type(exc).__name__}"
        logger.exception("route_get_registry_locks_failed client_id=%s", client_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error",
        ) from exc
    finally:
        logger.info("route_get_registry_locks client_id=%s outcome=%s", client_id, outcome)


@router.post("/registry-lock-post", response_model=LockActionResponse)
def post_registry_lock(
    payload: RegistryLockPostRequest,
    ledger_db: Session = Depends(get_ledger_db),
    registry_db: Session = Depends(get_registry_db),
    user: AuthenticatedUser = Depends(get_authenticated_user),
    lock_service: DomainLockService = Depends(get_domain_lock_service),
) -> LockActionResponse:
    action = "lock" if payload.is_lock else "unlock"
    outcome = "unknown"
    try:
        registrar, contact = get_registrar_for_caller(registry_db, payload.client_id, user)
        if not is_registry_lock_allowed(registrar, contact, user):
            raise RegistryLockNotAllowedError(f"Registry lock not allowed for {user.email} on {payload.client_id}")

        if user.is_admin:
            caller = CallerCapability.admin(registrar.client_id)
        else:
            caller = CallerCapability.registrar_contact(registrar.client_id, user.email)

        if payload.is_lock:
            lock = lock_service.request_lock(ledger_db, registry_db, payload.domain_name, caller)
        else:
            lock = lock_service.request_unlock(ledger_db, registry_db, payload.domain_name, caller)
        outcome = "ok"
        return LockActionResponse(
            message=f"Successful {action}",
            results=[LockActionResult(domain_name=lock.domain_name, action=action)],
        )
    except (RegistrarAccessDeniedError, RegistryLockNotAllowedError) as exc:
        outcome = f"forbidden:{type(exc).__name__}"
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except RegistryLockError as exc:
        outcome = f"rejected:{type(exc).__name__}"
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        outcome = f"error:{type(exc).__name__}"
        logger.exception("route_post_registry_lock_failed client_id=%s", payload.client_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error",
        ) from exc
    finally:
        logger.info(
            "route_post_registry_lock client_id=%s domain_name=%s action=%s outcome=%s",
            payload.client_id,
            payload.domain_name,
            action,
            outcome,
        )


@router.get("/registry-lock-verify", response_model=LockActionResponse)
def verify_registry_lock(
    verification_code: str = Query(alias="lockVerificationCode", min_length=1, max_length=64),
    is_lock: bool = Query(alias="isLock"),
    ledger_db: Session = Depends(get_ledger_db),
    registry_db: Session = Depends(get_registry_db),
    user: AuthenticatedUser = Depends(get_authenticated_user),
    lock_service: DomainLockService = Depends(get_domain_lock_service),
) -> LockActionResponse:
    action = "lock" if is_lock else "unlock"
    caller = CallerCapability(is_admin=user.is_admin)
    outcome = "unknown"
    try:
        if is_lock:
            lock = lock_service.verify_and_apply_lock(ledger_db, registry_db, verification_code, caller)
        else:
            lock = lock_service.verify_and_apply_unlock(ledger_db, registry_db, verification_code, caller)
        outcome = "ok"
        return LockActionResponse(
            message=f"Successful {action} verification",
            results=[LockActionResult(domain_name=lock.domain_name, action=action)],
        )
    except RegistryLockError as exc:
        outcome = f"rejected:{type(exc).__name__}"
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        outcome = f"error:{type(exc).__name__}"
        logger.exception("route_verify_registry_lock_failed action=%s", action)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error",
        ) from exc
    finally:
        logger.info("route_verify_registry_lock action=%s is_admin=%s outcome=%s", action, user.is_admin, outcome)
