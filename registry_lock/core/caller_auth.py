from dataclasses import dataclass
import logging

from fastapi import Header, HTTPException, status

from registry_lock.core.settings import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthenticatedUser:
    email: str
    is_admin: bool


def get_authenticated_user(x_authenticated_user: str | None = Header(default=None)) -> AuthenticatedUser:
    email = (x_authenticated_user or "").strip()
    if not email:
        logger.info("caller_auth_checked auth_ok=%s reason=missing_header", False)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-Authenticated-User header",
        )

    is_admin = email in settings.admin_emails
    logger.info("caller_auth_checked auth_ok=%s is_admin=%s", True, is_admin)
    return AuthenticatedUser(email=email, is_admin=is_admin)
