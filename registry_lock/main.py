import logging

from fastapi import FastAPI

from registry_lock.api.registry_lock import router as registry_lock_router
from registry_lock.core.db import init_db
from registry_lock.core.settings import settings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


app = FastAPI(
    title="Registry Lock",
    version="0.1.0",
)

app.include_router(registry_lock_router)


@app.on_event("startup")
def on_startup() -> None:
    init_db()
    logger.info(
        "startup_completed env=%s lock_expiry_minutes=%s unlock_expiry_minutes=%s",
        settings.app_env,
        settings.lock_expiry_minutes,
        settings.unlock_expiry_minutes,
    )


@app.get("/health")
def health() -> dict[str, str]:
    payload = {"status": "ok", "env": settings.app_env}
    logger.info("health_requested env=%s", settings.app_env)
    return payload
