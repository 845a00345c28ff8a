import logging

logger = logging.getLogger(__name__)


def normalize_domain_name(name: str) -> str:
    normalized = name.strip().lower().rstrip(".")
    logger.info("normalize_domain_name called original=%r normalized=%r", name, normalized)
    return normalized
