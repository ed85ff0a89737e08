import logging

logger = logging.getLogger("fbadmin")


def warn(message: str) -> None:
    logger.warning(message)
