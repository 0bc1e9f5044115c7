import logging

from app.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging() -> None:
    """Configure the root logger once, at application start-up."""
    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT)
