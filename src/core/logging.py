"""Process-wide logging setup."""
import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Configure the root logger once at application start-up.

    Modules log through ``logging.getLogger(__name__)``; this only decides
    level and format. Calling it again is a no-op apart from the level.
    """
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    logging.getLogger().setLevel(level.upper())
    # httpx logs every request at INFO, which drowns out application logs
    logging.getLogger("httpx").setLevel(logging.WARNING)
