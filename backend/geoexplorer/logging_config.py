import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the package logger.

    Safe to call more than once; an existing handler is reused.
    """
    logger = logging.getLogger("geoexplorer")
    logger.setLevel(level.upper())
    if not any(getattr(h, "_geoexplorer", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._geoexplorer = True
        logger.addHandler(handler)
