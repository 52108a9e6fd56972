import logging
from logging.handlers import RotatingFileHandler
from typing import Optional


def configure_logging(debug_file: Optional[str] = None) -> None:
    logger = logging.getLogger()
    logger.setLevel(logging.INFO)

    fmt = logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s - %(message)s"
    )

    # Console
    ch = logging.StreamHandler()
    ch.setFormatter(fmt)
    ch.setLevel(logging.INFO)
    logger.addHandler(ch)

    if debug_file:
        fh = RotatingFileHandler(debug_file, maxBytes=2_000_000, backupCount=5)
        fh.setFormatter(fmt)
        fh.setLevel(logging.DEBUG)
        logger.addHandler(fh)
        logger.setLevel(logging.DEBUG)

    # One line per bridge request is too chatty at a 1s ping interval
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.INFO)
