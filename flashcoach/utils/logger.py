import logging
import sys

from flashcoach.config import LOG_LEVEL

# -------------------------------------------------------------------
# Logging configuration
# -------------------------------------------------------------------
logger = logging.getLogger("flashcoach")
logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))

handler = logging.StreamHandler(sys.stdout)
handler.setLevel(logging.DEBUG)

formatter = logging.Formatter(
    "%(asctime)s | %(levelname)s | %(message)s",
    "%Y-%m-%d %H:%M:%S"
)

handler.setFormatter(formatter)

# Module may be re-imported under reloaders; keep one handler
if not logger.handlers:
    logger.addHandler(handler)

# Avoid duplicate logs
logger.propagate = False
