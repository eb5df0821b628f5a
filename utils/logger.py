import sys
import logging
from logging.handlers import RotatingFileHandler

import config

_configured = False


def setup_logging() -> None:
    """Configure root logging once: rotating file plus stdout."""
    global _configured
    if _configured:
        return

    # Configure logging with rotation
    log_handler = RotatingFileHandler(config.LOG_FILE, maxBytes=5 * 1024 * 1024, backupCount=3)  # 5MB per file, keep 3 backups
    log_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))

    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        handlers=[
            log_handler,
            logging.StreamHandler(sys.stdout)
        ]
    )
    _configured = True

