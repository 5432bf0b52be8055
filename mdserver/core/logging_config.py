import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

# Constants
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_SIZE = 10 * 1024 * 1024  # 10 MB
LOG_BACKUP_COUNT = 5


def setup_logging(log_dir: Optional[Path] = None, debug_mode: bool = False):
    """
    Configure the root logger with a console handler and, when log_dir is
    given, a rotating file handler writing mdserver.log.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if debug_mode else logging.INFO)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(logging.DEBUG if debug_mode else logging.INFO)

    # Avoid duplicate handlers when called twice (reloader, tests)
    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    root_logger.addHandler(console_handler)

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / "mdserver.log"
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=LOG_FILE_SIZE,
            backupCount=LOG_BACKUP_COUNT,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(logging.DEBUG)  # Always capture detailed logs to file
        root_logger.addHandler(file_handler)
        logging.info(f"Logging initialized. Log file: {log_file}")

    # Request lines from the development server are noise at INFO
    logging.getLogger("werkzeug").setLevel(logging.DEBUG if debug_mode else logging.WARNING)
