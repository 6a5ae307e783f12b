import logging
import os
import sys
import json
from logging.handlers import RotatingFileHandler
from pathlib import Path

# --- Constants ---
LOGGER_NAME = 'jadwa'
LOG_DIR = Path(os.environ.get('JADWA_LOG_DIR', Path(__file__).resolve().parent.parent / 'logs'))
LOG_FILE_NAME = 'app.log'
MAX_BYTES = 10 * 1024 * 1024  # 10 MB
BACKUP_COUNT = 5

class JsonFormatter(logging.Formatter):
    """
    Formats log records as a JSON string.
    """
    def format(self, record):
        log_object = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_object['exc_info'] = self.formatException(record.exc_info)

        # Arabic prompts and degraded content stay readable in the file
        return json.dumps(log_object, ensure_ascii=False)

def setup_logging(log_level=None, log_dir=None):
    """
    Configures the root logger for an application entry point.
    - Console: Human-readable plain text.
    - File: Machine-readable JSON, with rotation.

    Importing the library never calls this; hosts that already configure
    logging simply receive records from the 'jadwa' logger.
    """
    if log_level is None:
        log_level = os.environ.get('LOG_LEVEL', 'INFO').upper()
    log_dir = Path(log_dir) if log_dir else LOG_DIR

    log_dir.mkdir(parents=True, exist_ok=True)

    # --- Root Logger Configuration ---
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # --- Formatters ---
    plain_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    json_formatter = JsonFormatter()

    # --- Console Handler ---
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(plain_formatter)

    # --- Rotating File Handler (JSON) ---
    file_handler = RotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        maxBytes=MAX_BYTES,
        backupCount=BACKUP_COUNT,
        encoding='utf-8'
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(json_formatter)

    # --- Add Handlers to Root Logger ---
    # Clear existing handlers to avoid duplicates
    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)

    # httpx logs every request at INFO, including URLs with query strings
    logging.getLogger('httpx').setLevel(logging.WARNING)

    return root_logger

# --- Library Logger ---
# Records propagate to whatever the host configured; silent when nothing is
logger = logging.getLogger(LOGGER_NAME)
logger.addHandler(logging.NullHandler())
