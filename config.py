# config.py
"""
Application-wide configuration. Every value can be overridden from the
environment so the same code runs on a laptop, a server and in tests.
"""
import os
import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

# --- Flask ---
SECRET_KEY = os.environ.get('EAU_VIGILANCE_SECRET_KEY', 'change-me-in-production')
DEFAULT_SESSION_TIMEOUT_MINUTES = 60

# --- Database ---
DB_PATH = os.environ.get('EAU_VIGILANCE_DB', os.path.join(BASE_DIR, 'eau_vigilance.db'))

# --- Pagination ---
DEFAULT_PAGE_LIMIT = 100
MAX_PAGE_LIMIT = 1000

# --- Logging ---
LOG_LEVEL = os.environ.get('EAU_VIGILANCE_LOG_LEVEL', 'INFO')
LOG_FILE = os.environ.get('EAU_VIGILANCE_LOG_FILE')


def setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE, backup_count=7):
    """
    Configures the root logger once: a console handler, plus a file handler
    rotated at midnight when a log file is configured.
    """
    formatter = logging.Formatter(
        fmt="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    if root_logger.handlers:
        return

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            filename=log_file,
            when='midnight',
            interval=1,
            backupCount=backup_count,
            encoding='utf-8',
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
