# database/config.py
"""
Centralized configuration for the database.
"""
import os
import sqlite3
import threading

# --- Centralized Configuration ---

# The file path for the SQLite database. Overridable at startup through set_db_path().
DB_PATH = os.environ.get('EAU_VIGILANCE_DB', 'eau_vigilance.db')

# A thread lock to prevent race conditions during concurrent database writes.
DB_LOCK = threading.Lock()


def set_db_path(path):
    """Points every database function at a different SQLite file."""
    global DB_PATH
    DB_PATH = path


def get_connection():
    """Opens a connection to the current database with name-based row access and foreign keys on."""
    conn = sqlite3.connect(DB_PATH, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute('PRAGMA foreign_keys = ON')
    return conn
