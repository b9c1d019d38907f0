# database/settings_manager.py
"""
Key/value runtime settings editable by administrators from the dashboard.
Values are stored as text.
"""
from .config import DB_LOCK, get_connection

SESSION_TIMEOUT_KEY = 'session_timeout'


def get_setting(key, default=None):
    """Fetches a single setting's raw text value, or default when it was never set."""
    with DB_LOCK:
        conn = get_connection()
        row = conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
        conn.close()
    return row['value'] if row else default


def update_setting(key, value):
    with DB_LOCK:
        conn = get_connection()
        conn.execute(
            "INSERT INTO settings (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
            (key, str(value))
        )
        conn.commit()
        conn.close()


def get_session_timeout(default_minutes):
    """Session lifetime in minutes. A stored value that is not a positive integer falls back to default_minutes."""
    value = get_setting(SESSION_TIMEOUT_KEY)
    try:
        minutes = int(value)
    except (TypeError, ValueError):
        return default_minutes
    return minutes if minutes > 0 else default_minutes


def set_session_timeout(minutes):
    update_setting(SESSION_TIMEOUT_KEY, int(minutes))
