# database/__init__.py
"""
This file makes the database functions available at the package level,
allowing for cleaner imports in other parts of the application.
"""

# --- Core & Setup ---
from .config import DB_LOCK, get_connection, set_db_path
from .setup import create_tables
from .exceptions import (
    AlertAlreadyAcknowledgedError,
    AlertNotFoundError,
    DuplicateUserError,
    RecordNotFoundError,
    SiteNotFoundError,
)

# --- Readings ---
from .data_manager import (
    get_latest_reading,
    get_parameter_timeseries,
    get_reading,
    get_readings,
    get_status_counts,
    insert_reading,
)

# --- Sites & Thresholds ---
from .site_manager import (
    delete_threshold,
    get_all_sites,
    get_site,
    get_site_thresholds,
    restore_default_thresholds,
    set_threshold,
)

# --- User & Auth Management ---
from .user_manager import (
    add_user,
    generate_secure_password,
    get_all_users,
    get_site_access,
    get_user_by_id,
    get_user_for_login,
    hash_password,
    set_site_access,
    set_user_status,
    update_last_login,
    verify_password,
)

# --- Alerts ---
from .alerts_manager import (
    acknowledge_alert,
    count_open_alerts,
    get_alert,
    get_alerts,
    get_alerts_for_reading,
)

# --- System ---
from .audit_logger import add_activity_log, get_activity_logs
from .settings_manager import get_session_timeout, get_setting, set_session_timeout, update_setting
