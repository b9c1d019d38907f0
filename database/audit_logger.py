# database/audit_logger.py
"""
Handles all database operations for the user activity log.
"""
import json
from datetime import datetime
from .config import DB_LOCK, get_connection

def add_activity_log(user_id, action_type, resource_type, resource_id, status, ip_address, details=None):
    """
    Adds a new entry to the activity log.

    Args:
        user_id (str or None): The ID of the user performing the action (None for anonymous attempts).
        action_type (str): What was done (e.g., 'LOGIN', 'CREATE', 'ACKNOWLEDGE').
        resource_type (str): The kind of object affected (e.g., 'water_quality_data', 'alerts').
        resource_id (str or None): The affected object's ID.
        status (str): The outcome of the action ('Success' or 'Failure').
        ip_address (str): The originating IP address.
        details (dict or str, optional): Extra details; dictionaries are stored as JSON.
    """
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    details_text = json.dumps(details) if isinstance(details, dict) else details

    with DB_LOCK:
        conn = get_connection()
        conn.execute(
            """INSERT INTO activity_logs (created_at, user_id, action_type, resource_type, resource_id, status, ip_address, details)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
            (timestamp, user_id, action_type, resource_type, resource_id, status, ip_address, details_text)
        )
        conn.commit()
        conn.close()

def get_activity_logs(user_filter=None, action_filter=None, limit=200):
    """
    Retrieves activity log entries, newest first, with optional filters for user and action.
    Joins with the users table to include the user's name.
    """
    query = """
        SELECT l.created_at, l.action_type, l.resource_type, l.resource_id, l.status,
               l.ip_address, l.details, COALESCE(u.name, 'Anonymous') as user_name
        FROM activity_logs l
        LEFT JOIN users u ON l.user_id = u.id
        WHERE 1=1
    """
    params = []

    if user_filter:
        query += " AND (u.email LIKE ? OR u.name LIKE ?)"
        params.extend([f"%{user_filter}%", f"%{user_filter}%"])
    if action_filter:
        query += " AND l.action_type LIKE ?"
        params.append(f"%{action_filter}%")

    query += " ORDER BY l.id DESC LIMIT ?"
    params.append(limit)

    with DB_LOCK:
        conn = get_connection()
        rows = conn.execute(query, params).fetchall()
        conn.close()
    return [dict(row) for row in rows]
