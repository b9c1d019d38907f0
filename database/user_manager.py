# database/user_manager.py
"""
Manages all database operations related to users, their site access, and authentication.
"""
import sqlite3
import hashlib
import os
import secrets
import string
import uuid
import datetime
from .config import DB_LOCK, get_connection
from .exceptions import DuplicateUserError

# --- Password Hashing Functions ---

def hash_password(password, salt=None):
    """
    Hashes a password with a salt. Generates a new salt if one isn't provided.
    Returns the hashed password and the salt used.
    """
    if salt is None:
        salt = os.urandom(16).hex()
    salted_password = password.encode('utf-8') + salt.encode('utf-8')
    hashed_password = hashlib.sha256(salted_password).hexdigest()
    return hashed_password, salt

def verify_password(stored_hashed_password, provided_password, salt):
    """
    Verifies a provided password against a stored hash and salt.
    """
    hashed_password, _ = hash_password(provided_password, salt)
    return secrets.compare_digest(hashed_password, stored_hashed_password)

def generate_secure_password(length=12):
    """
    Generates a random alphanumeric password for temporary use.
    """
    alphabet = string.ascii_letters + string.digits
    return ''.join(secrets.choice(alphabet) for i in range(length))

# --- User Management Functions ---

def _public_user(row, site_access):
    user = dict(row)
    user.pop('hashed_password', None)
    user.pop('salt', None)
    user['site_access'] = site_access
    return user

def get_site_access(user_id):
    """Returns the ids of the sites a user has been granted access to."""
    with DB_LOCK:
        conn = get_connection()
        rows = conn.execute(
            'SELECT site_id FROM site_access WHERE user_id = ? ORDER BY site_id', (user_id,)
        ).fetchall()
        conn.close()
    return [row['site_id'] for row in rows]

def get_user_for_login(email):
    """
    Retrieves the user record, including the password hash and salt, for the login process.
    Only active users can log in.
    """
    with DB_LOCK:
        conn = get_connection()
        row = conn.execute(
            "SELECT * FROM users WHERE email = ? AND status = 'Active'", (email,)
        ).fetchone()
        conn.close()
    return dict(row) if row else None

def get_user_by_id(user_id):
    """Fetches a single user with their site access, without credentials."""
    with DB_LOCK:
        conn = get_connection()
        row = conn.execute('SELECT * FROM users WHERE id = ?', (user_id,)).fetchone()
        conn.close()
    if not row:
        return None
    return _public_user(row, get_site_access(user_id))

def get_all_users():
    """Fetches every user with their site access, ordered by name."""
    with DB_LOCK:
        conn = get_connection()
        rows = conn.execute('SELECT * FROM users ORDER BY name').fetchall()
        conn.close()
    return [_public_user(row, get_site_access(row['id'])) for row in rows]

def update_last_login(user_id):
    """
    Updates the 'last_login' timestamp for a specific user to the current time.
    """
    current_timestamp = datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    with DB_LOCK:
        conn = get_connection()
        conn.execute("UPDATE users SET last_login = ? WHERE id = ?", (current_timestamp, user_id))
        conn.commit()
        conn.close()

def add_user(name, email, password, role, site_ids=(), avatar=None):
    """
    Adds a new user and grants access to the given sites, returning the new user's ID.
    """
    hashed_pass, salt = hash_password(password)
    user_id = str(uuid.uuid4())
    created_at = datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    with DB_LOCK:
        conn = get_connection()
        try:
            conn.execute(
                """INSERT INTO users (id, name, email, role, avatar, hashed_password, salt, status, created_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, 'Active', ?)""",
                (user_id, name, email, role, avatar, hashed_pass, salt, created_at)
            )
            conn.executemany(
                'INSERT INTO site_access (user_id, site_id) VALUES (?, ?)',
                [(user_id, site_id) for site_id in site_ids]
            )
            conn.commit()
        except sqlite3.IntegrityError as e:
            conn.rollback()
            if 'users.email' in str(e):
                raise DuplicateUserError(email) from e
            raise
        finally:
            conn.close()
    return user_id

def set_site_access(user_id, site_ids):
    """Replaces a user's site access list."""
    with DB_LOCK:
        conn = get_connection()
        conn.execute('DELETE FROM site_access WHERE user_id = ?', (user_id,))
        conn.executemany(
            'INSERT INTO site_access (user_id, site_id) VALUES (?, ?)',
            [(user_id, site_id) for site_id in site_ids]
        )
        conn.commit()
        conn.close()

def set_user_status(user_id, status):
    """Activates or deactivates a user account ('Active' / 'Inactive')."""
    with DB_LOCK:
        conn = get_connection()
        conn.execute("UPDATE users SET status = ? WHERE id = ?", (status, user_id))
        conn.commit()
        conn.close()
