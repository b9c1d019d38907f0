# database/setup.py
"""
Handles the initial setup of the database schema and default data.
"""
import logging
from datetime import datetime

from threshold_config import DEFAULT_THRESHOLDS
from .config import DB_LOCK, get_connection

logger = logging.getLogger(__name__)

# Mining sites created on first start so thresholds and data entry work out of the box.
DEFAULT_SITES = [
    ('site-1', 'Kédougou Gold Mine', 12.5503, -12.1726,
     'Main gold mining operation in Kédougou region', 1),
    ('site-2', 'Tambacounda Mine', 13.7702, -13.6672,
     'Secondary mining site with mixed ore extraction', 1),
    ('site-3', 'Saraya Extraction Site', 12.8421, -11.7864,
     'Newer extraction operation focusing on sustainable practices', 0),
]

DEFAULT_SETTINGS = [
    ('session_timeout', '60'),
]


def create_tables():
    """
    Creates all necessary tables for the application if they don't already exist,
    then seeds the default settings and mining sites on an empty database.
    This function defines the entire database schema and its initial state.
    """
    with DB_LOCK:
        conn = get_connection()
        cursor = conn.cursor()

        # Table 1: User accounts
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                email TEXT UNIQUE NOT NULL,
                role TEXT NOT NULL,
                avatar TEXT,
                hashed_password TEXT NOT NULL,
                salt TEXT NOT NULL,
                status TEXT DEFAULT 'Active',
                last_login TEXT,
                created_at TEXT NOT NULL
            )
        ''')

        # Table 2: Monitored mining sites
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS mining_sites (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                latitude REAL NOT NULL,
                longitude REAL NOT NULL,
                description TEXT,
                active_monitoring INTEGER DEFAULT 1,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        ''')

        # Table 3: Which users may see which sites
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS site_access (
                user_id TEXT NOT NULL,
                site_id TEXT NOT NULL,
                PRIMARY KEY (user_id, site_id),
                FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE CASCADE,
                FOREIGN KEY (site_id) REFERENCES mining_sites (id) ON DELETE CASCADE
            )
        ''')

        # Table 4: Per-site, per-parameter thresholds. NULL means unbounded.
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS thresholds (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                site_id TEXT NOT NULL,
                parameter TEXT NOT NULL,
                min_value REAL,
                max_value REAL,
                updated_at TEXT NOT NULL,
                UNIQUE(site_id, parameter),
                FOREIGN KEY (site_id) REFERENCES mining_sites (id) ON DELETE CASCADE
            )
        ''')

        # Table 5: Submitted readings. Parameter values are stored as a JSON object.
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS water_quality_data (
                id TEXT PRIMARY KEY,
                site_id TEXT NOT NULL,
                collected_by TEXT NOT NULL,
                timestamp TEXT NOT NULL,
                latitude REAL,
                longitude REAL,
                parameters TEXT NOT NULL,
                parameter_status TEXT NOT NULL,
                pathogens TEXT,
                status TEXT NOT NULL,
                notes TEXT,
                created_at TEXT NOT NULL,
                FOREIGN KEY (site_id) REFERENCES mining_sites (id),
                FOREIGN KEY (collected_by) REFERENCES users (id)
            )
        ''')

        # Table 6: Alerts raised by out-of-range readings
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS alerts (
                id TEXT PRIMARY KEY,
                data_id TEXT NOT NULL,
                type TEXT NOT NULL,
                severity TEXT NOT NULL,
                message TEXT NOT NULL,
                created_at TEXT NOT NULL,
                acknowledged INTEGER NOT NULL DEFAULT 0,
                acknowledged_by TEXT,
                acknowledged_at TEXT,
                FOREIGN KEY (data_id) REFERENCES water_quality_data (id),
                FOREIGN KEY (acknowledged_by) REFERENCES users (id)
            )
        ''')

        # Table 7: User activity log
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS activity_logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                created_at TEXT NOT NULL,
                user_id TEXT,
                action_type TEXT NOT NULL,
                resource_type TEXT NOT NULL,
                resource_id TEXT,
                details TEXT,
                status TEXT,
                ip_address TEXT
            )
        ''')

        # Table 8: System-wide settings (key-value store)
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value TEXT
            )
        ''')

        cursor.execute('CREATE INDEX IF NOT EXISTS idx_data_site_time ON water_quality_data (site_id, timestamp)')
        cursor.execute('CREATE INDEX IF NOT EXISTS idx_alerts_data ON alerts (data_id)')

        # --- Default data ---
        cursor.executemany('INSERT OR IGNORE INTO settings (key, value) VALUES (?, ?)', DEFAULT_SETTINGS)

        site_count = cursor.execute('SELECT COUNT(*) FROM mining_sites').fetchone()[0]
        if site_count == 0:
            now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            cursor.executemany('''
                INSERT INTO mining_sites (id, name, latitude, longitude, description, active_monitoring, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            ''', [site + (now, now) for site in DEFAULT_SITES])
            cursor.executemany('''
                INSERT INTO thresholds (site_id, parameter, min_value, max_value, updated_at)
                VALUES (?, ?, ?, ?, ?)
            ''', [
                (site[0], parameter, bounds['min'], bounds['max'], now)
                for site in DEFAULT_SITES
                for parameter, bounds in DEFAULT_THRESHOLDS.items()
            ])
            logger.info("Seeded %d default mining site(s) with default thresholds.", len(DEFAULT_SITES))

        conn.commit()
        conn.close()
