# database/site_manager.py
"""
Manages mining sites and their per-parameter water quality thresholds.
"""
import datetime

from threshold_config import DEFAULT_THRESHOLDS
from .config import DB_LOCK, get_connection
from .exceptions import SiteNotFoundError


def _thresholds_by_site(conn, site_ids):
    """Builds {site_id: {parameter: {'min': .., 'max': ..}}} for the given sites."""
    thresholds = {site_id: {} for site_id in site_ids}
    if not site_ids:
        return thresholds
    placeholders = ','.join('?' for _ in site_ids)
    rows = conn.execute(
        f'SELECT site_id, parameter, min_value, max_value FROM thresholds WHERE site_id IN ({placeholders})',
        list(site_ids)
    ).fetchall()
    for row in rows:
        thresholds[row['site_id']][row['parameter']] = {'min': row['min_value'], 'max': row['max_value']}
    return thresholds


def _site_from_row(row, thresholds):
    site = dict(row)
    site['active_monitoring'] = bool(site['active_monitoring'])
    site['thresholds'] = thresholds
    return site


def get_all_sites(site_ids=None):
    """
    Fetches mining sites with their thresholds.

    Args:
        site_ids (list, optional): Restricts the result to these sites. None returns every site.
    """
    with DB_LOCK:
        conn = get_connection()
        if site_ids is None:
            rows = conn.execute('SELECT * FROM mining_sites ORDER BY name').fetchall()
        elif not site_ids:
            rows = []
        else:
            placeholders = ','.join('?' for _ in site_ids)
            rows = conn.execute(
                f'SELECT * FROM mining_sites WHERE id IN ({placeholders}) ORDER BY name', list(site_ids)
            ).fetchall()
        thresholds = _thresholds_by_site(conn, [row['id'] for row in rows])
        conn.close()
    return [_site_from_row(row, thresholds[row['id']]) for row in rows]


def get_site(site_id):
    """Fetches a single site with its thresholds, or None."""
    with DB_LOCK:
        conn = get_connection()
        row = conn.execute('SELECT * FROM mining_sites WHERE id = ?', (site_id,)).fetchone()
        if not row:
            conn.close()
            return None
        thresholds = _thresholds_by_site(conn, [site_id])
        conn.close()
    return _site_from_row(row, thresholds[site_id])


def get_site_thresholds(site_id):
    """
    Returns a site's threshold configuration keyed by parameter name.
    Raises SiteNotFoundError for an unknown site.
    """
    site = get_site(site_id)
    if site is None:
        raise SiteNotFoundError(site_id)
    return site['thresholds']


def set_threshold(site_id, parameter, min_value, max_value):
    """Creates or replaces the threshold for one parameter of a site."""
    timestamp = datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    with DB_LOCK:
        conn = get_connection()
        if not conn.execute('SELECT 1 FROM mining_sites WHERE id = ?', (site_id,)).fetchone():
            conn.close()
            raise SiteNotFoundError(site_id)
        conn.execute('''
            INSERT INTO thresholds (site_id, parameter, min_value, max_value, updated_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(site_id, parameter)
            DO UPDATE SET min_value = excluded.min_value,
                          max_value = excluded.max_value,
                          updated_at = excluded.updated_at
        ''', (site_id, parameter, min_value, max_value, timestamp))
        conn.commit()
        conn.close()


def delete_threshold(site_id, parameter):
    """Removes a parameter from a site's thresholds so it is no longer evaluated."""
    with DB_LOCK:
        conn = get_connection()
        cursor = conn.execute(
            'DELETE FROM thresholds WHERE site_id = ? AND parameter = ?', (site_id, parameter)
        )
        conn.commit()
        conn.close()
    return cursor.rowcount > 0


def restore_default_thresholds(site_id):
    """Deletes all of a site's thresholds and re-inserts the default set."""
    timestamp = datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    with DB_LOCK:
        conn = get_connection()
        if not conn.execute('SELECT 1 FROM mining_sites WHERE id = ?', (site_id,)).fetchone():
            conn.close()
            raise SiteNotFoundError(site_id)
        conn.execute('DELETE FROM thresholds WHERE site_id = ?', (site_id,))
        conn.executemany("""
            INSERT INTO thresholds (site_id, parameter, min_value, max_value, updated_at)
            VALUES (?, ?, ?, ?, ?)
        """, [
            (site_id, parameter, bounds['min'], bounds['max'], timestamp)
            for parameter, bounds in DEFAULT_THRESHOLDS.items()
        ])
        conn.commit()
        conn.close()
