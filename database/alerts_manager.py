# database/alerts_manager.py
"""
Manages all database operations for alerts and their acknowledgment.
"""
import datetime
import logging
from .config import DB_LOCK, get_connection
from .exceptions import AlertNotFoundError, AlertAlreadyAcknowledgedError

logger = logging.getLogger(__name__)

_ALERT_SELECT = '''
    SELECT a.id, a.data_id AS reading_id, a.type AS parameter, a.severity, a.message,
           a.created_at, a.acknowledged, a.acknowledged_by, a.acknowledged_at,
           wqd.site_id, ms.name as site_name, u.name as acknowledged_by_name
    FROM alerts a
    JOIN water_quality_data wqd ON a.data_id = wqd.id
    JOIN mining_sites ms ON wqd.site_id = ms.id
    LEFT JOIN users u ON a.acknowledged_by = u.id
'''


def _alert_from_row(row):
    alert = dict(row)
    alert['acknowledged'] = bool(alert['acknowledged'])
    return alert


def get_alert(alert_id):
    """Fetches a single alert with the site of the reading that raised it, or None."""
    with DB_LOCK:
        conn = get_connection()
        row = conn.execute(_ALERT_SELECT + ' WHERE a.id = ?', (alert_id,)).fetchone()
        conn.close()
    return _alert_from_row(row) if row else None


def get_alerts_for_reading(reading_id):
    """Fetches the alerts raised by one reading, oldest first."""
    with DB_LOCK:
        conn = get_connection()
        rows = conn.execute(
            _ALERT_SELECT + ' WHERE a.data_id = ? ORDER BY a.created_at, a.rowid', (reading_id,)
        ).fetchall()
        conn.close()
    return [_alert_from_row(row) for row in rows]


def get_alerts(site_id=None, site_ids=None, severity=None, acknowledged=None,
               start_date=None, end_date=None, limit=100, offset=0):
    """
    Fetches alerts, newest first, with optional filters and pagination.

    Args:
        site_ids (list, optional): Restricts results to these sites (the caller's access list).
        acknowledged (bool, optional): True for acknowledged alerts only, False for open ones.
    Returns:
        tuple: (list of alerts, total number of matching alerts)
    """
    where = " WHERE 1=1"
    params = []
    if site_id:
        where += " AND wqd.site_id = ?"
        params.append(site_id)
    if site_ids is not None:
        where += f" AND wqd.site_id IN ({','.join('?' for _ in site_ids) or 'NULL'})"
        params.extend(site_ids)
    if severity:
        where += " AND a.severity = ?"
        params.append(severity)
    if acknowledged is not None:
        where += " AND a.acknowledged = ?"
        params.append(1 if acknowledged else 0)
    if start_date:
        where += " AND a.created_at >= ?"
        params.append(start_date)
    if end_date:
        where += " AND a.created_at <= ?"
        params.append(end_date)

    with DB_LOCK:
        conn = get_connection()
        rows = conn.execute(
            _ALERT_SELECT + where + " ORDER BY a.created_at DESC LIMIT ? OFFSET ?",
            params + [limit, offset]
        ).fetchall()
        total = conn.execute(f'''
            SELECT COUNT(*) FROM alerts a
            JOIN water_quality_data wqd ON a.data_id = wqd.id
            {where}
        ''', params).fetchone()[0]
        conn.close()
    return [_alert_from_row(row) for row in rows], total


def count_open_alerts(site_id):
    """Counts a site's alerts that have not been acknowledged yet, per severity."""
    with DB_LOCK:
        conn = get_connection()
        rows = conn.execute('''
            SELECT a.severity, COUNT(*) as total
            FROM alerts a
            JOIN water_quality_data wqd ON a.data_id = wqd.id
            WHERE wqd.site_id = ? AND a.acknowledged = 0
            GROUP BY a.severity
        ''', (site_id,)).fetchall()
        conn.close()
    counts = {'low': 0, 'medium': 0, 'high': 0}
    counts.update({row['severity']: row['total'] for row in rows})
    return counts


def acknowledge_alert(alert_id, user_id):
    """
    Marks an alert as acknowledged by a user. This can happen only once.

    Raises:
        AlertNotFoundError: If no alert has this id.
        AlertAlreadyAcknowledgedError: If the alert was acknowledged before.
    """
    timestamp = datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    with DB_LOCK:
        conn = get_connection()
        cursor = conn.execute('''
            UPDATE alerts
            SET acknowledged = 1,
                acknowledged_by = ?,
                acknowledged_at = ?
            WHERE id = ? AND acknowledged = 0
        ''', (user_id, timestamp, alert_id))
        conn.commit()
        updated = cursor.rowcount
        exists = updated or conn.execute('SELECT 1 FROM alerts WHERE id = ?', (alert_id,)).fetchone()
        conn.close()

    if not exists:
        raise AlertNotFoundError(alert_id)
    if not updated:
        raise AlertAlreadyAcknowledgedError(alert_id)
    logger.info("Alert %s acknowledged by user %s.", alert_id, user_id)
