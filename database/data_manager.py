# database/data_manager.py
"""
Manages the insertion and retrieval of water quality readings.
"""
import json
import logging
import pandas as pd
from datetime import datetime, timedelta
from .config import DB_LOCK, get_connection
from .alerts_manager import get_alerts_for_reading

logger = logging.getLogger(__name__)


def _reading_from_row(row):
    reading = dict(row)
    reading['parameters'] = json.loads(reading['parameters'])
    reading['parameter_status'] = json.loads(reading['parameter_status'])
    return reading


def insert_reading(reading, status, parameter_status, alerts):
    """
    Stores a new reading together with the alerts it triggered, in a single
    transaction: either the reading and all of its alerts are written, or nothing is.

    Args:
        reading (dict): Reading fields, including 'id', 'site_id', 'collected_by' and 'parameters'.
        status (str): The overall status of the reading.
        parameter_status (dict): {parameter: status} for each evaluated parameter.
        alerts (list[dict]): Alert records from water_quality.generate_alerts().
    """
    created_at = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    with DB_LOCK:
        conn = get_connection()
        try:
            conn.execute("""
                INSERT INTO water_quality_data (
                    id, site_id, collected_by, timestamp, latitude, longitude,
                    parameters, parameter_status, pathogens, status, notes, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                reading['id'], reading['site_id'], reading['collected_by'], reading['timestamp'],
                reading.get('latitude'), reading.get('longitude'),
                json.dumps(reading['parameters']), json.dumps(parameter_status),
                reading.get('pathogens'), status, reading.get('notes'), created_at
            ))
            conn.executemany("""
                INSERT INTO alerts (id, data_id, type, severity, message, created_at, acknowledged)
                VALUES (?, ?, ?, ?, ?, ?, 0)
            """, [
                (alert['id'], reading['id'], alert['parameter'], alert['severity'],
                 alert['message'], alert['created_at'])
                for alert in alerts
            ])
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
    logger.info("Stored reading %s for site %s with status '%s' and %d alert(s).",
                reading['id'], reading['site_id'], status, len(alerts))
    return reading['id']


def get_reading(reading_id):
    """Fetches a single reading with its site name, collector name and alerts, or None."""
    with DB_LOCK:
        conn = get_connection()
        row = conn.execute("""
            SELECT wqd.*, ms.name as site_name, u.name as collector_name
            FROM water_quality_data wqd
            JOIN mining_sites ms ON wqd.site_id = ms.id
            LEFT JOIN users u ON wqd.collected_by = u.id
            WHERE wqd.id = ?
        """, (reading_id,)).fetchone()
        conn.close()
    if not row:
        return None

    reading = _reading_from_row(row)
    reading['alerts'] = get_alerts_for_reading(reading_id)
    return reading


def _reading_filters(site_id=None, site_ids=None, status=None, start_date=None, end_date=None):
    """Builds the WHERE clause shared by the list and count queries."""
    clause = " WHERE 1=1"
    params = []
    if site_id:
        clause += " AND wqd.site_id = ?"
        params.append(site_id)
    if site_ids is not None:
        clause += f" AND wqd.site_id IN ({','.join('?' for _ in site_ids) or 'NULL'})"
        params.extend(site_ids)
    if status:
        clause += " AND wqd.status = ?"
        params.append(status)
    if start_date:
        clause += " AND wqd.timestamp >= ?"
        params.append(start_date)
    if end_date:
        clause += " AND wqd.timestamp <= ?"
        params.append(end_date)
    return clause, params


def get_readings(site_id=None, site_ids=None, status=None, start_date=None, end_date=None,
                 limit=100, offset=0):
    """
    Fetches readings, newest first, with optional filters and pagination.

    Args:
        site_ids (list, optional): Restricts results to these sites (the caller's access list).
    Returns:
        tuple: (list of readings, total number of matching readings)
    """
    where, params = _reading_filters(site_id, site_ids, status, start_date, end_date)
    with DB_LOCK:
        conn = get_connection()
        rows = conn.execute(f"""
            SELECT wqd.*, ms.name as site_name, u.name as collector_name
            FROM water_quality_data wqd
            JOIN mining_sites ms ON wqd.site_id = ms.id
            LEFT JOIN users u ON wqd.collected_by = u.id
            {where}
            ORDER BY wqd.timestamp DESC
            LIMIT ? OFFSET ?
        """, params + [limit, offset]).fetchall()
        total = conn.execute(
            f"SELECT COUNT(*) FROM water_quality_data wqd {where}", params
        ).fetchone()[0]
        conn.close()
    return [_reading_from_row(row) for row in rows], total


def get_latest_reading(site_id):
    """Fetches the most recent reading of a site, or None."""
    readings, _ = get_readings(site_id=site_id, limit=1)
    return readings[0] if readings else None


def get_status_counts(site_id, start_date=None):
    """Counts a site's readings per overall status: {'normal': n, 'warning': n, 'critical': n}."""
    where, params = _reading_filters(site_id=site_id, start_date=start_date)
    with DB_LOCK:
        conn = get_connection()
        rows = conn.execute(
            f"SELECT wqd.status, COUNT(*) as total FROM water_quality_data wqd {where} GROUP BY wqd.status",
            params
        ).fetchall()
        conn.close()
    counts = {'normal': 0, 'warning': 0, 'critical': 0}
    counts.update({row['status']: row['total'] for row in rows})
    return counts


def get_parameter_timeseries(site_id, parameter, days=30, end_time=None):
    """
    Fetches one parameter's values for a site over the last X days as a
    DataFrame indexed by timestamp, with a single 'value' column.
    Readings where the parameter was not measured are left out.
    """
    end_date = pd.to_datetime(end_time) if end_time else datetime.now()
    start_date = end_date - timedelta(days=days)

    with DB_LOCK:
        conn = get_connection()
        try:
            df = pd.read_sql_query(
                """SELECT timestamp, parameters FROM water_quality_data
                   WHERE site_id = ? AND timestamp BETWEEN ? AND ?
                   ORDER BY timestamp ASC""",
                conn,
                params=(site_id, start_date.strftime("%Y-%m-%d %H:%M:%S"), end_date.strftime("%Y-%m-%d %H:%M:%S"))
            )
        finally:
            conn.close()

    if df.empty:
        return pd.DataFrame(columns=['value'], index=pd.DatetimeIndex([], name='timestamp'))

    df['value'] = df['parameters'].map(lambda raw: json.loads(raw).get(parameter))
    df['timestamp'] = pd.to_datetime(df['timestamp'], errors='coerce')
    df = df.dropna(subset=['timestamp', 'value'])
    df['value'] = df['value'].astype(float)
    return df.set_index('timestamp')[['value']]
