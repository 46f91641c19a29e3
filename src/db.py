"""SQLite candidate store: the authoritative candidate records."""

import json
import logging
import os
import sqlite3
from datetime import datetime
from typing import Iterable, Optional

from src import config
from src.candidates import Candidate

logger = logging.getLogger(__name__)

# Columns an update may write
UPDATABLE_COLUMNS = {
    'email',
    'phone',
    'personal_email',
    'personal_mobile',
    'enrichment_source',
    'enrichment_tier',
    'enriched_at',
    'enrichment_needed',
    'tier',
    'unified_score',
    'icebreaker',
    'email_subject',
    'email_body',
    'sms_message',
}


def _connect() -> sqlite3.Connection:
    os.makedirs(os.path.dirname(config.DB_PATH) or ".", exist_ok=True)
    conn = sqlite3.connect(config.DB_PATH)
    conn.row_factory = sqlite3.Row
    return conn


def init_candidate_db() -> None:
    """Create the candidates table if needed."""
    conn = _connect()
    try:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS candidates (
                id                  TEXT PRIMARY KEY,
                first_name          TEXT,
                last_name           TEXT,
                specialty           TEXT,
                city                TEXT,
                state               TEXT,
                email               TEXT,
                phone               TEXT,
                personal_email      TEXT,
                personal_mobile     TEXT,
                enrichment_source   TEXT,
                enrichment_tier     TEXT,
                enriched_at         TEXT,
                enrichment_needed   INTEGER DEFAULT 1,
                tier                INTEGER,
                unified_score       TEXT,
                icebreaker          TEXT,
                talking_points_json TEXT DEFAULT '[]',
                email_subject       TEXT,
                email_body          TEXT,
                sms_message         TEXT,
                updated_at          TEXT
            )
            """
        )
        conn.commit()
    finally:
        conn.close()


def _row_to_candidate(row: sqlite3.Row) -> Candidate:
    data = dict(row)
    data['talking_points'] = json.loads(data.pop('talking_points_json', None) or '[]')
    return Candidate.from_dict(data)


def upsert_candidate(candidate: Candidate) -> None:
    """Insert or fully replace a candidate record."""
    conn = _connect()
    try:
        conn.execute(
            """
            INSERT OR REPLACE INTO candidates (
                id, first_name, last_name, specialty, city, state,
                email, phone, personal_email, personal_mobile,
                enrichment_source, enrichment_tier, enriched_at, enrichment_needed,
                tier, unified_score, icebreaker, talking_points_json,
                email_subject, email_body, sms_message, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                candidate.id,
                candidate.first_name,
                candidate.last_name,
                candidate.specialty,
                candidate.city,
                candidate.state,
                candidate.email,
                candidate.phone,
                candidate.personal_email,
                candidate.personal_mobile,
                candidate.enrichment_source,
                candidate.enrichment_tier,
                candidate.enriched_at,
                0 if candidate.is_contact_ready else 1,
                candidate.tier,
                candidate.unified_score,
                candidate.icebreaker,
                json.dumps(candidate.talking_points or []),
                candidate.email_subject,
                candidate.email_body,
                candidate.sms_message,
                datetime.utcnow().isoformat(),
            ),
        )
        conn.commit()
    finally:
        conn.close()


def get_candidate(candidate_id: str) -> Optional[Candidate]:
    """Get a single candidate by ID."""
    conn = _connect()
    try:
        row = conn.execute(
            "SELECT * FROM candidates WHERE id = ?", (candidate_id,)
        ).fetchone()
        return _row_to_candidate(row) if row else None
    finally:
        conn.close()


def get_candidates_by_ids(candidate_ids: Iterable[str]) -> dict[str, Candidate]:
    """Get stored records for exactly these IDs. Missing IDs are absent from the result."""
    ids = list(dict.fromkeys(candidate_ids))
    if not ids:
        return {}

    conn = _connect()
    try:
        placeholders = ", ".join("?" for _ in ids)
        rows = conn.execute(
            f"SELECT * FROM candidates WHERE id IN ({placeholders})", ids
        ).fetchall()
        return {row['id']: _row_to_candidate(row) for row in rows}
    finally:
        conn.close()


def update_candidate(candidate_id: str, updates: dict) -> bool:
    """
    Update fields on a stored candidate.

    Returns:
        True if a row was updated, False if no candidate has this ID

    Raises:
        ValueError: if an update names a column that can't be written
        sqlite3.Error: if the write itself fails
    """
    bad = set(updates) - UPDATABLE_COLUMNS
    if bad:
        raise ValueError(f"Cannot update columns: {', '.join(sorted(bad))}")
    if not updates:
        return False

    assignments = [f"{key} = ?" for key in updates]
    values = list(updates.values())
    assignments.append("updated_at = ?")
    values.append(datetime.utcnow().isoformat())
    values.append(candidate_id)

    conn = _connect()
    try:
        cursor = conn.execute(
            f"UPDATE candidates SET {', '.join(assignments)} WHERE id = ?",
            values,
        )
        conn.commit()
        return cursor.rowcount > 0
    finally:
        conn.close()


def check_health() -> bool:
    """Lightweight reachability check against the store."""
    try:
        conn = _connect()
    except (sqlite3.Error, OSError) as exc:
        logger.error("Candidate store unreachable: %s", exc)
        return False
    try:
        conn.execute("SELECT 1 FROM candidates LIMIT 1").fetchone()
        return True
    except sqlite3.Error as exc:
        logger.error("Candidate store health check failed: %s", exc)
        return False
    finally:
        conn.close()


def _to_int(value) -> Optional[int]:
    try:
        return int(value) if value not in (None, '') else None
    except ValueError:
        return None


def import_candidates_from_csv(csv_path: str) -> int:
    """
    Load candidates into the store from a CSV file.

    Expected columns: candidate_id, first_name, last_name, specialty, city,
    state, email, phone, personal_email, personal_mobile, tier, unified_score,
    icebreaker, talking_points (separated by "|")
    (only candidate_id, first_name and last_name are required)
    """
    import csv

    init_candidate_db()
    count = 0

    with open(csv_path, 'r', encoding='utf-8-sig') as f:
        reader = csv.DictReader(f)
        missing = [c for c in ('candidate_id', 'first_name', 'last_name') if c not in (reader.fieldnames or [])]
        if missing:
            raise ValueError(f"Missing required columns: {', '.join(missing)}")

        for row in reader:
            if not (row.get('candidate_id') or '').strip():
                continue
            points = [p.strip() for p in (row.get('talking_points') or '').split('|') if p.strip()]
            upsert_candidate(Candidate(
                id=row['candidate_id'].strip(),
                first_name=(row.get('first_name') or '').strip(),
                last_name=(row.get('last_name') or '').strip(),
                specialty=(row.get('specialty') or '').strip(),
                city=(row.get('city') or '').strip(),
                state=(row.get('state') or '').strip(),
                email=(row.get('email') or '').strip() or None,
                phone=(row.get('phone') or '').strip() or None,
                personal_email=(row.get('personal_email') or '').strip() or None,
                personal_mobile=(row.get('personal_mobile') or '').strip() or None,
                tier=_to_int(row.get('tier')),
                unified_score=(row.get('unified_score') or '').strip() or None,
                icebreaker=(row.get('icebreaker') or '').strip() or None,
                talking_points=points,
            ))
            count += 1

    logger.info("Loaded %d candidates from %s", count, csv_path)
    return count


def get_candidate_stats() -> dict:
    """Counts for the candidate store."""
    conn = _connect()
    try:
        row = conn.execute(
            """
            SELECT
                COUNT(*) AS total,
                SUM(CASE WHEN enrichment_needed = 0 THEN 1 ELSE 0 END) AS contact_ready,
                SUM(CASE WHEN enrichment_source IS NOT NULL AND enrichment_source != '' THEN 1 ELSE 0 END) AS enriched,
                MAX(updated_at) AS last_update
            FROM candidates
            """
        ).fetchone()
        return {
            'total': row['total'] or 0,
            'contact_ready': row['contact_ready'] or 0,
            'enriched': row['enriched'] or 0,
            'last_update': row['last_update'],
        }
    finally:
        conn.close()
