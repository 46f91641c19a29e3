"""
SQLite storage for launched campaigns.

Tables:
- campaigns: One row per launched (or drafted) campaign
- campaign_leads: One row per candidate in a campaign
- ai_call_queue: Voice call tasks waiting to be dialled
- campaign_drafts: In-progress campaign builds, one per job
"""

import json
import os
import sqlite3
import uuid
from datetime import datetime
from typing import Optional

from src import config


def _connect() -> sqlite3.Connection:
    """Connect to the launchpad database."""
    os.makedirs(os.path.dirname(config.DB_PATH) or ".", exist_ok=True)
    conn = sqlite3.connect(config.DB_PATH)
    conn.row_factory = sqlite3.Row
    return conn


def init_launchpad_db() -> None:
    """Initialize all launchpad tables."""
    conn = _connect()
    try:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS campaigns (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                job_id TEXT NOT NULL,
                status TEXT DEFAULT 'draft',
                channel TEXT,
                sender_account TEXT,
                leads_count INTEGER DEFAULT 0,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        conn.execute("""
            CREATE TABLE IF NOT EXISTS campaign_leads (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                campaign_id TEXT NOT NULL REFERENCES campaigns(id),
                candidate_id TEXT NOT NULL,
                candidate_name TEXT,
                candidate_email TEXT,
                candidate_phone TEXT,
                status TEXT DEFAULT 'pending',
                notes TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        conn.execute("""
            CREATE TABLE IF NOT EXISTS ai_call_queue (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                campaign_id TEXT NOT NULL REFERENCES campaigns(id),
                candidate_id TEXT NOT NULL,
                candidate_name TEXT,
                phone TEXT NOT NULL,
                job_id TEXT,
                job_title TEXT,
                job_state TEXT,
                status TEXT DEFAULT 'queued',
                scheduled_at TEXT,
                metadata_json TEXT DEFAULT '{}',
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        conn.execute("""
            CREATE TABLE IF NOT EXISTS campaign_drafts (
                job_id TEXT PRIMARY KEY,
                draft_json TEXT NOT NULL,
                saved_at TEXT NOT NULL
            )
        """)

        conn.commit()
    finally:
        conn.close()


# ---------------------------------------------------------------------------
# Campaign operations
# ---------------------------------------------------------------------------

def insert_campaign(
    name: str,
    job_id: str,
    status: str,
    channel: str,
    sender_account: Optional[str],
    leads_count: int,
) -> str:
    """Create a campaign row. Returns the new campaign ID."""
    campaign_id = str(uuid.uuid4())
    conn = _connect()
    try:
        conn.execute(
            """
            INSERT INTO campaigns
            (id, name, job_id, status, channel, sender_account, leads_count)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (campaign_id, name, job_id, status, channel, sender_account, leads_count)
        )
        conn.commit()
        return campaign_id
    finally:
        conn.close()


def get_campaign(campaign_id: str) -> Optional[dict]:
    """Get a single campaign by ID."""
    conn = _connect()
    try:
        row = conn.execute(
            "SELECT * FROM campaigns WHERE id = ?", (campaign_id,)
        ).fetchone()
        return dict(row) if row else None
    finally:
        conn.close()


def get_all_campaigns(limit: int = 100) -> list[dict]:
    """Get campaigns, most recent first."""
    conn = _connect()
    try:
        rows = conn.execute(
            "SELECT * FROM campaigns ORDER BY created_at DESC LIMIT ?",
            (limit,)
        ).fetchall()
        return [dict(row) for row in rows]
    finally:
        conn.close()


# ---------------------------------------------------------------------------
# Lead operations
# ---------------------------------------------------------------------------

def insert_lead(
    campaign_id: str,
    candidate_id: str,
    candidate_name: str,
    candidate_email: Optional[str],
    candidate_phone: Optional[str],
    status: str = 'pending',
    notes: Optional[str] = None,
) -> int:
    """Insert one campaign lead. Returns the lead row ID."""
    conn = _connect()
    try:
        cursor = conn.execute(
            """
            INSERT INTO campaign_leads
            (campaign_id, candidate_id, candidate_name, candidate_email, candidate_phone, status, notes)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (campaign_id, candidate_id, candidate_name, candidate_email, candidate_phone, status, notes)
        )
        conn.commit()
        return cursor.lastrowid
    finally:
        conn.close()


def get_campaign_leads(campaign_id: str) -> list[dict]:
    """Get all leads for a campaign in insertion order."""
    conn = _connect()
    try:
        rows = conn.execute(
            "SELECT * FROM campaign_leads WHERE campaign_id = ? ORDER BY id",
            (campaign_id,)
        ).fetchall()
        return [dict(row) for row in rows]
    finally:
        conn.close()


# ---------------------------------------------------------------------------
# Voice call queue
# ---------------------------------------------------------------------------

def insert_call_task(
    campaign_id: str,
    candidate_id: str,
    candidate_name: str,
    phone: str,
    job_id: str,
    job_title: str = "",
    job_state: str = "",
    status: str = 'queued',
    scheduled_at: Optional[str] = None,
    metadata: Optional[dict] = None,
) -> int:
    """Queue a voice call for a candidate. Returns the task row ID."""
    conn = _connect()
    try:
        cursor = conn.execute(
            """
            INSERT INTO ai_call_queue
            (campaign_id, candidate_id, candidate_name, phone, job_id, job_title,
             job_state, status, scheduled_at, metadata_json)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                campaign_id, candidate_id, candidate_name, phone, job_id, job_title,
                job_state, status, scheduled_at, json.dumps(metadata or {}),
            )
        )
        conn.commit()
        return cursor.lastrowid
    finally:
        conn.close()


def get_call_tasks(campaign_id: str) -> list[dict]:
    """Get queued call tasks for a campaign."""
    conn = _connect()
    try:
        rows = conn.execute(
            "SELECT * FROM ai_call_queue WHERE campaign_id = ? ORDER BY id",
            (campaign_id,)
        ).fetchall()
        tasks = []
        for row in rows:
            task = dict(row)
            task['metadata'] = json.loads(task.pop('metadata_json') or '{}')
            tasks.append(task)
        return tasks
    finally:
        conn.close()


# ---------------------------------------------------------------------------
# Drafts
# ---------------------------------------------------------------------------

def save_draft(job_id: str, draft: dict) -> str:
    """Save (or overwrite) the draft for a job. Returns the save timestamp."""
    saved_at = datetime.utcnow().isoformat()
    conn = _connect()
    try:
        conn.execute(
            "INSERT OR REPLACE INTO campaign_drafts (job_id, draft_json, saved_at) VALUES (?, ?, ?)",
            (job_id, json.dumps(draft), saved_at)
        )
        conn.commit()
        return saved_at
    finally:
        conn.close()


def load_draft(job_id: str) -> Optional[dict]:
    """Load the saved draft for a job, if any."""
    conn = _connect()
    try:
        row = conn.execute(
            "SELECT draft_json, saved_at FROM campaign_drafts WHERE job_id = ?",
            (job_id,)
        ).fetchone()
        if not row:
            return None
        draft = json.loads(row['draft_json'])
        draft['saved_at'] = row['saved_at']
        return draft
    finally:
        conn.close()


def clear_draft(job_id: str) -> None:
    """Remove the draft for a job."""
    conn = _connect()
    try:
        conn.execute("DELETE FROM campaign_drafts WHERE job_id = ?", (job_id,))
        conn.commit()
    finally:
        conn.close()


def list_drafts() -> list[dict]:
    """List saved drafts, most recent first."""
    conn = _connect()
    try:
        rows = conn.execute(
            "SELECT job_id, saved_at FROM campaign_drafts ORDER BY saved_at DESC"
        ).fetchall()
        return [dict(row) for row in rows]
    finally:
        conn.close()
