"""
Bulk contact import.

Matches rows from an uploaded contact sheet against the candidates in the
current campaign build, classifies each row, and writes the personal contact
details of matched rows to the candidate store.

Classification:
- matched:   candidate found, and at least one valid email or phone
- no_data:   candidate found, but nothing usable in the row
- not_found: no candidate in this build has that ID (never written)
"""

import logging
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from src import db as candidate_db
from src.candidates import CandidatePool
from src.contact_utils import parse_records, normalize_phone, is_valid_email

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["candidate_id"]

IMPORT_SOURCE = "Bulk Import"
IMPORT_TIER = "Platinum"


class NoDataError(ValueError):
    """The import content had no usable data rows."""


@dataclass
class MatchedRecord:
    """One classified import row."""
    candidate_id: str
    candidate_name: str
    email: Optional[str]
    phone: Optional[str]
    status: str  # matched, no_data, not_found

    def to_dict(self) -> dict:
        return {
            'candidate_id': self.candidate_id,
            'candidate_name': self.candidate_name,
            'email': self.email,
            'phone': self.phone,
            'status': self.status,
        }


@dataclass
class ImportResult:
    """Outcome of a bulk import."""
    updated: int = 0
    skipped: int = 0
    records: list[MatchedRecord] = field(default_factory=list)
    failed_ids: list[str] = field(default_factory=list)

    def count(self, status: str) -> int:
        return sum(1 for r in self.records if r.status == status)

    @property
    def matched(self) -> int:
        return self.count('matched')

    @property
    def no_data(self) -> int:
        return self.count('no_data')

    @property
    def not_found(self) -> int:
        return self.count('not_found')

    @property
    def retryable(self) -> bool:
        """Failed writes can be retried by re-running the same import."""
        return bool(self.failed_ids)

    def to_dict(self) -> dict:
        return {
            'updated': self.updated,
            'skipped': self.skipped,
            'matched': self.matched,
            'no_data': self.no_data,
            'not_found': self.not_found,
            'failed_ids': list(self.failed_ids),
            'records': [r.to_dict() for r in self.records],
        }


def match_records(text: str, pool: CandidatePool) -> list[MatchedRecord]:
    """
    Parse import content and classify each row against the pool.

    Raises:
        MissingColumnsError: if the header has no candidate_id column
        NoDataError: if no data rows could be parsed
    """
    rows = parse_records(text, REQUIRED_COLUMNS)
    if not rows:
        raise NoDataError("The import file appears to be empty")

    records = []
    for row in rows:
        candidate_id = row.get('candidate_id', '')
        raw_email = row.get('personal_email') or row.get('email') or ''
        raw_phone = row.get('personal_phone') or row.get('phone') or ''

        candidate = pool.get(candidate_id)
        if not candidate:
            name = f"{row.get('first_name', '')} {row.get('last_name', '')}".strip()
            records.append(MatchedRecord(
                candidate_id=candidate_id,
                candidate_name=name or "Unknown",
                email=raw_email or None,
                phone=raw_phone or None,
                status='not_found',
            ))
            continue

        email = raw_email if is_valid_email(raw_email) else None
        phone = normalize_phone(raw_phone)

        records.append(MatchedRecord(
            candidate_id=candidate.id,
            candidate_name=candidate.full_name,
            email=email,
            phone=phone,
            status='matched' if (email or phone) else 'no_data',
        ))

    logger.info(
        "Import matched: %d matched, %d no data, %d not found",
        sum(1 for r in records if r.status == 'matched'),
        sum(1 for r in records if r.status == 'no_data'),
        sum(1 for r in records if r.status == 'not_found'),
    )
    return records


def save_matched(records: list[MatchedRecord], pool: CandidatePool) -> ImportResult:
    """
    Write matched records to the candidate store.

    Each write stands alone: a failure is counted and logged and the
    remaining rows are still written. The in-memory candidate is only
    replaced once its write has succeeded.
    """
    result = ImportResult(records=list(records))
    to_update = [r for r in records if r.status == 'matched']

    if not to_update:
        logger.info("No matched records to update")
        return result

    for record in to_update:
        updates = {
            'enrichment_source': IMPORT_SOURCE,
            'enrichment_tier': IMPORT_TIER,
            'enrichment_needed': 0,
            'enriched_at': datetime.utcnow().isoformat(),
        }
        if record.email:
            updates['personal_email'] = record.email
        if record.phone:
            updates['personal_mobile'] = record.phone

        try:
            written = candidate_db.update_candidate(record.candidate_id, updates)
        except sqlite3.Error as exc:
            logger.error("Failed to update %s: %s", record.candidate_name, exc)
            written = False
        else:
            if not written:
                logger.error("Failed to update %s: not in candidate store", record.candidate_name)

        if not written:
            result.skipped += 1
            result.failed_ids.append(record.candidate_id)
            continue

        result.updated += 1
        if record.candidate_id in pool:
            pool.merge(
                record.candidate_id,
                personal_email=record.email,
                personal_mobile=record.phone,
                enrichment_source=IMPORT_SOURCE,
                enrichment_tier=IMPORT_TIER,
                enriched_at=updates['enriched_at'],
            )

    logger.info("Import complete: %d updated, %d skipped", result.updated, result.skipped)
    return result


def import_contacts(text: str, pool: CandidatePool) -> ImportResult:
    """Match and save in one step."""
    records = match_records(text, pool)
    return save_matched(records, pool)
