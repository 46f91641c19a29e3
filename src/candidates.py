"""
Candidate records and the in-memory candidate pool.

The pool is the working copy of the candidates selected for one campaign
build. The authoritative record lives in the candidate store (src/db.py);
the pool is a cache that can be refreshed from a fresher stored read.

Every mutation replaces a whole record keyed by candidate id. Merging never
overwrites a non-empty value with an empty one.
"""

import logging
import threading
from dataclasses import dataclass, field, asdict, fields, replace
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

# Contact and enrichment fields a merge may touch
MERGEABLE_FIELDS = (
    'email',
    'phone',
    'personal_email',
    'personal_mobile',
    'enrichment_source',
    'enrichment_tier',
    'enriched_at',
)


def _is_empty(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


@dataclass
class Candidate:
    """A candidate selected for a campaign."""
    id: str
    first_name: str = ""
    last_name: str = ""
    specialty: str = ""
    city: str = ""
    state: str = ""

    # Work contact (sourced at ingestion, low trust)
    email: Optional[str] = None
    phone: Optional[str] = None

    # Personal contact (enrichment or manual entry, high trust)
    personal_email: Optional[str] = None
    personal_mobile: Optional[str] = None

    # Enrichment metadata
    enrichment_source: Optional[str] = None
    enrichment_tier: Optional[str] = None
    enriched_at: Optional[str] = None

    # Ranking: 1 = A-tier, 2 = B-tier, 3 = C-tier
    tier: Optional[int] = None
    unified_score: Optional[str] = None

    # Personalization content (opaque, generated elsewhere)
    icebreaker: Optional[str] = None
    talking_points: list = field(default_factory=list)
    email_subject: Optional[str] = None
    email_body: Optional[str] = None
    sms_message: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def has_personal_contact(self) -> bool:
        return not _is_empty(self.personal_email) or not _is_empty(self.personal_mobile)

    @property
    def has_work_contact(self) -> bool:
        return not _is_empty(self.email) or not _is_empty(self.phone)

    @property
    def is_contact_ready(self) -> bool:
        return self.has_personal_contact or self.has_work_contact

    @property
    def needs_enrichment(self) -> bool:
        return not self.has_personal_contact and not self.has_work_contact

    @property
    def resolved_email(self) -> Optional[str]:
        """Personal email if present, else work email."""
        if not _is_empty(self.personal_email):
            return self.personal_email
        return None if _is_empty(self.email) else self.email

    @property
    def resolved_phone(self) -> Optional[str]:
        """Personal mobile if present, else work phone."""
        if not _is_empty(self.personal_mobile):
            return self.personal_mobile
        return None if _is_empty(self.phone) else self.phone

    def merged_with(self, **updates) -> 'Candidate':
        """
        Return a copy with the given contact/enrichment fields applied.

        Empty values in `updates` are ignored, so a merge can never blank
        out data the candidate already has.
        """
        unknown = set(updates) - set(MERGEABLE_FIELDS)
        if unknown:
            raise ValueError(f"Not mergeable: {', '.join(sorted(unknown))}")

        applied = {k: v for k, v in updates.items() if not _is_empty(v)}
        return replace(self, **applied) if applied else self

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> 'Candidate':
        """Build a candidate from a row or JSON dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        if 'id' not in values and data.get('candidate_id'):
            values['id'] = data['candidate_id']
        values['id'] = str(values.get('id', ''))
        if values.get('talking_points') is None:
            values['talking_points'] = []
        return cls(**values)


@dataclass
class TierStats:
    """Candidate breakdown shown before enrichment."""
    tier1: int = 0
    tier2: int = 0
    tier3: int = 0
    ready_count: int = 0
    needs_enrichment: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


class CandidatePool:
    """
    Ordered, id-keyed collection of candidates shared by the import,
    enrichment and manual-entry paths.

    Usage:
        pool = CandidatePool(candidates)
        pool.merge(candidate_id, personal_email="x@y.com")
    """

    def __init__(self, candidates: Optional[Iterable[Candidate]] = None):
        self._lock = threading.Lock()
        self._by_id: dict[str, Candidate] = {}
        for candidate in candidates or []:
            if candidate.id in self._by_id:
                logger.debug("Duplicate candidate id %s - keeping latest record", candidate.id)
            self._by_id[candidate.id] = candidate

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self):
        return iter(self.all())

    def __contains__(self, candidate_id: str) -> bool:
        return candidate_id in self._by_id

    def get(self, candidate_id: str) -> Optional[Candidate]:
        return self._by_id.get(candidate_id)

    def all(self) -> list[Candidate]:
        with self._lock:
            return list(self._by_id.values())

    def ids(self) -> list[str]:
        with self._lock:
            return list(self._by_id)

    def merge(self, candidate_id: str, **updates) -> Candidate:
        """Apply non-empty field updates to a candidate as one replacement."""
        with self._lock:
            current = self._by_id[candidate_id]
            merged = current.merged_with(**updates)
            self._by_id[candidate_id] = merged
            return merged

    def needing_enrichment(self) -> list[Candidate]:
        return [c for c in self.all() if c.needs_enrichment]

    def tier_stats(self) -> TierStats:
        stats = TierStats()
        for c in self.all():
            if c.tier == 1:
                stats.tier1 += 1
            elif c.tier == 2:
                stats.tier2 += 1
            else:
                stats.tier3 += 1

            if c.is_contact_ready:
                stats.ready_count += 1
            else:
                stats.needs_enrichment += 1
        return stats
