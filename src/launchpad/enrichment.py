"""
Contact enrichment for candidates with no usable contact details.

Flow:
1. Pick the candidates that need enrichment
2. Check the candidate store first - anything already enriched there is a
   free cache hit and is never sent to the paid lookup
3. Send the rest to the paid lookup in small concurrent batches, pausing
   between batches
4. Fold each batch's results into the pool before the next batch starts

Per-candidate states: pending -> enriching -> success | no_match | failed
"""

import logging
import sqlite3
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from src import db as candidate_db
from src.candidates import Candidate, CandidatePool, MERGEABLE_FIELDS
from src.contact_utils import normalize_phone, is_plausible_phone
from src.functions_client import invoke, RemoteCallError
from src.launchpad.config import LAUNCHPAD_CONFIG

logger = logging.getLogger(__name__)

ENRICH_FUNCTION = "enrich-contact"
MANUAL_SOURCE = "Manual"
MANUAL_TIER = "Platinum"


def rate_limit_sleep(seconds: float) -> None:
    if seconds and seconds > 0:
        time.sleep(seconds)


@dataclass
class EnrichmentStatus:
    """Outcome of enriching one candidate."""
    candidate_id: str
    status: str = 'pending'  # pending, enriching, success, no_match, failed
    email: Optional[str] = None
    phone: Optional[str] = None
    source: Optional[str] = None
    cost: float = 0.0
    reported_cost: Optional[float] = None
    error: Optional[str] = None
    retryable: bool = False
    from_cache: bool = False
    persisted: Optional[bool] = None

    def to_dict(self) -> dict:
        return {
            'candidate_id': self.candidate_id,
            'status': self.status,
            'email': self.email,
            'phone': self.phone,
            'source': self.source,
            'cost': self.cost,
            'reported_cost': self.reported_cost,
            'error': self.error,
            'retryable': self.retryable,
            'from_cache': self.from_cache,
            'persisted': self.persisted,
        }


@dataclass
class EnrichmentRun:
    """Aggregate result of one enrichment run."""
    statuses: list[EnrichmentStatus] = field(default_factory=list)
    total_cost: float = 0.0
    cache_hits: int = 0
    provider_calls: int = 0
    pool: Optional[CandidatePool] = None

    def count(self, status: str) -> int:
        return sum(1 for s in self.statuses if s.status == status)

    @property
    def succeeded(self) -> int:
        return self.count('success')

    @property
    def no_match(self) -> int:
        return self.count('no_match')

    @property
    def failed(self) -> int:
        return self.count('failed')

    @property
    def retryable_ids(self) -> list[str]:
        return [s.candidate_id for s in self.statuses if s.retryable]

    def to_dict(self) -> dict:
        return {
            'total': len(self.statuses),
            'success': self.succeeded,
            'no_match': self.no_match,
            'failed': self.failed,
            'total_cost': round(self.total_cost, 2),
            'cache_hits': self.cache_hits,
            'provider_calls': self.provider_calls,
            'retryable_ids': self.retryable_ids,
        }


def estimate_cost(count: int) -> float:
    """Rough cost of enriching `count` candidates, before any lookups."""
    return round(max(count, 0) * LAUNCHPAD_CONFIG['ENRICH_COST_ESTIMATE'], 2)


def _cost_for(status: str) -> float:
    if status == 'success':
        return LAUNCHPAD_CONFIG['ENRICH_COST_SUCCESS']
    if status == 'no_match':
        return LAUNCHPAD_CONFIG['ENRICH_COST_NO_MATCH']
    return 0.0


def _is_cached(stored: Candidate) -> bool:
    return stored.has_personal_contact or bool((stored.enrichment_source or '').strip())


def _contact_value(value) -> Optional[str]:
    # providers sometimes send phone numbers as JSON numbers
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        value = str(value)
    if not isinstance(value, str):
        return None
    return value.strip() or None


def lookup_contact(candidate: Candidate, job_id: Optional[str]) -> EnrichmentStatus:
    """Run the paid lookup for one candidate. Never raises."""
    payload = {
        'candidate_id': candidate.id,
        'first_name': candidate.first_name,
        'last_name': candidate.last_name,
        'city': candidate.city,
        'state': candidate.state,
        'specialty': candidate.specialty,
        'job_id': job_id,
    }

    try:
        data = invoke(ENRICH_FUNCTION, payload)
    except RemoteCallError as exc:
        logger.warning("Enrichment failed for candidate %s: %s", candidate.id, exc)
        return EnrichmentStatus(
            candidate_id=candidate.id,
            status='failed',
            error=str(exc),
            retryable=True,
        )

    status = 'success' if data.get('success') else 'no_match'
    reported = data.get('cost')
    return EnrichmentStatus(
        candidate_id=candidate.id,
        status=status,
        email=_contact_value(data.get('personal_email')),
        phone=_contact_value(data.get('personal_mobile')),
        source=_contact_value(data.get('source')),
        cost=_cost_for(status),
        reported_cost=float(reported) if isinstance(reported, (int, float)) else None,
    )


class ContactEnricher:
    """
    Runs enrichment over a candidate pool.

    Usage:
        enricher = ContactEnricher(pool, job_id="job-1")
        run = enricher.run()
        print(run.total_cost, run.cache_hits)
    """

    def __init__(
        self,
        pool: CandidatePool,
        job_id: Optional[str] = None,
        on_status: Optional[Callable[[EnrichmentStatus], None]] = None,
        batch_size: Optional[int] = None,
        batch_delay_ms: Optional[int] = None,
    ):
        self.pool = pool
        self.job_id = job_id
        self.on_status = on_status
        self.batch_size = max(1, batch_size or LAUNCHPAD_CONFIG['ENRICH_BATCH_SIZE'])
        if batch_delay_ms is None:
            batch_delay_ms = LAUNCHPAD_CONFIG['ENRICH_BATCH_DELAY_MS']
        self.batch_delay = max(batch_delay_ms, 0) / 1000.0

    def _notify(self, status: EnrichmentStatus) -> None:
        if self.on_status:
            self.on_status(status)

    def run(self, candidate_ids: Optional[list[str]] = None) -> EnrichmentRun:
        """
        Enrich every candidate that needs it (or just `candidate_ids`).

        Returns:
            EnrichmentRun with one status per candidate considered
        """
        result = EnrichmentRun(pool=self.pool)

        subset = self.pool.needing_enrichment()
        if candidate_ids is not None:
            wanted = set(candidate_ids)
            subset = [c for c in subset if c.id in wanted]

        if not subset:
            logger.info("No candidates need enrichment")
            return result

        logger.info("Enriching %d candidates", len(subset))

        remaining = self._check_cache(subset, result)
        if remaining is None:
            return result

        batches = [
            remaining[i:i + self.batch_size]
            for i in range(0, len(remaining), self.batch_size)
        ]

        for index, batch in enumerate(batches):
            # A candidate may have been filled in by manual entry or an earlier batch
            batch = [c for c in batch if self._still_needs_enrichment(c.id)]
            if batch:
                self._run_batch(batch, result)

            if index < len(batches) - 1:
                rate_limit_sleep(self.batch_delay)

        logger.info(
            "Enrichment complete: %d success, %d no match, %d failed, %d cached, $%.2f",
            result.succeeded, result.no_match, result.failed, result.cache_hits, result.total_cost
        )
        return result

    def _still_needs_enrichment(self, candidate_id: str) -> bool:
        current = self.pool.get(candidate_id)
        return current is not None and current.needs_enrichment

    def _check_cache(self, subset: list[Candidate], result: EnrichmentRun) -> Optional[list[Candidate]]:
        """
        Resolve cache hits from the candidate store.

        Returns the candidates still needing a paid lookup, or None if the
        store couldn't be read (every candidate is then failed, retryable).
        """
        try:
            stored = candidate_db.get_candidates_by_ids([c.id for c in subset])
        except (sqlite3.Error, OSError) as exc:
            logger.error("Cache check failed, skipping paid lookups: %s", exc)
            for candidate in subset:
                status = EnrichmentStatus(
                    candidate_id=candidate.id,
                    status='failed',
                    error=f"Cache check failed: {exc}",
                    retryable=True,
                )
                result.statuses.append(status)
                self._notify(status)
            return None

        remaining = []
        for candidate in subset:
            record = stored.get(candidate.id)
            if record is None or not _is_cached(record):
                remaining.append(candidate)
                continue

            refreshed = self.pool.merge(
                candidate.id,
                **{name: getattr(record, name) for name in MERGEABLE_FIELDS}
            )
            status = EnrichmentStatus(
                candidate_id=candidate.id,
                status='success',
                email=refreshed.resolved_email,
                phone=refreshed.resolved_phone,
                source=record.enrichment_source,
                from_cache=True,
            )
            result.statuses.append(status)
            result.cache_hits += 1
            self._notify(status)

        if result.cache_hits:
            logger.info("%d candidates already enriched in store (no charge)", result.cache_hits)
        return remaining

    def _run_batch(self, batch: list[Candidate], result: EnrichmentRun) -> None:
        for candidate in batch:
            self._notify(EnrichmentStatus(candidate_id=candidate.id, status='enriching'))

        outcomes = []
        with ThreadPoolExecutor(max_workers=len(batch)) as executor:
            futures = [executor.submit(lookup_contact, c, self.job_id) for c in batch]
            for future in as_completed(futures):
                outcomes.append(future.result())
        result.provider_calls += len(batch)

        # Joined: fold in submission order
        order = {c.id: i for i, c in enumerate(batch)}
        for status in sorted(outcomes, key=lambda s: order[s.candidate_id]):
            self._apply(status)
            result.statuses.append(status)
            result.total_cost += status.cost
            self._notify(status)

    def _apply(self, status: EnrichmentStatus) -> None:
        """Persist a successful lookup, then apply it to the pool."""
        if status.status != 'success':
            return

        enriched_at = datetime.utcnow().isoformat()
        phone = normalize_phone(status.phone) if status.phone else None

        if LAUNCHPAD_CONFIG['PERSIST_ENRICHMENT']:
            updates = {'enriched_at': enriched_at}
            if status.email:
                updates['personal_email'] = status.email
            if phone:
                updates['personal_mobile'] = phone
            if status.source:
                updates['enrichment_source'] = status.source
            if status.email or phone:
                updates['enrichment_needed'] = 0
            try:
                status.persisted = candidate_db.update_candidate(status.candidate_id, updates)
            except sqlite3.Error as exc:
                logger.error("Could not save enrichment for %s: %s", status.candidate_id, exc)
                status.persisted = False
            if not status.persisted:
                logger.warning("Enrichment for %s applied in memory only", status.candidate_id)

        if status.candidate_id in self.pool:
            self.pool.merge(
                status.candidate_id,
                personal_email=status.email,
                personal_mobile=phone,
                enrichment_source=status.source,
                enriched_at=enriched_at,
            )


def enrich_candidates(
    pool: CandidatePool,
    job_id: Optional[str] = None,
    on_status: Optional[Callable[[EnrichmentStatus], None]] = None,
) -> EnrichmentRun:
    """Enrich every candidate in the pool that needs it."""
    return ContactEnricher(pool, job_id=job_id, on_status=on_status).run()


def enter_contact_manually(
    pool: CandidatePool,
    candidate_id: str,
    email: Optional[str] = None,
    phone: Optional[str] = None,
) -> EnrichmentStatus:
    """
    Record contact details typed in by a recruiter.

    Raises:
        KeyError: if the candidate isn't in the pool
        ValueError: if the input is invalid or the store has no such candidate
        sqlite3.Error: if the write fails
    """
    if candidate_id not in pool:
        raise KeyError(candidate_id)

    email = (email or '').strip()
    phone = (phone or '').strip()

    if not email and not phone:
        raise ValueError("Please enter at least an email or phone number")
    if email and '@' not in email:
        raise ValueError("Please enter a valid email address")
    if phone and not is_plausible_phone(phone):
        raise ValueError("Please enter a valid phone number")

    normalized = normalize_phone(phone) if phone else None
    enriched_at = datetime.utcnow().isoformat()

    updates = {
        'enrichment_source': MANUAL_SOURCE,
        'enrichment_tier': MANUAL_TIER,
        'enrichment_needed': 0,
        'enriched_at': enriched_at,
    }
    if email:
        updates['personal_email'] = email
    if normalized:
        updates['personal_mobile'] = normalized

    if not candidate_db.update_candidate(candidate_id, updates):
        raise ValueError(f"Candidate {candidate_id} is not in the candidate store")

    updated = pool.merge(
        candidate_id,
        personal_email=email or None,
        personal_mobile=normalized,
        enrichment_source=MANUAL_SOURCE,
        enrichment_tier=MANUAL_TIER,
        enriched_at=enriched_at,
    )
    logger.info("Manual contact saved for %s", updated.full_name or candidate_id)

    return EnrichmentStatus(
        candidate_id=candidate_id,
        status='success',
        email=email or None,
        phone=normalized,
        source=MANUAL_SOURCE,
        persisted=True,
    )
