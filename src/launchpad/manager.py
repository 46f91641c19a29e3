"""
Campaign builder - main orchestration module.

Coordinates:
- Loading the selected candidates
- Bulk contact import and enrichment
- Integration checks
- Quality gate and pre-flight checks
- Launch
"""

import logging
from typing import Callable, Optional

from src import db as candidate_db
from src.candidates import CandidatePool
from src.launchpad.config import LAUNCHPAD_CONFIG, validate_config
from src.launchpad.db import init_launchpad_db
from src.launchpad.channels import ChannelConfig, Job
from src.launchpad.enrichment import (
    EnrichmentRun,
    EnrichmentStatus,
    ContactEnricher,
    enter_contact_manually,
    estimate_cost,
)
from src.launchpad.importer import ImportResult, import_contacts
from src.launchpad.integrations import IntegrationStatus, probe_integrations
from src.launchpad.launcher import LaunchResult, launch_campaign
from src.launchpad.preflight import PreflightCheck, run_preflight_checks
from src.launchpad.quality import QualityCheckResult, evaluate
from src.launchpad.session import CampaignSession

logger = logging.getLogger(__name__)


class CampaignBuilder:
    """
    Main orchestrator for building and launching one campaign.

    Usage:
        builder = CampaignBuilder.start(job, candidate_ids)

        builder.import_contacts(csv_text)
        builder.enrich()
        builder.configure_channels(channels, sender_email="me@example.com")
        builder.check_integrations()
        builder.run_quality_gate()

        result = builder.launch()
    """

    def __init__(self, session: CampaignSession, autosave: bool = True):
        """
        Args:
            session: The campaign build to work on
            autosave: Save the draft after every step
        """
        self.session = session
        self.autosave = autosave

        init_launchpad_db()

        errors = validate_config()
        if errors:
            for error in errors:
                logger.warning("Config issue: %s", error)

    @classmethod
    def start(
        cls,
        job: Job,
        candidate_ids: list[str],
        campaign_name: str = "",
        autosave: bool = True,
    ) -> 'CampaignBuilder':
        """
        Begin a new build from candidates in the candidate store.

        Raises:
            ValueError: if none of the candidate IDs are in the store
        """
        candidate_db.init_candidate_db()
        stored = candidate_db.get_candidates_by_ids(candidate_ids)

        missing = [cid for cid in candidate_ids if cid not in stored]
        if missing:
            logger.warning("%d candidate IDs not found in store: %s", len(missing), ", ".join(missing[:5]))
        if not stored:
            raise ValueError("None of the selected candidates are in the candidate store")

        pool = CandidatePool(stored[cid] for cid in candidate_ids if cid in stored)
        session = CampaignSession(job=job, pool=pool, campaign_name=campaign_name)
        logger.info("Started campaign build for job %s with %d candidates", job.id, len(pool))

        builder = cls(session, autosave=autosave)
        builder._save()
        return builder

    @classmethod
    def resume(cls, job_id: str, autosave: bool = True) -> Optional['CampaignBuilder']:
        """Pick up the saved draft for a job, if there is one."""
        init_launchpad_db()
        session = CampaignSession.load(job_id)
        if not session:
            return None
        logger.info("Resumed draft for job %s (saved %s)", job_id, session.saved_at)
        return cls(session, autosave=autosave)

    def _save(self) -> None:
        if self.autosave:
            self.session.save()

    # ------------------------------------------------------------------
    # Prepare candidates
    # ------------------------------------------------------------------

    def import_contacts(self, text: str) -> ImportResult:
        """Match an uploaded contact sheet and save personal contact details."""
        result = import_contacts(text, self.session.pool)
        if result.updated:
            self.session.invalidate_gates()
        self._save()
        return result

    def enrichment_estimate(self, candidate_ids: Optional[list[str]] = None) -> dict:
        """What an enrichment run would cost, before anything is called."""
        subset = self.session.pool.needing_enrichment()
        if candidate_ids is not None:
            wanted = set(candidate_ids)
            subset = [c for c in subset if c.id in wanted]
        count = len(subset)
        return {
            'count': count,
            'estimated_cost': estimate_cost(count),
            'needs_confirmation': count > LAUNCHPAD_CONFIG['BULK_CONFIRM_THRESHOLD'],
        }

    def enrich(
        self,
        candidate_ids: Optional[list[str]] = None,
        on_status: Optional[Callable[[EnrichmentStatus], None]] = None,
    ) -> EnrichmentRun:
        """Enrich candidates with no contact details."""
        enricher = ContactEnricher(self.session.pool, job_id=self.session.job.id, on_status=on_status)
        run = enricher.run(candidate_ids)

        self.session.enrichment_cost = round(self.session.enrichment_cost + run.total_cost, 2)
        if run.succeeded:
            self.session.invalidate_gates()
        self._save()
        return run

    def enter_contact(self, candidate_id: str, email: Optional[str] = None, phone: Optional[str] = None) -> EnrichmentStatus:
        """Save contact details typed in by a recruiter."""
        status = enter_contact_manually(self.session.pool, candidate_id, email=email, phone=phone)
        self.session.invalidate_gates()
        self._save()
        return status

    # ------------------------------------------------------------------
    # Connect channels
    # ------------------------------------------------------------------

    def configure_channels(self, channels: ChannelConfig, sender_email: Optional[str] = None) -> None:
        self.session.channels = channels
        if sender_email is not None:
            self.session.sender_email = sender_email
        self.session.integrations = None
        self.session.invalidate_gates()
        self.session.step = 'connect'
        self._save()

    def check_integrations(self) -> list[IntegrationStatus]:
        statuses = probe_integrations(self.session.channels, self.session.sender_email)
        self.session.integrations = statuses
        self._save()
        return statuses

    # ------------------------------------------------------------------
    # Verify and launch
    # ------------------------------------------------------------------

    def run_quality_gate(self) -> QualityCheckResult:
        result = evaluate(
            self.session.job.id,
            self.session.campaign_name,
            self.session.candidates,
            self.session.channels,
            self.session.integrations_connected,
            sender_email=self.session.sender_email,
        )
        self.session.quality = result
        self.session.step = 'verify'
        self._save()
        return result

    def run_preflight(self, on_update: Optional[Callable[[list[PreflightCheck]], None]] = None) -> list[PreflightCheck]:
        checks = run_preflight_checks(
            self.session.campaign_name,
            self.session.job.id,
            self.session.candidates,
            self.session.integrations_connected,
            on_update=on_update,
        )
        self.session.preflight = checks
        self._save()
        return checks

    def launch(self, on_preflight_update: Optional[Callable[[list[PreflightCheck]], None]] = None) -> LaunchResult:
        """Run pre-flight again, then launch. Clears the draft on success."""
        self.session.step = 'launch'
        checks = self.run_preflight(on_update=on_preflight_update)

        result = launch_campaign(
            job=self.session.job,
            campaign_name=self.session.campaign_name,
            candidates=self.session.candidates,
            channels=self.session.channels,
            sender_email=self.session.sender_email,
            preflight_checks=checks,
            quality=self.session.quality,
            integrations_connected=self.session.integrations_connected,
        )

        if result.success:
            self.session.clear()
        else:
            self._save()
        return result

    def discard(self) -> None:
        """Throw away the draft for this build."""
        self.session.clear()
        logger.info("Discarded draft for job %s", self.session.job.id)


def run_launch_pipeline(
    job: Job,
    candidate_ids: list[str],
    channels: ChannelConfig,
    sender_email: Optional[str] = None,
    campaign_name: str = "",
    import_text: Optional[str] = None,
    enrich: bool = True,
) -> dict:
    """
    Run the full preparation and launch pipeline in one go.

    This is the main entry point for non-interactive launches.

    Returns:
        Combined results from every step
    """
    builder = CampaignBuilder.start(job, candidate_ids, campaign_name=campaign_name)

    results = {
        'import': None,
        'enrichment': None,
        'integrations': None,
        'quality': None,
        'launch': None,
        'session': builder.session,
    }

    if import_text:
        results['import'] = builder.import_contacts(import_text)

    if enrich:
        results['enrichment'] = builder.enrich()

    builder.configure_channels(channels, sender_email=sender_email)
    results['integrations'] = builder.check_integrations()
    results['quality'] = builder.run_quality_gate()
    results['launch'] = builder.launch()

    return results
