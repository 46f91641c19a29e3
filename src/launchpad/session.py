"""
State for one campaign build.

A CampaignSession carries everything the pipeline steps share: the job,
the candidate pool, channel settings and the latest verdict from each
gate. It is saved as a draft (one per job) so a build can be resumed
across CLI invocations.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from src.candidates import Candidate, CandidatePool
from src.launchpad import db as launch_db
from src.launchpad.channels import ChannelConfig, Job, default_campaign_name
from src.launchpad.integrations import IntegrationStatus, all_connected
from src.launchpad.preflight import PreflightCheck
from src.launchpad.quality import QualityCheckResult

logger = logging.getLogger(__name__)

STEPS = ('prepare', 'connect', 'verify', 'launch')


@dataclass
class CampaignSession:
    job: Job
    pool: CandidatePool
    channels: ChannelConfig = field(default_factory=ChannelConfig)
    campaign_name: str = ""
    sender_email: Optional[str] = None
    step: str = 'prepare'
    enrichment_cost: float = 0.0
    integrations: Optional[list[IntegrationStatus]] = None
    quality: Optional[QualityCheckResult] = None
    preflight: list[PreflightCheck] = field(default_factory=list)
    saved_at: Optional[str] = None

    def __post_init__(self):
        if not self.campaign_name:
            self.campaign_name = default_campaign_name(self.job)

    @property
    def candidates(self) -> list[Candidate]:
        return self.pool.all()

    @property
    def integrations_connected(self) -> bool:
        """False until a probe has run."""
        if self.integrations is None:
            return False
        return all_connected(self.integrations)

    def invalidate_gates(self) -> None:
        """Forget gate verdicts that no longer describe the campaign."""
        self.quality = None
        self.preflight = []

    def to_draft(self) -> dict:
        return {
            'job': self.job.to_dict(),
            'campaign_name': self.campaign_name,
            'sender_email': self.sender_email,
            'candidate_ids': self.pool.ids(),
            'candidates': [c.to_dict() for c in self.candidates],
            'channels': self.channels.to_payload(),
            'current_step': self.step,
            'enrichment_cost': self.enrichment_cost,
            'integrations': [i.to_dict() for i in self.integrations] if self.integrations is not None else None,
            'quality': self.quality.to_dict() if self.quality else None,
            'preflight': [c.to_dict() for c in self.preflight],
        }

    @classmethod
    def from_draft(cls, draft: dict) -> 'CampaignSession':
        quality = draft.get('quality')
        integrations = draft.get('integrations')
        return cls(
            job=Job.from_dict(draft.get('job') or {}),
            pool=CandidatePool(Candidate.from_dict(c) for c in draft.get('candidates') or []),
            channels=ChannelConfig.from_payload(draft.get('channels')),
            campaign_name=draft.get('campaign_name') or '',
            sender_email=draft.get('sender_email'),
            step=draft.get('current_step') or 'prepare',
            enrichment_cost=float(draft.get('enrichment_cost') or 0.0),
            integrations=[IntegrationStatus.from_dict(i) for i in integrations] if integrations is not None else None,
            quality=QualityCheckResult.from_dict(quality) if quality else None,
            preflight=[PreflightCheck.from_dict(c) for c in draft.get('preflight') or []],
            saved_at=draft.get('saved_at'),
        )

    def save(self) -> str:
        self.saved_at = launch_db.save_draft(self.job.id, self.to_draft())
        logger.debug("Draft saved for job %s at %s", self.job.id, self.saved_at)
        return self.saved_at

    @classmethod
    def load(cls, job_id: str) -> Optional['CampaignSession']:
        draft = launch_db.load_draft(job_id)
        if not draft:
            return None
        return cls.from_draft(draft)

    def clear(self) -> None:
        launch_db.clear_draft(self.job.id)
        self.saved_at = None
