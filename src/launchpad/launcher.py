"""
Campaign launch.

Launch is refused outright while any blocker remains. Otherwise the hosted
launch function is tried first; if it fails, the campaign is written
directly to storage:

1. Campaign row (if this fails, nothing else is written)
2. One lead row per candidate (best effort)
3. One voice call task per candidate with a phone (voice campaigns only)

Both paths return the same LaunchResult shape.
"""

import logging
import sqlite3
from dataclasses import dataclass, field
from typing import Optional

from src.candidates import Candidate
from src.functions_client import invoke, RemoteCallError
from src.launchpad import db as launch_db
from src.launchpad.channels import ChannelConfig, Job
from src.launchpad.preflight import PreflightCheck, preflight_passed
from src.launchpad.quality import QualityCheckResult
from src.launchpad.templates import render_lead_notes, render_launch_summary

logger = logging.getLogger(__name__)

LAUNCH_FUNCTION = "launch-campaign"


@dataclass
class LaunchResult:
    success: bool
    campaign_id: Optional[str] = None
    message: str = ""
    path: Optional[str] = None  # primary, fallback
    stage: str = ""  # preconditions, campaign, complete
    partial: bool = False
    leads_inserted: int = 0
    leads_failed: int = 0
    call_tasks_queued: int = 0
    call_tasks_failed: int = 0
    error: Optional[str] = None
    retryable: bool = False
    blockers: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'success': self.success,
            'campaign_id': self.campaign_id,
            'message': self.message,
            'path': self.path,
            'stage': self.stage,
            'partial': self.partial,
            'leads_inserted': self.leads_inserted,
            'leads_failed': self.leads_failed,
            'call_tasks_queued': self.call_tasks_queued,
            'call_tasks_failed': self.call_tasks_failed,
            'error': self.error,
            'retryable': self.retryable,
            'blockers': list(self.blockers),
        }


def find_blockers(
    campaign_name: str,
    candidates: list[Candidate],
    preflight_checks: Optional[list[PreflightCheck]],
    quality: Optional[QualityCheckResult],
    integrations_connected: bool,
) -> list[str]:
    """Everything that currently prevents a launch."""
    blockers = []
    if not (campaign_name or '').strip():
        blockers.append("Campaign name is required")
    if not candidates:
        blockers.append("No candidates selected")
    if not preflight_checks or not preflight_passed(preflight_checks):
        blockers.append("Pre-flight checks have not all passed")
    if quality is None:
        blockers.append("Quality check has not been run")
    elif not quality.can_launch:
        blockers.append("Quality check found blocking issues")
    if not integrations_connected:
        blockers.append("One or more integrations are disconnected")
    return blockers


def _candidate_payload(candidate: Candidate) -> dict:
    return {
        'id': candidate.id,
        'first_name': candidate.first_name,
        'last_name': candidate.last_name,
        'email': candidate.resolved_email,
        'phone': candidate.resolved_phone,
        'icebreaker': candidate.icebreaker,
        'talking_points': candidate.talking_points,
        'email_subject': candidate.email_subject,
        'email_body': candidate.email_body,
        'sms_message': candidate.sms_message,
    }


def _launch_primary(
    job: Job,
    campaign_name: str,
    candidates: list[Candidate],
    channels: ChannelConfig,
    sender_email: Optional[str],
) -> LaunchResult:
    """Raises RemoteCallError if the hosted launch fails."""
    data = invoke(LAUNCH_FUNCTION, {
        'job_id': job.id,
        'campaign_name': campaign_name,
        'sender_email': sender_email,
        'candidates': [_candidate_payload(c) for c in candidates],
        'channels': channels.to_payload(),
    })

    campaign_id = data.get('campaign_id')
    return LaunchResult(
        success=True,
        campaign_id=str(campaign_id) if campaign_id else None,
        message=data.get('message') or f"{campaign_name} is now active",
        path='primary',
        stage='complete',
        leads_inserted=len(candidates),
    )


def _launch_fallback(
    job: Job,
    campaign_name: str,
    candidates: list[Candidate],
    channels: ChannelConfig,
    sender_email: Optional[str],
    primary_error: str,
) -> LaunchResult:
    """Write the campaign directly to storage."""
    try:
        campaign_id = launch_db.insert_campaign(
            name=campaign_name,
            job_id=job.id,
            status='active',
            channel=channels.summary,
            sender_account=sender_email,
            leads_count=len(candidates),
        )
    except (sqlite3.Error, OSError) as exc:
        logger.error("Fallback launch failed creating campaign: %s", exc)
        return LaunchResult(
            success=False,
            message="Launch failed. Nothing was saved.",
            path='fallback',
            stage='campaign',
            error=f"{primary_error}; {exc}",
            retryable=True,
        )

    result = LaunchResult(
        success=True,
        campaign_id=campaign_id,
        path='fallback',
        stage='complete',
    )

    for candidate in candidates:
        try:
            launch_db.insert_lead(
                campaign_id=campaign_id,
                candidate_id=candidate.id,
                candidate_name=candidate.full_name,
                candidate_email=candidate.resolved_email,
                candidate_phone=candidate.resolved_phone,
                status='pending',
                notes=render_lead_notes(candidate),
            )
            result.leads_inserted += 1
        except (sqlite3.Error, OSError) as exc:
            logger.error("Failed to add lead %s to campaign %s: %s", candidate.id, campaign_id, exc)
            result.leads_failed += 1

    if channels.ai_call:
        scheduled_at = channels.schedule.start_date if channels.schedule else None
        for candidate in candidates:
            phone = candidate.resolved_phone
            if not phone:
                continue
            try:
                launch_db.insert_call_task(
                    campaign_id=campaign_id,
                    candidate_id=candidate.id,
                    candidate_name=candidate.full_name,
                    phone=phone,
                    job_id=job.id,
                    job_title=job.job_name or job.specialty,
                    job_state=job.state,
                    status='queued',
                    scheduled_at=scheduled_at,
                    metadata={
                        'call_day': channels.ai_call.call_day,
                        'from_number': channels.ai_call.from_number,
                        'transfer_to': channels.ai_call.transfer_to,
                    },
                )
                result.call_tasks_queued += 1
            except (sqlite3.Error, OSError) as exc:
                logger.error("Failed to queue call for %s: %s", candidate.id, exc)
                result.call_tasks_failed += 1

    result.partial = bool(result.leads_failed or result.call_tasks_failed)
    result.message = render_launch_summary(
        campaign_name,
        len(candidates),
        leads_failed=result.leads_failed,
        call_tasks_failed=result.call_tasks_failed,
    )
    if result.partial:
        logger.warning(
            "Campaign %s launched with gaps: %d leads failed, %d call tasks failed",
            campaign_id, result.leads_failed, result.call_tasks_failed
        )
    return result


def launch_campaign(
    job: Job,
    campaign_name: str,
    candidates: list[Candidate],
    channels: ChannelConfig,
    sender_email: Optional[str],
    preflight_checks: Optional[list[PreflightCheck]],
    quality: Optional[QualityCheckResult],
    integrations_connected: bool,
) -> LaunchResult:
    """
    Launch a campaign if nothing blocks it.

    Returns:
        LaunchResult. On failure, `stage` says how far it got: "preconditions"
        or "campaign" both mean nothing was written.
    """
    candidates = list(candidates)

    blockers = find_blockers(campaign_name, candidates, preflight_checks, quality, integrations_connected)
    if blockers:
        logger.warning("Launch blocked: %s", "; ".join(blockers))
        return LaunchResult(
            success=False,
            message="Launch blocked",
            stage='preconditions',
            blockers=blockers,
        )

    logger.info("Launching %s with %d candidates", campaign_name, len(candidates))

    try:
        result = _launch_primary(job, campaign_name, candidates, channels, sender_email)
    except RemoteCallError as exc:
        logger.warning("Launch function failed, using direct write: %s", exc)
        result = _launch_fallback(job, campaign_name, candidates, channels, sender_email, str(exc))

    if result.success:
        logger.info("Campaign launched via %s path: %s", result.path, result.campaign_id)
    return result
