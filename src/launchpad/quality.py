"""
Campaign quality gate.

Asks the remote rules engine to review the campaign, then layers on local
knowledge the engine doesn't have (integration connectivity). The gate
fails closed: if the review can't be completed the campaign can't launch.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from src.candidates import Candidate
from src.functions_client import invoke, RemoteCallError
from src.launchpad.channels import ChannelConfig

logger = logging.getLogger(__name__)

QUALITY_FUNCTION = "campaign-quality-check"

SEVERITIES = ('critical', 'warning', 'info')


@dataclass
class QualityIssue:
    severity: str  # critical, warning, info
    category: str
    description: str
    suggestion: Optional[str] = None
    candidate_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            'severity': self.severity,
            'category': self.category,
            'description': self.description,
            'suggestion': self.suggestion,
            'candidate_name': self.candidate_name,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'QualityIssue':
        severity = data.get('severity')
        if severity not in SEVERITIES:
            raise ValueError(f"Unknown issue severity: {severity!r}")
        return cls(
            severity=severity,
            category=str(data.get('category') or ''),
            description=str(data.get('description') or ''),
            suggestion=data.get('suggestion'),
            candidate_name=data.get('candidate_name'),
        )


@dataclass
class QualityCheckResult:
    can_launch: bool
    issues: list[QualityIssue] = field(default_factory=list)
    critical: int = 0
    warnings: int = 0
    info: int = 0
    retryable: bool = False

    @property
    def summary(self) -> dict:
        return {'critical': self.critical, 'warnings': self.warnings, 'info': self.info}

    def to_dict(self) -> dict:
        return {
            'can_launch': self.can_launch,
            'issues': [i.to_dict() for i in self.issues],
            'summary': self.summary,
            'retryable': self.retryable,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'QualityCheckResult':
        """
        Build a result from a response body (or a saved result).

        Raises:
            ValueError: if the body doesn't have the expected shape
        """
        can_launch = data.get('can_launch')
        issues = data.get('issues')
        summary = data.get('summary')
        if not isinstance(can_launch, bool) or not isinstance(issues, list) or not isinstance(summary, dict):
            raise ValueError("Malformed quality check response")

        try:
            critical = int(summary.get('critical', 0))
            warnings = int(summary.get('warnings', 0))
            info = int(summary.get('info', 0))
        except (TypeError, ValueError) as exc:
            raise ValueError("Malformed quality check summary") from exc

        parsed = [QualityIssue.from_dict(i) for i in issues if isinstance(i, dict)]

        # the summary may undercount what the issue list says
        def listed(severity):
            return sum(1 for i in parsed if i.severity == severity)

        return cls(
            can_launch=can_launch,
            issues=parsed,
            critical=max(critical, listed('critical')),
            warnings=max(warnings, listed('warning')),
            info=max(info, listed('info')),
            retryable=bool(data.get('retryable', False)),
        )

    @classmethod
    def system_failure(cls) -> 'QualityCheckResult':
        """The result used when the check itself couldn't run."""
        return cls(
            can_launch=False,
            issues=[QualityIssue(
                severity='critical',
                category='System',
                description='Quality check failed to complete',
                suggestion='Please try again or contact support',
            )],
            critical=1,
            retryable=True,
        )


def integrations_issue() -> QualityIssue:
    return QualityIssue(
        severity='critical',
        category='Integrations',
        description='One or more integrations are disconnected',
        suggestion='Check integration status and reconnect before launching',
    )


def _candidate_summary(candidate: Candidate) -> dict:
    return {
        'id': candidate.id,
        'first_name': candidate.first_name,
        'last_name': candidate.last_name,
        'email': candidate.resolved_email,
        'phone': candidate.resolved_phone,
        'specialty': candidate.specialty,
        'personalization_hook': candidate.icebreaker,
    }


def build_payload(
    job_id: str,
    campaign_name: str,
    candidates: Iterable[Candidate],
    channels: ChannelConfig,
    sender_email: Optional[str] = None,
) -> dict:
    return {
        'job_id': job_id,
        'campaign_name': campaign_name,
        'candidates': [_candidate_summary(c) for c in candidates],
        'channels': channels.to_payload(),
        'sender_email': sender_email,
        'email_sequence_count': channels.email.sequence_length if channels.email else 0,
        'sms_sequence_count': channels.sms.sequence_length if channels.sms else 0,
    }


def evaluate(
    job_id: str,
    campaign_name: str,
    candidates: Iterable[Candidate],
    channels: ChannelConfig,
    integrations_connected: bool,
    sender_email: Optional[str] = None,
) -> QualityCheckResult:
    """
    Run the quality gate for a campaign.

    Never raises for a remote failure: a check that can't complete comes
    back as a single critical System issue with can_launch False.
    """
    payload = build_payload(job_id, campaign_name, candidates, channels, sender_email)

    try:
        data = invoke(QUALITY_FUNCTION, payload)
        remote = QualityCheckResult.from_dict(data)
    except (RemoteCallError, ValueError) as exc:
        logger.error("Quality check failed: %s", exc)
        return QualityCheckResult.system_failure()

    if not integrations_connected:
        remote.issues.insert(0, integrations_issue())
        remote.critical += 1

    remote.can_launch = remote.can_launch and integrations_connected and remote.critical == 0

    logger.info(
        "Quality check: can_launch=%s (%d critical, %d warnings, %d info)",
        remote.can_launch, remote.critical, remote.warnings, remote.info
    )
    return remote
