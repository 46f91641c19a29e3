"""
Pre-flight checks run immediately before launch.

Four fixed checks, run one after another. Each goes
pending -> checking -> passed | failed, and an optional observer sees
every transition. The checks are re-run from scratch on every launch
attempt.
"""

import logging
import time
from dataclasses import dataclass, replace
from typing import Callable, Iterable, Optional

from src import db as candidate_db
from src.candidates import Candidate
from src.launchpad.config import LAUNCHPAD_CONFIG

logger = logging.getLogger(__name__)

CHECK_NAMES = (
    "Campaign Configuration",
    "Candidate Data",
    "Integration APIs",
    "Storage Health",
)


@dataclass(frozen=True)
class PreflightCheck:
    name: str
    status: str = 'pending'  # pending, checking, passed, failed
    details: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.status == 'passed'

    def to_dict(self) -> dict:
        return {'name': self.name, 'status': self.status, 'details': self.details}

    @classmethod
    def from_dict(cls, data: dict) -> 'PreflightCheck':
        return cls(name=data.get('name', ''), status=data.get('status', 'pending'), details=data.get('details'))


def run_preflight_checks(
    campaign_name: str,
    job_id: str,
    candidates: Iterable[Candidate],
    integrations_connected: bool,
    on_update: Optional[Callable[[list[PreflightCheck]], None]] = None,
    settle_seconds: Optional[float] = None,
) -> list[PreflightCheck]:
    """
    Run the four pre-flight checks in order.

    Args:
        on_update: called with a snapshot of all checks after every transition
        settle_seconds: pause before each check resolves (config default)

    Returns:
        The final list of checks
    """
    if settle_seconds is None:
        settle_seconds = LAUNCHPAD_CONFIG['PREFLIGHT_SETTLE_SECONDS']
    candidates = list(candidates)

    checks = [PreflightCheck(name=name) for name in CHECK_NAMES]

    def publish():
        if on_update:
            on_update(list(checks))

    def evaluate_config():
        ok = bool((campaign_name or '').strip()) and bool((job_id or '').strip())
        return ok, "Valid" if ok else "Missing required fields"

    def evaluate_candidates():
        ready = sum(1 for c in candidates if c.is_contact_ready)
        return ready > 0, f"{ready}/{len(candidates)} ready"

    def evaluate_integrations():
        return integrations_connected, "All connected" if integrations_connected else "Some disconnected"

    def evaluate_storage():
        healthy = candidate_db.check_health()
        return healthy, "Healthy" if healthy else "Unreachable"

    steps = [evaluate_config, evaluate_candidates, evaluate_integrations, evaluate_storage]

    publish()
    for index, step in enumerate(steps):
        checks[index] = replace(checks[index], status='checking')
        publish()

        if settle_seconds and settle_seconds > 0:
            time.sleep(settle_seconds)

        ok, details = step()
        checks[index] = replace(checks[index], status='passed' if ok else 'failed', details=details)
        publish()

        log = logger.info if ok else logger.warning
        log("Pre-flight %s: %s (%s)", checks[index].name, checks[index].status, details)

    return checks


def preflight_passed(checks: list[PreflightCheck]) -> bool:
    """The gate: every check present and passed."""
    return len(checks) == len(CHECK_NAMES) and all(c.passed for c in checks)
