"""
Status text for a campaign build.

Covers:
- Candidate readiness and tiers
- Enrichment spend
- Integration, quality and pre-flight verdicts
- Launch outcome
"""

import logging
from datetime import date
from typing import Optional

from src.launchpad.db import get_all_campaigns
from src.launchpad.launcher import LaunchResult
from src.launchpad.session import CampaignSession

logger = logging.getLogger(__name__)

_STATUS_ICONS = {
    'passed': '✓',
    'connected': '✓',
    'manual': '✎',
    'failed': '✗',
    'disconnected': '✗',
    'checking': '…',
    'pending': '·',
}


def generate_summary_text(session: CampaignSession, launch_result: Optional[LaunchResult] = None) -> str:
    """
    Generate a plain-text summary of a campaign build.

    Args:
        session: The build to summarise
        launch_result: Optional result of a launch attempt

    Returns:
        Plain text summary
    """
    stats = session.pool.tier_stats()
    today_str = date.today().strftime("%d %b %Y")

    lines = [
        f"CAMPAIGN BUILD - {session.campaign_name}",
        f"Job {session.job.id} | {today_str}",
        "=" * 50,
        "",
        "CANDIDATES",
        "-" * 30,
        f"• Total: {len(session.pool)}",
        f"• A-tier: {stats.tier1}  B-tier: {stats.tier2}  C-tier: {stats.tier3}",
        f"• Contact ready: {stats.ready_count}",
        f"• Need enrichment: {stats.needs_enrichment}",
        f"• Enrichment spend: ${session.enrichment_cost:.2f}",
        "",
    ]

    lines.append("CHANNELS")
    lines.append("-" * 30)
    enabled = session.channels.enabled_channels()
    lines.append(f"• Enabled: {', '.join(enabled) if enabled else 'none'}")
    if session.sender_email:
        lines.append(f"• Sender: {session.sender_email}")
    if session.integrations is None:
        lines.append("• Integrations: not checked")
    else:
        for status in session.integrations:
            icon = _STATUS_ICONS.get(status.status, '?')
            lines.append(f"• {icon} {status.name}: {status.details}")
    lines.append("")

    lines.append("QUALITY GATE")
    lines.append("-" * 30)
    if session.quality is None:
        lines.append("• Not run")
    else:
        quality = session.quality
        verdict = "Ready to launch" if quality.can_launch else "Blocked"
        lines.append(f"• {verdict} ({quality.critical} critical, {quality.warnings} warnings, {quality.info} info)")
        for issue in quality.issues[:10]:
            who = f" [{issue.candidate_name}]" if issue.candidate_name else ""
            lines.append(f"  - {issue.severity.upper()} {issue.category}{who}: {issue.description}")
            if issue.suggestion:
                lines.append(f"    → {issue.suggestion}")
        if len(quality.issues) > 10:
            lines.append(f"  - ... and {len(quality.issues) - 10} more")
    lines.append("")

    if session.preflight:
        lines.append("PRE-FLIGHT")
        lines.append("-" * 30)
        for check in session.preflight:
            icon = _STATUS_ICONS.get(check.status, '?')
            details = f" ({check.details})" if check.details else ""
            lines.append(f"• {icon} {check.name}{details}")
        lines.append("")

    if launch_result:
        lines.append("LAUNCH")
        lines.append("-" * 30)
        if launch_result.success:
            lines.append(f"• Launched via {launch_result.path} path: {launch_result.campaign_id}")
            lines.append(f"• {launch_result.message}")
            if launch_result.path == 'fallback':
                lines.append(f"• Leads saved: {launch_result.leads_inserted} (failed {launch_result.leads_failed})")
                lines.append(
                    f"• Calls queued: {launch_result.call_tasks_queued} (failed {launch_result.call_tasks_failed})"
                )
        else:
            lines.append(f"• Not launched: {launch_result.message}")
            for blocker in launch_result.blockers:
                lines.append(f"  - {blocker}")
            if launch_result.error:
                lines.append(f"  Error: {launch_result.error}")
        lines.append("")

    return "\n".join(lines)


def print_status(session: Optional[CampaignSession] = None) -> None:
    """Print a build summary (if any) and recent campaigns to console."""
    if session:
        print()
        print(generate_summary_text(session))

    campaigns = get_all_campaigns(limit=10)
    print()
    print("╔" + "═" * 70 + "╗")
    print(f"║{'RECENT CAMPAIGNS':^70}║")
    print("╠" + "═" * 70 + "╣")
    if not campaigns:
        print(f"║  {'No campaigns launched yet':<68}║")
    for campaign in campaigns:
        line = f"{campaign['name'][:40]:<40} {campaign['status']:<8} {campaign['leads_count']:>4} leads"
        print(f"║  {line:<68}║")
    print("╚" + "═" * 70 + "╝")
    print()
