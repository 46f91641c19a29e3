"""
Text rendering for launch records.

Templates:
- Lead notes (icebreaker and numbered talking points)
- Launch summary message
"""

import logging
import os
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape, TemplateNotFound

from src.candidates import Candidate

logger = logging.getLogger(__name__)

TEMPLATE_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))),
    "templates",
    "launchpad",
)

_LEAD_NOTES_FALLBACK = """\
{% if icebreaker %}
Icebreaker: {{ icebreaker }}

{% endif %}
{% if talking_points %}
Talking Points:
{% for point in talking_points %}
{{ loop.index }}. {{ point }}
{% endfor %}
{% endif %}
"""

_LAUNCH_SUMMARY_FALLBACK = """\
{{ campaign_name }} is now active with {{ candidate_count }} candidates
{% if partial %}
{{ leads_failed }} lead(s) and {{ call_tasks_failed }} call task(s) could not be saved
{% endif %}
"""

_env = None


def _get_env() -> Environment:
    """Get or create Jinja2 environment."""
    global _env
    if _env is None:
        _env = Environment(
            loader=FileSystemLoader(TEMPLATE_DIR),
            autoescape=select_autoescape(['html'], default_for_string=False),
            trim_blocks=True,
            lstrip_blocks=True,
        )
    return _env


def _render(name: str, fallback: str, context: dict) -> str:
    env = _get_env()
    try:
        template = env.get_template(name)
    except TemplateNotFound:
        logger.debug("Template %s not found, using inline version", name)
        template = env.from_string(fallback)
    return template.render(**context).strip()


def render_lead_notes(candidate: Candidate) -> Optional[str]:
    """Notes stored on a campaign lead. None when there's no personalization."""
    points = [p for p in (candidate.talking_points or []) if p]
    if not candidate.icebreaker and not points:
        return None

    return _render("lead_notes.txt", _LEAD_NOTES_FALLBACK, {
        'icebreaker': candidate.icebreaker,
        'talking_points': points,
    })


def render_launch_summary(
    campaign_name: str,
    candidate_count: int,
    leads_failed: int = 0,
    call_tasks_failed: int = 0,
) -> str:
    """User-facing message for a successful launch."""
    return _render("launch_summary.txt", _LAUNCH_SUMMARY_FALLBACK, {
        'campaign_name': campaign_name,
        'candidate_count': candidate_count,
        'partial': bool(leads_failed or call_tasks_failed),
        'leads_failed': leads_failed,
        'call_tasks_failed': call_tasks_failed,
    })
