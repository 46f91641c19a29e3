"""
Campaign preparation and launch.

This module handles:
- Matching bulk contact imports against selected candidates
- Enriching candidates with no contact details (cache first, paid lookup second)
- Checking channel integrations
- Running the quality gate and pre-flight checks
- Launching, with a direct storage write if the launch function fails
- Saving in-progress builds as drafts
"""

from src.launchpad.db import init_launchpad_db
from src.launchpad.channels import Job, ChannelConfig, default_campaign_name
from src.launchpad.manager import CampaignBuilder, run_launch_pipeline
from src.launchpad.session import CampaignSession
from src.launchpad.importer import import_contacts, ImportResult
from src.launchpad.enrichment import enrich_candidates, enter_contact_manually, EnrichmentRun
from src.launchpad.launcher import launch_campaign, LaunchResult
from src.launchpad.summary import generate_summary_text, print_status
from src.launchpad.config import LAUNCHPAD_CONFIG

__all__ = [
    'init_launchpad_db',
    'Job',
    'ChannelConfig',
    'default_campaign_name',
    'CampaignBuilder',
    'run_launch_pipeline',
    'CampaignSession',
    'import_contacts',
    'ImportResult',
    'enrich_candidates',
    'enter_contact_manually',
    'EnrichmentRun',
    'launch_campaign',
    'LaunchResult',
    'generate_summary_text',
    'print_status',
    'LAUNCHPAD_CONFIG',
]
