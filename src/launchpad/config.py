"""
Configuration for campaign preparation and launch.

These can be overridden via environment variables.
"""

import os
from dotenv import load_dotenv

from src import config as global_config

load_dotenv()


def _get_bool(key: str, default: bool = False) -> bool:
    """Get a boolean from environment."""
    val = os.getenv(key, str(default)).lower()
    return val in ('true', '1', 'yes', 'on')


def _get_int(key: str, default: int) -> int:
    """Get an integer from environment."""
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        return default


def _get_float(key: str, default: float) -> float:
    """Get a float from environment."""
    try:
        return float(os.getenv(key, str(default)))
    except ValueError:
        return default


LAUNCHPAD_CONFIG = {
    # Sender / recruiter details sent with the launch call
    'DEFAULT_SENDER_NAME': os.getenv('LAUNCHPAD_SENDER_NAME', 'Recruiting Team'),
    'DEFAULT_SENDER_EMAIL': os.getenv('LAUNCHPAD_SENDER_EMAIL', ''),
    'RECRUITER_PHONE': os.getenv('LAUNCHPAD_RECRUITER_PHONE', ''),

    # Enrichment batching (provider rate-limit control)
    'ENRICH_BATCH_SIZE': _get_int('LAUNCHPAD_ENRICH_BATCH_SIZE', 5),
    'ENRICH_BATCH_DELAY_MS': _get_int('LAUNCHPAD_ENRICH_BATCH_DELAY_MS', 500),

    # Flat cost estimates per looked-up candidate (advisory only, not billing)
    'ENRICH_COST_SUCCESS': _get_float('LAUNCHPAD_ENRICH_COST_SUCCESS', 0.30),
    'ENRICH_COST_NO_MATCH': _get_float('LAUNCHPAD_ENRICH_COST_NO_MATCH', 0.05),
    'ENRICH_COST_ESTIMATE': _get_float('LAUNCHPAD_ENRICH_COST_ESTIMATE', 0.20),

    # Ask before enriching more than this many candidates at once
    'BULK_CONFIRM_THRESHOLD': _get_int('LAUNCHPAD_BULK_CONFIRM_THRESHOLD', 10),

    # Write provider results back to the candidate store
    'PERSIST_ENRICHMENT': _get_bool('LAUNCHPAD_PERSIST_ENRICHMENT', True),

    # Pause between pre-flight checks (0 for non-interactive runs)
    'PREFLIGHT_SETTLE_SECONDS': _get_float('LAUNCHPAD_PREFLIGHT_SETTLE_SECONDS', 0.0),
}


def get_config() -> dict:
    """Get the launchpad configuration."""
    return LAUNCHPAD_CONFIG.copy()


def validate_config() -> list[str]:
    """Validate configuration and return list of errors."""
    errors = []

    if not global_config.FUNCTIONS_BASE_URL:
        errors.append("FUNCTIONS_BASE_URL not set (remote calls will fail)")

    if not global_config.FUNCTIONS_API_KEY:
        errors.append("FUNCTIONS_API_KEY not set")

    if LAUNCHPAD_CONFIG['ENRICH_BATCH_SIZE'] < 1:
        errors.append("LAUNCHPAD_ENRICH_BATCH_SIZE must be at least 1")

    if LAUNCHPAD_CONFIG['ENRICH_BATCH_DELAY_MS'] < 0:
        errors.append("LAUNCHPAD_ENRICH_BATCH_DELAY_MS cannot be negative")

    return errors
