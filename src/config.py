import os
from dotenv import load_dotenv

load_dotenv()


# ---------------------------------------------------------------------------
# Remote functions
# ---------------------------------------------------------------------------
# Enrichment, quality check, integration probe and launch all run as hosted
# functions under a single base URL:
#
#   {FUNCTIONS_BASE_URL}/enrich-contact
#   {FUNCTIONS_BASE_URL}/campaign-quality-check
#   {FUNCTIONS_BASE_URL}/check-integrations
#   {FUNCTIONS_BASE_URL}/launch-campaign
FUNCTIONS_BASE_URL = os.getenv("FUNCTIONS_BASE_URL", "").rstrip("/")

# Bearer key sent with every function call
FUNCTIONS_API_KEY = os.getenv("FUNCTIONS_API_KEY", "")

# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------
DB_PATH = os.getenv(
    "LAUNCHPAD_DB_PATH",
    os.path.join(os.path.dirname(os.path.dirname(__file__)), "data", "launchpad.db"),
)

# ---------------------------------------------------------------------------
# Request settings
# ---------------------------------------------------------------------------
REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", "30"))  # seconds
REQUEST_HEADERS = {
    "User-Agent": "CampaignLaunchpad/1.0",
    "Content-Type": "application/json",
    "Accept": "application/json",
}
