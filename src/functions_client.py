"""
Client for the hosted remote functions.

All remote capabilities (contact enrichment, campaign quality check,
integration probe, campaign launch) are JSON-over-HTTPS function calls
against FUNCTIONS_BASE_URL. Any failure is raised as RemoteCallError so
callers can decide how to degrade; nothing here retries.
"""

import logging
from typing import Optional

import requests

from src import config

logger = logging.getLogger(__name__)


class RemoteCallError(Exception):
    """A remote function call failed (transport, status, or error body)."""

    def __init__(self, function: str, message: str, status_code: Optional[int] = None):
        self.function = function
        self.status_code = status_code
        super().__init__(f"{function}: {message}")


def _headers() -> dict:
    headers = dict(config.REQUEST_HEADERS)
    if config.FUNCTIONS_API_KEY:
        headers["Authorization"] = f"Bearer {config.FUNCTIONS_API_KEY}"
        headers["apikey"] = config.FUNCTIONS_API_KEY
    return headers


def invoke(function: str, payload: dict, timeout: Optional[int] = None) -> dict:
    """
    POST a JSON payload to a remote function and return the decoded body.

    Raises:
        RemoteCallError: if the function isn't configured, the request fails
            or times out, the status isn't 2xx, the body isn't a JSON
            object, or the body carries an "error" key
    """
    if not config.FUNCTIONS_BASE_URL:
        raise RemoteCallError(function, "FUNCTIONS_BASE_URL not configured")

    url = f"{config.FUNCTIONS_BASE_URL}/{function}"
    try:
        resp = requests.post(
            url,
            json=payload,
            headers=_headers(),
            timeout=timeout or config.REQUEST_TIMEOUT,
        )
    except requests.RequestException as exc:
        logger.error("Remote function %s failed: %s", function, exc)
        raise RemoteCallError(function, str(exc)) from exc

    if not resp.ok:
        logger.error("Remote function %s returned HTTP %d", function, resp.status_code)
        raise RemoteCallError(function, f"HTTP {resp.status_code}", status_code=resp.status_code)

    try:
        data = resp.json()
    except ValueError as exc:
        raise RemoteCallError(function, "Response was not JSON", status_code=resp.status_code) from exc

    if not isinstance(data, dict):
        raise RemoteCallError(function, "Response was not a JSON object", status_code=resp.status_code)

    if data.get("error"):
        raise RemoteCallError(function, str(data["error"]), status_code=resp.status_code)

    return data
