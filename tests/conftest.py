import threading

import pytest

from src import config
from src import db as candidate_db
from src.candidates import Candidate, CandidatePool
from src.functions_client import RemoteCallError
from src.launchpad import db as launch_db


@pytest.fixture(autouse=True)
def _test_env(tmp_path, monkeypatch):
    # Fresh SQLite file per test
    monkeypatch.setattr(config, "DB_PATH", str(tmp_path / "launchpad.db"))
    monkeypatch.setattr(config, "FUNCTIONS_BASE_URL", "https://functions.test")
    monkeypatch.setattr(config, "FUNCTIONS_API_KEY", "test_key")
    candidate_db.init_candidate_db()
    launch_db.init_launchpad_db()


class FakeFunctions:
    """Stands in for the remote functions: one handler per function name."""

    def __init__(self):
        self.handlers = {}
        self.calls = []
        self._lock = threading.Lock()

    def on(self, function, handler):
        """handler: a dict to return, a callable(payload), or an exception to raise."""
        self.handlers[function] = handler

    def __call__(self, function, payload, timeout=None):
        with self._lock:
            self.calls.append((function, payload))
        handler = self.handlers.get(function)
        if handler is None:
            raise RemoteCallError(function, "HTTP 503", status_code=503)
        if isinstance(handler, Exception):
            raise handler
        if callable(handler):
            return handler(payload)
        return dict(handler)

    def calls_to(self, function):
        return [payload for name, payload in self.calls if name == function]


@pytest.fixture
def functions(monkeypatch):
    fake = FakeFunctions()
    for module in (
        "src.launchpad.enrichment",
        "src.launchpad.quality",
        "src.launchpad.integrations",
        "src.launchpad.launcher",
    ):
        monkeypatch.setattr(f"{module}.invoke", fake)
    return fake


@pytest.fixture
def sleeps(monkeypatch):
    recorded = []
    monkeypatch.setattr("src.launchpad.enrichment.rate_limit_sleep", recorded.append)
    return recorded


def make_candidate(candidate_id, **kwargs):
    values = {
        'first_name': f"First{candidate_id}",
        'last_name': f"Last{candidate_id}",
        'specialty': "Anesthesiology",
        'city': "Austin",
        'state': "TX",
    }
    values.update(kwargs)
    return Candidate(id=candidate_id, **values)


def seed(*candidates):
    """Store candidates and return a pool of the same records."""
    for candidate in candidates:
        candidate_db.upsert_candidate(candidate)
    return CandidatePool(candidates)
