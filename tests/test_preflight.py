"""
Tests for the pre-flight check sequence.
"""

from src.launchpad import preflight
from src.launchpad.preflight import CHECK_NAMES, PreflightCheck, preflight_passed, run_preflight_checks
from tests.conftest import make_candidate

CANDIDATES = [
    make_candidate("c1", personal_email="me@gmail.com"),
    make_candidate("c2", phone="+15550000000"),
    make_candidate("c3"),
]


class TestRunPreflightChecks:

    def test_all_pass(self):
        snapshots = []
        checks = run_preflight_checks("Fall push", "job-1", CANDIDATES, True, on_update=snapshots.append)

        assert [c.name for c in checks] == list(CHECK_NAMES)
        assert all(c.status == "passed" for c in checks)
        assert checks[1].details == "2/3 ready"
        assert checks[3].details == "Healthy"
        assert preflight_passed(checks)

        # initial snapshot, then checking and result for each check
        assert len(snapshots) == 1 + 2 * len(CHECK_NAMES)
        assert [c.status for c in snapshots[0]] == ["pending"] * 4
        assert [c.status for c in snapshots[1]] == ["checking", "pending", "pending", "pending"]
        assert [c.status for c in snapshots[2]] == ["passed", "pending", "pending", "pending"]

    def test_failures(self, monkeypatch):
        monkeypatch.setattr(preflight.candidate_db, "check_health", lambda: False)

        checks = run_preflight_checks("", "job-1", [make_candidate("c1")], False)

        assert [c.status for c in checks] == ["failed", "failed", "failed", "failed"]
        assert checks[0].details == "Missing required fields"
        assert checks[1].details == "0/1 ready"
        assert checks[2].details == "Some disconnected"
        assert checks[3].details == "Unreachable"
        assert not preflight_passed(checks)

    def test_settle_delay(self, monkeypatch):
        waits = []
        monkeypatch.setattr(preflight.time, "sleep", waits.append)
        run_preflight_checks("Fall push", "job-1", CANDIDATES, True, settle_seconds=0.3)
        assert waits == [0.3] * 4


def test_gate_needs_every_check():
    passed = [PreflightCheck(name=n, status="passed") for n in CHECK_NAMES]
    assert preflight_passed(passed)
    assert not preflight_passed(passed[:3])
    assert not preflight_passed([])
