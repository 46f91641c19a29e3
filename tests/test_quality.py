"""
Tests for the campaign quality gate.
"""

from src.launchpad.channels import ChannelConfig, EmailChannel, SmsChannel
from src.launchpad.quality import QualityCheckResult, evaluate
from tests.conftest import make_candidate

CHANNELS = ChannelConfig(
    email=EmailChannel(sender="me@agency.com", sequence_length=4),
    sms=SmsChannel(from_number="+15550001111", sequence_length=2),
)

CANDIDATES = [
    make_candidate("c1", email="work@hospital.org", personal_email="me@gmail.com", icebreaker="Saw your talk"),
    make_candidate("c2", phone="+15550000000"),
]


def passing_review(**overrides):
    body = {
        "can_launch": True,
        "issues": [
            {"severity": "warning", "category": "Personalization", "description": "Missing hook",
             "candidate_name": "Firstc2 Lastc2"},
        ],
        "summary": {"critical": 0, "warnings": 1, "info": 0},
    }
    body.update(overrides)
    return body


class TestEvaluate:

    def test_passing_review(self, functions):
        functions.on("campaign-quality-check", passing_review())

        result = evaluate("job-1", "Fall push", CANDIDATES, CHANNELS, True, sender_email="me@agency.com")

        assert result.can_launch
        assert result.summary == {"critical": 0, "warnings": 1, "info": 0}
        assert result.issues[0].candidate_name == "Firstc2 Lastc2"
        assert not result.retryable

        payload = functions.calls_to("campaign-quality-check")[0]
        assert payload["job_id"] == "job-1"
        assert payload["email_sequence_count"] == 4
        assert payload["sms_sequence_count"] == 2
        assert payload["candidates"][0]["email"] == "me@gmail.com"
        assert payload["candidates"][0]["personalization_hook"] == "Saw your talk"
        assert payload["candidates"][1]["phone"] == "+15550000000"

    def test_disconnected_integrations_add_a_critical_issue(self, functions):
        functions.on("campaign-quality-check", passing_review())

        result = evaluate("job-1", "Fall push", CANDIDATES, CHANNELS, False)

        assert not result.can_launch
        assert result.critical == 1
        assert result.issues[0].category == "Integrations"
        assert result.issues[0].severity == "critical"
        assert len(result.issues) == 2

    def test_critical_issue_blocks_even_if_remote_says_go(self, functions):
        functions.on("campaign-quality-check", passing_review(
            issues=[{"severity": "critical", "category": "Contact", "description": "No reachable candidates"}],
            summary={"critical": 1, "warnings": 0, "info": 0},
        ))

        result = evaluate("job-1", "Fall push", CANDIDATES, CHANNELS, True)

        assert not result.can_launch

    def test_listed_critical_issue_blocks_when_summary_undercounts(self, functions):
        functions.on("campaign-quality-check", passing_review(
            issues=[{"severity": "critical", "category": "Contact", "description": "No reachable candidates"}],
            summary={"critical": 0, "warnings": 0, "info": 0},
        ))

        result = evaluate("job-1", "Fall push", CANDIDATES, CHANNELS, True)

        assert not result.can_launch
        assert result.critical == 1

    def test_remote_failure_fails_closed(self, functions):
        # no handler registered: the call raises
        result = evaluate("job-1", "Fall push", CANDIDATES, CHANNELS, True)

        assert not result.can_launch
        assert result.retryable
        assert result.summary == {"critical": 1, "warnings": 0, "info": 0}
        assert result.issues[0].category == "System"
        assert result.issues[0].description == "Quality check failed to complete"

    def test_malformed_response_fails_closed(self, functions):
        functions.on("campaign-quality-check", {"can_launch": True})

        result = evaluate("job-1", "Fall push", CANDIDATES, CHANNELS, True)

        assert not result.can_launch
        assert result.issues[0].category == "System"

    def test_unknown_severity_fails_closed(self, functions):
        functions.on("campaign-quality-check", passing_review(
            issues=[{"severity": "fatal", "category": "X", "description": "?"}],
        ))

        assert evaluate("job-1", "Fall push", CANDIDATES, CHANNELS, True).issues[0].category == "System"


def test_result_round_trips_through_dict():
    result = QualityCheckResult.system_failure()
    assert QualityCheckResult.from_dict(result.to_dict()) == result
