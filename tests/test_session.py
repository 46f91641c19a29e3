"""
Tests for campaign drafts, templates and the status summary.
"""

from datetime import date

from src.candidates import CandidatePool
from src.launchpad.channels import ChannelConfig, EmailChannel, Job, Schedule, SmsChannel, default_campaign_name
from src.launchpad.integrations import IntegrationStatus
from src.launchpad.quality import QualityCheckResult
from src.launchpad.session import CampaignSession
from src.launchpad.summary import generate_summary_text
from src.launchpad.templates import render_launch_summary, render_lead_notes
from tests.conftest import make_candidate

JOB = Job(id="job-1", job_name="CRNA Locum", specialty="Anesthesiology", facility_name="Mercy General")


def make_session():
    return CampaignSession(
        job=JOB,
        pool=CandidatePool([make_candidate("c1", personal_email="me@gmail.com", tier=1), make_candidate("c2")]),
        channels=ChannelConfig(
            email=EmailChannel(sender="me@agency.com", sequence_length=4),
            sms=SmsChannel(from_number="+15550001111"),
            schedule=Schedule(start_date="2026-11-02", weekdays_only=False),
        ),
        sender_email="me@agency.com",
        integrations=[IntegrationStatus(name="Instantly", type="email", status="connected", details="ready")],
        quality=QualityCheckResult(can_launch=True, warnings=2),
    )


class TestCampaignSession:

    def test_default_name(self):
        session = CampaignSession(job=JOB, pool=CandidatePool())
        assert session.campaign_name == default_campaign_name(JOB)
        assert default_campaign_name(JOB, date(2026, 3, 14)) == "Anesthesiology - Mercy General - 03/14/2026"
        assert default_campaign_name(Job(id="j"), date(2026, 3, 14)) == "Campaign - Facility - 03/14/2026"

    def test_draft_round_trip(self):
        session = make_session()
        session.save()

        loaded = CampaignSession.load("job-1")

        assert loaded.campaign_name == session.campaign_name
        assert loaded.pool.ids() == ["c1", "c2"]
        assert loaded.pool.get("c1").personal_email == "me@gmail.com"
        assert loaded.channels == session.channels
        assert loaded.integrations == session.integrations
        assert loaded.quality == session.quality
        assert loaded.saved_at is not None

    def test_clear(self):
        session = make_session()
        session.save()
        session.clear()
        assert CampaignSession.load("job-1") is None

    def test_integrations_not_checked_means_not_connected(self):
        session = CampaignSession(job=JOB, pool=CandidatePool())
        assert not session.integrations_connected
        session.integrations = []
        assert session.integrations_connected


class TestTemplates:

    def test_lead_notes(self):
        both = make_candidate("c1", icebreaker="Saw your talk", talking_points=["Night shifts"])
        points_only = make_candidate("c2", talking_points=["A", "B"])
        assert render_lead_notes(both) == "Icebreaker: Saw your talk\n\nTalking Points:\n1. Night shifts"
        assert render_lead_notes(points_only) == "Talking Points:\n1. A\n2. B"
        assert render_lead_notes(make_candidate("c3")) is None

    def test_launch_summary(self):
        assert render_launch_summary("Fall push", 3) == "Fall push is now active with 3 candidates"
        partial = render_launch_summary("Fall push", 3, leads_failed=1)
        assert partial.endswith("1 lead(s) and 0 call task(s) could not be saved")


def test_summary_text():
    text = generate_summary_text(make_session())
    assert "CAMPAIGN BUILD - Anesthesiology - Mercy General" in text
    assert "A-tier: 1" in text
    assert "Need enrichment: 1" in text
    assert "Ready to launch" in text
    assert "Instantly: ready" in text
