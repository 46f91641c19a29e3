"""
Tests for the candidate model and in-memory pool.
"""

import pytest

from src.candidates import Candidate, CandidatePool
from tests.conftest import make_candidate


class TestCandidate:

    def test_resolved_contact_prefers_personal(self):
        c = make_candidate("c1", email="work@hospital.org", phone="+15550000000",
                           personal_email="me@gmail.com", personal_mobile="+15551111111")
        assert c.resolved_email == "me@gmail.com"
        assert c.resolved_phone == "+15551111111"

    def test_resolved_contact_falls_back_to_work(self):
        c = make_candidate("c1", email="work@hospital.org", personal_email="  ")
        assert c.resolved_email == "work@hospital.org"
        assert c.resolved_phone is None

    def test_readiness(self):
        empty = make_candidate("c1")
        work_only = make_candidate("c2", phone="+15550000000")
        assert empty.needs_enrichment and not empty.is_contact_ready
        assert work_only.is_contact_ready and not work_only.needs_enrichment

    def test_merge_never_blanks_existing_values(self):
        c = make_candidate("c1", personal_email="me@gmail.com")
        merged = c.merged_with(personal_email="", personal_mobile="+15551111111")
        assert merged.personal_email == "me@gmail.com"
        assert merged.personal_mobile == "+15551111111"
        assert c.personal_mobile is None

    def test_merge_rejects_other_fields(self):
        with pytest.raises(ValueError):
            make_candidate("c1").merged_with(first_name="X")

    def test_from_dict(self):
        c = Candidate.from_dict({"candidate_id": 42, "first_name": "Ann", "unknown": 1, "talking_points": None})
        assert c.id == "42"
        assert c.first_name == "Ann"
        assert c.talking_points == []


class TestCandidatePool:

    def test_duplicate_ids_keep_first_position_latest_record(self):
        pool = CandidatePool([
            make_candidate("a", first_name="Old"),
            make_candidate("b"),
            make_candidate("a", first_name="New"),
        ])
        assert pool.ids() == ["a", "b"]
        assert pool.get("a").first_name == "New"

    def test_merge_replaces_whole_record(self):
        pool = CandidatePool([make_candidate("a")])
        before = pool.get("a")
        pool.merge("a", personal_email="me@gmail.com", personal_mobile=None)
        after = pool.get("a")
        assert after is not before
        assert after.personal_email == "me@gmail.com"
        assert after.personal_mobile is None

    def test_tier_stats(self):
        pool = CandidatePool([
            make_candidate("a", tier=1, personal_email="a@x.co"),
            make_candidate("b", tier=2),
            make_candidate("c", tier=3, phone="+15550000000"),
            make_candidate("d"),
        ])
        stats = pool.tier_stats()
        assert (stats.tier1, stats.tier2, stats.tier3) == (1, 1, 2)
        assert stats.ready_count == 2
        assert stats.needs_enrichment == 2
        assert [c.id for c in pool.needing_enrichment()] == ["b", "d"]
