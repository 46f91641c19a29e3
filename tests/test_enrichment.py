"""
Tests for contact enrichment and manual entry.
"""

import sqlite3
import threading
import time

import pytest

from src import db as candidate_db
from src.candidates import CandidatePool
from src.functions_client import RemoteCallError
from src.launchpad import enrichment
from src.launchpad.config import LAUNCHPAD_CONFIG
from src.launchpad.enrichment import (
    ContactEnricher,
    enrich_candidates,
    enter_contact_manually,
    estimate_cost,
)
from tests.conftest import make_candidate, seed


def found(payload):
    return {
        "success": True,
        "personal_email": f"{payload['candidate_id']}@personal.com",
        "personal_mobile": "555-010-0000",
        "source": "PDL",
        "cost": 9.99,
    }


class TestEnrichCandidates:

    def test_cache_hits_are_never_sent_to_the_provider(self, functions, sleeps):
        candidates = [make_candidate(f"c{i:02d}") for i in range(12)]
        pool = seed(*candidates)
        cached = ["c00", "c03", "c07", "c11"]
        for cid in cached:
            candidate_db.update_candidate(cid, {"personal_email": f"{cid}@stored.com", "enrichment_source": "PDL"})
        functions.on("enrich-contact", found)

        run = enrich_candidates(pool, job_id="job-1")

        called = [p["candidate_id"] for p in functions.calls_to("enrich-contact")]
        assert len(called) == 8
        assert len(set(called)) == 8
        assert not set(called) & set(cached)
        assert run.provider_calls == 8
        assert run.cache_hits == 4
        assert sleeps == [LAUNCHPAD_CONFIG['ENRICH_BATCH_DELAY_MS'] / 1000.0]
        assert run.total_cost == pytest.approx(8 * 0.30)

        assert pool.get("c03").personal_email == "c03@stored.com"
        assert all(c.is_contact_ready for c in pool)
        assert len(run.statuses) == 12
        assert all(s.status == "success" for s in run.statuses)

    def test_batches_run_one_at_a_time(self, functions, monkeypatch):
        pool = seed(*[make_candidate(f"c{i}") for i in range(8)])
        lock = threading.Lock()
        in_flight = []
        peak = []

        def slow_provider(payload):
            with lock:
                in_flight.append(payload["candidate_id"])
                peak.append(len(in_flight))
            time.sleep(0.01)
            with lock:
                in_flight.remove(payload["candidate_id"])
            return found(payload)

        batch_sizes = []
        real_run_batch = ContactEnricher._run_batch

        def recording_run_batch(self, batch, result):
            batch_sizes.append(len(batch))
            return real_run_batch(self, batch, result)

        calls_at_pause = []
        monkeypatch.setattr(ContactEnricher, "_run_batch", recording_run_batch)
        monkeypatch.setattr(enrichment, "rate_limit_sleep",
                            lambda seconds: calls_at_pause.append(len(functions.calls_to("enrich-contact"))))
        functions.on("enrich-contact", slow_provider)

        run = ContactEnricher(pool, batch_size=5).run()

        assert batch_sizes == [5, 3]
        assert max(peak) <= 5
        assert calls_at_pause == [5]
        assert in_flight == []
        assert run.provider_calls == 8

    def test_non_string_contact_values_do_not_abort_the_run(self, functions, sleeps):
        pool = seed(make_candidate("num"), make_candidate("odd"), make_candidate("ok"))

        def provider(payload):
            if payload["candidate_id"] == "num":
                return {"success": True, "personal_mobile": 5551234567, "source": "PDL"}
            if payload["candidate_id"] == "odd":
                return {"success": True, "personal_email": ["x@y.com"], "personal_mobile": None}
            return found(payload)

        functions.on("enrich-contact", provider)
        run = enrich_candidates(pool, job_id="job-1")

        assert len(run.statuses) == 3
        assert pool.get("num").personal_mobile == "+15551234567"
        assert pool.get("odd").personal_email is None
        assert pool.get("ok").personal_email == "ok@personal.com"
        assert run.total_cost == pytest.approx(0.90)

    def test_results_are_classified_and_costed(self, functions, sleeps):
        pool = seed(make_candidate("ok"), make_candidate("none"), make_candidate("err"))

        def provider(payload):
            if payload["candidate_id"] == "ok":
                return found(payload)
            if payload["candidate_id"] == "none":
                return {"success": False, "source": "PDL"}
            raise RemoteCallError("enrich-contact", "HTTP 502", status_code=502)

        functions.on("enrich-contact", provider)
        run = enrich_candidates(pool, job_id="job-1")
        statuses = {s.candidate_id: s for s in run.statuses}

        assert statuses["ok"].status == "success"
        assert statuses["ok"].cost == pytest.approx(0.30)
        assert statuses["ok"].reported_cost == pytest.approx(9.99)
        assert statuses["none"].status == "no_match"
        assert statuses["none"].cost == pytest.approx(0.05)
        assert statuses["err"].status == "failed"
        assert statuses["err"].cost == 0
        assert statuses["err"].retryable
        assert run.retryable_ids == ["err"]
        assert run.total_cost == pytest.approx(0.35)
        assert sleeps == []

        assert pool.get("ok").personal_mobile == "+15550100000"
        assert pool.get("none").needs_enrichment
        assert pool.get("err").needs_enrichment

    def test_success_is_saved_to_the_store(self, functions, sleeps):
        pool = seed(make_candidate("c1"))
        functions.on("enrich-contact", found)

        run = enrich_candidates(pool)

        assert run.statuses[0].persisted is True
        stored = candidate_db.get_candidate("c1")
        assert stored.personal_email == "c1@personal.com"
        assert stored.enrichment_source == "PDL"

    def test_persistence_can_be_turned_off(self, functions, sleeps, monkeypatch):
        monkeypatch.setitem(LAUNCHPAD_CONFIG, "PERSIST_ENRICHMENT", False)
        pool = seed(make_candidate("c1"))
        functions.on("enrich-contact", found)

        enrich_candidates(pool)

        assert candidate_db.get_candidate("c1").personal_email is None
        assert pool.get("c1").personal_email == "c1@personal.com"

    def test_failed_save_still_applies_result(self, functions, sleeps):
        pool = CandidatePool([make_candidate("c1")])  # not in the store
        functions.on("enrich-contact", found)

        run = enrich_candidates(pool)

        assert run.statuses[0].status == "success"
        assert run.statuses[0].persisted is False
        assert pool.get("c1").personal_email == "c1@personal.com"

    def test_cache_read_failure_makes_no_paid_calls(self, functions, sleeps, monkeypatch):
        pool = seed(make_candidate("c1"), make_candidate("c2"))
        functions.on("enrich-contact", found)

        def broken(ids):
            raise sqlite3.OperationalError("disk I/O error")

        monkeypatch.setattr(enrichment.candidate_db, "get_candidates_by_ids", broken)
        run = enrich_candidates(pool)

        assert functions.calls_to("enrich-contact") == []
        assert [s.status for s in run.statuses] == ["failed", "failed"]
        assert all(s.retryable for s in run.statuses)
        assert run.total_cost == 0

    def test_candidate_filled_in_between_batches_is_skipped(self, functions, sleeps):
        pool = seed(make_candidate("c1"), make_candidate("c2"))
        functions.on("enrich-contact", found)

        def on_status(status):
            if status.candidate_id == "c1" and status.status == "success":
                enter_contact_manually(pool, "c2", email="c2@manual.com")

        run = ContactEnricher(pool, batch_size=1, batch_delay_ms=0, on_status=on_status).run()

        assert [p["candidate_id"] for p in functions.calls_to("enrich-contact")] == ["c1"]
        assert run.provider_calls == 1
        assert pool.get("c2").enrichment_source == "Manual"

    def test_contact_ready_candidates_are_left_alone(self, functions, sleeps):
        pool = seed(make_candidate("c1", email="work@hospital.org"))
        run = enrich_candidates(pool)
        assert run.statuses == []
        assert functions.calls == []

    def test_estimate_cost(self):
        assert estimate_cost(10) == pytest.approx(2.0)
        assert estimate_cost(0) == 0


class TestManualEntry:

    def test_saves_normalized_contact(self):
        pool = seed(make_candidate("c1"))

        status = enter_contact_manually(pool, "c1", email=" me@gmail.com ", phone="(555) 123-4567")

        assert status.status == "success"
        assert status.source == "Manual"
        assert pool.get("c1").personal_mobile == "+15551234567"
        stored = candidate_db.get_candidate("c1")
        assert stored.personal_email == "me@gmail.com"
        assert stored.enrichment_source == "Manual"

    @pytest.mark.parametrize("email, phone", [
        ("", ""),
        ("not-an-email", ""),
        ("", "call me maybe"),
    ])
    def test_rejects_bad_input(self, email, phone):
        pool = seed(make_candidate("c1"))
        with pytest.raises(ValueError):
            enter_contact_manually(pool, "c1", email=email, phone=phone)
        assert candidate_db.get_candidate("c1").enrichment_source is None

    def test_unknown_candidate(self):
        pool = seed(make_candidate("c1"))
        with pytest.raises(KeyError):
            enter_contact_manually(pool, "zz", email="me@gmail.com")
