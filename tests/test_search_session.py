"""
tests/test_search_session.py
─────────────────────────────
Tests for the smart/keyword search lifecycle: degradation, timeouts and
superseded runs.
"""
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from src.errors import SearchTimeout, SearchUnavailable
from src.search.base import SearchMode
from src.search.engine import DegradeReason, SearchEngine, SearchPhase, SearchSession
from src.search.smart import SmartResponse, SmartStrategy


class ScriptedClient:
    configured = True

    def __init__(self, slugs=(), error=None, gate=None, used_ai=True):
        self.slugs = tuple(slugs)
        self.error = error
        self.gate = gate
        self.used_ai = used_ai
        self.started = threading.Event()

    def query(self, text, locale):
        self.started.set()
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.error is not None:
            raise self.error
        return SmartResponse(ranked_slugs=self.slugs, used_ai=self.used_ai)


@pytest.fixture
def executor():
    pool = ThreadPoolExecutor(max_workers=2)
    yield pool
    pool.shutdown(wait=False, cancel_futures=True)


def _session(executor, client=None, timeout=2.0):
    smart = SmartStrategy(client) if client is not None else None
    return SearchSession(SearchEngine(smart=smart), executor, timeout=timeout)


def _keyword_slugs(query, programs):
    return [r.program.slug for r in SearchEngine().search(query, programs)]


class TestKeywordPath:
    def test_smart_off(self, executor, programs):
        outcome = _session(executor).run("meals", programs)
        assert outcome.mode_used is SearchMode.KEYWORD
        assert outcome.degraded is None
        assert not outcome.smart_requested
        assert outcome.phases == (SearchPhase.KEYWORD_SEARCHING, SearchPhase.IDLE)

    def test_generation_carried(self, executor, programs):
        assert _session(executor).run("meals", programs, generation=7).generation == 7

    def test_sequence_increments(self, executor, programs):
        session = _session(executor)
        first = session.run("meals", programs)
        second = session.run("food", programs)
        assert second.sequence == first.sequence + 1
        assert session.latest_sequence == second.sequence
        assert session.phase is SearchPhase.IDLE

    def test_smart_with_empty_query(self, executor, programs):
        client = ScriptedClient(["va-healthcare"])
        outcome = _session(executor, client).run("", programs, smart=True)
        assert outcome.mode_used is SearchMode.KEYWORD
        assert outcome.degraded is None
        assert outcome.smart_requested
        assert not client.started.is_set()


class TestSmartPath:
    def test_success(self, executor, programs):
        outcome = _session(executor, ScriptedClient(["va-healthcare"])).run("meals", programs, smart=True)
        assert outcome.mode_used is SearchMode.SMART
        assert outcome.degraded is None
        assert [p.slug for p in outcome.programs] == ["senior-meals", "va-healthcare"]
        assert outcome.phases == (SearchPhase.SMART_SEARCHING, SearchPhase.IDLE)
        assert outcome.used_ai

    def test_service_answered_without_ai(self, executor, programs):
        client = ScriptedClient(["va-healthcare"], used_ai=False)
        outcome = _session(executor, client).run("meals", programs, smart=True)
        assert outcome.mode_used is SearchMode.SMART
        assert outcome.degraded is None
        assert not outcome.used_ai

    def test_offline(self, executor, programs):
        client = ScriptedClient(["va-healthcare"])
        outcome = _session(executor, client).run("meals", programs, smart=True, online=False)
        assert outcome.mode_used is SearchMode.KEYWORD
        assert outcome.degraded is DegradeReason.OFFLINE
        assert [p.slug for p in outcome.programs] == _keyword_slugs("meals", programs)
        assert not client.started.is_set()

    def test_not_configured(self, executor, programs):
        outcome = _session(executor).run("meals", programs, smart=True)
        assert outcome.degraded is DegradeReason.UNAVAILABLE
        assert outcome.mode_used is SearchMode.KEYWORD


class TestDegradation:
    @pytest.mark.parametrize(
        "error, reason",
        [
            (SearchUnavailable("down"), DegradeReason.ERROR),
            (SearchTimeout("slow"), DegradeReason.TIMEOUT),
            (ConnectionError("socket reset"), DegradeReason.ERROR),
            (KeyError("rankedSlugs"), DegradeReason.ERROR),
        ],
    )
    def test_service_failure_falls_back(self, executor, programs, error, reason):
        outcome = _session(executor, ScriptedClient(error=error)).run("meals", programs, smart=True)
        assert outcome.degraded is reason
        assert outcome.mode_used is SearchMode.KEYWORD
        assert not outcome.used_ai
        assert [p.slug for p in outcome.programs] == _keyword_slugs("meals", programs)
        assert outcome.phases == (
            SearchPhase.SMART_SEARCHING,
            SearchPhase.DEGRADED,
            SearchPhase.KEYWORD_SEARCHING,
            SearchPhase.IDLE,
        )

    def test_deadline_exceeded(self, executor, programs):
        gate = threading.Event()
        session = _session(executor, ScriptedClient(["va-healthcare"], gate=gate), timeout=0.05)
        try:
            outcome = session.run("meals", programs, smart=True)
        finally:
            gate.set()
        assert outcome.degraded is DegradeReason.TIMEOUT
        assert outcome.mode_used is SearchMode.KEYWORD
        assert [p.slug for p in outcome.programs] == _keyword_slugs("meals", programs)

    def test_unexpected_error_leaves_session_usable(self, executor, programs):
        session = _session(executor, ScriptedClient(error=ConnectionError("socket reset")))
        assert session.run("meals", programs, smart=True).degraded is DegradeReason.ERROR
        assert session.phase is SearchPhase.IDLE
        session.engine.smart.client.error = None
        assert session.run("meals", programs, smart=True).mode_used is SearchMode.SMART


class TestSuperseded:
    def test_older_smart_answer_discarded(self, executor, programs):
        gate = threading.Event()
        client = ScriptedClient(["va-healthcare"], gate=gate)
        session = _session(executor, client, timeout=5.0)
        outcomes = {}

        def first_run():
            outcomes["first"] = session.run("meals", programs, smart=True)

        worker = threading.Thread(target=first_run)
        worker.start()
        assert client.started.wait(timeout=5)

        outcomes["second"] = session.run("food", programs)
        gate.set()
        worker.join(timeout=5)

        assert outcomes["first"].superseded
        assert outcomes["first"].results == ()
        assert not outcomes["second"].superseded
        assert outcomes["second"].sequence > outcomes["first"].sequence
