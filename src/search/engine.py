"""
src/search/engine.py
────────────────────
Search engine and per-client search session.

``SearchEngine.search`` is the single result contract for both strategies.
``SearchSession`` adds the smart-search lifecycle on top:

    IDLE ──toggle off / offline──────────────▶ KEYWORD_SEARCHING ──▶ IDLE
    IDLE ──toggle on + online──▶ SMART_SEARCHING ─────────────────▶ IDLE
                                      │ timeout / error
                                      ▼
                                  DEGRADED ──▶ KEYWORD_SEARCHING ──▶ IDLE

Every run gets a sequence number. Starting a run cancels the in-flight smart
request of the previous one; an answer for a superseded sequence is discarded.
"""
from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Sequence
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import dataclass
from enum import Enum

from config.settings import settings
from src.data.models import Program, ScoredProgram
from src.errors import SearchTimeout, SearchUnavailable
from src.search.base import SearchMode
from src.search.keyword import KeywordStrategy, tokenize
from src.search.smart import SmartStrategy

logger = logging.getLogger(__name__)


class SearchPhase(str, Enum):
    IDLE = "idle"
    KEYWORD_SEARCHING = "keyword_searching"
    SMART_SEARCHING = "smart_searching"
    DEGRADED = "degraded"


class DegradeReason(str, Enum):
    TIMEOUT = "timeout"
    ERROR = "error"
    OFFLINE = "offline"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class SearchOutcome:
    results: tuple[ScoredProgram, ...]
    mode_used: SearchMode
    smart_requested: bool
    degraded: DegradeReason | None
    sequence: int
    generation: int
    superseded: bool = False
    phases: tuple[SearchPhase, ...] = ()
    used_ai: bool = False

    @property
    def programs(self) -> list[Program]:
        return [r.program for r in self.results]


class SearchEngine:
    def __init__(self, keyword: KeywordStrategy | None = None, smart: SmartStrategy | None = None):
        self.keyword = keyword or KeywordStrategy()
        self.smart = smart

    @property
    def smart_available(self) -> bool:
        return self.smart is not None and self.smart.available

    def search(
        self,
        query: str,
        candidates: Sequence[Program],
        mode: SearchMode = SearchMode.KEYWORD,
        locale: str = "en",
    ) -> list[ScoredProgram]:
        """
        Rank ``candidates`` for ``query``.

        Raises:
            SearchUnavailable: smart mode requested and the service failed or
                is not configured.
        """
        if mode is SearchMode.SMART:
            if self.smart is None:
                raise SearchUnavailable("smart search is not configured")
            return self.smart.search(query, candidates, locale)
        return self.keyword.search(query, candidates, locale)

    def smart_search(
        self,
        query: str,
        candidates: Sequence[Program],
        locale: str = "en",
    ) -> tuple[list[ScoredProgram], bool]:
        """Smart ranking plus the service's ``usedAi`` flag."""
        if self.smart is None:
            raise SearchUnavailable("smart search is not configured")
        return self.smart.ranked(query, candidates, locale)


class SearchSession:
    """Smart/keyword lifecycle for one client. Safe to call from several threads."""

    def __init__(
        self,
        engine: SearchEngine,
        executor: ThreadPoolExecutor,
        timeout: float | None = None,
    ):
        self.engine = engine
        self.timeout = settings.SMART_SEARCH_TIMEOUT_S if timeout is None else timeout
        self._executor = executor
        self._lock = threading.Lock()
        self._sequence = itertools.count(1)
        self._latest = 0
        self._inflight: Future | None = None
        self.phase = SearchPhase.IDLE

    @property
    def latest_sequence(self) -> int:
        return self._latest

    def _begin(self) -> int:
        with self._lock:
            seq = next(self._sequence)
            self._latest = seq
            if self._inflight is not None and not self._inflight.done():
                self._inflight.cancel()
                logger.debug("Cancelled in-flight smart search before run %d", seq)
            self._inflight = None
            return seq

    def _is_current(self, seq: int) -> bool:
        return seq == self._latest

    def run(
        self,
        query: str,
        candidates: Sequence[Program],
        smart: bool = False,
        online: bool = True,
        locale: str = "en",
        generation: int = 0,
    ) -> SearchOutcome:
        seq = self._begin()
        phases: list[SearchPhase] = []

        def _enter(phase: SearchPhase) -> None:
            phases.append(phase)
            if self._is_current(seq):
                self.phase = phase

        reason: DegradeReason | None = None
        if smart and tokenize(query):
            if not online:
                reason = DegradeReason.OFFLINE
            elif not self.engine.smart_available:
                reason = DegradeReason.UNAVAILABLE
            else:
                _enter(SearchPhase.SMART_SEARCHING)
                results, used_ai, reason = self._run_smart(seq, query, candidates, locale)
                if not self._is_current(seq):
                    return SearchOutcome(
                        results=(),
                        mode_used=SearchMode.SMART,
                        smart_requested=True,
                        degraded=reason,
                        sequence=seq,
                        generation=generation,
                        superseded=True,
                        phases=tuple(phases),
                    )
                if reason is None:
                    _enter(SearchPhase.IDLE)
                    return SearchOutcome(
                        results=tuple(results),
                        mode_used=SearchMode.SMART,
                        smart_requested=True,
                        degraded=None,
                        sequence=seq,
                        generation=generation,
                        phases=tuple(phases),
                        used_ai=used_ai,
                    )
                _enter(SearchPhase.DEGRADED)
                logger.warning("Smart search degraded (%s); falling back to keyword search", reason.value)

        _enter(SearchPhase.KEYWORD_SEARCHING)
        results = self.engine.search(query, candidates, SearchMode.KEYWORD, locale)
        _enter(SearchPhase.IDLE)
        return SearchOutcome(
            results=tuple(results),
            mode_used=SearchMode.KEYWORD,
            smart_requested=smart,
            degraded=reason,
            sequence=seq,
            generation=generation,
            superseded=not self._is_current(seq),
            phases=tuple(phases),
        )

    def _run_smart(
        self,
        seq: int,
        query: str,
        candidates: Sequence[Program],
        locale: str,
    ) -> tuple[list[ScoredProgram], bool, DegradeReason | None]:
        future = self._executor.submit(self.engine.smart_search, query, candidates, locale)
        with self._lock:
            if self._is_current(seq):
                self._inflight = future
            else:
                future.cancel()
        try:
            results, used_ai = future.result(timeout=self.timeout)
            return results, used_ai, None
        except CancelledError:
            return [], False, DegradeReason.ERROR
        except FutureTimeout:
            future.cancel()
            logger.warning("Smart search exceeded %.1fs", self.timeout)
            return [], False, DegradeReason.TIMEOUT
        except SearchTimeout as exc:
            logger.warning("%s", exc)
            return [], False, DegradeReason.TIMEOUT
        except SearchUnavailable as exc:
            logger.warning("%s", exc)
            return [], False, DegradeReason.ERROR
        except Exception:
            logger.exception("Smart search failed unexpectedly")
            return [], False, DegradeReason.ERROR
        finally:
            with self._lock:
                if self._inflight is future:
                    self._inflight = None
