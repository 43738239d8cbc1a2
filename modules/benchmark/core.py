"""Benchmark corpus — labeled cases for measuring classifier accuracy.

The corpus lives in ``corpus.yaml`` next to this module and is loaded once at
import time into an immutable tuple. ``run_benchmark`` classifies every case
(optionally in parallel, under a call-rate ceiling) and ``summarize``
aggregates the outcomes.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any

import yaml

from domain.models import (
    AccuracyBucket,
    BenchmarkCase,
    BenchmarkResult,
    BenchmarkStats,
    BenchmarkSummary,
    ClassificationResult,
    Difficulty,
    ProblemClass,
)
from kernel.config import CORPUS_FILE

logger = logging.getLogger("auditor.benchmark")

# ---------------------------------------------------------------------------
# Corpus
# ---------------------------------------------------------------------------


def _parse_case(raw: dict[str, Any]) -> BenchmarkCase:
    return BenchmarkCase(
        id=str(raw["id"]),
        name=str(raw["name"]),
        code=str(raw["code"]),
        expected_class=ProblemClass(raw["expected_class"]),
        difficulty=Difficulty(raw["difficulty"]),
        description=str(raw["description"]),
        language=str(raw.get("language", "python")),
    )


def load_corpus(path: Path = CORPUS_FILE) -> tuple[BenchmarkCase, ...]:
    """Read and validate a corpus file.

    Raises:
        ValueError: An entry names an unknown class or difficulty.
        KeyError: An entry lacks a required field.
    """
    entries = yaml.safe_load(path.read_text(encoding="utf-8")) or []
    cases = tuple(_parse_case(entry) for entry in entries)
    logger.debug("Loaded %d benchmark cases from %s", len(cases), path)
    return cases


CORPUS: tuple[BenchmarkCase, ...] = load_corpus()


def get_cases_by_class(problem_class: ProblemClass | str) -> list[BenchmarkCase]:
    """Cases labeled with *problem_class* (empty for ``unknown``)."""
    wanted = ProblemClass.parse(problem_class)
    return [case for case in CORPUS if case.expected_class is wanted]


def get_cases_by_difficulty(level: Difficulty | str) -> list[BenchmarkCase]:
    wanted = level if isinstance(level, Difficulty) else Difficulty(level)
    return [case for case in CORPUS if case.difficulty is wanted]


def get_benchmark_stats(cases: Sequence[BenchmarkCase] = CORPUS) -> BenchmarkStats:
    """Composition of the corpus by class and by difficulty."""
    by_class = tuple(
        (cls, count)
        for cls in ProblemClass
        if (count := sum(1 for c in cases if c.expected_class is cls))
    )
    by_difficulty = tuple(
        (level, sum(1 for c in cases if c.difficulty is level)) for level in Difficulty
    )
    return BenchmarkStats(total=len(cases), by_class=by_class, by_difficulty=by_difficulty)


# ---------------------------------------------------------------------------
# Running
# ---------------------------------------------------------------------------


class RateLimiter:
    """Spaces ``acquire()`` calls at least ``1 / max_calls_per_second`` apart.

    Thread-safe; callers sleep outside the lock.
    """

    def __init__(
        self,
        max_calls_per_second: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_calls_per_second <= 0:
            raise ValueError("max_calls_per_second must be positive")
        self._interval = 1.0 / max_calls_per_second
        self._clock = clock
        self._sleep = sleep
        self._next_slot = float("-inf")
        self._lock = threading.Lock()

    def acquire(self) -> float:
        """Block until the next slot; return how long this call waited."""
        with self._lock:
            now = self._clock()
            wait = self._next_slot - now
            self._next_slot = max(now, self._next_slot) + self._interval
        if wait > 0:
            self._sleep(wait)
            return wait
        return 0.0


def run_benchmark(
    classify: Callable[[str], ClassificationResult],
    *,
    cases: Sequence[BenchmarkCase] = CORPUS,
    concurrency: int = 1,
    max_calls_per_second: float | None = None,
) -> BenchmarkSummary:
    """Classify every case and summarize accuracy.

    Args:
        classify: Classifier under test.
        cases: Corpus to run.
        concurrency: Maximum cases classified at once.
        max_calls_per_second: Ceiling on classifier calls, for oracle-backed
            runs. ``None`` means unlimited.

    Returns:
        The summary; per-case results are kept in ``results`` in corpus order.
    """
    limiter = RateLimiter(max_calls_per_second) if max_calls_per_second else None

    def run_case(case: BenchmarkCase) -> BenchmarkResult:
        if limiter is not None:
            limiter.acquire()
        start = time.perf_counter()
        classification = classify(case.code)
        elapsed_ms = (time.perf_counter() - start) * 1000
        return BenchmarkResult(
            case_id=case.id,
            predicted_class=classification.problem_class,
            expected_class=case.expected_class,
            correct=classification.problem_class is case.expected_class,
            confidence=classification.confidence,
            time_ms=elapsed_ms,
        )

    logger.info("Running %d benchmark cases (concurrency=%d)", len(cases), concurrency)
    if concurrency <= 1:
        results = [run_case(case) for case in cases]
    else:
        with ThreadPoolExecutor(max_workers=concurrency) as pool:
            results = list(pool.map(run_case, cases))

    summary = summarize(results, cases)
    logger.info(
        "Benchmark accuracy: %d/%d (%.1f%%)",
        summary.correct_predictions,
        summary.total_cases,
        summary.accuracy * 100,
    )
    return summary


def _bucket(results: Sequence[BenchmarkResult]) -> AccuracyBucket:
    correct = sum(1 for r in results if r.correct)
    total = len(results)
    return AccuracyBucket(total=total, correct=correct, accuracy=correct / total if total else 0.0)


def summarize(
    results: Sequence[BenchmarkResult], cases: Sequence[BenchmarkCase] = CORPUS
) -> BenchmarkSummary:
    """Aggregate per-case results into overall, per-class and per-difficulty accuracy."""
    difficulty_of = {case.id: case.difficulty for case in cases}
    overall = _bucket(results)

    by_class = tuple(
        (cls, _bucket(group))
        for cls in ProblemClass
        if (group := [r for r in results if r.expected_class is cls])
    )
    by_difficulty = tuple(
        (level, _bucket(group))
        for level in Difficulty
        if (group := [r for r in results if difficulty_of.get(r.case_id) is level])
    )

    count = len(results)
    return BenchmarkSummary(
        total_cases=overall.total,
        correct_predictions=overall.correct,
        accuracy=overall.accuracy,
        by_class=by_class,
        by_difficulty=by_difficulty,
        average_confidence=sum(r.confidence for r in results) / count if count else 0.0,
        average_time_ms=sum(r.time_ms for r in results) / count if count else 0.0,
        results=tuple(results),
    )
