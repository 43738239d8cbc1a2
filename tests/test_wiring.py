"""Tests for wiring.py hosting entry points and graceful degradation.

Verifies that audit_code classifies and scores fragments, that
classification failures degrade to the unknown result instead of raising,
that a matched class missing its bound parameters is kept, and that the
benchmark and inference entry points are wired to the right modules and
settings.
"""

from __future__ import annotations

import logging
import math

import pytest

import wiring
from adapters.oracles.claude_cli import ClaudeCliOracle
from domain.models import (
    BoundParams,
    ClassificationResult,
    OperationCounts,
    ProblemClass,
)
from kernel.config import Settings

SETTINGS = Settings()

BUBBLE_SORT = """
def bubble_sort(arr):
    for i in range(len(arr)):
        for j in range(len(arr) - i - 1):
            if arr[j] > arr[j + 1]:
                arr[j], arr[j + 1] = arr[j + 1], arr[j]
    return arr
"""

BFS_SOURCE = """
from collections import deque

def bfs(graph, start):
    seen = {start}
    queue = deque([start])
    while queue:
        node = queue.popleft()
        for neighbor in graph[node]:
            if neighbor not in seen:
                seen.add(neighbor)
                queue.append(neighbor)
    return seen
"""


def _answer(problem_class: ProblemClass, confidence: float = 0.9) -> ClassificationResult:
    return ClassificationResult(problem_class=problem_class, confidence=confidence, reasoning="")


class _Oracle:
    def __init__(self, problem_class: ProblemClass) -> None:
        self._problem_class = problem_class

    def classify(self, code: str) -> ClassificationResult:
        return _answer(self._problem_class)


class TestAuditCode:
    """audit_code classifies, scores and never raises for known failures."""

    def test_oracle_classification_is_scored(self, fake_oracle) -> None:
        result = wiring.audit_code(
            BUBBLE_SORT,
            input_size=16,
            actual_operations=120,
            use_oracle=True,
            oracle=fake_oracle,
            settings=SETTINGS,
        )
        assert fake_oracle.calls == [BUBBLE_SORT]
        assert result.problem_class is ProblemClass.COMPARISON_SORT
        assert result.classification_confidence == 0.9
        assert result.input_size == 16
        assert 0 < result.efficiency_ratio < 100
        assert result.notation == "Ω(n log n)"

    def test_counts_are_reduced_to_the_bound_unit(self, fake_oracle) -> None:
        counts = OperationCounts(comparisons=100, swaps=50, reads=400, writes=200)
        result = wiring.audit_code(
            BUBBLE_SORT,
            input_size=16,
            counts=counts,
            use_oracle=True,
            oracle=fake_oracle,
            settings=SETTINGS,
        )
        assert result.actual_operations == 100
        assert result.classification_confidence == 0.9
        assert result.input_size == 16

    def test_graph_params_are_passed_through(self) -> None:
        result = wiring.audit_code(
            "def bfs(graph, start): ...",
            input_size=10,
            actual_operations=60,
            params=BoundParams(v=10, e=20),
            use_oracle=True,
            oracle=_Oracle(ProblemClass.GRAPH_BFS),
            settings=SETTINGS,
        )
        assert result.problem_class is ProblemClass.GRAPH_BFS
        assert result.theoretical_minimum == 30
        assert result.efficiency_ratio == pytest.approx(50)

    def test_missing_bound_params_keep_the_class(self, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="auditor.wiring"):
            result = wiring.audit_code(
                "def bfs(graph, start): ...",
                input_size=10,
                actual_operations=60,
                use_oracle=True,
                oracle=_Oracle(ProblemClass.GRAPH_BFS),
                settings=SETTINGS,
            )
        assert result.problem_class is ProblemClass.GRAPH_BFS
        assert result.classification_confidence == 0.9
        assert result.missing_params == ("v", "e")
        assert result.notation == "Ω(V + E)"
        assert result.theoretical_minimum == 0
        assert result.efficiency_ratio == 0
        assert result.overhead_ratio == math.inf
        assert result.wasted_operations == 60
        assert "[fallback] graph-bfs bound needs v, e" in caplog.text

    def test_heuristic_bfs_without_graph_size_keeps_the_class(self) -> None:
        result = wiring.audit_code(
            BFS_SOURCE, input_size=100, actual_operations=500, use_oracle=False, settings=SETTINGS
        )
        assert result.problem_class is ProblemClass.GRAPH_BFS
        assert result.classification_confidence > 0
        assert result.missing_params == ("v", "e")
        assert result.actual_operations == 500

    def test_missing_params_with_counts_reduce_to_the_bound_unit(self) -> None:
        result = wiring.audit_code(
            "def dfs(graph, node): ...",
            input_size=10,
            counts=OperationCounts(comparisons=4, reads=30, writes=10),
            use_oracle=True,
            oracle=_Oracle(ProblemClass.GRAPH_DFS),
            settings=SETTINGS,
        )
        assert result.problem_class is ProblemClass.GRAPH_DFS
        assert result.missing_params == ("v", "e")
        assert result.actual_operations == 40

    def test_raising_oracle_without_heuristic_guess_is_unknown(self, raising_oracle) -> None:
        result = wiring.audit_code(
            "x = 1",
            input_size=5,
            actual_operations=7,
            use_oracle=True,
            oracle=raising_oracle,
            settings=SETTINGS,
        )
        assert raising_oracle.calls == 1
        assert result.problem_class is ProblemClass.UNKNOWN
        assert result.efficiency_ratio == 0
        assert result.overhead_ratio == math.inf
        assert result.wasted_operations == 7

    def test_classifier_crash_is_contained(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def broken(code: str, **kwargs: object) -> ClassificationResult:
            raise RuntimeError("classifier crashed")

        monkeypatch.setattr(wiring, "classify_code", broken)
        result = wiring.audit_code(
            BUBBLE_SORT, input_size=8, actual_operations=30, use_oracle=False, settings=SETTINGS
        )
        assert result.problem_class is ProblemClass.UNKNOWN
        assert result.actual_operations == 30

    def test_requires_some_measurement(self) -> None:
        with pytest.raises(ValueError):
            wiring.audit_code(BUBBLE_SORT, input_size=8, settings=SETTINGS)

    def test_use_oracle_defaults_to_setting(self, fake_oracle) -> None:
        wiring.audit_code(
            BUBBLE_SORT, input_size=8, actual_operations=30, oracle=fake_oracle, settings=SETTINGS
        )
        assert fake_oracle.calls == []

        wiring.audit_code(
            BUBBLE_SORT,
            input_size=8,
            actual_operations=30,
            oracle=fake_oracle,
            settings=Settings(use_oracle=True),
        )
        assert fake_oracle.calls == [BUBBLE_SORT]

    def test_default_oracle_is_used_when_none_given(
        self, monkeypatch: pytest.MonkeyPatch, fake_oracle
    ) -> None:
        built: list[Settings] = []

        def factory(settings: Settings | None = None):
            built.append(settings)
            return fake_oracle

        monkeypatch.setattr(wiring, "default_oracle", factory)
        wiring.audit_code(
            BUBBLE_SORT, input_size=8, actual_operations=30, use_oracle=True, settings=SETTINGS
        )
        assert built == [SETTINGS]
        assert fake_oracle.calls == [BUBBLE_SORT]


def test_default_oracle_reads_settings() -> None:
    oracle = wiring.default_oracle(Settings(oracle_cmd="my-agent", oracle_timeout=4.0))
    assert isinstance(oracle, ClaudeCliOracle)
    assert oracle._command == "my-agent"
    assert oracle._timeout == 4.0


class TestInferComplexity:
    def test_linear_series(self) -> None:
        estimate = wiring.infer_complexity([(100, 210), (1000, 2010), (10000, 20010)])
        assert estimate.complexity == "O(n)"

    def test_bad_input_is_unknown(self) -> None:
        estimate = wiring.infer_complexity([("many", 1), (10, 10), (100, 100)])
        assert estimate.complexity == "unknown"
        assert estimate.confidence == 0


class TestSelfBenchmark:
    def test_heuristics_only(self, fake_oracle) -> None:
        summary = wiring.run_self_benchmark(oracle=fake_oracle, settings=SETTINGS)
        assert summary.total_cases == 100
        assert fake_oracle.calls == []

    def test_oracle_backed_run(self, mapping_oracle) -> None:
        from modules.benchmark.core import CORPUS

        oracle = mapping_oracle({case.code: case.expected_class for case in CORPUS})
        summary = wiring.run_self_benchmark(
            use_oracle=True,
            concurrency=4,
            oracle=oracle,
            settings=Settings(benchmark_max_calls_per_second=10_000.0),
        )
        assert summary.accuracy == 1.0
        assert oracle.calls == 100
