"""Shared pytest fixtures and test factories for the auditor.

Provides:
- Fake ClassificationOraclePort implementations (fixed answer, raising, slow)
- Factory functions for the domain models tests build most often
- Pytest fixtures wrapping the most commonly used fakes and factories
"""

from __future__ import annotations

import threading

import pytest

from domain.models import (
    BenchmarkCase,
    ClassificationResult,
    Difficulty,
    Measurement,
    OperationCounts,
    ProblemClass,
)

# ── Fake Port Implementations ─────────────────────────────────────────────


class FakeOracle:
    """Fake ClassificationOraclePort that returns a configurable result.

    Tracks calls via the ``calls`` attribute.
    """

    def __init__(self, result: ClassificationResult | None = None) -> None:
        self._result = result if result is not None else make_classification()
        self.calls: list[str] = []

    def classify(self, code: str) -> ClassificationResult:
        """Record the call and return the configured result."""
        self.calls.append(code)
        return self._result


class RaisingOracle:
    """Fake oracle whose every call raises the configured exception."""

    def __init__(self, exc: Exception | None = None) -> None:
        self._exc = exc if exc is not None else RuntimeError("connection reset")
        self.calls = 0

    def classify(self, code: str) -> ClassificationResult:
        """Raise the configured exception."""
        self.calls += 1
        raise self._exc


class SlowOracle:
    """Fake oracle that blocks until released (or a safety cap expires)."""

    def __init__(self, cap_seconds: float = 5.0) -> None:
        self.release = threading.Event()
        self._cap = cap_seconds

    def classify(self, code: str) -> ClassificationResult:
        """Block, then answer like a confident oracle."""
        self.release.wait(self._cap)
        return make_classification()


class MappingOracle:
    """Fake oracle answering from a code-to-class table; unlisted code is unknown."""

    def __init__(self, answers: dict[str, ProblemClass]) -> None:
        self._answers = answers
        self.calls = 0
        self._lock = threading.Lock()

    def classify(self, code: str) -> ClassificationResult:
        with self._lock:
            self.calls += 1
        problem_class = self._answers.get(code, ProblemClass.UNKNOWN)
        confidence = 0.0 if problem_class is ProblemClass.UNKNOWN else 0.95
        return make_classification(problem_class=problem_class, confidence=confidence)


# ── Domain Model Factories ───────────────────────────────────────────────


def make_classification(
    problem_class: ProblemClass = ProblemClass.COMPARISON_SORT,
    confidence: float = 0.9,
    reasoning: str = "Nested loops with adjacent swaps",
) -> ClassificationResult:
    """Create a ClassificationResult with sensible defaults."""
    return ClassificationResult(
        problem_class=problem_class,
        confidence=confidence,
        reasoning=reasoning,
    )


def make_counts(**overrides: int) -> OperationCounts:
    """Create an OperationCounts with every field zero unless overridden."""
    return OperationCounts(**overrides)


def make_measurement(input_size: int, comparisons: int, time_ns: float = 0.0) -> Measurement:
    """Create a Measurement whose only non-zero count is ``comparisons``."""
    return Measurement(
        input_size=input_size,
        counts=OperationCounts(comparisons=comparisons),
        time_ns=time_ns,
    )


def make_case(
    case_id: str = "sort-001",
    expected_class: ProblemClass = ProblemClass.COMPARISON_SORT,
    difficulty: Difficulty = Difficulty.EASY,
    code: str = "def sort(arr):\n    return sorted(arr)\n",
    name: str = "Bubble sort",
) -> BenchmarkCase:
    """Create a BenchmarkCase with sensible defaults."""
    return BenchmarkCase(
        id=case_id,
        name=name,
        code=code,
        expected_class=expected_class,
        difficulty=difficulty,
        description="Test case",
    )


# ── Fixtures ─────────────────────────────────────────────────────────────


@pytest.fixture
def fake_oracle() -> FakeOracle:
    """Provide an oracle that confidently answers comparison-sort."""
    return FakeOracle()


@pytest.fixture
def unknown_oracle() -> FakeOracle:
    """Provide an oracle that always answers unknown."""
    return FakeOracle(
        make_classification(
            problem_class=ProblemClass.UNKNOWN,
            confidence=0.0,
            reasoning="Ambiguous code",
        )
    )


@pytest.fixture
def raising_oracle() -> RaisingOracle:
    """Provide an oracle whose calls raise."""
    return RaisingOracle()


@pytest.fixture
def slow_oracle():
    """Provide an oracle that hangs until the test finishes."""
    oracle = SlowOracle()
    yield oracle
    oracle.release.set()


@pytest.fixture
def mapping_oracle():
    """Provide a factory building a MappingOracle from a code-to-class table."""
    return MappingOracle
