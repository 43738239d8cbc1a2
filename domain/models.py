"""Core data types for the Efficiency Auditor.

All records are frozen dataclasses with complete type annotations, except
``OperationCounts``, which is the one mutable accumulator used while a
measurement is running.
This module has ZERO imports from outside the Python standard library.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class AuditorError(Exception):
    """Base class for all errors raised by the auditor."""


class MissingBoundParameterError(AuditorError, ValueError):
    """Raised when a bound formula is evaluated without a required size parameter."""

    def __init__(self, missing: tuple[str, ...]) -> None:
        self.missing = missing
        super().__init__(f"Missing bound parameter(s): {', '.join(missing)}")


class OracleError(AuditorError):
    """Raised by oracle adapters when a classification could not be obtained."""


class OracleUnavailableError(OracleError):
    """The oracle could not be reached (missing command, non-zero exit, timeout)."""


class OracleResponseError(OracleError):
    """The oracle answered, but the answer held no usable JSON document."""


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class ProblemClass(Enum):
    """Canonical algorithmic problem classes with a known lower bound."""

    COMPARISON_SORT = "comparison-sort"
    COUNTING_SORT = "counting-sort"
    BINARY_SEARCH = "binary-search"
    LINEAR_SEARCH = "linear-search"
    GRAPH_BFS = "graph-bfs"
    GRAPH_DFS = "graph-dfs"
    SHORTEST_PATH_DIJKSTRA = "shortest-path-dijkstra"
    STRING_MATCH_NAIVE = "string-match-naive"
    STRING_MATCH_KMP = "string-match-kmp"
    MATRIX_MULTIPLY = "matrix-multiply"
    TREE_TRAVERSAL = "tree-traversal"
    HASH_LOOKUP = "hash-lookup"
    MEDIAN_FINDING = "median-finding"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: object) -> ProblemClass:
        """Coerce *value* into a member; anything outside the enumeration is UNKNOWN."""
        if isinstance(value, ProblemClass):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return cls.UNKNOWN
        return cls.UNKNOWN


PROBLEM_CLASS_LABELS: dict[ProblemClass, str] = {
    ProblemClass.COMPARISON_SORT: "Comparison-Based Sort",
    ProblemClass.COUNTING_SORT: "Counting/Bucket Sort",
    ProblemClass.BINARY_SEARCH: "Binary Search",
    ProblemClass.LINEAR_SEARCH: "Linear Search",
    ProblemClass.GRAPH_BFS: "Breadth-First Search",
    ProblemClass.GRAPH_DFS: "Depth-First Search",
    ProblemClass.SHORTEST_PATH_DIJKSTRA: "Dijkstra Shortest Path",
    ProblemClass.STRING_MATCH_NAIVE: "Naive String Matching",
    ProblemClass.STRING_MATCH_KMP: "KMP String Matching",
    ProblemClass.MATRIX_MULTIPLY: "Matrix Multiplication",
    ProblemClass.TREE_TRAVERSAL: "Tree Traversal",
    ProblemClass.HASH_LOOKUP: "Hash Table Lookup",
    ProblemClass.MEDIAN_FINDING: "Median/Selection",
    ProblemClass.UNKNOWN: "Unknown Problem Class",
}


def get_class_label(problem_class: ProblemClass) -> str:
    """Return the human-readable label for a problem class."""
    return PROBLEM_CLASS_LABELS[problem_class]


class OperationType(Enum):
    """Unit a theoretical bound is denominated in."""

    COMPARISONS = "comparisons"
    OPERATIONS = "operations"
    ACCESSES = "accesses"


class Difficulty(Enum):
    """Difficulty tag of a benchmark case."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


# ---------------------------------------------------------------------------
# Bounds
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Citation:
    """Bibliographic source of a theoretical bound."""

    authors: tuple[str, ...]
    title: str
    venue: str
    year: int
    theorem: str | None = None


@dataclass(frozen=True)
class BoundParams:
    """Named size parameters a bound formula may use.

    Only the subset relevant to a class needs to be populated.
    """

    n: float | None = None
    m: float | None = None
    v: float | None = None
    e: float | None = None
    k: float | None = None

    def require(self, *names: str) -> tuple[float, ...]:
        """Return the named values, raising if any of them is missing."""
        missing = tuple(name for name in names if getattr(self, name) is None)
        if missing:
            raise MissingBoundParameterError(missing)
        return tuple(float(getattr(self, name)) for name in names)


@dataclass(frozen=True)
class TheoreticalBound:
    """A published lower bound for one problem class."""

    problem_class: ProblemClass
    notation: str
    formula: Callable[[BoundParams], float]
    operation_type: OperationType
    citation: Citation
    tight: bool
    assumptions: tuple[str, ...]
    required_params: tuple[str, ...]


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def clamp_confidence(value: object) -> float:
    """Clamp an arbitrary value into ``[0, 1]``; non-numbers and NaN become 0."""
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number):
        return 0.0
    return min(1.0, max(0.0, number))


@dataclass(frozen=True)
class AlternativeClass:
    """A ranked runner-up classification."""

    problem_class: ProblemClass
    confidence: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "confidence", clamp_confidence(self.confidence))


@dataclass(frozen=True)
class ClassificationResult:
    """Final classification of a code fragment."""

    problem_class: ProblemClass
    confidence: float
    reasoning: str
    alternatives: tuple[AlternativeClass, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "confidence", clamp_confidence(self.confidence))


@dataclass(frozen=True)
class CodePatterns:
    """Surface syntactic cues found in a code fragment."""

    has_comparisons: bool
    has_graph_structure: bool
    has_recursion: bool
    has_loops: bool
    has_hash_access: bool
    has_array_swaps: bool
    has_queue_operations: bool
    has_stack_operations: bool


# ---------------------------------------------------------------------------
# Instrumentation
# ---------------------------------------------------------------------------

COUNT_FIELDS: tuple[str, ...] = (
    "comparisons",
    "swaps",
    "reads",
    "writes",
    "allocations",
    "function_calls",
)


@dataclass
class OperationCounts:
    """Mutable accumulator of the operations a fragment performed."""

    comparisons: int = 0
    swaps: int = 0
    reads: int = 0
    writes: int = 0
    allocations: int = 0
    function_calls: int = 0

    def copy(self) -> OperationCounts:
        """Return an independent snapshot."""
        return OperationCounts(**{name: getattr(self, name) for name in COUNT_FIELDS})

    def reset(self) -> None:
        """Zero every counter in place."""
        for name in COUNT_FIELDS:
            setattr(self, name, 0)

    def merged(self, other: OperationCounts) -> OperationCounts:
        """Return a new accumulator holding the field-wise sum of both."""
        return OperationCounts(
            **{name: getattr(self, name) + getattr(other, name) for name in COUNT_FIELDS}
        )

    def total(self) -> int:
        """Comparisons, swaps, reads and writes combined."""
        return self.comparisons + self.swaps + self.reads + self.writes


@dataclass(frozen=True)
class MeasurementResult:
    """Outcome of running one function against an instrumented sequence."""

    counts: OperationCounts
    return_value: Any
    execution_time_ms: float


@dataclass(frozen=True)
class Measurement:
    """One data point of a multi-size measurement series."""

    input_size: int
    counts: OperationCounts
    time_ns: float


@dataclass(frozen=True)
class MeasurementStats:
    """Per-field average/min/max over a series, plus variance of the totals."""

    avg_counts: dict[str, float]
    min_counts: dict[str, float]
    max_counts: dict[str, float]
    variance: float


# ---------------------------------------------------------------------------
# Efficiency
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EfficiencyResult:
    """How close a fragment came to the theoretical optimum."""

    problem_class: ProblemClass
    classification_confidence: float
    input_size: int
    theoretical_minimum: float
    actual_operations: int
    efficiency_ratio: float
    wasted_operations: float
    overhead_ratio: float
    notation: str
    optimal_algorithm: str
    is_tight_bound: bool
    # Bound parameters that were needed but not supplied; the minimum is then 0
    missing_params: tuple[str, ...] = ()


@dataclass(frozen=True)
class ComplexityEstimate:
    """Empirically inferred growth class of a measurement series."""

    complexity: str
    confidence: float
    slope: float | None = None
    r_squared: float | None = None


@dataclass(frozen=True)
class SizedAnalysis:
    """A measurement paired with the efficiency computed from it."""

    measurement: Measurement
    efficiency: EfficiencyResult


# ---------------------------------------------------------------------------
# Benchmark
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BenchmarkCase:
    """A labeled corpus entry."""

    id: str
    name: str
    code: str
    expected_class: ProblemClass
    difficulty: Difficulty
    description: str
    language: str = "python"


@dataclass(frozen=True)
class BenchmarkResult:
    """Outcome of classifying one benchmark case."""

    case_id: str
    predicted_class: ProblemClass
    expected_class: ProblemClass
    correct: bool
    confidence: float
    time_ms: float


@dataclass(frozen=True)
class AccuracyBucket:
    """Correct/total counts for one slice of the corpus."""

    total: int
    correct: int
    accuracy: float


@dataclass(frozen=True)
class BenchmarkSummary:
    """Aggregated accuracy statistics over a corpus run."""

    total_cases: int
    correct_predictions: int
    accuracy: float
    by_class: tuple[tuple[ProblemClass, AccuracyBucket], ...]
    by_difficulty: tuple[tuple[Difficulty, AccuracyBucket], ...]
    average_confidence: float
    average_time_ms: float
    results: tuple[BenchmarkResult, ...] = field(default=(), repr=False)


@dataclass(frozen=True)
class BenchmarkStats:
    """Static composition of the corpus."""

    total: int
    by_class: tuple[tuple[ProblemClass, int], ...]
    by_difficulty: tuple[tuple[Difficulty, int], ...]
