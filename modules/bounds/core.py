"""Bounds registry — published lower bounds for every known problem class.

The table is built once at import time and exposed read-only, so it can be
shared by any number of callers without locking. Each entry cites its
source and states the assumptions under which the bound holds.

Formulas return raw floats; ``calculate_theoretical_minimum`` rounds up and
clamps to zero.
"""

from __future__ import annotations

import logging
import math
from types import MappingProxyType
from typing import TYPE_CHECKING

from domain.models import (
    BoundParams,
    Citation,
    OperationType,
    ProblemClass,
    TheoreticalBound,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger("auditor.bounds")

# ---------------------------------------------------------------------------
# Citations
# ---------------------------------------------------------------------------

CLRS = Citation(
    authors=("Cormen", "Leiserson", "Rivest", "Stein"),
    title="Introduction to Algorithms",
    venue="MIT Press",
    year=2009,
)

KNUTH_VOL3 = Citation(
    authors=("Knuth",),
    title="The Art of Computer Programming, Vol. 3: Sorting and Searching",
    venue="Addison-Wesley",
    year=1998,
)

KMP_PAPER = Citation(
    authors=("Knuth", "Morris", "Pratt"),
    title="Fast Pattern Matching in Strings",
    venue="SIAM Journal on Computing",
    year=1977,
)

DIJKSTRA_PAPER = Citation(
    authors=("Dijkstra",),
    title="A Note on Two Problems in Connexion with Graphs",
    venue="Numerische Mathematik",
    year=1959,
)

BLUM_MEDIAN = Citation(
    authors=("Blum", "Floyd", "Pratt", "Rivest", "Tarjan"),
    title="Time Bounds for Selection",
    venue="Journal of Computer and System Sciences",
    year=1973,
)

FOLKLORE = Citation(
    authors=(),
    title="Information-theoretic lower bound",
    venue="Folklore",
    year=0,
)


def _with_theorem(citation: Citation, theorem: str) -> Citation:
    return Citation(
        authors=citation.authors,
        title=citation.title,
        venue=citation.venue,
        year=citation.year,
        theorem=theorem,
    )


# ---------------------------------------------------------------------------
# Formulas
# ---------------------------------------------------------------------------


def _comparison_sort(params: BoundParams) -> float:
    # log2(n!) ~ n log2 n - n log2 e  (Stirling)
    (n,) = params.require("n")
    if n <= 1:
        return 0.0
    return max(0.0, n * math.log2(n) - 1.44 * n)


def _counting_sort(params: BoundParams) -> float:
    n, k = params.require("n", "k")
    if n <= 1:
        return 0.0
    return n + k


def _binary_search(params: BoundParams) -> float:
    (n,) = params.require("n")
    if n < 1:
        return 0.0
    # One comparison is needed even for a single element.
    return max(1.0, math.ceil(math.log2(n)))


def _linear(params: BoundParams) -> float:
    (n,) = params.require("n")
    if n <= 1:
        return 0.0
    return n


def _graph_traversal(params: BoundParams) -> float:
    v, e = params.require("v", "e")
    return v + e


def _dijkstra(params: BoundParams) -> float:
    v, e = params.require("v", "e")
    if v <= 1:
        return 0.0
    return (v + e) * math.log2(v)


def _string_match_naive(params: BoundParams) -> float:
    n, m = params.require("n", "m")
    if n <= 1:
        return 0.0
    return n * m


def _string_match_kmp(params: BoundParams) -> float:
    n, m = params.require("n", "m")
    if n <= 1:
        return 0.0
    return n + m


def _matrix_multiply(params: BoundParams) -> float:
    (n,) = params.require("n")
    if n <= 1:
        return 0.0
    return n * n


def _constant(params: BoundParams) -> float:
    return 1.0


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

_ENTRIES: tuple[TheoreticalBound, ...] = (
    # Decision-tree argument: distinguishing n! orderings needs log2(n!)
    # comparisons. Achieved by merge sort and heap sort.
    TheoreticalBound(
        problem_class=ProblemClass.COMPARISON_SORT,
        notation="Ω(n log n)",
        formula=_comparison_sort,
        operation_type=OperationType.COMPARISONS,
        citation=_with_theorem(CLRS, "Theorem 8.1"),
        tight=True,
        assumptions=(
            "Comparison-based sorting only",
            "All elements are distinct",
            "Random access memory model",
        ),
        required_params=("n",),
    ),
    TheoreticalBound(
        problem_class=ProblemClass.COUNTING_SORT,
        notation="Ω(n + k)",
        formula=_counting_sort,
        operation_type=OperationType.OPERATIONS,
        citation=_with_theorem(CLRS, "Section 8.2"),
        tight=True,
        assumptions=(
            "Integer keys in a known range of size k",
            "Every input element must be read once",
            "Every bucket must be visited once",
        ),
        required_params=("n", "k"),
    ),
    # Each comparison yields at most one bit; locating one of n slots needs log2(n).
    TheoreticalBound(
        problem_class=ProblemClass.BINARY_SEARCH,
        notation="Ω(log n)",
        formula=_binary_search,
        operation_type=OperationType.COMPARISONS,
        citation=FOLKLORE,
        tight=True,
        assumptions=(
            "Sorted input array",
            "Random access memory",
            "Element may or may not exist",
        ),
        required_params=("n",),
    ),
    # Adversary argument: the target can always sit in the last slot examined.
    TheoreticalBound(
        problem_class=ProblemClass.LINEAR_SEARCH,
        notation="Ω(n)",
        formula=_linear,
        operation_type=OperationType.COMPARISONS,
        citation=FOLKLORE,
        tight=True,
        assumptions=(
            "Unsorted input",
            "No preprocessing allowed",
            "Element may not exist",
        ),
        required_params=("n",),
    ),
    TheoreticalBound(
        problem_class=ProblemClass.GRAPH_BFS,
        notation="Ω(V + E)",
        formula=_graph_traversal,
        operation_type=OperationType.ACCESSES,
        citation=_with_theorem(CLRS, "Theorem 22.2"),
        tight=True,
        assumptions=(
            "Adjacency list representation",
            "Must visit all reachable vertices",
            "Unweighted graph",
        ),
        required_params=("v", "e"),
    ),
    TheoreticalBound(
        problem_class=ProblemClass.GRAPH_DFS,
        notation="Ω(V + E)",
        formula=_graph_traversal,
        operation_type=OperationType.ACCESSES,
        citation=_with_theorem(CLRS, "Theorem 22.3"),
        tight=True,
        assumptions=(
            "Adjacency list representation",
            "Must visit all reachable vertices",
        ),
        required_params=("v", "e"),
    ),
    # Binary-heap bound; the Fibonacci-heap O(V log V + E) variant is not used.
    TheoreticalBound(
        problem_class=ProblemClass.SHORTEST_PATH_DIJKSTRA,
        notation="Ω((V + E) log V)",
        formula=_dijkstra,
        operation_type=OperationType.OPERATIONS,
        citation=DIJKSTRA_PAPER,
        tight=True,
        assumptions=(
            "Binary heap priority queue",
            "Non-negative edge weights",
            "Single-source shortest paths",
        ),
        required_params=("v", "e"),
    ),
    TheoreticalBound(
        problem_class=ProblemClass.STRING_MATCH_NAIVE,
        notation="Ω(nm)",
        formula=_string_match_naive,
        operation_type=OperationType.COMPARISONS,
        citation=KNUTH_VOL3,
        tight=False,
        assumptions=(
            "Naive sliding window approach",
            "No preprocessing of pattern",
            "Worst case adversarial input",
        ),
        required_params=("n", "m"),
    ),
    TheoreticalBound(
        problem_class=ProblemClass.STRING_MATCH_KMP,
        notation="Ω(n + m)",
        formula=_string_match_kmp,
        operation_type=OperationType.COMPARISONS,
        citation=KMP_PAPER,
        tight=True,
        assumptions=(
            "Pattern preprocessing allowed",
            "Single pattern matching",
            "Sequential text scanning",
        ),
        required_params=("n", "m"),
    ),
    # Output has n² cells. Best known upper bound is ~n^2.37; the gap is open.
    TheoreticalBound(
        problem_class=ProblemClass.MATRIX_MULTIPLY,
        notation="Ω(n²)",
        formula=_matrix_multiply,
        operation_type=OperationType.OPERATIONS,
        citation=FOLKLORE,
        tight=False,
        assumptions=(
            "n × n square matrices",
            "Standard algebraic operations",
            "No sparsity exploitation",
        ),
        required_params=("n",),
    ),
    TheoreticalBound(
        problem_class=ProblemClass.TREE_TRAVERSAL,
        notation="Ω(n)",
        formula=_linear,
        operation_type=OperationType.ACCESSES,
        citation=_with_theorem(CLRS, "Theorem 12.1"),
        tight=True,
        assumptions=(
            "n is the number of nodes",
            "Every node must be visited once",
        ),
        required_params=("n",),
    ),
    TheoreticalBound(
        problem_class=ProblemClass.HASH_LOOKUP,
        notation="Ω(1)",
        formula=_constant,
        operation_type=OperationType.ACCESSES,
        citation=_with_theorem(CLRS, "Theorem 11.2"),
        tight=True,
        assumptions=(
            "Amortized expected cost",
            "Simple uniform hashing",
            "Load factor bounded by a constant",
        ),
        required_params=(),
    ),
    TheoreticalBound(
        problem_class=ProblemClass.MEDIAN_FINDING,
        notation="Ω(n)",
        formula=_linear,
        operation_type=OperationType.COMPARISONS,
        citation=BLUM_MEDIAN,
        tight=True,
        assumptions=(
            "Finding exact median or kth element",
            "No preprocessing/sorting allowed",
            "Comparison-based model",
        ),
        required_params=("n",),
    ),
)

BOUNDS: Mapping[ProblemClass, TheoreticalBound] = MappingProxyType(
    {bound.problem_class: bound for bound in _ENTRIES}
)

_OPTIMAL_ALGORITHMS: Mapping[ProblemClass, str] = MappingProxyType(
    {
        ProblemClass.COMPARISON_SORT: "Merge sort or heap sort: O(n log n) comparisons, stable",
        ProblemClass.COUNTING_SORT: "Counting sort: O(n + k) where k is range, non-comparison",
        ProblemClass.BINARY_SEARCH: "Iterative binary search: O(log n) comparisons, space O(1)",
        ProblemClass.LINEAR_SEARCH: "Sequential scan: O(n) comparisons worst case, O(1) space",
        ProblemClass.GRAPH_BFS: "Queue-based BFS: O(V + E) with adjacency list representation",
        ProblemClass.GRAPH_DFS: "Recursive or stack-based DFS: O(V + E) with adjacency list",
        ProblemClass.SHORTEST_PATH_DIJKSTRA: "Dijkstra with binary heap: O((V + E) log V)",
        ProblemClass.STRING_MATCH_NAIVE: "Sliding window: O(nm) worst case, O(1) space",
        ProblemClass.STRING_MATCH_KMP: "Knuth-Morris-Pratt: O(n + m) with O(m) preprocessing",
        ProblemClass.MATRIX_MULTIPLY: "Strassen: O(n^2.807), practical for large matrices",
        ProblemClass.TREE_TRAVERSAL: "Iterative with stack or Morris traversal: O(n)",
        ProblemClass.HASH_LOOKUP: "Hash table with good hash function: O(1) amortized",
        ProblemClass.MEDIAN_FINDING: (
            "Quickselect: O(n) expected, or median-of-medians: O(n) worst case"
        ),
        ProblemClass.UNKNOWN: "Unable to determine optimal algorithm for unknown problem class",
    }
)


# ---------------------------------------------------------------------------
# Lookup functions
# ---------------------------------------------------------------------------


def get_bound(problem_class: ProblemClass) -> TheoreticalBound | None:
    """Return the bound for *problem_class*, or None when there is none."""
    return BOUNDS.get(problem_class)


def all_bounds() -> tuple[TheoreticalBound, ...]:
    """Return every registered bound in declaration order."""
    return _ENTRIES


def calculate_theoretical_minimum(problem_class: ProblemClass, params: BoundParams) -> float:
    """Minimum operation count for *problem_class* at the given sizes.

    Args:
        problem_class: Class whose bound to evaluate.
        params: Size parameters; those named in the bound's
            ``required_params`` must be set.

    Returns:
        The formula value rounded up and clamped to ``>= 0``, or
        ``math.inf`` when the class has no registered bound.

    Raises:
        MissingBoundParameterError: A required size parameter is missing.
    """
    bound = BOUNDS.get(problem_class)
    if bound is None:
        logger.debug("No bound registered for %s", problem_class.value)
        return math.inf
    return float(max(0, math.ceil(bound.formula(params))))


def get_optimal_algorithm(problem_class: ProblemClass) -> str:
    """Describe the algorithm that achieves (or best approaches) the bound."""
    return _OPTIMAL_ALGORITHMS.get(problem_class, _OPTIMAL_ALGORITHMS[ProblemClass.UNKNOWN])


def is_tight_bound(problem_class: ProblemClass) -> bool:
    """True if an algorithm achieving the bound is known."""
    bound = BOUNDS.get(problem_class)
    return bound.tight if bound is not None else False


def format_citation(citation: Citation) -> str:
    """Render a citation for display.

    Zero authors render the title alone; one or two authors are joined
    with "and"; three or more collapse to "First et al.".
    """
    if not citation.authors:
        return citation.title

    if len(citation.authors) > 2:
        authors = f"{citation.authors[0]} et al."
    else:
        authors = " and ".join(citation.authors)

    theorem = f", {citation.theorem}" if citation.theorem else ""
    return f'{authors}. "{citation.title}" {citation.venue}, {citation.year}{theorem}'
