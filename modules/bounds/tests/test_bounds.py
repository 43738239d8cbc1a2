"""Tests for modules/bounds/core.py — formulas, lookups and citation rendering."""

from __future__ import annotations

import math

import pytest

from domain.models import (
    BoundParams,
    Citation,
    MissingBoundParameterError,
    OperationType,
    ProblemClass,
)
from modules.bounds.core import (
    BOUNDS,
    CLRS,
    FOLKLORE,
    all_bounds,
    calculate_theoretical_minimum,
    format_citation,
    get_bound,
    get_optimal_algorithm,
    is_tight_bound,
)

_KNOWN = [c for c in ProblemClass if c is not ProblemClass.UNKNOWN]


# ---------------------------------------------------------------------------
# Registry totality
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("problem_class", _KNOWN)
def test_every_known_class_has_exactly_one_bound(problem_class: ProblemClass) -> None:
    entries = [b for b in all_bounds() if b.problem_class is problem_class]
    assert len(entries) == 1
    assert get_bound(problem_class) is entries[0]


def test_unknown_has_no_bound() -> None:
    assert get_bound(ProblemClass.UNKNOWN) is None
    assert len(BOUNDS) == len(_KNOWN)


def test_registry_is_read_only() -> None:
    with pytest.raises(TypeError):
        BOUNDS[ProblemClass.UNKNOWN] = BOUNDS[ProblemClass.LINEAR_SEARCH]  # type: ignore[index]


# ---------------------------------------------------------------------------
# Formulas
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("n", [2, 3, 7, 8, 100, 1000, 1023, 1024, 1025, 10**6])
def test_binary_search_is_ceil_log2(n: int) -> None:
    minimum = calculate_theoretical_minimum(ProblemClass.BINARY_SEARCH, BoundParams(n=n))
    assert minimum == math.ceil(math.log2(n))


def test_binary_search_single_element_needs_one_comparison() -> None:
    assert calculate_theoretical_minimum(ProblemClass.BINARY_SEARCH, BoundParams(n=1)) == 1


def test_linear_search() -> None:
    assert calculate_theoretical_minimum(ProblemClass.LINEAR_SEARCH, BoundParams(n=100)) == 100
    assert calculate_theoretical_minimum(ProblemClass.LINEAR_SEARCH, BoundParams(n=0)) == 0


def test_graph_bfs_and_dfs() -> None:
    params = BoundParams(v=100, e=500)
    assert calculate_theoretical_minimum(ProblemClass.GRAPH_BFS, params) == 600
    assert calculate_theoretical_minimum(ProblemClass.GRAPH_DFS, params) == 600


def test_dijkstra() -> None:
    minimum = calculate_theoretical_minimum(
        ProblemClass.SHORTEST_PATH_DIJKSTRA, BoundParams(v=100, e=500)
    )
    assert 3900 < minimum < 4100


def test_string_matching() -> None:
    params = BoundParams(n=1000, m=50)
    assert calculate_theoretical_minimum(ProblemClass.STRING_MATCH_KMP, params) == 1050
    assert calculate_theoretical_minimum(ProblemClass.STRING_MATCH_NAIVE, params) == 50_000


def test_matrix_multiply() -> None:
    assert calculate_theoretical_minimum(ProblemClass.MATRIX_MULTIPLY, BoundParams(n=100)) == 10_000


def test_counting_sort_tree_hash_median() -> None:
    assert calculate_theoretical_minimum(ProblemClass.COUNTING_SORT, BoundParams(n=50, k=10)) == 60
    assert calculate_theoretical_minimum(ProblemClass.TREE_TRAVERSAL, BoundParams(n=31)) == 31
    assert calculate_theoretical_minimum(ProblemClass.HASH_LOOKUP, BoundParams()) == 1
    assert calculate_theoretical_minimum(ProblemClass.MEDIAN_FINDING, BoundParams(n=99)) == 99


def test_comparison_sort_range() -> None:
    minimum = calculate_theoretical_minimum(ProblemClass.COMPARISON_SORT, BoundParams(n=1000))
    assert 8000 < minimum < 10_000
    assert calculate_theoretical_minimum(ProblemClass.COMPARISON_SORT, BoundParams(n=1)) == 0


@pytest.mark.parametrize("n", range(0, 40))
def test_comparison_sort_never_negative(n: int) -> None:
    assert calculate_theoretical_minimum(ProblemClass.COMPARISON_SORT, BoundParams(n=n)) >= 0


@pytest.mark.parametrize("problem_class", _KNOWN)
def test_degenerate_sizes_clamp_to_zero_unless_constant(problem_class: ProblemClass) -> None:
    params = BoundParams(n=1, m=1, v=0, e=0, k=0)
    minimum = calculate_theoretical_minimum(problem_class, params)
    if problem_class in (ProblemClass.BINARY_SEARCH, ProblemClass.HASH_LOOKUP):
        assert minimum == 1
    else:
        assert minimum == 0


def test_unknown_class_minimum_is_infinite() -> None:
    assert calculate_theoretical_minimum(ProblemClass.UNKNOWN, BoundParams(n=10)) == math.inf


def test_missing_parameters_raise() -> None:
    with pytest.raises(MissingBoundParameterError) as exc_info:
        calculate_theoretical_minimum(ProblemClass.GRAPH_BFS, BoundParams(n=10))
    assert exc_info.value.missing == ("v", "e")
    assert isinstance(exc_info.value, ValueError)


def test_required_params_cover_formula() -> None:
    """Supplying exactly the declared params is always enough."""
    for bound in all_bounds():
        params = BoundParams(**{name: 64 for name in bound.required_params})
        assert calculate_theoretical_minimum(bound.problem_class, params) >= 0


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------


def test_operation_types() -> None:
    assert get_bound(ProblemClass.COMPARISON_SORT).operation_type is OperationType.COMPARISONS  # type: ignore[union-attr]
    assert get_bound(ProblemClass.GRAPH_BFS).operation_type is OperationType.ACCESSES  # type: ignore[union-attr]
    assert get_bound(ProblemClass.MATRIX_MULTIPLY).operation_type is OperationType.OPERATIONS  # type: ignore[union-attr]


def test_tightness() -> None:
    assert is_tight_bound(ProblemClass.COMPARISON_SORT) is True
    assert is_tight_bound(ProblemClass.MATRIX_MULTIPLY) is False
    assert is_tight_bound(ProblemClass.STRING_MATCH_NAIVE) is False
    assert is_tight_bound(ProblemClass.UNKNOWN) is False


def test_optimal_algorithm_descriptions() -> None:
    for problem_class in ProblemClass:
        assert get_optimal_algorithm(problem_class)
    assert "Unable to determine" in get_optimal_algorithm(ProblemClass.UNKNOWN)
    assert "Merge sort" in get_optimal_algorithm(ProblemClass.COMPARISON_SORT)


def test_every_bound_has_assumptions_and_notation() -> None:
    for bound in all_bounds():
        assert bound.notation.startswith("Ω(")
        assert bound.assumptions


# ---------------------------------------------------------------------------
# Citations
# ---------------------------------------------------------------------------


def test_format_citation_without_authors_is_title_only() -> None:
    text = format_citation(FOLKLORE)
    assert text == "Information-theoretic lower bound"
    assert "et al." not in text


def test_format_citation_four_authors_truncates() -> None:
    text = format_citation(CLRS)
    assert "Cormen et al." in text
    assert "Leiserson" not in text
    assert text.endswith("MIT Press, 2009")


def test_format_citation_two_authors_and_theorem() -> None:
    citation = Citation(
        authors=("Hopcroft", "Tarjan"),
        title="Efficient Algorithms for Graph Manipulation",
        venue="CACM",
        year=1973,
        theorem="Lemma 2",
    )
    assert format_citation(citation) == (
        'Hopcroft and Tarjan. "Efficient Algorithms for Graph Manipulation" CACM, 1973, Lemma 2'
    )


def test_format_citation_single_author() -> None:
    text = format_citation(get_bound(ProblemClass.SHORTEST_PATH_DIJKSTRA).citation)  # type: ignore[union-attr]
    assert text.startswith("Dijkstra.")
