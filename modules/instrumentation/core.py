"""Instrumentation — count the primitive operations a fragment performs.

``InstrumentedSequence`` is an explicit list wrapper: every element access
through it is attributed to an ``OperationCounts`` accumulator. Fragments
that need exact comparison counts use ``counting_comparator`` on the shared
accumulator passed to them by ``measure_function``.

Each measurement owns its own counters; nothing here is global.
"""

from __future__ import annotations

import functools
import logging
import math
import time
from collections.abc import Callable, Iterable, Iterator, MutableSequence, Sequence
from typing import Any, TypeVar

import numpy as np

from domain.models import (
    COUNT_FIELDS,
    Measurement,
    MeasurementResult,
    MeasurementStats,
    OperationCounts,
)
from kernel.config import DEFAULT_SIZES

logger = logging.getLogger("auditor.instrumentation")

T = TypeVar("T")

Comparator = Callable[[Any, Any], int]


# ---------------------------------------------------------------------------
# Instrumented sequence
# ---------------------------------------------------------------------------


class InstrumentedSequence(MutableSequence):
    """A list that counts reads, writes, swaps, allocations and searches.

    Bulk operations are attributed as follows: searches (``index``,
    ``count``, ``in``, ``find``) count the current length as comparisons;
    ``sort`` counts ``ceil(n * log2(n + 1))`` comparisons; ``reverse``
    counts ``n // 2`` swaps.
    """

    def __init__(self, initial: Iterable[Any] = ()) -> None:
        self._data: list[Any] = list(initial)
        self._counts = OperationCounts()

    # -- counters -----------------------------------------------------------

    def get_operation_counts(self) -> OperationCounts:
        """Return a snapshot of the counters."""
        return self._counts.copy()

    def reset_counts(self) -> None:
        self._counts.reset()

    def to_list(self) -> list[Any]:
        """Return the underlying elements without counting a read."""
        return list(self._data)

    # -- element access -----------------------------------------------------

    def __len__(self) -> int:
        return len(self._data)

    def __getitem__(self, index):
        value = self._data[index]
        self._counts.reads += len(value) if isinstance(index, slice) else 1
        return value

    def __setitem__(self, index, value) -> None:
        if isinstance(index, slice):
            values = list(value)
            self._data[index] = values
            self._counts.writes += len(values)
            return
        self._data[index] = value
        self._counts.writes += 1

    def __delitem__(self, index) -> None:
        removed = len(self._data[index]) if isinstance(index, slice) else 1
        del self._data[index]
        self._counts.reads += removed
        self._counts.writes += removed

    def __iter__(self) -> Iterator[Any]:
        for value in self._data:
            self._counts.reads += 1
            yield value

    def __repr__(self) -> str:
        return f"InstrumentedSequence({self._data!r})"

    # -- growth and removal -------------------------------------------------

    def insert(self, index: int, value: Any) -> None:
        self._data.insert(index, value)
        self._counts.writes += 1
        self._counts.allocations += 1

    def append(self, value: Any) -> None:
        self._data.append(value)
        self._counts.writes += 1
        self._counts.allocations += 1

    def extend(self, values: Iterable[Any]) -> None:
        added = list(values)
        self._data.extend(added)
        self._counts.writes += len(added)
        self._counts.allocations += len(added)

    def pop(self, index: int = -1) -> Any:
        value = self._data.pop(index)
        self._counts.reads += 1
        self._counts.writes += 1
        return value

    def popleft(self) -> Any:
        """Remove and return the first element (queue-style removal)."""
        return self.pop(0)

    def clear(self) -> None:
        self._data.clear()

    # -- searching ----------------------------------------------------------

    def _scan(self) -> None:
        n = len(self._data)
        self._counts.comparisons += n
        self._counts.function_calls += n

    def index(self, value: Any, start: int = 0, stop: int | None = None) -> int:
        self._scan()
        if stop is None:
            return self._data.index(value, start)
        return self._data.index(value, start, stop)

    def count(self, value: Any) -> int:
        self._scan()
        return self._data.count(value)

    def __contains__(self, value: object) -> bool:
        self._scan()
        return value in self._data

    def find(self, predicate: Callable[[Any], bool]) -> Any:
        """Return the first element satisfying *predicate*, or None."""
        self._scan()
        return next((value for value in self._data if predicate(value)), None)

    # -- reordering ---------------------------------------------------------

    def sort(self, *, key: Callable[[Any], Any] | None = None, reverse: bool = False) -> None:
        n = len(self._data)
        self._data.sort(key=key, reverse=reverse)
        self._counts.comparisons += math.ceil(n * math.log2(n + 1))

    def reverse(self) -> None:
        self._data.reverse()
        self._counts.swaps += len(self._data) // 2

    def swap(self, i: int, j: int) -> None:
        """Exchange two elements: two reads, two writes, one swap."""
        self._data[i], self._data[j] = self._data[j], self._data[i]
        self._counts.reads += 2
        self._counts.writes += 2
        self._counts.swaps += 1


def create_instrumented_sequence(initial: Iterable[Any] = ()) -> InstrumentedSequence:
    """Wrap a copy of *initial* in a fresh ``InstrumentedSequence``."""
    return InstrumentedSequence(initial)


# ---------------------------------------------------------------------------
# Comparators
# ---------------------------------------------------------------------------


def counting_comparator(compare: Comparator, counts: OperationCounts) -> Comparator:
    """Wrap *compare* so each invocation adds exactly one comparison."""

    def wrapped(a: Any, b: Any) -> int:
        counts.comparisons += 1
        return compare(a, b)

    return wrapped


def numeric_comparator(counts: OperationCounts) -> Comparator:
    """A counting three-way comparator for numbers (negative, zero, positive)."""
    return counting_comparator(lambda a, b: (a > b) - (a < b), counts)


def key_from_comparator(compare: Comparator) -> Callable[[Any], Any]:
    """Adapt a three-way comparator for ``sorted(..., key=...)``."""
    return functools.cmp_to_key(compare)


# ---------------------------------------------------------------------------
# Measurement
# ---------------------------------------------------------------------------


def measure_function(
    fn: Callable[[InstrumentedSequence, OperationCounts], T],
    input: Sequence[Any],
) -> MeasurementResult:
    """Run *fn* once against an instrumented copy of *input*.

    ``fn`` receives the sequence and a shared ``OperationCounts`` it may
    update directly (for example through ``counting_comparator``). The
    reported counts are the field-wise sum of both accumulators.
    """
    sequence = create_instrumented_sequence(input)
    shared = OperationCounts()

    start = time.perf_counter_ns()
    return_value = fn(sequence, shared)
    elapsed_ns = time.perf_counter_ns() - start

    counts = sequence.get_operation_counts().merged(shared)
    return MeasurementResult(
        counts=counts,
        return_value=return_value,
        execution_time_ms=elapsed_ns / 1e6,
    )


def measure_at_sizes(
    generate_input: Callable[[int], Sequence[Any]],
    fn: Callable[[InstrumentedSequence, OperationCounts], Any],
    sizes: Sequence[int] = DEFAULT_SIZES,
) -> list[Measurement]:
    """Measure *fn* once per size in *sizes*, in order.

    Raises:
        ValueError: A size is negative.
    """
    if any(n < 0 for n in sizes):
        raise ValueError(f"Input sizes must be non-negative, got {list(sizes)}")

    measurements: list[Measurement] = []
    for n in sizes:
        result = measure_function(fn, generate_input(n))
        logger.debug("n=%d: %d operations", n, result.counts.total())
        measurements.append(
            Measurement(
                input_size=n,
                counts=result.counts,
                time_ns=result.execution_time_ms * 1e6,
            )
        )
    return measurements


def calculate_stats(measurements: Sequence[Measurement]) -> MeasurementStats:
    """Per-field average, min and max, plus the population variance of totals.

    An empty series yields all zeros.
    """
    if not measurements:
        zero = {name: 0.0 for name in COUNT_FIELDS}
        return MeasurementStats(
            avg_counts=dict(zero), min_counts=dict(zero), max_counts=dict(zero), variance=0.0
        )

    table = np.array(
        [[getattr(m.counts, name) for name in COUNT_FIELDS] for m in measurements],
        dtype=float,
    )
    totals = np.array([m.counts.total() for m in measurements], dtype=float)

    return MeasurementStats(
        avg_counts=dict(zip(COUNT_FIELDS, table.mean(axis=0).tolist())),
        min_counts=dict(zip(COUNT_FIELDS, table.min(axis=0).tolist())),
        max_counts=dict(zip(COUNT_FIELDS, table.max(axis=0).tolist())),
        variance=float(totals.var()),
    )
