"""Tests for ScheduleIndex.

Tests cover:
- Boundary behaviour (before first, at boundaries, after last, empty)
- Weighted prefix sums
- Differential check against a linear scan for arbitrary ascending sequences
"""

import pytest
from hypothesis import given, strategies as st

from vesting_domain.schedule_index import ScheduleIndex


def linear_steps_elapsed(timestamps, t):
    """Reference implementation: count of timestamps <= t."""
    return sum(1 for ts in timestamps if ts <= t)


def linear_unlocked_weight(timestamps, weights, t):
    return sum(w for ts, w in zip(timestamps, weights) if ts <= t)


# =============================================================================
# Boundaries
# =============================================================================

def test_before_first_entry():
    index = ScheduleIndex([100, 200, 300])
    assert index.steps_elapsed(99) == 0


def test_at_and_between_boundaries():
    index = ScheduleIndex([100, 200, 300])
    assert index.steps_elapsed(100) == 1
    assert index.steps_elapsed(150) == 1
    assert index.steps_elapsed(200) == 2
    assert index.steps_elapsed(299) == 2


def test_at_or_after_last_entry():
    index = ScheduleIndex([100, 200, 300])
    assert index.steps_elapsed(300) == 3
    assert index.steps_elapsed(10**12) == 3


def test_empty_schedule():
    index = ScheduleIndex([])
    assert len(index) == 0
    assert index.steps_elapsed(0) == 0


def test_single_entry():
    index = ScheduleIndex([0])
    assert index.steps_elapsed(-1) == 0
    assert index.steps_elapsed(0) == 1


# =============================================================================
# Weights
# =============================================================================

def test_unlocked_weight_prefix_sums():
    index = ScheduleIndex([100, 200, 300], weights=[2500, 2500, 5000])
    assert index.unlocked_weight(99) == 0
    assert index.unlocked_weight(100) == 2500
    assert index.unlocked_weight(250) == 5000
    assert index.unlocked_weight(300) == 10000


def test_weights_must_be_parallel():
    with pytest.raises(ValueError, match="must be parallel"):
        ScheduleIndex([100, 200], weights=[1])


def test_unlocked_weight_requires_weights():
    with pytest.raises(ValueError, match="without weights"):
        ScheduleIndex([100]).unlocked_weight(100)


# =============================================================================
# Differential Properties
# =============================================================================

ascending_timestamps = st.lists(
    st.integers(min_value=-10**12, max_value=10**12), max_size=60
).map(sorted)


@given(ascending_timestamps, st.integers(min_value=-2 * 10**12, max_value=2 * 10**12))
def test_binary_search_matches_linear_scan(timestamps, t):
    assert ScheduleIndex(timestamps).steps_elapsed(t) == linear_steps_elapsed(timestamps, t)


@given(ascending_timestamps, st.data())
def test_binary_search_matches_linear_scan_at_boundaries(timestamps, data):
    """Query exactly at, just before and just after existing entries."""
    if not timestamps:
        return
    anchor = data.draw(st.sampled_from(timestamps))
    for t in (anchor - 1, anchor, anchor + 1):
        assert ScheduleIndex(timestamps).steps_elapsed(t) == linear_steps_elapsed(timestamps, t)


@given(
    st.lists(
        st.tuples(st.integers(-10**9, 10**9), st.integers(0, 10_000)),
        max_size=40,
        unique_by=lambda pair: pair[0],
    ).map(sorted),
    st.integers(-2 * 10**9, 2 * 10**9),
)
def test_weighted_lookup_matches_linear_scan(pairs, t):
    timestamps = [ts for ts, _ in pairs]
    weights = [w for _, w in pairs]
    index = ScheduleIndex(timestamps, weights=weights)
    assert index.unlocked_weight(t) == linear_unlocked_weight(timestamps, weights, t)


@given(ascending_timestamps, st.integers(-10**12, 10**12), st.integers(0, 10**12))
def test_steps_elapsed_is_monotonic(timestamps, t, delta):
    index = ScheduleIndex(timestamps)
    assert index.steps_elapsed(t) <= index.steps_elapsed(t + delta)
