"""Timestamp lookup for index-based vesting strategies.

A ScheduleIndex answers "how many unlock steps have elapsed at time t" over
an ascending timestamp sequence, and optionally "how many basis points have
those steps released" when each step carries its own weight.
"""

from bisect import bisect_right
from functools import cached_property
from itertools import accumulate
from typing import List, Optional, Sequence


class ScheduleIndex:
    """Binary-search index over ascending unlock timestamps.

    Args:
        timestamps: Ascending unlock times
        weights: Optional per-step basis points, parallel to timestamps

    Example:
        index = ScheduleIndex([100, 200, 300], weights=[2500, 2500, 5000])
        index.steps_elapsed(99)    -> 0
        index.steps_elapsed(200)   -> 2
        index.unlocked_weight(250) -> 5000
        index.steps_elapsed(999)   -> 3
    """

    def __init__(self, timestamps: Sequence[int], weights: Optional[Sequence[int]] = None):
        if weights is not None and len(weights) != len(timestamps):
            raise ValueError(
                f"weights ({len(weights)}) must be parallel to timestamps ({len(timestamps)})"
            )
        self._timestamps = timestamps
        self._weights = weights

    def __len__(self) -> int:
        return len(self._timestamps)

    def steps_elapsed(self, t: int) -> int:
        """Count of timestamps <= t.

        Returns 0 before the first entry and len() at or after the last one;
        in between, the 1-based position of the last passed boundary.
        """
        timestamps = self._timestamps
        if not timestamps or t < timestamps[0]:
            return 0
        if t >= timestamps[-1]:
            return len(timestamps)
        return bisect_right(timestamps, t)

    @cached_property
    def _prefix_weights(self) -> List[int]:
        if self._weights is None:
            raise ValueError("ScheduleIndex was built without weights")
        return [0, *accumulate(self._weights)]

    def unlocked_weight(self, t: int) -> int:
        """Sum of the weights of every step with timestamp <= t."""
        return self._prefix_weights[self.steps_elapsed(t)]
