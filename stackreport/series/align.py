"""Align a sparse ascending sequence onto a dense ascending grid.

The monitoring API omits buckets with no data, so a response is a sparse
subsequence of the grid the report wants. ``align_to_grid`` walks both
sequences once and produces exactly one output row per grid tick: a match
row when the next pending sample lands on the tick, a gap row otherwise.

Samples that sort before the current tick without matching it (misaligned
or duplicated timestamps) are dropped and counted; they never appear in the
output and never hold back later matches.
"""

from __future__ import annotations

import dataclasses as dc
import operator
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc


class _Ordered(typ.Protocol):
    def __lt__(self, other: typ.Any, /) -> bool: ...  # noqa: ANN401


@dc.dataclass(frozen=True, slots=True)
class GridAlignment[R]:
    """Rows produced by ``align_to_grid`` with match bookkeeping.

    Attributes
    ----------
    rows
        One row per grid tick, in grid order.
    matched
        Number of ticks filled from a sample.
    dropped
        Number of samples discarded because no tick matched them.

    """

    rows: tuple[R, ...]
    matched: int
    dropped: int

    @property
    def gaps(self) -> int:
        """Return the number of gap-filled ticks."""
        return len(self.rows) - self.matched


def align_to_grid[T, K: _Ordered, R](  # noqa: PLR0913
    grid: cabc.Iterable[K],
    samples: cabc.Iterable[T],
    *,
    key: cabc.Callable[[T], K],
    on_match: cabc.Callable[[K, T], R],
    on_gap: cabc.Callable[[K], R],
    matches: cabc.Callable[[K, K], bool] = operator.eq,
) -> GridAlignment[R]:
    """Merge ascending ``samples`` into the ascending ``grid``.

    Parameters
    ----------
    grid
        Dense tick sequence in ascending order.
    samples
        Sparse samples in ascending ``key`` order. Consumed lazily.
    key
        Extracts the comparable position of a sample.
    on_match
        Builds the row for a tick that a sample landed on.
    on_gap
        Builds the placeholder row for a tick without a sample.
    matches
        Predicate deciding whether a sample position fills a tick. Exact
        equality by default.

    Returns
    -------
    GridAlignment[R]
        Exactly one row per tick plus match and drop counts.

    """
    pending = iter(samples)
    head = next(pending, None)
    rows: list[R] = []
    matched = 0
    dropped = 0

    for tick in grid:
        while head is not None:
            position = key(head)
            if matches(position, tick) or not position < tick:
                break
            dropped += 1
            head = next(pending, None)

        if head is not None and matches(key(head), tick):
            rows.append(on_match(tick, head))
            matched += 1
            head = next(pending, None)
        else:
            rows.append(on_gap(tick))

    # Anything left sorts after the final tick.
    dropped += sum(1 for _ in pending) + (1 if head is not None else 0)
    return GridAlignment(rows=tuple(rows), matched=matched, dropped=dropped)
