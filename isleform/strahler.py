"""Stream order arithmetic used by the river network.

The combination rule is a simplification of Strahler numbering: two equal
orders meeting produce the next order, unequal orders keep the larger one.
Canonical Strahler ordering would only count children of order ``k - 1``
towards ``k + 1``; rendering depends on the simplified rule as is.
"""

from __future__ import annotations

from collections.abc import Iterable
from functools import reduce


def combine(a: int, b: int) -> int:
    a = int(a)
    b = int(b)
    if a < 0 or b < 0:
        raise ValueError("stream orders must be >= 0")
    return a + 1 if a == b else max(a, b)


def combine_all(orders: Iterable[int]) -> int:
    """Fold orders meeting at one point, smallest first.

    Sorting makes the result independent of the order branches were added:
    two 1st-order streams joining a 2nd-order one give 3, since 1+1=2, 2+2=3.
    """

    ordered = sorted(int(o) for o in orders)
    if not ordered:
        raise ValueError("need at least one stream order")
    return reduce(combine, ordered)
