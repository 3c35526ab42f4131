from __future__ import annotations

import bisect
import itertools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

from hypothesis import strategies as st
from hypothesis.errors import InvalidArgument
from hypothesis.strategies import SearchStrategy

T = TypeVar("T")
U = TypeVar("U")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Weighted(Generic[T]):
    weight: int
    strategy: SearchStrategy[T]


MaybeWeighted = Union[SearchStrategy[T], Weighted[T]]


def map_weighted(func: Callable[[T], U], branch: MaybeWeighted[T]) -> MaybeWeighted[U]:
    checked = _as_weighted(branch)
    if isinstance(branch, Weighted):
        return Weighted(checked.weight, checked.strategy.map(func))
    return checked.strategy.map(func)


def _as_weighted(branch: MaybeWeighted[Any]) -> Weighted[Any]:
    if isinstance(branch, Weighted):
        weight = branch.weight
        if isinstance(weight, bool) or not isinstance(weight, int) or weight < 0:
            raise InvalidArgument(f"weight must be a non-negative int, got {weight!r}")
        if not isinstance(branch.strategy, SearchStrategy):
            raise InvalidArgument(f"expected a strategy, got {branch.strategy!r}")
        return branch
    if not isinstance(branch, SearchStrategy):
        raise InvalidArgument(f"expected a strategy or Weighted, got {branch!r}")
    return Weighted(1, branch)


def one_of_weighted(*branches: MaybeWeighted[Any]) -> SearchStrategy[Any]:
    """Choose one branch per draw, favouring the heavier branches.

    Branches without a weight count as weight 1. A branch of weight 0 is
    never drawn. Weights are not exact frequencies: Hypothesis skews the
    branch index toward 0 and shrinks toward it, so branches are ordered
    heaviest first (ties keep their given order) and the skew lands on the
    most likely branch.
    """
    if not branches:
        raise InvalidArgument("one_of_weighted needs at least one branch")
    if not any(isinstance(b, Weighted) for b in branches):
        return st.one_of(*branches)

    live = [w for w in map(_as_weighted, branches) if w.weight > 0]
    if not live:
        raise InvalidArgument("at least one branch needs a positive weight")
    live.sort(key=lambda w: -w.weight)
    if len(live) == 1:
        return live[0].strategy

    bounds = list(itertools.accumulate(w.weight for w in live))
    logger.debug("weighted choice over %d branches, total weight %d", len(live), bounds[-1])

    def pick(i: int) -> SearchStrategy[Any]:
        return live[bisect.bisect_right(bounds, i)].strategy

    return st.integers(0, bounds[-1] - 1).flatmap(pick)
