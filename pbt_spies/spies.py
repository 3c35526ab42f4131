from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional, TypeVar

from hypothesis import strategies as st
from hypothesis.errors import InvalidArgument
from hypothesis.strategies import SearchStrategy

from pbt_spies.calls import CallLog, Spied
from pbt_spies.result import Failure, Result, Success, as_exception, is_success
from pbt_spies.spying import Sample, SpyingStrategy
from pbt_spies.weighted import MaybeWeighted, map_weighted, one_of_weighted

A = TypeVar("A")
B = TypeVar("B")
E = TypeVar("E")


def _any_signature(*args: Any, **kwargs: Any) -> None:
    pass


def _memo_key(args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
    try:
        key = (args, frozenset(kwargs.items()))
        hash(key)
    except TypeError:
        # unhashable arguments are keyed by their repr
        return repr((args, sorted(kwargs.items())))
    return key


def spy_fn(
    returns: SearchStrategy[A],
    result_map: Optional[Callable[[A], B]] = None,
    *,
    like: Callable[..., Any] = _any_signature,
    pure: bool = True,
) -> SpyingStrategy[CallLog[A], Callable[..., B]]:
    """Strategy of spy functions returning values drawn from `returns`.

    Each call draws a value, records it with the call's arguments in the
    spy's CallLog, and returns it, passed through result_map if given. The
    log keeps the value as drawn. With pure=True, calls with equal
    arguments return the same value within one example; unhashable
    arguments count as equal when their reprs are.
    """
    if not isinstance(returns, SearchStrategy):
        raise InvalidArgument(f"returns must be a strategy, got {returns!r}")
    if (
        inspect.iscoroutinefunction(like)
        or inspect.isgeneratorfunction(like)
        or inspect.isasyncgenfunction(like)
    ):
        raise InvalidArgument("like must be a plain function; use spy_async_fn for async spies")

    def build(calls: CallLog[A], draw: Callable[..., A]) -> Sample[CallLog[A], Callable[..., B]]:
        memo: dict[Any, A] = {}

        def spy(*args: Any, **kwargs: Any) -> B:
            if pure:
                key = _memo_key(args, kwargs)
                if key not in memo:
                    memo[key] = draw(*args, **kwargs)
                result = memo[key]
            else:
                result = draw(*args, **kwargs)
            calls.append(Spied(args, result, kwargs))
            if result_map is None:
                return result  # type: ignore[return-value]
            return result_map(result)

        return Sample((calls,), calls, spy)

    return SpyingStrategy(
        st.builds(build, st.builds(CallLog), st.functions(like=like, returns=returns, pure=False))
    )


async def settle(result: Result[Any, A]) -> A:
    # resolve on a later turn of the event loop, like any pending operation
    await asyncio.sleep(0)
    if is_success(result):
        return result.success
    raise as_exception(result.failure)


def spy_async_fn(
    *,
    on_failure: MaybeWeighted[E],
    on_success: MaybeWeighted[A],
    like: Callable[..., Any] = _any_signature,
    pure: bool = True,
) -> SpyingStrategy[CallLog[Result[E, A]], Callable[..., Awaitable[A]]]:
    """Strategy of async spy functions that succeed or fail at random.

    Every call picks Failure or Success, weighted if the branches are
    Weighted, and returns an awaitable that returns the success payload or
    raises the failure payload (wrapped in Rejected unless it is an
    exception). The call log records the Result, so tests can inspect
    outcomes without awaiting.
    """
    outcomes = one_of_weighted(
        map_weighted(Failure, on_failure),
        map_weighted(Success, on_success),
    )
    return spy_fn(outcomes, settle, like=like, pure=pure)
