from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Iterable, Mapping, Sequence, TypeVar, overload

A = TypeVar("A")


@dataclass(frozen=True)
class Spied(Generic[A]):
    args: tuple[Any, ...]
    result: A
    kwargs: Mapping[str, Any] = field(default_factory=dict)


class CallLog(Sequence[Spied[A]]):
    """Calls made to one spy, in invocation order.

    The spy appends, tests read, and clear() is the reset handle used at
    finalization. Every holder shares the same instance.
    """

    def __init__(self, calls: Iterable[Spied[A]] = ()) -> None:
        self._calls: list[Spied[A]] = list(calls)

    def append(self, call: Spied[A]) -> None:
        self._calls.append(call)

    def clear(self) -> None:
        self._calls.clear()

    @property
    def args(self) -> list[tuple[Any, ...]]:
        return [call.args for call in self._calls]

    @property
    def results(self) -> list[A]:
        return [call.result for call in self._calls]

    @overload
    def __getitem__(self, index: int) -> Spied[A]: ...

    @overload
    def __getitem__(self, index: slice) -> list[Spied[A]]: ...

    def __getitem__(self, index):
        return self._calls[index]

    def __len__(self) -> int:
        return len(self._calls)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Sequence) or isinstance(other, (str, bytes)):
            return NotImplemented
        return self._calls == list(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"CallLog({self._calls!r})"
