from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, ClassVar, Generic, TypeGuard, TypeVar, Union

A = TypeVar("A")
E = TypeVar("E")


@dataclass(frozen=True)
class Success(Generic[A]):
    tag: ClassVar[str] = "Success"
    success: A


@dataclass(frozen=True)
class Failure(Generic[E]):
    tag: ClassVar[str] = "Failure"
    failure: E


Result = Union[Failure[E], Success[A]]


def is_success(result: Result[E, A]) -> TypeGuard[Success[A]]:
    return isinstance(result, Success)


def is_failure(result: Result[E, A]) -> TypeGuard[Failure[E]]:
    return isinstance(result, Failure)


class Rejected(Exception):
    """Raised by an async spy whose drawn failure payload is not an exception."""

    def __init__(self, failure: Any) -> None:
        super().__init__(failure)
        self.failure = failure


def as_exception(failure: Any) -> BaseException:
    if isinstance(failure, BaseException):
        return failure
    return Rejected(failure)


async def attempt(awaitable: Awaitable[A]) -> Result[Any, A]:
    """Await and classify: a value becomes Success, a raised exception Failure.

    Rejected is unwrapped back to its payload, so the classification of an
    async spy's outcome equals the Result recorded in its call log.
    """
    try:
        value = await awaitable
    except Rejected as exc:
        return Failure(exc.failure)
    except Exception as exc:
        return Failure(exc)
    return Success(value)
