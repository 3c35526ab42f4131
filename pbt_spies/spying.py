from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterator, Mapping, Optional, Protocol, TypeVar, Union

from hypothesis import strategies as st
from hypothesis.errors import InvalidArgument
from hypothesis.strategies import SearchStrategy

A = TypeVar("A")
B = TypeVar("B")
L = TypeVar("L")

logger = logging.getLogger(__name__)


class DuplicateKey(Exception):
    pass


class Resettable(Protocol):
    def clear(self) -> None:
        ...


class Fields(Mapping[str, Any]):
    """Read-only record: a mapping that also allows attribute access."""

    __slots__ = ("_items",)

    def __init__(self, items: Optional[Mapping[str, Any]] = None) -> None:
        object.__setattr__(self, "_items", dict(items or {}))

    def extend(self, name: str, value: Any) -> Fields:
        if name in self._items:
            raise DuplicateKey(f"{name!r} is already present in {sorted(self._items)}")
        return Fields({**self._items, name: value})

    def __getitem__(self, key: str) -> Any:
        return self._items[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._items[name]
        except KeyError:
            raise AttributeError(name) from None

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"cannot set {name!r}: Fields is read-only")

    def __repr__(self) -> str:
        return f"Fields({self._items!r})"


@dataclass(frozen=True)
class Sample(Generic[L, A]):
    resets: tuple[Resettable, ...]
    log: L
    value: A

    def reset(self) -> None:
        for handle in self.resets:
            handle.clear()

    def with_value(self, name: str, value: Any) -> Sample[L, Fields]:
        return Sample(self.resets, self.log, _fields(self.value).extend(name, value))

    def merge(self, name: str, log_key: str, other: Sample[Any, Any]) -> Sample[Fields, Fields]:
        return Sample(
            self.resets + other.resets,
            _fields(self.log).extend(log_key, other.log),
            _fields(self.value).extend(name, other.value),
        )


def _fields(value: Any) -> Fields:
    if not isinstance(value, Fields):
        raise InvalidArgument(f"can only bind onto a record of fields, not {value!r}")
    return value


Derived = Union[SearchStrategy[Any], "SpyingStrategy[Any, Any]"]


class SpyingStrategy(Generic[L, A]):
    """A strategy of samples: a value, the call logs of its spies, and their reset.

    value_keys and log_keys are the record keys known at composition time;
    value_keys is None when the value is not a record (a single spy, or the
    result of map), which rules out further binds.
    """

    def __init__(
        self,
        samples: SearchStrategy[Sample[L, A]],
        value_keys: Optional[frozenset[str]] = None,
        log_keys: frozenset[str] = frozenset(),
    ) -> None:
        self._samples = samples
        self.value_keys = value_keys
        self.log_keys = log_keys

    @property
    def samples(self) -> SearchStrategy[Sample[L, A]]:
        return self._samples

    def __repr__(self) -> str:
        return f"SpyingStrategy({self._samples!r})"

    def bind(
        self,
        name: str,
        derive: Union[Derived, Callable[[A], Derived]],
        *,
        log_key: Optional[str] = None,
    ) -> SpyingStrategy[Fields, Fields]:
        """Draw from derive and add the result to the record as `name`.

        derive is a strategy, a SpyingStrategy, or a function of the record
        built so far returning one of those. Values drawn from a
        SpyingStrategy also contribute their log, under log_key (default
        name), and their reset handles.
        """
        if self.value_keys is None:
            raise InvalidArgument(f"cannot bind {name!r} onto a value that is not a record")
        if name in self.value_keys:
            raise DuplicateKey(f"field {name!r} is already bound")

        if isinstance(derive, SpyingStrategy):
            spies: Optional[bool] = True
        elif isinstance(derive, SearchStrategy):
            spies = False
        elif callable(derive):
            spies = None
        else:
            raise InvalidArgument(f"cannot bind {name!r} to {derive!r}")

        if spies is False and log_key is not None:
            raise InvalidArgument(f"log_key {log_key!r} given for {name!r}, which does not spy")
        key = name if log_key is None else log_key
        log_keys = self.log_keys
        if spies is not False:
            if key in log_keys:
                raise DuplicateKey(f"log key {key!r} is already bound")
            log_keys = log_keys | {key}
        logger.debug("binding field %r (log key %r)", name, key if spies is not False else None)

        def step(sample: Sample[L, A]) -> SearchStrategy[Sample[Fields, Fields]]:
            nxt = derive(sample.value) if spies is None else derive
            if isinstance(nxt, SpyingStrategy):
                return nxt.samples.map(lambda other: sample.merge(name, key, other))
            if isinstance(nxt, SearchStrategy):
                if log_key is not None:
                    raise InvalidArgument(
                        f"log_key {log_key!r} given for {name!r}, but it derived a plain strategy"
                    )
                return nxt.map(lambda b: sample.with_value(name, b))
            raise InvalidArgument(f"{name!r} derived {nxt!r}, which is not a strategy")

        return SpyingStrategy(self._samples.flatmap(step), self.value_keys | {name}, log_keys)

    def map(self, func: Callable[[A], B]) -> SpyingStrategy[L, B]:
        return SpyingStrategy(
            self._samples.map(lambda s: Sample(s.resets, s.log, func(s.value))),
            None,
            self.log_keys,
        )


DO: SpyingStrategy[Fields, Fields] = SpyingStrategy(
    st.just(Sample((), Fields(), Fields())), frozenset(), frozenset()
)


def bind(
    name: str,
    derive: Union[Derived, Callable[[Any], Derived]],
    *,
    log_key: Optional[str] = None,
) -> Callable[[SpyingStrategy[Any, Any]], SpyingStrategy[Fields, Fields]]:
    return lambda spying: spying.bind(name, derive, log_key=log_key)


def map(func: Callable[[A], B]) -> Callable[[SpyingStrategy[L, A]], SpyingStrategy[L, B]]:
    return lambda spying: spying.map(func)


def record(fields: Mapping[str, Union[SearchStrategy[Any], SpyingStrategy[Any, Any]]]) -> SpyingStrategy[Fields, Fields]:
    """Compose every entry, in order, into one record.

    The value has every key of fields; the log has the keys whose entry is
    a SpyingStrategy.
    """
    spying = DO
    for name, strategy in fields.items():
        spying = spying.bind(name, strategy)
    return spying


def _finalize(sample: Sample[L, A]) -> tuple[L, A]:
    sample.reset()
    logger.debug("reset %d call logs", len(sample.resets))
    return sample.log, sample.value


def to_strategy(spying: SpyingStrategy[L, A]) -> SearchStrategy[tuple[L, A]]:
    """Strategy of (log, value) pairs whose call logs are empty when drawn."""
    return spying.samples.map(_finalize)
