from pbt_spies.calls import CallLog, Spied
from pbt_spies.pipe import pipe
from pbt_spies.result import (
    Failure,
    Rejected,
    Result,
    Success,
    attempt,
    is_failure,
    is_success,
)
from pbt_spies.spies import spy_async_fn, spy_fn
from pbt_spies.spying import (
    DO,
    DuplicateKey,
    Fields,
    Sample,
    SpyingStrategy,
    bind,
    map,
    record,
    to_strategy,
)
from pbt_spies.weighted import Weighted, map_weighted, one_of_weighted

__all__ = [
    "DO",
    "CallLog",
    "DuplicateKey",
    "Failure",
    "Fields",
    "Rejected",
    "Result",
    "Sample",
    "Spied",
    "SpyingStrategy",
    "Success",
    "Weighted",
    "attempt",
    "bind",
    "is_failure",
    "is_success",
    "map",
    "map_weighted",
    "one_of_weighted",
    "pipe",
    "record",
    "spy_async_fn",
    "spy_fn",
    "to_strategy",
]
