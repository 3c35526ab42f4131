from __future__ import annotations

from typing import Any, Callable


def pipe(value: Any, *funcs: Callable[[Any], Any]) -> Any:
    for func in funcs:
        value = func(value)
    return value
