"""Pydantic model for cache clock options and the lenient merge rules.

Options are never rejected. ``merge_options`` folds updates over the
*previous* effective options:

- numbers (``max_items``, ``ttl``, ``interval``): negatives become their
  absolute value; non-numbers (including bools and NaN) keep the previous
  value; ``max_items == 0`` becomes ``1``; ``math.inf`` is allowed.
- flags (``auto_start``, ``overwrite``, ``reset_timeout_on_access``,
  ``debug``): non-bools keep the previous value.
- ``on_expire``: ``None`` clears it, a callable replaces it, anything else
  keeps the previous value.
- unknown names are ignored.

Each correction is reported back as a message so the caller can route it to
its debug channel.
"""

from __future__ import annotations

import math
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

Number = Union[int, float]

DEFAULT_INTERVAL_MS = 15 * 1000

NUMERIC_FIELDS = ("max_items", "ttl", "interval")
FLAG_FIELDS = ("auto_start", "overwrite", "reset_timeout_on_access", "debug")
SETTER_FIELDS = ("ttl", "overwrite")


class ClockOptions(BaseModel):
    """Effective configuration of a cache clock."""

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    max_items: Number = Field(1000, description="Capacity bound; inf disables it")
    ttl: Number = Field(math.inf, description="Default time to live in ms")
    interval: Number = Field(
        DEFAULT_INTERVAL_MS, description="Sweep interval in ms; 0 or inf disables it"
    )
    auto_start: bool = Field(True, description="Start the sweep on construction")
    overwrite: bool = Field(False, description="Replace live entries on duplicate set")
    reset_timeout_on_access: bool = Field(
        False, description="Refresh an entry's deadline on every successful get"
    )
    on_expire: Optional[Callable[..., Any]] = Field(
        None, description="Called with each entry reclaimed by the sweep"
    )
    debug: bool = Field(False, description="Emit diagnostics through logging")


DEFAULT_OPTIONS = ClockOptions()


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def _coerce_number(name: str, value: Any, previous: Number, problems: List[str]) -> Number:
    if not _is_number(value):
        problems.append(f"Option {name!r} must be a number, keeping {previous!r}.")
        return previous
    if value < 0:
        problems.append(f"Option {name!r} is negative, using {abs(value)!r}.")
        return abs(value)
    return value


def merge_options(
    previous: ClockOptions,
    updates: Any,
    allowed: Sequence[str] = tuple(ClockOptions.model_fields),
) -> Tuple[ClockOptions, List[str]]:
    """Fold *updates* over *previous*.

    Returns the new options and a list of human-readable corrections.
    """
    problems: List[str] = []
    if updates is None:
        return previous, problems
    if isinstance(updates, ClockOptions):
        updates = updates.model_dump(exclude_unset=True)
    if not isinstance(updates, Mapping):
        problems.append(
            f"Invalid options of type {type(updates).__name__} passed to cache clock, ignoring."
        )
        return previous, problems

    changes = {}
    for name, value in updates.items():
        if name not in allowed:
            problems.append(f"Unknown option {name!r} ignored.")
            continue
        current = getattr(previous, name)
        if name in NUMERIC_FIELDS:
            value = _coerce_number(name, value, current, problems)
            if name == "max_items" and value == 0:
                value = 1
        elif name in FLAG_FIELDS:
            if not isinstance(value, bool):
                problems.append(f"Option {name!r} must be a bool, keeping {current!r}.")
                value = current
        elif name == "on_expire":
            if value is not None and not callable(value):
                problems.append("Option 'on_expire' is not callable, ignoring.")
                value = current
        changes[name] = value

    return previous.model_copy(update=changes), problems
