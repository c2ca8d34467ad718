"""Deferred effects returned by widgets and executed outside the dispatch path.

An effect is a description of work, never the work itself. Widgets return one
from ``init`` or ``handle_event``; the host runtime executes it and feeds the
resulting event back into the single dispatch queue.

Four shapes are understood:

* a zero-argument callable, run on a worker, whose return value (if not
  ``None``) is the next event;
* ``Tick(delay, event)``, which posts ``event`` after ``delay`` seconds;
* ``Batch(effects)``, several effects at once;
* ``QUIT``, which asks the host loop to stop.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Union

from dash_core.models import EffectFailed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tick:
    delay: float
    event: Any


@dataclass(frozen=True)
class Batch:
    effects: tuple[Any, ...]


class Quit:
    def __repr__(self) -> str:
        return "QUIT"


QUIT = Quit()

Effect = Union[Callable[[], Any], Tick, Batch, Quit]


def batch(*effects: Effect | None) -> Effect | None:
    present = [effect for effect in effects if effect is not None]
    if not present:
        return None
    if len(present) == 1:
        return present[0]
    return Batch(tuple(present))


def flatten(effect: Effect | None) -> list[Effect]:
    if effect is None:
        return []
    if isinstance(effect, Batch):
        result: list[Effect] = []
        for child in effect.effects:
            result.extend(flatten(child))
        return result
    return [effect]


def wants_quit(effect: Effect | None) -> bool:
    return any(item is QUIT for item in flatten(effect))


def keyed(key: str, func: Callable[..., Any], *args: Any) -> Callable[[], Any]:
    """Bind ``func`` to ``args`` and tag it with the owning widget's key.

    A failure of a keyed effect is reported back to that widget only.
    """
    effect = partial(func, *args)
    effect.key = key
    return effect


def run_callable(effect: Callable[[], Any]) -> Any:
    """Run one callable effect, turning an escaped exception into ``EffectFailed``."""
    try:
        return effect()
    except Exception as exc:
        logger.exception("effect failed", extra={"fields": {"effect": repr(effect)}})
        return EffectFailed(error=str(exc) or exc.__class__.__name__, key=getattr(effect, "key", None))


def run_sync(effect: Effect | None) -> list[Any]:
    """Execute callable effects inline and return the events they produce.

    Ticks are dropped: a one-shot render has no later frame to schedule.
    """
    events: list[Any] = []
    for item in flatten(effect):
        if isinstance(item, (Tick, Quit)):
            continue
        event = run_callable(item)
        if event is not None:
            events.append(event)
    return events
