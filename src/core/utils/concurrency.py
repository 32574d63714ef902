"""Bounded fan-out helper shared by handlers and services."""

from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

from core.utils.constants import FANOUT_WIDTH

T = TypeVar("T")
R = TypeVar("R")


def run_bounded(
    func: Callable[[T], R],
    items: Iterable[T],
    *,
    width: int = FANOUT_WIDTH,
) -> list[R | Exception]:
    """Apply ``func`` to every item with at most ``width`` calls in flight.

    Results come back in input order. An exception raised for one item is
    returned in that item's slot instead of being raised, so one failure
    never aborts the batch.
    """
    values = list(items)
    if not values:
        return []

    def _call(item: T) -> R | Exception:
        try:
            return func(item)
        except Exception as exc:  # noqa: BLE001
            return exc

    with ThreadPoolExecutor(max_workers=max(1, min(width, len(values)))) as executor:
        return list(executor.map(_call, values))
