"""Join combinators over independent awaitables.

``gather_all`` fails on the first rejection; ``gather_settled`` waits for
everything and substitutes a per-slot default for each rejection. Neither
cancels siblings that are already in flight.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Sequence


logger = logging.getLogger(__name__)


async def gather_all(*aws: Awaitable[Any]) -> list[Any]:
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        # let siblings finish on their own, but collect their errors so they
        # are not reported as never-retrieved
        for task in tasks:
            if not task.done():
                task.add_done_callback(_drain)
            else:
                _drain(task)
        raise


def _drain(task: asyncio.Future) -> None:
    if not task.cancelled():
        task.exception()


async def gather_settled(
    slots: Sequence[tuple[Awaitable[Any], Any]],
    *,
    labels: Sequence[str] | None = None,
) -> list[tuple[Any, BaseException | None]]:
    """Run every awaitable; return ``(value, error)`` per slot.

    A rejected slot yields ``(default, exc)``.
    """
    results = await asyncio.gather(*(aw for aw, _ in slots), return_exceptions=True)
    settled: list[tuple[Any, BaseException | None]] = []
    for index, ((_, default), result) in enumerate(zip(slots, results)):
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            label = labels[index] if labels else str(index)
            logger.warning("%s failed, using default: %r", label, result)
            settled.append((default, result))
        else:
            settled.append((result, None))
    return settled
