"""Racing a stage's work against its deadline."""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from kgflow.core.exceptions import StageTimeoutError
from kgflow.core.models import StageName

T = TypeVar("T")


async def run_with_deadline(stage: StageName, budget_ms: int, work: Awaitable[T]) -> T:
    """Await ``work``, cancelling it once ``budget_ms`` elapses.

    The work is cancelled inside the timeout scope, so nothing started for
    the stage outlives it. Work that swallows the cancellation and returns
    anyway still times out; its late result is discarded.

    Raises:
        StageTimeoutError: If the deadline expired first.
    """
    scope = asyncio.timeout(budget_ms / 1000)
    try:
        async with scope:
            result = await work
    except TimeoutError as e:
        if scope.expired():
            raise StageTimeoutError(stage.value, budget_ms) from e
        raise
    if scope.expired():
        raise StageTimeoutError(stage.value, budget_ms)
    return result
