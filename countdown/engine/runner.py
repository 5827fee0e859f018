# countdown/engine/runner.py
from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from .driver import (
    SLICE_MS,
    Search,
    SearchOptions,
    SearchProgress,
    SolutionHandle,
)

logger = logging.getLogger(__name__)


@dataclass
class SearchOutcome:
    target: int
    found: bool = False
    cancelled: bool = False
    handle: Optional[SolutionHandle] = None
    last_progress: Optional[SearchProgress] = None

    @property
    def depth(self) -> Optional[int]:
        return self.handle.depth if self.handle else None

    def expressions(self, limit: Optional[int] = None) -> list:
        return self.handle.expressions(limit=limit) if self.handle else []


async def solve(
    target: int,
    values: Sequence[int],
    operators: Sequence,
    *,
    timeout: Optional[float] = None,
    max_depth: Optional[int] = None,
    slice_ms: float = SLICE_MS,
    on_progress: Optional[Callable[[SearchProgress], None]] = None,
) -> SearchOutcome:
    """
    Run one search on the current loop and wait for it to finish.

    `timeout` is a wall-clock limit applied through the same cooperative
    cancel() any other caller would use.
    """
    loop = asyncio.get_running_loop()
    done: asyncio.Future = loop.create_future()
    outcome = SearchOutcome(target=int(target))

    def _progress(p: SearchProgress) -> None:
        outcome.last_progress = p
        if on_progress is not None:
            on_progress(p)

    def _solution(handle: SolutionHandle) -> None:
        outcome.found = True
        outcome.handle = handle

    def _finish() -> None:
        if not done.done():
            done.set_result(outcome)

    def _cancelled() -> None:
        outcome.cancelled = True
        _finish()

    def _error(exc: BaseException) -> None:
        if not done.done():
            done.set_exception(exc)

    options = SearchOptions(
        target=target,
        values=values,
        operators=operators,
        on_solution=_solution,
        on_progress=_progress,
        on_complete=_finish,
        on_cancel=_cancelled,
        on_error=_error,
        max_depth=max_depth,
        slice_ms=slice_ms,
    )
    search = Search(options, loop=loop)
    timer = loop.call_later(timeout, search.cancel) if timeout is not None else None
    search.start()
    try:
        return await done
    finally:
        if timer is not None:
            timer.cancel()
        # an awaiting task that gets cancelled must not leave the search running
        search.cancel()


def solve_blocking(target: int, values: Sequence[int], operators: Sequence, **kwargs) -> SearchOutcome:
    """Synchronous wrapper for callers without a running loop (Flask views, CLI)."""
    return asyncio.run(solve(target, values, operators, **kwargs))
