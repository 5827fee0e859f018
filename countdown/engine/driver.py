# countdown/engine/driver.py
"""
Iterative-deepening search driver.

One Search owns one ReachabilityIndex and runs on an asyncio loop in short
slices scheduled with loop.call_soon. All callbacks fire synchronously from
inside a slice, so the index only ever has one writer.

Solutions are buffered per level: the target may gain more derivations
while its level is still running, so on_solution fires once, after that
level is exhausted, immediately followed by on_complete.
"""
from __future__ import annotations
import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Sequence

from .enumerator import LevelPlan
from .operators import INVALID, Operator, OperatorSpec, get_operator, parse_operators
from .reachability import ReachabilityIndex, canonical_derivation
from .reconstruct import generate_expressions

logger = logging.getLogger(__name__)

SLICE_MS = 40


class InvalidSearchOptions(ValueError):
    pass


class SearchStateError(RuntimeError):
    pass


class SearchState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (SearchState.COMPLETED, SearchState.CANCELLED, SearchState.FAILED)


@dataclass(frozen=True)
class SearchProgress:
    current_depth: int
    iterations: int
    max_iterations: int

    def to_payload(self) -> Dict[str, Any]:
        return {
            "current_depth": self.current_depth,
            "iterations": self.iterations,
            "max_iterations": self.max_iterations,
        }


@dataclass(frozen=True)
class SolutionHandle:
    """What on_solution receives: enough to rebuild every minimal expression."""
    target: int
    depth: int
    index: ReachabilityIndex

    def expressions(self, limit: Optional[int] = None) -> list:
        return generate_expressions(self.index, self.target, limit=limit)


def _noop(*_args) -> None:
    return None


def _as_positive_int(value, what: str) -> int:
    if isinstance(value, bool):
        raise InvalidSearchOptions(f"{what} must be a positive integer, got {value!r}")
    try:
        n = int(value)
    except (TypeError, ValueError):
        raise InvalidSearchOptions(f"{what} must be a positive integer, got {value!r}") from None
    if n != value or n <= 0:
        raise InvalidSearchOptions(f"{what} must be a positive integer, got {value!r}")
    return n


@dataclass
class SearchOptions:
    target: int
    values: Sequence[int]
    operators: Sequence[Any]
    on_solution: Callable[[SolutionHandle], None] = _noop
    on_progress: Callable[[SearchProgress], None] = _noop
    on_complete: Callable[[], None] = _noop
    on_cancel: Callable[[], None] = _noop
    on_error: Optional[Callable[[BaseException], None]] = None
    max_depth: Optional[int] = None
    slice_ms: float = SLICE_MS
    specs: List[OperatorSpec] = field(init=False, repr=False)

    def __post_init__(self):
        self.target = _as_positive_int(self.target, "target")
        self.values = [_as_positive_int(v, "value") for v in self.values]
        try:
            ops: List[Operator] = parse_operators(self.operators)
        except ValueError as e:
            raise InvalidSearchOptions(str(e)) from None
        self.operators = ops
        self.specs = [get_operator(op) for op in ops]
        if self.max_depth is not None:
            self.max_depth = _as_positive_int(self.max_depth, "max_depth")
        if not self.slice_ms or self.slice_ms <= 0:
            raise InvalidSearchOptions(f"slice_ms must be positive, got {self.slice_ms!r}")


class Search:
    def __init__(self, options: SearchOptions, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.options = options
        self.index = ReachabilityIndex(options.values)
        self.level = 0
        self.iterations = 0
        self.found = False
        self._loop = loop
        self._state = SearchState.IDLE
        self._cancel_requested = False
        self._plan: Optional[LevelPlan] = None
        self._budget = options.slice_ms / 1000.0

    @property
    def state(self) -> SearchState:
        return self._state

    @property
    def max_iterations(self) -> int:
        return self._plan.max_iterations if self._plan else 0

    def progress(self) -> SearchProgress:
        return SearchProgress(self.level, self.iterations, self.max_iterations)

    # -------- control --------
    def start(self) -> None:
        if self._state is not SearchState.IDLE:
            raise SearchStateError(f"search already {self._state.value}")
        loop = self._loop or asyncio.get_running_loop()
        self._loop = loop
        self._state = SearchState.RUNNING
        logger.debug("search start target=%s values=%s ops=%s",
                     self.options.target, self.options.values,
                     [s.label for s in self.options.specs])
        loop.call_soon(self._run_slice)

    def cancel(self) -> None:
        """Advisory; honoured at the next slice boundary."""
        if self._state.terminal:
            return
        self._cancel_requested = True

    # -------- slices --------
    def _run_slice(self) -> None:
        if self._state is not SearchState.RUNNING:
            return
        try:
            self._slice()
        except Exception as e:
            self._state = SearchState.FAILED
            logger.exception("search failed at depth %s", self.level)
            if self.options.on_error is None:
                raise
            self.options.on_error(e)

    def _slice(self) -> None:
        if self._cancel_requested:
            self._cancelled()
            return

        if self._plan is None:
            if self.options.target in self.index.source_counts:
                self.found = True
                self.options.on_progress(self.progress())
                self._complete()
                return
            self._begin_level(1)

        started = time.monotonic()
        while True:
            pair = next(self._plan, None)
            if pair is None:
                if self.found:
                    self._complete()
                    return
                if self.options.max_depth is not None and self.level >= self.options.max_depth:
                    logger.info("no solution up to max_depth=%s", self.options.max_depth)
                    self._complete()
                    return
                self._begin_level(self.level + 1)
            else:
                self._combine(*pair)

            if time.monotonic() - started >= self._budget:
                self.options.on_progress(self.progress())
                self._loop.call_soon(self._run_slice)
                return

    def _begin_level(self, level: int) -> None:
        self.level = level
        self.iterations = 0
        buckets = self.index.values_by_depth(upper=self.options.target)
        self._plan = LevelPlan(level, buckets, self.index.source_counts, len(self.options.specs))
        logger.debug("depth %s: pairs=%s max_iterations=%s", level, self._plan.pairs, self._plan.max_iterations)
        self.options.on_progress(self.progress())

    def _combine(self, a: int, b: int) -> None:
        index = self.index
        new_depth = index.depth(a) + index.depth(b) + 1
        target = self.options.target
        for spec in self.options.specs:
            self.iterations += 1
            value = spec.evaluate(a, b)
            if value == INVALID or value <= 0:
                continue
            index.record(value, new_depth, canonical_derivation(a, spec, b))
            if value == target and index.depth(target) == new_depth:
                self.found = True

    def _cancelled(self) -> None:
        self._state = SearchState.CANCELLED
        logger.info("search cancelled at depth %s after %s iterations", self.level, self.iterations)
        self.options.on_cancel()

    def _complete(self) -> None:
        # a cancel requested from a callback earlier in this slice still wins
        if self._cancel_requested:
            self._cancelled()
            return
        self._state = SearchState.COMPLETED
        if self.found:
            handle = SolutionHandle(self.options.target, self.index.depth(self.options.target), self.index)
            logger.info("target %s reached at depth %s (%s derivations)",
                        handle.target, handle.depth, len(self.index.derivations(handle.target)))
            self.options.on_solution(handle)
        self.options.on_complete()


class SearchControl(NamedTuple):
    start: Callable[[], None]
    cancel: Callable[[], None]


def find_best(options: Optional[SearchOptions] = None, *,
              loop: Optional[asyncio.AbstractEventLoop] = None, **kwargs) -> SearchControl:
    """
    Build a search and hand back its (start, cancel) pair.

    Accepts a SearchOptions or the same fields as keyword arguments:
        find_best(target=6, values=[2, 3], operators=["+", "*"], on_solution=...)
    """
    if options is None:
        options = SearchOptions(**kwargs)
    elif kwargs:
        raise TypeError("pass either a SearchOptions or keyword options, not both")
    search = Search(options, loop=loop)
    return SearchControl(search.start, search.cancel)
