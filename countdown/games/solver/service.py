# countdown/games/solver/service.py
from __future__ import annotations
import logging
import time
from typing import Any, Dict, List, Optional, Sequence

from countdown.engine import solve_blocking
from countdown.games.core.coerce_utils import values_key
from countdown.games.core.expression_utils import (
    best_solutions,
    dedupe_expressions,
    expression_to_string,
)

logger = logging.getLogger(__name__)


def run_solver(
    target: int,
    values: Sequence[int],
    operators: Sequence,
    *,
    timeout: Optional[float] = None,
    max_depth: Optional[int] = None,
    limit: Optional[int] = None,
    slice_ms: float = 40,
    best_only: bool = True,
) -> Dict[str, Any]:
    """
    Run one search to completion (or timeout) and shape the result for JSON.
    Raises InvalidSearchOptions on malformed input.
    """
    t0 = time.monotonic()
    outcome = solve_blocking(
        target, values, operators,
        timeout=timeout, max_depth=max_depth, slice_ms=slice_ms,
    )
    exprs = outcome.expressions(limit=limit)
    picked = best_solutions(exprs) if best_only else dedupe_expressions(exprs)
    solutions: List[str] = [expression_to_string(e) for e in picked]
    elapsed_ms = int((time.monotonic() - t0) * 1000)

    logger.info(
        "solve target=%s values=%s found=%s depth=%s cancelled=%s solutions=%d in %dms",
        target, values_key(list(values)), outcome.found, outcome.depth,
        outcome.cancelled, len(solutions), elapsed_ms,
    )
    progress = outcome.last_progress.to_payload() if outcome.last_progress else {}
    return {
        "target": int(target),
        "found": outcome.found,
        "cancelled": outcome.cancelled,
        "depth": outcome.depth,
        "solutions": solutions,
        "count": len(solutions),
        "progress": progress,
        "elapsed_ms": elapsed_ms,
    }
