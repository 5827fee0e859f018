# countdown/engine/enumerator.py
"""
Candidate enumeration for one depth level.

Level L explains every value that needs exactly L operations: one operation
applied to an operand of depth d1 and one of depth d2 with d1 + d2 + 1 == L.
Everything here works off a snapshot of the index taken at the start of the
level, so values discovered while the level runs never leak into it.
"""
from __future__ import annotations
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

DepthPair = Tuple[int, int]
Buckets = Mapping[int, List[int]]


def depth_pairs(level: int) -> List[DepthPair]:
    """All (d1, d2) with d1 + d2 + 1 == level, ascending d1."""
    return [(d1, level - 1 - d1) for d1 in range(level)]


def estimate_iterations(pairs: List[DepthPair], buckets: Buckets, n_operators: int,
                        source_counts: Optional[Mapping[int, int]] = None) -> int:
    """Exact operator applications iter_candidates will drive for these pairs."""
    source_counts = source_counts or {}
    total = 0
    for d1, d2 in pairs:
        total += len(buckets.get(d1, ())) * len(buckets.get(d2, ()))
        if d1 == 0 and d2 == 0:
            # single-copy sources never pair with themselves
            total -= sum(1 for v in buckets.get(0, ()) if source_counts.get(v, 0) < 2)
    return n_operators * total


def iter_candidates(
    pairs: List[DepthPair],
    buckets: Buckets,
    source_counts: Optional[Mapping[int, int]] = None,
) -> Iterator[Tuple[int, int]]:
    """
    Lazily yield ordered operand pairs (a, b) for the given depth pairs.

    A source value is only paired with itself when it was supplied more
    than once; intermediate results can be reused freely.
    """
    source_counts = source_counts or {}
    for d1, d2 in pairs:
        left = buckets.get(d1)
        right = buckets.get(d2)
        if not left or not right:
            continue
        both_sources = d1 == 0 and d2 == 0
        for a in left:
            for b in right:
                if both_sources and a == b and source_counts.get(a, 0) < 2:
                    continue
                yield a, b


class LevelPlan:
    """Snapshot + lazy cursor over one level's candidates."""

    def __init__(self, level: int, buckets: Dict[int, List[int]],
                 source_counts: Mapping[int, int], n_operators: int):
        self.level = level
        self.pairs = depth_pairs(level)
        self.buckets = buckets
        self.max_iterations = estimate_iterations(self.pairs, buckets, n_operators, source_counts)
        self._it = iter_candidates(self.pairs, buckets, source_counts)

    def __iter__(self) -> Iterator[Tuple[int, int]]:
        return self._it

    def __next__(self) -> Tuple[int, int]:
        return next(self._it)
