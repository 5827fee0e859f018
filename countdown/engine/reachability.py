# countdown/engine/reachability.py
from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .operators import Operator, OperatorSpec

# (operand_a, operator, operand_b), operands ascending for commutative ops
Derivation = Tuple[int, Operator, int]


def canonical_derivation(a: int, spec: OperatorSpec, b: int) -> Derivation:
    if spec.commutative and a > b:
        a, b = b, a
    return (a, spec.op, b)


@dataclass
class Reachable:
    depth: int
    derivations: List[Derivation] = field(default_factory=list)

    @property
    def is_source(self) -> bool:
        return not self.derivations


class ReachabilityIndex:
    """
    value -> Reachable(depth, derivations).

    Sparse (a dict keyed by value) so large intermediate values cost one
    entry each. Only the search driver mutates it, and only through record().
    """

    def __init__(self, sources: Iterable[int] = ()):
        self._entries: Dict[int, Reachable] = {}
        self.source_counts: Counter = Counter()
        for v in sources:
            v = int(v)
            self.source_counts[v] += 1
            self._entries[v] = Reachable(depth=0)

    # -------- read API --------
    def __contains__(self, value: int) -> bool:
        return value in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[int]:
        return iter(self._entries)

    def get(self, value: int) -> Optional[Reachable]:
        return self._entries.get(value)

    def depth(self, value: int) -> Optional[int]:
        entry = self._entries.get(value)
        return entry.depth if entry else None

    def derivations(self, value: int) -> List[Derivation]:
        entry = self._entries.get(value)
        return list(entry.derivations) if entry else []

    def items(self) -> Iterator[Tuple[int, Reachable]]:
        return iter(self._entries.items())

    def values_by_depth(self, upper: Optional[int] = None) -> Dict[int, List[int]]:
        """Bucket known values by depth, ascending inside each bucket, skipping values > upper."""
        buckets: Dict[int, List[int]] = {}
        for v, entry in self._entries.items():
            if upper is not None and v > upper:
                continue
            buckets.setdefault(entry.depth, []).append(v)
        for vals in buckets.values():
            vals.sort()
        return buckets

    # -------- write API --------
    def record(self, value: int, depth: int, derivation: Derivation) -> bool:
        """
        Record that `value` is reachable at `depth` through `derivation`.
        Returns True if the index changed.
        """
        entry = self._entries.get(value)
        if entry is None:
            self._entries[value] = Reachable(depth=depth, derivations=[derivation])
            return True
        if depth > entry.depth:
            return False
        if depth < entry.depth:
            entry.depth = depth
            entry.derivations = [derivation]
            return True
        if entry.depth == 0:
            # source values stay leaves
            return False
        if derivation in entry.derivations:
            return False
        entry.derivations.append(derivation)
        return True
