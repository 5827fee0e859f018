# countdown/engine/reconstruct.py
from __future__ import annotations
from dataclasses import dataclass
from itertools import islice
from typing import Iterator, List, Optional, Union

from .operators import INVALID, Operator, get_operator
from .reachability import ReachabilityIndex


@dataclass(frozen=True)
class BinaryExpression:
    op: Operator
    left: "Expression"
    right: "Expression"


# a bare int is a leaf
Expression = Union[int, BinaryExpression]


def iter_expressions(index: ReachabilityIndex, value: int) -> Iterator[Expression]:
    """
    Lazily expand `value` into every expression tree recorded for it.

    The count multiplies across recursion depth, so callers that only need
    a handful should slice this rather than materialise it.
    """
    entry = index.get(value)
    if entry is None or not entry.derivations:
        yield value
        return
    for a, op, b in list(entry.derivations):
        for left in iter_expressions(index, a):
            for right in iter_expressions(index, b):
                yield BinaryExpression(op, left, right)


def generate_expressions(index: ReachabilityIndex, value: int,
                         limit: Optional[int] = None) -> List[Expression]:
    it = iter_expressions(index, value)
    if limit is not None:
        it = islice(it, limit)
    return list(it)


def count_expressions(index: ReachabilityIndex, value: int) -> int:
    """Number of trees iter_expressions would yield, without building them."""
    memo = {}

    def count(v: int) -> int:
        if v in memo:
            return memo[v]
        entry = index.get(v)
        if entry is None or not entry.derivations:
            n = 1
        else:
            n = sum(count(a) * count(b) for a, _op, b in entry.derivations)
        memo[v] = n
        return n

    return count(value)


def evaluate_expression(expr: Expression) -> int:
    """Evaluate a tree with the registry; INVALID propagates."""
    if isinstance(expr, BinaryExpression):
        a = evaluate_expression(expr.left)
        b = evaluate_expression(expr.right)
        if a == INVALID or b == INVALID:
            return INVALID
        return get_operator(expr.op).evaluate(a, b)
    return int(expr)


def expression_depth(expr: Expression) -> int:
    """Number of operations in the tree."""
    if isinstance(expr, BinaryExpression):
        return expression_depth(expr.left) + expression_depth(expr.right) + 1
    return 0
