# countdown/games/core/expression_utils.py
"""
Presentation-side helpers for solver output: infix text, structural dedupe
keys and the "niceness" score used to pick which equal-depth solutions to
show. None of this feeds back into the search.
"""
from __future__ import annotations
from collections import Counter
from typing import Dict, Iterable, List, Optional

from countdown.engine import BinaryExpression, Expression, Operator, get_operator

_PRECEDENCE: Dict[Operator, int] = {
    Operator.ADD: 1, Operator.SUBTRACT: 1,
    Operator.MULTIPLY: 2, Operator.DIVIDE: 2, Operator.MODULO: 2,
    Operator.EXPONENT: 3,
}
_ASSOCIATIVE = (Operator.ADD, Operator.MULTIPLY)


def _needs_parens(child: Expression, parent: Operator, right: bool) -> bool:
    if not isinstance(child, BinaryExpression):
        return False
    cp, pp = _PRECEDENCE[child.op], _PRECEDENCE[parent]
    if cp != pp:
        return cp < pp
    if parent == Operator.EXPONENT:
        return True
    if right:
        return not (child.op == parent and parent in _ASSOCIATIVE)
    return False


def expression_to_string(expr: Expression) -> str:
    """
    Infix text with only the parentheses the reading order needs:
      BinaryExpression(*, BinaryExpression(+, 1, 2), 3) -> '(1+2)*3'
    """
    if not isinstance(expr, BinaryExpression):
        return str(expr)
    left = expression_to_string(expr.left)
    right = expression_to_string(expr.right)
    if _needs_parens(expr.left, expr.op, right=False):
        left = f"({left})"
    if _needs_parens(expr.right, expr.op, right=True):
        right = f"({right})"
    return f"{left}{get_operator(expr.op).label}{right}"


def format_solution(target: int, expr: Expression) -> str:
    return f"{target} = {expression_to_string(expr)}"


def expression_key(expr: Expression) -> str:
    """Structural key; operands of commutative operators are sorted so a*b and b*a collide."""
    if not isinstance(expr, BinaryExpression):
        return str(expr)
    spec = get_operator(expr.op)
    a, b = expression_key(expr.left), expression_key(expr.right)
    if spec.commutative and b < a:
        a, b = b, a
    return f"[{a}{spec.label}{b}]"


def leaf_counts(expr: Expression, counts: Optional[Counter] = None) -> Counter:
    counts = Counter() if counts is None else counts
    if isinstance(expr, BinaryExpression):
        leaf_counts(expr.left, counts)
        leaf_counts(expr.right, counts)
    else:
        counts[int(expr)] += 1
    return counts


def score_expression(expr: Expression) -> int:
    """Sum of 100 ** uses over distinct leaf values; expressions leaning on fewer numbers score higher."""
    return sum(100 ** c for c in leaf_counts(expr).values())


def dedupe_expressions(exprs: Iterable[Expression]) -> List[Expression]:
    seen = set()
    out: List[Expression] = []
    for e in exprs:
        k = expression_key(e)
        if k in seen:
            continue
        seen.add(k)
        out.append(e)
    return out


def best_solutions(exprs: Iterable[Expression]) -> List[Expression]:
    """Deduped expressions sharing the best (highest) niceness score, in input order."""
    unique = dedupe_expressions(exprs)
    if not unique:
        return []
    scored = [(score_expression(e), e) for e in unique]
    best = max(s for s, _ in scored)
    return [e for s, e in scored if s == best]
