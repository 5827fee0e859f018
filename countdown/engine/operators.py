# countdown/engine/operators.py
from __future__ import annotations
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Dict, Iterable, List
import math

# Results above this are treated as "not produced" (overflow guard)
MAX_VALUE = 2 ** 31 - 1
INVALID = -1


class Operator(IntEnum):
    ADD = 1
    MULTIPLY = 2
    SUBTRACT = 3
    DIVIDE = 4
    MODULO = 5
    EXPONENT = 6


@dataclass(frozen=True)
class OperatorSpec:
    op: Operator
    label: str
    commutative: bool
    fn: Callable[[int, int], int]

    def evaluate(self, a: int, b: int) -> int:
        return self.fn(a, b)


def _trim(val: int) -> int:
    return INVALID if val > MAX_VALUE else val


def _add(a: int, b: int) -> int:
    return _trim(a + b)


def _mul(a: int, b: int) -> int:
    return _trim(a * b)


def _sub(a: int, b: int) -> int:
    return _trim(a - b)


def _div(a: int, b: int) -> int:
    if b <= 0:
        return INVALID
    return _trim(a // b)


def _mod(a: int, b: int) -> int:
    if b <= 0:
        return INVALID
    return a % b


def _pow(a: int, b: int) -> int:
    if b < 0:
        return INVALID
    # avoid materialising huge ints just to throw them away
    if abs(a) > 1 and b * math.log2(abs(a)) > 63:
        return INVALID
    return _trim(a ** b)


OPERATORS: Dict[Operator, OperatorSpec] = {
    Operator.ADD:      OperatorSpec(Operator.ADD,      "+", True,  _add),
    Operator.MULTIPLY: OperatorSpec(Operator.MULTIPLY, "*", True,  _mul),
    Operator.SUBTRACT: OperatorSpec(Operator.SUBTRACT, "-", False, _sub),
    Operator.DIVIDE:   OperatorSpec(Operator.DIVIDE,   "/", False, _div),
    Operator.MODULO:   OperatorSpec(Operator.MODULO,   "%", False, _mod),
    Operator.EXPONENT: OperatorSpec(Operator.EXPONENT, "^", False, _pow),
}

ALL_OPERATORS: List[Operator] = list(OPERATORS)

_ALIASES: Dict[str, Operator] = {}
for _spec in OPERATORS.values():
    _ALIASES[_spec.label] = _spec.op
    _ALIASES[_spec.op.name.lower()] = _spec.op
_ALIASES.update({"x": Operator.MULTIPLY, "×": Operator.MULTIPLY, "÷": Operator.DIVIDE,
                 "**": Operator.EXPONENT, "pow": Operator.EXPONENT, "mod": Operator.MODULO})


def get_operator(op) -> OperatorSpec:
    """Registry lookup by Operator (or its int value)."""
    return OPERATORS[Operator(op)]


def parse_operator(token) -> Operator:
    """
    Accept an Operator, its int id, its label ('+', '^'...) or its name
    ('add', 'multiply'...). Raises ValueError on anything else.
    """
    if isinstance(token, Operator):
        return token
    if isinstance(token, int) and not isinstance(token, bool):
        return Operator(token)
    key = str(token).strip().lower()
    if key.isdigit():
        return Operator(int(key))
    try:
        return _ALIASES[key]
    except KeyError:
        raise ValueError(f"Unknown operator: {token!r}") from None


def parse_operators(tokens: Iterable) -> List[Operator]:
    """Parse and dedupe, keeping first-seen order."""
    out: List[Operator] = []
    for t in tokens:
        op = parse_operator(t)
        if op not in out:
            out.append(op)
    return out
