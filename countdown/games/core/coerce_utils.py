# countdown/games/core/coerce_utils.py
from typing import Any, List, Optional

from countdown.engine import Operator, parse_operators


def values_key(values: List[int]) -> str:
    """Create a sorted key from values for consistent lookup/logging."""
    return "-".join(map(str, sorted(values)))


def coerce_int_list(val: Any, what: str = "values") -> List[int]:
    """
    Coerce list / comma-separated string input to ints.
      [1, "2", 3]  -> [1, 2, 3]
      "[1, 2, 3]"  -> [1, 2, 3]
    Raises ValueError on anything not integral.
    """
    if val is None:
        return []
    if isinstance(val, str):
        val = [p.strip() for p in val.replace("[", "").replace("]", "").split(",")]
        val = [p for p in val if p]
    if not isinstance(val, (list, tuple)):
        raise ValueError(f"{what} must be a list of integers")
    out: List[int] = []
    for x in val:
        if isinstance(x, bool):
            raise ValueError(f"{what} must be a list of integers")
        try:
            n = int(x)
        except (TypeError, ValueError):
            raise ValueError(f"{what} must be a list of integers, got {x!r}") from None
        if isinstance(x, float) and n != x:
            raise ValueError(f"{what} must be a list of integers, got {x!r}")
        out.append(n)
    return out


def coerce_int(val: Any, what: str, default: Optional[int] = None) -> Optional[int]:
    if val is None or val == "":
        return default
    lst = coerce_int_list([val], what)
    return lst[0]


def coerce_float(val: Any, what: str, default: Optional[float] = None) -> Optional[float]:
    if val is None or val == "":
        return default
    try:
        return float(val)
    except (TypeError, ValueError):
        raise ValueError(f"{what} must be a number, got {val!r}") from None


def coerce_operator_list(val: Any) -> List[Operator]:
    """Accept ["+", "*"], "+,*", ["add", 2] ... -> [Operator.ADD, Operator.MULTIPLY]."""
    if val is None:
        return []
    if isinstance(val, str):
        val = [p.strip() for p in val.split(",") if p.strip()]
    if not isinstance(val, (list, tuple)):
        raise ValueError("operators must be a list")
    return parse_operators(val)
