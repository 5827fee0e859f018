from .operators import (
    ALL_OPERATORS,
    INVALID,
    MAX_VALUE,
    OPERATORS,
    Operator,
    OperatorSpec,
    get_operator,
    parse_operator,
    parse_operators,
)
from .reachability import Derivation, Reachable, ReachabilityIndex, canonical_derivation
from .enumerator import LevelPlan, depth_pairs, estimate_iterations, iter_candidates
from .driver import (
    InvalidSearchOptions,
    Search,
    SearchControl,
    SearchOptions,
    SearchProgress,
    SearchState,
    SearchStateError,
    SolutionHandle,
    find_best,
)
from .reconstruct import (
    BinaryExpression,
    Expression,
    count_expressions,
    evaluate_expression,
    expression_depth,
    generate_expressions,
    iter_expressions,
)
from .runner import SearchOutcome, solve, solve_blocking

__all__ = [
    # operators
    "ALL_OPERATORS", "INVALID", "MAX_VALUE", "OPERATORS", "Operator", "OperatorSpec",
    "get_operator", "parse_operator", "parse_operators",
    # index / enumeration
    "Derivation", "Reachable", "ReachabilityIndex", "canonical_derivation",
    "LevelPlan", "depth_pairs", "estimate_iterations", "iter_candidates",
    # driver
    "InvalidSearchOptions", "Search", "SearchControl", "SearchOptions", "SearchProgress",
    "SearchState", "SearchStateError", "SolutionHandle", "find_best",
    # reconstruction
    "BinaryExpression", "Expression", "count_expressions", "evaluate_expression",
    "expression_depth", "generate_expressions", "iter_expressions",
    # runners
    "SearchOutcome", "solve", "solve_blocking",
]
