# countdown/games/solver/routes.py
from __future__ import annotations
import logging

from flask import Blueprint, current_app, jsonify, request

from countdown import limiter
from countdown.engine import OPERATORS, InvalidSearchOptions
from countdown.games.core.coerce_utils import (
    coerce_float,
    coerce_int,
    coerce_int_list,
    coerce_operator_list,
)

from .service import run_solver

logger = logging.getLogger(__name__)
bp = Blueprint("solver", __name__, url_prefix="/api/solver")


def _bad_request(msg: str):
    return jsonify({"ok": False, "error": msg}), 400


@bp.get("/operators")
def list_operators():
    return jsonify({
        "ok": True,
        "operators": [
            {
                "id": int(spec.op),
                "name": spec.op.name.lower(),
                "label": spec.label,
                "commutative": spec.commutative,
            }
            for spec in OPERATORS.values()
        ],
    }), 200


@bp.post("/solve")
@limiter.limit(lambda: current_app.config.get("SOLVER_RATE_LIMIT", "30 per minute"))
def solve():
    """
    Body: {"target": 100, "values": [1,2,3], "operators": ["+","*"],
           "timeout_s": 5, "max_depth": 6, "limit": 50, "all": false}
    Only target is required; the rest fall back to SOLVER_* config.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _bad_request("JSON object body required")
    cfg = current_app.config

    try:
        target = coerce_int(data.get("target"), "target")
        if target is None:
            return _bad_request("target is required")
        values = coerce_int_list(data["values"]) if "values" in data else list(cfg["SOLVER_DEFAULT_VALUES"])
        operators = (coerce_operator_list(data["operators"]) if "operators" in data
                     else coerce_operator_list(cfg["SOLVER_DEFAULT_OPERATORS"]))
        timeout = coerce_float(data.get("timeout_s"), "timeout_s", cfg["SOLVER_TIMEOUT_S"])
        # never let a request run longer than the configured ceiling
        timeout = min(timeout, cfg["SOLVER_TIMEOUT_S"])
        max_depth = coerce_int(data.get("max_depth"), "max_depth", cfg["SOLVER_MAX_DEPTH"])
        limit = coerce_int(data.get("limit"), "limit", cfg["SOLVER_SOLUTION_LIMIT"])
        if limit is not None and limit <= 0:
            return _bad_request("limit must be positive")
    except ValueError as e:
        return _bad_request(str(e))

    try:
        result = run_solver(
            target, values, operators,
            timeout=timeout,
            max_depth=max_depth,
            limit=limit,
            slice_ms=cfg["SOLVER_SLICE_MS"],
            best_only=not bool(data.get("all")),
        )
    except InvalidSearchOptions as e:
        return _bad_request(str(e))

    if not result["found"]:
        if result["cancelled"]:
            result["message"] = f"Search for {target} timed out before a solution was found."
        else:
            result["message"] = f"No solution for target {target} within depth {max_depth}."
    return jsonify({"ok": True, **result}), 200
