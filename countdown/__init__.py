# countdown/__init__.py
from __future__ import annotations
import logging
import os
from logging.handlers import RotatingFileHandler

import click
from flask import Flask
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from .config import Config

# dev-friendly in-memory limiter; swap for redis in prod
limiter = Limiter(get_remote_address, storage_uri="memory://")


def _configure_logging(app: Flask) -> None:
    if app.debug or app.testing:
        return
    log_dir = app.config.get("LOG_DIR") or "logs"
    if not os.path.exists(log_dir):
        os.mkdir(log_dir)

    # app.logger is the "countdown" logger; attach the file handler once per process
    if any(isinstance(h, RotatingFileHandler) for h in app.logger.handlers):
        return

    # rotates when it gets too big
    file_handler = RotatingFileHandler(os.path.join(log_dir, "countdown.log"),
                                       maxBytes=10240, backupCount=10)
    file_handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]"
    ))
    file_handler.setLevel(logging.INFO)
    app.logger.addHandler(file_handler)

    app.logger.setLevel(logging.INFO)
    app.logger.info("Countdown solver startup")


def create_app(config_object=None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)

    # ---------------------------
    # Config
    # ---------------------------
    app.config.from_object(config_object or Config)
    app.config.from_pyfile("config.py", silent=True)  # instance/config.py (optional)

    _configure_logging(app)

    # ---------------------------
    # Extensions / blueprints
    # ---------------------------
    limiter.init_app(app)

    from .games.solver.routes import bp as solver_bp
    app.register_blueprint(solver_bp)

    # ---------------------------
    # CLI commands
    # ---------------------------
    @app.cli.command("solve")
    @click.argument("target", type=int)
    @click.argument("values", nargs=-1, type=int)
    @click.option("--op", "ops", multiple=True, help="Operator label or name; repeatable.")
    @click.option("--timeout", type=float, default=None, help="Wall-clock limit in seconds.")
    @click.option("--max-depth", type=int, default=None)
    @click.option("--limit", type=int, default=None, help="Max expressions to print.")
    @click.option("--all", "show_all", is_flag=True, help="Print every deduped solution, not just the nicest.")
    def solve_command(target, values, ops, timeout, max_depth, limit, show_all):
        """Find the minimal-depth expressions reaching TARGET from VALUES."""
        from .games.solver.service import run_solver
        result = run_solver(
            target,
            list(values) or app.config["SOLVER_DEFAULT_VALUES"],
            list(ops) or app.config["SOLVER_DEFAULT_OPERATORS"],
            timeout=timeout if timeout is not None else app.config["SOLVER_TIMEOUT_S"],
            max_depth=max_depth if max_depth is not None else app.config["SOLVER_MAX_DEPTH"],
            limit=limit or app.config["SOLVER_SOLUTION_LIMIT"],
            slice_ms=app.config["SOLVER_SLICE_MS"],
            best_only=not show_all,
        )
        if result["cancelled"]:
            click.echo(f"Cancelled at depth {result['progress'].get('current_depth')}.")
        if not result["found"]:
            click.echo(f"No solution for {target}.")
            return
        click.echo(f"Depth {result['depth']}, {result['count']} solution(s):")
        for s in result["solutions"]:
            click.echo(f"  {target} = {s}")

    @app.cli.command("operators")
    def operators_command():
        """List the available operators."""
        from .engine import OPERATORS
        for spec in OPERATORS.values():
            click.echo(f"{int(spec.op)}  {spec.label}  {spec.op.name.lower():<9} "
                       f"{'commutative' if spec.commutative else 'ordered'}")

    return app
