# countdown/config.py
import os


def _env_list(name: str, default: str) -> list:
    raw = os.environ.get(name) or default
    return [p.strip() for p in raw.split(",") if p.strip()]


def _env_int(name: str, default):
    raw = os.environ.get(name)
    return int(raw) if raw else default


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or "dev-secret-key-change-in-production"

    # Solver defaults (used when a request leaves them out)
    SOLVER_DEFAULT_VALUES = [int(v) for v in _env_list("SOLVER_DEFAULT_VALUES", "1,2,3,4,5,6,7,8,9")]
    SOLVER_DEFAULT_OPERATORS = _env_list("SOLVER_DEFAULT_OPERATORS", "+,-,*,^")
    SOLVER_TIMEOUT_S = float(os.environ.get("SOLVER_TIMEOUT_S", "10"))
    SOLVER_MAX_DEPTH = _env_int("SOLVER_MAX_DEPTH", 8)
    SOLVER_SLICE_MS = float(os.environ.get("SOLVER_SLICE_MS", "40"))
    SOLVER_SOLUTION_LIMIT = _env_int("SOLVER_SOLUTION_LIMIT", 50)

    # Flask-Limiter
    RATELIMIT_DEFAULT = os.environ.get("RATELIMIT_DEFAULT", "200 per hour; 50 per minute")
    RATELIMIT_STORAGE_URI = "memory://"
    SOLVER_RATE_LIMIT = os.environ.get("SOLVER_RATE_LIMIT", "30 per minute")

    LOG_DIR = os.environ.get("LOG_DIR", "logs")


class DevelopmentConfig(Config):
    DEBUG = True


class ProductionConfig(Config):
    SOLVER_TIMEOUT_S = float(os.environ.get("SOLVER_TIMEOUT_S", "5"))


class TestingConfig(Config):
    TESTING = True
    RATELIMIT_ENABLED = False
    SOLVER_TIMEOUT_S = 5.0
    SOLVER_MAX_DEPTH = 6
