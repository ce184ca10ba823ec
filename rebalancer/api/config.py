import os

DEFAULT_SERVICE_NAME = "rebalancer"
DEFAULT_ENVIRONMENT = "local"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_MAX_SECURITIES = 500

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    return parsed if parsed >= 1 else default


def service_name() -> str:
    return os.getenv("SERVICE_NAME", DEFAULT_SERVICE_NAME).strip() or DEFAULT_SERVICE_NAME


def environment() -> str:
    return os.getenv("ENVIRONMENT", DEFAULT_ENVIRONMENT).strip() or DEFAULT_ENVIRONMENT


def log_level() -> str:
    level = os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
    return level if level in _LOG_LEVELS else DEFAULT_LOG_LEVEL


def metrics_enabled() -> bool:
    return env_flag("REBALANCE_METRICS_ENABLED", True)


def max_securities() -> int:
    return env_int("REBALANCE_MAX_SECURITIES", DEFAULT_MAX_SECURITIES)
