from __future__ import annotations

import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    # Listener
    host: str = os.getenv("ELBSIM_HOST", "127.0.0.1")
    port: int = _env_int("ELBSIM_PORT", 0)
    startup_timeout_s: int = _env_int("ELBSIM_STARTUP_TIMEOUT_S", 10)
    log_level: str = os.getenv("ELBSIM_LOG_LEVEL", "INFO")

    # Simulated provider
    region: str = os.getenv("ELBSIM_REGION", "us-east-1")
    default_zone: str = os.getenv("ELBSIM_DEFAULT_ZONE", "us-east-1a")

    # Request journal (sqlite path, ":memory:" keeps it in-process)
    journal_path: str = os.getenv("ELBSIM_JOURNAL_PATH", ":memory:")

    # An unexpected exception inside a handler is a bug in the simulator.
    # When set, the process is terminated instead of answering the request.
    abort_on_defect: bool = _env_bool("ELBSIM_ABORT_ON_DEFECT", True)


settings = Settings()
