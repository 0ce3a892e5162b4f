import os
import logging
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

BACKENDS = ("rest", "memory")


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class Settings:
    backend: str = "rest"
    store_url: Optional[str] = None
    store_api_key: Optional[str] = None
    store_timeout: Optional[float] = None  # None: wait for the service
    seed_path: Optional[str] = None
    log_level: str = "INFO"
    currency: str = "$"

    @classmethod
    def from_env(cls, env: Optional[dict] = None, dotenv_path: Optional[str] = None) -> "Settings":
        """Read settings from the environment, after loading a .env file.

        Passing ``env`` skips both ``.env`` and ``os.environ``; used by tests.
        """
        if env is None:
            load_dotenv(dotenv_path)
            env = os.environ

        backend = env.get("STORE_BACKEND", "rest").strip().lower()
        if backend not in BACKENDS:
            raise ConfigError(f"STORE_BACKEND must be one of {BACKENDS}, got {backend!r}")

        url = env.get("STORE_URL") or None
        key = env.get("STORE_API_KEY") or None
        if backend == "rest" and not (url and key):
            raise ConfigError("STORE_URL and STORE_API_KEY are required for the rest backend")

        raw_timeout = env.get("STORE_TIMEOUT")
        timeout = None
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                raise ConfigError(f"STORE_TIMEOUT must be a number of seconds, got {raw_timeout!r}")

        level = env.get("LOG_LEVEL", "INFO").upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ConfigError(f"Unknown LOG_LEVEL {level!r}")

        return cls(
            backend=backend,
            store_url=url.rstrip("/") if url else None,
            store_api_key=key,
            store_timeout=timeout,
            seed_path=env.get("SEED_PATH") or None,
            log_level=level,
            currency=env.get("CURRENCY_SYMBOL", "$"),
        )
