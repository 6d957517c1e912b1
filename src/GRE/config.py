"""Process configuration from the environment and an optional ``.env`` file."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping

from dotenv import find_dotenv, load_dotenv

from GRE import token_store

# Checked in order; the first non-empty one wins
TOKEN_VARIABLES = ("PAT", "GITHUB_TOKEN", "GH_TOKEN")


class ConfigError(Exception):
    """Raised when a setting has an invalid value."""


@dataclass
class Settings:
    host: str = "127.0.0.1"
    port: int = 8000
    token: str | None = None
    api_base: str = "https://api.github.com"
    raw_base: str = "https://raw.githubusercontent.com"
    cache_size: int = 256
    max_workers: int = 8
    timeout: float = 30.0
    log_level: str = "INFO"

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        use_keyring: bool = True,
    ) -> Settings:
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            host=env.get("GRE_HOST", defaults.host),
            port=_int(env, "GRE_PORT", defaults.port),
            token=_token(env, use_keyring),
            api_base=env.get("GRE_API_BASE", defaults.api_base),
            raw_base=env.get("GRE_RAW_BASE", defaults.raw_base),
            cache_size=_int(env, "GRE_CACHE_SIZE", defaults.cache_size, minimum=1),
            max_workers=_int(env, "GRE_MAX_WORKERS", defaults.max_workers, minimum=1),
            timeout=_float(env, "GRE_TIMEOUT", defaults.timeout),
            log_level=_log_level(env, "GRE_LOG_LEVEL", defaults.log_level),
        )


def load_settings(use_keyring: bool = True) -> Settings:
    """Read ``.env`` from the working directory (without overriding the real
    environment) and build Settings."""
    load_dotenv(find_dotenv(usecwd=True))
    return Settings.from_env(use_keyring=use_keyring)


def _token(env: Mapping[str, str], use_keyring: bool) -> str | None:
    for name in TOKEN_VARIABLES:
        value = env.get(name, "").strip()
        if value:
            return value
    if use_keyring:
        return token_store.load()
    return None


def _log_level(env: Mapping[str, str], name: str, default: str) -> str:
    value = env.get(name, default).strip().upper()
    if not isinstance(logging.getLevelName(value), int):
        raise ConfigError(f"{name} must be a logging level name, got {value!r}")
    return value


def _int(env: Mapping[str, str], name: str, default: int, minimum: int = 0) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ConfigError(f"{name} must be at least {minimum}, got {value}")
    return value


def _float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value
