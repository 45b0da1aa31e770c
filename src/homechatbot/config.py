"""Process settings read from the environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from .errors import ConfigError
from .logging import LOG_LEVELS

ENV_USERNAME = "HOMECHATBOT_USERNAME"
ENV_PASSWORD = "HOMECHATBOT_PASSWORD"
ENV_MONGO_ADDRESS = "HOMECHATBOT_MONGO_ADDRESS"
ENV_MONGO_USERNAME = "HOMECHATBOT_MONGO_USERNAME"
ENV_MONGO_PASSWORD = "HOMECHATBOT_MONGO_PASSWORD"
ENV_HOMESERVER = "HOMECHATBOT_HOMESERVER"
ENV_LOG_LEVEL = "HOMECHATBOT_LOG_LEVEL"
ENV_INVITE_POLL_SECONDS = "HOMECHATBOT_INVITE_POLL_SECONDS"

DEFAULT_INVITE_POLL_SECONDS = 1.0
DEFAULT_LOG_LEVEL = "info"


@dataclass(frozen=True, slots=True)
class Settings:
    matrix_user_id: str
    matrix_password: str
    mongo_address: str
    mongo_username: str
    mongo_password: str
    homeserver: str | None = None
    log_level: str = DEFAULT_LOG_LEVEL
    invite_poll_seconds: float = DEFAULT_INVITE_POLL_SECONDS


def _required(environ: Mapping[str, str], name: str) -> str:
    if name not in environ:
        raise ConfigError(f"Unable to get value for environment variable {name}")
    value = environ[name]
    if value == "":
        raise ConfigError(f"Please set the environment variable {name}")
    return value


def _optional(environ: Mapping[str, str], name: str) -> str | None:
    value = (environ.get(name) or "").strip()
    return value or None


def _log_level(raw: str | None) -> str:
    if raw is None:
        return DEFAULT_LOG_LEVEL
    level = raw.lower()
    if level not in LOG_LEVELS:
        raise ConfigError(
            f"{ENV_LOG_LEVEL} must be one of {', '.join(LOG_LEVELS)}, got {raw!r}"
        )
    return level


def _poll_seconds(raw: str | None) -> float:
    if raw is None:
        return DEFAULT_INVITE_POLL_SECONDS
    try:
        seconds = float(raw)
    except ValueError:
        raise ConfigError(
            f"{ENV_INVITE_POLL_SECONDS} must be a number, got {raw!r}"
        ) from None
    if seconds <= 0:
        raise ConfigError(f"{ENV_INVITE_POLL_SECONDS} must be positive")
    return seconds


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Read settings from *environ* (defaults to ``os.environ``).

    Raises:
        ConfigError: a required variable is unset or empty, or an optional
            one cannot be parsed.
    """
    env = os.environ if environ is None else environ
    user_id = _required(env, ENV_USERNAME)
    if not user_id.startswith("@") or ":" not in user_id:
        raise ConfigError(
            f"{ENV_USERNAME} must be a full Matrix user id like @bot:example.org"
        )
    return Settings(
        matrix_user_id=user_id,
        matrix_password=_required(env, ENV_PASSWORD),
        mongo_address=_required(env, ENV_MONGO_ADDRESS),
        mongo_username=_required(env, ENV_MONGO_USERNAME),
        mongo_password=_required(env, ENV_MONGO_PASSWORD),
        homeserver=_optional(env, ENV_HOMESERVER),
        log_level=_log_level(_optional(env, ENV_LOG_LEVEL)),
        invite_poll_seconds=_poll_seconds(_optional(env, ENV_INVITE_POLL_SECONDS)),
    )
