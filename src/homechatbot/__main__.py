"""Command-line entry point: ``homechatbot`` or ``python -m homechatbot``."""

from __future__ import annotations

import sys

import anyio

from .bridge.runtime import run_bot
from .config import load_settings
from .errors import ConfigError, HomechatbotError
from .logging import get_logger, setup_logging

logger = get_logger("homechatbot")


def main() -> int:
    try:
        settings = load_settings()
    except ConfigError as exc:
        print(exc, file=sys.stderr)
        return 1
    setup_logging(settings.log_level)
    logger.info("homechatbot.env_checked", user_id=settings.matrix_user_id)
    try:
        # pymongo's async client needs the asyncio backend.
        anyio.run(run_bot, settings, backend="asyncio")
    except HomechatbotError as exc:
        logger.error("homechatbot.startup_failed", error=str(exc))
        return 1
    except ExceptionGroup as group:
        # Failures inside the runtime task group arrive wrapped.
        matched = group.subgroup(HomechatbotError)
        if matched is None:
            raise
        logger.error(
            "homechatbot.startup_failed",
            error="; ".join(str(exc) for exc in matched.exceptions),
        )
        return 1
    except KeyboardInterrupt:
        logger.info("homechatbot.interrupted")
    return 0


if __name__ == "__main__":
    sys.exit(main())
