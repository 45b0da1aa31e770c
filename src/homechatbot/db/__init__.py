"""Persistence gateway over MongoDB."""

from __future__ import annotations

from .gateway import (
    CONFIG_COLLECTION_NAME,
    DB_NAME,
    HomechatbotDB,
    build_connection_uri,
)

__all__ = [
    "CONFIG_COLLECTION_NAME",
    "DB_NAME",
    "HomechatbotDB",
    "build_connection_uri",
]
