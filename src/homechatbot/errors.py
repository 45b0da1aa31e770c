"""Exception types shared across the bot."""

from __future__ import annotations


class HomechatbotError(Exception):
    """Base class for errors raised by homechatbot."""


class ConfigError(HomechatbotError):
    """Startup configuration is missing or invalid."""


class StoreError(HomechatbotError):
    """A MongoDB operation failed."""


class CollectionExists(StoreError):
    pass


class DuplicateKeyConflict(StoreError):
    """An insert violated a unique index.

    Kept apart from other store failures because the grocery add flow
    retries on it.
    """


class IdSpaceExhausted(HomechatbotError):
    pass


class TransportError(HomechatbotError):
    """A Matrix client call returned an error response."""
