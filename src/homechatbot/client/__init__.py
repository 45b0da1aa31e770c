"""Matrix transport adapter."""

from __future__ import annotations

from .matrix import MatrixTransport, MessageCallback, server_name

__all__ = ["MatrixTransport", "MessageCallback", "server_name"]
