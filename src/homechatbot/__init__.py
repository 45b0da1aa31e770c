"""Matrix chat bot managing a household grocery list."""

from __future__ import annotations

__version__ = "0.1.0"
