"""Content builders for Matrix message events."""

from __future__ import annotations

from typing import Any


def _build_text_content(body: str) -> dict[str, Any]:
    """Build plain ``m.text`` content; the bot sends no formatted bodies."""
    return {"msgtype": "m.text", "body": body}
