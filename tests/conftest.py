from __future__ import annotations

import pytest


@pytest.fixture
def anyio_backend() -> str:
    # pymongo's async client only runs on asyncio.
    return "asyncio"
