"""Tests for __main__.py - exit codes."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from homechatbot import __main__ as entry
from homechatbot.errors import StoreError, TransportError

REQUIRED = {
    "HOMECHATBOT_USERNAME": "@grocerybot:example.org",
    "HOMECHATBOT_PASSWORD": "hunter2",
    "HOMECHATBOT_MONGO_ADDRESS": "mongo:27017",
    "HOMECHATBOT_MONGO_USERNAME": "bot",
    "HOMECHATBOT_MONGO_PASSWORD": "s3cret",
}


@pytest.fixture
def environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name, value in REQUIRED.items():
        monkeypatch.setenv(name, value)
    monkeypatch.delenv("HOMECHATBOT_LOG_LEVEL", raising=False)
    monkeypatch.delenv("HOMECHATBOT_INVITE_POLL_SECONDS", raising=False)


def test_missing_configuration_exits_with_error(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    for name in REQUIRED:
        monkeypatch.delenv(name, raising=False)

    with patch.object(entry.anyio, "run") as run:
        assert entry.main() == 1

    run.assert_not_called()
    assert "HOMECHATBOT_" in capsys.readouterr().err


def test_invalid_log_level_exits_with_error(
    environment: None, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("HOMECHATBOT_LOG_LEVEL", "loud")

    with patch.object(entry.anyio, "run") as run:
        assert entry.main() == 1

    run.assert_not_called()


def test_startup_error_exits_with_error(environment: None) -> None:
    with patch.object(
        entry.anyio, "run", side_effect=TransportError("Unable to login: 403")
    ):
        assert entry.main() == 1


def test_wrapped_startup_error_exits_with_error(environment: None) -> None:
    group = ExceptionGroup(
        "unhandled errors in a TaskGroup", [StoreError("Unable to list collections")]
    )

    with patch.object(entry.anyio, "run", side_effect=group):
        assert entry.main() == 1


def test_wrapped_unrelated_error_propagates(environment: None) -> None:
    group = ExceptionGroup("unhandled errors in a TaskGroup", [RuntimeError("boom")])

    with patch.object(entry.anyio, "run", side_effect=group):
        with pytest.raises(ExceptionGroup):
            entry.main()


def test_clean_shutdown_exits_with_zero(environment: None) -> None:
    with patch.object(entry.anyio, "run", return_value=None) as run:
        assert entry.main() == 0

    assert run.call_args.kwargs == {"backend": "asyncio"}
