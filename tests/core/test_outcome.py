"""Tests for tool outcome models."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from remodern.core.outcome import ToolFailure, ToolSuccess, failure, success


class TestSuccess:
    def test_defaults(self) -> None:
        outcome = success()
        assert isinstance(outcome, ToolSuccess)
        assert outcome.success is True
        assert outcome.content is None
        assert outcome.metadata == {}

    def test_timestamp_is_recent(self) -> None:
        before = datetime.now(UTC)
        outcome = success("ok")
        assert before - timedelta(seconds=1) <= outcome.timestamp <= datetime.now(UTC)

    def test_payload(self) -> None:
        outcome = success("done", {"k": 1})
        payload = outcome.to_payload()
        assert payload["success"] is True
        assert payload["content"] == "done"
        assert payload["metadata"] == {"k": 1}
        assert payload["timestamp"] == outcome.timestamp.isoformat()

    def test_metadata_is_copied(self) -> None:
        source = {"k": 1}
        outcome = success("x", source)
        source["k"] = 2
        assert outcome.metadata == {"k": 1}

    def test_frozen(self) -> None:
        outcome = success("x")
        with pytest.raises(ValidationError):
            outcome.content = "y"  # type: ignore[misc]


class TestFailure:
    def test_fields(self) -> None:
        outcome = failure("CODE", "broken")
        assert isinstance(outcome, ToolFailure)
        assert outcome.success is False
        assert outcome.error_code == "CODE"
        assert outcome.error == "broken"

    def test_payload_without_metadata(self) -> None:
        payload = failure("CODE", "broken").to_payload()
        assert payload["success"] is False
        assert payload["error"] == "broken"
        assert payload["errorCode"] == "CODE"
        assert "metadata" not in payload

    def test_payload_with_metadata(self) -> None:
        payload = failure("CODE", "broken", {"tool": "t"}).to_payload()
        assert payload["metadata"] == {"tool": "t"}
