"""Tests for logging setup."""

from __future__ import annotations

import io
import logging

from remodern.logs import configure_logging


class TestConfigureLogging:
    def test_writes_to_given_stream(self) -> None:
        stream = io.StringIO()
        configure_logging("INFO", stream=stream)
        logging.getLogger("remodern.core.registry").info("hello from registry")
        assert "hello from registry" in stream.getvalue()
        assert "INFO remodern.core.registry" in stream.getvalue()

    def test_level_filters(self) -> None:
        stream = io.StringIO()
        configure_logging("error", stream=stream)
        logging.getLogger("remodern.protocol.server").warning("quiet")
        assert stream.getvalue() == ""

    def test_reconfigure_replaces_handler(self) -> None:
        configure_logging("INFO", stream=io.StringIO())
        logger = configure_logging("DEBUG", stream=io.StringIO())
        marked = [h for h in logger.handlers if getattr(h, "_remodern", False)]
        assert len(marked) == 1
        assert logger.level == logging.DEBUG
        assert logger.propagate is False
