from __future__ import annotations

import json
import logging

import structlog

from isleform.log import configure_logging


def test_configure_logging_renders_json(capsys) -> None:
    root = logging.getLogger()
    saved = root.handlers[:]
    root.handlers = []
    try:
        configure_logging("INFO", json=True)
        structlog.get_logger("isleform.test").info("Watershed built", rivers=2)
        line = capsys.readouterr().out.strip().splitlines()[-1]
    finally:
        root.handlers = saved
        structlog.reset_defaults()

    event = json.loads(line)
    assert event["event"] == "Watershed built"
    assert event["rivers"] == 2
    assert event["level"] == "info"
    assert "timestamp" in event
