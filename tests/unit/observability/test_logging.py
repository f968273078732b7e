"""Unit tests for JSON-lines logging, correlation fields, and the structlog bridge."""

from __future__ import annotations

import json
import logging
import logging.handlers
from typing import TYPE_CHECKING
from uuid import uuid4

import pytest
import structlog

from tvc_codec.observability.logging import (
    LoggingConfig,
    configure_structlog,
    correlation_scope,
    get_active_logging_handle,
    setup_structured_logging,
    shutdown_logging,
)

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture(autouse=True)
def _cleanup_logging() -> Iterator[None]:
    yield
    shutdown_logging()
    structlog.reset_defaults()


def _logger_name() -> str:
    return f"tvc_codec.tests.logging.{uuid4().hex}"


def _read_json_lines(path: Path) -> list[dict[str, object]]:
    lines = path.read_text(encoding="utf-8").splitlines()
    return [json.loads(line) for line in lines]


def test_json_lines_carry_extras_and_correlation(tmp_path: Path) -> None:
    logger_name = _logger_name()
    handle = setup_structured_logging(
        LoggingConfig(
            level="INFO",
            log_dir=tmp_path,
            logger_name=logger_name,
            log_to_stderr=False,
        )
    )
    logger = logging.getLogger(logger_name)

    with correlation_scope(command="inspect", artifact="wallet.tvc"):
        logger.info("decoded %d cell(s)", 3, extra={"root_hash": b"\x01\x02"})
    logger.debug("below threshold")

    shutdown_logging(handle)

    assert handle.log_path == tmp_path / "tvc-codec.jsonl"
    parsed = _read_json_lines(handle.log_path)
    assert len(parsed) == 1
    event = parsed[0]
    assert event["message"] == "decoded 3 cell(s)"
    assert event["level"] == "INFO"
    assert event["logger"] == logger_name
    assert event["command"] == "inspect"
    assert event["artifact"] == "wallet.tvc"
    assert event["fields"] == {"root_hash": "0102"}
    assert str(event["timestamp"]).endswith("Z")


def test_structlog_events_reach_the_same_sink(tmp_path: Path) -> None:
    logger_name = _logger_name()
    handle = setup_structured_logging(
        LoggingConfig(level="INFO", log_dir=tmp_path, logger_name=logger_name, log_to_stderr=False)
    )
    configure_structlog()

    structlog.get_logger(logger_name).info("contract_packed", variant="ContractE0", bytes=120)
    structlog.get_logger(logger_name).debug("filtered_out")

    shutdown_logging(handle)

    parsed = _read_json_lines(handle.log_path)
    assert len(parsed) == 1
    assert parsed[0]["message"] == "contract_packed"
    assert parsed[0]["fields"] == {"variant": "ContractE0", "bytes": 120}


def test_queue_backed_handler_flushes_on_shutdown(tmp_path: Path) -> None:
    logger_name = _logger_name()
    handle = setup_structured_logging(
        LoggingConfig(
            level="DEBUG",
            log_dir=tmp_path,
            logger_name=logger_name,
            log_to_stderr=False,
            queue_size=10_000,
        )
    )
    logger = logging.getLogger(logger_name)

    queue_handlers = [h for h in logger.handlers if isinstance(h, logging.handlers.QueueHandler)]
    assert queue_handlers

    for index in range(200):
        logger.debug("chunk %s", index)

    shutdown_logging(handle)

    assert handle.is_shutdown
    assert handle.dropped_records == 0
    assert len(handle.log_path.read_text(encoding="utf-8").splitlines()) == 200
    assert get_active_logging_handle() is None


def test_new_setup_replaces_previous_handle(tmp_path: Path) -> None:
    first = setup_structured_logging(
        LoggingConfig(log_dir=tmp_path / "a", logger_name=_logger_name(), log_to_stderr=False)
    )
    second = setup_structured_logging(
        LoggingConfig(log_dir=tmp_path / "b", logger_name=_logger_name(), log_to_stderr=False)
    )

    assert first.is_shutdown
    assert get_active_logging_handle() is second


def test_logging_config_from_observability_section() -> None:
    config = LoggingConfig.from_observability({"log_level": "DEBUG", "log_dir": ""})
    assert config.level == "DEBUG"
    assert config.log_dir is None

    with_dir = LoggingConfig.from_observability({"log_level": "INFO", "log_dir": "/tmp/logs"})
    assert with_dir.log_dir == "/tmp/logs"


def test_invalid_settings_are_rejected() -> None:
    with pytest.raises(ValueError, match="unsupported logging level"):
        setup_structured_logging(LoggingConfig(level="CHATTY", log_to_stderr=False))
    with pytest.raises(ValueError, match="queue_size"):
        setup_structured_logging(LoggingConfig(queue_size=0, log_to_stderr=False))
    with pytest.raises(ValueError, match="non-empty"):
        with correlation_scope(command="  "):
            pass
