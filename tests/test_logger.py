from __future__ import annotations

import logging

from price_stream.common.logger import PipelineLogger


def test_nested_extra_is_merged_over_defaults(caplog) -> None:
    logger = PipelineLogger.get_logger("logger_test", "unit")

    with caplog.at_level(logging.DEBUG, logger="logger_test.unit"):
        logger.warning("stalled", extra={"exchange": "huobi", "phase": "liveness"}, attempt=2)

    (record,) = [r for r in caplog.records if r.name == "logger_test.unit"]
    assert record.levelno == logging.WARNING
    assert record.component == "unit"
    assert record.exchange == "huobi"
    assert record.phase == "liveness"
    assert record.attempt == 2


def test_default_extra_without_component(caplog) -> None:
    logger = PipelineLogger.get_logger("logger_plain")

    with caplog.at_level(logging.INFO, logger="logger_plain"):
        logger.info("hello")

    (record,) = [r for r in caplog.records if r.name == "logger_plain"]
    assert record.component == "main"
    assert record.exchange == "global"
