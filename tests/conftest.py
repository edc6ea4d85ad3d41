from __future__ import annotations

import os

# 테스트 중 logs/ 디렉토리 생성 방지 (settings import 전에 설정)
os.environ.setdefault("LOG_TO_FILE", "false")

import pytest  # noqa: E402

from price_stream.common.events import ErrorEvent, EventBus  # noqa: E402


@pytest.fixture(autouse=True)
def _clean_event_bus():
    EventBus.clear()
    yield
    EventBus.clear()


@pytest.fixture
def captured_errors() -> list[ErrorEvent]:
    events: list[ErrorEvent] = []

    async def _capture(event: ErrorEvent) -> None:
        events.append(event)

    EventBus.on(ErrorEvent, _capture)
    return events
