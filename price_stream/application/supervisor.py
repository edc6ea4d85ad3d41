from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Protocol

from price_stream.common.logger import PipelineLogger
from price_stream.core.connection.contracts import QuoteAdapter
from price_stream.core.connection.utils.logging.log_phases import PHASE_LIVENESS

logger = PipelineLogger.get_logger("liveness_supervisor", "app")


class Reconnectable(Protocol):
    @property
    def is_connected(self) -> bool: ...

    async def request_reconnect(self, reason: str | None = None) -> None: ...


@dataclass(slots=True)
class WatchedStream:
    adapter: QuoteAdapter
    transport: Reconnectable
    idle_polls: int = 0
    forced_reconnects: int = 0


class LivenessSupervisor:
    """어댑터 생존 여부를 주기적으로 확인하고 멈춘 스트림을 재접속시킴

    - poll 주기마다 check_alive() 호출 (어댑터 플래그는 읽는 즉시 초기화됨)
    - 연속 max_idle_polls회 새 데이터가 없으면 request_reconnect
    - 연결되어 있지 않은 스트림은 전송 계층이 이미 재접속 중이므로 세지 않음
    """

    def __init__(self, poll_interval: float = 60.0, max_idle_polls: int = 3) -> None:
        self._poll_interval = poll_interval
        self._max_idle_polls = max(1, max_idle_polls)
        self._watched: list[WatchedStream] = []

    @property
    def watched(self) -> list[WatchedStream]:
        return list(self._watched)

    def watch(self, adapter: QuoteAdapter, transport: Reconnectable) -> WatchedStream:
        stream = WatchedStream(adapter=adapter, transport=transport)
        self._watched.append(stream)
        return stream

    async def poll_once(self) -> list[str]:
        """한 번 점검하고 재접속을 요청한 거래소 이름 목록을 반환"""
        reconnected: list[str] = []
        for stream in self._watched:
            name = stream.adapter.exchange_name
            if stream.adapter.check_alive():
                stream.idle_polls = 0
                continue

            if not stream.transport.is_connected:
                stream.idle_polls = 0
                continue

            stream.idle_polls += 1
            idle = stream.adapter.idle_seconds()
            logger.warning(
                f"{name}: no new data ({stream.idle_polls}/{self._max_idle_polls})",
                extra={
                    "phase": PHASE_LIVENESS,
                    "exchange": name,
                    "idle_seconds": None if idle is None else round(idle, 1),
                },
            )
            if stream.idle_polls >= self._max_idle_polls:
                stream.idle_polls = 0
                stream.forced_reconnects += 1
                await stream.transport.request_reconnect(
                    f"stalled for {self._max_idle_polls} polls"
                )
                reconnected.append(name)
        return reconnected

    async def run(self) -> None:
        """취소될 때까지 poll_interval마다 점검"""
        while True:
            await asyncio.sleep(self._poll_interval)
            await self.poll_once()
