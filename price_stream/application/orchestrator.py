"""
StreamOrchestrator

설정된 거래소 어댑터마다 부트스트랩 → 스트림 연결 태스크를 실행하고,
환율 갱신 루프와 생존 감시 루프를 함께 관리합니다.
"""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass
from typing import Any

import websockets

from price_stream.application.supervisor import LivenessSupervisor
from price_stream.common.exceptions.error_dispatcher import dispatch_error
from price_stream.common.logger import PipelineLogger
from price_stream.core.connection.transport import Connector, WebsocketTransport
from price_stream.core.dto.internal.common import ConnectionPolicyDomain
from price_stream.core.dto.io.commands import ConnectionTargetDTO
from price_stream.infra.fx.fx_rate_service import FxRateService

logger = PipelineLogger.get_logger("orchestrator", "app")


@dataclass(slots=True)
class StreamBinding:
    """어댑터와 그 전송 계층 한 쌍"""

    adapter: Any
    transport: WebsocketTransport


class StreamOrchestrator:
    """스트림 오케스트레이터 (DI)

    책임:
    - 어댑터 생성 (FactoryAggregate) 및 전송 계층 연결
    - 거래소별 태스크 실행: start(부트스트랩) → transport.run()
    - 환율 갱신 루프, 생존 감시 루프 실행
    - 종료 시 모든 연결 해제 및 태스크 정리
    """

    def __init__(
        self,
        adapter_factory: Any,
        stream_urls: dict[str, str],
        policy: ConnectionPolicyDomain,
        supervisor: LivenessSupervisor,
        fx_service: FxRateService,
        fx_refresh_interval: float = 60.0,
        connector: Connector | None = None,
    ) -> None:
        """
        Args:
            adapter_factory: 거래소 이름 → 어댑터 팩토리 (FactoryAggregate)
            stream_urls: 거래소 이름 → 스트림 주소
            policy: 재접속 정책
            supervisor: 생존 감시자
            fx_service: 환율 서비스
            fx_refresh_interval: 환율 갱신 주기 (초)
            connector: 웹소켓 연결 함수 (미지정 시 websockets.connect)
        """
        self._adapter_factory = adapter_factory
        self._stream_urls = stream_urls
        self._policy = policy
        self._supervisor = supervisor
        self._fx_service = fx_service
        self._fx_refresh_interval = fx_refresh_interval
        self._connector = connector or websockets.connect

        self.bindings: dict[str, StreamBinding] = {}
        self._tasks: list[asyncio.Task[None]] = []

    @property
    def tasks(self) -> list[asyncio.Task[None]]:
        return list(self._tasks)

    async def build(self) -> dict[str, StreamBinding]:
        """설정된 모든 거래소의 어댑터/전송 계층 생성"""
        for exchange, url in self._stream_urls.items():
            if exchange in self.bindings:
                continue
            adapter = self._adapter_factory(exchange)
            # async Resource에 의존하는 팩토리는 awaitable을 반환
            if inspect.isawaitable(adapter):
                adapter = await adapter
            transport = WebsocketTransport(
                adapter=adapter,
                url=url,
                scope=adapter.scope,
                policy=self._policy,
                connector=self._connector,
            )
            self.bindings[exchange] = StreamBinding(adapter=adapter, transport=transport)
            self._supervisor.watch(adapter, transport)
            logger.info(
                f"{exchange} 어댑터 생성: {adapter.__class__.__name__}",
                extra={"symbols": [str(s) for s in adapter.all_symbols()]},
            )
        return self.bindings

    async def startup(self) -> None:
        """초기 환율 조회 후 모든 태스크 시작"""
        await self.build()

        # 부트스트랩 시점에 합성 가격을 만들 수 있도록 먼저 한 번 조회
        await self._fx_service.refresh()

        for exchange, binding in self.bindings.items():
            self._tasks.append(
                asyncio.create_task(self._run_stream(exchange, binding), name=f"ws-{exchange}")
            )
        self._tasks.append(
            asyncio.create_task(
                self._fx_service.run_refresh_loop(self._fx_refresh_interval),
                name="fx-refresh",
            )
        )
        self._tasks.append(
            asyncio.create_task(self._supervisor.run(), name="liveness-supervisor")
        )
        logger.info(f"{len(self._tasks)}개 태스크 시작")

    async def wait(self) -> None:
        """모든 태스크 종료까지 대기"""
        await asyncio.gather(*self._tasks, return_exceptions=True)

    async def _run_stream(self, exchange: str, binding: StreamBinding) -> None:
        try:
            await binding.adapter.start()
            await binding.transport.run()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            await dispatch_error(
                exc=e,
                kind="orchestrator",
                target=ConnectionTargetDTO(
                    exchange=binding.adapter.scope.exchange,
                    region=binding.adapter.scope.region,
                ),
                context={"task": f"ws-{exchange}"},
            )

    async def shutdown(self) -> None:
        """모든 연결 종료 및 태스크 정리"""
        for binding in self.bindings.values():
            await binding.transport.request_disconnect("shutdown")

        for task in self._tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()
        logger.info("오케스트레이터 종료 완료")
