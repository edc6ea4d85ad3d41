from __future__ import annotations

import asyncio
import contextlib
from typing import Any, Callable

import websockets

from price_stream.common.exceptions.base import ProtocolViolationError
from price_stream.common.exceptions.error_dispatcher import dispatch_error
from price_stream.common.exceptions.exception_rule import SOCKET_EXCEPTIONS
from price_stream.common.logger import PipelineLogger
from price_stream.core.connection.contracts import QuoteAdapter
from price_stream.core.connection.services.backoff import compute_next_backoff
from price_stream.core.connection.utils.logging.log_phases import (
    PHASE_CLOSE,
    PHASE_CONNECT,
    PHASE_MESSAGE_LOOP_STOP,
    PHASE_RECONNECT,
)
from price_stream.core.connection.utils.logging.logging_mixin import (
    ScopedConnectionLoggingMixin,
)
from price_stream.core.dto.internal.common import (
    ConnectionPolicyDomain,
    ConnectionScopeDomain,
)
from price_stream.core.dto.io.commands import ConnectionTargetDTO

logger = PipelineLogger.get_logger("websocket_transport", "connection")

Connector = Callable[..., Any]


class WebsocketTransport(ScopedConnectionLoggingMixin):
    """웹소켓 연결/재접속 전담 전송 계층

    책임:
    - 연결 수립 후 어댑터 on_connect 호출 (구독 전송은 어댑터 책임)
    - 수신 프레임을 순서대로 어댑터 on_raw_frame으로 전달
    - 끊김/타임아웃/프로토콜 위반 시 지수 백오프 후 재접속
    - 외부 요청에 의한 즉시 재접속(request_reconnect) 및 종료(request_disconnect)

    어댑터는 이 객체를 FrameSender로만 사용합니다.
    """

    def __init__(
        self,
        adapter: QuoteAdapter,
        url: str,
        scope: ConnectionScopeDomain,
        policy: ConnectionPolicyDomain,
        connector: Connector = websockets.connect,
    ) -> None:
        self.adapter = adapter
        self.url = url
        self.scope = scope
        self.policy = policy
        self._connector = connector
        self._logger = logger

        self._current_websocket: Any | None = None
        self._stop_requested: bool = False
        self._reconnect_requested: bool = False
        self._backoff_task: asyncio.Task[None] | None = None
        self._connect_count: int = 0

    @property
    def is_connected(self) -> bool:
        return self._current_websocket is not None

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested

    @property
    def connect_count(self) -> int:
        """성공한 연결 횟수 (재접속 포함)"""
        return self._connect_count

    async def send(self, message: str | bytes) -> None:
        websocket = self._current_websocket
        if websocket is None:
            raise ConnectionError(f"{self.scope.exchange}: websocket is not connected")
        await websocket.send(message)

    async def request_reconnect(self, reason: str | None = None) -> None:
        """현재 연결을 닫고 백오프 없이 즉시 재접속"""
        if self._stop_requested:
            return

        self._reconnect_requested = True
        self._log_warning(
            f"{self.scope.exchange}: reconnect requested",
            PHASE_RECONNECT,
            reason=reason,
        )
        await self._close_current()

    async def request_disconnect(self, reason: str | None = None) -> None:
        """연결 루프 종료 요청 (재접속하지 않음)"""
        if self._stop_requested:
            return

        self._stop_requested = True
        self._log_info(
            f"{self.scope.exchange}: disconnect requested",
            PHASE_CLOSE,
            reason=reason,
        )

        if self._backoff_task and not self._backoff_task.done():
            self._backoff_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._backoff_task
            self._backoff_task = None

        await self._close_current()

    async def _close_current(self) -> None:
        websocket = self._current_websocket
        if websocket is None:
            return
        try:
            await websocket.close()
        except Exception as close_error:
            self._log_warning(
                f"{self.scope.exchange}: websocket close failed - {close_error}",
                PHASE_CLOSE,
            )

    async def run(self) -> None:
        """연결 루프. request_disconnect 또는 재접속 한도 초과 시 반환"""
        attempt = 0
        while not self._stop_requested:
            reason: str | None = None
            self._log_info(
                f"{self.scope.exchange}: connecting {self.url}",
                PHASE_CONNECT,
                attempt=attempt,
            )
            try:
                async with self._connector(self.url, ping_interval=None) as websocket:
                    if self._stop_requested:
                        break

                    self._current_websocket = websocket
                    self._reconnect_requested = False
                    self._connect_count += 1
                    attempt = 0
                    self._log_info(f"{self.scope.exchange}: connected", PHASE_CONNECT)

                    await self.adapter.on_connect(self)
                    await self._receive_loop(websocket)

                    if self._stop_requested:
                        reason = "disconnect requested"
                        break
                    reason = "reconnect requested"
                    continue
            except asyncio.CancelledError:
                reason = "cancelled"
                self._log_info(f"{self.scope.exchange}: connection task cancelled", PHASE_CLOSE)
                raise
            except (ProtocolViolationError, *SOCKET_EXCEPTIONS) as e:
                reason = str(e) or type(e).__name__
                if self._stop_requested:
                    self._log_info(
                        f"{self.scope.exchange}: disconnect flow stopped reconnection",
                        PHASE_CLOSE,
                        reason=reason,
                    )
                    break
                if self._reconnect_requested:
                    continue

                # 프로토콜 위반은 어댑터가 이미 보고함
                if not isinstance(e, ProtocolViolationError):
                    self._log_warning(
                        f"{self.scope.exchange}: connection lost - {reason}",
                        PHASE_RECONNECT,
                    )
                    await self._report(e, attempt + 1)
            except Exception as e:
                reason = str(e) or type(e).__name__
                if self._stop_requested:
                    break
                self._log_error(
                    f"{self.scope.exchange}: unexpected error in connection loop - {e}",
                    PHASE_RECONNECT,
                )
                await self._report(e, attempt + 1)
            finally:
                self._current_websocket = None
                await self.adapter.on_close(reason)

            attempt += 1
            if attempt >= self.policy.reconnect_max_attempts:
                self._log_error(
                    f"{self.scope.exchange}: reconnect attempts "
                    f"({self.policy.reconnect_max_attempts}) exceeded",
                    PHASE_RECONNECT,
                )
                await self._report(RuntimeError("max reconnect attempts exceeded"), attempt)
                break

            if not await self._wait_backoff(attempt):
                break

        self._stop_requested = True
        self._log_info(f"{self.scope.exchange}: stopped", PHASE_MESSAGE_LOOP_STOP)

    async def _receive_loop(self, websocket: Any) -> None:
        while not self._stop_requested and not self._reconnect_requested:
            frame = await asyncio.wait_for(
                websocket.recv(), timeout=self.policy.receive_timeout
            )
            await self.adapter.on_raw_frame(frame)

    async def _wait_backoff(self, attempt: int) -> bool:
        """백오프 대기. 대기 중 종료 요청이면 False"""
        delay = compute_next_backoff(self.policy, attempt - 1)
        self._log_info(
            f"{self.scope.exchange}: reconnecting in {delay:.2f}s",
            PHASE_RECONNECT,
            attempt=attempt,
        )
        self._backoff_task = asyncio.create_task(asyncio.sleep(delay))
        try:
            await self._backoff_task
        except asyncio.CancelledError:
            if self._stop_requested:
                return False
            raise
        finally:
            self._backoff_task = None
        return not self._stop_requested

    async def _report(self, exc: Exception, attempt: int) -> None:
        await dispatch_error(
            exc=exc,
            kind="ws",
            target=ConnectionTargetDTO(
                exchange=self.scope.exchange, region=self.scope.region
            ),
            context={
                "url": self.url,
                "attempt": attempt,
                "max_reconnect_attempts": self.policy.reconnect_max_attempts,
            },
        )
