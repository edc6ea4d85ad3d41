"""통합 에러 디스패처

전략 기반 에러 처리:
- 예외 분류 (classify_exception)
- 전략 결정 (get_error_strategy)
- severity별 로깅
- 최근 에러 이력 보관 (운영 조회용)
- 알람
"""

from __future__ import annotations

from collections import deque
from typing import Any

from price_stream.common.events import ErrorEvent, EventBus
from price_stream.common.exceptions.base import StreamException
from price_stream.common.exceptions.exception_rule import (
    ErrorSeverity,
    classify_exception,
    get_error_strategy,
)
from price_stream.common.logger import PipelineLogger
from price_stream.core.dto.io.commands import ConnectionTargetDTO

logger = PipelineLogger.get_logger("error_dispatcher", "core")

__all__ = [
    "ErrorDispatcher",
    "dispatch_error",
]


class ErrorDispatcher:
    """통합 에러 처리 디스패처

    책임:
    1. 예외 분류 (classify_exception)
    2. 전략 결정 (get_error_strategy)
    3. 구조화 로깅
    4. 최근 에러 이력 보관
    5. 알람
    """

    def __init__(self, history_size: int = 100) -> None:
        self._history: deque[dict[str, Any]] = deque(maxlen=history_size)

    @property
    def history(self) -> list[dict[str, Any]]:
        return list(self._history)

    async def dispatch(
        self,
        exc: Exception,
        kind: str,
        target: ConnectionTargetDTO,
        context: dict | None = None,
    ) -> None:
        """전략 기반 통합 에러 디스패처"""
        domain, code, retryable = classify_exception(exc, kind)
        strategy = get_error_strategy(code)

        log_method = getattr(logger, strategy.log_level, logger.error)
        observed_key = target.observed_key()

        # context에서 logging 예약 키워드 제거 (exc_info, stack_info 등)
        safe_context = {
            k: v
            for k, v in (context or {}).items()
            if k not in ("exc_info", "stack_info", "extra")
        }

        record: dict[str, Any] = {
            "error_domain": domain.value,
            "error_code": code.value,
            "severity": strategy.severity.value,
            "retryable": retryable,
            "observed_key": observed_key,
            "kind": kind,
            **safe_context,
        }
        if isinstance(exc, StreamException):
            record.update(exc.to_dict())
        else:
            record["error"] = str(exc)
            record["error_type"] = type(exc).__name__

        log_method(
            f"[{strategy.severity.value.upper()}] {kind} error: {exc}",
            exc_info=exc if exc.__traceback__ is not None else None,
            extra=record,
        )
        self._history.append(record)

        if strategy.alert:
            await self._send_alert(exc, strategy.severity, target)

    async def _send_alert(
        self,
        exc: Exception,
        severity: ErrorSeverity,
        target: ConnectionTargetDTO,
    ) -> None:
        """알람 발송 (현재는 로그 채널)"""
        logger.info(
            f"Alert: {severity.value} - {exc}",
            extra={"target": target.observed_key()},
        )

    def register(self) -> None:
        """Event Bus에 ErrorEvent 핸들러로 등록"""

        async def handle_error_event(event: ErrorEvent) -> None:
            await self.dispatch(
                exc=event.exc,
                kind=event.kind,
                target=event.target,
                context=event.context,
            )

        EventBus.on(ErrorEvent, handle_error_event)


async def dispatch_error(
    exc: Exception,
    kind: str,
    target: ConnectionTargetDTO,
    context: dict | None = None,
) -> None:
    """Event Bus 기반 에러 이벤트 발행

    모든 레이어에서 순환 import 없이 사용 가능:
    - Frame/Protocol: 프레임 디코딩, 구독 거절, 알 수 없는 메시지
    - Bootstrap: 심볼별 캔들 조회 실패
    - Application: 태스크/환율 갱신 오류

    Args:
        exc: 발생한 예외
        kind: 에러 종류 (분류용)
        target: 에러 발생 대상
        context: 추가 컨텍스트
    """
    await EventBus.emit(
        ErrorEvent(
            exc=exc,
            kind=kind,
            target=target,
            context=context,
        )
    )
