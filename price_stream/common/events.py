"""이벤트 정의 및 Event Bus

모든 레이어가 순환 import 없이 에러 이벤트를 발행할 수 있도록 지원합니다.
이벤트는 순수 데이터 객체로, 의존성이 없습니다.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable

from price_stream.common.logger import PipelineLogger
from price_stream.core.dto.io.commands import ConnectionTargetDTO

logger = PipelineLogger.get_logger("event_bus", "common")


@dataclass(frozen=True, slots=True)
class ErrorEvent:
    """에러 이벤트 (순수 데이터)

    발행 위치:
    - frame: 압축 해제/파싱 실패
    - protocol: 구독 거절, 알 수 없는 메시지
    - bootstrap: 심볼별 과거 캔들 조회 실패
    - ws / fx / orchestrator: 연결, 환율, 태스크 오류
    """

    exc: Exception
    kind: str
    target: ConnectionTargetDTO
    context: dict[str, Any] | None = None
    timestamp: datetime = field(default_factory=datetime.now)


class EventBus:
    """전역 이벤트 버스 (의존성 없음)

    특징:
    - 완전한 비동기 처리
    - 타입 기반 핸들러 등록
    - 핸들러 실패가 발행자에게 전파되지 않음
    """

    _handlers: dict[type, list[Callable[[Any], Any]]] = {}

    @classmethod
    async def emit(cls, event: Any) -> None:
        """이벤트 발행 (비동기)

        Args:
            event: 발행할 이벤트 객체
        """
        event_type = type(event)
        handlers = cls._handlers.get(event_type, [])

        for handler in handlers:
            try:
                await handler(event)
            except Exception as e:
                logger.error(
                    f"Event handler failed: {e}",
                    exc_info=True,
                    extra={
                        "event_type": event_type.__name__,
                        "handler": getattr(handler, "__name__", repr(handler)),
                    },
                )

    @classmethod
    def on(cls, event_type: type, handler: Callable[[Any], Any]) -> None:
        """핸들러 등록

        Args:
            event_type: 이벤트 타입 (클래스)
            handler: 핸들러 함수 (async def)
        """
        cls._handlers.setdefault(event_type, []).append(handler)

    @classmethod
    def clear(cls) -> None:
        """모든 핸들러 제거 (테스트용)"""
        cls._handlers.clear()


__all__ = ["ErrorEvent", "EventBus"]
