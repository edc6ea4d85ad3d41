from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from price_stream.core.types import ErrorCode, ErrorDomain


@dataclass(eq=False)
class StreamException(Exception):
    """스트림 어댑터 기본 예외 클래스

    운영/관측 판단을 위한 구조화 필드를 포함하며, `to_dict()`는
    이벤트/로그 직렬화 시 일관된 스키마를 제공합니다.
    """

    exchange_name: str
    message: str
    original_exception: Exception | None = None

    error_domain: ErrorDomain = ErrorDomain.UNKNOWN
    error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR
    retryable: bool = False

    def __str__(self) -> str:
        return f"{self.exchange_name}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """예외 정보를 이벤트 데이터로 변환"""
        result: dict[str, Any] = {
            "exchange": self.exchange_name,
            "error": self.message,
            "error_type": self.__class__.__name__,
            "error_domain": self.error_domain.value,
            "error_code": self.error_code.value,
            "retryable": self.retryable,
        }

        if self.original_exception:
            result["original_error"] = str(self.original_exception)
            result["original_error_type"] = self.original_exception.__class__.__name__

        return result


@dataclass(eq=False)
class FrameDecodeError(StreamException):
    """압축 해제/JSON 파싱 실패 (프레임 단위, 연결 유지)"""

    error_domain: ErrorDomain = ErrorDomain.DESERIALIZATION
    error_code: ErrorCode = ErrorCode.FRAME_DECODE_FAILED


@dataclass(eq=False)
class SubscriptionRejectedError(StreamException):
    """구독 응답 status가 ok가 아님 (자동 재시도 없음)"""

    channel: str | None = None
    status: str | None = None
    error_domain: ErrorDomain = ErrorDomain.PROTOCOL
    error_code: ErrorCode = ErrorCode.SUBSCRIPTION_REJECTED


@dataclass(eq=False)
class ProtocolViolationError(StreamException):
    """어떤 분류에도 해당하지 않는 메시지 (연결 단위 치명적 오류)"""

    payload: Any = None
    error_domain: ErrorDomain = ErrorDomain.PROTOCOL
    error_code: ErrorCode = ErrorCode.UNKNOWN_MESSAGE


@dataclass(eq=False)
class BootstrapError(StreamException):
    """심볼별 과거 캔들 조회 실패"""

    symbol: str | None = None
    error_domain: ErrorDomain = ErrorDomain.BOOTSTRAP
    error_code: ErrorCode = ErrorCode.BOOTSTRAP_FAILED
    retryable: bool = True
