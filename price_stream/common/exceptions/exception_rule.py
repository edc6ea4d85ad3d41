from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import StrEnum
from typing import TypeAlias

import aiohttp
import orjson
from pydantic import ValidationError
from websockets.exceptions import ConnectionClosed, InvalidStatus, WebSocketException

from price_stream.common.exceptions.base import (
    BootstrapError,
    FrameDecodeError,
    ProtocolViolationError,
    SubscriptionRejectedError,
)
from price_stream.core.dto.internal.common import RuleDomain
from price_stream.core.types import ErrorCategory, ErrorCode, ErrorDomain

# Type/역직렬화 및 기타 공통 규칙 (모든 경계 공통)
DESERIALIZATION_ERRORS = (
    orjson.JSONDecodeError,
    ValueError,
    TypeError,
    KeyError,
    AttributeError,
    ValidationError,
)

# 소켓/웹소켓 등 (재접속 대상)
SOCKET_EXCEPTIONS = (
    asyncio.TimeoutError,
    InvalidStatus,
    WebSocketException,
    ConnectionClosed,
    OSError,
)

# HTTP 요청 (부트스트랩)
HTTP_EXCEPTIONS = (
    aiohttp.ClientError,
    asyncio.TimeoutError,
)


class ErrorSeverity(StrEnum):
    """에러 심각도"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(slots=True, frozen=True)
class ErrorStrategy:
    """에러 코드별 처리 전략"""

    severity: ErrorSeverity
    log_level: str
    alert: bool = False


# 0) 어댑터 자체 예외 (가장 구체적이므로 최우선)
RULES_STREAM: list[RuleDomain] = [
    RuleDomain(
        kinds=("frame", "ws"),
        exc=FrameDecodeError,
        result=(ErrorDomain.DESERIALIZATION, ErrorCode.FRAME_DECODE_FAILED, False),
    ),
    RuleDomain(
        kinds=("protocol", "ws"),
        exc=SubscriptionRejectedError,
        result=(ErrorDomain.PROTOCOL, ErrorCode.SUBSCRIPTION_REJECTED, False),
    ),
    RuleDomain(
        kinds=("protocol", "ws"),
        exc=ProtocolViolationError,
        result=(ErrorDomain.PROTOCOL, ErrorCode.UNKNOWN_MESSAGE, True),
    ),
    RuleDomain(
        kinds=("bootstrap",),
        exc=BootstrapError,
        result=(ErrorDomain.BOOTSTRAP, ErrorCode.BOOTSTRAP_FAILED, True),
    ),
]

# 1) asyncio 규칙
RULES_ASYNCIO: list[RuleDomain] = [
    RuleDomain(
        kinds=("ws", "bootstrap", "fx", "orchestrator"),
        exc=asyncio.CancelledError,
        result=(ErrorDomain.ORCHESTRATOR, ErrorCode.ORCHESTRATOR_ERROR, False),
    ),
    RuleDomain(
        kinds=("ws", "bootstrap", "fx"),
        exc=asyncio.TimeoutError,
        result=(ErrorDomain.CONNECTION, ErrorCode.CONNECT_FAILED, True),
    ),
]

# 2) HTTP 규칙
RULES_HTTP: list[RuleDomain] = [
    RuleDomain(
        kinds=("bootstrap", "fx"),
        exc=HTTP_EXCEPTIONS,
        result=(ErrorDomain.CONNECTION, ErrorCode.CONNECT_FAILED, True),
    ),
]

# 3) Type/역직렬화 규칙
RULES_TYPE: list[RuleDomain] = [
    RuleDomain(
        kinds=("frame", "protocol", "bootstrap", "fx", "ws"),
        exc=DESERIALIZATION_ERRORS,
        result=(ErrorDomain.DESERIALIZATION, ErrorCode.INVALID_SCHEMA, False),
    ),
]

# 4) 소켓/웹소켓 규칙
RULES_SOCKET: list[RuleDomain] = [
    RuleDomain(
        kinds=("ws", "orchestrator"),
        exc=SOCKET_EXCEPTIONS,
        result=(ErrorDomain.CONNECTION, ErrorCode.CONNECT_FAILED, True),
    ),
]

# 5) 전체 규칙 (구체 -> 포괄 순서를 유지하며 결합)
# 주의: 매칭 우선순위를 보장하기 위해 선언 순서를 유지합니다.
RULES_ALL: list[RuleDomain] = [
    *RULES_STREAM,
    *RULES_ASYNCIO,
    *RULES_HTTP,
    *RULES_TYPE,
    *RULES_SOCKET,
]

RuleDict: TypeAlias = dict[str, list[RuleDomain]]
RULES_BY_KIND: RuleDict = {
    kind: [rule for rule in RULES_ALL if kind in rule.kinds]
    for kind in ("ws", "frame", "protocol", "bootstrap", "fx", "orchestrator")
}

ERROR_STRATEGIES: dict[ErrorCode, ErrorStrategy] = {
    ErrorCode.FRAME_DECODE_FAILED: ErrorStrategy(ErrorSeverity.LOW, "warning"),
    ErrorCode.INVALID_SCHEMA: ErrorStrategy(ErrorSeverity.MEDIUM, "warning"),
    ErrorCode.CONNECT_FAILED: ErrorStrategy(ErrorSeverity.MEDIUM, "warning"),
    ErrorCode.BOOTSTRAP_FAILED: ErrorStrategy(ErrorSeverity.MEDIUM, "error"),
    ErrorCode.SUBSCRIPTION_REJECTED: ErrorStrategy(ErrorSeverity.HIGH, "error", alert=True),
    ErrorCode.UNKNOWN_MESSAGE: ErrorStrategy(ErrorSeverity.CRITICAL, "critical", alert=True),
    ErrorCode.ORCHESTRATOR_ERROR: ErrorStrategy(ErrorSeverity.HIGH, "error"),
}
DEFAULT_STRATEGY = ErrorStrategy(ErrorSeverity.HIGH, "error")


def classify_exception(err: BaseException, kind: str) -> ErrorCategory:
    """예외 → (ErrorDomain, ErrorCode, retryable) 분류기 (규칙 테이블 기반)

    - 규칙은 "구체 → 포괄" 순서로 선언되어 가장 특수한 규칙이 먼저 매칭됩니다.
    - 알 수 없는 kind는 빈 규칙으로 취급합니다.
    """
    for rule in RULES_BY_KIND.get(kind, []):
        if isinstance(err, rule.exc):
            return rule.result

    return (ErrorDomain.UNKNOWN, ErrorCode.UNKNOWN_ERROR, False)


def get_error_strategy(code: ErrorCode) -> ErrorStrategy:
    return ERROR_STRATEGIES.get(code, DEFAULT_STRATEGY)
