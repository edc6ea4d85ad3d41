"""에러 분류에 사용할 타입 정의 모듈.

광범위한 Exception 사용을 지양하고, 의도한 예외만 명시적으로 처리하기 위해 사용합니다.
"""

from enum import StrEnum
from typing import TypeAlias


class ErrorDomain(StrEnum):
    """에러 도메인 분류"""

    CONNECTION = "connection"
    PROTOCOL = "protocol"
    PAYLOAD = "payload"
    DESERIALIZATION = "deserialization"
    BOOTSTRAP = "bootstrap"
    ORCHESTRATOR = "orchestrator"
    UNKNOWN = "unknown"


class ErrorCode(StrEnum):
    """에러 코드 분류"""

    CONNECT_FAILED = "connect_failed"
    FRAME_DECODE_FAILED = "frame_decode_failed"
    SUBSCRIPTION_REJECTED = "subscription_rejected"
    UNKNOWN_MESSAGE = "unknown_message"
    INVALID_SCHEMA = "invalid_schema"
    BOOTSTRAP_FAILED = "bootstrap_failed"
    ORCHESTRATOR_ERROR = "orchestrator_error"
    UNKNOWN_ERROR = "unknown_error"


ErrorCategory: TypeAlias = tuple[ErrorDomain, ErrorCode, bool]
ExceptionGroup: TypeAlias = type[BaseException] | tuple[type[BaseException], ...]
RuleKind: TypeAlias = tuple[str, ...]
