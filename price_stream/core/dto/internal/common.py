from __future__ import annotations

from dataclasses import dataclass

from price_stream.core.types import (
    ErrorCategory,
    ExceptionGroup,
    ExchangeName,
    Region,
    RuleKind,
)


@dataclass(slots=True, frozen=True, eq=True, repr=False, match_args=False, kw_only=True)
class ConnectionScopeDomain:
    """연결 스코프(내부 도메인 값 객체).

    - (exchange, region) 조합을 공통 타입으로 정의
    - 로깅 extra, 에러 이벤트 target 생성 등에서 재사용
    """

    region: Region
    exchange: ExchangeName

    def to_key(self) -> str:
        """스코프를 키 문자열로 변환 (region|exchange 형식)"""
        return f"{self.region}|{self.exchange}"


@dataclass(slots=True, repr=False, eq=False, match_args=False, kw_only=True)
class ConnectionPolicyDomain:
    """웹소켓 연결/백오프/수신 정책(도메인)."""

    # 백오프
    initial_backoff: float = 1.0
    max_backoff: float = 30.0
    backoff_multiplier: float = 2.0
    jitter: float = 0.2  # +/- 20%

    # 재접속/수신
    reconnect_max_attempts: int = 1000
    receive_timeout: float = 60.0


@dataclass(
    slots=True, frozen=True, eq=False, repr=False, match_args=False, kw_only=True
)
class RuleDomain:
    """예외 분류 규칙(도메인)

    kinds: 규칙이 적용될 경계 종류 ("ws", "frame", "protocol", "bootstrap", "fx")
    exc:   매칭할 예외 타입(단일 타입 또는 타입 튜플)
    result: ErrorCategory
    """

    kinds: RuleKind
    exc: ExceptionGroup
    result: ErrorCategory
