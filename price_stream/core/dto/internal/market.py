"""시세 내부 도메인 모델.

내부 처리용 불변 도메인 객체 (dataclass 기반).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(slots=True, frozen=True, eq=True, order=True, kw_only=True)
class Symbol:
    """거래 심볼 (base/quote).

    - 불변 값 객체: 스토어/윈도우의 키로 사용
    - 문자열 표현은 "BTC/USDT"
    """

    base: str
    quote: str

    @classmethod
    def parse(cls, value: str) -> Symbol:
        """ "BTC/USDT" 형식 문자열을 Symbol로 변환.

        Raises:
            ValueError: 슬래시로 구분된 두 통화가 아닌 경우
        """
        base, sep, quote = value.strip().upper().partition("/")
        if not sep or not base or not quote or "/" in quote:
            raise ValueError(f"invalid symbol: {value!r}")
        return cls(base=base, quote=quote)

    def compact(self) -> str:
        """슬래시 제거 형식 ("BTCUSDT")"""
        return f"{self.base}{self.quote}"

    def with_quote(self, quote: str) -> Symbol:
        return Symbol(base=self.base, quote=quote.upper())

    def __str__(self) -> str:
        return f"{self.base}/{self.quote}"


@dataclass(slots=True, frozen=True, eq=True, kw_only=True)
class Trade:
    """집계 버킷(1분 캔들 등) 하나를 표현하는 체결 레코드.

    timestamp: 버킷 시작 시각 (epoch ms)
    price: 버킷 종가
    volume: 버킷 누적 거래량 (base 통화)
    """

    timestamp: int
    price: Decimal
    volume: Decimal
