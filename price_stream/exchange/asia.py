from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError

from price_stream.common.exceptions.base import (
    FrameDecodeError,
    ProtocolViolationError,
    SubscriptionRejectedError,
)
from price_stream.common.exceptions.error_dispatcher import dispatch_error
from price_stream.common.logger import PipelineLogger
from price_stream.core.connection.contracts import FrameSender, PriceStore
from price_stream.core.connection.services.bootstrap import BootstrapLoader, CandleSource
from price_stream.core.connection.services.currency_synthesis import CurrencySynthesizer
from price_stream.core.connection.services.liveness import LivenessMonitor
from price_stream.core.connection.services.trade_normalizer import TradeNormalizer
from price_stream.core.connection.utils.frame_decoder import decode_frame
from price_stream.core.connection.utils.logging.log_phases import (
    PHASE_BOOTSTRAP,
    PHASE_CLOSE,
    PHASE_CONNECT,
    PHASE_DECODE,
    PHASE_MARKET_DATA,
    PHASE_PING,
    PHASE_PROTOCOL_VIOLATION,
    PHASE_SUBSCRIBE,
    PHASE_SUBSCRIPTION_ACK,
)
from price_stream.core.connection.utils.logging.logging_mixin import (
    ScopedConnectionLoggingMixin,
)
from price_stream.core.connection.utils.market_data.huobi import (
    classify_message,
    pong_message,
    resolve_symbol,
    subscribe_message,
    subscription_channel,
)
from price_stream.core.connection.utils.subscriptions.subscription_ack import (
    decide_huobi_subscription_ack,
)
from price_stream.core.dto.internal.common import ConnectionScopeDomain
from price_stream.core.dto.internal.market import Symbol
from price_stream.core.dto.io.commands import ConnectionTargetDTO
from price_stream.core.dto.io.huobi import HuobiKlineMessageDTO
from price_stream.core.types import ConnectionState, JsonPayload, MessageKind

logger = PipelineLogger.get_logger("huobi_adapter", "exchange")


class HuobiQuoteAdapter(ScopedConnectionLoggingMixin):
    """후오비(HTX) 1분 캔들 스트림 어댑터

    상태: DISCONNECTED → CONNECTING → SUBSCRIBING → STREAMING (끊기면 DISCONNECTED)

    - 연결 직후 심볼별 구독 요청 전송 (ack를 기다리지 않음)
    - ping → 같은 값으로 pong 즉시 응답
    - 구독 거절 → 에러 채널 보고 (재시도 없음, 연결 유지)
    - 캔들 틱 → TradeNormalizer (알 수 없는 채널은 무시)
    - 그 외 메시지 → ProtocolViolationError (보고 후 전송 계층으로 전파되어 재접속)

    재접속 타이밍은 WebsocketTransport 책임입니다.
    """

    exchange_name = "huobi"

    def __init__(
        self,
        symbols: Sequence[Symbol],
        store: PriceStore,
        synthesizer: CurrencySynthesizer,
        candle_source: CandleSource,
        period: str = "1min",
        bootstrap_size: int = 10,
    ) -> None:
        self.scope = ConnectionScopeDomain(region="asia", exchange="huobi")
        self._logger = logger
        self._symbols: tuple[Symbol, ...] = tuple(dict.fromkeys(symbols))
        self._store = store
        self._synthesizer = synthesizer
        self._period = period

        self._state = ConnectionState.DISCONNECTED
        self._sender: FrameSender | None = None

        self.liveness = LivenessMonitor()
        self._normalizer = TradeNormalizer(
            store, synthesizer, self.liveness, window_size=bootstrap_size
        )
        self._bootstrap = BootstrapLoader(
            source=candle_source,
            store=store,
            synthesizer=synthesizer,
            liveness=self.liveness,
            scope=self.scope,
            period=period,
            size=bootstrap_size,
        )

    # ------------------------------------------------------------------
    # 심볼
    # ------------------------------------------------------------------
    @property
    def symbols(self) -> tuple[Symbol, ...]:
        """직접 구독하는 심볼"""
        return self._symbols

    @property
    def state(self) -> ConnectionState:
        return self._state

    def synthetic_symbols(self) -> list[Symbol]:
        """환율 합성으로 만들어지는 심볼 (예: BTC/USDT → BTC/KRW)"""
        derived = (self._synthesizer.derived_symbol(symbol) for symbol in self._symbols)
        return [symbol for symbol in derived if symbol is not None]

    def all_symbols(self) -> list[Symbol]:
        return [*self._symbols, *self.synthetic_symbols()]

    # ------------------------------------------------------------------
    # 수명 주기
    # ------------------------------------------------------------------
    async def start(self) -> None:
        """빈 윈도우 초기화 후 과거 캔들 부트스트랩 (실패해도 스트림 시작은 막지 않음)"""
        for symbol in self._symbols:
            if self._store.get_trades(symbol) is None:
                self._store.set_trades(symbol, [])

        self._log_info(
            f"{self.exchange_name}: bootstrap {len(self._symbols)} symbols",
            PHASE_BOOTSTRAP,
        )
        await self._bootstrap.load(self._symbols)

    async def on_connect(self, sender: FrameSender) -> None:
        self._state = ConnectionState.CONNECTING
        self._sender = sender
        self._log_info(f"{self.exchange_name}: connected", PHASE_CONNECT)

        self._state = ConnectionState.SUBSCRIBING
        for symbol in self._symbols:
            await sender.send(subscribe_message(symbol, self._period))
            self._log_debug(
                f"{self.exchange_name}: subscribe sent",
                PHASE_SUBSCRIBE,
                channel=subscription_channel(symbol, self._period),
            )

        self._state = ConnectionState.STREAMING

    async def on_close(self, reason: str | None = None) -> None:
        self._state = ConnectionState.DISCONNECTED
        self._sender = None
        self._log_info(
            f"{self.exchange_name}: disconnected", PHASE_CLOSE, reason=reason
        )

    def check_alive(self) -> bool:
        return self.liveness.check()

    def idle_seconds(self) -> float | None:
        return self.liveness.idle_seconds()

    # ------------------------------------------------------------------
    # 메시지 처리
    # ------------------------------------------------------------------
    async def on_raw_frame(self, frame: str | bytes) -> None:
        """원본 프레임 1개 처리

        Raises:
            ProtocolViolationError: 알 수 없는 형태의 메시지 (보고 후 전파)
        """
        try:
            payload = decode_frame(frame, self.exchange_name)
        except FrameDecodeError as e:
            await self._report(e, "frame", phase=PHASE_DECODE)
            return

        try:
            await self.handle_message(payload)
        except SubscriptionRejectedError as e:
            await self._report(e, "protocol", phase=PHASE_SUBSCRIPTION_ACK, channel=e.channel)
        except ValidationError as e:
            await self._report(e, "frame", phase=PHASE_MARKET_DATA, ch=payload.get("ch"))
        except ProtocolViolationError as e:
            await self._report(e, "protocol", phase=PHASE_PROTOCOL_VIOLATION)
            raise

    async def handle_message(self, payload: JsonPayload) -> None:
        match classify_message(payload):
            case MessageKind.PING:
                await self._reply_pong(payload["ping"])
            case MessageKind.SUBSCRIPTION_ACK:
                self._handle_subscription_ack(payload)
            case MessageKind.MARKET_DATA:
                self._handle_market_data(payload)
            case _:
                raise ProtocolViolationError(
                    exchange_name=self.exchange_name,
                    message=f"unrecognized message: {sorted(payload)[:10]}",
                    payload=payload,
                )

    async def _reply_pong(self, ping_value: Any) -> None:
        if self._sender is None:
            raise ConnectionError(f"{self.exchange_name}: ping received while not connected")
        await self._sender.send(pong_message(ping_value))
        self._log_debug(f"{self.exchange_name}: pong", PHASE_PING, ping=ping_value)

    def _handle_subscription_ack(self, payload: JsonPayload) -> None:
        decision = decide_huobi_subscription_ack(payload)
        if decision.is_rejected:
            raise SubscriptionRejectedError(
                exchange_name=self.exchange_name,
                message=f"subscription rejected ({decision.reason})",
                channel=decision.channel,
                status=payload.get("status"),
            )
        self._log_info(
            f"{self.exchange_name}: subscribed",
            PHASE_SUBSCRIPTION_ACK,
            channel=decision.channel,
        )

    def _handle_market_data(self, payload: JsonPayload) -> None:
        symbol = resolve_symbol(payload["ch"], self._symbols, self._period)
        if symbol is None:
            self._log_debug(
                f"{self.exchange_name}: unmapped channel ignored",
                PHASE_MARKET_DATA,
                ch=payload["ch"],
            )
            return

        message = HuobiKlineMessageDTO.model_validate(payload)

        self._normalizer.apply_tick(
            symbol,
            bucket_id=message.tick.id,
            price=message.tick.close,
            volume=message.tick.amount,
        )

    async def _report(self, exc: Exception, kind: str, **context: Any) -> None:
        await dispatch_error(
            exc=exc,
            kind=kind,
            target=ConnectionTargetDTO(
                exchange=self.scope.exchange, region=self.scope.region
            ),
            context={k: v for k, v in context.items() if v is not None},
        )
