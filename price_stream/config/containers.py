"""
Dependency Injection Containers

아키텍처:
- InfrastructureContainer: 저장소, 환율 서비스, 캔들 REST 클라이언트 + Settings 주입
- HandlerContainer: 거래소 어댑터 팩토리 (FactoryAggregate)
- ApplicationContainer: 최상위 컨테이너 (Orchestrator, Supervisor)

주요 패턴:
- Resource Provider: async init/shutdown 자동 관리 (aiohttp 세션)
- Object Provider: settings.py 싱글톤 주입
- FactoryAggregate: 거래소 이름으로 어댑터 선택

Usage:
    container = ApplicationContainer()
    await container.init_resources()
    orchestrator = container.orchestrator()
"""

from dependency_injector import containers, providers

from price_stream.application.orchestrator import StreamOrchestrator
from price_stream.application.supervisor import LivenessSupervisor
from price_stream.config.init_infra import init_candle_client
from price_stream.config.settings import (
    FxSettings,
    HuobiSettings,
    WebsocketSettings,
    fx_settings,
    huobi_settings,
    websocket_settings,
)
from price_stream.core.connection.services.currency_synthesis import CurrencySynthesizer
from price_stream.core.dto.internal.common import ConnectionPolicyDomain
from price_stream.core.dto.internal.market import Symbol
from price_stream.exchange.asia import HuobiQuoteAdapter
from price_stream.infra.cache.price_store import InMemoryPriceStore
from price_stream.infra.fx.fx_rate_service import FxRateService


def parse_symbols(values: list[str]) -> list[Symbol]:
    return [Symbol.parse(value) for value in values]


def build_policy(settings: WebsocketSettings) -> ConnectionPolicyDomain:
    return ConnectionPolicyDomain(
        initial_backoff=settings.initial_backoff,
        max_backoff=settings.max_backoff,
        backoff_multiplier=settings.backoff_multiplier,
        jitter=settings.jitter,
        reconnect_max_attempts=settings.reconnect_max_attempts,
        receive_timeout=settings.receive_timeout,
    )


def stream_urls(huobi: HuobiSettings) -> dict[str, str]:
    """거래소 이름 → 스트림 주소"""
    return {"huobi": huobi.ws_url}


def rate_symbols(fx: FxSettings) -> list[Symbol]:
    return [Symbol.parse(fx.rate_symbol)]


# ========================================
# 1. Infrastructure Container (인프라 레이어)
# ========================================
class InfrastructureContainer(containers.DeclarativeContainer):
    """인프라 컨테이너

    - 저장소/환율 서비스는 프로세스 전역 싱글톤
    - 캔들 클라이언트는 Resource (세션 수명 관리)
    """

    # ===== Settings 주입 (DI) =====
    websocket_config = providers.Object(websocket_settings)
    huobi_config = providers.Object(huobi_settings)
    fx_config = providers.Object(fx_settings)

    price_store = providers.Singleton(InMemoryPriceStore)

    fx_service = providers.Singleton(
        FxRateService,
        symbols=providers.Callable(rate_symbols, fx_config),
        enabled=fx_config.provided.enabled,
        max_age_sec=fx_config.provided.max_age_sec,
        timeout_sec=fx_config.provided.timeout_sec,
    )

    candle_client = providers.Resource(
        init_candle_client,
        base_url=huobi_config.provided.rest_url,
        timeout=huobi_config.provided.request_timeout,
    )

    synthesizer = providers.Singleton(
        CurrencySynthesizer,
        store=price_store,
        rate_provider=fx_service,
        source_quote=fx_config.provided.source_quote,
        target_quote=fx_config.provided.target_quote,
        rate_symbol=providers.Callable(Symbol.parse, fx_config.provided.rate_symbol),
        enabled=fx_config.provided.enabled,
    )


# ========================================
# 2. Handler Container (거래소 어댑터)
# ========================================
class HandlerContainer(containers.DeclarativeContainer):
    """거래소 어댑터 컨테이너

    Usage:
        adapter = container.handlers.adapter_factory("huobi")
    """

    infra = providers.DependenciesContainer()

    huobi = providers.Factory(
        HuobiQuoteAdapter,
        symbols=providers.Callable(parse_symbols, infra.huobi_config.provided.symbols),
        store=infra.price_store,
        synthesizer=infra.synthesizer,
        candle_source=infra.candle_client,
        period=infra.huobi_config.provided.kline_period,
        bootstrap_size=infra.huobi_config.provided.bootstrap_size,
    )

    adapter_factory = providers.FactoryAggregate(huobi=huobi)


# ========================================
# 3. Application Container (최상위)
# ========================================
class ApplicationContainer(containers.DeclarativeContainer):
    """애플리케이션 최상위 컨테이너"""

    infra = providers.Container(InfrastructureContainer)
    handlers = providers.Container(HandlerContainer, infra=infra)

    supervisor = providers.Singleton(
        LivenessSupervisor,
        poll_interval=infra.websocket_config.provided.liveness_poll_interval,
        max_idle_polls=infra.websocket_config.provided.liveness_max_idle_polls,
    )

    orchestrator = providers.Singleton(
        StreamOrchestrator,
        adapter_factory=handlers.adapter_factory,
        stream_urls=providers.Callable(stream_urls, infra.huobi_config),
        policy=providers.Callable(build_policy, infra.websocket_config),
        supervisor=supervisor,
        fx_service=infra.fx_service,
        fx_refresh_interval=infra.fx_config.provided.refresh_interval_sec,
    )
