from __future__ import annotations

from dependency_injector import providers

from price_stream.config.containers import ApplicationContainer, build_policy, parse_symbols
from price_stream.config.settings import WebsocketSettings
from price_stream.exchange.asia import HuobiQuoteAdapter
from tests.factory_builders import BTC_USDT, ETH_USDT, FakeCandleSource


def test_parse_symbols() -> None:
    assert parse_symbols(["BTC/USDT", "eth/usdt"]) == [BTC_USDT, ETH_USDT]


def test_build_policy_copies_websocket_settings() -> None:
    policy = build_policy(WebsocketSettings(reconnect_max_attempts=7, receive_timeout=5))

    assert policy.reconnect_max_attempts == 7
    assert policy.receive_timeout == 5


def test_adapter_factory_builds_huobi_adapter_with_shared_store() -> None:
    container = ApplicationContainer()
    container.infra.candle_client.override(providers.Object(FakeCandleSource()))

    first = container.handlers.adapter_factory("huobi")
    second = container.handlers.adapter_factory("huobi")

    assert isinstance(first, HuobiQuoteAdapter)
    assert first is not second
    assert first._store is second._store
    assert first._store is container.infra.price_store()
    assert BTC_USDT in first.symbols

    container.infra.candle_client.reset_override()
