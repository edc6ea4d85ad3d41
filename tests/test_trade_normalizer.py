from __future__ import annotations

from decimal import Decimal

from price_stream.core.connection.services.currency_synthesis import CurrencySynthesizer
from price_stream.core.connection.services.liveness import LivenessMonitor
from price_stream.core.connection.services.trade_normalizer import (
    TradeNormalizer,
    bucket_to_ms,
    merge_trade,
)
from price_stream.core.dto.internal.market import Trade
from price_stream.infra.cache.price_store import InMemoryPriceStore
from tests.factory_builders import BTC_USDT, StubRateProvider


def _build(window_size: int | None = 10) -> tuple[TradeNormalizer, InMemoryPriceStore, LivenessMonitor]:
    store = InMemoryPriceStore()
    liveness = LivenessMonitor()
    synthesizer = CurrencySynthesizer(store, StubRateProvider())
    return TradeNormalizer(store, synthesizer, liveness, window_size=window_size), store, liveness


def test_bucket_id_is_converted_to_milliseconds() -> None:
    assert bucket_to_ms(1700000040) == 1700000040000


def test_same_bucket_tick_replaces_in_place() -> None:
    normalizer, store, _ = _build()

    normalizer.apply_tick(BTC_USDT, 100, Decimal("10"), Decimal("1"))
    normalizer.apply_tick(BTC_USDT, 100, Decimal("11"), Decimal("2"))

    assert store.get_trades(BTC_USDT) == [
        Trade(timestamp=100000, price=Decimal("11"), volume=Decimal("2"))
    ]
    assert store.get_price(BTC_USDT) == Decimal("11")


def test_applying_the_same_tick_twice_is_idempotent() -> None:
    normalizer, store, _ = _build()

    normalizer.apply_tick(BTC_USDT, 100, Decimal("10"), Decimal("1"))
    first = store.get_trades(BTC_USDT)
    normalizer.apply_tick(BTC_USDT, 100, Decimal("10"), Decimal("1"))

    assert store.get_trades(BTC_USDT) == first


def test_new_bucket_is_appended_and_window_is_bounded() -> None:
    normalizer, store, _ = _build(window_size=3)

    for bucket in (60, 120, 180, 240):
        normalizer.apply_tick(BTC_USDT, bucket, Decimal(bucket), Decimal("1"))

    assert [trade.timestamp for trade in store.get_trades(BTC_USDT)] == [
        120000,
        180000,
        240000,
    ]
    assert store.get_price(BTC_USDT) == Decimal("240")


def test_late_bucket_is_inserted_in_order_without_moving_latest_price() -> None:
    normalizer, store, _ = _build(window_size=3)

    for bucket in (100, 160, 220):
        normalizer.apply_tick(BTC_USDT, bucket, Decimal(bucket), Decimal("1"))
    normalizer.apply_tick(BTC_USDT, 130, Decimal("1"), Decimal("1"))

    assert [trade.timestamp for trade in store.get_trades(BTC_USDT)] == [
        130000,
        160000,
        220000,
    ]
    assert store.get_price(BTC_USDT) == Decimal("220")


def test_bucket_older_than_full_window_is_dropped() -> None:
    normalizer, store, _ = _build(window_size=2)

    for bucket in (100, 160):
        normalizer.apply_tick(BTC_USDT, bucket, Decimal(bucket), Decimal("1"))
    normalizer.apply_tick(BTC_USDT, 40, Decimal("1"), Decimal("1"))

    assert [trade.timestamp for trade in store.get_trades(BTC_USDT)] == [100000, 160000]
    assert store.get_price(BTC_USDT) == Decimal("160")


def test_tick_sets_liveness_flag() -> None:
    normalizer, _, liveness = _build()

    normalizer.apply_tick(BTC_USDT, 60, Decimal("1"), Decimal("1"))

    assert liveness.check() is True
    assert liveness.check() is False
    assert liveness.update_count == 1


def test_merge_trade_does_not_mutate_input() -> None:
    original = [Trade(timestamp=1, price=Decimal("1"), volume=Decimal("1"))]

    merged = merge_trade(original, Trade(timestamp=2, price=Decimal("2"), volume=Decimal("1")))

    assert len(original) == 1
    assert len(merged) == 2


def test_store_returns_copies() -> None:
    store = InMemoryPriceStore()
    store.set_trades(BTC_USDT, [])

    store.get_trades(BTC_USDT).append(Trade(timestamp=1, price=Decimal("1"), volume=Decimal("1")))

    assert store.get_trades(BTC_USDT) == []
    assert store.get_trades(BTC_USDT.with_quote("KRW")) is None
