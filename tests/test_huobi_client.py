from __future__ import annotations

from decimal import Decimal

import pytest

from price_stream.common.exceptions.base import BootstrapError
from price_stream.infra.rest.huobi_client import HuobiCandleClient, parse_kline_response
from tests.factory_builders import BTC_USDT, build_candle_payload, build_kline_response


def test_valid_response_is_parsed_into_candles() -> None:
    candles = parse_kline_response(
        BTC_USDT,
        build_kline_response(
            [build_candle_payload(120, "51000.5"), build_candle_payload(60, "50000")]
        ),
    )

    assert [candle.id for candle in candles] == [120, 60]
    assert candles[0].close == Decimal("51000.5")


@pytest.mark.parametrize(
    "response",
    [
        None,
        build_kline_response([build_candle_payload(60, "1")], status="error"),
        build_kline_response({"id": 60}),
        build_kline_response([]),
    ],
)
def test_invalid_responses_raise_bootstrap_error(response) -> None:
    with pytest.raises(BootstrapError) as exc_info:
        parse_kline_response(BTC_USDT, response)

    assert exc_info.value.symbol == "BTC/USDT"


def test_malformed_candle_raises_bootstrap_error() -> None:
    with pytest.raises(BootstrapError):
        parse_kline_response(BTC_USDT, build_kline_response([{"id": "x"}]))


@pytest.mark.asyncio
async def test_fetch_candles_sends_compact_lowercase_symbol(monkeypatch) -> None:
    client = HuobiCandleClient(base_url="https://example.invalid/market/history/kline")
    captured: dict = {}

    async def _fake_get_json(params):
        captured.update(params)
        return build_kline_response([build_candle_payload(60, "1")])

    monkeypatch.setattr(client, "_get_json", _fake_get_json)

    candles = await client.fetch_candles(BTC_USDT, "1min", 10)

    assert captured == {"symbol": "btcusdt", "period": "1min", "size": 10}
    assert len(candles) == 1
    await client.close()
