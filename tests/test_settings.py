import importlib
import os
from types import ModuleType

import pytest


def _reload_settings_with_env(
    monkeypatch: pytest.MonkeyPatch, env: dict[str, str | None]
) -> ModuleType:
    # Clear related envs first to avoid leakage across tests
    prefixes = ("HUOBI_", "FX_", "WS_", "APP_")
    for key in list(os.environ.keys()):
        if key.startswith(prefixes):
            monkeypatch.delenv(key, raising=False)

    for k, v in env.items():
        if v is None:
            monkeypatch.delenv(k, raising=False)
        else:
            monkeypatch.setenv(k, str(v))

    import price_stream.config.settings as settings

    settings = importlib.reload(settings)
    return settings


def test_huobi_settings_defaults(monkeypatch: pytest.MonkeyPatch):
    settings = _reload_settings_with_env(monkeypatch, {})

    assert settings.huobi_settings.ws_url == "wss://api.huobi.pro/ws"
    assert settings.huobi_settings.kline_period == "1min"
    assert settings.huobi_settings.bootstrap_size == 10
    assert settings.huobi_settings.symbols == ["BTC/USDT", "ETH/USDT"]


def test_huobi_settings_env_override(monkeypatch: pytest.MonkeyPatch):
    settings = _reload_settings_with_env(
        monkeypatch,
        {
            "HUOBI_SYMBOLS": '["BTC/USDT", "ETH/BTC"]',
            "HUOBI_BOOTSTRAP_SIZE": "20",
        },
    )

    assert settings.huobi_settings.symbols == ["BTC/USDT", "ETH/BTC"]
    assert settings.huobi_settings.bootstrap_size == 20


def test_fx_and_websocket_settings_env_override(monkeypatch: pytest.MonkeyPatch):
    settings = _reload_settings_with_env(
        monkeypatch,
        {
            "FX_TARGET_QUOTE": "JPY",
            "FX_RATE_SYMBOL": "JPY/USD",
            "WS_LIVENESS_MAX_IDLE_POLLS": "5",
            "WS_RECONNECT_MAX_ATTEMPTS": "7",
        },
    )

    assert settings.fx_settings.target_quote == "JPY"
    assert settings.fx_settings.rate_symbol == "JPY/USD"
    assert settings.websocket_settings.liveness_max_idle_polls == 5
    assert settings.websocket_settings.reconnect_max_attempts == 7


def test_invalid_log_level_is_rejected(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("LOG_LEVEL", "LOUD")
    import price_stream.config.settings as settings

    with pytest.raises(ValueError):
        settings.LoggingSettings()
