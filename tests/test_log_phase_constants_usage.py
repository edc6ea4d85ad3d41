from __future__ import annotations

from pathlib import Path


def test_connection_modules_do_not_use_inline_phase_literals() -> None:
    root = Path(__file__).resolve().parents[1] / "price_stream"
    targets = [
        root / "core" / "connection" / "transport.py",
        root / "core" / "connection" / "services" / "bootstrap.py",
        root / "exchange" / "asia.py",
        root / "application" / "supervisor.py",
    ]

    violations: list[str] = []
    for path in targets:
        content = path.read_text(encoding="utf-8")
        if 'phase="' in content or "phase='" in content or '"phase": "' in content:
            violations.append(str(path))

    assert not violations, f"Inline phase literals found in: {violations}"


def test_log_phase_constants_are_unique() -> None:
    import price_stream.core.connection.utils.logging.log_phases as log_phases

    phase_values = [
        value
        for name, value in vars(log_phases).items()
        if name.startswith("PHASE_") and isinstance(value, str)
    ]
    assert len(phase_values) == len(set(phase_values))


def test_scope_log_extra_has_standard_keys() -> None:
    from price_stream.core.connection.transport import WebsocketTransport
    from tests.factory_builders import build_connection_policy_domain, build_scope_domain

    transport = WebsocketTransport(
        adapter=None,  # type: ignore[arg-type]
        url="wss://example.invalid/ws",
        scope=build_scope_domain(),
        policy=build_connection_policy_domain(),
    )

    payload = transport._scope_log_extra("reconnect", error="timeout", attempt=None)

    assert payload == {
        "exchange": "huobi",
        "region": "asia",
        "phase": "reconnect",
        "error": "timeout",
    }
