from __future__ import annotations

import pytest

from mcp_servers.value_bridge.tools.base import ValidationError
from mcp_servers.value_bridge.tools.set_value.timeouts import (
    estimate_timeout,
    progressive_bonus,
    protocol_buffer,
    resolve_timeout,
)


def test_short_payloads_use_base_timeout() -> None:
    for length in (0, 1, 42, 100):
        assert estimate_timeout(length) == 15000


def test_estimate_is_monotonic_and_bounded() -> None:
    prev = 0
    for length in range(0, 25000, 7):
        t = estimate_timeout(length)
        assert 15000 <= t <= 600000
        assert t >= prev
        prev = t


def test_progressive_bonus_steps() -> None:
    assert progressive_bonus(500) == 0
    assert progressive_bonus(501) == 10000
    assert progressive_bonus(1000) == 10000
    assert progressive_bonus(1001) == 20000
    assert progressive_bonus(2000) == 20000
    assert progressive_bonus(2001) == 30000


def test_estimate_known_points() -> None:
    # 15000 + floor(400/30)*1000, no progressive bonus yet
    assert estimate_timeout(500) == 28000
    # 15000 + floor(401/30)*1000 + 10000
    assert estimate_timeout(501) == 38000
    assert estimate_timeout(1000) == 55000
    assert estimate_timeout(1001) == 65000
    assert estimate_timeout(2001) == 108000
    assert estimate_timeout(20000) == 600000


def test_protocol_buffer_clamps() -> None:
    assert protocol_buffer(15000) == 15000
    assert protocol_buffer(38000) == 15000
    assert protocol_buffer(100000) == 25000
    assert protocol_buffer(240000) == 60000
    assert protocol_buffer(600000) == 60000


def test_auto_budget_combines_timeout_and_buffer() -> None:
    budget = resolve_timeout("auto", 501)
    assert budget.auto is True
    assert budget.timeout_ms == 38000
    assert budget.buffer_ms == 15000
    assert budget.combined_ms == 53000

    assert resolve_timeout(None, 10).combined_ms == 30000
    assert resolve_timeout("auto", 10**6).combined_ms == 660000


def test_explicit_timeout_skips_estimation() -> None:
    budget = resolve_timeout("30000", 5000)
    assert budget.auto is False
    assert budget.timeout_ms == 30000
    assert budget.buffer_ms == 15000

    assert resolve_timeout("5000", 0).timeout_ms == 5000
    assert resolve_timeout("600000", 0).combined_ms == 660000
    assert resolve_timeout("+20000", 0).timeout_ms == 20000


@pytest.mark.parametrize("raw", ["4999", "600001", "-5000", "0"])
def test_explicit_timeout_out_of_range(raw: str) -> None:
    with pytest.raises(ValidationError) as exc:
        resolve_timeout(raw, 0)
    assert "between 5000 and 600000" in exc.value.reason


@pytest.mark.parametrize("raw", ["abc", "", " 30000", "30000.5", "1e4", "AUTO", "30_000"])
def test_explicit_timeout_must_be_decimal(raw: str) -> None:
    with pytest.raises(ValidationError) as exc:
        resolve_timeout(raw, 0)
    assert "'auto'" in exc.value.reason


def test_non_string_timeout_is_rejected() -> None:
    with pytest.raises(ValidationError):
        resolve_timeout(30000, 0)
