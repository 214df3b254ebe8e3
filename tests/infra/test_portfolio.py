"""Tests for positions and trade records"""

import pytest

from lob_alpha.infra.portfolio import Position, Side, Trade


class TestPositionFIFO:
    """Test FIFO realized PnL"""

    def test_open_and_add(self):
        position = Position(symbol="TEST")
        assert position.apply_fill(10, 100.0) == 0.0
        assert position.apply_fill(10, 110.0) == 0.0
        assert position.quantity == 20
        assert position.average_price == pytest.approx(105.0)

    def test_partial_close_matches_oldest_lot(self):
        position = Position(symbol="TEST")
        position.apply_fill(10, 100.0)
        position.apply_fill(10, 110.0)

        realized = position.apply_fill(-15, 120.0)
        # 10 @ 100 and 5 @ 110 closed at 120
        assert realized == pytest.approx(10 * 20 + 5 * 10)
        assert position.quantity == 5
        assert list(position.lots) == [(5, 110.0)]

    def test_short_round_trip(self):
        position = Position(symbol="TEST")
        position.apply_fill(-10, 100.0)
        assert position.apply_fill(10, 90.0) == pytest.approx(100.0)
        assert position.is_flat
        assert not position.lots

    def test_flip_through_zero(self):
        position = Position(symbol="TEST")
        position.apply_fill(10, 100.0)

        realized = position.apply_fill(-15, 90.0)
        assert realized == pytest.approx(-100.0)
        assert position.quantity == -5
        assert list(position.lots) == [(5, 90.0)]
        assert position.realized_pnl == pytest.approx(-100.0)

    def test_unrealized_pnl(self):
        position = Position(symbol="TEST")
        position.apply_fill(-10, 100.0)
        assert position.unrealized_pnl(95.0) == pytest.approx(50.0)
        assert Position(symbol="TEST").unrealized_pnl(95.0) == 0.0

    def test_snap_to_target(self):
        position = Position(symbol="TEST")
        position.apply_fill(437.1234567, 100.0)
        position.apply_fill(-650.1111067, 100.0)
        position.snap_to(-212.98765)
        assert position.quantity == -212.98765

        position.apply_fill(212.98765, 100.0)
        position.snap_to(0.0)
        assert position.is_flat
        assert not position.lots


class TestTrade:
    """Test trade records"""

    def test_signed_quantity_and_costs(self):
        sell = Trade(
            timestamp=0.0,
            symbol="TEST",
            side=Side.SELL,
            quantity=5.0,
            price=100.0,
            pnl=0.0,
            transaction_cost=1.0,
            slippage=0.5,
        )
        assert sell.signed_quantity == -5.0
        assert sell.notional == 500.0
        assert sell.total_cost == 1.5
        assert sell.to_dict()["side"] == "sell"

    def test_side_helpers(self):
        assert Side.BUY.sign == 1
        assert Side.SELL.opposite is Side.BUY
