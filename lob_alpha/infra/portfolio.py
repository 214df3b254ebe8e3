"""
Portfolio records for the backtester: trades, positions, equity points.

Trades and equity points are append-only log entries (frozen). A Position
is mutable but owned by exactly one backtest run.
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Deque, Dict, Tuple


class Side(Enum):
    """Trade side."""
    BUY = "buy"
    SELL = "sell"

    @property
    def sign(self) -> int:
        return 1 if self is Side.BUY else -1

    @property
    def opposite(self) -> "Side":
        return Side.SELL if self is Side.BUY else Side.BUY


@dataclass(frozen=True)
class Trade:
    """
    A simulated fill.

    pnl is realized PnL net of this trade's costs on trades that reduce a
    position, and 0 on trades that only open or add.
    """
    timestamp: float
    symbol: str
    side: Side
    quantity: float
    price: float
    pnl: float
    transaction_cost: float
    slippage: float

    @property
    def signed_quantity(self) -> float:
        """Positive for buys, negative for sells."""
        return self.side.sign * self.quantity

    @property
    def notional(self) -> float:
        return self.quantity * self.price

    @property
    def total_cost(self) -> float:
        return self.transaction_cost + self.slippage

    def to_dict(self) -> Dict:
        return {
            "timestamp": self.timestamp,
            "symbol": self.symbol,
            "side": self.side.value,
            "quantity": self.quantity,
            "price": self.price,
            "pnl": self.pnl,
            "transaction_cost": self.transaction_cost,
            "slippage": self.slippage,
        }


@dataclass(frozen=True)
class EquityPoint:
    """Equity after a position change, with drawdown from the running peak."""
    timestamp: float
    equity: float
    drawdown: float


@dataclass
class Position:
    """
    Tracks position in a single symbol.

    Uses FIFO lots for realized PnL: closing quantity is matched against the
    oldest open entries first.
    """
    symbol: str
    quantity: float = 0.0
    realized_pnl: float = 0.0

    # (quantity, price) of open lots, oldest first
    lots: Deque[Tuple[float, float]] = field(default_factory=deque)

    @property
    def is_flat(self) -> bool:
        return self.quantity == 0

    @property
    def average_price(self) -> float:
        """Average entry price of open lots."""
        total_qty = sum(qty for qty, _ in self.lots)
        if total_qty == 0:
            return 0.0
        return sum(qty * price for qty, price in self.lots) / total_qty

    def unrealized_pnl(self, current_price: float) -> float:
        if self.quantity == 0:
            return 0.0
        return self.quantity * (current_price - self.average_price)

    def apply_fill(self, signed_qty: float, price: float) -> float:
        """
        Update position with a fill of ``signed_qty`` at ``price``.

        Returns realized (gross) PnL from the closed part of the fill.
        """
        if signed_qty == 0:
            return 0.0

        realized = 0.0
        same_direction = self.quantity == 0 or (self.quantity > 0) == (signed_qty > 0)

        if same_direction:
            # Opening or adding
            self.lots.append((abs(signed_qty), price))
            self.quantity += signed_qty
        else:
            # Reducing or flipping
            close_qty = min(abs(self.quantity), abs(signed_qty))
            direction = 1.0 if self.quantity > 0 else -1.0

            remaining = close_qty
            while remaining > 0 and self.lots:
                entry_qty, entry_price = self.lots[0]
                closed = min(entry_qty, remaining)
                realized += direction * closed * (price - entry_price)
                remaining -= closed

                if closed >= entry_qty:
                    self.lots.popleft()
                else:
                    self.lots[0] = (entry_qty - closed, entry_price)

            new_qty = self.quantity + signed_qty
            flip_qty = abs(signed_qty) - close_qty
            if flip_qty > 0:
                # Flipped through zero: the excess opens a new lot
                self.lots.clear()
                self.lots.append((flip_qty, price))
            elif new_qty == 0:
                self.lots.clear()
            self.quantity = new_qty

        self.realized_pnl += realized
        return realized

    def snap_to(self, quantity: float) -> None:
        """Pin the position to the exact target a fill was sized for."""
        self.quantity = quantity
        if quantity == 0:
            self.lots.clear()
