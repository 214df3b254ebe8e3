"""
Order Book Snapshots for LOB Alpha Research System
==================================================

A snapshot is the state of the top five price levels on each side of the
book at one instant:

    BIDS (Buy Orders)              ASKS (Sell Orders)
    Price    |  Size               Price    |  Size
    ─────────┼───────              ─────────┼───────
    100.02   |  500   <-- Best     100.03   |  300   <-- Best
    100.01   |  1200               100.04   |  800
    100.00   |  2500               100.05   |  1500

Key conventions:
- Levels are ordered best-to-worst (bids descending, asks ascending)
- mid_price and spread are supplied by the feed, never re-derived
- Snapshots are immutable once ingested

The SnapshotSimulator generates synthetic books for demos and tests when no
recorded data is available.
"""

from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

import numpy as np

from ..infra.logging import get_logger, LogCategory


logger = get_logger()

BOOK_LEVELS = 5


@dataclass(frozen=True)
class LOBSnapshot:
    """
    Top-of-book state for a single symbol at a single timestamp.

    Timestamps are epoch milliseconds.
    """
    timestamp: float
    symbol: str
    bid_prices: Tuple[float, ...]
    bid_sizes: Tuple[float, ...]
    ask_prices: Tuple[float, ...]
    ask_sizes: Tuple[float, ...]
    mid_price: float
    spread: float

    @property
    def best_bid(self) -> float:
        return self.bid_prices[0]

    @property
    def best_ask(self) -> float:
        return self.ask_prices[0]

    @property
    def best_bid_size(self) -> float:
        return self.bid_sizes[0]

    @property
    def best_ask_size(self) -> float:
        return self.ask_sizes[0]

    @property
    def microprice(self) -> float:
        """
        Size-weighted blend of the best bid and ask.

        microprice = (bid * ask_size + ask * bid_size) / (bid_size + ask_size)

        More size on the bid pulls the microprice toward the ask (buying
        pressure). Falls back to mid_price when both best sizes are zero.
        """
        total_size = self.best_bid_size + self.best_ask_size
        if total_size == 0:
            return self.mid_price
        return (
            self.best_bid * self.best_ask_size + self.best_ask * self.best_bid_size
        ) / total_size

    @property
    def top_of_book_volume(self) -> float:
        """Best bid size plus best ask size."""
        return self.best_bid_size + self.best_ask_size

    def depth_at_levels(self, n_levels: int = BOOK_LEVELS) -> Tuple[float, float]:
        """Total size at the top N levels on each side."""
        return sum(self.bid_sizes[:n_levels]), sum(self.ask_sizes[:n_levels])

    def notional_at_levels(self, n_levels: int = BOOK_LEVELS) -> Tuple[float, float]:
        """Price-weighted depth (sum of size * price) at the top N levels."""
        bid_notional = sum(s * p for s, p in zip(self.bid_sizes[:n_levels], self.bid_prices[:n_levels]))
        ask_notional = sum(s * p for s, p in zip(self.ask_sizes[:n_levels], self.ask_prices[:n_levels]))
        return bid_notional, ask_notional

    def to_dict(self) -> Dict:
        return {
            "timestamp": self.timestamp,
            "symbol": self.symbol,
            "bid_prices": list(self.bid_prices),
            "bid_sizes": list(self.bid_sizes),
            "ask_prices": list(self.ask_prices),
            "ask_sizes": list(self.ask_sizes),
            "mid_price": self.mid_price,
            "spread": self.spread,
        }


def make_snapshot(
    timestamp: float,
    symbol: str,
    bid_prices: Sequence[float],
    bid_sizes: Sequence[float],
    ask_prices: Sequence[float],
    ask_sizes: Sequence[float],
    mid_price: float,
    spread: float,
) -> LOBSnapshot:
    """Build a snapshot from any sequences, freezing the level arrays."""
    return LOBSnapshot(
        timestamp=float(timestamp),
        symbol=symbol,
        bid_prices=tuple(float(p) for p in bid_prices),
        bid_sizes=tuple(float(s) for s in bid_sizes),
        ask_prices=tuple(float(p) for p in ask_prices),
        ask_sizes=tuple(float(s) for s in ask_sizes),
        mid_price=float(mid_price),
        spread=float(spread),
    )


class SnapshotSimulator:
    """
    Generates synthetic LOB snapshots for a single symbol.

    Dynamics:
    - Mid price follows a geometric random walk
    - Spread widens with the size of the last move
    - Sizes grow away from the touch, with noise

    LIMITATIONS:
    - No real order flow, no queue dynamics
    - Sizes are independent of price moves
    """

    def __init__(
        self,
        symbol: str,
        initial_mid: float = 100.0,
        tick_size: float = 0.01,
        base_size: float = 500.0,
        volatility: float = 0.0005,
        interval_ms: float = 100.0,
        seed: int = 42,
    ):
        """
        Args:
            symbol: Symbol stamped on every snapshot
            initial_mid: Starting mid price
            tick_size: Minimum price increment between levels
            base_size: Typical size at the best level
            volatility: Per-step log-return standard deviation
            interval_ms: Time between snapshots
            seed: Random seed for reproducibility
        """
        self._symbol = symbol
        self._initial_mid = initial_mid
        self._tick_size = tick_size
        self._base_size = base_size
        self._volatility = volatility
        self._interval_ms = interval_ms
        self._seed = seed

    def generate(self, count: int, start_timestamp: float = 1_700_000_000_000.0) -> List[LOBSnapshot]:
        """Generate ``count`` snapshots, oldest first. Same seed, same output."""
        rng = np.random.default_rng(self._seed)
        snapshots: List[LOBSnapshot] = []
        mid = self._initial_mid

        for i in range(count):
            ret = rng.normal(0.0, self._volatility)
            mid = mid * float(np.exp(ret))

            # Spread widens with volatility, never below one tick
            spread_bps = 2.0 * (1 + abs(ret) * 1000)
            half_spread = max(mid * spread_bps / 20000, self._tick_size / 2)
            best_bid = round(mid - half_spread, 4)
            best_ask = round(mid + half_spread, 4)

            bid_prices = [round(best_bid - level * self._tick_size, 4) for level in range(BOOK_LEVELS)]
            ask_prices = [round(best_ask + level * self._tick_size, 4) for level in range(BOOK_LEVELS)]
            bid_sizes = self._level_sizes(rng)
            ask_sizes = self._level_sizes(rng)

            snapshots.append(make_snapshot(
                timestamp=start_timestamp + i * self._interval_ms,
                symbol=self._symbol,
                bid_prices=bid_prices,
                bid_sizes=bid_sizes,
                ask_prices=ask_prices,
                ask_sizes=ask_sizes,
                mid_price=(best_bid + best_ask) / 2,
                spread=best_ask - best_bid,
            ))

        logger.debug(
            f"Simulated {count} snapshots for {self._symbol}",
            category=LogCategory.DATA,
            symbol=self._symbol,
        )
        return snapshots

    def _level_sizes(self, rng: np.random.Generator) -> List[float]:
        sizes = []
        for level in range(BOOK_LEVELS):
            # Size increases away from mid (typical pattern)
            size_multiplier = 1.0 + level * 0.3
            size = self._base_size * size_multiplier * (1 + rng.uniform(-0.4, 0.4))
            sizes.append(float(max(100, int(size))))
        return sizes
