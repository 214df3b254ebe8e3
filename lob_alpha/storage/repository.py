"""
Research Data Repository
========================

Append-only storage for ingested snapshots, generated signals and backtest
results, keyed by symbol.

The repository is an explicit, injected dependency: the pipeline receives
one at construction and there is no module-level instance. Swapping the
in-memory store for a database-backed one only requires implementing
Repository.

Nothing here persists across process restarts.
"""

import threading
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Dict, List, Optional, Sequence

from ..backtest.engine import BacktestResult
from ..data.orderbook import LOBSnapshot
from ..infra.logging import get_logger, LogCategory
from ..signals.signal_generator import Signal


logger = get_logger()


class Repository(ABC):
    """Storage contract consumed by the research pipeline."""

    @abstractmethod
    def add_snapshots(self, symbol: str, snapshots: Sequence[LOBSnapshot]) -> None:
        pass

    @abstractmethod
    def get_snapshots(self, symbol: str) -> List[LOBSnapshot]:
        pass

    @abstractmethod
    def list_symbols(self) -> List[str]:
        pass

    @abstractmethod
    def add_signals(self, symbol: str, signals: Sequence[Signal]) -> None:
        pass

    @abstractmethod
    def get_signals(self, symbol: str) -> List[Signal]:
        pass

    @abstractmethod
    def add_result(self, result: BacktestResult) -> None:
        pass

    @abstractmethod
    def list_results(self) -> List[BacktestResult]:
        pass

    def get_result(self, result_id: str) -> Optional[BacktestResult]:
        """Look up a stored result by id (None if absent)."""
        for result in self.list_results():
            if result.id == result_id:
                return result
        return None

    def stats(self) -> Dict[str, int]:
        symbols = self.list_symbols()
        return {
            "symbols": len(symbols),
            "snapshots": sum(len(self.get_snapshots(s)) for s in symbols),
            "signals": sum(len(self.get_signals(s)) for s in symbols),
            "results": len(self.list_results()),
        }


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository.

    Readers get list copies, so a run never sees a write that lands after
    its read.
    """

    def __init__(self):
        self._snapshots: Dict[str, List[LOBSnapshot]] = defaultdict(list)
        self._signals: Dict[str, List[Signal]] = defaultdict(list)
        self._results: List[BacktestResult] = []
        self._lock = threading.Lock()

    def add_snapshots(self, symbol: str, snapshots: Sequence[LOBSnapshot]) -> None:
        with self._lock:
            self._snapshots[symbol].extend(snapshots)
        logger.debug(
            f"Stored {len(snapshots)} snapshots",
            category=LogCategory.STORAGE,
            symbol=symbol,
        )

    def get_snapshots(self, symbol: str) -> List[LOBSnapshot]:
        with self._lock:
            return list(self._snapshots.get(symbol, []))

    def list_symbols(self) -> List[str]:
        with self._lock:
            return sorted(symbol for symbol, data in self._snapshots.items() if data)

    def add_signals(self, symbol: str, signals: Sequence[Signal]) -> None:
        with self._lock:
            self._signals[symbol].extend(signals)
        logger.debug(
            f"Stored {len(signals)} signals",
            category=LogCategory.STORAGE,
            symbol=symbol,
        )

    def get_signals(self, symbol: str) -> List[Signal]:
        with self._lock:
            return list(self._signals.get(symbol, []))

    def add_result(self, result: BacktestResult) -> None:
        with self._lock:
            self._results.append(result)
        logger.debug(f"Stored backtest result {result.id}", category=LogCategory.STORAGE)

    def list_results(self) -> List[BacktestResult]:
        with self._lock:
            return list(self._results)

    def clear(self) -> None:
        with self._lock:
            self._snapshots.clear()
            self._signals.clear()
            self._results.clear()
