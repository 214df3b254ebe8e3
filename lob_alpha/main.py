"""
LOB Alpha Research System - Main Entry Point
=============================================

Runs the full research pipeline from the command line:

1. INGEST: a snapshot CSV, or synthetic snapshots from the simulator
2. SIGNALS: regularized signal generation for one symbol
3. BACKTEST: cost-aware simulation and metrics report
4. WALK-FORWARD (optional): rolling train/validate evaluation

Usage:
    python -m lob_alpha.main --csv data/lob.csv --symbol AAPL
    python -m lob_alpha.main --simulate 5000 --method lasso --alpha 0.05
    python -m lob_alpha.main --simulate 5000 --walk-forward

For detailed options:
    python -m lob_alpha.main --help
"""

import argparse
import sys
from typing import List, Optional

from .data import SnapshotSimulator
from .errors import LOBAlphaError
from .infra import (
    BacktestConfig,
    RebalanceFrequency,
    RegularizationConfig,
    RegularizationMethod,
    configure_logging,
    format_metrics_report,
    get_backtest_config,
    logger,
    LogCategory,
)
from .pipeline import ResearchPipeline
from .signals import feature_importance, signal_distribution
from .storage import InMemoryRepository


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="LOB Alpha Research System",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m lob_alpha.main --csv data/lob.csv --symbol AAPL
  python -m lob_alpha.main --simulate 5000 --method ridge --alpha 0.5
  python -m lob_alpha.main --simulate 5000 --walk-forward --train-window 1000
        """
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--csv", type=str, help="Path to a snapshot CSV file")
    source.add_argument("--simulate", type=int, metavar="N", help="Generate N synthetic snapshots")

    parser.add_argument(
        "--symbol",
        type=str,
        default=None,
        help="Symbol to analyze (default: first symbol in the data; SIM when simulating)"
    )
    parser.add_argument("--seed", type=int, default=42, help="Simulator seed (default: 42)")

    # Regularization
    parser.add_argument(
        "--method",
        choices=[m.value for m in RegularizationMethod],
        default=RegularizationMethod.ELASTIC_NET.value,
        help="Regularization method (default: elastic-net)"
    )
    parser.add_argument("--alpha", type=float, default=0.1, help="Regularization strength (default: 0.1)")
    parser.add_argument("--l1-ratio", type=float, default=None, help="Elastic-net L1 ratio (default: 0.5)")
    parser.add_argument("--max-features", type=int, default=5, help="Features reported by selection (default: 5)")

    # Backtest
    parser.add_argument("--capital", type=float, default=100_000.0, help="Initial capital (default: 100000)")
    parser.add_argument("--cost-bps", type=float, default=5.0, help="Transaction cost in bps (default: 5)")
    parser.add_argument("--slippage-bps", type=float, default=2.0, help="Slippage in bps (default: 2)")
    parser.add_argument("--max-position", type=float, default=1_000.0, help="Max position size (default: 1000)")
    parser.add_argument(
        "--rebalance",
        choices=[f.value for f in RebalanceFrequency],
        default=RebalanceFrequency.TICK.value,
        help="Rebalance frequency (default: tick)"
    )

    # Walk-forward
    parser.add_argument("--walk-forward", action="store_true", help="Also run walk-forward validation")
    parser.add_argument("--train-window", type=int, default=1_000, help="Walk-forward train window (default: 1000)")
    parser.add_argument("--validation-window", type=int, default=200, help="Validation window (default: 200)")

    parser.add_argument("--json-logs", action="store_true", help="Emit structured JSON logs")
    return parser


def run_research(args: argparse.Namespace) -> int:
    """Run one research session described by parsed CLI arguments."""
    config = get_backtest_config()
    config.structured_logs = args.json_logs
    config.regularization = RegularizationConfig(
        method=args.method,
        alpha=args.alpha,
        l1_ratio=args.l1_ratio,
        max_features=args.max_features,
    )
    config.backtest = BacktestConfig(
        initial_capital=args.capital,
        transaction_cost_bps=args.cost_bps,
        slippage_bps=args.slippage_bps,
        max_position_size=args.max_position,
        rebalance_frequency=args.rebalance,
        walk_forward_window=args.train_window,
        validation_window=args.validation_window,
    )
    configure_logging(config)

    pipeline = ResearchPipeline(InMemoryRepository(), config)

    if args.csv:
        counts = pipeline.ingest_csv(args.csv)
    else:
        simulator = SnapshotSimulator(args.symbol or "SIM", seed=args.seed)
        counts = pipeline.ingest_snapshots(simulator.generate(args.simulate), source="simulator")

    symbol = args.symbol or sorted(counts)[0]

    print("\n" + "=" * 60)
    print("🚀 LOB ALPHA RESEARCH SYSTEM")
    print("=" * 60)
    print(f"Symbol:         {symbol}")
    print(f"Snapshots:      {counts.get(symbol, 0):,}")
    print(f"Regularization: {config.regularization.method.value} (alpha={config.regularization.alpha})")
    print(f"Rebalance:      {config.backtest.rebalance_frequency.value}")
    print("=" * 60 + "\n")

    signals = pipeline.generate_signals(symbol)
    result = pipeline.run_backtest(symbol)
    print(format_metrics_report(result.metrics))

    print("\n" + "=" * 60)
    print("📊 SIGNAL DIAGNOSTICS")
    print("=" * 60)
    print(f"Signals generated: {len(signals):,}")
    print("Mean |feature| (largest first):")
    for name, value in feature_importance(signals):
        print(f"  {name:<24} {value:.6f}")
    print(f"Signal histogram [-1, 1]: {signal_distribution(signals, bins=10)}")
    print("=" * 60)

    if args.walk_forward:
        walk_forward = pipeline.walk_forward(symbol)
        print("\n" + "=" * 60)
        print("🔁 WALK-FORWARD VALIDATION")
        print("=" * 60)
        for fold in walk_forward.folds:
            metrics = fold.result.metrics
            print(f"Fold {fold.index}: return={metrics.total_return:+.4%} "
                  f"Sharpe={metrics.sharpe_ratio:+.2f} "
                  f"DD={metrics.max_drawdown:.2%} "
                  f"features={','.join(fold.selected_features)}")
        print("-" * 60)
        print(f"Mean Sharpe:       {walk_forward.mean_sharpe:.2f}")
        print(f"Mean Return:       {walk_forward.mean_total_return:.4%}")
        print(f"Mean Max Drawdown: {walk_forward.mean_max_drawdown:.2%}")
        print("=" * 60)

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        return run_research(args)
    except (LOBAlphaError, OSError) as exc:
        logger.error(f"Research run failed: {exc}", category=LogCategory.SYSTEM)
        print(f"❌ {exc}", file=sys.stderr)
        return 1
    finally:
        logger.shutdown()


if __name__ == "__main__":
    sys.exit(main())
