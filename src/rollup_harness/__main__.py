"""
Consistency harness CLI entry point.

Run scenarios against a running devnet described by a YAML file.

Usage::

    python -m rollup_harness --devnet devnet.yaml
    python -m rollup_harness --devnet devnet.yaml --scenario p2p --max-lag 5
    python -m rollup_harness --devnet devnet.yaml --scenario tx-forwarding -v

Options:
    --devnet               Path to the devnet description YAML (required)
    --scenario             Scenario to run: p2p, tx-forwarding or all (default: all)
    --replicas             Replicas to check (default: every replica in the devnet)
    --max-lag              Blocks a replica may trail the sequencer (default: 5)
    --steady-state         Seconds of load and checking (default: 60)
    --convergence-timeout  Seconds to wait for initial sync (default: 60)
    --tick                 Seconds between load submissions and checks (default: 0.1)
    --rpc-timeout          Seconds a single RPC call may take (default: 5)
    --metrics-file         Write Prometheus metrics here when the run ends
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

import yaml

from rollup_harness import metrics
from rollup_harness.config import (
    DEFAULT_CONVERGENCE_TIMEOUT,
    DEFAULT_MAX_REPLICA_LAG,
    DEFAULT_RPC_TIMEOUT,
    DEFAULT_STEADY_STATE_TIMEOUT,
    DEFAULT_TICK_INTERVAL,
    RunConfig,
)
from rollup_harness.devnet import Devnet, DevnetConfig
from rollup_harness.errors import HarnessError
from rollup_harness.harness import RunResult
from rollup_harness.scenarios import SCENARIOS

logger = logging.getLogger(__name__)


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name, with a failing run in red."""

    RESET = "\033[0m"
    GREY = "\033[90m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    RED = "\033[31m"
    CYAN = "\033[36m"

    LEVEL_COLORS = {
        logging.DEBUG: GREY,
        logging.INFO: GREEN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        color = self.LEVEL_COLORS.get(record.levelno, self.RESET)
        timestamp = f"{self.CYAN}{self.formatTime(record, self.datefmt)}{self.RESET}"
        levelname = f"{color}{record.levelname:8}{self.RESET}"
        return f"{timestamp} {levelname} {record.name}: {record.getMessage()}"


def setup_logging(verbose: bool = False, no_color: bool = False) -> None:
    """Configure root logging for a harness run."""
    level = logging.DEBUG if verbose else logging.INFO

    handler = logging.StreamHandler()
    handler.setLevel(level)
    if no_color:
        formatter: logging.Formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = ColoredFormatter(datefmt="%Y-%m-%d %H:%M:%S")
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)

    # Per-request lines from the HTTP stack drown the harness output.
    logging.getLogger("httpx").setLevel(logging.WARNING)


def build_run_config(args: argparse.Namespace, devnet_config: DevnetConfig) -> RunConfig:
    """Merge CLI overrides with the devnet description."""
    return RunConfig(
        replica_count=args.replicas if args.replicas is not None else devnet_config.replica_count,
        max_replica_lag=args.max_lag,
        convergence_timeout=args.convergence_timeout,
        steady_state_timeout=args.steady_state,
        tick_interval=args.tick,
        rpc_timeout=args.rpc_timeout,
    )


async def run_scenarios(
    devnet_config: DevnetConfig, config: RunConfig, names: list[str]
) -> dict[str, RunResult]:
    """
    Run each named scenario against the devnet in turn.

    Returns:
        Outcome per scenario name.
    """
    results: dict[str, RunResult] = {}
    try:
        devnet = await Devnet.connect(devnet_config, rpc_timeout=config.rpc_timeout)
    except HarnessError as exc:
        logger.error("Cannot connect to devnet: %s", exc)
        return {name: RunResult.failure(exc) for name in names}

    try:
        for name in names:
            scenario = SCENARIOS[name]
            logger.info("=== %s: %s", scenario.name, scenario.description)
            result = await scenario.run(devnet, config)
            logger.info("=== %s: %s", scenario.name, result.diagnostic)
            results[name] = result
    finally:
        await devnet.aclose()

    return results


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns the process exit code."""
    parser = argparse.ArgumentParser(
        description="Rollup replica consistency harness",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--devnet",
        required=True,
        type=Path,
        help="Path to the devnet description YAML",
    )
    parser.add_argument(
        "--scenario",
        choices=[*SCENARIOS, "all"],
        default="all",
        help="Scenario to run (default: all)",
    )
    parser.add_argument(
        "--replicas",
        type=int,
        default=None,
        help="Replicas to check (default: every replica in the devnet)",
    )
    parser.add_argument(
        "--max-lag",
        type=int,
        default=DEFAULT_MAX_REPLICA_LAG,
        help=f"Blocks a replica may trail the sequencer (default: {DEFAULT_MAX_REPLICA_LAG})",
    )
    parser.add_argument(
        "--steady-state",
        type=float,
        default=DEFAULT_STEADY_STATE_TIMEOUT,
        help="Seconds of load and checking",
    )
    parser.add_argument(
        "--convergence-timeout",
        type=float,
        default=DEFAULT_CONVERGENCE_TIMEOUT,
        help="Seconds to wait for initial sync",
    )
    parser.add_argument(
        "--tick",
        type=float,
        default=DEFAULT_TICK_INTERVAL,
        help="Seconds between load submissions and checks",
    )
    parser.add_argument(
        "--rpc-timeout",
        type=float,
        default=DEFAULT_RPC_TIMEOUT,
        help="Seconds a single RPC call may take",
    )
    parser.add_argument(
        "--metrics-file",
        type=Path,
        default=None,
        help="Write Prometheus metrics here when the run ends",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every check round",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored logging output",
    )

    args = parser.parse_args(argv)
    setup_logging(args.verbose, args.no_color)

    try:
        devnet_config = DevnetConfig.from_yaml_file(args.devnet)
    except (OSError, yaml.YAMLError, ValueError) as exc:
        parser.error(f"cannot load devnet description {args.devnet}: {exc}")

    try:
        config = build_run_config(args, devnet_config)
    except ValueError as exc:
        parser.error(str(exc))

    names = list(SCENARIOS) if args.scenario == "all" else [args.scenario]

    try:
        results = asyncio.run(run_scenarios(devnet_config, config, names))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130

    if args.metrics_file is not None:
        args.metrics_file.write_bytes(metrics.generate_metrics())
        logger.info("Wrote metrics to %s", args.metrics_file)

    failed = [name for name, result in results.items() if not result.ok]
    for name in failed:
        print(f"FAIL {name}: {results[name].diagnostic}", file=sys.stderr)
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
