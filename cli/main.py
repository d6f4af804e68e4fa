"""Command-line entry points for running single simulations and batches."""

from __future__ import annotations

import argparse
import logging
import random
from pathlib import Path
import sys

# Allow `python cli/main.py ...` execution from IDEs by adding repo root to sys.path.
if __package__ in {None, ""}:
    repo_root = Path(__file__).resolve().parents[1]
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))

from configs.loader import ConfigLoader
from data.logger import BatchLogger
from engine.simulator import Simulator
from main import build_simulator, run_batches

LOGGER = logging.getLogger(__name__)


def _run_single(config_path: str, seed: int | None) -> int:
    config = ConfigLoader.load(config_path)
    rng = random.Random(config.seed if seed is None else seed)
    simulator: Simulator = build_simulator(config, rng)
    final = simulator.run()

    best = final.state.result.best_solution
    print(f"generation: {final.state.iteration}")
    print(f"best fitness: {best.solution.fitness:g} (found in generation {best.generation})")
    print(f"phenome: {best.solution.phenome()}")
    print(f"stop reason: {final.stop_reason}")
    print(f"processing time: {final.processing_time:.3f}s, duration: {final.duration:.3f}s")
    return 0


def _run_batches(config_path: str, db_path: str, max_workers: int | None) -> int:
    configs = ConfigLoader.load_many(config_path)
    results = run_batches(configs, max_workers=max_workers)

    logger = BatchLogger(db_path)
    exit_code = 0
    try:
        for config, result in zip(configs, results):
            batch_id = logger.log_batch(config, result)
            if result.converged:
                print(f"{batch_id} {result.label}: converged (avg generations: {result.average_generations:.1f})")
            else:
                print(f"{batch_id} {result.label}: {result.verdict}")
                exit_code = 1
    finally:
        logger.close()
    return exit_code


def _show(batch_id: str | None, db_path: str) -> int:
    logger = BatchLogger(db_path)
    try:
        batch_id = batch_id or logger.latest_batch_id()
        batch = logger.fetch_batch(batch_id) if batch_id else None
        if batch is None:
            LOGGER.error("No batch found in %s", db_path)
            return 1
        print(f"{batch['batch_id']} {batch['label']}: {batch['verdict']} ({batch['trials']} trials)")
        for index, value in enumerate(logger.fetch_series(batch["batch_id"]), start=1):
            print(f"{index},{value:g}")
    finally:
        logger.close()
    return 0


def run_cli(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="genesweep")
    parser.add_argument("--log-level", default="WARNING")
    sub = parser.add_subparsers(dest="command", required=True)

    run_cmd = sub.add_parser("run")
    run_cmd.add_argument("--config", default="configs/example_run.yaml")
    run_cmd.add_argument("--seed", type=int)

    batch_cmd = sub.add_parser("batch")
    batch_cmd.add_argument("--config", default="configs/example_batch.yaml")
    batch_cmd.add_argument("--db", default="batch_results.db")
    batch_cmd.add_argument("--workers", type=int)

    show_cmd = sub.add_parser("show")
    show_cmd.add_argument("--batch")
    show_cmd.add_argument("--db", default="batch_results.db")

    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, str(args.log_level).upper(), logging.WARNING))

    if args.command == "run":
        return _run_single(args.config, args.seed)

    if args.command == "batch":
        return _run_batches(args.config, args.db, args.workers)

    if args.command == "show":
        return _show(args.batch, args.db)

    return 1


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
