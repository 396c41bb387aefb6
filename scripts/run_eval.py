"""Run the multiple-choice evaluation without the web server."""

import argparse
import asyncio
import sys
from pathlib import Path

# Ensure project root is on sys.path when executed via `python scripts/...`
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from core.config import evaluation_categories, evaluation_sample_size, load_app_config, store_path
from core.llm import LLMClientFactory
from core.logger import setup_logging
from core.oracle import Oracle, OracleConfig
from evaluator.aggregator import Aggregator
from evaluator.runner import EvaluationRunner
from evaluator.store import QuestionStore


async def run_eval(sample_size: int, reset: bool) -> int:
    config = load_app_config()
    categories = evaluation_categories(config)
    store = QuestionStore(store_path(config))
    if reset:
        store.reset_all()
    oracle = Oracle(OracleConfig(), llm_factory=LLMClientFactory(config.get("models", {})))
    runner = EvaluationRunner(store=store, oracle=oracle, categories=categories, sample_size=sample_size)
    report = await runner.run_all()

    print(f"{'category':<20} {'accuracy':>9} {'avg ms':>10} {'n':>5}")
    for category, result in Aggregator(store, categories).compute_results().items():
        display = result.to_display()
        print(f"{category:<20} {display['accuracy']:>9} {display['avgTime']:>10} {result.total:>5}")
    if not report.ok:
        print(report.error_message(), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run the evaluation across all configured categories.")
    parser.add_argument("--sample-size", type=int, default=None, help="Questions per category.")
    parser.add_argument("--reset", action="store_true", help="Clear previous results first.")
    parser.add_argument("--log-level", default=None, help="Override the configured log level.")
    args = parser.parse_args()
    setup_logging(args.log_level)
    size = args.sample_size or evaluation_sample_size()
    sys.exit(asyncio.run(run_eval(size, args.reset)))
