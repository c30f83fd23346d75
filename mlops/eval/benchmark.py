"""
Evaluation Runner
=================

Runs every selected model over every ground truth item: generate and repair
SQL, compare the executed result with the recorded one, and ask the judge
model how the generated query relates to the reference query.

Usage:
    nl2sql-eval --models "Ollama/OpenAI : llama3,Groq : llama3-8b-8192" --seed 42
    nl2sql-eval --list-models
"""

import argparse
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

from nl2sql_eval import __version__, config
from nl2sql_eval.comparator import results_match, serialize_rows
from nl2sql_eval.database import initialise_database
from nl2sql_eval.errors import ConfigurationError, JudgeProtocolError, ModelInvocationError
from nl2sql_eval.executor import SQLExecutor, SQLiteExecutor
from nl2sql_eval.generator import SQLGenerator
from nl2sql_eval.ground_truth import load_ground_truth
from nl2sql_eval.judge import EquivalenceJudge
from nl2sql_eval.llm.base import LLMInterface
from nl2sql_eval.llm.registry import ModelRegistry, build_default_registry
from nl2sql_eval.models import (
    DEFAULT_MAX_TOKENS,
    NO_SEED,
    EquivalenceVerdict,
    GenerationOptions,
    GroundTruthItem,
    ItemEvaluation,
)
from observability.logging_config import bind_context, clear_context, get_logger, setup_logging
from observability.metrics import setup_metrics, track_item_metrics, write_metrics

logger = get_logger(__name__)


@dataclass
class ModelSummary:
    """Aggregate results of one model over the ground truth."""

    model_key: str
    results: list[ItemEvaluation] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def executed(self) -> int:
        return sum(1 for r in self.results if r.generation.success)

    @property
    def failed(self) -> int:
        return self.total - self.executed

    @property
    def result_matches(self) -> int:
        return sum(1 for r in self.results if r.result_match)

    @property
    def unscored(self) -> int:
        return sum(1 for r in self.results if r.generation.success and not r.scored)

    @property
    def verdicts(self) -> dict[str, int]:
        counts = {verdict.value: 0 for verdict in EquivalenceVerdict}
        for r in self.results:
            if r.verdict is not None:
                counts[r.verdict.value] += 1
        return counts

    @property
    def avg_attempts(self) -> float:
        return sum(r.generation.attempts for r in self.results) / self.total if self.total else 0.0

    @property
    def execution_rate(self) -> float:
        return self.executed / self.total if self.total else 0.0

    @property
    def result_match_rate(self) -> float:
        return self.result_matches / self.total if self.total else 0.0

    def to_dict(self) -> dict:
        return {
            "model": self.model_key,
            "total": self.total,
            "executed": self.executed,
            "failed": self.failed,
            "result_matches": self.result_matches,
            "unscored": self.unscored,
            "verdicts": self.verdicts,
            "avg_attempts": self.avg_attempts,
            "items": [
                {
                    "query": r.item.query,
                    "ground_truth_sql": r.item.sql,
                    "generated_sql": r.generation.sql,
                    "attempts": r.generation.attempts,
                    "failure_reason": r.generation.failure_reason,
                    "verdict": r.verdict.value if r.verdict else None,
                    "verdict_error": r.verdict_error,
                    "result_match": r.result_match,
                }
                for r in self.results
            ],
        }


@dataclass
class EvaluationReport:
    """Summary report of an evaluation run."""

    run_id: str
    timestamp: str
    summaries: list[ModelSummary]

    def to_dict(self) -> dict:
        return {
            "run_id": self.run_id,
            "timestamp": self.timestamp,
            "models": [s.to_dict() for s in self.summaries],
        }


class EvaluationRunner:
    """
    Evaluates models against the ground truth, one item at a time.

    Models and items are processed sequentially so that log output stays in
    order and runs with a fixed seed are reproducible. A failure on one item
    is recorded and the run moves on.
    """

    def __init__(
        self,
        registry: ModelRegistry,
        executor: SQLExecutor,
        judge: EquivalenceJudge,
        options: GenerationOptions | None = None,
        max_retries: int = config.MAX_RETRIES,
        system_prompt: str | None = None,
        tracker=None,
        progress_callback: Callable[[int, int], None] | None = None,
    ):
        """
        Initialize the evaluation runner.

        Args:
            registry: Registry the evaluated models are looked up in
            executor: Executor for the evaluation database
            judge: Equivalence judge
            options: Generation options for the evaluated models
            max_retries: Repair attempts allowed per item
            system_prompt: Base system prompt override
            tracker: Optional mlops.tracking.ExperimentTracker
            progress_callback: Optional callback receiving (done, total) per item
        """
        self.registry = registry
        self.executor = executor
        self.judge = judge
        self.options = options or GenerationOptions()
        self.max_retries = max_retries
        self.system_prompt = system_prompt
        self.tracker = tracker
        self.progress_callback = progress_callback

    def evaluate_item(self, client: LLMInterface, item: GroundTruthItem) -> ItemEvaluation:
        """Generate SQL for one item and score it."""
        start_time = time.perf_counter()

        generator = SQLGenerator(
            llm=client,
            executor=self.executor,
            options=self.options,
            max_retries=self.max_retries,
            system_prompt=self.system_prompt,
        )
        generation = generator.process(item.query)
        evaluation = ItemEvaluation(model_key=client.key, item=item, generation=generation)

        if generation.success:
            evaluation.serialized_result = serialize_rows(generation.rows)
            evaluation.result_match = results_match(generation.rows, item.result)

            try:
                evaluation.verdict = self.judge.compare(item.sql, generation.sql)
            except (JudgeProtocolError, ModelInvocationError) as exc:
                evaluation.verdict_error = str(exc)
                logger.warning("item_unscored", error=str(exc))

            logger.info(
                "item_evaluated",
                ground_truth_sql=item.sql,
                generated_sql=generation.sql,
                ground_truth_result=item.result,
                sql_result=evaluation.serialized_result,
                results_match=evaluation.result_match,
                verdict=evaluation.verdict.value if evaluation.verdict else None,
                attempts=generation.attempts,
            )
        else:
            logger.error(
                "item_failed",
                query=item.query,
                reason=generation.failure_reason,
                attempts=generation.attempts,
                message=generation.final_message,
            )

        track_item_metrics(evaluation, time.perf_counter() - start_time)
        return evaluation

    def run_model(self, key: str, items: list[GroundTruthItem]) -> ModelSummary:
        """Evaluate one model over all items."""
        client = self.registry.get(key)
        summary = ModelSummary(model_key=key)
        total = len(items)

        logger.info("model_evaluation_started", model=key, items=total)
        for index, item in enumerate(items, start=1):
            bind_context(model=key, item=index)
            try:
                summary.results.append(self.evaluate_item(client, item))
            finally:
                clear_context()

            if self.progress_callback:
                self.progress_callback(index, total)

        logger.info(
            "model_evaluation_finished",
            model=key,
            executed=summary.executed,
            result_matches=summary.result_matches,
            verdicts=summary.verdicts,
        )
        return summary

    def run(self, keys: list[str], items: list[GroundTruthItem]) -> EvaluationReport:
        """
        Evaluate every model in ``keys`` over ``items``.

        Raises:
            ConfigurationError: If any key is not in the registry
        """
        # Resolve every model before spending time on the first one
        for key in keys:
            self.registry.get(key)

        summaries = []
        for key in keys:
            summary = self.run_model(key, items)
            summaries.append(summary)
            if self.tracker:
                with self.tracker.start_run(run_name=key, nested=True):
                    self.tracker.log_model_summary(summary)

        now = datetime.now(timezone.utc)
        return EvaluationReport(
            run_id=now.strftime("%Y%m%d_%H%M%S"),
            timestamp=now.isoformat(),
            summaries=summaries,
        )


def print_report(report: EvaluationReport) -> None:
    """Print a formatted evaluation report."""
    print("\n" + "=" * 72)
    print("EVALUATION REPORT")
    print("=" * 72)
    print(f"Run ID: {report.run_id}")
    print(f"Timestamp: {report.timestamp}")
    print()

    header = f"{'Model':36} {'Exec':>6} {'Match':>6} {'Exact':>6} {'Func':>6} {'None':>6} {'Att':>5}"
    print(header)
    print("-" * len(header))
    for s in report.summaries:
        verdicts = s.verdicts
        print(
            f"{s.model_key[:36]:36} "
            f"{s.executed:>3}/{s.total:<2} "
            f"{s.result_matches:>3}/{s.total:<2} "
            f"{verdicts['Exact']:>6} "
            f"{verdicts['Functional']:>6} "
            f"{verdicts['None']:>6} "
            f"{s.avg_attempts:>5.2f}"
        )
    print()

    failures = [r for s in report.summaries for r in s.results if not r.generation.success]
    if failures:
        print("FAILURES")
        print("-" * 40)
        for f in failures:
            print(f"  [{f.model_key}] {f.item.query[:50]}")
            print(f"    {f.generation.final_message}")
        print()


def parse_model_keys(value: str) -> list[str]:
    """Split a comma separated list of registry keys."""
    return [key.strip() for key in value.split(",") if key.strip()]


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nl2sql-eval",
        description="Evaluate LLM natural-language-to-SQL generation against ground truth",
    )
    parser.add_argument(
        "--models",
        default=config.DEFAULT_MODEL_KEY,
        help="Comma separated model keys, e.g. 'Groq : llama3-8b-8192'",
    )
    parser.add_argument("--judge", default=config.JUDGE_MODEL_KEY, help="Model key of the equivalence judge")
    parser.add_argument("--base-url", default=None, help="Base URL of the local OpenAI-compatible server")
    parser.add_argument("--max-tokens", type=int, default=DEFAULT_MAX_TOKENS, help="Maximum tokens per completion")
    parser.add_argument(
        "--seed",
        type=int,
        default=NO_SEED,
        help=f"Seed for deterministic results ({NO_SEED} = no seed)",
    )
    parser.add_argument("--max-retries", type=int, default=config.MAX_RETRIES, help="Repair attempts per item")
    parser.add_argument("--db", default=config.DB_PATH, help="SQLite database file (created if missing)")
    parser.add_argument("--ground-truth", default=config.GROUND_TRUTH_PATH, help="Ground truth .md or .csv file")
    parser.add_argument("--log-level", default=None, help="Log level (default: LOG_LEVEL env or INFO)")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")
    parser.add_argument("--metrics-file", default=None, help="Write Prometheus metrics to this file")
    parser.add_argument("--track", action="store_true", help="Track the run with MLflow")
    parser.add_argument("--list-models", action="store_true", help="List known models and exit")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the evaluation from the command line."""
    args = build_arg_parser().parse_args(argv)
    setup_logging(level=args.log_level, json_format=True if args.json_logs else None)

    registry = build_default_registry(args.base_url)

    if args.list_models:
        for spec in registry.specs():
            caps = spec.capabilities
            print(
                f"{spec.key:40} {caps.weights_access.value:6} "
                f"{caps.num_parameters:>5} {caps.context_window:>8}"
            )
        return 0

    options = GenerationOptions(max_tokens=args.max_tokens, seed=args.seed)
    keys = parse_model_keys(args.models)

    try:
        if not keys:
            raise ConfigurationError("No models selected")
        judge = EquivalenceJudge(registry.get(args.judge), options)
        items = load_ground_truth(args.ground_truth)
        for key in keys:
            registry.get(key)
    except ConfigurationError as exc:
        logger.error("configuration_error", error=str(exc))
        return 2

    setup_metrics(__version__, args.judge)
    logger.info("evaluation_started", models=keys, judge=args.judge, items=len(items), seed=args.seed)

    connection = initialise_database(args.db)
    try:
        runner = EvaluationRunner(
            registry=registry,
            executor=SQLiteExecutor(connection),
            judge=judge,
            options=options,
            max_retries=args.max_retries,
        )

        if args.track:
            from mlops.tracking import ExperimentTracker

            tracker = ExperimentTracker()
            runner.tracker = tracker
            with tracker.start_run(run_name="evaluation"):
                tracker.log_run_config(options, args.max_retries, args.judge)
                report = runner.run(keys, items)
                tracker.log_dict(report.to_dict(), "report.json")
        else:
            report = runner.run(keys, items)
    finally:
        connection.close()

    print_report(report)

    if args.metrics_file:
        write_metrics(args.metrics_file)
        logger.info("metrics_written", path=args.metrics_file)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
