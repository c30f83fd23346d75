"""
Prometheus Metrics
==================

Evaluation metrics, written in the text exposition format at the end of a run
(suitable for the node exporter textfile collector or a Pushgateway).
"""

from pathlib import Path

from prometheus_client import CollectorRegistry, Counter, Histogram, Info, write_to_textfile

from nl2sql_eval.models import ItemEvaluation

# Create a custom registry for this application
REGISTRY = CollectorRegistry()

APP_INFO = Info(
    "nl2sql_eval",
    "NL-to-SQL evaluation run information",
    registry=REGISTRY,
)

ITEMS_TOTAL = Counter(
    "nl2sql_eval_items_total",
    "Ground truth items evaluated",
    ["model", "outcome"],  # executed, retries_exhausted, invocation_error
    registry=REGISTRY,
)

GENERATION_ATTEMPTS = Histogram(
    "nl2sql_eval_generation_attempts",
    "SQL executions needed per item",
    ["model"],
    buckets=[1, 2, 3, 4, 5],
    registry=REGISTRY,
)

ITEM_DURATION = Histogram(
    "nl2sql_eval_item_duration_seconds",
    "Wall time to generate, execute and judge one item",
    ["model"],
    buckets=[0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
    registry=REGISTRY,
)

JUDGE_VERDICTS = Counter(
    "nl2sql_eval_judge_verdicts_total",
    "Equivalence judge verdicts",
    ["model", "verdict"],  # Exact, Functional, None, unscored
    registry=REGISTRY,
)

RESULT_MATCHES = Counter(
    "nl2sql_eval_result_matches_total",
    "Executed items whose result matched the ground truth result",
    ["model", "match"],
    registry=REGISTRY,
)


def setup_metrics(version: str, judge: str) -> None:
    """Record static run information."""
    APP_INFO.info({"version": version, "judge": judge})


def track_item_metrics(evaluation: ItemEvaluation, duration_seconds: float) -> None:
    """Record the outcome of one evaluated item."""
    model = evaluation.model_key
    generation = evaluation.generation

    outcome = "executed" if generation.success else (generation.failure_reason or "failed")
    ITEMS_TOTAL.labels(model=model, outcome=outcome).inc()
    GENERATION_ATTEMPTS.labels(model=model).observe(generation.attempts)
    ITEM_DURATION.labels(model=model).observe(duration_seconds)

    if not generation.success:
        return

    verdict = evaluation.verdict.value if evaluation.verdict else "unscored"
    JUDGE_VERDICTS.labels(model=model, verdict=verdict).inc()
    RESULT_MATCHES.labels(model=model, match=str(evaluation.result_match).lower()).inc()


def write_metrics(path: str | Path) -> None:
    """Write all metrics to ``path`` in the Prometheus text format."""
    write_to_textfile(str(path), REGISTRY)
