"""
Experiment Tracking
===================

MLflow integration for tracking evaluation runs: one MLflow run per
evaluation, with a nested run per model.

Requirements:
    pip install "nl2sql-eval[tracking]"
"""

import os
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Generator

import mlflow

from nl2sql_eval.models import GenerationOptions

if TYPE_CHECKING:
    from mlops.eval.benchmark import ModelSummary


class ExperimentTracker:
    """
    MLflow-based experiment tracking for NL-to-SQL evaluations.

    Tracks:
    - Run configuration (judge, max tokens, seed, retry budget)
    - Per-model execution and result match rates
    - Judge verdict counts
    - Average attempts per item
    """

    def __init__(
        self,
        tracking_uri: str | None = None,
        experiment_name: str = "nl2sql-eval",
    ):
        """
        Initialize experiment tracker.

        Args:
            tracking_uri: MLflow tracking server URI (default: local ./mlruns)
            experiment_name: Experiment name
        """
        self.experiment_name = experiment_name

        uri = tracking_uri or os.getenv("MLFLOW_TRACKING_URI", "file:./mlruns")
        mlflow.set_tracking_uri(uri)

        experiment = mlflow.get_experiment_by_name(experiment_name)
        if experiment is None:
            mlflow.create_experiment(experiment_name, tags={"project": "nl2sql-eval"})

        mlflow.set_experiment(experiment_name)

    @contextmanager
    def start_run(
        self,
        run_name: str | None = None,
        tags: dict[str, str] | None = None,
        nested: bool = False,
    ) -> Generator:
        """
        Start an MLflow run context.

        Args:
            run_name: Optional name for the run
            tags: Optional tags to add
            nested: Whether this is a nested run

        Yields:
            MLflow run object
        """
        with mlflow.start_run(run_name=run_name, nested=nested) as run:
            if tags:
                mlflow.set_tags(tags)
            yield run

    def log_run_config(
        self,
        options: GenerationOptions,
        max_retries: int,
        judge_key: str,
    ) -> None:
        """Log the evaluation configuration as parameters."""
        mlflow.log_params({
            "judge": judge_key,
            "max_retries": max_retries,
            "max_tokens": options.max_tokens,
            "temperature": options.temperature,
            "seed": options.seed if options.has_seed else "none",
        })

    def log_model_summary(self, summary: "ModelSummary") -> None:
        """
        Log the aggregate metrics of one model.

        Args:
            summary: ModelSummary produced by the evaluation runner
        """
        mlflow.log_params({"model": summary.model_key})
        mlflow.log_metrics({
            "total_items": summary.total,
            "executed": summary.executed,
            "failed": summary.failed,
            "execution_rate": summary.execution_rate,
            "result_matches": summary.result_matches,
            "result_match_rate": summary.result_match_rate,
            "unscored": summary.unscored,
            "avg_attempts": summary.avg_attempts,
        })
        for verdict, count in summary.verdicts.items():
            mlflow.log_metric(f"verdict_{verdict}", count)

    def log_dict(self, data: dict[str, Any], filename: str) -> None:
        """
        Log a dictionary as a JSON artifact.

        Args:
            data: Dictionary to log
            filename: Name for the artifact file
        """
        mlflow.log_dict(data, filename)
