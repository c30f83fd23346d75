"""Evaluation runner and command line entry point."""

from mlops.eval.benchmark import EvaluationReport, EvaluationRunner, ModelSummary, main

__all__ = ["EvaluationReport", "EvaluationRunner", "ModelSummary", "main"]
