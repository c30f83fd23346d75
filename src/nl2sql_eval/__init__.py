"""
NL-to-SQL Evaluation
====================

Benchmarks how well LLMs translate natural language questions into SQL for a
fixed e-commerce schema, repairing failed queries with error feedback and
scoring the result with an LLM equivalence judge.
"""

from nl2sql_eval.comparator import canonicalize_result, results_match, serialize_rows
from nl2sql_eval.errors import (
    ConfigurationError,
    EvaluationError,
    JudgeProtocolError,
    ModelInvocationError,
)
from nl2sql_eval.executor import SQLExecutor, SQLiteExecutor
from nl2sql_eval.generator import SQLGenerator
from nl2sql_eval.judge import EquivalenceJudge, parse_verdict
from nl2sql_eval.llm import LLMInterface, MockLLM, ModelRegistry, ModelSpec
from nl2sql_eval.models import (
    NO_SEED,
    EquivalenceVerdict,
    ExecutionResult,
    FailedAttempt,
    GenerationOptions,
    GenerationResult,
    GroundTruthItem,
    ItemEvaluation,
    LLMResponse,
    ModelCapabilities,
    WeightsAccess,
)
from nl2sql_eval.prompts import build_prompt, build_system_prompt

__version__ = "0.1.0"

__all__ = [
    # Models
    "NO_SEED",
    "EquivalenceVerdict",
    "ExecutionResult",
    "FailedAttempt",
    "GenerationOptions",
    "GenerationResult",
    "GroundTruthItem",
    "ItemEvaluation",
    "LLMResponse",
    "ModelCapabilities",
    "WeightsAccess",
    # Errors
    "EvaluationError",
    "ConfigurationError",
    "ModelInvocationError",
    "JudgeProtocolError",
    # Core
    "SQLGenerator",
    "EquivalenceJudge",
    "parse_verdict",
    "SQLExecutor",
    "SQLiteExecutor",
    "build_prompt",
    "build_system_prompt",
    "serialize_rows",
    "canonicalize_result",
    "results_match",
    # LLM
    "LLMInterface",
    "MockLLM",
    "ModelRegistry",
    "ModelSpec",
]
