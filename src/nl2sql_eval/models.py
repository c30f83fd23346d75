"""
Data Models
===========

Core data structures for the NL-to-SQL evaluation harness.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

# Sentinel telling the provider to use its own randomness handling
NO_SEED = -1

DEFAULT_MAX_TOKENS = 200


class EquivalenceVerdict(Enum):
    """How closely a candidate query matches the ground truth query.

    The values are the literal tokens the judge model is asked to return.
    """

    NONE = "None"
    FUNCTIONAL = "Functional"
    EXACT = "Exact"


class WeightsAccess(Enum):
    """Whether a model's weights are publicly available."""

    CLOSED = "closed"
    OPEN = "open"


@dataclass(frozen=True)
class GroundTruthItem:
    """A natural-language question with its reference SQL and result."""

    query: str
    sql: str
    result: str


@dataclass(frozen=True)
class FailedAttempt:
    """A generated query that failed to execute."""

    sql: str
    error_message: str


@dataclass(frozen=True)
class GenerationOptions:
    """Options forwarded unchanged to every model call."""

    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float = 0.0
    seed: int = NO_SEED

    @property
    def has_seed(self) -> bool:
        return self.seed != NO_SEED


@dataclass(frozen=True)
class ModelCapabilities:
    """Static facts about a model, used for reporting only."""

    weights_access: WeightsAccess = WeightsAccess.CLOSED
    num_parameters: str = "?"
    context_window: int = 0


@dataclass
class LLMResponse:
    """Response from an LLM call."""

    content: str
    model: str
    tokens_used: int = 0
    elapsed_ms: float = 0.0


@dataclass
class ExecutionResult:
    """Outcome of running one SQL statement."""

    rows: list[dict[str, Any]] = field(default_factory=list)
    columns: list[str] = field(default_factory=list)
    error: Optional[str] = None
    timing_ms: float = 0.0

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass
class GenerationResult:
    """Final result of the generate-execute-repair loop for one question."""

    success: bool
    sql: Optional[str]
    original_query: str
    attempts: int
    failed_attempts: tuple[FailedAttempt, ...]
    rows: list[dict[str, Any]] = field(default_factory=list)
    final_message: str = ""
    failure_reason: Optional[str] = None


@dataclass
class ItemEvaluation:
    """Everything recorded for one (model, ground truth item) pair."""

    model_key: str
    item: GroundTruthItem
    generation: GenerationResult
    verdict: Optional[EquivalenceVerdict] = None
    verdict_error: Optional[str] = None
    serialized_result: Optional[str] = None
    result_match: bool = False

    @property
    def scored(self) -> bool:
        return self.verdict is not None
