"""
Errors
======

Exception taxonomy for the evaluation harness.

SQL execution failures are not exceptions: they are returned as
``ExecutionResult.error`` and fed back into the repair loop.
"""


class EvaluationError(Exception):
    """Base class for all harness errors."""


class ConfigurationError(EvaluationError):
    """Setup mistake (unknown model key, missing credentials). Fatal for the run."""


class ModelInvocationError(EvaluationError):
    """A model provider call failed (network, rate limit, malformed response)."""

    def __init__(self, message: str, provider: str = "", model: str = "") -> None:
        super().__init__(message)
        self.provider = provider
        self.model = model


class JudgeProtocolError(EvaluationError):
    """The judge model answered outside the closed verdict vocabulary."""

    def __init__(self, response: str) -> None:
        super().__init__(f"Unrecognised judge response: {response!r}")
        self.response = response
