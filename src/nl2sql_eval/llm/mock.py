"""
Mock LLM
========

Mock LLM implementation for testing and offline runs.
"""

from nl2sql_eval.llm.base import LLMInterface
from nl2sql_eval.models import GenerationOptions, LLMResponse


class MockLLM(LLMInterface):
    """
    Mock LLM for demonstration and testing purposes.

    Every call is recorded in ``calls`` as ``(system_prompt, prompt, options)``
    so tests can assert on call counts and prompt contents.
    """

    provider = "Mock"

    def __init__(
        self,
        responses: dict[str, list[str]] | None = None,
        default: str = "SELECT * FROM unknown_table",
        errors: list[Exception] | None = None,
        model: str = "mock-llm-v1",
    ) -> None:
        """
        Initialize with canned responses.

        Args:
            responses: Dict mapping prompt substrings to list of SQL attempts.
                       Each attempt is returned in sequence (for testing correction).
            default: Response used when no key matches
            errors: Exceptions raised, one per call, before any response is returned
            model: Model name reported in responses
        """
        self.responses = responses or {}
        self.default = default
        self.errors = list(errors or [])
        self.model = model
        self.call_counts: dict[str, int] = {}
        self.calls: list[tuple[str | None, str, GenerationOptions | None]] = []

    def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        options: GenerationOptions | None = None,
    ) -> LLMResponse:
        """
        Generate a mock SQL response.

        Matches prompt against configured responses and returns
        successive attempts to simulate correction behavior.
        """
        self.calls.append((system_prompt, prompt, options))

        if self.errors:
            raise self.errors.pop(0)

        for key, sql_attempts in self.responses.items():
            if key.lower() in prompt.lower():
                count = self.call_counts.get(key, 0)
                self.call_counts[key] = count + 1

                # Return successive attempts (simulating correction)
                attempt_idx = min(count, len(sql_attempts) - 1)
                return LLMResponse(content=sql_attempts[attempt_idx], model=self.model)

        return LLMResponse(content=self.default, model=self.model)

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def reset(self) -> None:
        """Reset call history for fresh test runs."""
        self.call_counts = {}
        self.calls = []
