"""
Base LLM Interface
==================

Abstract interface for LLM providers.
"""

from abc import ABC, abstractmethod

from nl2sql_eval.models import GenerationOptions, LLMResponse, ModelCapabilities


def make_key(provider: str, model: str) -> str:
    """Registry key for a provider/model pair, e.g. ``"Groq : llama3-8b-8192"``."""
    return f"{provider} : {model}"


class LLMInterface(ABC):
    """Abstract interface for LLM providers.

    Subclasses set ``provider`` and ``model`` and implement ``generate``.
    """

    provider: str = "unknown"
    model: str = "unknown"
    capabilities: ModelCapabilities = ModelCapabilities()

    @property
    def key(self) -> str:
        return make_key(self.provider, self.model)

    @abstractmethod
    def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        options: GenerationOptions | None = None,
    ) -> LLMResponse:
        """
        Generate a single completion.

        Args:
            prompt: The user prompt/question
            system_prompt: Optional system prompt for context
            options: Generation options (max tokens, temperature, seed)

        Returns:
            LLMResponse with generated content

        Raises:
            ModelInvocationError: If the provider call fails
        """
        pass
