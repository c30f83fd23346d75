"""
Cohere LLM
==========

Command models through the Cohere v2 chat API.
"""

import time

import cohere
from cohere.core.api_error import ApiError

from nl2sql_eval import config
from nl2sql_eval.errors import ConfigurationError, ModelInvocationError
from nl2sql_eval.llm.base import LLMInterface
from nl2sql_eval.models import GenerationOptions, LLMResponse, ModelCapabilities


class CohereLLM(LLMInterface):
    """LLM client for Cohere models. Seed forwarded."""

    provider = "Cohere"

    def __init__(
        self,
        model: str,
        api_model: str | None = None,
        api_key: str | None = None,
        capabilities: ModelCapabilities | None = None,
    ) -> None:
        self.model = model
        self.api_model = api_model or model
        self.capabilities = capabilities or ModelCapabilities()

        api_key = api_key or config.COHERE_API_KEY
        if not api_key:
            raise ConfigurationError("COHERE_API_KEY not found in environment")
        self.client = cohere.ClientV2(api_key=api_key)

    def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        options: GenerationOptions | None = None,
    ) -> LLMResponse:
        options = options or GenerationOptions()

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        kwargs = {
            "model": self.api_model,
            "messages": messages,
            "max_tokens": options.max_tokens,
            "temperature": options.temperature,
        }
        if options.has_seed:
            kwargs["seed"] = options.seed

        start = time.perf_counter()
        try:
            response = self.client.chat(**kwargs)
        except ApiError as exc:
            raise ModelInvocationError(str(exc), self.provider, self.model) from exc
        elapsed_ms = (time.perf_counter() - start) * 1000

        content = response.message.content or []
        text = "".join(item.text for item in content if getattr(item, "type", "text") == "text")

        tokens_used = 0
        usage = response.usage
        if usage and usage.tokens:
            tokens_used = int((usage.tokens.input_tokens or 0) + (usage.tokens.output_tokens or 0))

        return LLMResponse(
            content=text,
            model=self.api_model,
            tokens_used=tokens_used,
            elapsed_ms=elapsed_ms,
        )
