"""
Anthropic LLM
=============

Claude models through the Anthropic Messages API.
"""

import time

import anthropic
import structlog

from nl2sql_eval import config
from nl2sql_eval.errors import ConfigurationError, ModelInvocationError
from nl2sql_eval.llm.base import LLMInterface
from nl2sql_eval.models import GenerationOptions, LLMResponse, ModelCapabilities

logger = structlog.get_logger(__name__)


class AnthropicLLM(LLMInterface):
    """LLM client for Anthropic models. The API has no seed parameter."""

    provider = "Anthropic"

    def __init__(
        self,
        model: str,
        api_key: str | None = None,
        capabilities: ModelCapabilities | None = None,
    ) -> None:
        self.model = model
        self.capabilities = capabilities or ModelCapabilities()

        api_key = api_key or config.ANTHROPIC_API_KEY
        if not api_key:
            raise ConfigurationError("ANTHROPIC_API_KEY not found in environment")
        self.client = anthropic.Anthropic(api_key=api_key)

    def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        options: GenerationOptions | None = None,
    ) -> LLMResponse:
        options = options or GenerationOptions()
        if options.has_seed:
            logger.debug("seed_ignored", provider=self.provider, model=self.model)

        kwargs = {
            "model": self.model,
            "max_tokens": options.max_tokens,
            "temperature": options.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system_prompt:
            kwargs["system"] = system_prompt

        start = time.perf_counter()
        try:
            message = self.client.messages.create(**kwargs)
        except anthropic.AnthropicError as exc:
            raise ModelInvocationError(str(exc), self.provider, self.model) from exc
        elapsed_ms = (time.perf_counter() - start) * 1000

        text = "".join(block.text for block in message.content if block.type == "text")
        return LLMResponse(
            content=text,
            model=message.model,
            tokens_used=message.usage.input_tokens + message.usage.output_tokens,
            elapsed_ms=elapsed_ms,
        )
