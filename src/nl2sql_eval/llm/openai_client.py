"""
OpenAI-compatible LLM
=====================

Chat completions against OpenAI or any server speaking its API
(Ollama, Groq, vLLM, ...).
"""

import time

import openai
import structlog

from nl2sql_eval import config
from nl2sql_eval.errors import ConfigurationError, ModelInvocationError
from nl2sql_eval.llm.base import LLMInterface
from nl2sql_eval.models import GenerationOptions, LLMResponse, ModelCapabilities

logger = structlog.get_logger(__name__)


class OpenAICompatibleLLM(LLMInterface):
    """LLM client for the OpenAI chat completions API.

    When ``base_url`` is given the client talks to that server instead of
    api.openai.com; Ollama accepts any API key so one is filled in for it.
    """

    def __init__(
        self,
        model: str,
        provider: str = "OpenAI",
        api_model: str | None = None,
        base_url: str | None = None,
        api_key: str | None = None,
        capabilities: ModelCapabilities | None = None,
    ) -> None:
        self.provider = provider
        self.model = model
        self.api_model = api_model or model
        self.base_url = base_url
        self.capabilities = capabilities or ModelCapabilities()

        if base_url is None:
            api_key = api_key or config.OPENAI_API_KEY
            if not api_key:
                raise ConfigurationError("OPENAI_API_KEY not found in environment")
        else:
            api_key = api_key or config.OLLAMA_API_KEY

        self.client = openai.OpenAI(api_key=api_key, base_url=base_url)
        logger.debug(
            "openai_client_created",
            provider=provider,
            model=self.api_model,
            base_url=base_url or "default",
        )

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
            response = self.client.chat.completions.create(**kwargs)
        except openai.OpenAIError as exc:
            raise ModelInvocationError(str(exc), self.provider, self.model) from exc
        elapsed_ms = (time.perf_counter() - start) * 1000

        if not response.choices:
            raise ModelInvocationError("Response contained no choices", self.provider, self.model)

        return LLMResponse(
            content=response.choices[0].message.content or "",
            model=response.model or self.api_model,
            tokens_used=response.usage.total_tokens if response.usage else 0,
            elapsed_ms=elapsed_ms,
        )
