"""
Gemini LLM
==========

Google Gemini models through the google-genai SDK.
"""

import time

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from nl2sql_eval import config
from nl2sql_eval.errors import ConfigurationError, ModelInvocationError
from nl2sql_eval.llm.base import LLMInterface
from nl2sql_eval.models import GenerationOptions, LLMResponse, ModelCapabilities


class GeminiLLM(LLMInterface):
    """LLM client for Google AI models. Seed forwarded."""

    provider = "Google AI"

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

        api_key = api_key or config.GEMINI_API_KEY
        if not api_key:
            raise ConfigurationError("GEMINI_API_KEY not found in environment")
        self.client = genai.Client(api_key=api_key)

    def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        options: GenerationOptions | None = None,
    ) -> LLMResponse:
        options = options or GenerationOptions()

        generation_config = types.GenerateContentConfig(
            system_instruction=system_prompt,
            max_output_tokens=options.max_tokens,
            temperature=options.temperature,
            seed=options.seed if options.has_seed else None,
        )

        start = time.perf_counter()
        try:
            response = self.client.models.generate_content(
                model=self.api_model,
                contents=prompt,
                config=generation_config,
            )
        except genai_errors.APIError as exc:
            raise ModelInvocationError(str(exc), self.provider, self.model) from exc
        elapsed_ms = (time.perf_counter() - start) * 1000

        # Blocked or empty candidates have no text
        if response.text is None:
            raise ModelInvocationError("Response contained no text", self.provider, self.model)

        usage = response.usage_metadata
        return LLMResponse(
            content=response.text,
            model=self.api_model,
            tokens_used=(usage.total_token_count or 0) if usage else 0,
            elapsed_ms=elapsed_ms,
        )
