"""
Model Registry
==============

Explicit registry of the models under evaluation, keyed by
``"<provider> : <model>"``. Clients are constructed lazily, once, on first
lookup and then reused for the rest of the run.
"""

from dataclasses import dataclass
from functools import partial
from typing import Callable

import structlog

from nl2sql_eval import config
from nl2sql_eval.errors import ConfigurationError
from nl2sql_eval.llm.anthropic_client import AnthropicLLM
from nl2sql_eval.llm.base import LLMInterface, make_key
from nl2sql_eval.llm.cohere_client import CohereLLM
from nl2sql_eval.llm.gemini_client import GeminiLLM
from nl2sql_eval.llm.openai_client import OpenAICompatibleLLM
from nl2sql_eval.models import ModelCapabilities, WeightsAccess

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ModelSpec:
    """How to build one model client, plus what we know about the model."""

    provider: str
    model: str
    factory: Callable[[], LLMInterface]
    capabilities: ModelCapabilities = ModelCapabilities()

    @property
    def key(self) -> str:
        return make_key(self.provider, self.model)


class ModelRegistry:
    """Lookup table of model clients, passed explicitly to whoever needs one."""

    def __init__(self, specs: list[ModelSpec] | None = None) -> None:
        self._specs: dict[str, ModelSpec] = {}
        self._clients: dict[str, LLMInterface] = {}
        for spec in specs or []:
            self.register(spec)

    def register(self, spec: ModelSpec) -> None:
        if spec.key in self._specs:
            raise ConfigurationError(f"Model already registered: '{spec.key}'")
        self._specs[spec.key] = spec

    def register_client(self, client: LLMInterface) -> None:
        """Register an already constructed client (handy for tests and mocks)."""
        self.register(
            ModelSpec(
                provider=client.provider,
                model=client.model,
                factory=lambda: client,
                capabilities=client.capabilities,
            )
        )

    def __contains__(self, key: str) -> bool:
        return key in self._specs

    def __len__(self) -> int:
        return len(self._specs)

    def keys(self) -> list[str]:
        return list(self._specs)

    def specs(self) -> list[ModelSpec]:
        return list(self._specs.values())

    def get(self, key: str) -> LLMInterface:
        """
        Return the client for ``key``, constructing it on first use.

        Raises:
            ConfigurationError: If the key is unknown or the client cannot be built
        """
        if key in self._clients:
            return self._clients[key]

        spec = self._specs.get(key)
        if spec is None:
            raise ConfigurationError(
                f"Unknown model '{key}'. Known models: {', '.join(self._specs) or 'none'}"
            )

        client = spec.factory()
        self._clients[key] = client
        logger.info("model_client_initialised", model_key=key)
        return client

    def get_client(self, provider: str, model: str) -> LLMInterface:
        return self.get(make_key(provider, model))


def _groq(model: str, capabilities: ModelCapabilities) -> LLMInterface:
    if not config.GROQ_API_KEY:
        raise ConfigurationError("GROQ_API_KEY not found in environment")
    return OpenAICompatibleLLM(
        model=model,
        provider="Groq",
        base_url=config.GROQ_BASE_URL,
        api_key=config.GROQ_API_KEY,
        capabilities=capabilities,
    )


def build_default_registry(local_base_url: str | None = None) -> ModelRegistry:
    """
    Build the catalogue of models the benchmark knows how to evaluate.

    Args:
        local_base_url: OpenAI-compatible endpoint of the local Ollama server

    Returns:
        ModelRegistry with one spec per model; nothing is constructed yet
    """
    base_url = local_base_url or config.LOCAL_BASE_URL
    registry = ModelRegistry()

    # Open weights models served by a local Ollama instance
    local_models = [
        # (model name, ollama tag, parameters, context window)
        ("llama3", "llama3:instruct", "8b", 8192),
        ("codestral-22B-v0.1", "codestral", "22b", 32768),
        ("phi3:mini", "phi3:mini", "3.8b", 4096),
        ("phi3:medium", "phi3:medium", "14b", 4096),
        ("phi3:medium-128k", "phi3:medium-128k", "14b", 131072),
    ]
    for name, tag, params, window in local_models:
        caps = ModelCapabilities(WeightsAccess.OPEN, params, window)
        registry.register(
            ModelSpec(
                provider="Ollama/OpenAI",
                model=name,
                capabilities=caps,
                factory=partial(
                    OpenAICompatibleLLM,
                    model=name,
                    provider="Ollama/OpenAI",
                    api_model=tag,
                    base_url=base_url,
                    capabilities=caps,
                ),
            )
        )

    caps = ModelCapabilities(WeightsAccess.OPEN, "104b", 131072)
    registry.register(
        ModelSpec(
            provider="Cohere",
            model="Command-R+",
            capabilities=caps,
            factory=partial(CohereLLM, model="Command-R+", api_model="command-r-plus", capabilities=caps),
        )
    )

    for name, params in (("llama3-8b-8192", "8b"), ("llama3-70b-8192", "70b")):
        caps = ModelCapabilities(WeightsAccess.OPEN, params, 8192)
        registry.register(
            ModelSpec(provider="Groq", model=name, capabilities=caps, factory=partial(_groq, name, caps))
        )

    for name in ("claude-3-haiku-20240307", "claude-3-sonnet-20240229"):
        caps = ModelCapabilities(WeightsAccess.CLOSED, "?", 200000)
        registry.register(
            ModelSpec(
                provider="Anthropic",
                model=name,
                capabilities=caps,
                factory=partial(AnthropicLLM, model=name, capabilities=caps),
            )
        )

    caps = ModelCapabilities(WeightsAccess.CLOSED, "?", 1048576)
    registry.register(
        ModelSpec(
            provider="Google AI",
            model="Gemini Flash 1.5",
            capabilities=caps,
            factory=partial(
                GeminiLLM, model="Gemini Flash 1.5", api_model="gemini-1.5-flash-001", capabilities=caps
            ),
        )
    )

    caps = ModelCapabilities(WeightsAccess.CLOSED, "?", 128000)
    registry.register(
        ModelSpec(
            provider="OpenAI",
            model="gpt-4-turbo-preview",
            capabilities=caps,
            factory=partial(OpenAICompatibleLLM, model="gpt-4-turbo-preview", capabilities=caps),
        )
    )

    return registry
