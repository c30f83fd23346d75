"""
Unit Tests for the Model Registry
=================================
"""

import pytest

from nl2sql_eval import config
from nl2sql_eval.errors import ConfigurationError
from nl2sql_eval.llm.base import make_key
from nl2sql_eval.llm.cohere_client import CohereLLM
from nl2sql_eval.llm.mock import MockLLM
from nl2sql_eval.llm.openai_client import OpenAICompatibleLLM
from nl2sql_eval.llm.registry import ModelRegistry, ModelSpec, build_default_registry
from nl2sql_eval.models import WeightsAccess


class TestModelRegistry:
    """Tests for registering and looking up clients."""

    def test_key_format(self) -> None:
        assert make_key("Groq", "llama3-8b-8192") == "Groq : llama3-8b-8192"
        assert MockLLM(model="m").key == "Mock : m"

    def test_register_client(self) -> None:
        llm = MockLLM(model="m")
        registry = ModelRegistry()
        registry.register_client(llm)

        assert "Mock : m" in registry
        assert registry.get("Mock : m") is llm
        assert registry.get_client("Mock", "m") is llm

    def test_unknown_key_is_configuration_error(self) -> None:
        registry = ModelRegistry()
        with pytest.raises(ConfigurationError, match="Unknown model"):
            registry.get("Nope : nothing")

    def test_duplicate_registration_rejected(self) -> None:
        registry = ModelRegistry()
        registry.register_client(MockLLM(model="m"))
        with pytest.raises(ConfigurationError):
            registry.register_client(MockLLM(model="m"))

    def test_client_constructed_once(self) -> None:
        """Factories run lazily, once, and the client is reused."""
        built = []

        def factory() -> MockLLM:
            built.append(1)
            return MockLLM(model="lazy")

        registry = ModelRegistry([ModelSpec(provider="Mock", model="lazy", factory=factory)])
        assert built == []

        first = registry.get("Mock : lazy")
        second = registry.get("Mock : lazy")
        assert first is second
        assert built == [1]

    def test_registries_are_independent(self) -> None:
        one, two = ModelRegistry(), ModelRegistry()
        one.register_client(MockLLM(model="m"))
        assert "Mock : m" not in two


class TestDefaultRegistry:
    """Tests for the built-in model catalogue."""

    def test_catalogue_keys(self) -> None:
        registry = build_default_registry("http://localhost:11434/v1")
        keys = registry.keys()

        assert "Ollama/OpenAI : llama3" in keys
        assert "Groq : llama3-8b-8192" in keys
        assert "Anthropic : claude-3-haiku-20240307" in keys
        assert "Google AI : Gemini Flash 1.5" in keys
        assert "OpenAI : gpt-4-turbo-preview" in keys

    def test_specs_have_capabilities(self) -> None:
        registry = build_default_registry()
        specs = {spec.key: spec for spec in registry.specs()}

        llama = specs["Ollama/OpenAI : llama3"].capabilities
        assert llama.weights_access == WeightsAccess.OPEN
        assert llama.num_parameters == "8b"
        assert llama.context_window == 8192
        assert specs["Anthropic : claude-3-sonnet-20240229"].capabilities.weights_access == WeightsAccess.CLOSED

    def test_local_model_built_without_credentials(self) -> None:
        """Local models point at the given server and need no API key."""
        registry = build_default_registry("http://example.invalid:11434/v1")
        client = registry.get("Ollama/OpenAI : llama3")

        assert isinstance(client, OpenAICompatibleLLM)
        assert client.api_model == "llama3:instruct"
        assert client.base_url == "http://example.invalid:11434/v1"
        assert client.key == "Ollama/OpenAI : llama3"

    def test_missing_credentials_fail_fast(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(config, "GROQ_API_KEY", None)
        registry = build_default_registry()
        with pytest.raises(ConfigurationError, match="GROQ_API_KEY"):
            registry.get("Groq : llama3-8b-8192")

    def test_cohere_in_catalogue(self) -> None:
        registry = build_default_registry()
        specs = {spec.key: spec for spec in registry.specs()}

        caps = specs["Cohere : Command-R+"].capabilities
        assert caps.weights_access == WeightsAccess.OPEN
        assert caps.num_parameters == "104b"
        assert caps.context_window == 131072

    def test_cohere_client_built_with_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(config, "COHERE_API_KEY", "test-key")
        client = build_default_registry().get("Cohere : Command-R+")

        assert isinstance(client, CohereLLM)
        assert client.api_model == "command-r-plus"

    def test_cohere_without_key_fails_fast(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(config, "COHERE_API_KEY", None)
        with pytest.raises(ConfigurationError, match="COHERE_API_KEY"):
            build_default_registry().get("Cohere : Command-R+")
