"""
LLM Module
==========

Pluggable LLM clients for SQL generation and query comparison.
"""

from nl2sql_eval.llm.base import LLMInterface, make_key
from nl2sql_eval.llm.mock import MockLLM
from nl2sql_eval.llm.registry import ModelRegistry, ModelSpec, build_default_registry

__all__ = [
    "LLMInterface",
    "MockLLM",
    "ModelRegistry",
    "ModelSpec",
    "build_default_registry",
    "make_key",
]
