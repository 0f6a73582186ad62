"""LLM endpoint configuration and clients."""

from thinkarr.infrastructure.ai.endpoints import (
    LlmClientPool,
    LlmEndpoint,
    ResolvedModel,
    load_endpoints,
    resolve_model,
)

__all__ = [
    "LlmClientPool",
    "LlmEndpoint",
    "ResolvedModel",
    "load_endpoints",
    "resolve_model",
]
