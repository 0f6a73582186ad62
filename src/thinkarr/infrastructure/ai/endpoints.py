"""LLM endpoint configuration, model selection and cached OpenAI clients.

Any OpenAI-compatible server can be configured (OpenAI, LiteLLM, Ollama, ...).
Endpoints live in the config store as a JSON list under ``llm.endpoints``; the
older single-endpoint keys ``llm.baseUrl`` / ``llm.apiKey`` / ``llm.model`` are
still honoured when no list is stored.
"""

from __future__ import annotations

from dataclasses import dataclass

from openai import AsyncOpenAI
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from thinkarr.infrastructure.database.repositories.app_config import ConfigStore
from thinkarr.shared.exceptions import LlmNotConfiguredError
from thinkarr.shared.logging import get_logger

logger = get_logger(__name__)

ENDPOINTS_KEY = "llm.endpoints"
LEGACY_ENDPOINT_ID = "default"
SELECTOR_SEPARATOR = ":"


class LlmEndpoint(BaseModel):
    """One configured OpenAI-compatible endpoint."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    name: str = ""
    base_url: str = Field(alias="baseUrl")
    api_key: str = Field(default="", alias="apiKey")
    model: str
    enabled: bool = True

    @property
    def selector(self) -> str:
        """The ``<endpointId>:<model>`` id clients use to pick this endpoint."""
        return f"{self.id}{SELECTOR_SEPARATOR}{self.model}"


_endpoint_list = TypeAdapter(list[LlmEndpoint])


@dataclass(frozen=True)
class ResolvedModel:
    endpoint: LlmEndpoint
    model: str


async def load_endpoints(config_store: ConfigStore) -> list[LlmEndpoint]:
    """Read configured endpoints, falling back to the legacy single endpoint."""
    values = await config_store.get_many(
        [ENDPOINTS_KEY, "llm.baseUrl", "llm.apiKey", "llm.model"]
    )

    raw = values[ENDPOINTS_KEY]
    if raw:
        try:
            endpoints = _endpoint_list.validate_json(raw)
        except PydanticValidationError as e:
            logger.warning("llm_endpoints_invalid", error_count=e.error_count())
            endpoints = []
        if endpoints:
            return endpoints

    base_url = values["llm.baseUrl"]
    model = values["llm.model"]
    if base_url and model:
        return [
            LlmEndpoint(
                id=LEGACY_ENDPOINT_ID,
                name="Default",
                base_url=base_url,
                api_key=values["llm.apiKey"] or "",
                model=model,
            )
        ]
    return []


def enabled_endpoints(endpoints: list[LlmEndpoint]) -> list[LlmEndpoint]:
    return [ep for ep in endpoints if ep.enabled]


def resolve_model(selector: str | None, endpoints: list[LlmEndpoint]) -> ResolvedModel:
    """Pick the endpoint and model for a turn.

    ``selector`` is either ``"<endpointId>:<model>"`` or a bare model name for
    the default endpoint. The default endpoint is the first enabled one.

    Only the text before the first ``:`` is matched against endpoint ids, so a
    tagged model such as ``llama3:8b`` has to be qualified
    (``"local:llama3:8b"``). Unqualified, ``llama3`` is taken as an endpoint
    id and, like any unknown or disabled endpoint, resolves to the default
    endpoint with its configured model.

    Raises:
        LlmNotConfiguredError: No enabled endpoint exists.
    """
    enabled = enabled_endpoints(endpoints)
    if not enabled:
        raise LlmNotConfiguredError()

    default = enabled[0]
    if not selector:
        return ResolvedModel(endpoint=default, model=default.model)

    if SELECTOR_SEPARATOR not in selector:
        return ResolvedModel(endpoint=default, model=selector)

    endpoint_id, _, model = selector.partition(SELECTOR_SEPARATOR)
    for endpoint in enabled:
        if endpoint.id == endpoint_id:
            return ResolvedModel(endpoint=endpoint, model=model or endpoint.model)

    logger.info("llm_selector_unknown_endpoint", endpoint_id=endpoint_id)
    return ResolvedModel(endpoint=default, model=default.model)


class LlmClientPool:
    """AsyncOpenAI clients cached per endpoint id.

    A cached client is replaced when the endpoint's key or base URL changes,
    e.g. after the admin rotates a key in settings.
    """

    def __init__(self, timeout: float = 120.0) -> None:
        self._timeout = timeout
        self._clients: dict[str, tuple[tuple[str, str], AsyncOpenAI]] = {}

    def get(self, endpoint: LlmEndpoint) -> AsyncOpenAI:
        fingerprint = (endpoint.base_url, endpoint.api_key)
        cached = self._clients.get(endpoint.id)
        if cached is not None and cached[0] == fingerprint:
            return cached[1]

        if cached is not None:
            logger.info("llm_client_rebuilt", endpoint_id=endpoint.id)

        client = AsyncOpenAI(
            base_url=endpoint.base_url,
            # Local servers accept any key, the SDK refuses an empty one
            api_key=endpoint.api_key or "not-set",
            timeout=self._timeout,
        )
        self._clients[endpoint.id] = (fingerprint, client)
        return client

    async def close(self) -> None:
        for _, client in self._clients.values():
            await client.close()
        self._clients.clear()
