"""Available LLM models."""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from thinkarr.api.deps import ConfigStoreDep, CurrentUser
from thinkarr.infrastructure.ai.endpoints import enabled_endpoints, load_endpoints

router = APIRouter(prefix="/api/models", tags=["Models"])


class ModelOption(BaseModel):
    id: str
    endpoint_id: str = Field(serialization_alias="endpointId")
    endpoint_name: str = Field(serialization_alias="endpointName")
    model: str
    label: str


class ModelsResponse(BaseModel):
    models: list[ModelOption]
    default_model: str = Field(serialization_alias="defaultModel")


@router.get("", response_model=ModelsResponse, response_model_by_alias=True)
async def list_models(user: CurrentUser, config_store: ConfigStoreDep) -> ModelsResponse:
    """Enabled endpoints as ``<endpointId>:<model>`` selectors."""
    endpoints = await load_endpoints(config_store)
    enabled = enabled_endpoints(endpoints)
    multiple = len(endpoints) > 1

    models = [
        ModelOption(
            id=ep.selector,
            endpoint_id=ep.id,
            endpoint_name=ep.name,
            model=ep.model,
            label=f"{ep.name} - {ep.model}" if multiple else ep.model,
        )
        for ep in enabled
    ]
    return ModelsResponse(
        models=models,
        default_model=models[0].id if models else "",
    )
