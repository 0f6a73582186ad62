"""Tool registry: named, schema-described operations the model may invoke.

Each tool has a pydantic input model. The model's JSON schema is what the LLM
sees; the same model validates the arguments the LLM sends back.
"""

import json
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from thinkarr.observability.metrics import TOOL_EXECUTIONS
from thinkarr.shared.exceptions import ThinkarrError, ToolConflictError
from thinkarr.shared.logging import get_logger

logger = get_logger(__name__)

ToolHandler = Callable[[Any], Awaitable[Any]]

# Keys pydantic emits that are noise for a function-calling schema
_SCHEMA_META_KEYS = ("$schema", "$defs", "title")

# Handler results may be dataclasses, models or datetimes
_RESULT_ADAPTER: TypeAdapter[Any] = TypeAdapter(Any)


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    input_model: type[BaseModel]
    handler: ToolHandler


def _resolve_refs(schema: Any, defs: dict[str, Any]) -> Any:
    """Recursively resolve $ref references in a JSON schema."""
    if isinstance(schema, dict):
        if "$ref" in schema:
            # "#/$defs/Foo" -> "Foo"
            ref_name = schema["$ref"].split("/")[-1]
            if ref_name in defs:
                resolved = _resolve_refs(defs[ref_name], defs)
                # Keep sibling keys like description/default
                for key, value in schema.items():
                    if key != "$ref":
                        resolved[key] = value
                return resolved
            return schema
        return {k: _resolve_refs(v, defs) for k, v in schema.items()}
    if isinstance(schema, list):
        return [_resolve_refs(item, defs) for item in schema]
    return schema


def parameters_schema(input_model: type[BaseModel]) -> dict[str, Any]:
    """JSON schema of an input model, flattened for function calling."""
    schema = input_model.model_json_schema()
    defs = schema.get("$defs", {})
    resolved: dict[str, Any] = _resolve_refs(schema, defs)
    for key in _SCHEMA_META_KEYS:
        resolved.pop(key, None)
    resolved.setdefault("properties", {})
    return resolved


def _error(message: str) -> str:
    return json.dumps({"error": message})


class ToolRegistry:
    """Name -> tool mapping with schema listing and safe execution.

    ``execute`` never raises: every failure becomes an ``{"error": ...}``
    payload so the model can read it and recover.
    """

    def __init__(self) -> None:
        self._tools: dict[str, ToolDefinition] = {}
        self._populated = False

    def register(
        self,
        name: str,
        description: str,
        input_model: type[BaseModel],
        handler: ToolHandler,
    ) -> None:
        if name in self._tools:
            raise ToolConflictError(name)
        self._tools[name] = ToolDefinition(
            name=name,
            description=description,
            input_model=input_model,
            handler=handler,
        )
        logger.debug("tool_registered", tool=name)

    @property
    def populated(self) -> bool:
        """Whether the one-time tool bootstrap has already run."""
        return self._populated

    def mark_populated(self) -> None:
        self._populated = True

    def has_any(self) -> bool:
        return bool(self._tools)

    def names(self) -> list[str]:
        return list(self._tools)

    def get(self, name: str) -> ToolDefinition | None:
        return self._tools.get(name)

    def list_schemas(self) -> list[dict[str, Any]]:
        """All tools in OpenAI function-calling format."""
        return [
            {
                "type": "function",
                "function": {
                    "name": tool.name,
                    "description": tool.description,
                    "parameters": parameters_schema(tool.input_model),
                },
            }
            for tool in self._tools.values()
        ]

    async def execute(self, name: str, arguments_json: str) -> str:
        """Run a tool with JSON-encoded arguments and return JSON text."""
        tool = self._tools.get(name)
        if tool is None:
            logger.warning("tool_unknown", tool=name)
            TOOL_EXECUTIONS.labels(tool="unknown", outcome="error").inc()
            return _error(f"Unknown tool: {name}")

        try:
            arguments = json.loads(arguments_json or "{}")
        except json.JSONDecodeError:
            logger.warning("tool_arguments_invalid_json", tool=name)
            TOOL_EXECUTIONS.labels(tool=name, outcome="error").inc()
            return _error(f"Invalid JSON arguments for {name}")

        if not isinstance(arguments, dict):
            TOOL_EXECUTIONS.labels(tool=name, outcome="error").inc()
            return _error(f"Arguments for {name} must be a JSON object")

        try:
            params = tool.input_model.model_validate(arguments)
        except PydanticValidationError as e:
            logger.info("tool_arguments_rejected", tool=name, error_count=e.error_count())
            TOOL_EXECUTIONS.labels(tool=name, outcome="error").inc()
            return json.dumps(
                {
                    "error": f"Invalid arguments for {name}",
                    "details": _RESULT_ADAPTER.dump_python(
                        e.errors(include_url=False, include_context=False), mode="json"
                    ),
                }
            )

        try:
            result = await tool.handler(params)
        except ThinkarrError as e:
            logger.warning("tool_failed", tool=name, error=e.message)
            TOOL_EXECUTIONS.labels(tool=name, outcome="error").inc()
            return _error(e.message)
        except Exception as e:
            logger.exception("tool_crashed", tool=name)
            TOOL_EXECUTIONS.labels(tool=name, outcome="error").inc()
            return _error(str(e) or "Tool execution failed")

        try:
            payload = json.dumps(_RESULT_ADAPTER.dump_python(result, mode="json"))
        except (TypeError, ValueError) as e:
            logger.error("tool_result_unserializable", tool=name, error=str(e))
            TOOL_EXECUTIONS.labels(tool=name, outcome="error").inc()
            return _error(f"{name} returned a result that cannot be encoded as JSON")

        logger.info("tool_executed", tool=name)
        TOOL_EXECUTIONS.labels(tool=name, outcome="ok").inc()
        return payload
