"""Translation of OpenAPI schema fragments into argument validation.

The translation is shallow on purpose: only the top-level type (and the
item type of arrays) is enforced. Enums, bounds, nested object shapes and
array lengths are dropped. Values are checked strictly, without coercion
between JSON types.
"""

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, create_model

from ..openapi.models import ParameterSpec, ToolDefinition

BODY_FIELD = "body"
BODY_DESCRIPTION = "Request body data"


class SchemaKind(StrEnum):
    """Closed set of value shapes a parameter can take."""

    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class SchemaRule:
    """Validation rule for one value."""

    kind: SchemaKind
    items: "SchemaRule | None" = None

    def annotation(self) -> Any:
        """Python type pydantic validates against."""
        match self.kind:
            case SchemaKind.STRING:
                return str
            case SchemaKind.NUMBER:
                return int | float
            case SchemaKind.INTEGER:
                return int
            case SchemaKind.BOOLEAN:
                return bool
            case SchemaKind.ARRAY:
                inner = self.items.annotation() if self.items else Any
                return list[inner]
            case SchemaKind.OBJECT:
                return dict[str, Any]
            case _:
                return Any


ANY_RULE = SchemaRule(SchemaKind.UNKNOWN)


def classify(fragment: Any) -> SchemaRule:
    """Translate a raw schema fragment into a rule.

    Missing or malformed fragments, and unrecognised types, accept anything.
    """
    if not isinstance(fragment, dict):
        return ANY_RULE

    match fragment.get("type"):
        case "string":
            return SchemaRule(SchemaKind.STRING)
        case "number":
            return SchemaRule(SchemaKind.NUMBER)
        case "integer":
            return SchemaRule(SchemaKind.INTEGER)
        case "boolean":
            return SchemaRule(SchemaKind.BOOLEAN)
        case "array":
            return SchemaRule(SchemaKind.ARRAY, items=classify(fragment.get("items") or {}))
        case "object":
            return SchemaRule(SchemaKind.OBJECT)
        case _:
            return ANY_RULE


def parameter_field(parameter: ParameterSpec) -> tuple[Any, Any]:
    """Field definition for ``create_model``, aliased to the parameter name."""
    annotation = classify(parameter.schema_).annotation()

    if parameter.required:
        return annotation, Field(..., alias=parameter.name, description=parameter.description)

    return (
        annotation | None if annotation is not Any else Any,
        Field(default=None, alias=parameter.name, description=parameter.description),
    )


def build_arguments_model(tool: ToolDefinition) -> type[BaseModel]:
    """Assemble the pydantic model validating a tool's call arguments.

    Parameters sharing a name collapse to the last declaration. Tools with a
    request body also accept an optional ``body`` and any extra top-level
    fields, which become the body when no explicit one is given.
    """
    by_name: dict[str, ParameterSpec] = {}
    for parameter in tool.parameters:
        by_name[parameter.name] = parameter

    fields: dict[str, Any] = {}
    for index, parameter in enumerate(by_name.values()):
        fields[_field_name(parameter.name, index)] = parameter_field(parameter)

    if tool.has_request_body and BODY_FIELD not in by_name:
        fields["request_body_"] = (
            Any,
            Field(default=None, alias=BODY_FIELD, description=BODY_DESCRIPTION),
        )

    config = ConfigDict(
        extra="allow" if tool.has_request_body else "ignore",
        populate_by_name=False,
        strict=True,
    )
    return create_model(_model_name(tool.name), __config__=config, **fields)


def tool_input_schema(model: type[BaseModel]) -> dict[str, Any]:
    """JSON schema advertised to MCP clients."""
    return model.model_json_schema(by_alias=True)


def validated_arguments(model: type[BaseModel], arguments: dict[str, Any]) -> dict[str, Any]:
    """Validate call arguments and return them keyed by parameter name.

    Raises:
        pydantic.ValidationError: If the arguments do not match the model
    """
    instance = model.model_validate(arguments)
    return instance.model_dump(by_alias=True, exclude_unset=True)


def _field_name(parameter_name: str, index: int) -> str:
    """Python identifier for a parameter; the real name lives in the alias."""
    cleaned = re.sub(r"\W", "_", parameter_name).strip("_")
    return f"p{index}_{cleaned}" if cleaned else f"p{index}"


def _model_name(tool_name: str) -> str:
    return re.sub(r"\W", "_", tool_name) + "_Arguments"
