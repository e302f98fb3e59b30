"""
StepBridge Validators Package

Schema adapters are tried in a fixed order, first claim wins:

1. pydantic model classes, the class-based family
2. JSON Schema mappings, the structural family
3. msgspec structs, the optional third-party family (installed as the
   ``msgspec`` extra and only imported once used)
"""

from typing import Any, Dict, List

from ..errors import InvalidSchemaError
from .base import SchemaAdapter, ValidateResult, ValidationIssue, inline_refs
from .json_schema import JsonSchemaAdapter
from .msgspec_struct import MsgspecStructAdapter
from .pydantic_model import PydanticModelAdapter

ADAPTERS: List[SchemaAdapter] = [
    PydanticModelAdapter(),
    JsonSchemaAdapter(),
    MsgspecStructAdapter(),
]


def get_adapter(schema: Any) -> SchemaAdapter:
    for adapter in ADAPTERS:
        if adapter.can_handle(schema):
            return adapter
    raise InvalidSchemaError(schema)


def validate_data(schema: Any, data: Any) -> ValidateResult:
    """Validate ``data`` against any supported schema format."""
    return get_adapter(schema).validate(data, schema)


def transform_schema(schema: Any) -> Dict[str, Any]:
    """Render any supported schema format as JSON Schema."""
    return get_adapter(schema).transform_to_json_schema(schema)


__all__ = [
    "ADAPTERS",
    "SchemaAdapter",
    "ValidateResult",
    "ValidationIssue",
    "JsonSchemaAdapter",
    "MsgspecStructAdapter",
    "PydanticModelAdapter",
    "get_adapter",
    "inline_refs",
    "transform_schema",
    "validate_data",
]
