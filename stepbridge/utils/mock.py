"""Generate placeholder data that satisfies a JSON schema."""

import copy
from typing import Any, Dict

PLACEHOLDER = "[placeholder]"


def mock_from_schema(schema: Dict[str, Any]) -> Any:
    """
    Build a value matching ``schema``.

    Declared defaults win; otherwise each type gets a fixed placeholder so
    the same schema always produces the same mock.
    """
    if not isinstance(schema, dict):
        return None

    if "default" in schema:
        return copy.deepcopy(schema["default"])
    if "const" in schema:
        return copy.deepcopy(schema["const"])

    for key in ("anyOf", "oneOf"):
        if schema.get(key):
            return mock_from_schema(schema[key][0])
    if schema.get("allOf"):
        merged: Dict[str, Any] = {}
        for branch in schema["allOf"]:
            value = mock_from_schema(branch)
            if isinstance(value, dict):
                merged.update(value)
        return merged

    schema_type = schema.get("type")
    if isinstance(schema_type, list):
        schema_type = next((t for t in schema_type if t != "null"), "null")

    if schema_type == "object" or (schema_type is None and "properties" in schema):
        return {
            key: mock_from_schema(value)
            for key, value in schema.get("properties", {}).items()
        }
    if schema_type == "string":
        if schema.get("enum"):
            return copy.deepcopy(schema["enum"][0])
        return PLACEHOLDER
    if schema_type in ("number", "integer"):
        return 0
    if schema_type == "boolean":
        return False
    if schema_type == "array":
        return []
    if schema.get("enum"):
        return copy.deepcopy(schema["enum"][0])
    return None
