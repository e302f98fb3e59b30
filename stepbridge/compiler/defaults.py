"""Default control values declared by a JSON schema."""

import copy
from typing import Any, Dict

from .template import compile_controls


def extract_defaults(schema: Dict[str, Any]) -> Dict[str, Any]:
    """
    Collect declared ``default`` values from an object schema.

    Nested objects without their own default contribute their nested
    defaults, so ``{"a": {"properties": {"b": {"default": 1}}}}`` yields
    ``{"a": {"b": 1}}``.
    """
    defaults: Dict[str, Any] = {}
    properties = schema.get("properties") if isinstance(schema, dict) else None
    if not isinstance(properties, dict):
        return defaults

    for name, subschema in properties.items():
        if not isinstance(subschema, dict):
            continue
        if "default" in subschema:
            defaults[name] = copy.deepcopy(subschema["default"])
            continue
        nested = extract_defaults(subschema)
        if nested:
            defaults[name] = nested
    return defaults


def compile_defaults(schema: Dict[str, Any], context: Dict[str, Any]) -> Dict[str, Any]:
    """Extract defaults and render those that are template strings."""
    return compile_controls(extract_defaults(schema), context)
