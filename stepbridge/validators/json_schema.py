"""JSON Schema adapter backed by ``jsonschema``."""

import copy
from collections.abc import Mapping
from typing import Any, Dict

from jsonschema import Draft202012Validator, validators

from .base import SchemaAdapter, ValidateResult, ValidationIssue, json_pointer

_SCHEMA_KEYWORDS = frozenset({
    "type", "properties", "anyOf", "oneOf", "allOf", "$ref", "enum", "const", "items",
})


def _extend_with_default(validator_class):
    """Fill declared property defaults into the instance while validating."""
    validate_properties = validator_class.VALIDATORS["properties"]

    def set_defaults(validator, properties, instance, schema):
        if validator.is_type(instance, "object"):
            for name, subschema in properties.items():
                if isinstance(subschema, Mapping) and "default" in subschema:
                    instance.setdefault(name, copy.deepcopy(subschema["default"]))

        yield from validate_properties(validator, properties, instance, schema)

    return validators.extend(validator_class, {"properties": set_defaults})


DefaultFillingValidator = _extend_with_default(Draft202012Validator)


class JsonSchemaAdapter(SchemaAdapter):
    """Plain JSON Schema documents given as mappings."""

    usage_reason = "JSON Schema"

    def can_handle(self, schema: Any) -> bool:
        return isinstance(schema, Mapping) and bool(_SCHEMA_KEYWORDS.intersection(schema))

    def _validate(self, data: Any, schema: Any) -> ValidateResult:
        validator = DefaultFillingValidator(dict(schema))
        errors = sorted(validator.iter_errors(data), key=lambda e: json_pointer(e.absolute_path))
        if errors:
            return ValidateResult(
                success=False,
                errors=[
                    ValidationIssue(path=json_pointer(e.absolute_path), message=e.message)
                    for e in errors
                ],
            )
        return ValidateResult(success=True, data=data)

    def _transform(self, schema: Any) -> Dict[str, Any]:
        return copy.deepcopy(dict(schema))
