"""Adapter for schemas declared as pydantic models."""

from typing import Any, Dict

from pydantic import BaseModel, ValidationError

from .base import SchemaAdapter, ValidateResult, ValidationIssue, json_pointer


def _close_objects(node: Any) -> None:
    """Set ``additionalProperties: false`` on objects that leave it open."""
    if isinstance(node, dict):
        if node.get("type") == "object" and "properties" in node:
            node.setdefault("additionalProperties", False)
        for value in node.values():
            _close_objects(value)
    elif isinstance(node, list):
        for value in node:
            _close_objects(value)


class PydanticModelAdapter(SchemaAdapter):
    """Model classes deriving from ``pydantic.BaseModel``."""

    usage_reason = "pydantic model schema"

    def can_handle(self, schema: Any) -> bool:
        return isinstance(schema, type) and issubclass(schema, BaseModel)

    def _validate(self, data: Any, schema: Any) -> ValidateResult:
        try:
            model = schema.model_validate(data)
        except ValidationError as e:
            return ValidateResult(
                success=False,
                errors=[
                    ValidationIssue(path=json_pointer(err["loc"]), message=err["msg"])
                    for err in e.errors()
                ],
            )
        return ValidateResult(success=True, data=model.model_dump(mode="json", by_alias=True))

    def _transform(self, schema: Any) -> Dict[str, Any]:
        json_schema = schema.model_json_schema()
        if schema.model_config.get("extra") != "allow":
            _close_objects(json_schema)
        return json_schema
