"""
Schema Validator Tests

Validates adapter selection, validation, JSON Schema conversion and
optional dependency checks.
"""

from typing import List, Optional

import pytest
from pydantic import BaseModel, ConfigDict

from stepbridge.errors import InvalidSchemaError, MissingDependencyError
from stepbridge.utils import imports
from stepbridge.utils.imports import ImportRequirement, check_dependencies
from stepbridge.validators import (
    ADAPTERS,
    JsonSchemaAdapter,
    MsgspecStructAdapter,
    PydanticModelAdapter,
    get_adapter,
    inline_refs,
    transform_schema,
    validate_data,
)


class Address(BaseModel):
    city: str


class Person(BaseModel):
    name: str
    age: int = 0
    address: Optional[Address] = None
    tags: List[str] = []


class OpenModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str


# =============================================================================
# Adapter Selection
# =============================================================================

class TestAdapterSelection:

    def test_precedence(self):
        """Class-based models are tried first, then JSON Schema, then msgspec."""
        assert [type(adapter) for adapter in ADAPTERS] == [
            PydanticModelAdapter,
            JsonSchemaAdapter,
            MsgspecStructAdapter,
        ]

    def test_json_schema(self):
        """Verify mappings with schema keywords use JSON Schema."""
        assert isinstance(get_adapter({"type": "object"}), JsonSchemaAdapter)

    def test_pydantic(self):
        """Verify pydantic models use the pydantic adapter."""
        assert isinstance(get_adapter(Person), PydanticModelAdapter)

    def test_unsupported(self):
        """Verify unsupported schemas are rejected."""
        with pytest.raises(InvalidSchemaError):
            get_adapter(42)

    def test_mapping_without_keywords_unsupported(self):
        """Verify mappings without schema keywords are rejected."""
        with pytest.raises(InvalidSchemaError):
            get_adapter({"foo": "bar"})


# =============================================================================
# JSON Schema
# =============================================================================

class TestJsonSchema:

    @pytest.fixture
    def schema(self):
        return {
            "type": "object",
            "properties": {
                "name": {"type": "string"},
                "level": {"type": "number", "default": 1},
            },
            "required": ["name"],
            "additionalProperties": False,
        }

    def test_defaults_filled(self, schema):
        """Verify defaults are filled in."""
        result = validate_data(schema, {"name": "a"})

        assert result.success
        assert result.data == {"name": "a", "level": 1}

    def test_input_not_mutated(self, schema):
        """Verify the input is left untouched."""
        data = {"name": "a"}

        validate_data(schema, data)

        assert data == {"name": "a"}

    def test_errors_have_pointer_paths(self, schema):
        """Verify errors carry JSON pointer paths."""
        result = validate_data(schema, {"name": 1})

        assert not result.success
        assert result.error_dicts()[0]["path"] == "/name"

    def test_additional_properties_rejected(self, schema):
        """Verify extra properties are rejected on closed objects."""
        result = validate_data(schema, {"name": "a", "extra": True})

        assert not result.success


# =============================================================================
# Pydantic
# =============================================================================

class TestPydantic:

    def test_validate(self):
        """Verify model defaults appear in the result."""
        result = validate_data(Person, {"name": "Ann"})

        assert result.success
        assert result.data == {"name": "Ann", "age": 0, "address": None, "tags": []}

    def test_errors(self):
        """Verify a missing field is reported by path."""
        result = validate_data(Person, {"age": 3})

        assert not result.success
        assert result.error_dicts()[0]["path"] == "/name"

    def test_transform_closes_objects_and_inlines_refs(self):
        """Verify objects are closed and refs inlined."""
        schema = transform_schema(Person)

        assert schema["additionalProperties"] is False
        assert "$defs" not in schema
        assert "$ref" not in str(schema)

    def test_transform_extra_allow(self):
        """Verify models allowing extras stay open."""
        schema = transform_schema(OpenModel)

        assert schema.get("additionalProperties") is not False


# =============================================================================
# msgspec
# =============================================================================

class TestMsgspec:

    @pytest.fixture
    def struct(self):
        msgspec = pytest.importorskip("msgspec")

        class User(msgspec.Struct):
            name: str
            age: int = 0

        return User

    def test_selected(self, struct):
        """Verify msgspec structs use the msgspec adapter."""
        assert isinstance(get_adapter(struct), MsgspecStructAdapter)

    def test_validate(self, struct):
        """Verify struct defaults appear in the result."""
        result = validate_data(struct, {"name": "Ann"})

        assert result.success
        assert result.data == {"name": "Ann", "age": 0}

    def test_errors(self, struct):
        """Verify a wrong type is reported by path."""
        result = validate_data(struct, {"name": 1})

        assert not result.success
        assert result.errors[0].path == "/name"

    def test_transform(self, struct):
        """Verify structs convert to JSON Schema."""
        schema = transform_schema(struct)

        assert schema["type"] == "object"
        assert "name" in schema["properties"]

    def test_missing_dependency(self, monkeypatch):
        """Verify a missing msgspec install is reported."""
        monkeypatch.setattr(imports, "is_available", lambda requirement: requirement.name != "msgspec")

        with pytest.raises(MissingDependencyError) as exc_info:
            MsgspecStructAdapter().validate({}, object)

        assert exc_info.value.missing_dependencies == ["msgspec"]


# =============================================================================
# Helpers
# =============================================================================

class TestDependencies:

    def test_all_missing_listed(self):
        """Verify every missing dependency is listed once."""
        requirements = [
            ImportRequirement("missing-one", "stepbridge_missing_one"),
            ImportRequirement("jsonschema", "jsonschema"),
            ImportRequirement("missing-two", "stepbridge_missing_two"),
        ]

        with pytest.raises(MissingDependencyError) as exc_info:
            check_dependencies(requirements, "test schema")

        assert exc_info.value.missing_dependencies == ["missing-one", "missing-two"]
        assert "pip install missing-one missing-two" in exc_info.value.message

    def test_missing_export(self):
        """Verify a missing export counts as missing."""
        with pytest.raises(MissingDependencyError):
            check_dependencies([ImportRequirement("jsonschema", "jsonschema", ("DoesNotExist",))], "test")

    def test_available(self):
        """Verify installed dependencies pass."""
        check_dependencies([ImportRequirement("jsonschema", "jsonschema", ("validators",))], "test")


class TestInlineRefs:

    def test_refs_inlined(self):
        """Verify local refs are inlined."""
        schema = {
            "type": "object",
            "properties": {"address": {"$ref": "#/$defs/Address"}},
            "$defs": {"Address": {"type": "object", "properties": {"city": {"type": "string"}}}},
        }

        result = inline_refs(schema)

        assert result["properties"]["address"]["properties"]["city"] == {"type": "string"}
        assert "$defs" not in result

    def test_recursive_refs_kept(self):
        """Verify recursive refs are left in place."""
        schema = {
            "type": "object",
            "properties": {"child": {"$ref": "#"}},
        }

        result = inline_refs(schema)

        assert "$ref" in str(result)
