"""
Adapter for schemas declared as ``msgspec.Struct`` classes.

msgspec is an optional extra; detection walks the class MRO so the
library is only imported once a struct schema is actually used.
"""

import importlib
import re
from typing import Any, Dict

from ..utils.imports import ImportRequirement
from .base import SchemaAdapter, ValidateResult, ValidationIssue

_ERROR_PATH = re.compile(r"^(?P<message>.*) - at `\$(?P<path>[^`]*)`$")
_PATH_TOKEN = re.compile(r"\.([^.\[]+)|\[(\d+)\]")


def _msgspec_path(raw: str) -> str:
    """Convert ``$.a.b[0]`` style locations to ``/a/b/0``."""
    return "".join(
        f"/{name or index}" for name, index in _PATH_TOKEN.findall(raw)
    )


class MsgspecStructAdapter(SchemaAdapter):
    """Struct classes deriving from ``msgspec.Struct``."""

    usage_reason = "msgspec Struct schema"
    requirements = (
        ImportRequirement("msgspec", "msgspec", ("convert", "to_builtins", "ValidationError")),
        ImportRequirement("msgspec", "msgspec.json", ("schema",)),
    )

    def can_handle(self, schema: Any) -> bool:
        if not isinstance(schema, type):
            return False
        return any(
            base.__name__ == "Struct" and base.__module__.startswith("msgspec")
            for base in schema.__mro__
        )

    def _validate(self, data: Any, schema: Any) -> ValidateResult:
        msgspec = importlib.import_module("msgspec")
        try:
            value = msgspec.convert(data, type=schema)
        except msgspec.ValidationError as e:
            match = _ERROR_PATH.match(str(e))
            if match:
                issue = ValidationIssue(
                    path=_msgspec_path(match.group("path")),
                    message=match.group("message"),
                )
            else:
                issue = ValidationIssue(path="", message=str(e))
            return ValidateResult(success=False, errors=[issue])
        return ValidateResult(success=True, data=msgspec.to_builtins(value))

    def _transform(self, schema: Any) -> Dict[str, Any]:
        msgspec_json = importlib.import_module("msgspec.json")
        return msgspec_json.schema(schema)
