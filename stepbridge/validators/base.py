"""
Schema Adapter Base

Common contract for the schema formats a step or workflow may declare.
Each adapter recognises one format, validates data against it and
renders it as JSON Schema.
"""

import copy
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..utils.imports import ImportRequirement, check_dependencies


@dataclass
class ValidationIssue:
    path: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"path": self.path, "message": self.message}


@dataclass
class ValidateResult:
    """Outcome of validating data against a schema."""
    success: bool
    data: Any = None
    errors: List[ValidationIssue] = field(default_factory=list)

    def error_dicts(self) -> List[Dict[str, str]]:
        return [issue.to_dict() for issue in self.errors]


class SchemaAdapter(ABC):
    """
    Abstract schema adapter.

    Subclasses declare the optional libraries they need in
    ``requirements``; these are verified before any validation or
    conversion work happens.
    """

    requirements: Tuple[ImportRequirement, ...] = ()
    usage_reason: str = "schema"

    @abstractmethod
    def can_handle(self, schema: Any) -> bool:
        """Return True if this adapter understands ``schema``. Never raises."""
        pass

    @abstractmethod
    def _validate(self, data: Any, schema: Any) -> ValidateResult:
        pass

    @abstractmethod
    def _transform(self, schema: Any) -> Dict[str, Any]:
        pass

    def validate(self, data: Any, schema: Any) -> ValidateResult:
        """Validate a copy of ``data``; the caller's value is never mutated."""
        check_dependencies(self.requirements, self.usage_reason)
        return self._validate(copy.deepcopy(data), schema)

    def transform_to_json_schema(self, schema: Any) -> Dict[str, Any]:
        check_dependencies(self.requirements, self.usage_reason)
        return inline_refs(self._transform(schema))


def json_pointer(parts) -> str:
    """Render a location sequence as ``/a/b/0``."""
    return "".join(f"/{part}" for part in parts)


def _resolve_pointer(root: Dict[str, Any], ref: str) -> Optional[Any]:
    if not ref.startswith("#"):
        return None
    node: Any = root
    for token in ref.lstrip("#").split("/"):
        if not token:
            continue
        token = token.replace("~1", "/").replace("~0", "~")
        if not isinstance(node, dict) or token not in node:
            return None
        node = node[token]
    return node


def inline_refs(schema: Dict[str, Any]) -> Dict[str, Any]:
    """
    Replace local ``$ref`` pointers with the schemas they point to.

    Recursive references are left in place. ``$defs`` and ``definitions``
    are dropped once nothing refers to them.
    """
    root = copy.deepcopy(schema)

    def walk(node: Any, seen: Tuple[str, ...]) -> Any:
        if isinstance(node, list):
            return [walk(item, seen) for item in node]
        if not isinstance(node, dict):
            return node

        ref = node.get("$ref")
        if isinstance(ref, str) and ref not in seen:
            target = _resolve_pointer(root, ref)
            if target is not None:
                siblings = {k: v for k, v in node.items() if k != "$ref"}
                resolved = walk(copy.deepcopy(target), seen + (ref,))
                if isinstance(resolved, dict):
                    resolved.update(walk(siblings, seen))
                return resolved

        return {key: walk(value, seen) for key, value in node.items()}

    result = walk(root, ())
    if isinstance(result, dict) and not _has_ref(result):
        result.pop("$defs", None)
        result.pop("definitions", None)
    return result


def _has_ref(node: Any) -> bool:
    if isinstance(node, dict):
        return "$ref" in node or any(_has_ref(v) for v in node.values())
    if isinstance(node, list):
        return any(_has_ref(v) for v in node)
    return False
