"""
StepBridge Template Compiler

Renders ``{{ expr }}`` placeholders in control values against the
payload, subscriber and prior step results.

Rendering rules:
- Missing paths render as ``undefined`` and never raise
- Mappings and sequences render as compact JSON with single quotes
- ``| json`` renders JSON, indented when given a width (``| json: 2``)
- Booleans render as ``true``/``false``, None renders empty
"""

import json
import re
from collections.abc import Mapping
from typing import Any, Dict, Optional

from jinja2 import ChainableUndefined, Undefined
from jinja2.sandbox import SandboxedEnvironment

# `| name: a, b` -> `| name(a, b)`
_FILTER_ARGS = re.compile(r"\|\s*(\w+)\s*:\s*([^|{}%]+?)\s*(?=\||}}|-}}|%})")
_TAG = re.compile(r"\{\{.*?\}\}|\{%.*?%\}", re.S)


class RenderedUndefined(ChainableUndefined):
    """Undefined value that renders as the literal ``undefined``."""

    __slots__ = ()

    def __str__(self) -> str:
        return "undefined"


def _stringify(value: Any, indent: Optional[int] = None) -> str:
    if indent is None:
        text = json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)
    else:
        text = json.dumps(value, indent=indent, ensure_ascii=False, default=str)
    return text.replace('"', "'")


def _json_filter(value: Any, indent: Optional[int] = None) -> str:
    if isinstance(value, Undefined):
        return str(value)
    return _stringify(value, None if indent is None else int(indent))


def _finalize(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, (Mapping, list, tuple)):
        return _stringify(value)
    return value


class TemplateEnvironment(SandboxedEnvironment):
    """
    Sandboxed environment where dotted access reads mapping keys first.

    ``payload.items`` therefore resolves the ``items`` key instead of the
    dict method, and a missing key is undefined rather than an attribute.
    """

    def getattr(self, obj: Any, attribute: str) -> Any:
        if isinstance(obj, Mapping):
            if attribute in obj:
                return obj[attribute]
            return self.undefined(obj=obj, name=attribute)
        return super().getattr(obj, attribute)


def _create_environment() -> TemplateEnvironment:
    env = TemplateEnvironment(
        undefined=RenderedUndefined,
        autoescape=False,
        keep_trailing_newline=True,
        finalize=_finalize,
    )
    env.filters["json"] = _json_filter
    return env


_environment = _create_environment()


def is_template(value: str) -> bool:
    return "{{" in value or "{%" in value


def compile_template(template: str, context: Dict[str, Any]) -> str:
    """
    Render ``template`` against ``context``.

    Raises:
        jinja2.TemplateError: On syntax errors or sandbox violations
    """
    # Only inside tags; literal text such as "| a: b |" is left alone
    source = _TAG.sub(lambda m: _FILTER_ARGS.sub(r"| \1(\2)", m.group(0)), template)
    return _environment.from_string(source).render(context)


def compile_controls(value: Any, context: Dict[str, Any]) -> Any:
    """Render every template string inside ``value``, recursing through containers."""
    if isinstance(value, str):
        if is_template(value):
            return compile_template(value, context)
        return value
    if isinstance(value, Mapping):
        return {key: compile_controls(item, context) for key, item in value.items()}
    if isinstance(value, list):
        return [compile_controls(item, context) for item in value]
    return value
