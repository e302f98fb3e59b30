"""StepBridge Compiler Package - Control templates and schema defaults."""

from .template import compile_template, compile_controls, is_template, RenderedUndefined
from .defaults import extract_defaults, compile_defaults

__all__ = [
    "compile_template",
    "compile_controls",
    "is_template",
    "RenderedUndefined",
    "extract_defaults",
    "compile_defaults",
]
