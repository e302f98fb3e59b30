"""StepBridge resources - workflow declarations."""

from .workflow import Workflow, workflow

__all__ = ["Workflow", "workflow"]
