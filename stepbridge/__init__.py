"""
StepBridge - Code-First Workflow Step Execution Engine

StepBridge executes one step of a code-defined notification workflow per
bridge event:
- Replaying prior steps from caller-supplied state
- Compiling templated controls against payload and subscriber data
- Validating controls and outputs against pydantic, JSON Schema or
  msgspec schemas
- Running provider transforms and sanitizing human-facing outputs

StepBridge does NOT:
- Deliver messages
- Store workflow runs (the orchestrator owns job state)
"""

from .version import SDK_VERSION as __version__

from .client import Client
from .config import OutputValidation, StepBridgeConfig, get_config
from .core.steps import WorkflowContext
from .errors import ErrorCode, FrameworkError
from .resources.workflow import Workflow, workflow
from .schemas.execution import (
    Event,
    ExecutionOutput,
    PostAction,
    State,
    StepState,
)
from .schemas.workflow import StepType

__all__ = [
    # Client
    "Client",
    "workflow",
    "Workflow",
    "WorkflowContext",
    # Wire types
    "Event",
    "ExecutionOutput",
    "PostAction",
    "State",
    "StepState",
    "StepType",
    # Config
    "OutputValidation",
    "StepBridgeConfig",
    "get_config",
    # Errors
    "ErrorCode",
    "FrameworkError",
]
