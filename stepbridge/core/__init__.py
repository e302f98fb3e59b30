"""StepBridge Core Package - Discovery, registry and the replay executor."""

from .steps import (
    StepApi,
    StepDefinition,
    ProviderDefinition,
    WorkflowContext,
    call_maybe_async,
)
from .sanitizer import sanitize
from .discovery import DiscoveredWorkflow, DiscoveryStepApi, discover_workflow, get_source
from .registry import WorkflowRegistry
from .executor import WorkflowExecutor, ExecutionStepApi

__all__ = [
    "StepApi",
    "StepDefinition",
    "ProviderDefinition",
    "WorkflowContext",
    "call_maybe_async",
    "sanitize",
    "DiscoveredWorkflow",
    "DiscoveryStepApi",
    "discover_workflow",
    "get_source",
    "WorkflowRegistry",
    "WorkflowExecutor",
    "ExecutionStepApi",
]
