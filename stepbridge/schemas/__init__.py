"""StepBridge Schemas Package - Wire and discovery schemas."""

from .execution import (
    CamelModel,
    PostAction,
    GetAction,
    JobStatus,
    StepState,
    State,
    Event,
    ExecutionStatus,
    ExecutionOptions,
    ExecutionMetadata,
    ExecutionOutput,
)
from .workflow import (
    StepType,
    CHANNEL_STEP_TYPES,
    JsonSchemaHolder,
    DiscoverProviderOutput,
    DiscoverStepOutput,
    DiscoverWorkflowOutput,
    DiscoverOutput,
    CodeResult,
    DiscoveredCounts,
    HealthCheck,
)

__all__ = [
    # Execution
    "CamelModel",
    "PostAction",
    "GetAction",
    "JobStatus",
    "StepState",
    "State",
    "Event",
    "ExecutionStatus",
    "ExecutionOptions",
    "ExecutionMetadata",
    "ExecutionOutput",
    # Workflow
    "StepType",
    "CHANNEL_STEP_TYPES",
    "JsonSchemaHolder",
    "DiscoverProviderOutput",
    "DiscoverStepOutput",
    "DiscoverWorkflowOutput",
    "DiscoverOutput",
    "CodeResult",
    "DiscoveredCounts",
    "HealthCheck",
]
