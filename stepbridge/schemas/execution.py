"""
StepBridge Execution Schemas

Wire types exchanged with the bridge: the inbound event, the replay
state records it carries, and the execution result returned for it.
"""

from __future__ import annotations
from typing import Dict, List, Any, Optional
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# Actions
# =============================================================================

class PostAction(str, Enum):
    """Actions that run a workflow step."""
    EXECUTE = "execute"
    PREVIEW = "preview"


class GetAction(str, Enum):
    """Read-only actions served by the bridge endpoint."""
    DISCOVER = "discover"
    HEALTH_CHECK = "health-check"
    CODE = "code"


class JobStatus(str, Enum):
    """Status of a previously resolved step."""
    PENDING = "pending"
    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    DELAYED = "delayed"
    CANCELED = "canceled"
    MERGED = "merged"
    SKIPPED = "skipped"


# =============================================================================
# Replay State
# =============================================================================

class StepState(CamelModel):
    """Status of a resolved step as recorded by the orchestrator."""
    status: str = JobStatus.COMPLETED.value
    error: Optional[Any] = None


class State(CamelModel):
    """
    Replay record for one previously resolved step.

    The interpreter reads ``outputs`` back as the step's result instead
    of running the step again.
    """
    step_id: str
    outputs: Dict[str, Any] = Field(default_factory=dict)
    state: StepState = Field(default_factory=StepState)


# =============================================================================
# Event
# =============================================================================

class Event(CamelModel):
    """Request to execute or preview a single step of a workflow."""
    workflow_id: str
    step_id: str
    action: PostAction = PostAction.EXECUTE
    payload: Optional[Dict[str, Any]] = None
    subscriber: Dict[str, Any] = Field(default_factory=dict)
    state: List[State] = Field(default_factory=list)
    controls: Dict[str, Any] = Field(default_factory=dict)

    def find_state(self, step_id: str) -> Optional[State]:
        """Return the first state entry recorded for ``step_id``."""
        for entry in self.state:
            if entry.step_id == step_id:
                return entry
        return None


# =============================================================================
# Execution Output
# =============================================================================

class ExecutionStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class ExecutionOptions(CamelModel):
    skip: bool = False


class ExecutionMetadata(CamelModel):
    status: ExecutionStatus = ExecutionStatus.SUCCESS
    error: bool = False
    duration: float = 0.0  # milliseconds


class ExecutionOutput(CamelModel):
    """Result of one step execution returned to the bridge."""
    outputs: Dict[str, Any] = Field(default_factory=dict)
    providers: Dict[str, Any] = Field(default_factory=dict)
    options: ExecutionOptions = Field(default_factory=ExecutionOptions)
    metadata: ExecutionMetadata = Field(default_factory=ExecutionMetadata)
