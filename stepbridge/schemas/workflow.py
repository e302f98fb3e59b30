"""
StepBridge Workflow Schema

Discovery documents describing registered workflows and their steps.
"""

from __future__ import annotations
from typing import Dict, List, Any, Optional
from enum import Enum
from pydantic import Field

from .execution import CamelModel


# =============================================================================
# Step Types
# =============================================================================

class StepType(str, Enum):
    """Kinds of steps a workflow can declare."""
    EMAIL = "email"
    SMS = "sms"
    CHAT = "chat"
    PUSH = "push"
    IN_APP = "in_app"
    DIGEST = "digest"
    DELAY = "delay"
    CUSTOM = "custom"
    TRIGGER = "trigger"

    @property
    def is_channel(self) -> bool:
        """Channel steps render to end users and get sanitized."""
        return self in CHANNEL_STEP_TYPES


CHANNEL_STEP_TYPES = frozenset({
    StepType.EMAIL,
    StepType.SMS,
    StepType.CHAT,
    StepType.PUSH,
    StepType.IN_APP,
})


# =============================================================================
# Discovery Output
# =============================================================================

class JsonSchemaHolder(CamelModel):
    """Wrapper rendered as ``{"schema": {...}}``."""
    json_schema: Dict[str, Any] = Field(default_factory=dict, alias="schema")


class DiscoverProviderOutput(CamelModel):
    provider_id: str
    code: str = ""
    outputs: JsonSchemaHolder = Field(default_factory=JsonSchemaHolder)


class DiscoverStepOutput(CamelModel):
    step_id: str
    type: StepType
    code: str = ""
    controls: JsonSchemaHolder = Field(default_factory=JsonSchemaHolder)
    outputs: JsonSchemaHolder = Field(default_factory=JsonSchemaHolder)
    results: JsonSchemaHolder = Field(default_factory=JsonSchemaHolder)
    providers: List[DiscoverProviderOutput] = Field(default_factory=list)
    options: Dict[str, Any] = Field(default_factory=dict)


class DiscoverWorkflowOutput(CamelModel):
    workflow_id: str
    code: str = ""
    name: Optional[str] = None
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    preferences: Dict[str, Any] = Field(default_factory=dict)
    payload: JsonSchemaHolder = Field(default_factory=JsonSchemaHolder)
    steps: List[DiscoverStepOutput] = Field(default_factory=list)


class DiscoverOutput(CamelModel):
    workflows: List[DiscoverWorkflowOutput] = Field(default_factory=list)


# =============================================================================
# Introspection
# =============================================================================

class CodeResult(CamelModel):
    code: str


class DiscoveredCounts(CamelModel):
    workflows: int = 0
    steps: int = 0


class HealthCheck(CamelModel):
    status: str = "ok"
    discovered: DiscoveredCounts = Field(default_factory=DiscoveredCounts)
    framework_version: str
    sdk_version: str
