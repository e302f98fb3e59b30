"""
Workflow declaration.

Example::

    async def welcome(ctx):
        await ctx.step.email(
            "send-email",
            lambda controls: {"subject": "Hi", "body": ctx.payload["name"]},
        )

    welcome_workflow = workflow("welcome", welcome, payload_schema={...})
"""

from __future__ import annotations
from typing import Dict, List, Any, Optional, Callable, Awaitable
from dataclasses import dataclass, field

from ..core.steps import WorkflowContext

WorkflowExecute = Callable[[WorkflowContext], Awaitable[Any]]


@dataclass
class Workflow:
    """A workflow definition: an id plus the coroutine that declares its steps."""
    workflow_id: str
    execute: WorkflowExecute
    payload_schema: Any = None
    name: Optional[str] = None
    description: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    preferences: Dict[str, Any] = field(default_factory=dict)


def workflow(
    workflow_id: str,
    execute: WorkflowExecute,
    *,
    payload_schema: Any = None,
    name: Optional[str] = None,
    description: Optional[str] = None,
    tags: Optional[List[str]] = None,
    preferences: Optional[Dict[str, Any]] = None,
) -> Workflow:
    """
    Declare a workflow.

    Args:
        workflow_id: Unique workflow identifier
        execute: ``async def execute(ctx)`` awaiting ``ctx.step.*`` calls
        payload_schema: pydantic model, JSON Schema dict or msgspec Struct
        name: Human readable name
        description: Optional description
        tags: Optional tags
        preferences: Channel preference defaults

    Returns:
        Workflow to pass to ``Client.add_workflows``
    """
    return Workflow(
        workflow_id=workflow_id,
        execute=execute,
        payload_schema=payload_schema,
        name=name or workflow_id,
        description=description,
        tags=list(tags or []),
        preferences=dict(preferences or {}),
    )
