"""
StepBridge Discovery

Runs a workflow's execute function with a recording step API. Each
``ctx.step.*`` call registers a StepDefinition and returns mock data
built from the step's result schema; handlers and providers never run.
"""

from __future__ import annotations
from typing import Dict, List, Any, Optional, Callable, TYPE_CHECKING
from dataclasses import dataclass, field
import inspect
import logging
import textwrap

from ..errors import FrameworkError, WorkflowDiscoveryFailedError
from ..schemas.channels import (
    CUSTOM_OUTPUT_SCHEMA,
    EMPTY_CONTROL_SCHEMA,
    OUTPUT_SCHEMAS,
    RESULT_SCHEMAS,
)
from ..schemas.workflow import StepType
from ..utils.mock import mock_from_schema
from ..validators import transform_schema
from .steps import (
    ProviderDefinition,
    ProviderResolver,
    SkipPredicate,
    StepApi,
    StepDefinition,
    StepResolver,
    WorkflowContext,
)

if TYPE_CHECKING:
    from ..resources.workflow import Workflow

logger = logging.getLogger(__name__)

OPEN_PAYLOAD_SCHEMA = {"type": "object", "properties": {}, "additionalProperties": True}


def get_source(fn: Callable[..., Any]) -> str:
    """Return the dedented source of ``fn``, or an empty string if unavailable."""
    try:
        return textwrap.dedent(inspect.getsource(fn))
    except (OSError, TypeError) as e:
        logger.warning(f"Source code unavailable for {fn!r}: {e}")
        return ""


@dataclass
class DiscoveredWorkflow:
    """A workflow together with the steps found by running it in discovery mode."""
    workflow: "Workflow"
    steps: List[StepDefinition] = field(default_factory=list)
    code: str = ""
    payload_json_schema: Dict[str, Any] = field(default_factory=dict)

    @property
    def workflow_id(self) -> str:
        return self.workflow.workflow_id

    def get_step(self, step_id: str) -> Optional[StepDefinition]:
        for step in self.steps:
            if step.step_id == step_id:
                return step
        return None


class DiscoveryStepApi(StepApi):
    """Step API that records step declarations."""

    def __init__(self):
        self.steps: List[StepDefinition] = []

    async def _handle(
        self,
        step_type: StepType,
        step_id: str,
        resolve: StepResolver,
        *,
        control_schema: Any = None,
        output_schema: Any = None,
        skip: Optional[SkipPredicate] = None,
        providers: Optional[Dict[str, ProviderResolver]] = None,
        disable_output_sanitization: bool = False,
    ) -> Dict[str, Any]:
        if any(step.step_id == step_id for step in self.steps):
            raise ValueError(f"Step with id: `{step_id}` is declared more than once")

        control_schema = control_schema if control_schema is not None else EMPTY_CONTROL_SCHEMA
        if step_type == StepType.CUSTOM:
            output_schema = output_schema if output_schema is not None else CUSTOM_OUTPUT_SCHEMA
            result_schema = output_schema
        else:
            output_schema = OUTPUT_SCHEMAS[step_type]
            result_schema = RESULT_SCHEMAS[step_type]

        definition = StepDefinition(
            step_id=step_id,
            type=step_type,
            resolve=resolve,
            control_schema=control_schema,
            output_schema=output_schema,
            result_schema=result_schema,
            controls_json_schema=transform_schema(control_schema),
            outputs_json_schema=transform_schema(output_schema),
            results_json_schema=transform_schema(result_schema),
            skip=skip,
            providers={
                provider_id: ProviderDefinition(provider_id, fn, code=get_source(fn))
                for provider_id, fn in (providers or {}).items()
            },
            disable_output_sanitization=disable_output_sanitization,
            code=get_source(resolve),
        )
        self.steps.append(definition)
        logger.debug(f"Discovered step `{step_id}` ({step_type.value})")

        return mock_from_schema(definition.results_json_schema)


async def discover_workflow(workflow: "Workflow") -> DiscoveredWorkflow:
    """
    Run ``workflow`` in discovery mode.

    Raises:
        WorkflowDiscoveryFailedError: If the workflow code raises
    """
    if workflow.payload_schema is not None:
        payload_json_schema = transform_schema(workflow.payload_schema)
    else:
        payload_json_schema = dict(OPEN_PAYLOAD_SCHEMA)

    api = DiscoveryStepApi()
    context = WorkflowContext(
        step=api,
        payload=mock_from_schema(payload_json_schema) or {},
        subscriber={},
    )

    try:
        await workflow.execute(context)
    except FrameworkError:
        raise
    except Exception as e:
        logger.error(f"Discovery of workflow `{workflow.workflow_id}` failed: {e}")
        raise WorkflowDiscoveryFailedError(workflow.workflow_id, e) from e

    return DiscoveredWorkflow(
        workflow=workflow,
        steps=api.steps,
        code=get_source(workflow.execute),
        payload_json_schema=payload_json_schema,
    )
