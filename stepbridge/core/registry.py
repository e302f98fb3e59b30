"""
StepBridge Workflow Registry

Process-wide catalog of discovered workflows, keyed by workflow id.
"""

from __future__ import annotations
from typing import Dict, List, Optional, TYPE_CHECKING
import logging

from ..errors import StepNotFoundError, WorkflowNotFoundError
from ..schemas.workflow import (
    CodeResult,
    DiscoveredCounts,
    DiscoverOutput,
    DiscoverProviderOutput,
    DiscoverStepOutput,
    DiscoverWorkflowOutput,
    JsonSchemaHolder,
)
from .discovery import DiscoveredWorkflow, discover_workflow

if TYPE_CHECKING:
    from ..resources.workflow import Workflow

logger = logging.getLogger(__name__)


class WorkflowRegistry:
    """
    Holds discovered workflows.

    Registration runs each workflow in discovery mode. Registering an id
    that already exists replaces the previous entry.
    """

    def __init__(self):
        self._workflows: Dict[str, DiscoveredWorkflow] = {}

    async def add_workflows(self, workflows: List["Workflow"]) -> None:
        for workflow in workflows:
            discovered = await discover_workflow(workflow)
            if workflow.workflow_id in self._workflows:
                logger.warning(
                    f"Workflow `{workflow.workflow_id}` is already registered, replacing it"
                )
            self._workflows[workflow.workflow_id] = discovered
            logger.info(
                f"Registered workflow `{workflow.workflow_id}` "
                f"with {len(discovered.steps)} step(s)"
            )

    def get_workflow(self, workflow_id: str) -> DiscoveredWorkflow:
        discovered = self._workflows.get(workflow_id)
        if discovered is None:
            raise WorkflowNotFoundError(workflow_id)
        return discovered

    def list_workflows(self) -> List[DiscoveredWorkflow]:
        return list(self._workflows.values())

    def discover(self) -> DiscoverOutput:
        """Describe every registered workflow and its steps."""
        return DiscoverOutput(
            workflows=[self._describe(discovered) for discovered in self._workflows.values()]
        )

    def get_code(self, workflow_id: str, step_id: Optional[str] = None) -> CodeResult:
        """
        Source text of a workflow, or of one of its step handlers.

        Raises:
            WorkflowNotFoundError: Unknown workflow id
            StepNotFoundError: Unknown step id within the workflow
        """
        discovered = self.get_workflow(workflow_id)
        if step_id is None:
            return CodeResult(code=discovered.code)

        step = discovered.get_step(step_id)
        if step is None:
            raise StepNotFoundError(step_id)
        return CodeResult(code=step.code)

    def counts(self) -> DiscoveredCounts:
        return DiscoveredCounts(
            workflows=len(self._workflows),
            steps=sum(len(d.steps) for d in self._workflows.values()),
        )

    def _describe(self, discovered: DiscoveredWorkflow) -> DiscoverWorkflowOutput:
        workflow = discovered.workflow
        return DiscoverWorkflowOutput(
            workflow_id=workflow.workflow_id,
            code=discovered.code,
            name=workflow.name,
            description=workflow.description,
            tags=workflow.tags,
            preferences=workflow.preferences,
            payload=JsonSchemaHolder(json_schema=discovered.payload_json_schema),
            steps=[
                DiscoverStepOutput(
                    step_id=step.step_id,
                    type=step.type,
                    code=step.code,
                    controls=JsonSchemaHolder(json_schema=step.controls_json_schema),
                    outputs=JsonSchemaHolder(json_schema=step.outputs_json_schema),
                    results=JsonSchemaHolder(json_schema=step.results_json_schema),
                    providers=[
                        DiscoverProviderOutput(provider_id=p.provider_id, code=p.code)
                        for p in step.providers.values()
                    ],
                    options=step.options,
                )
                for step in discovered.steps
            ],
        )
