"""
StepBridge Client

High-level entry point: register workflows, execute events and answer
the read-only bridge actions.
"""

from __future__ import annotations
from typing import List, Optional, Union

from .config import OutputValidation, get_config
from .core.executor import WorkflowExecutor
from .core.registry import WorkflowRegistry
from .resources.workflow import Workflow
from .schemas.execution import Event, ExecutionOutput
from .schemas.workflow import CodeResult, DiscoverOutput, HealthCheck
from .version import FRAMEWORK_VERSION, SDK_VERSION


class Client:
    """
    StepBridge client.

    Usage:
        client = Client(secret_key="...")
        await client.add_workflows([welcome_workflow])
        output = await client.execute_workflow(event)

    Constructor arguments override the environment configuration.
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        strict_authentication: Optional[bool] = None,
        output_validation: Optional[Union[OutputValidation, str]] = None,
    ):
        config = get_config()
        self.secret_key = secret_key if secret_key is not None else config.security.secret_key
        self.strict_authentication = (
            strict_authentication
            if strict_authentication is not None
            else config.security.strict_authentication
        )
        self.signature_tolerance_seconds = config.security.signature_tolerance_seconds
        self.output_validation = OutputValidation(
            output_validation if output_validation is not None else config.output_validation
        )

        self.registry = WorkflowRegistry()
        self.executor = WorkflowExecutor(self.registry, self.output_validation)

    async def add_workflows(self, workflows: List[Workflow]) -> None:
        """Discover and register ``workflows``."""
        await self.registry.add_workflows(workflows)

    async def execute_workflow(self, event: Event) -> ExecutionOutput:
        """
        Execute or preview the event's target step.

        Args:
            event: Bridge event

        Returns:
            ExecutionOutput with outputs, provider outputs and metadata
        """
        return await self.executor.execute(event)

    def discover(self) -> DiscoverOutput:
        return self.registry.discover()

    def get_code(self, workflow_id: str, step_id: Optional[str] = None) -> CodeResult:
        return self.registry.get_code(workflow_id, step_id)

    def health_check(self) -> HealthCheck:
        return HealthCheck(
            status="ok",
            discovered=self.registry.counts(),
            framework_version=FRAMEWORK_VERSION,
            sdk_version=SDK_VERSION,
        )
