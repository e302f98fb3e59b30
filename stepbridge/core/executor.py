"""
StepBridge Workflow Executor

Replay interpreter for a single step of a workflow.

The workflow's execute function is run from the top for every event.
Steps before the target return the outputs recorded in ``event.state``
and are never executed again. The target step resolves its controls,
runs its handler and providers, and then halts the workflow so code
after it never runs.
"""

from __future__ import annotations
from typing import Dict, List, Any, Optional
import asyncio
import copy
import logging
import time

from jinja2 import TemplateError

from ..compiler import compile_controls, compile_defaults
from ..config import OutputValidation
from ..errors import (
    ExecutionEventPayloadInvalidError,
    ExecutionStateControlsInvalidError,
    ExecutionStateCorruptError,
    ExecutionStateOutputInvalidError,
    FrameworkError,
    ProviderExecutionFailedError,
    StepControlCompilationFailedError,
    StepExecutionFailedError,
)
from ..schemas.channels import EMPTY_CONTROL_SCHEMA
from ..schemas.execution import (
    Event,
    ExecutionMetadata,
    ExecutionOptions,
    ExecutionOutput,
    PostAction,
)
from ..schemas.workflow import StepType
from ..utils.merge import deep_merge
from ..utils.mock import mock_from_schema
from ..validators import validate_data
from .discovery import DiscoveredWorkflow
from .registry import WorkflowRegistry
from .sanitizer import sanitize
from .steps import (
    ProviderResolver,
    SkipPredicate,
    StepApi,
    StepDefinition,
    StepResolver,
    WorkflowContext,
    call_maybe_async,
)

logger = logging.getLogger(__name__)


class _TargetReached(BaseException):
    """
    Unwinds the workflow coroutine once the target step has run.

    Derives from BaseException so ``except Exception`` blocks in workflow
    code do not intercept it.
    """

    def __init__(self, output: ExecutionOutput):
        super().__init__()
        self.output = output


# =============================================================================
# Execution Step API
# =============================================================================

class ExecutionStepApi(StepApi):
    """Step API that replays prior steps and runs the target step."""

    def __init__(
        self,
        executor: "WorkflowExecutor",
        discovered: DiscoveredWorkflow,
        event: Event,
        payload: Dict[str, Any],
    ):
        self._executor = executor
        self.discovered = discovered
        self.event = event
        self.payload = payload
        self.steps: Dict[str, Dict[str, Any]] = {}

    @property
    def template_context(self) -> Dict[str, Any]:
        return {
            "payload": self.payload,
            "subscriber": self.event.subscriber,
            "steps": self.steps,
        }

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
        definition = self.discovered.get_step(step_id)
        if definition is None:
            raise ExecutionStateCorruptError(self.discovered.workflow_id, step_id)

        control_schema = control_schema if control_schema is not None else EMPTY_CONTROL_SCHEMA

        if step_id == self.event.step_id:
            # Live callables, they may close over results replayed in this run
            output = await self._executor.run_target(
                self,
                definition,
                resolve=resolve,
                control_schema=control_schema,
                skip=skip,
                providers=providers or {},
            )
            raise _TargetReached(output)

        return await self._replay(definition, control_schema, skip)

    async def _replay(
        self,
        definition: StepDefinition,
        control_schema: Any,
        skip: Optional[SkipPredicate],
    ) -> Dict[str, Any]:
        step_id = definition.step_id

        if skip is not None:
            controls = self._default_controls(definition, control_schema)
            if await self._executor.evaluate_skip(skip, controls, step_id, self.event.action):
                logger.debug(f"Step `{step_id}` was skipped")
                self.steps[step_id] = {}
                return {}

        state = self.event.find_state(step_id)
        if state is None:
            logger.warning(
                f"No state provided for step `{step_id}` of workflow "
                f"`{self.discovered.workflow_id}`"
            )
            self.steps[step_id] = {}
            return {}

        result = copy.deepcopy(state.outputs)
        self.steps[step_id] = result
        return result

    def _default_controls(self, definition: StepDefinition, control_schema: Any) -> Dict[str, Any]:
        """Controls made only of schema defaults, used for prior steps."""
        try:
            defaults = compile_defaults(definition.controls_json_schema, self.template_context)
        except TemplateError as e:
            logger.warning(f"Could not compile defaults for step `{definition.step_id}`: {e}")
            return {}

        result = validate_data(control_schema, defaults)
        return result.data if result.success else defaults


# =============================================================================
# Workflow Executor
# =============================================================================

class WorkflowExecutor:
    """
    Executes one step of a registered workflow per event.

    Features:
    - Replays prior steps from caller-supplied state
    - Template-compiled controls with schema defaults
    - Configurable output validation (lenient or strict)
    - Concurrent provider execution
    - Output sanitization for channel steps
    """

    def __init__(
        self,
        registry: WorkflowRegistry,
        output_validation: OutputValidation = OutputValidation.LENIENT,
    ):
        self._registry = registry
        self.output_validation = OutputValidation(output_validation)

    async def execute(self, event: Event) -> ExecutionOutput:
        """
        Execute or preview ``event.step_id``.

        Args:
            event: Event naming the workflow, target step and replay state

        Returns:
            ExecutionOutput for the target step
        """
        started = time.perf_counter()
        logger.info(
            f"Executing workflow `{event.workflow_id}` step `{event.step_id}` "
            f"(action: {event.action.value})"
        )

        discovered = self._registry.get_workflow(event.workflow_id)
        if discovered.get_step(event.step_id) is None:
            raise ExecutionStateCorruptError(event.workflow_id, event.step_id)

        payload = self._resolve_payload(discovered, event)
        api = ExecutionStepApi(self, discovered, event, payload)
        context = WorkflowContext(step=api, payload=payload, subscriber=event.subscriber)

        try:
            await discovered.workflow.execute(context)
        except _TargetReached as reached:
            output = reached.output
        except FrameworkError:
            raise
        except Exception as e:
            raise StepExecutionFailedError(event.step_id, event.action.value, e) from e
        else:
            raise ExecutionStateCorruptError(
                event.workflow_id, event.step_id, "was not reached during execution"
            )

        duration = (time.perf_counter() - started) * 1000
        output.metadata = ExecutionMetadata(duration=duration)
        logger.info(
            f"Executed workflow `{event.workflow_id}` step `{event.step_id}`, "
            f"duration: {duration:.2f}ms"
        )
        return output

    def _resolve_payload(self, discovered: DiscoveredWorkflow, event: Event) -> Dict[str, Any]:
        schema = discovered.workflow.payload_schema

        if event.action == PostAction.PREVIEW:
            mock = mock_from_schema(discovered.payload_json_schema) or {}
            merged = deep_merge(mock if isinstance(mock, dict) else {}, event.payload or {})
            if schema is None:
                return merged
            result = validate_data(schema, merged)
            if not result.success:
                logger.info(
                    f"Preview payload for workflow `{event.workflow_id}` is invalid: "
                    f"{result.error_dicts()}"
                )
                return merged
            return result.data

        if event.payload is None:
            raise ExecutionEventPayloadInvalidError(event.workflow_id)
        if schema is None:
            return copy.deepcopy(event.payload)

        result = validate_data(schema, event.payload)
        if not result.success:
            raise ExecutionEventPayloadInvalidError(event.workflow_id, result.error_dicts())
        return result.data

    # -------------------------------------------------------------------------
    # Target step
    # -------------------------------------------------------------------------

    async def run_target(
        self,
        api: ExecutionStepApi,
        definition: StepDefinition,
        *,
        resolve: StepResolver,
        control_schema: Any,
        skip: Optional[SkipPredicate],
        providers: Dict[str, ProviderResolver],
    ) -> ExecutionOutput:
        event = api.event
        action = event.action.value
        step_id = definition.step_id

        controls = self._resolve_controls(api, definition, control_schema)

        skipped = False
        if skip is not None:
            skipped = await self.evaluate_skip(skip, controls, step_id, event.action)
        if skipped and event.action == PostAction.EXECUTE:
            logger.info(f"Step `{step_id}` skipped")
            return ExecutionOutput(options=ExecutionOptions(skip=True))

        try:
            outputs = await call_maybe_async(resolve, controls)
        except FrameworkError:
            raise
        except Exception as e:
            raise StepExecutionFailedError(step_id, action, e) from e

        outputs = self._validate_output(api, definition, outputs)
        provider_outputs = await self._execute_providers(providers, controls, outputs, action)

        if definition.sanitized:
            outputs = sanitize(outputs)

        return ExecutionOutput(
            outputs=outputs,
            providers=provider_outputs,
            options=ExecutionOptions(skip=skipped),
        )

    def _resolve_controls(
        self,
        api: ExecutionStepApi,
        definition: StepDefinition,
        control_schema: Any,
    ) -> Dict[str, Any]:
        """Compile event controls, merge them over compiled defaults, validate."""
        context = api.template_context
        try:
            compiled = compile_controls(api.event.controls, context)
            defaults = compile_defaults(definition.controls_json_schema, context)
        except TemplateError as e:
            raise StepControlCompilationFailedError(definition.step_id, str(e)) from e

        merged = deep_merge(defaults, compiled)
        result = validate_data(control_schema, merged)
        if not result.success:
            raise ExecutionStateControlsInvalidError(
                api.discovered.workflow_id, definition.step_id, result.error_dicts()
            )
        return result.data

    def _validate_output(
        self,
        api: ExecutionStepApi,
        definition: StepDefinition,
        outputs: Any,
    ) -> Any:
        result = validate_data(definition.output_schema, outputs)
        if result.success:
            return result.data

        if not isinstance(outputs, dict) or self.output_validation == OutputValidation.STRICT:
            raise ExecutionStateOutputInvalidError(
                api.discovered.workflow_id, definition.step_id, result.error_dicts()
            )
        logger.warning(
            f"Output of step `{definition.step_id}` does not match its schema: "
            f"{result.error_dicts()}"
        )
        return copy.deepcopy(outputs)

    async def _execute_providers(
        self,
        providers: Dict[str, ProviderResolver],
        controls: Dict[str, Any],
        outputs: Any,
        action: str,
    ) -> Dict[str, Any]:
        async def run(provider_id: str, provider: ProviderResolver):
            try:
                result = await call_maybe_async(
                    provider,
                    controls=copy.deepcopy(controls),
                    outputs=copy.deepcopy(outputs),
                )
            except Exception as e:
                raise ProviderExecutionFailedError(provider_id, action, e) from e
            return provider_id, result

        # Every provider settles before the first failure is raised
        results: List[Any] = await asyncio.gather(
            *(run(provider_id, provider) for provider_id, provider in providers.items()),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result

        # A `_passthrough` envelope is kept as returned.
        return {provider_id: result for provider_id, result in results}

    async def evaluate_skip(
        self,
        skip: SkipPredicate,
        controls: Dict[str, Any],
        step_id: str,
        action: PostAction,
    ) -> bool:
        try:
            return bool(await call_maybe_async(skip, controls))
        except Exception as e:
            raise StepExecutionFailedError(step_id, action.value, e) from e
