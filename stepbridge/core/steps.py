"""
StepBridge Step Definitions

Step descriptors collected during discovery and the ``ctx.step`` API a
workflow uses to declare them. The API has one implementation for
discovery and one for execution; both receive the same arguments.
"""

from __future__ import annotations
from typing import Dict, Any, Optional, Callable, Awaitable, Union
from dataclasses import dataclass, field
from abc import ABC, abstractmethod
import inspect

from ..schemas.workflow import StepType


# =============================================================================
# Callable Types
# =============================================================================

# resolve(controls) -> outputs, sync or async
StepResolver = Callable[[Dict[str, Any]], Union[Dict[str, Any], Awaitable[Dict[str, Any]]]]

# skip(controls) -> bool, sync or async
SkipPredicate = Callable[[Dict[str, Any]], Union[bool, Awaitable[bool]]]

# provider(controls=..., outputs=...) -> provider payload, sync or async
ProviderResolver = Callable[..., Union[Dict[str, Any], Awaitable[Dict[str, Any]]]]


async def call_maybe_async(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Call ``fn`` and await the result if it is awaitable."""
    result = fn(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result


# =============================================================================
# Step Definitions
# =============================================================================

@dataclass
class ProviderDefinition:
    provider_id: str
    resolve: ProviderResolver
    code: str = ""


@dataclass
class StepDefinition:
    """A step as declared by a workflow during discovery."""
    step_id: str
    type: StepType
    resolve: StepResolver
    control_schema: Any
    output_schema: Any
    result_schema: Any

    # JSON Schema renderings, computed once at discovery
    controls_json_schema: Dict[str, Any] = field(default_factory=dict)
    outputs_json_schema: Dict[str, Any] = field(default_factory=dict)
    results_json_schema: Dict[str, Any] = field(default_factory=dict)

    skip: Optional[SkipPredicate] = None
    providers: Dict[str, ProviderDefinition] = field(default_factory=dict)
    disable_output_sanitization: bool = False
    code: str = ""

    @property
    def sanitized(self) -> bool:
        """Channel outputs are sanitized unless the step opts out."""
        return self.type.is_channel and not self.disable_output_sanitization

    @property
    def options(self) -> Dict[str, Any]:
        return {"disableOutputSanitization": self.disable_output_sanitization}


# =============================================================================
# Step API
# =============================================================================

class StepApi(ABC):
    """
    The ``ctx.step`` object handed to a workflow.

    Every method awaits to the step's result: a mock during discovery,
    the replayed outputs for steps that already ran.
    """

    @abstractmethod
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
        pass

    async def email(self, step_id: str, resolve: StepResolver, **options: Any) -> Dict[str, Any]:
        return await self._handle(StepType.EMAIL, step_id, resolve, **options)

    async def sms(self, step_id: str, resolve: StepResolver, **options: Any) -> Dict[str, Any]:
        return await self._handle(StepType.SMS, step_id, resolve, **options)

    async def chat(self, step_id: str, resolve: StepResolver, **options: Any) -> Dict[str, Any]:
        return await self._handle(StepType.CHAT, step_id, resolve, **options)

    async def push(self, step_id: str, resolve: StepResolver, **options: Any) -> Dict[str, Any]:
        return await self._handle(StepType.PUSH, step_id, resolve, **options)

    async def in_app(self, step_id: str, resolve: StepResolver, **options: Any) -> Dict[str, Any]:
        return await self._handle(StepType.IN_APP, step_id, resolve, **options)

    async def digest(
        self,
        step_id: str,
        resolve: StepResolver,
        *,
        control_schema: Any = None,
        skip: Optional[SkipPredicate] = None,
    ) -> Dict[str, Any]:
        return await self._handle(
            StepType.DIGEST, step_id, resolve, control_schema=control_schema, skip=skip
        )

    async def delay(
        self,
        step_id: str,
        resolve: StepResolver,
        *,
        control_schema: Any = None,
        skip: Optional[SkipPredicate] = None,
    ) -> Dict[str, Any]:
        return await self._handle(
            StepType.DELAY, step_id, resolve, control_schema=control_schema, skip=skip
        )

    async def custom(
        self,
        step_id: str,
        resolve: StepResolver,
        *,
        control_schema: Any = None,
        output_schema: Any = None,
        skip: Optional[SkipPredicate] = None,
    ) -> Dict[str, Any]:
        return await self._handle(
            StepType.CUSTOM,
            step_id,
            resolve,
            control_schema=control_schema,
            output_schema=output_schema,
            skip=skip,
        )


@dataclass
class WorkflowContext:
    """Argument passed to a workflow's execute function."""
    step: StepApi
    payload: Dict[str, Any]
    subscriber: Dict[str, Any]
