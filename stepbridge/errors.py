"""
StepBridge Errors

Error taxonomy shared by the execution engine, the registry and the
bridge endpoint. Every error carries a stable code and an HTTP status so
the endpoint can surface it without re-interpreting it.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Stable error codes returned to bridge callers."""
    WORKFLOW_NOT_FOUND = "WorkflowNotFoundError"
    STEP_NOT_FOUND = "StepNotFoundError"
    EXECUTION_STATE_CORRUPT = "ExecutionStateCorruptError"
    EXECUTION_EVENT_PAYLOAD_INVALID = "ExecutionEventPayloadInvalidError"
    EXECUTION_STATE_CONTROLS_INVALID = "ExecutionStateControlsInvalidError"
    EXECUTION_STATE_OUTPUT_INVALID = "ExecutionStateOutputInvalidError"
    STEP_CONTROL_COMPILATION_FAILED = "StepControlCompilationFailedError"
    STEP_EXECUTION_FAILED = "StepExecutionFailedError"
    PROVIDER_EXECUTION_FAILED = "ProviderExecutionFailedError"
    WORKFLOW_DISCOVERY_FAILED = "WorkflowDiscoveryFailedError"
    MISSING_DEPENDENCY = "MissingDependencyError"
    INVALID_SCHEMA = "InvalidSchemaError"
    INVALID_ACTION = "InvalidActionError"
    SIGNATURE_NOT_FOUND = "SignatureNotFoundError"
    SIGNATURE_INVALID = "SignatureInvalidError"
    SIGNATURE_EXPIRED = "SignatureExpiredError"
    SIGNATURE_MISMATCH = "SignatureMismatchError"
    SIGNING_KEY_NOT_FOUND = "SigningKeyNotFoundError"
    BRIDGE_REQUEST_FAILED = "BridgeRequestError"
    DELAY_CALCULATION_FAILED = "DelayCalculationError"


# =============================================================================
# Base Errors
# =============================================================================

class FrameworkError(Exception):
    """Base class for all errors raised by stepbridge."""
    code: ErrorCode
    status_code: int = 500

    def __init__(self, message: str, data: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.data = data

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON error envelope."""
        return {
            "code": self.code.value,
            "message": self.message,
            "data": self.data,
        }


class BadRequestError(FrameworkError):
    status_code = 400


class UnauthorizedError(FrameworkError):
    status_code = 401


class NotFoundError(FrameworkError):
    status_code = 404


class ServerError(FrameworkError):
    status_code = 500


# =============================================================================
# Lookup Errors
# =============================================================================

class WorkflowNotFoundError(NotFoundError):
    code = ErrorCode.WORKFLOW_NOT_FOUND

    def __init__(self, workflow_id: Optional[str]):
        super().__init__(f"Workflow with id: `{workflow_id}` does not exist")
        self.workflow_id = workflow_id


class StepNotFoundError(NotFoundError):
    code = ErrorCode.STEP_NOT_FOUND

    def __init__(self, step_id: Optional[str]):
        super().__init__(f"Step with id: `{step_id}` does not exist")
        self.step_id = step_id


# =============================================================================
# Execution Errors
# =============================================================================

class ExecutionStateCorruptError(BadRequestError):
    code = ErrorCode.EXECUTION_STATE_CORRUPT

    def __init__(self, workflow_id: str, step_id: str, reason: str = "is not part of the workflow"):
        super().__init__(
            f"Workflow with id: `{workflow_id}` has a corrupt state. "
            f"Step with id: `{step_id}` {reason}."
        )
        self.workflow_id = workflow_id
        self.step_id = step_id


class ExecutionEventPayloadInvalidError(BadRequestError):
    code = ErrorCode.EXECUTION_EVENT_PAYLOAD_INVALID

    def __init__(self, workflow_id: str, errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(
            f"Workflow with id: `{workflow_id}` has an invalid payload. Please provide the correct payload.",
            data=errors,
        )
        self.workflow_id = workflow_id


class ExecutionStateControlsInvalidError(BadRequestError):
    code = ErrorCode.EXECUTION_STATE_CONTROLS_INVALID

    def __init__(self, workflow_id: str, step_id: str, errors: List[Dict[str, str]]):
        super().__init__(
            f"Workflow with id: `{workflow_id}` has invalid controls for step: `{step_id}`.",
            data=errors,
        )
        self.workflow_id = workflow_id
        self.step_id = step_id


class ExecutionStateOutputInvalidError(BadRequestError):
    code = ErrorCode.EXECUTION_STATE_OUTPUT_INVALID

    def __init__(self, workflow_id: str, step_id: str, errors: List[Dict[str, str]]):
        super().__init__(
            f"Workflow with id: `{workflow_id}` has an invalid output for step: `{step_id}`.",
            data=errors,
        )
        self.workflow_id = workflow_id
        self.step_id = step_id


class StepControlCompilationFailedError(BadRequestError):
    code = ErrorCode.STEP_CONTROL_COMPILATION_FAILED

    def __init__(self, step_id: str, reason: str):
        super().__init__(f"Failed to compile controls for step: `{step_id}`: {reason}")
        self.step_id = step_id


class StepExecutionFailedError(ServerError):
    code = ErrorCode.STEP_EXECUTION_FAILED

    def __init__(self, step_id: str, action: str, cause: BaseException):
        super().__init__(
            f"Failed to {action} step: `{step_id}`: {cause}",
            data={"stepId": step_id, "action": action, "cause": repr(cause)},
        )
        self.step_id = step_id
        self.action = action
        self.cause = cause


class ProviderExecutionFailedError(ServerError):
    code = ErrorCode.PROVIDER_EXECUTION_FAILED

    def __init__(self, provider_id: str, action: str, cause: BaseException):
        super().__init__(
            f"Failed to {action} provider: `{provider_id}`: {cause}",
            data={"providerId": provider_id, "action": action, "cause": repr(cause)},
        )
        self.provider_id = provider_id
        self.action = action
        self.cause = cause


class WorkflowDiscoveryFailedError(ServerError):
    code = ErrorCode.WORKFLOW_DISCOVERY_FAILED

    def __init__(self, workflow_id: str, cause: BaseException):
        super().__init__(f"Failed to discover workflow: `{workflow_id}`: {cause}")
        self.workflow_id = workflow_id
        self.cause = cause


# =============================================================================
# Schema Errors
# =============================================================================

class MissingDependencyError(ServerError):
    code = ErrorCode.MISSING_DEPENDENCY

    def __init__(self, usage_reason: str, missing_dependencies: List[str]):
        names = ", ".join(f"`{name}`" for name in missing_dependencies)
        install = " ".join(missing_dependencies)
        super().__init__(
            f"Tried to use a {usage_reason} in stepbridge without {names} installed. "
            f"Please install it by running `pip install {install}`.",
            data={"dependencies": list(missing_dependencies)},
        )
        self.usage_reason = usage_reason
        self.missing_dependencies = list(missing_dependencies)


class InvalidSchemaError(ServerError):
    code = ErrorCode.INVALID_SCHEMA

    def __init__(self, schema: Any):
        super().__init__(f"Unsupported schema: {schema!r}")


# =============================================================================
# Bridge Endpoint Errors
# =============================================================================

class InvalidActionError(BadRequestError):
    code = ErrorCode.INVALID_ACTION

    def __init__(self, action: Optional[str], allowed: List[str]):
        super().__init__(
            f"Invalid query string: `action`=`{action}`. Allowed actions: {', '.join(allowed)}"
        )


class SignatureNotFoundError(UnauthorizedError):
    code = ErrorCode.SIGNATURE_NOT_FOUND

    def __init__(self):
        super().__init__("Signature not found in request headers")


class SignatureInvalidError(UnauthorizedError):
    code = ErrorCode.SIGNATURE_INVALID

    def __init__(self):
        super().__init__("Signature header is malformed")


class SignatureExpiredError(UnauthorizedError):
    code = ErrorCode.SIGNATURE_EXPIRED

    def __init__(self):
        super().__init__("Signature expired")


class SignatureMismatchError(UnauthorizedError):
    code = ErrorCode.SIGNATURE_MISMATCH

    def __init__(self):
        super().__init__("Signature does not match the expected signature")


class SigningKeyNotFoundError(UnauthorizedError):
    code = ErrorCode.SIGNING_KEY_NOT_FOUND

    def __init__(self):
        super().__init__("Secret key is not set; configure STEPBRIDGE_SECRET_KEY")


# =============================================================================
# Worker Errors
# =============================================================================

class BridgeRequestError(FrameworkError):
    code = ErrorCode.BRIDGE_REQUEST_FAILED

    def __init__(self, url: str, status_code: Optional[int], body: Any, retry_count: int = 0):
        super().__init__(
            f"Bridge request to {url} failed with status {status_code}",
            data={"url": url, "statusCode": status_code, "retryCount": retry_count, "raw": body},
        )
        self.url = url
        self.status_code = status_code or 502
        self.body = body
        self.retry_count = retry_count


class DelayCalculationError(BadRequestError):
    code = ErrorCode.DELAY_CALCULATION_FAILED
