"""StepBridge Bridge Package - Worker-side collaborators of the bridge protocol."""

from .transport import BridgeTransport, is_retryable, parse_bridge_body
from .execute_job import ExecuteBridgeJob, normalize_payload
from .wait_duration import compute_job_wait_duration, to_milliseconds

__all__ = [
    "BridgeTransport",
    "is_retryable",
    "parse_bridge_body",
    "ExecuteBridgeJob",
    "normalize_payload",
    "compute_job_wait_duration",
    "to_milliseconds",
]
