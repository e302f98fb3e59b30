"""StepBridge Persistence Module - Job storage for the bridge worker."""

from .base import JobRecord, JobRepository, MessageRecord
from .memory import InMemoryJobRepository

__all__ = [
    "JobRecord",
    "JobRepository",
    "MessageRecord",
    "InMemoryJobRepository",
]
