"""
JobRepository Base Interface

Abstract interface for the job and message records the bridge worker
reads when it rebuilds replay state.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..schemas.execution import JobStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class JobRecord:
    """
    One executed (or scheduled) step of a triggered workflow.

    Jobs form a chain through ``parent_id``; the first job of a run has no
    parent.
    """
    job_id: str
    step_id: str
    type: str
    status: JobStatus = JobStatus.PENDING
    parent_id: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)
    payload: Dict[str, Any] = field(default_factory=dict)
    step_output: Optional[Dict[str, Any]] = None
    error: Optional[Any] = None
    merged_digest_id: Optional[str] = None


@dataclass
class MessageRecord:
    """Delivery state of an in-app message produced by a job."""
    job_id: str
    seen: bool = False
    read: bool = False
    last_seen_date: Optional[datetime] = None
    last_read_date: Optional[datetime] = None


class JobRepository(ABC):
    """
    Abstract interface for job persistence.

    Implementations:
    - InMemoryJobRepository: For testing and single-process workers
    """

    @abstractmethod
    async def get(self, job_id: str) -> Optional[JobRecord]:
        """Get a job by ID."""
        pass

    @abstractmethod
    async def find_merged_digests(self, job_id: str) -> List[JobRecord]:
        """List digest jobs that were merged into ``job_id``."""
        pass

    @abstractmethod
    async def get_message(self, job_id: str) -> Optional[MessageRecord]:
        """Get the in-app message created by a job."""
        pass

    @abstractmethod
    async def save(self, job: JobRecord) -> None:
        """Save or update a job."""
        pass

    @abstractmethod
    async def save_message(self, message: MessageRecord) -> None:
        """Save or update a message."""
        pass
