"""
In-Memory Job Repository

Fast, non-persistent storage for testing and development.
"""

from typing import Dict, List, Optional

from .base import JobRecord, JobRepository, MessageRecord
from ..schemas.execution import JobStatus


class InMemoryJobRepository(JobRepository):
    """
    In-memory job repository (no persistence).

    WARNING: All data is lost on restart.
    """

    def __init__(self):
        self._jobs: Dict[str, JobRecord] = {}
        self._messages: Dict[str, MessageRecord] = {}

    async def get(self, job_id: str) -> Optional[JobRecord]:
        return self._jobs.get(job_id)

    async def find_merged_digests(self, job_id: str) -> List[JobRecord]:
        return [
            job for job in self._jobs.values()
            if job.merged_digest_id == job_id
            and job.type == "digest"
            and job.status == JobStatus.MERGED
        ]

    async def get_message(self, job_id: str) -> Optional[MessageRecord]:
        return self._messages.get(job_id)

    async def save(self, job: JobRecord) -> None:
        self._jobs[job.job_id] = job

    async def save_message(self, message: MessageRecord) -> None:
        self._messages[message.job_id] = message
