"""
Execute Bridge Job

Worker side of the bridge protocol: rebuild the replay state of a job
from its ancestors and ask the bridge to execute the job's step.
"""

from __future__ import annotations
from typing import Dict, List, Any, Optional
from datetime import datetime, timezone
import logging

from ..persistence.base import JobRecord, JobRepository
from ..schemas.execution import Event, ExecutionOutput, PostAction, State, StepState
from .transport import BridgeTransport

logger = logging.getLogger(__name__)

# Payload keys added by the platform and never forwarded to workflows
INTERNAL_PAYLOAD_KEYS = frozenset({"__source"})


def normalize_payload(payload: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    return {k: v for k, v in (payload or {}).items() if k not in INTERNAL_PAYLOAD_KEYS}


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class ExecuteBridgeJob:
    """
    Sends one job to the bridge.

    Usage:
        runner = ExecuteBridgeJob(InMemoryJobRepository(), BridgeTransport(url))
        output = await runner.execute(job, workflow_id="welcome", payload={...})
    """

    def __init__(self, job_repository: JobRepository, transport: BridgeTransport):
        self._jobs = job_repository
        self._transport = transport

    async def execute(
        self,
        job: JobRecord,
        workflow_id: str,
        payload: Optional[Dict[str, Any]] = None,
        subscriber: Optional[Dict[str, Any]] = None,
        controls: Optional[Dict[str, Any]] = None,
        bridge_url: Optional[str] = None,
    ) -> ExecutionOutput:
        """
        Execute ``job`` through the bridge.

        Args:
            job: Job whose step should run
            workflow_id: Workflow the job belongs to
            payload: Trigger payload
            subscriber: Recipient attributes
            controls: Stored control values for the step
            bridge_url: Endpoint override

        Returns:
            ExecutionOutput returned by the bridge
        """
        state = await self.generate_state(job)
        event = Event(
            workflow_id=workflow_id,
            step_id=job.step_id,
            action=PostAction.EXECUTE,
            payload=normalize_payload(payload),
            subscriber=subscriber or {},
            state=state,
            controls=controls or {},
        )

        logger.info(
            f"Sending job {job.job_id} (step `{job.step_id}`) to the bridge "
            f"with {len(state)} prior state(s)"
        )
        output = await self._transport.send(event, bridge_url)
        logger.info(f"Bridge response received for job {job.job_id}: {output.metadata.to_wire()}")
        return output

    async def generate_state(self, job: JobRecord, now: Optional[datetime] = None) -> List[State]:
        """Walk the parent chain of ``job`` and map each ancestor, oldest first."""
        now = now or datetime.now(timezone.utc)
        states: List[State] = []
        visited = set()

        parent_id = job.parent_id
        while parent_id and parent_id not in visited:
            visited.add(parent_id)
            parent = await self._jobs.get(parent_id)
            if parent is None:
                break
            states.append(await self.map_state(parent, now))
            parent_id = parent.parent_id

        states.reverse()
        return states

    async def map_state(self, job: JobRecord, now: datetime) -> State:
        outputs: Dict[str, Any] = {}

        if job.type == "delay":
            outputs = {"duration": int((now - job.created_at).total_seconds() * 1000)}
        elif job.type == "digest":
            merged = await self._jobs.find_merged_digests(job.job_id)
            events = sorted([*merged, job], key=lambda j: j.created_at)
            outputs = {
                "events": [
                    {"id": j.job_id, "time": j.created_at.isoformat(), "payload": j.payload or {}}
                    for j in events
                ]
            }
        elif job.type == "custom":
            outputs = dict(job.step_output or {})
        elif job.type == "in_app":
            message = await self._jobs.get_message(job.job_id)
            if message:
                outputs = {
                    "seen": message.seen,
                    "read": message.read,
                    "lastSeenDate": _isoformat(message.last_seen_date),
                    "lastReadDate": _isoformat(message.last_read_date),
                }

        return State(
            step_id=job.step_id,
            outputs=outputs,
            state=StepState(status=job.status.value, error=job.error),
        )
