"""
StepBridge API Routes

The bridge endpoint. A single path answers every bridge action, selected
with the ``action`` query parameter:
- GET  discover | health-check | code
- POST execute | preview
"""

from __future__ import annotations
from typing import Dict, Any, Optional, List, Type
from enum import Enum

from fastapi import APIRouter, Depends, Header, Query, Request
from pydantic import Field

from ..client import Client
from ..errors import InvalidActionError
from ..schemas.execution import CamelModel, Event, GetAction, PostAction, State
from ..utils.signature import SIGNATURE_HEADER, verify_signature


# =============================================================================
# API Models
# =============================================================================

class BridgeRequest(CamelModel):
    """Body of an execute or preview request."""
    payload: Optional[Dict[str, Any]] = None
    subscriber: Dict[str, Any] = Field(default_factory=dict)
    state: List[State] = Field(default_factory=list)
    controls: Dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# Router
# =============================================================================

router = APIRouter(prefix="/api/stepbridge", tags=["StepBridge"])

# Client singleton, replaced by create_app when one is supplied
_client: Optional[Client] = None


def get_client() -> Client:
    """Get or create the StepBridge client instance."""
    global _client
    if _client is None:
        _client = Client()
    return _client


def set_client(client: Client) -> None:
    global _client
    _client = client


def _parse_action(enum_cls: Type[Enum], action: Optional[str]):
    try:
        return enum_cls(action)
    except ValueError as e:
        raise InvalidActionError(action, [a.value for a in enum_cls]) from e


async def verify_request(
    request: Request,
    client: Client,
    signature: Optional[str],
) -> None:
    """Check the request signature when strict authentication is enabled."""
    if not client.strict_authentication:
        return
    body = (await request.body()).decode()
    verify_signature(
        client.secret_key,
        signature,
        body,
        client.signature_tolerance_seconds,
    )


# =============================================================================
# Endpoints
# =============================================================================

@router.get(
    "",
    summary="Bridge Read Actions",
    description="Discover workflows, report health or return source code.",
)
async def handle_get(
    request: Request,
    action: Optional[str] = Query(default=None),
    workflow_id: Optional[str] = Query(default=None, alias="workflowId"),
    step_id: Optional[str] = Query(default=None, alias="stepId"),
    signature: Optional[str] = Header(default=None, alias=SIGNATURE_HEADER),
    client: Client = Depends(get_client),
):
    get_action = _parse_action(GetAction, action)

    if get_action == GetAction.HEALTH_CHECK:
        return client.health_check().to_wire()

    await verify_request(request, client, signature)

    if get_action == GetAction.DISCOVER:
        return client.discover().to_wire()
    return client.get_code(workflow_id, step_id).to_wire()


@router.post(
    "",
    summary="Bridge Execution Actions",
    description="Execute or preview one step of a workflow.",
)
async def handle_post(
    request: Request,
    body: BridgeRequest,
    action: Optional[str] = Query(default=None),
    workflow_id: str = Query(..., alias="workflowId"),
    step_id: str = Query(..., alias="stepId"),
    signature: Optional[str] = Header(default=None, alias=SIGNATURE_HEADER),
    client: Client = Depends(get_client),
):
    post_action = _parse_action(PostAction, action)
    await verify_request(request, client, signature)

    event = Event(
        workflow_id=workflow_id,
        step_id=step_id,
        action=post_action,
        payload=body.payload,
        subscriber=body.subscriber,
        state=body.state,
        controls=body.controls,
    )
    output = await client.execute_workflow(event)
    return output.to_wire()
