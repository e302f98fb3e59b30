"""
Wait duration for delay and digest jobs.

Precedence for regular delays: the bridge response, then trigger
overrides, then the step metadata.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional
import logging

from ..errors import DelayCalculationError

logger = logging.getLogger(__name__)

SECOND_MS = 1000
MINUTE_MS = 60 * SECOND_MS
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS

UNIT_MILLISECONDS = {
    "seconds": SECOND_MS,
    "minutes": MINUTE_MS,
    "hours": HOUR_MS,
    "days": DAY_MS,
    "weeks": 7 * DAY_MS,
    "months": 30 * DAY_MS,
}

REGULAR_TYPES = frozenset({"regular", "backoff"})


def to_milliseconds(amount: Any, unit: Any) -> int:
    if not isinstance(amount, (int, float)) or isinstance(amount, bool):
        raise DelayCalculationError(f"Delay amount must be a number, got {amount!r}")
    if unit not in UNIT_MILLISECONDS:
        raise DelayCalculationError(f"Unsupported delay unit: {unit!r}")
    delay = int(amount * UNIT_MILLISECONDS[unit])
    logger.debug(f"Amount of delay is: {delay}ms")
    return delay


def _parse_date(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as e:
            raise DelayCalculationError(f"Invalid delay date: {value!r}") from e
    else:
        raise DelayCalculationError(f"Invalid delay date: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _get_path(data: Dict[str, Any], path: str) -> Any:
    node: Any = data
    for part in path.split("."):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node


def _user_regular(response: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if response and response.get("type") == "regular" and response.get("unit") and response.get("amount"):
        return {"amount": response["amount"], "unit": response["unit"]}
    return {}


def _valid_override(overrides: Optional[Dict[str, Any]]) -> bool:
    delay = (overrides or {}).get("delay")
    if not isinstance(delay, dict):
        return False
    amount = delay.get("amount")
    return (
        isinstance(amount, (int, float))
        and not isinstance(amount, bool)
        and delay.get("unit") in UNIT_MILLISECONDS
    )


def compute_job_wait_duration(
    step_metadata: Optional[Dict[str, Any]],
    payload: Optional[Dict[str, Any]] = None,
    overrides: Optional[Dict[str, Any]] = None,
    response: Optional[Dict[str, Any]] = None,
    now: Optional[datetime] = None,
) -> int:
    """
    Milliseconds a delay or digest job should wait.

    Args:
        step_metadata: Stored step metadata (``type``, ``amount``, ``unit``, ``delayPath``)
        payload: Trigger payload, used to resolve ``delayPath``
        overrides: Trigger overrides, ``{"delay": {"amount", "unit"}}``
        response: Outputs returned by the bridge for the step
        now: Reference time, defaults to the current UTC time

    Returns:
        Wait in milliseconds; 0 for types without a computed wait

    Raises:
        DelayCalculationError: Missing metadata, bad units or a past date
    """
    if not step_metadata:
        raise DelayCalculationError("Step metadata not found")

    now = now or datetime.now(timezone.utc)
    delay_type = (response or {}).get("type") or step_metadata.get("type")

    if delay_type == "scheduled":
        date = response.get("date") if response and response.get("type") == "scheduled" else None
        if date:
            delay = (_parse_date(date) - now).total_seconds() * 1000
            if delay < 0:
                raise DelayCalculationError("Delay date at must be a future date")
            return int(delay)

        delay_path = step_metadata.get("delayPath")
        if not delay_path:
            raise DelayCalculationError("Delay path not found")
        delay = (_parse_date(_get_path(payload or {}, delay_path)) - now).total_seconds() * 1000
        if delay < 0:
            raise DelayCalculationError(f"Delay date at path {delay_path} must be a future date")
        return int(delay)

    if delay_type in REGULAR_TYPES:
        user = _user_regular(response)
        if _valid_override(overrides):
            fallback = overrides["delay"]
        else:
            fallback = step_metadata
        return to_milliseconds(
            user.get("amount", fallback.get("amount")),
            user.get("unit", fallback.get("unit")),
        )

    return 0
