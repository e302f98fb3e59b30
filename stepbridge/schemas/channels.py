"""
Built-in output and result schemas for each step type.

Output schemas describe what a step handler returns. Result schemas
describe what later steps see when they await the step.
"""

from typing import Any, Dict

from .workflow import StepType


def _object(properties: Dict[str, Any], required, additional: bool = False) -> Dict[str, Any]:
    return {
        "type": "object",
        "properties": properties,
        "required": list(required),
        "additionalProperties": additional,
    }


_STRING = {"type": "string"}
_NUMBER = {"type": "number"}

_UNIT = {
    "type": "string",
    "enum": ["seconds", "minutes", "hours", "days", "weeks", "months"],
}

_REDIRECT = _object({"url": _STRING, "target": _STRING}, ["url"])

_ACTION = _object({"label": _STRING, "redirect": _REDIRECT}, ["label"])


# =============================================================================
# Output Schemas
# =============================================================================

EMAIL_OUTPUT_SCHEMA = _object({"subject": _STRING, "body": _STRING}, ["subject", "body"])

SMS_OUTPUT_SCHEMA = _object({"body": _STRING}, ["body"])

CHAT_OUTPUT_SCHEMA = _object({"body": _STRING}, ["body"])

PUSH_OUTPUT_SCHEMA = _object({"subject": _STRING, "body": _STRING}, ["subject", "body"])

IN_APP_OUTPUT_SCHEMA = _object(
    {
        "subject": _STRING,
        "body": _STRING,
        "avatar": {"type": "string", "format": "uri"},
        "primaryAction": _ACTION,
        "secondaryAction": _ACTION,
        "data": {"type": "object", "additionalProperties": True},
        "redirect": _REDIRECT,
    },
    ["body"],
)

DELAY_OUTPUT_SCHEMA = _object(
    {
        "type": {"type": "string", "enum": ["regular"], "default": "regular"},
        "amount": _NUMBER,
        "unit": _UNIT,
    },
    ["amount", "unit"],
)

# No defaults inside the branches, a default would leak into the other one.
DIGEST_OUTPUT_SCHEMA = {
    "anyOf": [
        _object(
            {
                "amount": _NUMBER,
                "unit": _UNIT,
                "digestKey": _STRING,
                "lookBackWindow": _object({"amount": _NUMBER, "unit": _UNIT}, ["amount", "unit"]),
            },
            ["amount", "unit"],
        ),
        _object({"cron": _STRING, "digestKey": _STRING}, ["cron"]),
    ]
}

CUSTOM_OUTPUT_SCHEMA = {"type": "object", "additionalProperties": True}


# =============================================================================
# Result Schemas
# =============================================================================

EMPTY_RESULT_SCHEMA = _object({}, [])

IN_APP_RESULT_SCHEMA = _object(
    {
        "seen": {"type": "boolean"},
        "read": {"type": "boolean"},
        "lastSeenDate": {"type": ["string", "null"], "format": "date-time"},
        "lastReadDate": {"type": ["string", "null"], "format": "date-time"},
    },
    ["seen", "read", "lastSeenDate", "lastReadDate"],
)

DIGEST_RESULT_SCHEMA = _object(
    {
        "events": {
            "type": "array",
            "items": _object(
                {
                    "id": _STRING,
                    "time": _STRING,
                    "payload": {"type": "object", "additionalProperties": True},
                },
                ["id", "time", "payload"],
            ),
        },
    },
    ["events"],
)

DELAY_RESULT_SCHEMA = _object({"duration": _NUMBER}, ["duration"])


OUTPUT_SCHEMAS = {
    StepType.EMAIL: EMAIL_OUTPUT_SCHEMA,
    StepType.SMS: SMS_OUTPUT_SCHEMA,
    StepType.CHAT: CHAT_OUTPUT_SCHEMA,
    StepType.PUSH: PUSH_OUTPUT_SCHEMA,
    StepType.IN_APP: IN_APP_OUTPUT_SCHEMA,
    StepType.DELAY: DELAY_OUTPUT_SCHEMA,
    StepType.DIGEST: DIGEST_OUTPUT_SCHEMA,
    StepType.CUSTOM: CUSTOM_OUTPUT_SCHEMA,
}

RESULT_SCHEMAS = {
    StepType.EMAIL: EMPTY_RESULT_SCHEMA,
    StepType.SMS: EMPTY_RESULT_SCHEMA,
    StepType.CHAT: EMPTY_RESULT_SCHEMA,
    StepType.PUSH: EMPTY_RESULT_SCHEMA,
    StepType.IN_APP: IN_APP_RESULT_SCHEMA,
    StepType.DELAY: DELAY_RESULT_SCHEMA,
    StepType.DIGEST: DIGEST_RESULT_SCHEMA,
}

# Control schema used when a step declares none
EMPTY_CONTROL_SCHEMA = {"type": "object", "properties": {}, "additionalProperties": True}
