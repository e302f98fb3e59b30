"""StepBridge utilities."""

from .imports import ImportRequirement, check_dependencies, is_available
from .merge import deep_merge
from .mock import PLACEHOLDER, mock_from_schema
from .signature import SIGNATURE_HEADER, sign_body, verify_signature

__all__ = [
    "ImportRequirement",
    "check_dependencies",
    "is_available",
    "deep_merge",
    "PLACEHOLDER",
    "mock_from_schema",
    "SIGNATURE_HEADER",
    "sign_body",
    "verify_signature",
]
