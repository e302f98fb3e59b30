"""Strip markup from human-facing step outputs."""

from collections.abc import Mapping
from typing import Any

import nh3


def sanitize(value: Any) -> Any:
    """
    Clean every string leaf of ``value``.

    ``<script>`` and ``<style>`` elements are removed with their content,
    other disallowed tags are stripped. Non-string leaves are untouched.
    """
    if isinstance(value, str):
        return nh3.clean(value)
    if isinstance(value, Mapping):
        return {key: sanitize(item) for key, item in value.items()}
    if isinstance(value, list):
        return [sanitize(item) for item in value]
    if isinstance(value, tuple):
        return tuple(sanitize(item) for item in value)
    return value
