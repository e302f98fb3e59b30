"""StepBridge API Package."""

from .routes import router, get_client, set_client

__all__ = ["router", "get_client", "set_client"]
