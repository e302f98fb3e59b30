"""
StepBridge Main Application

FastAPI application serving the bridge endpoint.
"""

from typing import Optional
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.routes import router, set_client
from .client import Client
from .config import get_config
from .errors import FrameworkError
from .version import FRAMEWORK_VERSION, SDK_VERSION

logger = logging.getLogger(__name__)


# Configure logging
logging.basicConfig(
    level=get_config().log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


async def framework_error_handler(request: Request, exc: FrameworkError) -> JSONResponse:
    """Render a FrameworkError as ``{code, message, data}`` with its status."""
    if exc.status_code >= 500:
        logger.error(f"Bridge request failed: {exc.message}", exc_info=exc)
    else:
        logger.warning(f"Bridge request rejected: {exc.code.value}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def create_app(client: Optional[Client] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        client: Client holding the registered workflows. Defaults to one
            built from the environment configuration.
    """
    app = FastAPI(
        title="StepBridge",
        description="""
## StepBridge - Workflow Step Execution Endpoint

Serves the bridge protocol for registered code-first workflows.

**Read actions (GET):** `discover`, `health-check`, `code`

**Execution actions (POST):** `execute`, `preview`
        """,
        version=SDK_VERSION,
        debug=get_config().debug,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if client is not None:
        set_client(client)

    app.include_router(router)
    app.add_exception_handler(FrameworkError, framework_error_handler)

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint."""
        return {
            "name": "StepBridge",
            "sdkVersion": SDK_VERSION,
            "frameworkVersion": FRAMEWORK_VERSION,
            "bridge": router.prefix,
        }

    return app


app = create_app()
