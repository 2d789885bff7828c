"""
Global Error Handling

Error taxonomy for the bill search server and the FastAPI handlers that turn
escaped exceptions into JSON responses.

Taxonomy
--------
- Provider unavailable : recovered inside the Embedder / document source,
                         never reaches this module
- Index precondition   : IndexBuildError, DimensionMismatchError; the index
                         keeps its previous valid state
- Anything else        : logged with traceback, answered with a bare 500

The search route itself never raises (the service degrades to empty
results), so these handlers guard the administrative endpoints and act as a
final safety net.
"""

from __future__ import annotations

import logging
from typing import Dict, Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..embeddings.index import DimensionMismatchError, IndexBuildError

logger = logging.getLogger("legis.errors")


def _error_payload(error: str, detail: str) -> Dict[str, Any]:
    return {"error": error, "detail": detail}


async def index_error_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Report an index precondition violation.

    The message is ours (no upstream data in it), so it is safe to return.
    """
    logger.error(
        "Index precondition violated during %s %s: %s",
        request.method,
        request.url.path,
        exc,
    )

    return JSONResponse(
        status_code=409,
        content=_error_payload("index_error", str(exc)),
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Catch-all handler: log the traceback, return a generic 500.
    """
    logger.exception(
        "Unhandled exception during request: %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )

    return JSONResponse(
        status_code=500,
        content=_error_payload("internal_server_error", "Internal server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(IndexBuildError, index_error_handler)
    app.add_exception_handler(DimensionMismatchError, index_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
