"""
Failures the claim core cannot turn into a normal outcome.

Conflicts and missing claims are results, not errors; see
neighbourly.services.claim_service. Only infrastructure failures live here.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

STATUS_BAD_GATEWAY = 502
STATUS_SERVICE_UNAVAILABLE = 503


class StoreUnavailable(Exception):
    """The claim store could not be reached or failed mid-operation."""


class GeoUnavailable(Exception):
    """The geo collaborator failed to answer."""


def _store_unavailable(request: Request, exc: StoreUnavailable) -> JSONResponse:
    logger.error("claim store unavailable on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=STATUS_SERVICE_UNAVAILABLE, content={"detail": "store_unavailable"})


def _geo_unavailable(request: Request, exc: GeoUnavailable) -> JSONResponse:
    logger.error("geo service unavailable on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=STATUS_BAD_GATEWAY, content={"detail": "geo_unavailable"})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StoreUnavailable, _store_unavailable)
    app.add_exception_handler(GeoUnavailable, _geo_unavailable)
