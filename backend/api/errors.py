"""
api/errors.py
=============
JSON error bodies for the HTTP boundary.

Client errors are raised as ``PharmaGuardHTTPError`` and rendered as
``{"error": ..., **extra}``.  Anything unexpected becomes a logged 500.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class PharmaGuardHTTPError(Exception):
    def __init__(self, status_code: int, error: str, **extra: Any) -> None:
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.extra = extra

    def body(self) -> dict:
        return {"error": self.error, **self.extra}


def bad_request(error: str, **extra: Any) -> PharmaGuardHTTPError:
    return PharmaGuardHTTPError(status.HTTP_400_BAD_REQUEST, error, **extra)


async def _pharmaguard_error_handler(request: Request, exc: PharmaGuardHTTPError) -> JSONResponse:
    logger.info("%s %s → %d: %s", request.method, request.url.path, exc.status_code, exc.error)
    return JSONResponse(status_code=exc.status_code, content=exc.body())


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error during analysis"},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PharmaGuardHTTPError, _pharmaguard_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
