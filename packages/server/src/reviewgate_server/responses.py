"""Map pipeline outcomes to HTTP responses.

Every response except the OPTIONS answers carries the CORS headers so the
browser can read error bodies.
"""

from __future__ import annotations

from fastapi import Response
from fastapi.responses import JSONResponse, PlainTextResponse

from reviewgate_core.errors import PublishError
from reviewgate_server.validation import RequestRejected


def created(url: str, cors_headers: dict) -> JSONResponse:
    return JSONResponse({"url": url}, status_code=201, headers=cors_headers)


def method_not_allowed(cors_headers: dict) -> Response:
    return Response(status_code=405, headers=cors_headers)


def rejected(exc: RequestRejected, cors_headers: dict) -> Response:
    if exc.body is None:
        return Response(status_code=exc.status_code, headers=cors_headers)
    return PlainTextResponse(exc.body, status_code=exc.status_code, headers=cors_headers)


def verification_failed(errors: list[str], cors_headers: dict) -> JSONResponse:
    return JSONResponse({"errors": list(errors)}, status_code=400, headers=cors_headers)


def publish_failed(error: PublishError, cors_headers: dict) -> JSONResponse:
    return JSONResponse({"error": error.to_dict()}, status_code=500, headers=cors_headers)
