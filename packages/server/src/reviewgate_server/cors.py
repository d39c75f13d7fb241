from __future__ import annotations

from fastapi import Response
from starlette.datastructures import Headers

ALLOWED_METHODS = "POST, OPTIONS"
ALLOWED_HEADERS = "Content-Type"

_PREFLIGHT_HEADERS = ("Origin", "Access-Control-Request-Method", "Access-Control-Request-Headers")


class CorsPolicy:
    """Fixed single-origin CORS policy for the submission endpoint."""

    def __init__(self, origin: str):
        self.origin = origin

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Access-Control-Allow-Origin": self.origin,
            "Access-Control-Allow-Methods": ALLOWED_METHODS,
            "Access-Control-Allow-Headers": ALLOWED_HEADERS,
        }

    @staticmethod
    def is_preflight(headers: Headers) -> bool:
        return all(headers.get(name) is not None for name in _PREFLIGHT_HEADERS)

    def handle_options(self, headers: Headers) -> Response:
        """Answer a pre-flight request with the CORS headers, anything else with a bare Allow."""
        if self.is_preflight(headers):
            return Response(status_code=200, headers=self.headers)
        return Response(status_code=200, headers={"Allow": ALLOWED_METHODS})
