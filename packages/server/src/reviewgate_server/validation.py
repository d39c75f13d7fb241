"""Inbound request checks: content type, JSON body and payload shape."""

from __future__ import annotations

import json

from starlette.datastructures import Headers

from reviewgate_core.models import ReviewSubmission

JSON_CONTENT_TYPE = "application/json"
PARSE_FAILURE = "JSON parse failure"
MALFORMED = "Malformed submission"


class RequestRejected(Exception):
    def __init__(self, status_code: int, body: str | None = None):
        super().__init__(body or str(status_code))
        self.status_code = status_code
        self.body = body


def check_content_type(headers: Headers) -> None:
    if headers.get("content-type") != JSON_CONTENT_TYPE:
        raise RequestRejected(415)


def parse_body(raw: bytes):
    try:
        payload = json.loads(raw)
    except ValueError:
        raise RequestRejected(400, PARSE_FAILURE)
    if payload is None:
        raise RequestRejected(400, PARSE_FAILURE)
    return payload


def extract_submission(payload) -> tuple[str, ReviewSubmission]:
    """Return ``(recaptcha_token, submission)`` from a decoded body.

    Only the object shape is checked; missing fields are passed on empty.
    """
    if not isinstance(payload, dict):
        raise RequestRejected(400, MALFORMED)
    recaptcha = payload.get("recaptcha") or {}
    details = payload.get("details") or {}
    if not isinstance(recaptcha, dict) or not isinstance(details, dict):
        raise RequestRejected(400, MALFORMED)
    token = recaptcha.get("token")
    return ("" if token is None else str(token)), ReviewSubmission.from_payload(details)
