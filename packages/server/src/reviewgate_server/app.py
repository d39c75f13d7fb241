from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from reviewgate_core.config import RelayConfig
from reviewgate_core.errors import PublishError, PublishErrorKind
from reviewgate_core.publisher import Publisher
from reviewgate_core.verification import RecaptchaVerifier
from reviewgate_server import responses
from reviewgate_server.cors import CorsPolicy
from reviewgate_server.validation import RequestRejected, check_content_type, extract_submission, parse_body

logger = logging.getLogger(__name__)

_ROUTED_METHODS = ["POST", "OPTIONS"]


def create_app(config: RelayConfig, publisher=None, verifier=None) -> FastAPI:
    """Build the submission app. ``publisher`` and ``verifier`` default to the real clients."""
    publisher = publisher or Publisher(config)
    verifier = verifier or RecaptchaVerifier(
        secret=config.recaptcha_secret or "",
        verify_url=config.recaptcha_verify_url,
        timeout=config.request_timeout_seconds,
    )
    cors = CorsPolicy(config.origin)

    app = FastAPI(title="reviewgate", version="1.0.0")
    app.state.config = config

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        # Any verb the router rejects gets the same bodiless 405 with CORS headers.
        if exc.status_code == 405:
            return responses.method_not_allowed(cors.headers)
        return await http_exception_handler(request, exc)

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    @app.api_route("/", methods=_ROUTED_METHODS)
    async def submit(request: Request):
        if request.method == "OPTIONS":
            return cors.handle_options(request.headers)
        try:
            check_content_type(request.headers)
            payload = parse_body(await request.body())
            token, submission = extract_submission(payload)
        except RequestRejected as e:
            return responses.rejected(e, cors.headers)

        verification = await verifier.verify(token)
        if not verification.success:
            return responses.verification_failed(verification.errors, cors.headers)

        try:
            # PyGithub is blocking; keep it off the event loop.
            result = await run_in_threadpool(publisher.publish, submission)
        except PublishError as e:
            logger.error(
                "Publishing review for %r failed at %s (%s): %s", submission.course, e.step, e.kind.value, e.message
            )
            return responses.publish_failed(e, cors.headers)
        except Exception as e:
            logger.exception("Unexpected error publishing review for %r", submission.course)
            return responses.publish_failed(PublishError(PublishErrorKind.UNKNOWN, "publish", str(e)), cors.headers)

        return responses.created(result.url, cors.headers)

    return app
