"""reCAPTCHA token verification."""

from __future__ import annotations

import logging

import httpx

from reviewgate_core.config import RECAPTCHA_VERIFY_URL
from reviewgate_core.models import VerificationResult

logger = logging.getLogger(__name__)

PARSE_FAILURE = "JSON parse failure"


class RecaptchaVerifier:
    """Checks a client token against the siteverify endpoint.

    Never raises: transport errors, bad status codes and unreadable bodies all
    come back as a failed VerificationResult.
    """

    def __init__(
        self,
        secret: str,
        verify_url: str = RECAPTCHA_VERIFY_URL,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._secret = secret
        self._verify_url = verify_url
        self._timeout = timeout
        self._transport = transport

    async def verify(self, token: str) -> VerificationResult:
        params = {"secret": self._secret, "response": token or ""}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                r = await client.post(self._verify_url, params=params)
                data = r.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("reCAPTCHA verification request failed: %s", e)
            return VerificationResult(success=False, errors=[PARSE_FAILURE])

        if not isinstance(data, dict):
            return VerificationResult(success=False, errors=[PARSE_FAILURE])

        success = data.get("success") is True
        errors = [str(code) for code in data.get("error-codes") or []]
        if not success:
            logger.info("reCAPTCHA rejected token: %s", ", ".join(errors) or "no error codes")
        return VerificationResult(success=success, errors=errors)
