"""Tests for the HTTP submission endpoint."""

from unittest.mock import MagicMock

import httpx
import pytest
import yaml
from fastapi.testclient import TestClient
from github import GithubException, UnknownObjectException

from reviewgate_core.config import RelayConfig
from reviewgate_core.errors import PublishError, PublishErrorKind
from reviewgate_core.models import PublishResult, VerificationResult
from reviewgate_core.publisher import Publisher
from reviewgate_core.verification import RecaptchaVerifier
from reviewgate_server.app import create_app

ORIGIN = "https://courses.example.com"
PR_URL = "https://github.com/ubc/courses/pull/7"

PAYLOAD = {
    "recaptcha": {"token": "client-token"},
    "details": {
        "course": "CPSC 110",
        "user": "Alice",
        "review": "Great course",
        "reference": "https://example.com",
        "difficulty": "4",
        "quality": "10",
        "sessionTaken": "2023W1",
    },
}


class StubVerifier:
    def __init__(self, result=None):
        self.result = result or VerificationResult(success=True)
        self.tokens = []

    async def verify(self, token):
        self.tokens.append(token)
        return self.result


def make_config(**overrides):
    fields = {
        "owner": "ubc",
        "repo": "courses",
        "origin": ORIGIN,
        "labels": ("review",),
        "github_token": "tok",
        "recaptcha_secret": "s",
    }
    fields.update(overrides)
    return RelayConfig(**fields)


@pytest.fixture
def publisher():
    publisher = MagicMock()
    publisher.publish.return_value = PublishResult(url=PR_URL, number=7, kind="pull_request")
    return publisher


@pytest.fixture
def verifier():
    return StubVerifier()


@pytest.fixture
def client(publisher, verifier):
    return TestClient(create_app(make_config(), publisher=publisher, verifier=verifier))


def assert_cors(response):
    assert response.headers["access-control-allow-origin"] == ORIGIN
    assert response.headers["access-control-allow-methods"] == "POST, OPTIONS"
    assert response.headers["access-control-allow-headers"] == "Content-Type"


class TestOptions:
    def test_preflight(self, client):
        response = client.options(
            "/",
            headers={
                "Origin": ORIGIN,
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Content-Type",
            },
        )
        assert response.status_code == 200
        assert_cors(response)
        assert response.content == b""

    def test_plain_options_gets_allow(self, client):
        response = client.options("/", headers={"Origin": ORIGIN})
        assert response.status_code == 200
        assert response.headers["allow"] == "POST, OPTIONS"
        assert "access-control-allow-origin" not in response.headers


class TestMethods:
    @pytest.mark.parametrize("method", ["GET", "HEAD", "PUT", "PATCH", "DELETE", "TRACE", "PURGE"])
    def test_other_methods_rejected(self, client, publisher, method):
        response = client.request(method, "/")
        assert response.status_code == 405
        assert response.content == b""
        assert_cors(response)
        publisher.publish.assert_not_called()

    def test_healthz(self, client):
        assert client.get("/healthz").json() == {"status": "ok"}

    def test_unknown_path_still_404(self, client):
        assert client.get("/nope").status_code == 404


class TestValidation:
    @pytest.mark.parametrize("content_type", ["text/plain", "application/json; charset=utf-8", "application/x-www-form-urlencoded"])
    def test_wrong_content_type(self, client, verifier, content_type):
        response = client.post("/", content=b"{}", headers={"Content-Type": content_type})
        assert response.status_code == 415
        assert_cors(response)
        assert verifier.tokens == []

    def test_unparsable_body(self, client, verifier):
        response = client.post("/", content=b"{not json", headers={"Content-Type": "application/json"})
        assert response.status_code == 400
        assert response.text == "JSON parse failure"
        assert_cors(response)
        assert verifier.tokens == []

    def test_null_body(self, client, verifier):
        response = client.post("/", content=b"null", headers={"Content-Type": "application/json"})
        assert response.status_code == 400
        assert response.text == "JSON parse failure"
        assert verifier.tokens == []

    def test_empty_body(self, client):
        response = client.post("/", content=b"", headers={"Content-Type": "application/json"})
        assert response.status_code == 400
        assert response.text == "JSON parse failure"

    @pytest.mark.parametrize("body", [b"[1, 2]", b'"text"', b'{"details": "x"}', b'{"recaptcha": 5}'])
    def test_malformed_submission(self, client, body):
        response = client.post("/", content=body, headers={"Content-Type": "application/json"})
        assert response.status_code == 400
        assert response.text == "Malformed submission"
        assert_cors(response)


class TestVerification:
    def test_token_passed_to_verifier(self, client, verifier):
        client.post("/", json=PAYLOAD)
        assert verifier.tokens == ["client-token"]

    def test_missing_token_sent_empty(self, client, verifier):
        client.post("/", json={"details": PAYLOAD["details"]})
        assert verifier.tokens == [""]

    def test_verification_failure(self, publisher):
        verifier = StubVerifier(VerificationResult(success=False, errors=["invalid-input-response"]))
        client = TestClient(create_app(make_config(), publisher=publisher, verifier=verifier))

        response = client.post("/", json=PAYLOAD)

        assert response.status_code == 400
        assert response.json() == {"errors": ["invalid-input-response"]}
        assert_cors(response)
        publisher.publish.assert_not_called()


class TestPublish:
    def test_success(self, client, publisher):
        response = client.post("/", json=PAYLOAD)

        assert response.status_code == 201
        assert response.json() == {"url": PR_URL}
        assert response.headers["content-type"] == "application/json"
        assert_cors(response)
        submission = publisher.publish.call_args.args[0]
        assert submission.course == "CPSC 110"
        assert submission.quality == "10"

    def test_publish_error(self, client, publisher):
        publisher.publish.side_effect = PublishError(PublishErrorKind.UNAUTHORIZED, "create_branch", "Bad credentials", status=401)

        response = client.post("/", json=PAYLOAD)

        assert response.status_code == 500
        assert response.json() == {
            "error": {"kind": "unauthorized", "step": "create_branch", "status": 401, "message": "Bad credentials"}
        }
        assert_cors(response)

    def test_unexpected_error(self, client, publisher):
        publisher.publish.side_effect = RuntimeError("boom")

        response = client.post("/", json=PAYLOAD)

        assert response.status_code == 500
        assert response.json()["error"]["kind"] == "unknown"
        assert response.json()["error"]["message"] == "boom"


def make_github_repo():
    repo = MagicMock()
    repo.get_git_ref.return_value.object.sha = "c" * 40
    repo.get_contents.side_effect = UnknownObjectException(404, {"message": "Not Found"})
    repo.create_pull.return_value.html_url = PR_URL
    repo.create_pull.return_value.number = 7
    return repo


def captcha_transport(body):
    return httpx.MockTransport(lambda request: httpx.Response(200, json=body))


class TestEndToEnd:
    """Real verifier and publisher, with the CAPTCHA provider and GitHub mocked out."""

    def make_client(self, repo, captcha_body):
        config = make_config()
        verifier = RecaptchaVerifier(secret="s", transport=captcha_transport(captcha_body))
        return TestClient(create_app(config, publisher=Publisher(config, repo_obj=repo), verifier=verifier))

    def test_review_becomes_pull_request(self):
        repo = make_github_repo()
        client = self.make_client(repo, {"success": True})

        response = client.post("/", json=PAYLOAD)

        assert response.status_code == 201
        assert response.json() == {"url": PR_URL}
        body = repo.create_pull.call_args.kwargs["body"]
        assert "Difficulty: 4/5" in body
        assert "Quality: 5/5" in body
        content = repo.create_file.call_args.args[2]
        assert content.startswith("reviews:\n")
        assert len(yaml.safe_load(content)["reviews"]) == 1

    def test_captcha_rejection_touches_nothing(self):
        repo = make_github_repo()
        client = self.make_client(repo, {"success": False, "error-codes": ["invalid-input-response"]})

        response = client.post("/", json=PAYLOAD)

        assert response.status_code == 400
        assert response.json() == {"errors": ["invalid-input-response"]}
        repo.create_git_ref.assert_not_called()

    def test_github_failure_is_500(self):
        repo = make_github_repo()
        repo.create_git_ref.side_effect = GithubException(422, {"message": "Reference already exists"})
        client = self.make_client(repo, {"success": True})

        response = client.post("/", json=PAYLOAD)

        assert response.status_code == 500
        assert response.json()["error"] == {
            "kind": "conflict",
            "step": "create_branch",
            "status": 422,
            "message": "Reference already exists",
        }
