"""
Bridge Endpoint Tests

Exercises the FastAPI bridge endpoint: action routing, request
signatures and the error envelope.
"""

import asyncio
import json
import time

import pytest
from fastapi.testclient import TestClient

from stepbridge import Client, workflow
from stepbridge.main import create_app
from stepbridge.utils.signature import SIGNATURE_HEADER, sign_body

BRIDGE = "/api/stepbridge"
SECRET = "test-secret"


async def greeting_execute(ctx):
    await ctx.step.email(
        "send-email",
        lambda controls: {"subject": f"Hi {ctx.payload['name']}", "body": controls["body"]},
        control_schema={
            "type": "object",
            "properties": {"body": {"type": "string", "default": "Welcome {{payload.name}}"}},
        },
    )


def build_client(**kwargs) -> Client:
    client = Client(secret_key=SECRET, **kwargs)
    asyncio.run(client.add_workflows([
        workflow(
            "greeting",
            greeting_execute,
            payload_schema={
                "type": "object",
                "properties": {"name": {"type": "string"}},
                "required": ["name"],
            },
        )
    ]))
    return client


def execute_params(**overrides):
    params = {"action": "execute", "workflowId": "greeting", "stepId": "send-email"}
    params.update(overrides)
    return params


# =============================================================================
# Open Endpoint
# =============================================================================

class TestOpenEndpoint:
    """Strict authentication disabled."""

    @pytest.fixture
    def http(self):
        return TestClient(create_app(build_client(strict_authentication=False)))

    def test_root(self, http):
        """Verify the root path reports the bridge endpoint."""
        response = http.get("/")

        assert response.status_code == 200
        assert response.json()["bridge"] == BRIDGE

    def test_health_check(self, http):
        """Verify the health check reports registered workflow and step counts."""
        response = http.get(BRIDGE, params={"action": "health-check"})

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["discovered"] == {"workflows": 1, "steps": 1}

    def test_discover(self, http):
        """Verify discover lists registered workflows."""
        response = http.get(BRIDGE, params={"action": "discover"})

        assert response.status_code == 200
        workflows = response.json()["workflows"]
        assert workflows[0]["workflowId"] == "greeting"
        assert workflows[0]["steps"][0]["stepId"] == "send-email"

    def test_code(self, http):
        """Verify code lookup returns workflow source."""
        response = http.get(BRIDGE, params={"action": "code", "workflowId": "greeting"})

        assert response.status_code == 200
        assert "async def greeting_execute" in response.json()["code"]

    def test_code_unknown_step(self, http):
        """Verify code lookup for an unknown step returns 404."""
        response = http.get(
            BRIDGE, params={"action": "code", "workflowId": "greeting", "stepId": "missing"}
        )

        assert response.status_code == 404
        assert response.json()["code"] == "StepNotFoundError"

    def test_invalid_get_action(self, http):
        """Verify an unknown GET action is rejected."""
        response = http.get(BRIDGE, params={"action": "explode"})

        assert response.status_code == 400
        assert response.json()["code"] == "InvalidActionError"

    def test_invalid_post_action(self, http):
        """Verify an unknown POST action is rejected."""
        response = http.post(BRIDGE, params=execute_params(action="discover"), json={"payload": {}})

        assert response.status_code == 400
        assert response.json()["code"] == "InvalidActionError"

    def test_execute(self, http):
        """Verify execute returns the target step outputs."""
        response = http.post(BRIDGE, params=execute_params(), json={"payload": {"name": "John"}})

        assert response.status_code == 200
        body = response.json()
        assert body["outputs"] == {"subject": "Hi John", "body": "Welcome John"}
        assert body["providers"] == {}
        assert body["options"] == {"skip": False}
        assert body["metadata"]["status"] == "success"

    def test_execute_with_state_and_controls(self, http):
        """Verify replay state and controls flow through the endpoint."""
        response = http.post(
            BRIDGE,
            params=execute_params(),
            json={
                "payload": {"name": "John"},
                "controls": {"body": "Custom"},
                "state": [{"stepId": "unrelated", "outputs": {}}],
            },
        )

        assert response.status_code == 200
        assert response.json()["outputs"]["body"] == "Custom"

    def test_preview(self, http):
        """Verify preview runs with a mocked payload."""
        response = http.post(BRIDGE, params=execute_params(action="preview"), json={})

        assert response.status_code == 200
        assert response.json()["outputs"]["subject"] == "Hi [placeholder]"

    def test_unknown_workflow(self, http):
        """Verify an unknown workflow maps to a 404 error body."""
        response = http.post(BRIDGE, params=execute_params(workflowId="missing"), json={"payload": {}})

        assert response.status_code == 404
        body = response.json()
        assert body["code"] == "WorkflowNotFoundError"
        assert "missing" in body["message"]

    def test_missing_payload(self, http):
        """Verify execute without a payload is rejected."""
        response = http.post(BRIDGE, params=execute_params(), json={})

        assert response.status_code == 400
        assert response.json()["code"] == "ExecutionEventPayloadInvalidError"

    def test_invalid_payload(self, http):
        """Verify a payload failing its schema is rejected with details."""
        response = http.post(BRIDGE, params=execute_params(), json={"payload": {"name": 5}})

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "ExecutionEventPayloadInvalidError"
        assert body["data"][0]["path"] == "/name"


# =============================================================================
# Strict Authentication
# =============================================================================

class TestStrictAuthentication:
    """Requests must carry a valid HMAC signature."""

    @pytest.fixture
    def http(self):
        return TestClient(create_app(build_client(strict_authentication=True)))

    @pytest.fixture
    def body(self):
        return json.dumps({"payload": {"name": "John"}})

    def post(self, http, body, signature=None):
        headers = {"Content-Type": "application/json"}
        if signature is not None:
            headers[SIGNATURE_HEADER] = signature
        return http.post(BRIDGE, params=execute_params(), content=body, headers=headers)

    def test_health_check_is_open(self, http):
        """Health checks need no signature."""
        response = http.get(BRIDGE, params={"action": "health-check"})

        assert response.status_code == 200

    def test_signed_request(self, http, body):
        """Verify a correctly signed request is accepted."""
        response = self.post(http, body, sign_body(SECRET, body))

        assert response.status_code == 200
        assert response.json()["outputs"]["subject"] == "Hi John"

    def test_signed_discover(self, http):
        """Verify GET requests are signed over an empty body."""
        response = http.get(
            BRIDGE,
            params={"action": "discover"},
            headers={SIGNATURE_HEADER: sign_body(SECRET, "")},
        )

        assert response.status_code == 200

    def test_missing_signature(self, http, body):
        """Verify a request without a signature header is rejected."""
        response = self.post(http, body)

        assert response.status_code == 401
        assert response.json()["code"] == "SignatureNotFoundError"

    def test_malformed_signature(self, http, body):
        """Verify a malformed signature header is rejected."""
        response = self.post(http, body, "garbage")

        assert response.status_code == 401
        assert response.json()["code"] == "SignatureInvalidError"

    def test_wrong_secret(self, http, body):
        """Verify a signature from another secret is rejected."""
        response = self.post(http, body, sign_body("other-secret", body))

        assert response.status_code == 401
        assert response.json()["code"] == "SignatureMismatchError"

    def test_tampered_body(self, http, body):
        """Verify a body changed after signing is rejected."""
        signature = sign_body(SECRET, body)

        response = self.post(http, json.dumps({"payload": {"name": "Mallory"}}), signature)

        assert response.status_code == 401
        assert response.json()["code"] == "SignatureMismatchError"

    def test_expired_signature(self, http, body):
        """Verify a timestamp older than the tolerance window is rejected."""
        stale = int(time.time() * 1000) - 10 * 60 * 1000

        response = self.post(http, body, sign_body(SECRET, body, timestamp=stale))

        assert response.status_code == 401
        assert response.json()["code"] == "SignatureExpiredError"

    def test_future_signature_rejected(self, http, body):
        """A timestamp beyond the tolerance window in the future is rejected."""
        ahead = int(time.time() * 1000) + 10 * 60 * 1000

        response = self.post(http, body, sign_body(SECRET, body, timestamp=ahead))

        assert response.status_code == 401
        assert response.json()["code"] == "SignatureExpiredError"

    def test_missing_secret_key(self, body, monkeypatch):
        """Verify strict mode without a secret key rejects every request."""
        monkeypatch.delenv("STEPBRIDGE_SECRET_KEY", raising=False)
        client = Client(strict_authentication=True)
        http = TestClient(create_app(client))

        response = self.post(http, body, sign_body(SECRET, body))

        assert response.status_code == 401
        assert response.json()["code"] == "SigningKeyNotFoundError"
