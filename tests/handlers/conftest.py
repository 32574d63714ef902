import json
from types import SimpleNamespace
from typing import Any

import pytest

from core.models.errors import InvalidTokenError
from core.utils.auth import set_verifier


class StubVerifier:
    """Accepts the token ``valid-token`` and nothing else."""

    def __init__(self, sub: str = "user-123") -> None:
        self.sub = sub

    def verify(self, token: str) -> dict[str, Any]:
        if token != "valid-token":
            raise InvalidTokenError()
        return {"sub": self.sub, "token_use": "access"}


@pytest.fixture
def lambda_context(monkeypatch):
    context = SimpleNamespace(
        aws_request_id="test-request-id",
        function_name="test-function",
        memory_limit_in_mb=256,
        invoked_function_arn="arn:aws:lambda:us-east-1:000000000000:function:test",
        log_group_name="/aws/lambda/test-function",
        log_stream_name="2024/01/01/[$LATEST]test",
    )

    monkeypatch.setattr(
        "aws_lambda_powertools.utilities.typing.LambdaContext",
        lambda: context,
        raising=False,
    )

    return context


@pytest.fixture(autouse=True)
def stub_verifier():
    verifier = StubVerifier()
    set_verifier(verifier)
    yield verifier
    set_verifier(None)


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": "Bearer valid-token"}


@pytest.fixture
def api_event(auth_headers):
    """
    Build an API Gateway proxy event.

    Usage:
        event = api_event("POST", "/api/s3/move", body={"oldKey": "a.jpg", ...})
    """

    def _event(
        method: str = "GET",
        path: str = "/",
        *,
        query: dict[str, str] | None = None,
        path_params: dict[str, str] | None = None,
        body: Any = None,
        authenticated: bool = True,
    ) -> dict[str, Any]:
        return {
            "httpMethod": method,
            "path": path,
            "headers": dict(auth_headers) if authenticated else {},
            "queryStringParameters": query,
            "pathParameters": path_params,
            "body": json.dumps(body) if body is not None else None,
            "requestContext": {"identity": {"sourceIp": "203.0.113.7"}},
        }

    return _event


@pytest.fixture
def response_body():
    def _body(response: dict[str, Any]) -> Any:
        return json.loads(response["body"])

    return _body
