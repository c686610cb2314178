"""Unit tests for rate limit keying and the 429 envelope."""

import json
from uuid import uuid4

import pytest
from starlette.requests import Request

from core.rate_limit import rate_limit_exceeded_handler, rate_limit_key
from domain.entities.identity import Identity
from infrastructure.auth.provider import Session


def _request(session=None) -> Request:
    request = Request(
        {
            "type": "http",
            "method": "GET",
            "path": "/api/v1/profiles/me",
            "headers": [],
            "client": ("203.0.113.7", 5000),
        }
    )
    if session is not None:
        request.state.session = session
    return request


def test_anonymous_caller_is_keyed_by_address():
    assert rate_limit_key(_request()) == "203.0.113.7"


def test_signed_in_caller_is_keyed_by_user():
    user_id = uuid4()
    session = Session(Identity(id=user_id, email=""), access_token="t")

    assert rate_limit_key(_request(session)) == f"user:{user_id}"


@pytest.mark.asyncio
async def test_exceeded_handler_uses_error_envelope():
    response = await rate_limit_exceeded_handler(_request(), RuntimeError("10 per 1 minute"))

    assert response.status_code == 429
    body = json.loads(response.body)
    assert body["error_code"] == "RATE_LIMIT_EXCEEDED"
    assert body["error"] == "Too many requests, please slow down"
    assert body["details"] == {"limit": "10 per 1 minute"}
