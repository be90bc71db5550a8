"""Pytest configuration and fixtures.

Provides an in-memory authenticator double and helpers to build response
envelopes, so the request pipeline can be exercised without network access.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import Any

import pytest

from flexmls_client.application.domain import Authenticator, RawResponse, Session

# =============================================================================
# Test Doubles
# =============================================================================


def envelope(status: int = 200, **fields: Any) -> RawResponse:
    """Build a raw response whose body is a ``{"D": {...}}`` envelope."""
    return RawResponse(status=status, body={"D": fields})


@dataclass
class FakeAuthenticator(Authenticator):
    """Authenticator double replaying scripted transport outcomes.

    Each entry of ``responses`` is either a RawResponse to return or an
    exception to raise, consumed one per request.
    """

    responses: list[Any] = field(default_factory=list)
    authenticate_errors: list[Exception] = field(default_factory=list)
    is_authenticated: bool = False
    authenticate_calls: int = 0
    requests: list[tuple[str, str, str | None, dict[str, Any]]] = field(
        default_factory=list
    )

    def authenticated(self) -> bool:
        return self.is_authenticated

    async def authenticate(self) -> Session:
        self.authenticate_calls += 1
        if self.authenticate_errors:
            raise self.authenticate_errors.pop(0)
        self.is_authenticated = True
        return Session(auth_token="token")

    async def request(self, method, path, body, options) -> RawResponse:
        self.requests.append((method, path, body, dict(options)))
        outcome = self.responses.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def authenticator() -> FakeAuthenticator:
    return FakeAuthenticator()


# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def isolate_flexmls_env(monkeypatch):
    """Clear FLEXMLS_* env vars so local credentials never leak into tests."""
    for key in list(os.environ.keys()):
        if key.startswith("FLEXMLS_"):
            monkeypatch.delenv(key, raising=False)
