"""HTTP implementation of the Authenticator port using signed API sessions."""

import asyncio
import datetime
import hashlib
from typing import Any, Dict, Mapping, Optional

import httpx

from ..application.domain import (
    Authenticator,
    RawResponse,
    ResponseCode,
    Session,
)
from ..application.exceptions import (
    BadResourceRequest,
    ClientError,
    InvalidResponse,
    NotAllowed,
    NotFound,
    PermissionDenied,
)

from .api_models import ApiResponse
from .base_client import BaseClient
from .decorators import retry_on_network_error

_SESSION_ENDPOINT = "/session"

_ERRORS_BY_STATUS = {
    400: BadResourceRequest,
    401: PermissionDenied,
    404: NotFound,
    405: NotAllowed,
    409: BadResourceRequest,
}


def _param_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return "" if value is None else str(value)


def build_param_string(params: Mapping[str, str]) -> str:
    """Concatenates key/value pairs, ordered by lowercased key."""
    ordered = sorted(params.items(), key=lambda item: item[0].lower())
    return "".join(f"{key}{value}" for key, value in ordered)


def _parse_expires(value: Optional[str]) -> Optional[datetime.datetime]:
    if not value:
        return None
    expires = datetime.datetime.fromisoformat(value.replace("Z", "+00:00"))
    if expires.tzinfo is None:
        expires = expires.replace(tzinfo=datetime.timezone.utc)
    return expires


class HttpAuthenticator(BaseClient, Authenticator):
    """
    Authenticates with an API key/secret pair and signs every request.

    The session token is shared by all requests made through this instance;
    session creation is serialized so concurrent callers do not interleave
    token refreshes.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        api_secret: str,
        version: str,
        api_user: Optional[str] = None,
    ):
        """Initializes the authenticator adapter."""
        super().__init__(client, api_key, api_secret)
        self.version = version
        self.api_user = api_user
        self.session: Optional[Session] = None
        self._session_lock: Optional[asyncio.Lock] = None

    def sign(self, payload: str) -> str:
        return hashlib.md5(payload.encode("utf-8")).hexdigest()

    def sign_token(
        self, path: str, params: Mapping[str, str], post_data: Optional[str]
    ) -> str:
        """Computes the ApiSig of a request made with the current session."""
        return self.sign(
            f"{self.api_secret}ApiKey{self.api_key}ServicePath{path}"
            f"{build_param_string(params)}{post_data or ''}"
        )

    def authenticated(self) -> bool:
        return self.session is not None and not self.session.expired()

    async def authenticate(self) -> Session:
        """
        Creates a new API session.

        Returns:
            The session now used to sign requests.

        Raises:
            ClientError: Or a subclass, if the API refused the credentials.
            InvalidResponse: If the session response could not be decoded.
        """

        params = {"ApiKey": self.api_key}
        signature = f"{self.api_secret}ApiKey{self.api_key}"
        if self.api_user:
            params["ApiUser"] = self.api_user
            signature += f"ApiUser{self.api_user}"
        params["ApiSig"] = self.sign(signature)

        # Created on first use so it belongs to the running event loop.
        if self._session_lock is None:
            self._session_lock = asyncio.Lock()

        async with self._session_lock:
            self.session = None
            self.logger.debug("Authenticating to the API...")
            raw = await self._execute_request(
                "POST", f"/{self.version}{_SESSION_ENDPOINT}", params, None
            )
            results = ApiResponse.from_body(raw.body).results or []
            if not results:
                raise InvalidResponse("The session response had no results")
            session_data = results[0]
            if not isinstance(session_data, dict) or not session_data.get(
                "AuthToken"
            ):
                raise InvalidResponse("The session response had no AuthToken")
            self.session = Session(
                auth_token=session_data["AuthToken"],
                expires=_parse_expires(session_data.get("Expires")),
                roles=tuple(session_data.get("Roles") or ()),
            )

        self.logger.info("Authentication successful.")
        return self.session

    async def request(
        self,
        method: str,
        path: str,
        body: Optional[str],
        options: Mapping[str, Any],
    ) -> RawResponse:
        """
        Sends a signed request using the current session.

        Every option is sent as a query parameter alongside the session
        token, and all of them are covered by the signature.

        Raises:
            PermissionDenied: If the session is missing or was rejected.
            ClientError: Or another subclass for any other API failure.
        """

        if self.session is None:
            raise PermissionDenied(
                "No session has been established", status=401
            )

        params: Dict[str, str] = {"AuthToken": self.session.auth_token}
        if self.api_user:
            params["ApiUser"] = self.api_user
        params.update({k: _param_value(v) for k, v in options.items()})
        params["ApiSig"] = self.sign_token(path, params, body)

        try:
            return await self._execute_request(method, path, params, body)
        except PermissionDenied as e:
            if e.code == ResponseCode.SESSION_TOKEN_EXPIRED:
                self.session = None
            raise

    @retry_on_network_error
    async def _execute_request(
        self,
        method: str,
        path: str,
        params: Mapping[str, str],
        body: Optional[str],
    ) -> RawResponse:
        """Executes the raw HTTP request and classifies the response."""
        headers = {"Accept": "application/json"}
        if body is not None:
            headers["Content-Type"] = "application/json"

        response = await self.client.request(
            method, path, params=params, content=body, headers=headers
        )

        try:
            payload = response.json()
        except ValueError as e:
            self.logger.error(
                f"Unable to understand the response! {response.text!r}"
            )
            raise InvalidResponse(
                "The server response could not be understood"
            ) from e

        if 200 <= response.status_code < 300:
            return RawResponse(status=response.status_code, body=payload)

        raise self._classify_error(response.status_code, payload)

    def _classify_error(self, status: int, payload: Any) -> ClientError:
        """Maps an error response to the matching ClientError subclass."""
        api_response = ApiResponse.from_body(payload)
        error_class = _ERRORS_BY_STATUS.get(status, ClientError)
        if status == 401:
            self.logger.warning(
                f"Authentication error ({api_response.code}): "
                f"{api_response.message}"
            )
        return error_class({
            "message": api_response.message,
            "code": api_response.code,
            "status": status,
        })
