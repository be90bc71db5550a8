"""HTTP request wrapper performing the API session handling for callers."""

import json
import logging
import time
from typing import Any, AsyncIterator, Dict, Mapping, Optional, Union

from ..application.domain import (
    Authenticator,
    PaginatedCollection,
    RawResponse,
    ResponseCode,
    ResponseCollection,
)
from ..application.exceptions import PermissionDenied
from ..application.pagination import COUNT_MODE, normalize_results

from .api_models import ENVELOPE_KEY, ApiResponse

_MAX_SESSION_RETRIES = 1

Result = Union[ResponseCollection, int, None]


class ApiClient:
    """
    Issues API requests, re-authenticating once when the session expired.

    Paths are given without version or endpoint information, e.g.
    ``/listings/20100000000000000000000000``.
    """

    def __init__(
        self,
        authenticator: Authenticator,
        version: str,
        logger: Optional[logging.Logger] = None,
    ):
        """Initializes the client with its authenticator and API version."""
        self.authenticator = authenticator
        self.version = version
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    async def get(
        self, path: str, options: Optional[Mapping[str, Any]] = None
    ) -> Result:
        """
        Performs an HTTP GET request.

        Args:
            path: Path of an API resource.
            options: Resource request options supported by the resource.

        Returns:
            The decoded results, or the total row count in count mode.

        Raises:
            ClientError: Or a subclass, if the request failed.
        """
        return await self._request("GET", path, None, options)

    async def post(
        self,
        path: str,
        body: Any = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> Result:
        """Performs an HTTP POST request with ``body`` as the post data."""
        return await self._request(
            "POST", path, {} if body is None else body, options
        )

    async def put(
        self,
        path: str,
        body: Any = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> Result:
        """Performs an HTTP PUT request with ``body`` as the post data."""
        return await self._request(
            "PUT", path, {} if body is None else body, options
        )

    async def delete(
        self, path: str, options: Optional[Mapping[str, Any]] = None
    ) -> Result:
        """Performs an HTTP DELETE request."""
        return await self._request("DELETE", path, None, options)

    async def count(
        self, path: str, options: Optional[Mapping[str, Any]] = None
    ) -> Optional[int]:
        """Returns the total number of rows the resource would return."""
        params = {**(options or {}), "_pagination": COUNT_MODE}
        return await self.get(path, params)

    async def paginate(
        self,
        path: str,
        page: int = 1,
        per_page: int = 25,
        options: Optional[Mapping[str, Any]] = None,
    ) -> Result:
        """Fetches a single page of the resource."""
        params = {
            **(options or {}),
            "_pagination": 1,
            "_page": page,
            "_limit": per_page,
        }
        return await self.get(path, params)

    async def iter_pages(
        self,
        path: str,
        per_page: int = 25,
        options: Optional[Mapping[str, Any]] = None,
    ) -> AsyncIterator[PaginatedCollection]:
        """
        Yields every page of the resource, starting with the first.

        Pages are counted here rather than taken from the server's
        ``CurrentPage``, so a response that omits or repeats it still ends
        after ``TotalPages`` pages.
        """
        page = 1
        while True:
            collection = await self.paginate(path, page, per_page, options)
            if not isinstance(collection, PaginatedCollection):
                yield PaginatedCollection(
                    results=collection.results, details=collection.details
                )
                return
            yield collection
            total_pages = collection.total_pages
            if total_pages is None or page >= total_pages:
                return
            page += 1

    async def _send(
        self, method: str, path: str, body: Any, options: Dict[str, Any]
    ) -> RawResponse:
        """Executes one request and traces it."""
        post_data = None if body is None else json.dumps({ENVELOPE_KEY: body})
        request_path = f"/{self.version}{path}"

        start_time = time.monotonic()
        self.logger.debug(f"{method} Request:  {request_path}")
        if post_data is not None:
            self.logger.debug(f"{method} Data:   {post_data}")

        response = await self.authenticator.request(
            method, request_path, post_data, options
        )

        elapsed_ms = int((time.monotonic() - start_time) * 1000)
        self.logger.info(f"[{elapsed_ms}ms] Api: {method} {request_path}")
        return response

    async def _request(
        self,
        method: str,
        path: str,
        body: Any,
        options: Optional[Mapping[str, Any]],
    ) -> Result:
        """Authenticates if needed, dispatches, then decodes the response."""

        if not self.authenticator.authenticated():
            await self.authenticator.authenticate()

        request_opts = dict(options or {})
        attempts = 0
        while True:
            try:
                response = await self._send(method, path, body, request_opts)
                break
            except PermissionDenied as e:
                if e.code == ResponseCode.SESSION_TOKEN_EXPIRED:
                    attempts += 1
                    if attempts <= _MAX_SESSION_RETRIES:
                        self.logger.debug("Retrying authentication")
                        if await self._reauthenticate():
                            continue
                self.logger.error(
                    "Authentication failed or server is sending us expired "
                    "tokens, nothing we can do here."
                )
                raise

        api_response = ApiResponse.from_body(response.body)
        return normalize_results(
            api_response.results,
            api_response.pagination,
            api_response.details,
            request_opts,
        )

    async def _reauthenticate(self) -> bool:
        """Establishes a fresh session, reporting whether it succeeded."""
        try:
            await self.authenticator.authenticate()
        except Exception as e:
            self.logger.error(f"Re-authentication failed: {e!r}")
            return False
        return True
