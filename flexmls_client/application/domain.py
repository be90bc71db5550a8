"""
This module defines the core domain models for the client.

These classes represent the technology-agnostic results and contracts that
the request pipeline operates on: the collections handed back to callers,
the raw transport response, and the authenticator port.
"""

import dataclasses
import datetime
import enum
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any, Mapping, Optional, Tuple


class ResponseCode(enum.IntEnum):
    """All known response codes listed in the API."""

    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    INVALID_KEY = 1000
    DISABLED_KEY = 1010
    API_USER_REQUIRED = 1015
    SESSION_TOKEN_EXPIRED = 1020
    SSL_REQUIRED = 1030
    INVALID_JSON = 1035
    INVALID_FIELD = 1040
    MISSING_PARAMETER = 1050
    INVALID_PARAMETER = 1053
    CONFLICTING_DATA = 1055
    NOT_AVAILABLE = 1500
    RATE_LIMIT_EXCEEDED = 1550


def _as_tuple(values: Any) -> Tuple[Any, ...]:
    if values is None:
        return ()
    if isinstance(values, (list, tuple)):
        return tuple(values)
    return (values,)


# --- Domain Models ---

@dataclasses.dataclass(frozen=True)
class ResponseCollection(Sequence):
    """
    The ordered result records of one API call.

    Behaves as a read-only sequence of records. ``details`` holds the
    ancillary, non-fatal messages (e.g. warnings) returned alongside them.
    """

    results: Tuple[Any, ...] = ()
    details: Tuple[Any, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "results", _as_tuple(self.results))
        object.__setattr__(self, "details", _as_tuple(self.details))

    def __getitem__(self, index):
        return self.results[index]

    def __len__(self) -> int:
        return len(self.results)


@dataclasses.dataclass(frozen=True)
class PaginatedCollection(ResponseCollection):
    """A collection holding one page of a larger result set."""

    current_page: int = 1
    page_size: Optional[int] = None
    total_pages: Optional[int] = None
    total_rows: Optional[int] = None

    @property
    def next_page(self) -> Optional[int]:
        if self.total_pages is None or self.current_page >= self.total_pages:
            return None
        return self.current_page + 1

    @property
    def previous_page(self) -> Optional[int]:
        return self.current_page - 1 if self.current_page > 1 else None

    @property
    def offset(self) -> int:
        """Index of the first record of this page within the full set."""
        return (self.current_page - 1) * (self.page_size or 0)

    def out_of_bounds(self) -> bool:
        return self.total_pages is not None and (
            self.current_page > self.total_pages
        )


@dataclasses.dataclass(frozen=True)
class RawResponse:
    """A transient object for a transport response before decoding."""

    status: int
    body: Any


@dataclasses.dataclass(frozen=True)
class Session:
    """An API session, identified by its auth token."""

    auth_token: str
    expires: Optional[datetime.datetime] = None
    roles: Tuple[str, ...] = ()

    def expired(self, now: Optional[datetime.datetime] = None) -> bool:
        if self.expires is None:
            return False
        now = now or datetime.datetime.now(datetime.timezone.utc)
        return now >= self.expires


# --- Ports (Interfaces) ---

class Authenticator(ABC):
    """A port for session management and raw request transport."""

    @abstractmethod
    def authenticated(self) -> bool:
        """Reports whether a usable session is currently held."""
        pass

    @abstractmethod
    async def authenticate(self) -> Session:
        """
        Establishes a new session.
        Raises ClientError on credential or API failures.
        """
        pass

    @abstractmethod
    async def request(
        self,
        method: str,
        path: str,
        body: Optional[str],
        options: Mapping[str, Any],
    ) -> RawResponse:
        """Sends one authenticated request and returns the raw response."""
        pass
