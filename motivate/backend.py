"""
Backend Client

A small client for the Supabase project that serves motivate's images: PostgREST RPC calls, table
reads and plain GETs for public storage objects. It is constructed explicitly with its endpoint and
key and handed to whatever needs it (the remote picker, the feedback submitter).

Every request carries a timeout; requests has none by default.

All failures surface as RemoteError. The kind tells callers which side went wrong:

    NETWORK      - could not reach the server, or it timed out
    HTTP_STATUS  - the server answered with an unexpected status code
    DECODE       - the server answered but the body was not what we expected
    EMPTY        - the server answered correctly but had nothing for us
"""

import logging
from enum import Enum
from typing import Optional
from urllib.parse import urlsplit

import requests

logger = logging.getLogger(__name__)


class RemoteErrorKind(Enum):
    NETWORK = "network"
    DECODE = "decode"
    EMPTY = "empty"
    HTTP_STATUS = "http_status"


class RemoteError(Exception):
    """
    Raised for any failed interaction with the backend or storage.
    """

    def __init__(self, kind: RemoteErrorKind, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code

    def __str__(self):
        message = super().__str__()
        if self.status_code is not None:
            return f"{message} (status code {self.status_code})"
        return message


class BackendClient:
    """
    Holds the backend endpoint and credentials plus one requests.Session for connection reuse.
    """

    def __init__(self, url: str, key: str, timeout: float = 10.0, session=None):
        parts = urlsplit(url)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError(f"backend url must be an absolute http(s) url, got {url!r}")

        self.url = url.rstrip("/")
        self.scheme = parts.scheme
        self.netloc = parts.netloc
        self.key = key
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()

    @classmethod
    def from_config(cls, config) -> "BackendClient":
        config.require_backend()
        return cls(config.SUPABASE_URL, config.SUPABASE_KEY, timeout=config.REQUEST_TIMEOUT)

    def __repr__(self):
        # the key stays out of reprs and logs
        return f"BackendClient({self.url!r}, timeout={self.timeout})"

    @property
    def headers(self) -> dict:
        return {
            "apikey": self.key,
            "Authorization": f"Bearer {self.key}",
            "Accept": "application/json",
        }

    def rpc(self, function: str, params: dict):
        """
        Call a PostgREST function and return the decoded JSON body, or None for an empty body
        (functions that return void).
        """

        response = self._request(
            "POST", f"{self.url}/rest/v1/rpc/{function}", json=params, headers=self.headers
        )
        return self._json(response, allow_empty=True)

    def select(self, table: str, order: Optional[str] = None) -> list:
        """Read every row of a table, optionally ordered by a column."""

        params = {"select": "*"}
        if order:
            params["order"] = order

        response = self._request(
            "GET", f"{self.url}/rest/v1/{table}", params=params, headers=self.headers
        )
        rows = self._json(response)

        if not isinstance(rows, list):
            raise RemoteError(
                RemoteErrorKind.DECODE, f"expected a list of rows from '{table}', got {type(rows).__name__}"
            )

        return rows

    def get(self, url: str) -> requests.Response:
        """
        Plain GET (used for public storage objects). The status code is left for the caller to
        judge; only transport problems raise here.
        """

        return self._request("GET", url, check_status=False)

    def head(self, timeout: Optional[float] = None) -> requests.Response:
        return self._request("HEAD", self.url, check_status=False, timeout=timeout)

    def _request(self, method, url, check_status=True, timeout=None, **kwargs):
        timeout = timeout if timeout is not None else self.timeout

        try:
            response = self.session.request(method, url, timeout=timeout, **kwargs)

        except requests.exceptions.RequestException as error:
            logger.debug("%s %s failed: %s", method, url, error)
            raise RemoteError(RemoteErrorKind.NETWORK, f"{method} {url} failed: {error}")

        # successful request but received a bad response from the server.
        if check_status:
            try:
                response.raise_for_status()
            except requests.exceptions.HTTPError:
                raise RemoteError(
                    RemoteErrorKind.HTTP_STATUS,
                    f"{method} {url} was rejected by the server",
                    status_code=response.status_code,
                )

        return response

    @staticmethod
    def _json(response, allow_empty=False):
        if allow_empty and not response.content:
            return None

        try:
            return response.json()

        except ValueError as error:
            raise RemoteError(RemoteErrorKind.DECODE, f"response was not valid JSON: {error}")
