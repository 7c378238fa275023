"""Remote content service client (admin API over HTTP)"""

import logging
from typing import Any, Mapping, Optional, Protocol

import httpx


logger = logging.getLogger(__name__)


class RemoteUnavailable(Exception):
    """The remote service failed or answered with something unusable."""


class RemoteProvider(Protocol):
    def fetch(self, endpoint: str, params: Optional[Mapping[str, Any]] = None) -> Mapping[str, Any]:
        """Return the parsed JSON envelope for endpoint or raise RemoteUnavailable."""
        ...


class HttpRemoteProvider:
    """GET {base_url}/api{endpoint} and unwrap the {success, ...} envelope.

    Timeouts are enforced by the httpx transport; any transport error,
    non-2xx status, non-JSON body or success=false becomes RemoteUnavailable.
    """

    def __init__(self, base_url: str, timeout: float = 10.0, transport: httpx.BaseTransport = None):
        self.base_url = str(base_url).rstrip('/')
        self.timeout = timeout
        self.transport = transport

    def fetch(self, endpoint: str, params: Optional[Mapping[str, Any]] = None) -> Mapping[str, Any]:
        url = f"{self.base_url}/api{endpoint}"
        logger.debug("GET %s params=%s", url, params)
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                resp = client.get(url, params=params, headers={"Accept": "application/json"})
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as e:
            raise RemoteUnavailable(f"{url}: {e}") from e
        except ValueError as e:
            raise RemoteUnavailable(f"{url}: invalid JSON body") from e

        if not isinstance(data, dict):
            raise RemoteUnavailable(f"{url}: expected a JSON object, got {type(data).__name__}")
        if data.get("success") is False:
            raise RemoteUnavailable(f"{url}: {data.get('error') or 'unknown error'}")
        return data
