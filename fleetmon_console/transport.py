"""
HTTP transport for the admin console.

Wraps an httpx.AsyncClient with:
- base URL resolution (absolute URLs pass through untouched)
- JSON request bodies and tolerant JSON decoding
- bearer token attachment from the explicit ConsoleSession
- redirects followed, so a trailing-slash hop is invisible to callers
- status -> error class mapping (see errors.py)

A 401 from the API clears the session so the next call starts logged out.
"""
from typing import Any, Optional

import httpx
import structlog

from fleetmon_console.errors import ApiError, TransportFailure
from fleetmon_console.session import ConsoleSession

logger = structlog.get_logger()


class Transport:
    """Issues one HTTP request per call; never retries."""

    def __init__(
        self,
        base_url: str,
        session: Optional[ConsoleSession] = None,
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else ConsoleSession()
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    async def close(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "Transport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def url_for(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.base_url}{path}"

    async def request(
        self,
        path: str,
        method: str = "GET",
        json: Any = None,
        params: Optional[dict] = None,
        headers: Optional[dict] = None,
    ) -> Any:
        """
        Send a request and return the decoded body.

        Raises an ApiError subclass for non-2xx responses and TransportFailure
        when no response was received.
        """
        url = self.url_for(path)
        request_headers = {"Content-Type": "application/json"}
        request_headers.update(headers or {})
        request_headers.update(self.session.auth_headers())

        try:
            response = await self.client.request(
                method,
                url,
                json=json,
                params=params or None,
                headers=request_headers,
                follow_redirects=True,
            )
        except httpx.HTTPError as exc:
            logger.warning("Request failed before response", method=method, path=path, error=str(exc))
            raise TransportFailure(f"Network error: {exc}", path=path) from exc

        data = decode_body(response)

        if response.is_success:
            return data

        if response.status_code == 401:
            self.session.clear()

        message = error_message(data, response.status_code)
        logger.debug("API error", method=method, path=path, status=response.status_code, error=message)
        raise ApiError.from_status(response.status_code, message, path=path)


def decode_body(response: httpx.Response) -> Any:
    """JSON body, or {} when the body is empty or not JSON."""
    if not response.content:
        return {}
    try:
        return response.json()
    except ValueError:
        return {}


def error_message(data: Any, status: int) -> str:
    """Prefer the API's {"error"} envelope, then {"message"}, then the status."""
    if isinstance(data, dict):
        for key in ("error", "message", "detail"):
            value = data.get(key)
            if isinstance(value, str) and value:
                return value
    return f"Error {status}"
