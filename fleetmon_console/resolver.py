"""
Endpoint resolver: ordered fallback probing across candidate API paths.

Different fleet API deployments expose the same logical operation under
different paths (/admin/iot/status-reports vs /iot/status-reports, ...).
The resolver tries candidates in priority order, one at a time:

- a "route not found" status (404 by default) means the candidate does not
  exist on this deployment: try the next one
- any other failure (network, other 4xx, 5xx) is real: raise it immediately
- the first success wins

Probing is strictly sequential. A write must see the 404 before the next
candidate is attempted, otherwise the same record could be written twice.
"""
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Sequence
from urllib.parse import quote

import structlog

from fleetmon_console.errors import ApiError, NoMatchingRoute
from fleetmon_console.transport import Transport

logger = structlog.get_logger()

# Response keys that may wrap a list, in lookup order
LIST_KEYS = ("items", "devices")

DEFAULT_FALLTHROUGH = frozenset({404})


@dataclass
class RequestSpec:
    """What to send to each candidate."""
    method: str = "GET"
    body: Any = None
    params: Optional[dict] = None
    path_params: dict = field(default_factory=dict)

    @property
    def is_write(self) -> bool:
        return self.method.upper() not in ("GET", "HEAD", "OPTIONS")


def normalize_items(body: Any, keys: Iterable[str] = LIST_KEYS) -> list:
    """
    Reduce a list response of any envelope to a plain list.

    A list body is returned as-is; a mapping holding a list under one of
    `keys` yields that list; any other shape yields [].
    """
    if isinstance(body, list):
        return body
    if isinstance(body, dict):
        for key in keys:
            value = body.get(key)
            if isinstance(value, list):
                return value
    return []


class EndpointResolver:
    """Stateless between calls; holds only the transport and the fallthrough policy."""

    def __init__(self, transport: Transport, fallthrough_statuses: Iterable[int] = DEFAULT_FALLTHROUGH):
        self.transport = transport
        self.fallthrough_statuses = frozenset(fallthrough_statuses)

    def _falls_through(self, exc: ApiError) -> bool:
        return exc.status is not None and exc.status in self.fallthrough_statuses

    async def first_success(self, candidates: Sequence[str], spec: RequestSpec) -> tuple[str, Any]:
        """
        Return (path, body) from the first candidate that succeeds.

        Raises NoMatchingRoute when every candidate falls through; any other
        error propagates from the candidate that produced it.
        """
        if not candidates:
            raise ValueError("at least one candidate path is required")

        # Each value fills exactly one path segment
        escaped = {k: quote(str(v), safe="") for k, v in spec.path_params.items()}

        tried = []
        for template in candidates:
            path = template.format(**escaped) if escaped else template
            tried.append(path)
            try:
                body = await self.transport.request(
                    path,
                    method=spec.method,
                    json=spec.body,
                    params=spec.params,
                )
            except ApiError as exc:
                if not self._falls_through(exc):
                    raise
                logger.debug("Candidate path not found, trying next", path=path, status=exc.status)
                continue
            if len(tried) > 1:
                logger.info("Resolved via fallback path", path=path, attempts=len(tried))
            return path, body

        raise NoMatchingRoute(f"{spec.method.upper()} {candidates[0]}", tried)

    async def fetch_list(self, candidates: Sequence[str], params: Optional[dict] = None) -> list:
        """Read operation: normalized list from the first live path, [] if none exist."""
        return await self.resolve(candidates, RequestSpec(method="GET", params=params))

    async def send(
        self,
        candidates: Sequence[str],
        spec: RequestSpec,
        operation: Optional[str] = None,
    ) -> Any:
        """Write operation: decoded body of the first live path; NoMatchingRoute if none exist."""
        try:
            _, body = await self.first_success(candidates, spec)
        except NoMatchingRoute as exc:
            if operation:
                raise NoMatchingRoute(operation, exc.candidates) from None
            raise
        return body

    async def resolve(self, candidates: Sequence[str], spec: RequestSpec) -> Any:
        """Dispatch on the request method: reads normalize, writes return the body."""
        if spec.is_write:
            return await self.send(candidates, spec)
        try:
            _, body = await self.first_success(candidates, spec)
        except NoMatchingRoute:
            return []
        return normalize_items(body)
