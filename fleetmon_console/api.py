"""
Admin console operations against the fleet API.

Each logical operation lists its candidate paths in priority order; the
EndpointResolver picks whichever one the connected deployment serves.
"""
from typing import Any, Optional

import structlog

from fleetmon_console.config import get_console_settings
from fleetmon_console.errors import ValidationError
from fleetmon_console.resolver import EndpointResolver, RequestSpec
from fleetmon_console.session import ConsoleSession
from fleetmon_console.transport import Transport

logger = structlog.get_logger()

DEVICE_PATHS = (
    "/admin/iot/devices",
    "/iot/devices",
    "/admin/devices",
    "/devices",
)

STATUS_REPORT_PATHS = (
    "/admin/iot/status-reports",
    "/iot/status-reports",
    "/admin/iot/reports",
)

STATUS_REPORT_UPDATE_PATHS = (
    "/admin/iot/status-reports/{id}",
    "/iot/status-reports/{id}",
    "/admin/iot/reports/{id}",
)

DRIVER_REPORT_PATH = "/driver/iot/report"

TRIP_PATHS = (
    "/admin/trips",
    "/trips",
)

LOGIN_PATH = "/auth/login"

DRIVER_STATUSES = ("WORKING", "NOT_WORKING", "NEEDS_MAINTENANCE")


class FleetConsole:
    """
    Console client bound to one API base URL and one session.

    Usage:
        async with FleetConsole("http://localhost:4000") as console:
            await console.login("admin@example.com", "secret")
            reports = await console.list_status_reports()
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        session: Optional[ConsoleSession] = None,
        transport: Optional[Transport] = None,
        resolver: Optional[EndpointResolver] = None,
    ):
        if transport is None:
            settings = get_console_settings()
            transport = Transport(
                api_url or settings.api_url,
                session=session,
                timeout=settings.timeout_s,
            )
        self.transport = transport
        self.resolver = resolver or EndpointResolver(transport)

    @property
    def session(self) -> ConsoleSession:
        return self.transport.session

    async def close(self) -> None:
        await self.transport.close()

    async def __aenter__(self) -> "FleetConsole":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # ============ Auth ============

    async def login(self, email: str, password: str) -> ConsoleSession:
        """Authenticate and start the session carried by every later call."""
        if not email or not password:
            raise ValidationError("email and password are required")

        data = await self.transport.request(
            LOGIN_PATH,
            method="POST",
            json={"email": email, "password": password},
        )
        fresh = ConsoleSession.from_login_response(data if isinstance(data, dict) else {}, email)
        if not fresh.token:
            raise ValidationError("Login response did not include a token")

        self.session.start(fresh.token, fresh.user)
        logger.info("Logged in", email=fresh.user.email, role=fresh.user.role)
        return self.session

    def logout(self) -> None:
        self.session.clear()

    # ============ IoT monitoring ============

    async def list_devices(self, **params) -> list[dict]:
        """IoT devices; always a list."""
        return await self.resolver.fetch_list(DEVICE_PATHS, params=params)

    async def list_status_reports(self, **params) -> list[dict]:
        """Driver-submitted status reports; always a list."""
        return await self.resolver.fetch_list(STATUS_REPORT_PATHS, params=params)

    async def update_status_report(
        self,
        report_id: str,
        admin_status: str,
        note: Optional[str] = None,
    ) -> dict:
        """
        Set a report's triage status (OK / PENDING / NEEDS_CHECK / RESOLVED ...).

        Blank statuses are rejected before any request is sent. Returns the
        API envelope {message, item}.
        """
        if not report_id:
            raise ValidationError("report id is required")
        status = (admin_status or "").strip().upper()
        if not status:
            raise ValidationError("adminStatus is required")

        payload: dict[str, Any] = {"adminStatus": status}
        if note is not None:
            payload["note"] = note

        return await self.resolver.send(
            STATUS_REPORT_UPDATE_PATHS,
            RequestSpec(method="PATCH", body=payload, path_params={"id": report_id}),
            operation="update IoT status report",
        )

    async def submit_status_report(self, status: str, note: Optional[str] = None) -> dict:
        """Driver-side submission. Single path, no fallback."""
        value = (status or "").strip().upper()
        if value not in DRIVER_STATUSES:
            raise ValidationError("Invalid status. Use WORKING | NEEDS_MAINTENANCE | NOT_WORKING")

        payload: dict[str, Any] = {"status": value}
        if note:
            payload["note"] = note
        return await self.transport.request(DRIVER_REPORT_PATH, method="POST", json=payload)

    # ============ Trips ============

    async def list_trips(self, **params) -> list[dict]:
        """Trip records of every status; filter with views.completed_trips."""
        return await self.resolver.fetch_list(TRIP_PATHS, params=params)
