"""
Admin console operation tests.

Tests for:
1. Candidate path sets per operation
2. Client-side validation happens before any request
3. Session lifecycle: login, bearer attachment, logout, clear on 401
4. End-to-end against the real API app over ASGI

Run with: pytest tests/test_console_api.py -v
"""
import json

import httpx
import pytest

from fleetmon.database import get_session
from fleetmon.main import app
from fleetmon_console.api import (
    DEVICE_PATHS,
    STATUS_REPORT_PATHS,
    FleetConsole,
)
from fleetmon_console.errors import AuthError, NoMatchingRoute, RouteNotFound, ValidationError
from fleetmon_console.session import ConsoleSession, SessionUser
from fleetmon_console.transport import Transport


def make_console(handler, session=None) -> FleetConsole:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return FleetConsole(transport=Transport("http://fleet.test", session=session, client=client))


class Recorder:
    """Answers from a path -> (status, body) map, 404 otherwise."""

    def __init__(self, routes=None):
        self.routes = routes or {}
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, body = self.routes.get(request.url.path, (404, {"error": "Not Found"}))
        return httpx.Response(status, json=body)

    @property
    def paths(self):
        return [r.url.path for r in self.requests]


class TestListOperations:

    @pytest.mark.asyncio
    async def test_devices_probe_order(self):
        recorder = Recorder({"/devices": (200, {"devices": [{"id": "DEVICE-0001"}]})})
        devices = await make_console(recorder).list_devices()

        assert devices == [{"id": "DEVICE-0001"}]
        assert recorder.paths == list(DEVICE_PATHS)

    @pytest.mark.asyncio
    async def test_status_reports_all_missing_is_empty(self):
        recorder = Recorder()
        assert await make_console(recorder).list_status_reports() == []
        assert recorder.paths == list(STATUS_REPORT_PATHS)

    @pytest.mark.asyncio
    async def test_trips_fall_back_to_public_path(self):
        recorder = Recorder({"/trips": (200, [{"id": "trp_1", "status": "COMPLETED"}])})
        trips = await make_console(recorder).list_trips()

        assert trips == [{"id": "trp_1", "status": "COMPLETED"}]
        assert recorder.paths == ["/admin/trips", "/trips"]


class TestUpdateStatusReport:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["", "   ", None])
    async def test_blank_status_rejected_before_network(self, status):
        recorder = Recorder()
        with pytest.raises(ValidationError):
            await make_console(recorder).update_status_report("rep_1", status)
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_patch_body_and_fallback(self):
        recorder = Recorder({
            "/iot/status-reports/rep_1": (200, {"message": "Status updated.", "item": {"id": "rep_1"}}),
        })
        result = await make_console(recorder).update_status_report("rep_1", " resolved", note="fixed")

        assert result["message"] == "Status updated."
        assert recorder.paths == ["/admin/iot/status-reports/rep_1", "/iot/status-reports/rep_1"]
        assert all(r.method == "PATCH" for r in recorder.requests)
        assert json.loads(recorder.requests[-1].content) == {"adminStatus": "RESOLVED", "note": "fixed"}

    @pytest.mark.asyncio
    async def test_all_candidates_missing(self):
        recorder = Recorder()
        with pytest.raises(NoMatchingRoute) as exc_info:
            await make_console(recorder).update_status_report("rep_1", "OK")

        assert str(exc_info.value) == "Failed to update IoT status report (no matching route)."
        assert len(recorder.requests) == 3


class TestSubmitStatusReport:

    @pytest.mark.asyncio
    async def test_single_path_no_fallback(self):
        recorder = Recorder()
        with pytest.raises(RouteNotFound):
            await make_console(recorder).submit_status_report("WORKING")
        assert recorder.paths == ["/driver/iot/report"]

    @pytest.mark.asyncio
    async def test_invalid_status_rejected_locally(self):
        recorder = Recorder()
        with pytest.raises(ValidationError):
            await make_console(recorder).submit_status_report("BROKEN")
        assert recorder.requests == []


class TestSession:

    @pytest.mark.asyncio
    async def test_login_starts_session_and_attaches_token(self):
        recorder = Recorder({
            "/auth/login": (200, {"token": "tok-1", "user": {"id": "usr_admin", "email": "a@f.test", "role": "admin"}}),
            "/admin/iot/devices": (200, {"items": []}),
        })
        console = make_console(recorder)

        session = await console.login("a@f.test", "pw")
        assert session.token == "tok-1"
        assert session.user == SessionUser(id="usr_admin", email="a@f.test", role="ADMIN")
        assert session.is_admin

        await console.list_devices()
        assert recorder.requests[-1].headers["Authorization"] == "Bearer tok-1"

    @pytest.mark.asyncio
    async def test_login_failure_raises_auth_error(self):
        recorder = Recorder({"/auth/login": (401, {"error": "Invalid email or password"})})
        console = make_console(recorder)

        with pytest.raises(AuthError) as exc_info:
            await console.login("a@f.test", "bad")
        assert exc_info.value.message == "Invalid email or password"
        assert not console.session.authenticated

    @pytest.mark.asyncio
    async def test_401_clears_session(self):
        session = ConsoleSession(token="stale", user=SessionUser(id="u", email="a@f.test", role="ADMIN"))
        recorder = Recorder({"/admin/iot/devices": (401, {"error": "Invalid or expired session"})})
        console = make_console(recorder, session=session)

        with pytest.raises(AuthError):
            await console.list_devices()

        assert session.token is None
        assert session.user is None
        assert recorder.paths == ["/admin/iot/devices"]

    @pytest.mark.asyncio
    async def test_logout_drops_authorization_header(self):
        recorder = Recorder({"/admin/iot/devices": (200, [])})
        console = make_console(recorder, session=ConsoleSession(token="tok"))

        console.logout()
        await console.list_devices()

        assert "Authorization" not in recorder.requests[0].headers

    def test_login_response_defaults(self):
        session = ConsoleSession.from_login_response({"token": "t"}, "ops@f.test")
        assert session.user.email == "ops@f.test"
        assert session.user.role == "ADMIN"


class TestAgainstApi:
    """Console driving the real FastAPI app through httpx's ASGI transport."""

    @pytest.fixture
    def asgi_console(self, session_factory):
        async def override_get_session():
            async with session_factory() as session:
                yield session

        app.dependency_overrides[get_session] = override_get_session
        client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app))
        yield FleetConsole(transport=Transport("http://fleet.test", client=client))
        app.dependency_overrides.clear()

    @pytest.mark.asyncio
    async def test_admin_flow(self, asgi_console):
        await asgi_console.login("admin@fleet.test", "admin-pass-123")

        reports = await asgi_console.list_status_reports()
        assert [r["id"] for r in reports] == ["rep_new", "rep_old"]

        devices = await asgi_console.list_devices()
        assert {d["deviceId"] for d in devices} == {"DEVICE-0001", "DEVICE-0002"}

        result = await asgi_console.update_status_report("rep_old", "ok")
        assert result["item"]["adminStatus"] == "OK"

    @pytest.mark.asyncio
    async def test_unknown_report_surfaces_after_probing(self, asgi_console):
        """The API's 404 for an unknown id looks like a missing route to the resolver."""
        await asgi_console.login("admin@fleet.test", "admin-pass-123")
        with pytest.raises(NoMatchingRoute):
            await asgi_console.update_status_report("rep_missing", "OK")

    @pytest.mark.asyncio
    async def test_driver_cannot_list_reports(self, asgi_console):
        await asgi_console.login("driver@fleet.test", "driver-pass-123")
        with pytest.raises(AuthError) as exc_info:
            await asgi_console.list_status_reports()
        assert exc_info.value.status == 403
