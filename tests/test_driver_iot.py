"""
Driver IoT report route tests.

Run with: pytest tests/test_driver_iot.py -v
"""
import pytest

from fleetmon.routes.driver_iot import normalize_driver_status


class TestSubmitReport:

    def test_submit_links_driver_bus_and_device(self, client, driver_headers):
        response = client.post(
            "/driver/iot/report",
            json={"status": "needs_maintenance", "note": "  Screen flickers  "},
            headers=driver_headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "IoT status report submitted."

        item = body["item"]
        assert item["status"] == "NEEDS_MAINTENANCE"
        assert item["note"] == "Screen flickers"
        assert item["busId"] == "bus_12"
        assert item["deviceId"] == "DEVICE-0001"
        assert item["driverProfileId"] == "drv_asha"
        assert item["adminStatus"] is None

    def test_submitted_report_appears_for_admin(self, client, driver_headers, admin_headers):
        created = client.post(
            "/driver/iot/report",
            json={"status": "WORKING"},
            headers=driver_headers,
        ).json()["item"]

        items = client.get("/admin/iot/status-reports", headers=admin_headers).json()["items"]
        assert created["id"] in [r["id"] for r in items]

    def test_driver_without_profile_still_reports(self, client, loner_headers):
        response = client.post(
            "/driver/iot/report",
            json={"status": "NOT_WORKING"},
            headers=loner_headers,
        )
        assert response.status_code == 200
        item = response.json()["item"]
        assert item["busId"] is None
        assert item["deviceId"] is None
        assert item["driverProfileId"] is None

    def test_blank_note_stored_as_null(self, client, driver_headers):
        response = client.post(
            "/driver/iot/report",
            json={"status": "WORKING", "note": "   "},
            headers=driver_headers,
        )
        assert response.json()["item"]["note"] is None

    @pytest.mark.parametrize("status", [None, "", "BROKEN", "working-ish"])
    def test_invalid_status_is_400(self, client, driver_headers, status):
        response = client.post(
            "/driver/iot/report",
            json={"status": status},
            headers=driver_headers,
        )
        assert response.status_code == 400
        assert "Invalid status" in response.json()["error"]

    def test_admin_cannot_submit(self, client, admin_headers):
        response = client.post(
            "/driver/iot/report",
            json={"status": "WORKING"},
            headers=admin_headers,
        )
        assert response.status_code == 403
        assert response.json()["error"] == "Drivers only"

    def test_anonymous_cannot_submit(self, client):
        response = client.post("/driver/iot/report", json={"status": "WORKING"})
        assert response.status_code == 401


class TestNormalizeDriverStatus:

    @pytest.mark.parametrize("raw,expected", [
        ("WORKING", "WORKING"),
        (" not_working ", "NOT_WORKING"),
        ("Needs_Maintenance", "NEEDS_MAINTENANCE"),
        ("OK", None),
        (None, None),
    ])
    def test_normalize(self, raw, expected):
        assert normalize_driver_status(raw) == expected
