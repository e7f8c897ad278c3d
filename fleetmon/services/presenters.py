"""
ORM row -> response schema shaping.

Routes load relationships eagerly and hand the rows here so every endpoint
returns the same field set for the same entity.
"""
from typing import Optional

from fleetmon.models import Device, StatusReport, Trip, Bus
from fleetmon.schemas import DeviceRow, StatusReportItem, StatusReportRow, TripRow


def status_report_item(report: StatusReport) -> StatusReportItem:
    return StatusReportItem(
        id=report.report_id,
        device_id=report.device_id,
        bus_id=report.bus_id,
        driver_profile_id=report.driver_profile_id,
        status=report.status,
        admin_status=report.admin_status,
        note=report.note,
        created_at=report.created_at,
        updated_at=report.updated_at,
    )


def status_report_row(report: StatusReport) -> StatusReportRow:
    """Report plus bus/driver display fields; device falls back to the bus's unit."""
    bus = report.bus
    driver = report.driver
    return StatusReportRow(
        id=report.report_id,
        device_id=report.device_id or (bus.device_id if bus else None),
        bus_id=report.bus_id,
        driver_profile_id=report.driver_profile_id,
        status=report.status,
        admin_status=report.admin_status,
        note=report.note,
        created_at=report.created_at,
        updated_at=report.updated_at,
        bus_number=bus.number if bus else None,
        bus_plate=bus.plate if bus else None,
        driver_name=driver.full_name if driver else None,
    )


def device_row(device: Device, bus: Optional[Bus]) -> DeviceRow:
    return DeviceRow(
        id=device.device_id,
        device_id=device.device_id,
        device_name=device.name,
        last_seen=device.last_seen or device.updated_at,
        bus_id=bus.bus_id if bus else None,
        bus_number=bus.number if bus else None,
        bus_plate=bus.plate if bus else None,
        network=device.network,
        status=(device.status or "UNKNOWN").upper(),
    )


def trip_row(trip: Trip) -> TripRow:
    bus = trip.bus
    driver = trip.driver
    return TripRow(
        id=trip.trip_id,
        started_at=trip.started_at,
        ended_at=trip.ended_at,
        status=trip.status,
        origin_label=trip.origin_label,
        dest_label=trip.dest_label,
        bus_id=trip.bus_id,
        bus_number=bus.number if bus else None,
        bus_plate=bus.plate if bus else None,
        driver_profile_id=trip.driver_profile_id,
        driver_name=driver.full_name if driver else None,
    )
