"""
Admin IoT monitoring routes.

- GET   /admin/iot/devices              device roster with assigned bus
- GET   /admin/iot/status-reports       driver-submitted reports, newest first
- PATCH /admin/iot/status-reports/{id}  triage a report

All endpoints require an ADMIN bearer token.
"""
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from fleetmon.config import get_settings
from fleetmon.database import get_session
from fleetmon.models import Bus, Device, StatusReport
from fleetmon.schemas import DeviceList, StatusReportEnvelope, StatusReportList, StatusReportUpdate
from fleetmon.services.auth import require_admin
from fleetmon.services.presenters import device_row, status_report_item, status_report_row

settings = get_settings()
logger = structlog.get_logger()

router = APIRouter(
    prefix="/admin/iot",
    tags=["admin-iot"],
    dependencies=[Depends(require_admin)],
)


def normalize_admin_status(value: Optional[str]) -> str:
    """Trim and uppercase a triage token. Empty result means missing."""
    return (value or "").strip().upper()


@router.get("/devices", response_model=DeviceList)
async def list_devices(
    status: Optional[str] = None,
    db: AsyncSession = Depends(get_session),
):
    """List IoT devices, optionally filtered by status token."""
    query = (
        select(Device, Bus)
        .outerjoin(Bus, Bus.device_id == Device.device_id)
        .order_by(Device.device_id)
    )
    if status:
        query = query.where(Device.status == status.strip().upper())

    try:
        result = await db.execute(query)
        rows = result.all()
    except SQLAlchemyError:
        logger.exception("Failed to load IoT devices")
        raise HTTPException(status_code=500, detail="Failed to load IoT devices.")

    return DeviceList(items=[device_row(device, bus) for device, bus in rows])


@router.get("/status-reports", response_model=StatusReportList)
async def list_status_reports(db: AsyncSession = Depends(get_session)):
    """Most recent status reports with bus and driver display fields."""
    query = (
        select(StatusReport)
        .options(selectinload(StatusReport.bus), selectinload(StatusReport.driver))
        .order_by(StatusReport.created_at.desc())
        .limit(settings.status_reports_limit)
    )

    try:
        result = await db.execute(query)
        reports = result.scalars().all()
    except SQLAlchemyError:
        logger.exception("Failed to load IoT status reports")
        raise HTTPException(status_code=500, detail="Failed to load IoT status reports.")

    return StatusReportList(items=[status_report_row(r) for r in reports])


@router.patch("/status-reports/{report_id}", response_model=StatusReportEnvelope)
async def update_status_report(
    report_id: str,
    update: StatusReportUpdate,
    db: AsyncSession = Depends(get_session),
):
    """
    Set the admin triage status of a report.
    The token is stored trimmed and uppercased; a note, when sent, replaces the old one.
    """
    admin_status = normalize_admin_status(update.admin_status)
    if not admin_status:
        raise HTTPException(status_code=400, detail="adminStatus is required")

    try:
        result = await db.execute(
            select(StatusReport).where(StatusReport.report_id == report_id)
        )
        report = result.scalar_one_or_none()
        if not report:
            raise HTTPException(status_code=404, detail="Status report not found")

        report.admin_status = admin_status
        if update.note is not None:
            report.note = update.note.strip() or None
        await db.commit()
        await db.refresh(report)
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Failed to update status report", report_id=report_id)
        raise HTTPException(status_code=500, detail="Failed to update status.")

    logger.info("Status report triaged", report_id=report_id, admin_status=admin_status)
    return StatusReportEnvelope(message="Status updated.", item=status_report_item(report))
