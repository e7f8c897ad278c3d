"""
Driver IoT report route.

POST /driver/iot/report  body: { status, note? }

The bus, device and driver profile are resolved from the caller's account;
drivers never send ids.
"""
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from fleetmon.config import get_settings
from fleetmon.database import get_session
from fleetmon.limiter import limiter
from fleetmon.models import DRIVER_STATUSES, DriverProfile, StatusReport, generate_id
from fleetmon.schemas import StatusReportEnvelope, StatusReportSubmit
from fleetmon.services.auth import AuthInfo, require_driver
from fleetmon.services.presenters import status_report_item

settings = get_settings()
logger = structlog.get_logger()

router = APIRouter(prefix="/driver/iot", tags=["driver-iot"])


def normalize_driver_status(status: Optional[str]) -> Optional[str]:
    """Return the canonical condition value, or None if it is not one."""
    value = (status or "").strip().upper()
    return value if value in DRIVER_STATUSES else None


@router.post("/report", response_model=StatusReportEnvelope)
@limiter.limit(f"{settings.rate_limit_driver_reports}/minute")
async def submit_report(
    request: Request,
    report: StatusReportSubmit,
    db: AsyncSession = Depends(get_session),
    auth: AuthInfo = Depends(require_driver),
):
    """Record the driver's view of the on-board device condition."""
    status = normalize_driver_status(report.status)
    if not status:
        raise HTTPException(
            status_code=400,
            detail="Invalid status. Use WORKING | NEEDS_MAINTENANCE | NOT_WORKING",
        )
    note = (report.note or "").strip() or None

    try:
        result = await db.execute(
            select(DriverProfile)
            .options(selectinload(DriverProfile.bus))
            .where(DriverProfile.user_id == auth.user_id)
        )
        profile = result.scalar_one_or_none()
        bus = profile.bus if profile else None

        created = StatusReport(
            report_id=generate_id("rep"),
            status=status,
            note=note,
            device_id=bus.device_id if bus else None,
            bus_id=bus.bus_id if bus else None,
            driver_profile_id=profile.driver_id if profile else None,
        )
        db.add(created)
        await db.commit()
        await db.refresh(created)
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Failed to submit IoT report", user_id=auth.user_id)
        raise HTTPException(status_code=500, detail="Failed to submit IoT report.")

    logger.info(
        "IoT status report submitted",
        report_id=created.report_id,
        status=status,
        bus_id=created.bus_id,
    )
    return StatusReportEnvelope(message="IoT status report submitted.", item=status_report_item(created))
