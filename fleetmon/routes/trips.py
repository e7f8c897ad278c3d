"""
Trip history API route.
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
from fleetmon.models import TRIP_STATUSES, Trip
from fleetmon.schemas import TripList
from fleetmon.services.auth import require_admin
from fleetmon.services.presenters import trip_row

settings = get_settings()
logger = structlog.get_logger()

router = APIRouter(
    prefix="/admin/trips",
    tags=["trips"],
    dependencies=[Depends(require_admin)],
)


@router.get("", response_model=TripList)
async def list_trips(
    status: Optional[str] = None,
    db: AsyncSession = Depends(get_session),
):
    """List trips newest first, optionally filtered by status (ONGOING, COMPLETED, CANCELLED)."""
    query = (
        select(Trip)
        .options(selectinload(Trip.bus), selectinload(Trip.driver))
        .order_by(Trip.started_at.desc())
        .limit(settings.trips_limit)
    )
    if status:
        status = status.strip().upper()
        if status not in TRIP_STATUSES:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid status. Use {' | '.join(TRIP_STATUSES)}",
            )
        query = query.where(Trip.status == status)

    try:
        result = await db.execute(query)
        trips = result.scalars().all()
    except SQLAlchemyError:
        logger.exception("Failed to load trips")
        raise HTTPException(status_code=500, detail="Failed to load trips.")

    return TripList(items=[trip_row(t) for t in trips])
