"""
Pydantic schemas for request/response validation.

Wire format is camelCase to match the admin console and driver app;
Python attribute names stay snake_case.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema serializing to camelCase and accepting either case on input."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


# ============ Auth ============

class LoginRequest(CamelModel):
    """Email/password credentials."""
    email: str = Field(..., min_length=1, max_length=320)
    password: str = Field(..., min_length=1)


class UserInfo(CamelModel):
    """Identity returned alongside a session token."""
    id: str
    email: str
    role: str


class LoginResponse(CamelModel):
    """Successful login response."""
    token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
    user: UserInfo


# ============ Status reports ============

class StatusReportSubmit(CamelModel):
    """Driver-side condition report. Status is normalized by the route."""
    status: Optional[str] = None
    note: Optional[str] = Field(None, max_length=2000)


class StatusReportUpdate(CamelModel):
    """Admin triage update. adminStatus is trimmed and uppercased by the route."""
    admin_status: Optional[str] = None
    note: Optional[str] = Field(None, max_length=2000)


class StatusReportItem(CamelModel):
    """Status report as stored."""
    id: str
    device_id: Optional[str] = None
    bus_id: Optional[str] = None
    driver_profile_id: Optional[str] = None
    status: str
    admin_status: Optional[str] = None
    note: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class StatusReportRow(StatusReportItem):
    """Status report with derived display fields for the admin listing."""
    bus_number: Optional[str] = None
    bus_plate: Optional[str] = None
    driver_name: Optional[str] = None


class StatusReportList(CamelModel):
    items: list[StatusReportRow]


class StatusReportEnvelope(CamelModel):
    """Mutation result: message plus the affected record."""
    message: str
    item: StatusReportItem


# ============ Devices ============

class DeviceRow(CamelModel):
    """IoT device with its assigned bus, if any."""
    id: str
    device_id: str
    device_name: Optional[str] = None
    last_seen: Optional[datetime] = None
    bus_id: Optional[str] = None
    bus_number: Optional[str] = None
    bus_plate: Optional[str] = None
    network: Optional[str] = None
    status: str


class DeviceList(CamelModel):
    items: list[DeviceRow]


# ============ Trips ============

class TripRow(CamelModel):
    """Trip with vehicle and driver display fields."""
    id: str
    started_at: datetime
    ended_at: Optional[datetime] = None
    status: str
    origin_label: Optional[str] = None
    dest_label: Optional[str] = None
    bus_id: Optional[str] = None
    bus_number: Optional[str] = None
    bus_plate: Optional[str] = None
    driver_profile_id: Optional[str] = None
    driver_name: Optional[str] = None


class TripList(CamelModel):
    items: list[TripRow]
