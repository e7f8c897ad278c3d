"""
SQLAlchemy ORM models for the fleet monitoring service.
"""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, Index, Text
from sqlalchemy.orm import DeclarativeBase, relationship
import secrets


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def generate_id(prefix: str) -> str:
    """Generate a prefixed random ID."""
    return f"{prefix}_{secrets.token_hex(6)}"


# Condition values a driver may submit for the on-board device
DRIVER_STATUSES = ("WORKING", "NOT_WORKING", "NEEDS_MAINTENANCE")

TRIP_STATUSES = ("ONGOING", "COMPLETED", "CANCELLED")


class User(Base):
    """Login account for administrators and drivers."""
    __tablename__ = "users"

    user_id = Column(String, primary_key=True, default=lambda: generate_id("usr"))
    email = Column(String, unique=True, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False, default="DRIVER")  # ADMIN, DRIVER
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)

    driver_profile = relationship("DriverProfile", back_populates="user", uselist=False)


class Bus(Base):
    """Fleet vehicle."""
    __tablename__ = "buses"

    bus_id = Column(String, primary_key=True, default=lambda: generate_id("bus"))
    number = Column(String, nullable=False)
    plate = Column(String)
    device_id = Column(String, ForeignKey("devices.device_id", ondelete="SET NULL"))
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)

    device = relationship("Device", foreign_keys=[device_id])
    drivers = relationship("DriverProfile", back_populates="bus")


class DriverProfile(Base):
    """Driver details linked to a user account and an assigned bus."""
    __tablename__ = "driver_profiles"

    driver_id = Column(String, primary_key=True, default=lambda: generate_id("drv"))
    user_id = Column(String, ForeignKey("users.user_id", ondelete="CASCADE"), unique=True, nullable=False)
    full_name = Column(String, nullable=False)
    bus_id = Column(String, ForeignKey("buses.bus_id", ondelete="SET NULL"))

    user = relationship("User", back_populates="driver_profile")
    bus = relationship("Bus", back_populates="drivers")


class Device(Base):
    """On-board IoT unit. Written by the telemetry pipeline, read-only here."""
    __tablename__ = "devices"

    device_id = Column(String, primary_key=True)
    name = Column(String)
    network = Column(String)  # e.g. "4G", "LTE-M"
    status = Column(String, nullable=False, default="UNKNOWN")  # ONLINE, OFFLINE, MAINTENANCE
    last_seen = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow)


class StatusReport(Base):
    """
    Field-submitted device condition report.

    Created by a driver submission, mutated only by admin triage.
    """
    __tablename__ = "iot_status_reports"

    report_id = Column(String, primary_key=True, default=lambda: generate_id("rep"))
    device_id = Column(String)
    bus_id = Column(String, ForeignKey("buses.bus_id", ondelete="SET NULL"))
    driver_profile_id = Column(String, ForeignKey("driver_profiles.driver_id", ondelete="SET NULL"))
    status = Column(String, nullable=False)  # WORKING, NOT_WORKING, NEEDS_MAINTENANCE
    admin_status = Column(String)  # Uppercase triage token; None reads as PENDING
    note = Column(Text)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow)

    bus = relationship("Bus")
    driver = relationship("DriverProfile")

    __table_args__ = (
        Index("idx_status_reports_created", created_at.desc()),
    )


class Trip(Base):
    """Vehicle trip. Produced by the driver app, read-only here."""
    __tablename__ = "trips"

    trip_id = Column(String, primary_key=True, default=lambda: generate_id("trp"))
    bus_id = Column(String, ForeignKey("buses.bus_id", ondelete="SET NULL"))
    driver_profile_id = Column(String, ForeignKey("driver_profiles.driver_id", ondelete="SET NULL"))
    status = Column(String, nullable=False, default="ONGOING")  # ONGOING, COMPLETED, CANCELLED
    origin_label = Column(String)
    dest_label = Column(String)
    started_at = Column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    ended_at = Column(DateTime(timezone=True))

    bus = relationship("Bus")
    driver = relationship("DriverProfile")

    __table_args__ = (
        Index("idx_trips_started", started_at.desc()),
    )
