"""
List logic behind the monitoring and trip-history screens.

Pure functions over the dicts the API returns: merge, search, sort, and
the small formatters used to label rows.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

PLACEHOLDER = "—"

NEWEST = "NEWEST"
OLDEST = "OLDEST"

_TONES = (
    ("good", ("WORKING", "ONLINE", "OK", "RESOLVED", "DONE", "CLOSED")),
    ("warn", ("NEEDS_MAINTENANCE", "MAINTENANCE", "IN_PROGRESS")),
    ("bad", ("NOT_WORKING", "OFFLINE")),
    ("info", ("PENDING", "OPEN", "ACTIVE", "ONGOING")),
)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """ISO-8601 string or datetime -> datetime; None for anything unparseable."""
    if isinstance(value, datetime):
        return value
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _sort_key(value: Optional[datetime]) -> float:
    # Naive timestamps are taken as UTC
    if value is None:
        return 0.0
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def status_tone(status: Any) -> str:
    """Badge tone for a device, report or trip status token."""
    token = str(status or "").upper()
    for tone, tokens in _TONES:
        if token in tokens:
            return tone
    return "neutral"


def format_date(value: Any) -> str:
    moment = parse_timestamp(value)
    if moment is None:
        return PLACEHOLDER
    return moment.strftime("%b %d, %Y")


def format_datetime(value: Any) -> str:
    moment = parse_timestamp(value)
    if moment is None:
        return PLACEHOLDER
    return moment.strftime("%Y-%m-%d %H:%M")


# ============================================
# Monitoring
# ============================================

@dataclass
class MonitoringItem:
    """One row of the monitoring list: a status report or a device."""
    type: str  # REPORT or DEVICE
    key: str
    title: str
    meta: str
    date: Optional[datetime]
    badge: str
    admin_status: Optional[str] = None
    id: Optional[str] = None
    device_id: str = PLACEHOLDER
    bus_number: str = PLACEHOLDER
    bus_plate: str = PLACEHOLDER
    driver_name: str = PLACEHOLDER
    network: str = PLACEHOLDER

    def haystack(self) -> str:
        parts = [
            self.title,
            self.meta,
            self.device_id,
            self.bus_number,
            self.bus_plate,
            self.driver_name,
            self.badge,
            self.admin_status,
        ]
        return " ".join(p for p in parts if p).lower()


def report_item(report: dict) -> MonitoringItem:
    """A missing triage status reads as PENDING."""
    device_id = report.get("deviceId") or PLACEHOLDER
    bus_number = report.get("busNumber") or PLACEHOLDER
    bus_plate = report.get("busPlate") or PLACEHOLDER
    return MonitoringItem(
        type="REPORT",
        key=f"rep:{report.get('id')}",
        id=report.get("id"),
        title=report.get("driverName") or "Driver report",
        meta=f"Bus {bus_number} · {bus_plate} · Device {device_id}",
        date=parse_timestamp(report.get("createdAt") or report.get("reportedAt")),
        badge=str(report.get("status") or "PENDING").upper(),
        admin_status=str(report.get("adminStatus") or "PENDING").upper(),
        device_id=device_id,
        bus_number=bus_number,
        bus_plate=bus_plate,
        driver_name=report.get("driverName") or PLACEHOLDER,
    )


def device_item(device: dict) -> MonitoringItem:
    device_id = device.get("deviceId") or device.get("id")
    bus_number = device.get("busNumber") or PLACEHOLDER
    bus_plate = device.get("busPlate") or PLACEHOLDER
    return MonitoringItem(
        type="DEVICE",
        key=f"dev:{device_id}",
        id=device.get("id"),
        title=device.get("deviceName") or f"IoT {device_id or 'Device'}",
        meta=f"Bus {bus_number} · {bus_plate}",
        date=parse_timestamp(
            device.get("lastSeen") or device.get("updatedAt") or device.get("createdAt")
        ),
        badge=str(device.get("status") or "UNKNOWN").upper(),
        device_id=device_id or PLACEHOLDER,
        bus_number=bus_number,
        bus_plate=bus_plate,
        driver_name=device.get("driverName") or PLACEHOLDER,
        network=device.get("network") or PLACEHOLDER,
    )


def build_monitoring_items(devices: Iterable[dict], reports: Iterable[dict]) -> list[MonitoringItem]:
    """Reports first, then devices."""
    return [report_item(r) for r in reports or []] + [device_item(d) for d in devices or []]


def filter_items(items: Iterable[MonitoringItem], query: str) -> list[MonitoringItem]:
    """Case-insensitive substring match over each row's text fields."""
    needle = (query or "").strip().lower()
    if not needle:
        return list(items)
    return [item for item in items if needle in item.haystack()]


def sort_items(items: Iterable[MonitoringItem], order: str = NEWEST) -> list[MonitoringItem]:
    """Sort by date; rows without a date always go last."""
    items = list(items)
    dated = [item for item in items if item.date is not None]
    undated = [item for item in items if item.date is None]
    dated.sort(key=lambda item: _sort_key(item.date), reverse=order.upper() != OLDEST)
    return dated + undated


def monitoring_view(
    devices: Iterable[dict],
    reports: Iterable[dict],
    query: str = "",
    order: str = NEWEST,
) -> list[MonitoringItem]:
    return sort_items(filter_items(build_monitoring_items(devices, reports), query), order)


# ============================================
# Trip history
# ============================================

def format_status(status: Any) -> str:
    if not status:
        return PLACEHOLDER
    token = str(status).upper()
    return token[0] + token[1:].lower()


def format_duration(start: Any, end: Any) -> str:
    """Elapsed trip time: "45 mins", "2 hrs", "1h 30m", or a placeholder."""
    started = parse_timestamp(start)
    ended = parse_timestamp(end)
    if started is None or ended is None:
        return PLACEHOLDER
    seconds = _sort_key(ended) - _sort_key(started)
    if seconds <= 0:
        return PLACEHOLDER
    minutes = round(seconds / 60)
    if minutes < 60:
        return f"{minutes} mins"
    hours, mins = divmod(minutes, 60)
    if mins == 0:
        return f"{hours} hr{'s' if hours > 1 else ''}"
    return f"{hours}h {mins}m"


def format_time_range(start: Any, end: Any) -> str:
    """"07:00 – 08:30", or "07:00 – Ongoing" while the trip has no end."""
    started = parse_timestamp(start)
    if started is None:
        return PLACEHOLDER
    ended = parse_timestamp(end)
    finish = ended.strftime("%H:%M") if ended is not None else "Ongoing"
    return f"{started.strftime('%H:%M')} – {finish}"


def completed_trips(trips: Iterable[dict]) -> list[dict]:
    return [t for t in trips or [] if str(t.get("status") or "").upper() == "COMPLETED"]


def _trip_haystack(trip: dict) -> str:
    driver = trip.get("driverProfile") or {}
    bus = trip.get("bus") or {}
    parts = [
        trip.get("driverName") or driver.get("fullName") or "Unknown driver",
        trip.get("busNumber") or bus.get("number") or "",
        trip.get("busPlate") or bus.get("plate") or "",
        trip.get("originLabel") or "",
        trip.get("destLabel") or "",
        format_status(trip.get("status")),
        format_date(trip.get("startedAt")),
    ]
    return " ".join(parts).lower()


def search_trips(trips: Iterable[dict], query: str) -> list[dict]:
    needle = (query or "").strip().lower()
    if not needle:
        return list(trips)
    return [t for t in trips if needle in _trip_haystack(t)]


def sort_trips(trips: Iterable[dict], order: str = NEWEST) -> list[dict]:
    """By start time; trips without one go last."""
    trips = list(trips)
    dated = [t for t in trips if parse_timestamp(t.get("startedAt")) is not None]
    undated = [t for t in trips if parse_timestamp(t.get("startedAt")) is None]
    dated.sort(
        key=lambda t: _sort_key(parse_timestamp(t.get("startedAt"))),
        reverse=order.upper() != OLDEST,
    )
    return dated + undated


def trip_history(trips: Iterable[dict], query: str = "", order: str = NEWEST) -> list[dict]:
    """Completed trips matching the query, sorted by start time."""
    return sort_trips(search_trips(completed_trips(trips), query), order)
