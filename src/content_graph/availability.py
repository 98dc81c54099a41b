"""Availability Filter

Decides whether a content object is visible for the requested entitlement
dimensions (customer type, device type, region).

Rules:
  - An object's availability is the union of its linked availability records,
    or the single record flagged ``default`` when none are linked.
  - A record only counts while its time window is active, as of the
    time-travel date when one is given.
  - Per record, every axis must match (AND); an object is visible when any
    of its records grants access (OR).
  - Axis matching is case-insensitive substring containment in either
    direction against the dimension's slug/name.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

from . import config
from .models import Dimensions, Record
from .store import RecordStore

logger = logging.getLogger(__name__)

# Requested axis -> field name on availability and segment records
AXIS_FIELDS = {
    "customer_types": "customers",
    "device_types": "devices",
    "regions": "regions",
}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_datetime(value) -> Optional[datetime]:
    """Parse an ISO-8601 string into an aware datetime; None if unusable.

    Naive values are taken as UTC.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        logger.warning("Ignoring unparsable date %r", value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def next_sunday_at_nine_pm(now: datetime) -> datetime:
    """The coming Sunday at 21:00; a week ahead when ``now`` is a Sunday."""
    days_until_sunday = (6 - now.weekday()) % 7 or 7
    next_sunday = now + timedelta(days=days_until_sunday)
    return next_sunday.replace(
        hour=config.DYNAMIC_WINDOW_HOUR, minute=0, second=0, microsecond=0
    )


def availability_window(
    record: Record, now: datetime
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """(starts, ends) for an availability record.

    The two dynamic slugs are computed from the wall-clock ``now``; every
    other record uses its stored ``starts``/``ends``.
    """
    slug = record.string("slug")
    if slug == config.ACTIVE_NEXT_SUNDAY_SLUG:
        return next_sunday_at_nine_pm(now), None
    if slug == config.ACTIVE_UNTIL_NEXT_SUNDAY_SLUG:
        return None, next_sunday_at_nine_pm(now)
    return parse_datetime(record.get("starts")), parse_datetime(record.get("ends"))


def is_time_active(
    record: Record,
    time_travel_date: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> bool:
    now = now or utc_now()
    starts, ends = availability_window(record, now)
    at = time_travel_date or now
    if at.tzinfo is None:
        at = at.replace(tzinfo=timezone.utc)

    if starts and at < starts:
        return False
    if ends and at >= ends:
        return False
    return True


def resolve_record_dimensions(store: RecordStore, record: Record) -> Dict[str, List[str]]:
    """Dimension ids per axis for a record, filled in from its audience segments.

    Segment values only fill axes the record itself leaves empty.
    """
    resolved = {axis: list(record.strings(field) or []) for axis, field in AXIS_FIELDS.items()}

    for segment_id in record.strings("segments") or []:
        segment = store.get("audience_segments", segment_id)
        if segment is None:
            logger.debug("Availability %s links missing segment %s", record.id, segment_id)
            continue
        for axis, field in AXIS_FIELDS.items():
            if not resolved[axis]:
                resolved[axis] = list(segment.strings(field) or [])
    return resolved


def dimension_name(store: RecordStore, axis: str, dimension_id: str) -> str:
    """Lower-cased slug/name/title of a dimension record, or the raw id."""
    record = store.get_dimension(axis, dimension_id)
    if record is None:
        return dimension_id
    name = record.get("slug") or record.get("name") or record.get("title") or dimension_id
    return name.lower() if isinstance(name, str) else dimension_id


def axis_matches(
    store: RecordStore, axis: str, requested: List[str], available: List[str]
) -> bool:
    if not requested:
        return True
    if not available:
        return False

    names = [dimension_name(store, axis, dim_id) for dim_id in available]
    return any(
        name in wanted or wanted in name for wanted in requested for name in names
    )


def check_availability_match(
    store: RecordStore,
    record: Record,
    dimensions: Dimensions,
    time_travel_date: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> bool:
    """True when one availability record is active and matches every axis."""
    if not is_time_active(record, time_travel_date, now):
        return False

    available = resolve_record_dimensions(store, record)
    return all(
        axis_matches(store, axis, getattr(dimensions, axis), available[axis])
        for axis in AXIS_FIELDS
    )


def filter_content_by_availability(
    store: RecordStore,
    availability_ids: List[str],
    dimensions: Dimensions,
    time_travel_date: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> bool:
    """Whether content linked to ``availability_ids`` is visible.

    Only meant to be called when filtering was requested; callers decide
    that from ``Dimensions.requested``.
    """
    ids_to_check = list(availability_ids)
    if not ids_to_check:
        default = store.default_availability()
        if default is None:
            return False
        ids_to_check = [default.id]

    for availability_id in ids_to_check:
        record = store.get("availability", availability_id)
        if record is None:
            continue
        if check_availability_match(store, record, dimensions, time_travel_date, now):
            return True
    return False
