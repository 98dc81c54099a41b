"""Field Accessors

Total, failure-free coercion helpers for the loosely-typed values stored in
snapshot records. Every helper accepts whatever is stored under a field and
returns the requested shape or ``None``/``[]``; mixed-type input never raises.
"""

from typing import Any, Dict, List, Optional, Union

Number = Union[int, float]


def as_string(value: Any) -> Optional[str]:
    """Return ``value`` if it is a string, else None."""
    return value if isinstance(value, str) else None


def as_number(value: Any) -> Optional[Number]:
    """Return ``value`` if it is an int or float (bools excluded), else None."""
    if isinstance(value, bool):
        return None
    return value if isinstance(value, (int, float)) else None


def as_string_array(value: Any) -> Optional[List[str]]:
    """Keep only the string elements of a list; None for non-lists."""
    if isinstance(value, list):
        return [item for item in value if isinstance(item, str)]
    return None


def as_single_string(value: Any) -> Optional[str]:
    """First element of a list if it is a string, or the value itself."""
    if isinstance(value, list):
        return as_string(value[0]) if value else None
    return as_string(value)


def as_id_list(value: Any) -> List[str]:
    """Normalize a relationship value into a list of ids.

    Absent values give ``[]``, a single id gives a one-element list and an
    array keeps only its string elements.
    """
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [item for item in value if isinstance(item, str)]
    return []


def image_url(fields: Dict[str, Any]) -> Optional[str]:
    """Resolve the best available URL for an image record's fields.

    Order: cloudinary_url, url, external_url, external_url_old, then the url
    of the first uploaded attachment.
    """
    url = (
        as_string(fields.get("cloudinary_url"))
        or as_string(fields.get("url"))
        or as_string(fields.get("external_url"))
        or as_string(fields.get("external_url_old"))
    )
    if not url:
        attachments = fields.get("image")
        if isinstance(attachments, list) and attachments:
            first = attachments[0]
            if isinstance(first, dict):
                url = as_string(first.get("url"))
    return url or None
