"""Request context extraction from transport headers."""

from typing import Mapping, Optional

from . import config
from .availability import parse_datetime
from .models import Dimensions, RequestContext

LANGUAGE_HEADER = "x-language"
CUSTOMER_TYPES_HEADER = "x-sl-dimension-customer-types"
DEVICE_TYPES_HEADER = "x-sl-dimension-device-types"
REGIONS_HEADER = "x-sl-dimension-regions"
TIME_TRAVEL_HEADER = "x-time-travel"


def request_context_from_headers(headers: Optional[Mapping[str, str]]) -> RequestContext:
    """Build the per-request context from a header mapping.

    Header names are matched case-insensitively. Dimension headers are
    comma-separated lists; an unparsable time-travel date is ignored.
    """
    lowered = {k.lower(): v for k, v in (headers or {}).items()}
    language = lowered.get(LANGUAGE_HEADER)
    return RequestContext(
        language_code=language.strip().lower() if language and language.strip() else config.DEFAULT_LANGUAGE,
        dimensions=Dimensions(
            customer_types=lowered.get(CUSTOMER_TYPES_HEADER),
            device_types=lowered.get(DEVICE_TYPES_HEADER),
            regions=lowered.get(REGIONS_HEADER),
        ),
        time_travel_date=parse_datetime(lowered.get(TIME_TRAVEL_HEADER)),
    )
