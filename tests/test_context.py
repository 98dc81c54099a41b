# tests/test_context.py

from datetime import datetime, timezone

from src.content_graph.context import request_context_from_headers


def test_headers_build_request_context():
    ctx = request_context_from_headers(
        {
            "X-Language": " PT-PT ",
            "X-SL-Dimension-Customer-Types": "Premium, standard",
            "x-sl-dimension-device-types": "tv",
            "x-sl-dimension-regions": "Europe",
            "x-time-travel": "2020-07-01T00:00:00Z",
        }
    )

    assert ctx.language_code == "pt-pt"
    assert ctx.dimensions.customer_types == ["premium", "standard"]
    assert ctx.dimensions.device_types == ["tv"]
    assert ctx.dimensions.regions == ["europe"]
    assert ctx.time_travel_date == datetime(2020, 7, 1, tzinfo=timezone.utc)


def test_missing_headers_use_defaults():
    for headers in (None, {}, {"x-language": "   "}):
        ctx = request_context_from_headers(headers)

        assert ctx.language_code == "en-gb"
        assert ctx.dimensions.requested is False
        assert ctx.time_travel_date is None


def test_unparsable_time_travel_is_ignored():
    ctx = request_context_from_headers({"x-time-travel": "yesterday"})
    assert ctx.time_travel_date is None
