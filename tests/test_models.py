# tests/test_models.py

import pytest

from src.content_graph.exceptions import UnknownObjectKindError
from src.content_graph.models import (
    Connection,
    Dimensions,
    Genre,
    ListResult,
    MetadataListing,
    Movie,
    ObjectKind,
    Record,
    RequestContext,
)


# --- Record ---


def test_record_accessors_never_raise_on_wrong_types():
    record = Record(
        id="m1",
        fields={"title": 5, "budget": "lots", "images": "img1", "type": ["POSTER"]},
    )

    assert record.string("title") is None
    assert record.number("budget") is None
    assert record.ids("images") == ["img1"]
    assert record.strings("images") is None
    assert record.single_string("type") == "POSTER"
    assert record.get("missing") is None


def test_record_external_id_falls_back_to_id():
    assert Record(id="m1", fields={}).external_id == "m1"
    assert Record(id="m1", fields={"external_id": "matrix"}).external_id == "matrix"


def test_record_with_fields_returns_a_copy():
    """Records are immutable; with_fields leaves the original untouched."""
    record = Record(id="m1", fields={"title": "The Matrix"})

    copy = record.with_fields({"title": "Matrix"})

    assert copy.string("title") == "Matrix"
    assert record.string("title") == "The Matrix"
    assert copy.id == "m1"


# --- ObjectKind ---


@pytest.mark.parametrize(
    "value, expected",
    [
        ("episodes", ObjectKind.EPISODE),
        ("Episode", ObjectKind.EPISODE),
        ("movies", ObjectKind.MOVIE),
        (" Movie ", ObjectKind.MOVIE),
        ("live-streams", ObjectKind.LIVE_STREAM),
        ("LiveStream", ObjectKind.LIVE_STREAM),
        ("SkylarkSet", ObjectKind.SKYLARK_SET),
        ("brands", ObjectKind.BRAND),
        ("Seasons", ObjectKind.SEASON),
        ("article", ObjectKind.ARTICLE),
    ],
)
def test_object_kind_aliases(value, expected):
    """Discriminators match case-insensitively and in singular or plural form."""
    assert ObjectKind.parse(value) is expected


def test_object_kind_unknown_discriminator_raises():
    with pytest.raises(UnknownObjectKindError) as exc_info:
        ObjectKind.parse("podcast", "rec1")

    assert exc_info.value.discriminator == "podcast"
    assert exc_info.value.record_id == "rec1"
    assert "rec1" in str(exc_info.value)


def test_object_kind_of_record_without_discriminator_raises():
    with pytest.raises(UnknownObjectKindError):
        ObjectKind.of(Record(id="x", fields={}))


def test_object_kind_matches_is_false_for_unknown_kinds():
    record = Record(id="x", fields={"skylark_object_type": "podcast"})
    assert ObjectKind.matches(record, ObjectKind.MOVIE) is False


# --- request context ---


def test_dimensions_are_trimmed_lowercased_and_split():
    dims = Dimensions(customer_types=" Premium, ,STANDARD ", regions=["Europe", " "])

    assert dims.customer_types == ["premium", "standard"]
    assert dims.regions == ["europe"]
    assert dims.device_types == []
    assert dims.requested is True


def test_empty_dimensions_are_not_requested():
    assert Dimensions().requested is False
    assert RequestContext().dimensions.requested is False
    assert RequestContext().language_code == "en-gb"


# --- resolved objects ---


def test_graphql_output_uses_typename_alias():
    genre = Genre(uid="g1", external_id="g1", name="Sci-Fi")

    out = genre.to_graphql()

    assert out["__typename"] == "Genre"
    assert out["uid"] == "g1"
    assert out["name"] == "Sci-Fi"


def test_connection_serializes_subclass_fields_and_null_token():
    movie = Movie(
        uid="m1",
        external_id="m1",
        genres=Connection.of([Genre(uid="g1", external_id="g1", name="Sci-Fi")]),
    )

    out = movie.to_graphql()

    assert out["genres"] == {
        "objects": [
            {"__typename": "Genre", "uid": "g1", "external_id": "g1", "name": "Sci-Fi", "slug": None}
        ],
        "count": 1,
        "next_token": None,
    }
    # not expanded at all
    assert out["themes"] is None
    assert out["availability"] == {"objects": [], "count": 0, "next_token": None}


def test_list_result_reports_single_page():
    result = ListResult.of([Genre(uid="g1", external_id="g1")])

    out = result.to_graphql()

    assert out["count"] == 1
    assert out["hasNextPage"] is False


def test_metadata_listing_names_objects_after_kind():
    listing = MetadataListing(
        typename="Genre", uid="g1", name="Sci-Fi", object_kind=ObjectKind.LIVE_STREAM
    )

    out = listing.to_graphql()

    assert out["__typename"] == "Genre"
    assert out["liveStreams"] == {"objects": [], "count": 0, "next_token": None}
