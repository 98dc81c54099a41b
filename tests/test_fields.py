# tests/test_fields.py

from src.content_graph.fields import (
    as_id_list,
    as_number,
    as_single_string,
    as_string,
    as_string_array,
    image_url,
)


# --- as_string / as_number ---


def test_as_string_returns_strings_only():
    """Non-string values degrade to None instead of being stringified."""
    assert as_string("The Matrix") == "The Matrix"
    assert as_string("") == ""
    assert as_string(42) is None
    assert as_string(["a"]) is None
    assert as_string(None) is None


def test_as_number_accepts_ints_and_floats_but_not_bools():
    assert as_number(3) == 3
    assert as_number(4.5) == 4.5
    assert as_number(True) is None
    assert as_number("3") is None
    assert as_number(None) is None


# --- arrays ---


def test_as_string_array_filters_mixed_lists():
    """Mixed-type arrays keep only their string elements."""
    assert as_string_array(["a", 1, None, "b", {"x": 1}]) == ["a", "b"]
    assert as_string_array([]) == []


def test_as_string_array_is_none_for_non_lists():
    assert as_string_array("a") is None
    assert as_string_array(None) is None
    assert as_string_array({"a": 1}) is None


def test_as_single_string_takes_first_list_element():
    assert as_single_string(["POSTER", "THUMBNAIL"]) == "POSTER"
    assert as_single_string("POSTER") == "POSTER"
    assert as_single_string([1, "POSTER"]) is None
    assert as_single_string([]) is None
    assert as_single_string(None) is None


def test_as_id_list_normalizes_relationship_values():
    """Absent -> [], scalar id -> [id], array -> string ids only."""
    assert as_id_list(None) == []
    assert as_id_list("") == []
    assert as_id_list([]) == []
    assert as_id_list("g1") == ["g1"]
    assert as_id_list(["g1", 2, "g2"]) == ["g1", "g2"]
    assert as_id_list(5) == []
    assert as_id_list({"id": "g1"}) == []


# --- image_url ---


def test_image_url_prefers_cloudinary_then_url_then_external():
    assert image_url({"cloudinary_url": "c", "url": "u", "external_url": "e"}) == "c"
    assert image_url({"url": "u", "external_url": "e"}) == "u"
    assert image_url({"external_url": "e", "external_url_old": "o"}) == "e"
    assert image_url({"external_url_old": "o"}) == "o"


def test_image_url_falls_back_to_first_attachment():
    fields = {"image": [{"url": "https://files.example.com/a.png"}, {"url": "b"}]}
    assert image_url(fields) == "https://files.example.com/a.png"


def test_image_url_is_none_when_nothing_usable():
    assert image_url({}) is None
    assert image_url({"image": ["not-a-dict"]}) is None
    assert image_url({"url": 12}) is None
