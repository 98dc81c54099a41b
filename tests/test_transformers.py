import logging

import pytest

from src.content_graph import config
from src.content_graph.exceptions import UnknownObjectKindError
from src.content_graph.models import (
    Article,
    Connection,
    Credit,
    Dimensions,
    Episode,
    LiveStream,
    Movie,
    Person,
    Record,
    RequestContext,
)
from src.content_graph.store import RecordStore
from src.content_graph.transformers import (
    dedup_credits,
    parse_article,
    parse_episode,
    parse_media_object,
    parse_movie,
    try_parse_media_object,
)


# --- helpers -----------------------------------------------------------------


def rec(record_id, **fields):
    return Record(id=record_id, fields=fields)


def make_store(*media, **collections):
    collections.setdefault("genres", [rec("g1", name="Sci-Fi")])
    return RecordStore(collections={"media_objects": list(media), **collections})


def uids(connection):
    return [obj.uid for obj in connection.objects]


def credited_store():
    return make_store(
        rec("m1", skylark_object_type="movies", credits=["cr1", "cr2", "cr3"]),
        people=[rec("p1", name="Keanu Reeves"), rec("p2", name="Carrie-Anne Moss")],
        roles=[rec("actor", title="Actor"), rec("voice", title="Voice")],
        credits=[
            rec("cr1", person=["p1"], role=["actor"], character="Neo"),
            rec("cr2", person=["p2"], role=["actor"]),
            rec("cr3", person=["p1"], role=["voice"]),
        ],
    )


# --- depth budget ------------------------------------------------------------


def test_movie_at_root_expands_genres():
    """A root movie resolves its genre relationship into Genre objects."""
    store = make_store(rec("m1", skylark_object_type="Movie", genres=["g1"]))

    movie = parse_movie(store, store.get("media_objects", "m1"))

    assert isinstance(movie, Movie)
    assert movie.genres.count == 1
    assert movie.genres.objects[0].name == "Sci-Fi"


def test_movie_one_level_short_of_budget_has_null_relationships():
    """The object itself resolves, but nothing below it is attempted."""
    store = make_store(rec("m1", skylark_object_type="Movie", genres=["g1"], images=["i1"]))

    movie = parse_movie(store, store.get("media_objects", "m1"), depth=config.MAX_DEPTH - 1)

    assert movie.uid == "m1"
    assert movie.genres is None
    assert movie.images is None
    assert movie.credits is None


def test_nothing_resolves_at_max_depth():
    store = make_store(rec("m1", skylark_object_type="Movie"))
    assert parse_movie(store, store.get("media_objects", "m1"), depth=config.MAX_DEPTH) is None


def test_attempted_relationship_without_ids_is_empty_connection():
    """Within budget, an absent relationship is an empty Connection, not None."""
    store = make_store(rec("m1", skylark_object_type="Movie"))

    movie = parse_movie(store, store.get("media_objects", "m1"))

    assert movie.genres is not None
    assert movie.genres.count == 0
    assert movie.genres.objects == []


def test_dangling_relationship_ids_are_dropped():
    store = make_store(rec("m1", skylark_object_type="Movie", genres=["missing", "g1"]))

    movie = parse_movie(store, store.get("media_objects", "m1"))

    assert uids(movie.genres) == ["g1"]


def test_credit_people_and_roles_use_join_cost():
    """Two levels short of the budget credits resolve, but their people do not."""
    store = credited_store()
    record = store.get("media_objects", "m1")

    shallow = parse_movie(store, record, depth=config.MAX_DEPTH - 3)
    deep = parse_movie(store, record, depth=config.MAX_DEPTH - 2)

    assert shallow.credits.objects[0].people is not None
    assert shallow.credits.objects[0].roles.objects[0].title == "Actor"
    assert deep.credits.count == 3
    assert all(c.people is None and c.roles is None for c in deep.credits.objects)


def test_call_to_actions_are_not_depth_limited():
    store = make_store(
        rec("m1", skylark_object_type="Movie", call_to_actions=["cta1"]),
        call_to_actions=[rec("cta1", text="Watch now")],
    )

    movie = parse_movie(store, store.get("media_objects", "m1"), depth=config.MAX_DEPTH - 1)

    assert movie.call_to_actions.objects[0].text == "Watch now"


# --- credits -----------------------------------------------------------------


def test_credits_with_repeated_person_are_dropped():
    """A second credit for the same person disappears with its role."""
    store = credited_store()

    movie = parse_movie(store, store.get("media_objects", "m1"))

    assert uids(movie.credits) == ["cr1", "cr2"]
    assert movie.credits.objects[0].character == "Neo"


def _credit(uid, *people, expanded=True):
    if not expanded:
        return Credit(uid=uid, external_id=uid)
    return Credit(
        uid=uid,
        external_id=uid,
        people=Connection.of(Person(uid=p, external_id=p) for p in people),
    )


def test_dedup_credits_edge_cases():
    kept = dedup_credits(
        [
            _credit("c1", "p1", "p2"),
            _credit("c2", "p2"),
            _credit("c3"),
            _credit("c4", expanded=False),
            _credit("c5", expanded=False),
            _credit("c6", "p3"),
        ]
    )

    assert [c.uid for c in kept] == ["c1", "c3", "c4", "c5", "c6"]
    assert dedup_credits([]) == []


# --- availability ------------------------------------------------------------


def availability_store():
    return make_store(
        rec("m1", skylark_object_type="Movie", availability=["av_premium"]),
        availability=[rec("av_premium", title="Premium", customers=["ct_premium"])],
    )


def test_unavailable_movie_resolves_to_none():
    store = availability_store()
    ctx = RequestContext(dimensions=Dimensions(customer_types="standard"))

    assert parse_movie(store, store.get("media_objects", "m1"), ctx) is None


def test_available_movie_lists_its_availability():
    store = availability_store()
    ctx = RequestContext(dimensions=Dimensions(customer_types="premium"))

    movie = parse_movie(store, store.get("media_objects", "m1"), ctx)

    assert uids(movie.availability) == ["av_premium"]
    assert movie.availability.objects[0].title == "Premium"


def test_availability_not_checked_without_dimensions():
    store = availability_store()

    movie = parse_movie(store, store.get("media_objects", "m1"))

    assert movie is not None
    assert movie.availability.count == 0


# --- localization and scalars ------------------------------------------------


def test_translated_fields_override_base_values():
    store = RecordStore(
        collections={
            "media_objects": [
                rec("m1", skylark_object_type="Movie", title="The Matrix", synopsis="A hacker.", genres=["g1"])
            ],
            "genres": [rec("g1", name="Sci-Fi")],
        },
        translations={
            "media_objects": [rec("t1", object=["m1"], language_code=["pt-PT"], title="Matrix", synopsis="")],
            "genres": [rec("t2", object=["g1"], language_code=["pt-PT"], name="Ficção científica")],
        },
    )

    movie = parse_movie(store, store.get("media_objects", "m1"), RequestContext(language_code="pt-pt"))

    assert movie.title == "Matrix"
    assert movie.synopsis == "A hacker."
    assert movie.genres.objects[0].name == "Ficção científica"


def test_numeric_fields_ignore_wrong_types():
    store = make_store(
        rec("m1", skylark_object_type="Movie", budget="lots", audience_rating=4.5),
        rec("e1", skylark_object_type="Episode", episode_number=3),
    )

    movie = parse_movie(store, store.get("media_objects", "m1"))
    episode = parse_episode(store, store.get("media_objects", "e1"))

    assert movie.budget is None
    assert movie.audience_rating == 4.5
    assert episode.episode_number == 3


# --- dispatch ----------------------------------------------------------------


def test_dispatch_by_discriminator():
    store = make_store(
        rec("e1", skylark_object_type="episodes"),
        rec("ls1", skylark_object_type="live-streams"),
        rec("ref1", skylark_object_type="SkylarkSet"),
    )

    assert isinstance(parse_media_object(store, store.get("media_objects", "e1")), Episode)
    assert isinstance(parse_media_object(store, store.get("media_objects", "ls1")), LiveStream)
    assert parse_media_object(store, store.get("media_objects", "ref1")) is None
    assert parse_media_object(store, None) is None


def test_unknown_discriminator_raises():
    store = make_store(rec("x1", skylark_object_type="podcast"))

    with pytest.raises(UnknownObjectKindError):
        parse_media_object(store, store.get("media_objects", "x1"))


def test_try_parse_skips_unknown_discriminator_with_warning(caplog):
    caplog.set_level(logging.WARNING)
    store = make_store(rec("x1", skylark_object_type="podcast"))

    assert try_parse_media_object(store, store.get("media_objects", "x1")) is None
    assert "Skipping record" in caplog.text


# --- articles ----------------------------------------------------------------


def test_article_expands_images_tags_and_credits():
    store = RecordStore(
        collections={
            "articles": [
                rec("a1", title="Behind the scenes", type="NEWS", images=["i1"], tags=["t1"], genres=["g1"])
            ],
            "images": [rec("i1", title="Poster", url="https://img.example.com/p.jpg")],
            "tags": [rec("t1", name="Award Winner")],
            "genres": [rec("g1", name="Sci-Fi")],
        }
    )

    article = parse_article(store, store.get("articles", "a1"))

    assert isinstance(article, Article)
    assert article.type == "NEWS"
    assert article.images.objects[0].url == "https://img.example.com/p.jpg"
    assert article.tags.objects[0].name == "Award Winner"
    assert article.credits.count == 0
    assert not hasattr(article, "genres")
