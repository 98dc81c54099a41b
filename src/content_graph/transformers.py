"""Entity Transformation Module

Converts media-object and article records into their resolved,
GraphQL-shaped form.

Pipeline for every media-like record:
  1. Depth guard: nothing is resolved at or beyond MAX_DEPTH
  2. Availability check when the request carries dimensions; a record that
     fails it resolves to None together with everything below it
  3. Localization merge for non-default locales
  4. Depth-bounded expansion of images, genres, themes, tags, ratings and
     credits, followed by credit de-duplication
  5. Kind-specific scalar fields
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from . import config
from .availability import filter_content_by_availability
from .exceptions import UnknownObjectKindError
from .localization import localize
from .metadata import (
    parse_availability,
    parse_call_to_action,
    parse_genre,
    parse_image,
    parse_person,
    parse_rating,
    parse_role,
    parse_tag,
    parse_theme,
)
from .models import (
    Article,
    Brand,
    Connection,
    Credit,
    Episode,
    LiveStream,
    Movie,
    ObjectKind,
    Record,
    RequestContext,
    ResolvedObject,
    Season,
)
from .relationships import JOIN_ENTITY_COST, expand, wrap
from .store import RecordStore

logger = logging.getLogger(__name__)

MEDIA_RELATIONSHIPS = ("images", "genres", "themes", "tags", "ratings", "credits")
ARTICLE_RELATIONSHIPS = ("images", "tags", "credits")


# ---------------------------------------------------------------------------
# Credits
# ---------------------------------------------------------------------------


def parse_credit(
    store: RecordStore,
    record: Optional[Record],
    ctx: RequestContext,
    owner_depth: int,
) -> Optional[Credit]:
    """Resolve a credit owned by an object at ``owner_depth``.

    People and roles sit two hops from the owner (owner -> Credit -> leaf),
    so both are expanded at the join-entity cost.
    """
    if record is None:
        return None

    lang = ctx.language_code
    people = expand(
        record.get("person"),
        lambda pid: parse_person(store, store.get("people", pid), lang),
        owner_depth,
        JOIN_ENTITY_COST,
    )
    roles = expand(
        record.get("role"),
        lambda rid: parse_role(store, store.get("roles", rid), lang),
        owner_depth,
        JOIN_ENTITY_COST,
    )
    return Credit(
        uid=record.id,
        external_id=record.external_id,
        character=record.string("character"),
        people=wrap(people),
        roles=wrap(roles),
    )


def dedup_credits(credits: Sequence[Credit]) -> List[Credit]:
    """Drop every credit that names a person already credited earlier.

    The whole credit is dropped, duplicate roles are kept. Credits whose
    people were not expanded (depth budget) are always kept.
    """
    seen_people = set()
    kept: List[Credit] = []
    for credit in credits:
        if credit.people is None:
            kept.append(credit)
            continue

        person_ids = [person.uid for person in credit.people.objects]
        if any(pid in seen_people for pid in person_ids):
            logger.debug("Dropping credit %s with an already credited person", credit.uid)
            continue

        seen_people.update(person_ids)
        kept.append(credit)
    return kept


# ---------------------------------------------------------------------------
# Shared media pipeline
# ---------------------------------------------------------------------------


def _resolvers(
    store: RecordStore, ctx: RequestContext, depth: int
) -> Dict[str, Callable[[str], Any]]:
    lang = ctx.language_code
    return {
        "images": lambda i: parse_image(store.get("images", i)),
        "genres": lambda i: parse_genre(store, store.get("genres", i), lang),
        "themes": lambda i: parse_theme(store, store.get("themes", i), lang),
        "tags": lambda i: parse_tag(store.get("tags", i)),
        "ratings": lambda i: parse_rating(store.get("ratings", i)),
        "credits": lambda i: parse_credit(store, store.get("credits", i), ctx, depth),
    }


def expand_relationships(
    store: RecordStore,
    record: Record,
    ctx: RequestContext,
    depth: int,
    names: Sequence[str] = MEDIA_RELATIONSHIPS,
) -> Dict[str, Optional[Connection]]:
    """Connections for the named relationship fields of ``record``."""
    resolvers = _resolvers(store, ctx, depth)
    expanded: Dict[str, Optional[Connection]] = {}
    for name in names:
        items = expand(record.get(name), resolvers[name], depth)
        if name == "credits" and items is not None:
            items = dedup_credits(items)
        expanded[name] = wrap(items)
    return expanded


def has_access(store: RecordStore, record: Record, ctx: RequestContext) -> bool:
    """Availability check for a record; always True when nothing was requested."""
    if not ctx.dimensions.requested:
        return True
    return filter_content_by_availability(
        store,
        record.ids("availability"),
        ctx.dimensions,
        ctx.time_travel_date,
    )


def availability_connection(
    store: RecordStore, record: Record, ctx: RequestContext
) -> Connection:
    """The record's availability rules; only listed when dimensions were requested."""
    if not ctx.dimensions.requested:
        return Connection()
    items = [
        parse_availability(store.get("availability", aid))
        for aid in record.ids("availability")
    ]
    return Connection.of(item for item in items if item is not None)


def call_to_actions_connection(
    store: RecordStore, record: Record, ctx: RequestContext
) -> Connection:
    items = [
        parse_call_to_action(store, store.get("call_to_actions", cid), ctx.language_code)
        for cid in record.ids("call_to_actions")
    ]
    return Connection.of(item for item in items if item is not None)


def _prepare(
    store: RecordStore,
    record: Optional[Record],
    ctx: Optional[RequestContext],
    depth: int,
    table: str,
) -> Optional[Tuple[Record, RequestContext]]:
    """Depth guard, availability check and localization shared by every parser."""
    if record is None:
        return None
    if depth >= config.MAX_DEPTH:
        logger.debug("Not resolving %s at depth %d", record.id, depth)
        return None

    ctx = ctx or RequestContext()
    if not has_access(store, record, ctx):
        logger.debug("Record %s filtered out by availability", record.id)
        return None
    return localize(store, record, table, ctx.language_code), ctx


def _media_fields(
    store: RecordStore, record: Record, ctx: RequestContext, depth: int
) -> Dict[str, Any]:
    return dict(
        uid=record.id,
        external_id=record.external_id,
        slug=record.string("slug"),
        title=record.string("title"),
        title_short=record.string("title_short"),
        title_sort=record.string("title_sort"),
        synopsis=record.string("synopsis"),
        synopsis_short=record.string("synopsis_short"),
        release_date=record.string("release_date"),
        availability=availability_connection(store, record, ctx),
        call_to_actions=call_to_actions_connection(store, record, ctx),
        **expand_relationships(store, record, ctx, depth),
    )


# ---------------------------------------------------------------------------
# Per-kind parsers
# ---------------------------------------------------------------------------


def parse_movie(
    store: RecordStore,
    record: Optional[Record],
    ctx: Optional[RequestContext] = None,
    depth: int = 0,
) -> Optional[Movie]:
    prepared = _prepare(store, record, ctx, depth, "media_objects")
    if prepared is None:
        return None
    record, ctx = prepared
    return Movie(
        **_media_fields(store, record, ctx, depth),
        budget=record.number("budget"),
        audience_rating=record.number("audience_rating"),
    )


def parse_episode(
    store: RecordStore,
    record: Optional[Record],
    ctx: Optional[RequestContext] = None,
    depth: int = 0,
) -> Optional[Episode]:
    prepared = _prepare(store, record, ctx, depth, "media_objects")
    if prepared is None:
        return None
    record, ctx = prepared
    return Episode(
        **_media_fields(store, record, ctx, depth),
        episode_number=record.number("episode_number"),
        audience_rating=record.number("audience_rating"),
    )


def parse_season(
    store: RecordStore,
    record: Optional[Record],
    ctx: Optional[RequestContext] = None,
    depth: int = 0,
) -> Optional[Season]:
    prepared = _prepare(store, record, ctx, depth, "media_objects")
    if prepared is None:
        return None
    record, ctx = prepared
    return Season(
        **_media_fields(store, record, ctx, depth),
        season_number=record.number("season_number"),
        preferred_image_type=record.string("preferred_image_type"),
    )


def parse_brand(
    store: RecordStore,
    record: Optional[Record],
    ctx: Optional[RequestContext] = None,
    depth: int = 0,
) -> Optional[Brand]:
    prepared = _prepare(store, record, ctx, depth, "media_objects")
    if prepared is None:
        return None
    record, ctx = prepared
    return Brand(**_media_fields(store, record, ctx, depth))


def parse_live_stream(
    store: RecordStore,
    record: Optional[Record],
    ctx: Optional[RequestContext] = None,
    depth: int = 0,
) -> Optional[LiveStream]:
    prepared = _prepare(store, record, ctx, depth, "media_objects")
    if prepared is None:
        return None
    record, ctx = prepared
    return LiveStream(**_media_fields(store, record, ctx, depth))


def parse_article(
    store: RecordStore,
    record: Optional[Record],
    ctx: Optional[RequestContext] = None,
    depth: int = 0,
) -> Optional[Article]:
    """Articles use their own translation table and a smaller set of relationships."""
    prepared = _prepare(store, record, ctx, depth, "articles")
    if prepared is None:
        return None
    record, ctx = prepared
    return Article(
        uid=record.id,
        external_id=record.external_id,
        slug=record.string("slug"),
        title=record.string("title"),
        description=record.string("description"),
        body=record.string("body"),
        type=record.string("type"),
        publish_date=record.string("publish_date"),
        internal_title=record.string("internal_title"),
        availability=availability_connection(store, record, ctx),
        **expand_relationships(store, record, ctx, depth, ARTICLE_RELATIONSHIPS),
    )


MEDIA_PARSERS: Dict[ObjectKind, Callable[..., Optional[ResolvedObject]]] = {
    ObjectKind.MOVIE: parse_movie,
    ObjectKind.EPISODE: parse_episode,
    ObjectKind.SEASON: parse_season,
    ObjectKind.BRAND: parse_brand,
    ObjectKind.LIVE_STREAM: parse_live_stream,
    ObjectKind.ARTICLE: parse_article,
}


def parse_media_object(
    store: RecordStore,
    record: Optional[Record],
    ctx: Optional[RequestContext] = None,
    depth: int = 0,
) -> Optional[ResolvedObject]:
    """Dispatch a record to the parser selected by its type discriminator.

    Raises:
        UnknownObjectKindError: If the discriminator maps to no known kind

    Set references (SkylarkSet-typed media objects) are not resolved here;
    they go through ``sets.resolve_content_object``.
    """
    if record is None:
        return None
    kind = ObjectKind.of(record)
    parser = MEDIA_PARSERS.get(kind)
    if parser is None:
        logger.debug("Record %s is a %s; not a media object", record.id, kind.value)
        return None
    return parser(store, record, ctx, depth)


def try_parse_media_object(
    store: RecordStore,
    record: Optional[Record],
    ctx: Optional[RequestContext] = None,
    depth: int = 0,
) -> Optional[ResolvedObject]:
    """``parse_media_object`` for graph-internal callers: unknown kinds are logged and dropped."""
    try:
        return parse_media_object(store, record, ctx, depth)
    except UnknownObjectKindError as e:
        logger.warning("Skipping record: %s", e)
        return None
