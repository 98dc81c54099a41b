"""Content Engine

Entry points for resolving queries against a RecordStore. Every method is a
pure function of the store, its arguments and the request context; results
are built fresh on each call.

Not found and filtered-out objects resolve to ``None``. The one error a
caller sees is ``UnknownObjectKindError``, raised when a directly requested
record carries a discriminator with no known kind.
"""

import logging
from typing import Any, Callable, List, Optional, Type, Union

from . import config
from .localization import localize
from .metadata import (
    parse_call_to_action,
    parse_genre,
    parse_image,
    parse_person,
    person_fields,
    parse_role,
    parse_tag,
)
from .models import (
    BrandDetail,
    CallToAction,
    Connection,
    CreditDetail,
    GraphModel,
    ListResult,
    MetadataListing,
    ObjectKind,
    PersonDetail,
    Record,
    RequestContext,
    ResolvedObject,
    SearchResult,
    SeasonDetail,
    SkylarkSet,
)
from .search import search_all_objects
from .sets import parse_set, resolve_set_with_fallback
from .store import RecordStore
from .transformers import (
    MEDIA_PARSERS,
    parse_article,
    parse_brand,
    parse_episode,
    parse_season,
    try_parse_media_object,
)

logger = logging.getLogger(__name__)

KindArg = Union[ObjectKind, str]

METADATA_TYPENAMES = {"genres": "Genre", "tags": "SkylarkTag"}


def _upgrade(obj: GraphModel, detail_cls: Type[GraphModel], **extra: Any) -> GraphModel:
    """Re-create ``obj`` as its detail variant, adding ``extra`` fields."""
    values = {name: getattr(obj, name) for name in type(obj).model_fields}
    values.update(extra)
    return detail_cls(**values)


def _sorted_by(items: List[GraphModel], attr: str) -> List[GraphModel]:
    # ascending, objects without a number last, otherwise stable
    return sorted(
        items,
        key=lambda o: (getattr(o, attr) is None, getattr(o, attr) or 0),
    )


def _parsed(items) -> List[Any]:
    return [item for item in items if item is not None]


class ContentEngine:
    """Query facade over an immutable RecordStore."""

    def __init__(self, store: RecordStore):
        self.store = store

    def __repr__(self) -> str:
        return f"ContentEngine({self.store!r})"

    # -- single objects ----------------------------------------------------

    def get_object(
        self,
        kind: KindArg,
        uid: Optional[str] = None,
        external_id: Optional[str] = None,
        ctx: Optional[RequestContext] = None,
    ) -> Optional[ResolvedObject]:
        """Resolve one object of ``kind`` by uid or external id.

        Raises:
            UnknownObjectKindError: If ``kind`` is not a known kind, or the
                matched record's own discriminator is unknown
        """
        kind = ObjectKind.parse(kind)
        ctx = ctx or RequestContext()

        if kind is ObjectKind.SKYLARK_SET:
            return self.get_set(uid or external_id, ctx)
        if kind is ObjectKind.ARTICLE:
            record = self.store.find_by_uid_or_external_id("articles", uid, external_id)
            return parse_article(self.store, record, ctx)

        record = self.store.find_media_object(uid, external_id)
        if record is None:
            logger.debug("No media object for uid=%s external_id=%s", uid, external_id)
            return None
        if ObjectKind.of(record) is not kind:
            logger.debug("Record %s is not a %s", record.id, kind.value)
            return None
        return MEDIA_PARSERS[kind](self.store, record, ctx, 0)

    def get_movie(self, uid=None, external_id=None, ctx=None):
        return self.get_object(ObjectKind.MOVIE, uid, external_id, ctx)

    def get_episode(self, uid=None, external_id=None, ctx=None):
        return self.get_object(ObjectKind.EPISODE, uid, external_id, ctx)

    def get_season(self, uid=None, external_id=None, ctx=None):
        return self.get_object(ObjectKind.SEASON, uid, external_id, ctx)

    def get_brand(self, uid=None, external_id=None, ctx=None):
        return self.get_object(ObjectKind.BRAND, uid, external_id, ctx)

    def get_live_stream(self, uid=None, external_id=None, ctx=None):
        return self.get_object(ObjectKind.LIVE_STREAM, uid, external_id, ctx)

    def get_article(self, uid=None, external_id=None, ctx=None):
        return self.get_object(ObjectKind.ARTICLE, uid, external_id, ctx)

    # -- hierarchies -------------------------------------------------------

    def _children(self, parent_id: str, kind: ObjectKind) -> List[Record]:
        return [r for r in self.store.objects_of_kind(kind) if parent_id in r.ids("parent")]

    def _find_of_kind(
        self, kind: ObjectKind, uid: Optional[str], external_id: Optional[str]
    ) -> Optional[Record]:
        record = self.store.find_media_object(uid, external_id)
        if record is None or not ObjectKind.matches(record, kind):
            return None
        return record

    def _season_detail(self, record: Record, ctx: RequestContext, depth: int) -> Optional[SeasonDetail]:
        season = parse_season(self.store, record, ctx, depth)
        if season is None:
            return None
        episodes = _parsed(
            parse_episode(self.store, child, ctx, depth + 1)
            for child in self._children(record.id, ObjectKind.EPISODE)
        )
        return _upgrade(
            season,
            SeasonDetail,
            episodes=Connection.of(_sorted_by(episodes, "episode_number")),
        )

    def get_season_with_episodes(
        self,
        uid: Optional[str] = None,
        external_id: Optional[str] = None,
        ctx: Optional[RequestContext] = None,
    ) -> Optional[SeasonDetail]:
        record = self._find_of_kind(ObjectKind.SEASON, uid, external_id)
        if record is None:
            return None
        return self._season_detail(record, ctx or RequestContext(), 0)

    def get_brand_with_seasons(
        self,
        uid: Optional[str] = None,
        external_id: Optional[str] = None,
        ctx: Optional[RequestContext] = None,
    ) -> Optional[BrandDetail]:
        """Brand with its seasons (depth 1) and their episodes (depth 2)."""
        ctx = ctx or RequestContext()
        record = self._find_of_kind(ObjectKind.BRAND, uid, external_id)
        if record is None:
            return None
        brand = parse_brand(self.store, record, ctx, 0)
        if brand is None:
            return None
        seasons = _parsed(
            self._season_detail(child, ctx, 1)
            for child in self._children(record.id, ObjectKind.SEASON)
        )
        return _upgrade(
            brand, BrandDetail, seasons=Connection.of(_sorted_by(seasons, "season_number"))
        )

    # -- people ------------------------------------------------------------

    def _credit_detail(self, credit: Record, person, ctx: RequestContext) -> CreditDetail:
        lang = ctx.language_code
        roles = _parsed(
            parse_role(self.store, self.store.get("roles", r), lang) for r in credit.ids("role")
        )
        owners = [r for r in self.store.media_objects if credit.id in r.ids("credits")]
        movies = _parsed(
            try_parse_media_object(self.store, r, ctx, 2)
            for r in owners
            if ObjectKind.matches(r, ObjectKind.MOVIE)
        )
        episodes = _parsed(
            try_parse_media_object(self.store, r, ctx, 2)
            for r in owners
            if ObjectKind.matches(r, ObjectKind.EPISODE)
        )
        return CreditDetail(
            uid=credit.id,
            external_id=credit.external_id,
            character=credit.string("character"),
            people=Connection.of([person]),
            roles=Connection.of(roles),
            movies=Connection.of(movies),
            episodes=Connection.of(episodes),
        )

    def get_person(
        self,
        uid: Optional[str] = None,
        external_id: Optional[str] = None,
        ctx: Optional[RequestContext] = None,
    ) -> Optional[PersonDetail]:
        """Person with images and every credit naming them."""
        ctx = ctx or RequestContext()
        record = self.store.find_by_uid_or_external_id("people", uid, external_id)
        if record is None:
            return None

        person = parse_person(self.store, record, ctx.language_code)
        localized = localize(self.store, record, "people", ctx.language_code)
        images = _parsed(parse_image(self.store.get("images", i)) for i in localized.ids("images"))
        credits = [
            self._credit_detail(credit, person, ctx)
            for credit in self.store.collection("credits")
            if record.id in credit.ids("person")
        ]
        return PersonDetail(
            **person_fields(localized),
            images=Connection.of(images),
            credits=Connection.of(credits),
        )

    def get_call_to_action(
        self,
        uid: Optional[str] = None,
        external_id: Optional[str] = None,
        ctx: Optional[RequestContext] = None,
    ) -> Optional[CallToAction]:
        ctx = ctx or RequestContext()
        record = self.store.find_by_uid_or_external_id("call_to_actions", uid, external_id)
        return parse_call_to_action(self.store, record, ctx.language_code)

    # -- sets --------------------------------------------------------------

    def get_set(
        self,
        set_id: Optional[str],
        ctx: Optional[RequestContext] = None,
        use_reference: bool = True,
        depth: int = 0,
    ) -> Optional[SkylarkSet]:
        """Resolve a set by uid, external id or slug.

        With ``use_reference`` an id that names a set reference record is
        followed to the real set. ``depth`` lets page-level callers start
        part-way into the budget.
        """
        if not set_id:
            return None
        record = resolve_set_with_fallback(self.store, set_id, use_reference)
        if record is None:
            logger.debug("No set for %s", set_id)
            return None
        return parse_set(self.store, record, ctx or RequestContext(), depth)

    # -- listings ----------------------------------------------------------

    def list_objects(self, kind: KindArg, ctx: Optional[RequestContext] = None) -> ListResult:
        kind = ObjectKind.parse(kind)
        ctx = ctx or RequestContext()

        parser: Callable[..., Optional[GraphModel]]
        if kind is ObjectKind.ARTICLE:
            records = self.store.collection("articles")
            parser = parse_article
        elif kind is ObjectKind.SKYLARK_SET:
            records = self.store.collection("sets")
            parser = parse_set
        else:
            records = self.store.objects_of_kind(kind)
            parser = MEDIA_PARSERS[kind]

        return ListResult.of(_parsed(parser(self.store, r, ctx) for r in records))

    def list_genres(self, ctx: Optional[RequestContext] = None) -> ListResult:
        ctx = ctx or RequestContext()
        return ListResult.of(
            _parsed(parse_genre(self.store, g, ctx.language_code) for g in self.store.collection("genres"))
        )

    def list_by_metadata(
        self,
        metadata_field: str,
        metadata_id: str,
        object_kind: KindArg,
        ctx: Optional[RequestContext] = None,
    ) -> Optional[MetadataListing]:
        """A genre or tag with the objects of ``object_kind`` that carry it."""
        if metadata_field not in METADATA_TYPENAMES:
            raise ValueError(f"Cannot list by {metadata_field!r}; expected genres or tags")
        kind = ObjectKind.parse(object_kind)
        ctx = ctx or RequestContext()

        metadata = self.store.get(metadata_field, metadata_id)
        if metadata is None:
            return None
        header = (
            parse_genre(self.store, metadata, ctx.language_code)
            if metadata_field == "genres"
            else parse_tag(metadata)
        )

        owners = [
            r for r in self.store.objects_of_kind(kind) if metadata_id in r.ids(metadata_field)
        ]
        objects = _parsed(try_parse_media_object(self.store, r, ctx, 0) for r in owners)
        return MetadataListing(
            typename=METADATA_TYPENAMES[metadata_field],
            uid=metadata.id,
            name=header.name,
            object_kind=kind,
            objects=Connection.of(objects),
        )

    # -- search ------------------------------------------------------------

    def search(
        self,
        query: str,
        ctx: Optional[RequestContext] = None,
        limit: int = config.SEARCH_RESULT_LIMIT,
    ) -> SearchResult:
        return search_all_objects(self.store, query, ctx, limit)
