"""Data Models Module

Defines Pydantic models for every stage of a content query: the raw
snapshot record, the request context threaded through a resolution, and
the GraphQL-shaped objects returned to the caller.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, SerializeAsAny, field_validator

from .exceptions import UnknownObjectKindError
from .fields import (
    Number,
    as_id_list,
    as_number,
    as_single_string,
    as_string,
    as_string_array,
)


# ---------------------------------------------------------------------------
# Snapshot records
# ---------------------------------------------------------------------------


class Record(BaseModel):
    """One item from the content snapshot.

    Field values are stored exactly as exported; the accessor methods impose
    type expectations at read time and never raise.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    data: Dict[str, Any] = Field(default_factory=dict, alias="fields")

    def get(self, name: str) -> Any:
        return self.data.get(name)

    def string(self, name: str) -> Optional[str]:
        return as_string(self.data.get(name))

    def number(self, name: str) -> Optional[Number]:
        return as_number(self.data.get(name))

    def strings(self, name: str) -> Optional[List[str]]:
        return as_string_array(self.data.get(name))

    def single_string(self, name: str) -> Optional[str]:
        return as_single_string(self.data.get(name))

    def ids(self, name: str) -> List[str]:
        return as_id_list(self.data.get(name))

    @property
    def external_id(self) -> str:
        return self.string("external_id") or self.id

    @property
    def object_type(self) -> Any:
        return self.data.get("skylark_object_type")

    def with_fields(self, data: Dict[str, Any]) -> "Record":
        """Copy of this record carrying a different field bag."""
        return self.model_copy(update={"data": data})


class ObjectKind(str, Enum):
    """Closed set of object kinds a type discriminator can select."""

    MOVIE = "Movie"
    EPISODE = "Episode"
    SEASON = "Season"
    BRAND = "Brand"
    LIVE_STREAM = "LiveStream"
    ARTICLE = "Article"
    SKYLARK_SET = "SkylarkSet"

    @classmethod
    def parse(cls, value: Any, record_id: Optional[str] = None) -> "ObjectKind":
        """Map a discriminator string to its kind.

        Matching is case-insensitive and tolerates singular/plural forms.
        Raises UnknownObjectKindError for anything unmapped.
        """
        if isinstance(value, ObjectKind):
            return value
        if isinstance(value, str):
            kind = _KIND_ALIASES.get(value.strip().lower())
            if kind is not None:
                return kind
        raise UnknownObjectKindError(value, record_id)

    @classmethod
    def of(cls, record: Record) -> "ObjectKind":
        return cls.parse(record.object_type, record.id)

    @classmethod
    def matches(cls, record: Record, kind: "ObjectKind") -> bool:
        """True when the record's discriminator maps to ``kind``."""
        try:
            return cls.of(record) is kind
        except UnknownObjectKindError:
            return False


_KIND_ALIASES: Dict[str, ObjectKind] = {
    "movie": ObjectKind.MOVIE,
    "movies": ObjectKind.MOVIE,
    "episode": ObjectKind.EPISODE,
    "episodes": ObjectKind.EPISODE,
    "season": ObjectKind.SEASON,
    "seasons": ObjectKind.SEASON,
    "brand": ObjectKind.BRAND,
    "brands": ObjectKind.BRAND,
    "livestream": ObjectKind.LIVE_STREAM,
    "livestreams": ObjectKind.LIVE_STREAM,
    "live-stream": ObjectKind.LIVE_STREAM,
    "live-streams": ObjectKind.LIVE_STREAM,
    "live_stream": ObjectKind.LIVE_STREAM,
    "article": ObjectKind.ARTICLE,
    "articles": ObjectKind.ARTICLE,
    "skylarkset": ObjectKind.SKYLARK_SET,
    "skylarksets": ObjectKind.SKYLARK_SET,
    "set": ObjectKind.SKYLARK_SET,
    "sets": ObjectKind.SKYLARK_SET,
}


# ---------------------------------------------------------------------------
# Request context
# ---------------------------------------------------------------------------


def _clean_dimension_values(values: Any) -> List[str]:
    if not values:
        return []
    if isinstance(values, str):
        values = values.split(",")
    cleaned = [str(v).strip().lower() for v in values if v is not None]
    return [v for v in cleaned if v]


class Dimensions(BaseModel):
    """Requested entitlement dimensions, one list per axis.

    Values are trimmed and lower-cased; an empty axis means no restriction
    was requested on it.
    """

    model_config = ConfigDict(frozen=True)

    customer_types: List[str] = Field(default_factory=list)
    device_types: List[str] = Field(default_factory=list)
    regions: List[str] = Field(default_factory=list)

    @field_validator("customer_types", "device_types", "regions", mode="before")
    @classmethod
    def _normalize(cls, value: Any) -> List[str]:
        return _clean_dimension_values(value)

    @property
    def requested(self) -> bool:
        return bool(self.customer_types or self.device_types or self.regions)


class RequestContext(BaseModel):
    """Immutable per-request parameters threaded through every resolution."""

    model_config = ConfigDict(frozen=True)

    language_code: str = "en-gb"
    dimensions: Dimensions = Field(default_factory=Dimensions)
    time_travel_date: Optional[datetime] = None


# ---------------------------------------------------------------------------
# Resolved (GraphQL-shaped) objects
# ---------------------------------------------------------------------------


class GraphModel(BaseModel):
    """Base for every object returned to callers."""

    model_config = ConfigDict(populate_by_name=True)

    typename: str = Field(alias="__typename")

    def to_graphql(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class ResolvedObject(GraphModel):
    uid: str
    external_id: str


class Connection(BaseModel):
    """Envelope around a resolved relationship.

    A relationship field holds ``None`` when expansion was cut by the depth
    budget and a Connection (possibly empty) when it was attempted.
    """

    objects: List[SerializeAsAny[GraphModel]] = Field(default_factory=list)
    count: int = 0
    next_token: None = None

    @classmethod
    def of(cls, items) -> "Connection":
        items = list(items)
        return cls(objects=items, count=len(items))


class SkylarkImage(ResolvedObject):
    typename: Literal["SkylarkImage"] = Field("SkylarkImage", alias="__typename")
    title: Optional[str] = None
    type: str = "IMAGE"
    url: Optional[str] = None
    external_url: Optional[str] = None


class Genre(ResolvedObject):
    typename: Literal["Genre"] = Field("Genre", alias="__typename")
    name: Optional[str] = None
    slug: Optional[str] = None


class Theme(ResolvedObject):
    typename: Literal["Theme"] = Field("Theme", alias="__typename")
    name: Optional[str] = None


class SkylarkTag(ResolvedObject):
    typename: Literal["SkylarkTag"] = Field("SkylarkTag", alias="__typename")
    name: Optional[str] = None
    type: Optional[str] = None


class Rating(ResolvedObject):
    typename: Literal["Rating"] = Field("Rating", alias="__typename")
    value: Optional[str] = None


class Role(ResolvedObject):
    typename: Literal["Role"] = Field("Role", alias="__typename")
    title: Optional[str] = None
    title_sort: Optional[str] = None
    internal_title: Optional[str] = None


class Person(ResolvedObject):
    typename: Literal["Person"] = Field("Person", alias="__typename")
    slug: Optional[str] = None
    name: Optional[str] = None
    abbreviation: Optional[str] = None
    alias: Optional[str] = None
    bio_long: Optional[str] = None
    bio_medium: Optional[str] = None
    bio_short: Optional[str] = None
    genre: Optional[str] = None
    date_of_birth: Optional[str] = None
    name_sort: Optional[str] = None
    place_of_birth: Optional[str] = None


class PersonWithImages(Person):
    images: Connection = Field(default_factory=Connection)


class Credit(ResolvedObject):
    typename: Literal["Credit"] = Field("Credit", alias="__typename")
    character: Optional[str] = None
    people: Optional[Connection] = None
    roles: Optional[Connection] = None


class CreditDetail(Credit):
    """A credit seen from the person side, with the titles it belongs to."""

    movies: Connection = Field(default_factory=Connection)
    episodes: Connection = Field(default_factory=Connection)


class PersonDetail(PersonWithImages):
    credits: Connection = Field(default_factory=Connection)


class CallToAction(ResolvedObject):
    typename: Literal["CallToAction"] = Field("CallToAction", alias="__typename")
    internal_title: Optional[str] = None
    type: Optional[str] = None
    text: Optional[str] = None
    text_short: Optional[str] = None
    description: Optional[str] = None
    description_short: Optional[str] = None
    url: Optional[str] = None
    url_path: Optional[str] = None


class Availability(ResolvedObject):
    typename: Literal["Availability"] = Field("Availability", alias="__typename")
    title: Optional[str] = None
    slug: Optional[str] = None
    end: Optional[str] = None


class MediaObject(ResolvedObject):
    """Fields shared by Movie, Episode, Season, Brand and LiveStream."""

    slug: Optional[str] = None
    title: Optional[str] = None
    title_short: Optional[str] = None
    title_sort: Optional[str] = None
    synopsis: Optional[str] = None
    synopsis_short: Optional[str] = None
    release_date: Optional[str] = None
    images: Optional[Connection] = None
    genres: Optional[Connection] = None
    themes: Optional[Connection] = None
    tags: Optional[Connection] = None
    ratings: Optional[Connection] = None
    credits: Optional[Connection] = None
    availability: Connection = Field(default_factory=Connection)
    call_to_actions: Connection = Field(default_factory=Connection)


class Movie(MediaObject):
    typename: Literal["Movie"] = Field("Movie", alias="__typename")
    budget: Optional[Number] = None
    audience_rating: Optional[Number] = None


class Episode(MediaObject):
    typename: Literal["Episode"] = Field("Episode", alias="__typename")
    episode_number: Optional[Number] = None
    audience_rating: Optional[Number] = None


class Season(MediaObject):
    typename: Literal["Season"] = Field("Season", alias="__typename")
    season_number: Optional[Number] = None
    preferred_image_type: Optional[str] = None


class SeasonDetail(Season):
    episodes: Connection = Field(default_factory=Connection)


class Brand(MediaObject):
    typename: Literal["Brand"] = Field("Brand", alias="__typename")


class BrandDetail(Brand):
    seasons: Connection = Field(default_factory=Connection)


class LiveStream(MediaObject):
    typename: Literal["LiveStream"] = Field("LiveStream", alias="__typename")


class Article(ResolvedObject):
    typename: Literal["Article"] = Field("Article", alias="__typename")
    slug: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    body: Optional[str] = None
    type: Optional[str] = None
    publish_date: Optional[str] = None
    internal_title: Optional[str] = None
    images: Optional[Connection] = None
    tags: Optional[Connection] = None
    credits: Optional[Connection] = None
    availability: Connection = Field(default_factory=Connection)


class SetContent(GraphModel):
    typename: Literal["SetContent"] = Field("SetContent", alias="__typename")
    dynamic: bool = False
    object: SerializeAsAny[ResolvedObject]
    position: int


class SkylarkSet(ResolvedObject):
    typename: Literal["SkylarkSet"] = Field("SkylarkSet", alias="__typename")
    title: Optional[str] = None
    title_short: Optional[str] = None
    type: str = "RAIL"
    slug: Optional[str] = None
    set_type_slug: Optional[str] = None
    internal_title: Optional[str] = None
    images: Connection = Field(default_factory=Connection)
    content: Optional[Connection] = None
    call_to_actions: Connection = Field(default_factory=Connection)


# ---------------------------------------------------------------------------
# Entry point envelopes
# ---------------------------------------------------------------------------


class ListResult(BaseModel):
    """Single-page listing envelope (pagination is not implemented)."""

    model_config = ConfigDict(populate_by_name=True)

    objects: List[SerializeAsAny[GraphModel]] = Field(default_factory=list)
    count: int = 0
    has_next_page: bool = Field(False, alias="hasNextPage")

    @classmethod
    def of(cls, items) -> "ListResult":
        items = list(items)
        return cls(objects=items, count=len(items))

    def to_graphql(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class SearchResult(BaseModel):
    total_count: int = 0
    objects: List[SerializeAsAny[ResolvedObject]] = Field(default_factory=list)

    def to_graphql(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class MetadataListing(BaseModel):
    """A genre or tag together with the objects that carry it.

    Serialises the objects under a key named after the listed kind, e.g.
    ``movies`` for a genre listing of Movie objects.
    """

    typename: str
    uid: str
    name: Optional[str] = None
    object_kind: ObjectKind
    objects: Connection = Field(default_factory=Connection)

    def to_graphql(self) -> Dict[str, Any]:
        key = f"{self.object_kind.value[0].lower()}{self.object_kind.value[1:]}s"
        return {
            "__typename": self.typename,
            "uid": self.uid,
            "name": self.name,
            key: self.objects.model_dump(by_alias=True),
        }

