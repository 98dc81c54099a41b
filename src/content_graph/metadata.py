"""Metadata Parsers

Record -> resolved-object conversion for the leaf entity kinds (images,
genres, themes, tags, ratings, people, roles, call-to-actions and
availability). Every parser accepts ``None`` and returns ``None`` for it so
dangling references can be passed straight through.
"""

from typing import Optional

from .fields import image_url
from .localization import localize
from .models import (
    Availability,
    CallToAction,
    Genre,
    Person,
    Rating,
    Record,
    Role,
    SkylarkImage,
    SkylarkTag,
    Theme,
)
from .store import RecordStore


def parse_image(record: Optional[Record]) -> Optional[SkylarkImage]:
    if record is None:
        return None
    return SkylarkImage(
        uid=record.id,
        external_id=record.external_id,
        title=record.string("title") or record.string("unique-title"),
        type=record.single_string("type") or "IMAGE",
        url=image_url(record.data),
        external_url=record.string("external_url") or record.string("external_url_old"),
    )


def parse_genre(
    store: RecordStore, record: Optional[Record], language_code: Optional[str] = None
) -> Optional[Genre]:
    if record is None:
        return None
    record = localize(store, record, "genres", language_code)
    return Genre(
        uid=record.id,
        external_id=record.external_id,
        name=record.string("name"),
        slug=record.string("slug"),
    )


def parse_theme(
    store: RecordStore, record: Optional[Record], language_code: Optional[str] = None
) -> Optional[Theme]:
    if record is None:
        return None
    record = localize(store, record, "themes", language_code)
    return Theme(uid=record.id, external_id=record.external_id, name=record.string("name"))


def parse_tag(record: Optional[Record]) -> Optional[SkylarkTag]:
    if record is None:
        return None
    return SkylarkTag(
        uid=record.id,
        external_id=record.external_id,
        name=record.string("name"),
        type=record.string("type"),
    )


def parse_rating(record: Optional[Record]) -> Optional[Rating]:
    if record is None:
        return None
    return Rating(uid=record.id, external_id=record.external_id, value=record.string("value"))


def person_fields(record: Record) -> dict:
    """Scalar Person fields of an (already localized) people record."""
    return dict(
        uid=record.id,
        external_id=record.external_id,
        slug=record.string("slug"),
        name=record.string("name"),
        abbreviation=record.string("abbreviation"),
        alias=record.string("alias"),
        bio_long=record.string("bio_long"),
        bio_medium=record.string("bio_medium"),
        bio_short=record.string("bio_short"),
        genre=record.string("genre"),
        date_of_birth=record.string("date_of_birth"),
        name_sort=record.string("name_sort"),
        place_of_birth=record.string("place_of_birth"),
    )


def parse_person(
    store: RecordStore, record: Optional[Record], language_code: Optional[str] = None
) -> Optional[Person]:
    if record is None:
        return None
    record = localize(store, record, "people", language_code)
    return Person(**person_fields(record))


def parse_role(
    store: RecordStore, record: Optional[Record], language_code: Optional[str] = None
) -> Optional[Role]:
    if record is None:
        return None
    record = localize(store, record, "roles", language_code)
    return Role(
        uid=record.id,
        external_id=record.external_id,
        title=record.string("title"),
        title_sort=record.string("title_sort"),
        internal_title=record.string("internal_title"),
    )


def parse_call_to_action(
    store: RecordStore, record: Optional[Record], language_code: Optional[str] = None
) -> Optional[CallToAction]:
    if record is None:
        return None
    record = localize(store, record, "call_to_actions", language_code)
    return CallToAction(
        uid=record.id,
        external_id=record.external_id,
        internal_title=record.string("internal_title"),
        type=record.string("type"),
        text=record.string("text"),
        text_short=record.string("text_short"),
        description=record.string("description"),
        description_short=record.string("description_short"),
        url=record.string("url"),
        url_path=record.string("url_path"),
    )


def parse_availability(record: Optional[Record]) -> Optional[Availability]:
    if record is None:
        return None
    return Availability(
        uid=record.id,
        external_id=record.external_id,
        title=record.string("title"),
        slug=record.string("slug"),
        end=record.string("end"),
    )
