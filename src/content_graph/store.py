"""Record Store Module

Read-only, explicitly constructed container for the content snapshot. The
store is built once at process start and passed by handle into every
component; nothing in the engine writes to it.
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .exceptions import UnknownObjectKindError
from .models import ObjectKind, Record

logger = logging.getLogger(__name__)

COLLECTIONS = (
    "media_objects",
    "people",
    "credits",
    "roles",
    "genres",
    "themes",
    "tags",
    "ratings",
    "images",
    "sets",
    "sets_metadata",
    "availability",
    "audience_segments",
    "languages",
    "call_to_actions",
    "articles",
)

DIMENSION_AXES = ("customer_types", "device_types", "regions")

TRANSLATION_TABLES = (
    "media_objects",
    "articles",
    "genres",
    "themes",
    "people",
    "roles",
    "call_to_actions",
)

# Typename reported for records of the non-media collections.
COLLECTION_TYPENAMES = {
    "people": "Person",
    "credits": "Credit",
    "roles": "Role",
    "genres": "Genre",
    "themes": "Theme",
    "tags": "SkylarkTag",
    "ratings": "Rating",
    "images": "SkylarkImage",
    "sets": "SkylarkSet",
    "call_to_actions": "CallToAction",
    "articles": "Article",
}


def _index_by_id(records: Tuple[Record, ...]) -> Dict[str, Record]:
    # first occurrence wins, same as a front-to-back scan
    index: Dict[str, Record] = {}
    for record in records:
        index.setdefault(record.id, record)
    return index


def _check_names(given: Iterable[str], allowed: Tuple[str, ...], label: str) -> None:
    unknown = sorted(set(given) - set(allowed))
    if unknown:
        raise ValueError(f"Unknown {label}: {', '.join(unknown)}")


class RecordStore:
    """Immutable set of named record collections with id lookups."""

    def __init__(
        self,
        collections: Optional[Mapping[str, Iterable[Record]]] = None,
        dimensions: Optional[Mapping[str, Iterable[Record]]] = None,
        translations: Optional[Mapping[str, Iterable[Record]]] = None,
    ):
        collections = collections or {}
        dimensions = dimensions or {}
        translations = translations or {}
        _check_names(collections, COLLECTIONS, "collection")
        _check_names(dimensions, DIMENSION_AXES, "dimension axis")
        _check_names(translations, TRANSLATION_TABLES, "translation table")

        self._collections: Dict[str, Tuple[Record, ...]] = {
            name: tuple(collections.get(name, ())) for name in COLLECTIONS
        }
        self._dimensions: Dict[str, Tuple[Record, ...]] = {
            axis: tuple(dimensions.get(axis, ())) for axis in DIMENSION_AXES
        }
        self._translations: Dict[str, Tuple[Record, ...]] = {
            name: tuple(translations.get(name, ())) for name in TRANSLATION_TABLES
        }
        self._indexes = {
            name: _index_by_id(records) for name, records in self._collections.items()
        }
        self._dimension_indexes = {
            axis: _index_by_id(records) for axis, records in self._dimensions.items()
        }

    def __repr__(self) -> str:
        sizes = ", ".join(
            f"{name}={len(records)}"
            for name, records in self._collections.items()
            if records
        )
        return f"RecordStore({sizes})"

    # -- raw access --------------------------------------------------------

    def collection(self, name: str) -> Tuple[Record, ...]:
        return self._collections[name]

    def dimension(self, axis: str) -> Tuple[Record, ...]:
        return self._dimensions[axis]

    def translations(self, table: str) -> Tuple[Record, ...]:
        return self._translations[table]

    @property
    def media_objects(self) -> Tuple[Record, ...]:
        return self._collections["media_objects"]

    def get(self, collection: str, record_id: Optional[str]) -> Optional[Record]:
        """Record with the given id in ``collection``, or None."""
        if not record_id:
            return None
        return self._indexes[collection].get(record_id)

    def get_dimension(self, axis: str, record_id: str) -> Optional[Record]:
        return self._dimension_indexes[axis].get(record_id)

    # -- lookups -----------------------------------------------------------

    def find_media_object(
        self, uid: Optional[str] = None, external_id: Optional[str] = None
    ) -> Optional[Record]:
        """Media object by uid (id or Airtable ID) or by external id."""
        if uid:
            found = self.get("media_objects", uid)
            if found is not None:
                return found
            return next(
                (r for r in self.media_objects if r.get("Airtable ID") == uid), None
            )
        if external_id:
            return next(
                (
                    r
                    for r in self.media_objects
                    if r.id == external_id
                    or r.get("external_id") == external_id
                    or r.get("Airtable ID") == external_id
                ),
                None,
            )
        return None

    def find_by_uid_or_external_id(
        self,
        collection: str,
        uid: Optional[str] = None,
        external_id: Optional[str] = None,
    ) -> Optional[Record]:
        if uid:
            return self.get(collection, uid)
        if external_id:
            return next(
                (
                    r
                    for r in self._collections[collection]
                    if r.id == external_id or r.get("external_id") == external_id
                ),
                None,
            )
        return None

    def find_set(self, set_id: Optional[str]) -> Optional[Record]:
        """Set by id, external id or slug.

        The dedicated sets collection is searched first, then media objects
        whose discriminator marks them as sets.
        """
        if not set_id:
            return None

        def _matches(record: Record) -> bool:
            return (
                record.id == set_id
                or record.get("external_id") == set_id
                or record.get("slug") == set_id
            )

        found = next((s for s in self._collections["sets"] if _matches(s)), None)
        if found is None:
            found = next(
                (
                    r
                    for r in self.media_objects
                    if ObjectKind.matches(r, ObjectKind.SKYLARK_SET) and _matches(r)
                ),
                None,
            )
        return found

    def default_availability(self) -> Optional[Record]:
        return next(
            (a for a in self._collections["availability"] if a.get("default") is True),
            None,
        )

    def typename_of(self, record_id: str) -> Optional[str]:
        """Typename of whatever record carries ``record_id``, or None."""
        media = self.get("media_objects", record_id)
        if media is not None:
            try:
                return ObjectKind.of(media).value
            except UnknownObjectKindError:
                logger.debug("Record %s has no known object kind", record_id)
                return None
        for collection, typename in COLLECTION_TYPENAMES.items():
            if self.get(collection, record_id) is not None:
                return typename
        return None

    def objects_of_kind(self, kind: ObjectKind) -> List[Record]:
        return [r for r in self.media_objects if ObjectKind.matches(r, kind)]
