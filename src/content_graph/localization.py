"""Localization Merger

Overlays translated field values onto a base record when a non-default
locale is requested.
"""

import logging
from typing import Any, Dict, Iterable, Optional

from . import config
from .models import Record
from .store import RecordStore

logger = logging.getLogger(__name__)

TRANSLATABLE_FIELDS = (
    "title",
    "title_short",
    "synopsis",
    "synopsis_short",
    "text",
    "text_short",
    "description",
    "description_short",
    "name",
    "bio_long",
    "bio_medium",
    "bio_short",
)


def is_default_language(language_code: Optional[str]) -> bool:
    return not language_code or language_code.lower() == config.DEFAULT_LANGUAGE


def find_translation(
    record_id: str, language_code: str, translations: Iterable[Record]
) -> Optional[Record]:
    """First translation row linked to ``record_id`` for ``language_code``."""
    wanted = language_code.lower()
    for translation in translations:
        object_ids = translation.strings("object") or []
        codes = translation.strings("language_code") or []
        if record_id in object_ids and any(c.lower() == wanted for c in codes):
            return translation
    return None


def merge_translated_fields(
    fields: Dict[str, Any], translation: Optional[Record]
) -> Dict[str, Any]:
    """Copy of ``fields`` with truthy translated values of the allow-list applied."""
    if translation is None:
        return fields

    merged = dict(fields)
    for name in TRANSLATABLE_FIELDS:
        value = translation.get(name)
        if value:
            merged[name] = value
    return merged


def localize(
    store: RecordStore, record: Record, table: str, language_code: Optional[str]
) -> Record:
    """Record with translations for ``language_code`` merged in.

    Returns ``record`` itself for the default locale or when no translation
    row exists.
    """
    if is_default_language(language_code):
        return record

    translation = find_translation(record.id, language_code, store.translations(table))
    if translation is None:
        logger.debug("No %s translation for %s in %s", language_code, record.id, table)
        return record
    return record.with_fields(merge_translated_fields(record.data, translation))
