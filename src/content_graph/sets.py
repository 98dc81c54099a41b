"""Set Resolution Module

Curated sets (rails, collections, pages) and their membership.

Membership is resolved in three tiers, first match wins:
  1. an explicit ``content`` id list
  2. a ``sets`` list: the concatenation of each referenced set's membership
  3. ``dynamic_content`` rules (see dynamic_content.py)

A membership id may point at a media object typed ``SkylarkSet``. Such a
record is only a reference: its ``skylarkset_external_id`` names the real
set, which is resolved and embedded in its place.
"""

import logging
from typing import List, Optional

from . import config
from .dynamic_content import DYNAMIC_CONTENT_FIELDS, generate_dynamic_content
from .metadata import parse_call_to_action, parse_image
from .models import (
    Connection,
    ObjectKind,
    Record,
    RequestContext,
    ResolvedObject,
    SetContent,
    SkylarkSet,
)
from .relationships import within_budget
from .store import RecordStore
from .transformers import has_access, try_parse_media_object

logger = logging.getLogger(__name__)


def get_set_content(store: RecordStore, set_record: Record, depth: int = 0) -> List[str]:
    """Ordered membership ids of a set.

    Referenced sets are followed one hop per level; nothing is returned once
    ``depth`` reaches MAX_DEPTH, which ends cyclic set references.
    """
    if depth >= config.MAX_DEPTH:
        logger.debug("Set %s not expanded at depth %d", set_record.id, depth)
        return []

    if isinstance(set_record.get("content"), list):
        return set_record.strings("content") or []

    if isinstance(set_record.get("sets"), list):
        content: List[str] = []
        for set_id in set_record.strings("sets") or []:
            referenced = store.find_set(set_id)
            if referenced is None:
                logger.debug("Set %s references missing set %s", set_record.id, set_id)
                continue
            content.extend(get_set_content(store, referenced, depth + 1))
        return content

    if is_dynamic(set_record):
        return generate_dynamic_content(store, set_record)

    return []


def is_dynamic(set_record: Record) -> bool:
    return any(set_record.get(name) for name in DYNAMIC_CONTENT_FIELDS)


def resolve_set_reference(store: RecordStore, reference_id: str) -> Optional[Record]:
    """Real set behind a SkylarkSet-typed media object, matched by external id."""
    reference = store.get("media_objects", reference_id)
    if reference is None:
        return None
    external_id = reference.string("skylarkset_external_id")
    if not external_id:
        return None
    return next(
        (s for s in store.collection("sets") if s.get("external_id") == external_id),
        None,
    )


def resolve_set_with_fallback(
    store: RecordStore, set_id: str, use_reference: bool = True
) -> Optional[Record]:
    """Set for ``set_id``; with ``use_reference`` set references are followed."""
    found = store.find_set(set_id)
    if use_reference and (found is None or found.string("skylarkset_external_id")):
        referenced = resolve_set_reference(store, found.id if found else set_id)
        found = referenced or found
    return found


def _language_ids(store: RecordStore, code: str) -> List[str]:
    wanted = code.lower()
    return [
        lang.id
        for lang in store.collection("languages")
        if (lang.string("code") or "").lower() == wanted
    ]


def find_set_metadata(
    store: RecordStore, set_id: str, language_code: Optional[str] = None
) -> Optional[Record]:
    """Metadata row for the set in the requested locale, else in en-GB."""
    codes = [language_code, config.SET_METADATA_LANGUAGE] if language_code else [
        config.SET_METADATA_LANGUAGE
    ]
    for code in codes:
        language_ids = set(_language_ids(store, code))
        if not language_ids:
            continue
        for metadata in store.collection("sets_metadata"):
            if set_id in metadata.ids("set") and language_ids & set(metadata.ids("language")):
                return metadata
    return None


def resolve_content_object(
    store: RecordStore, content_id: str, ctx: RequestContext, depth: int
) -> Optional[ResolvedObject]:
    """Resolve one membership id, following set references."""
    record = store.get("media_objects", content_id)
    if record is None:
        logger.debug("Set member %s not found", content_id)
        return None

    if ObjectKind.matches(record, ObjectKind.SKYLARK_SET):
        referenced = resolve_set_reference(store, content_id)
        if referenced is None:
            logger.debug("Set reference %s points at no set", content_id)
            return None
        return parse_set(store, referenced, ctx, depth)

    return try_parse_media_object(store, record, ctx, depth)


def parse_set(
    store: RecordStore,
    set_record: Optional[Record],
    ctx: Optional[RequestContext] = None,
    depth: int = 0,
) -> Optional[SkylarkSet]:
    """Resolve a set with its locale metadata, content, images and CTAs.

    Members are resolved at ``depth + 1``; ``content`` is None when that
    would reach the depth budget.
    """
    if set_record is None or depth >= config.MAX_DEPTH:
        return None
    ctx = ctx or RequestContext()

    metadata = find_set_metadata(store, set_record.id, ctx.language_code)
    merged = set_record.with_fields({**set_record.data, **metadata.data}) if metadata else set_record

    if not has_access(store, merged, ctx):
        logger.debug("Set %s filtered out by availability", set_record.id)
        return None

    set_type = merged.string("set_type") or merged.string("type") or "RAIL"

    content = None
    if within_budget(depth):
        dynamic = is_dynamic(set_record)
        members = []
        for index, content_id in enumerate(get_set_content(store, set_record)):
            obj = resolve_content_object(store, content_id, ctx, depth + 1)
            if obj is None:
                continue
            members.append(SetContent(dynamic=dynamic, object=obj, position=index + 1))
        content = Connection.of(members)

    images = [parse_image(store.get("images", i)) for i in merged.ids("images")]
    ctas = [
        parse_call_to_action(store, store.get("call_to_actions", c), ctx.language_code)
        for c in merged.ids("call_to_actions")
    ]

    return SkylarkSet(
        uid=set_record.id,
        external_id=merged.external_id,
        title=merged.string("title") or merged.string("internal_title") or merged.string("name"),
        title_short=merged.string("title_short"),
        type=set_type.upper(),
        slug=merged.string("slug"),
        set_type_slug=merged.string("set_type_slug"),
        internal_title=merged.string("internal_title"),
        images=Connection.of(i for i in images if i is not None),
        content=content,
        call_to_actions=Connection.of(c for c in ctas if c is not None),
    )
