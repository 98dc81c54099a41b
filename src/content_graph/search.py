"""Search Module

Punctuation-insensitive substring search over media objects, articles and
people, with highlight markup on the returned fields.

Matching runs on normalized text (lower-cased, hyphens/underscores as
spaces, other punctuation removed, whitespace collapsed). Highlighting runs
on the original field values and wraps the query, or failing that its
words, in ``<span class="search-highlight">``.
"""

import logging
import re
from typing import Iterable, List, Optional

from . import config
from .exceptions import UnknownObjectKindError
from .localization import localize
from .metadata import parse_image, person_fields
from .models import (
    Connection,
    ObjectKind,
    PersonWithImages,
    Record,
    RequestContext,
    ResolvedObject,
    SearchResult,
)
from .store import RecordStore
from .transformers import parse_article, parse_media_object

logger = logging.getLogger(__name__)

SEPARATOR_RE = re.compile(r"[-_]")
PUNCTUATION_RE = re.compile(r"[^\w\s]")
WHITESPACE_RE = re.compile(r"\s+")
WORD_RE = re.compile(r"\w+")

MEDIA_SEARCH_FIELDS = ("title", "title_short", "synopsis", "synopsis_short")
ARTICLE_SEARCH_FIELDS = ("title", "description", "body")
PERSON_SEARCH_FIELDS = ("name", "bio_long", "bio_medium", "bio_short")

# Seasons are reached through their brand; set references are not content.
EXCLUDED_KINDS = (ObjectKind.SEASON, ObjectKind.SKYLARK_SET)


def normalize_search_text(text: str) -> str:
    text = SEPARATOR_RE.sub(" ", text.lower())
    text = PUNCTUATION_RE.sub("", text)
    return WHITESPACE_RE.sub(" ", text).strip()


def flexible_text_match(text: Optional[str], query: str) -> bool:
    if not text:
        return False
    return normalize_search_text(query) in normalize_search_text(text)


def highlight_search_term(text: Optional[str], query: str) -> Optional[str]:
    """Wrap case-insensitive occurrences of ``query`` in markup.

    The query's words are highlighted only when the full query does not
    occur literally in ``text``.
    """
    if not text or not query or not query.strip():
        return text

    query = query.strip()
    if re.search(re.escape(query), text, re.IGNORECASE):
        terms = {query}
    else:
        terms = set(WORD_RE.findall(query))
    if not terms:
        return text
    pattern = "|".join(re.escape(t) for t in sorted(terms, key=len, reverse=True))
    return re.sub(
        f"({pattern})",
        lambda m: f'<span class="{config.SEARCH_HIGHLIGHT_CLASS}">{m.group(0)}</span>',
        text,
        flags=re.IGNORECASE,
    )


def _matches(record: Record, fields: Iterable[str], query: str) -> bool:
    return any(flexible_text_match(record.string(name), query) for name in fields)


def _highlighted(obj: ResolvedObject, fields: Iterable[str], query: str) -> ResolvedObject:
    return obj.model_copy(
        update={name: highlight_search_term(getattr(obj, name), query) for name in fields}
    )


def _searchable_media(record: Record) -> bool:
    try:
        kind = ObjectKind.of(record)
    except UnknownObjectKindError as e:
        logger.warning("Excluding record from search: %s", e)
        return False
    return kind not in EXCLUDED_KINDS


def search_media_objects(
    store: RecordStore, query: str, ctx: RequestContext
) -> List[ResolvedObject]:
    results = []
    for record in store.media_objects:
        localized = localize(store, record, "media_objects", ctx.language_code)
        if not _matches(localized, MEDIA_SEARCH_FIELDS, query):
            continue
        if not _searchable_media(record):
            continue
        # search results are root objects
        parsed = parse_media_object(store, record, ctx, 0)
        if parsed is not None:
            results.append(_highlighted(parsed, MEDIA_SEARCH_FIELDS, query))
    return results


def search_articles(store: RecordStore, query: str, ctx: RequestContext) -> List[ResolvedObject]:
    results = []
    for record in store.collection("articles"):
        localized = localize(store, record, "articles", ctx.language_code)
        if not _matches(localized, ARTICLE_SEARCH_FIELDS, query):
            continue
        parsed = parse_article(store, record, ctx, 0)
        if parsed is not None:
            results.append(_highlighted(parsed, ARTICLE_SEARCH_FIELDS, query))
    return results


def search_people(store: RecordStore, query: str, ctx: RequestContext) -> List[ResolvedObject]:
    results = []
    for record in store.collection("people"):
        localized = localize(store, record, "people", ctx.language_code)
        if not _matches(localized, PERSON_SEARCH_FIELDS, query):
            continue
        images = [parse_image(store.get("images", i)) for i in localized.ids("images")]
        person = PersonWithImages(
            **person_fields(localized),
            images=Connection.of(i for i in images if i is not None),
        )
        results.append(_highlighted(person, PERSON_SEARCH_FIELDS, query))
    return results


def search_all_objects(
    store: RecordStore,
    query: str,
    ctx: Optional[RequestContext] = None,
    limit: int = config.SEARCH_RESULT_LIMIT,
) -> SearchResult:
    """Search media objects, then articles, then people.

    ``total_count`` counts every hit; ``objects`` holds at most ``limit``.
    """
    ctx = ctx or RequestContext()
    if not query or not normalize_search_text(query):
        return SearchResult()

    hits: List[ResolvedObject] = []
    hits.extend(search_media_objects(store, query, ctx))
    hits.extend(search_articles(store, query, ctx))
    hits.extend(search_people(store, query, ctx))
    logger.debug("Search %r matched %d objects", query, len(hits))
    return SearchResult(total_count=len(hits), objects=hits[:limit])
