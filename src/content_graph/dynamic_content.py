"""Dynamic Content Rule Resolver

Computes the membership of a set from a ``dynamic_content`` JSON blob
instead of an explicit id list::

    {
      "dynamic_content_types": ["movies"],
      "dynamic_content_rules": [
        [
          {"object_types": ["Movie"], "uid": null, "relationship_name": null},
          {"object_types": ["Credit"], "uid": null, "relationship_name": "credits"},
          {"object_types": ["Person"], "uid": "person_1", "relationship_name": "people"}
        ]
      ]
    }

Each inner list is a rule group. A group starts from every media object of
the requested types and narrows it with each rule in turn; the results of
all groups are unioned in first-seen order.
"""

import json
import logging
from enum import Enum
from functools import reduce
from typing import Any, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import UnknownObjectKindError
from .fields import as_id_list
from .models import ObjectKind, Record
from .store import RecordStore

logger = logging.getLogger(__name__)

DYNAMIC_CONTENT_FIELDS = ("dynamic_content", "Dynamic Content")


class RelationshipRule(BaseModel):
    object_types: List[str] = Field(default_factory=list)
    targets: List[str] = Field(default_factory=list, alias="uid")
    relationship_name: Optional[str] = None

    @field_validator("object_types", mode="before")
    @classmethod
    def _listify_types(cls, value: Any) -> List[str]:
        return as_id_list(value)

    @field_validator("targets", mode="before")
    @classmethod
    def _listify_targets(cls, value: Any) -> List[str]:
        return as_id_list(value)


class DynamicContent(BaseModel):
    content_types: List[str] = Field(alias="dynamic_content_types")
    rule_groups: List[List[RelationshipRule]] = Field(alias="dynamic_content_rules")


class ChainedRelationship(str, Enum):
    """Relationship names that pass through the Credit join entity."""

    CREDITS = "credits"
    PEOPLE = "people"

    @property
    def required_type(self) -> str:
        return "Credit" if self is ChainedRelationship.CREDITS else "Person"


def _chained(rule: RelationshipRule) -> Optional[ChainedRelationship]:
    try:
        chained = ChainedRelationship(rule.relationship_name)
    except ValueError:
        return None
    return chained if chained.required_type in rule.object_types else None


def _type_matches(typename: Optional[str], object_types: List[str]) -> bool:
    if typename is None:
        return False
    for wanted in object_types:
        if wanted == typename:
            return True
        try:
            if ObjectKind.parse(wanted).value == typename:
                return True
        except UnknownObjectKindError:
            continue
    return False


def _matches_rule(store: RecordStore, candidate: Record, rule: RelationshipRule) -> bool:
    chained = _chained(rule)
    targets = set(rule.targets)

    if chained is ChainedRelationship.CREDITS:
        credit_ids = candidate.ids("credits")
        if not credit_ids:
            return False
        return not targets or any(cid in targets for cid in credit_ids)

    if chained is ChainedRelationship.PEOPLE:
        for credit_id in candidate.ids("credits"):
            credit = store.get("credits", credit_id)
            if credit is None:
                continue
            if not targets or any(pid in targets for pid in credit.ids("person")):
                return True
        return False

    related_ids = candidate.ids(rule.relationship_name)
    if not related_ids:
        return False
    if targets:
        return any(rid in targets for rid in related_ids)
    return any(
        _type_matches(store.typename_of(rid), rule.object_types) for rid in related_ids
    )


def _apply_rule(
    store: RecordStore, candidates: List[Record], rule: RelationshipRule
) -> List[Record]:
    # a rule without a relationship is the base type filter, already applied
    if not rule.relationship_name:
        return candidates
    return [c for c in candidates if _matches_rule(store, c, rule)]


def find_objects_matching_rules(
    store: RecordStore, rules: List[RelationshipRule], content_types: List[str]
) -> List[str]:
    """Ids of media objects of ``content_types`` satisfying every rule."""
    kinds = set()
    for content_type in content_types:
        try:
            kinds.add(ObjectKind.parse(content_type))
        except UnknownObjectKindError:
            logger.warning("Ignoring unknown dynamic content type %r", content_type)

    initial = [r for r in store.media_objects if any(ObjectKind.matches(r, k) for k in kinds)]
    matched = reduce(lambda candidates, rule: _apply_rule(store, candidates, rule), rules, initial)
    return [r.id for r in matched]


def parse_dynamic_content(raw: Any) -> Optional[DynamicContent]:
    """Decode a dynamic content blob (JSON text or an already-decoded object).

    Returns None, with a warning, for anything malformed.
    """
    try:
        data = json.loads(raw) if isinstance(raw, str) else raw
        return DynamicContent.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning("Ignoring malformed dynamic content: %s", e)
        return None


def generate_dynamic_content(store: RecordStore, set_record: Record) -> List[str]:
    """Membership ids of a rule-driven set, deduplicated in first-seen order."""
    raw = next(
        (set_record.get(name) for name in DYNAMIC_CONTENT_FIELDS if set_record.get(name)),
        None,
    )
    if raw is None:
        return []

    dynamic_content = parse_dynamic_content(raw)
    if dynamic_content is None:
        return []

    members = {}
    for group in dynamic_content.rule_groups:
        for object_id in find_objects_matching_rules(store, group, dynamic_content.content_types):
            members.setdefault(object_id, None)
    logger.debug("Dynamic set %s resolved %d members", set_record.id, len(members))
    return list(members)
