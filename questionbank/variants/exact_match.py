"""Exact-match questions: ordered fields, each checked against a pattern."""
from typing import List, Optional

from questionbank.models.orm import (
    ExactMatch, ExactMatchField, QuestionType, StudentAnswerExactMatch,
    StudentAnswerExactMatchField,
)
from questionbank.services.post_plan import EMPTY_PLAN
from questionbank.services.projection import Nested
from questionbank.variants.common import DocumentData, parse_data

TYPE = QuestionType.EXACT_MATCH
RELATION = "exact_match"

OFFICIAL_FIELDS = {ExactMatchField: ("match_regex",)}
GUARDED_RELATIONS = {}


def _public_field():
    return {"id": True, "order": True, "statement": True}


def public():
    return {
        "exact_match": Nested({
            "fields": Nested(_public_field(), order_by=("order",)),
        })
    }


def official():
    return {"exact_match": Nested({"fields": Nested({"match_regex": True})})}


def participant_answer():
    return {
        "exact_match": Nested({
            "fields": Nested(
                {"field_id": True, "value": True, "field": Nested(_public_field())},
                order_by=("field.order",),
            ),
        })
    }


def replicate(src):
    record = ExactMatch(fields=[
        ExactMatchField(order=f["order"], statement=f["statement"], match_regex=f["match_regex"])
        for f in src["fields"]
    ])
    return record, EMPTY_PLAN


def export(src):
    return {
        "fields": [
            {"order": f["order"], "statement": f["statement"], "matchRegex": f["match_regex"]}
            for f in src["fields"]
        ]
    }


class FieldData(DocumentData):
    order: Optional[int] = None
    statement: Optional[str] = None
    match_regex: Optional[str] = None


class ExactMatchData(DocumentData):
    fields: List[FieldData] = []


def build(data):
    doc = parse_data(ExactMatchData, data)
    record = ExactMatch(fields=[
        ExactMatchField(
            order=position if f.order is None else f.order,
            statement=f.statement,
            match_regex=f.match_regex,
        )
        for position, f in enumerate(doc.fields)
    ])
    return record, EMPTY_PLAN


def seed(src, question_id):
    record = StudentAnswerExactMatch(fields=[
        StudentAnswerExactMatchField(field_id=f["id"], value="") for f in src["fields"]
    ])
    return record, EMPTY_PLAN
