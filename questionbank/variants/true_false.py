"""Boolean questions: a single official value."""
from typing import Optional

from questionbank.models.orm import QuestionType, StudentAnswerTrueFalse, TrueFalse
from questionbank.services.post_plan import EMPTY_PLAN
from questionbank.services.projection import Nested
from questionbank.variants.common import DocumentData, parse_data

TYPE = QuestionType.TRUE_FALSE
RELATION = "true_false"

OFFICIAL_FIELDS = {TrueFalse: ("is_true",)}
GUARDED_RELATIONS = {}


def public():
    return {"true_false": Nested({"question_id": True})}


def official():
    return {"true_false": Nested({"is_true": True})}


def participant_answer():
    return {"true_false": Nested({"is_true": True})}


def replicate(src):
    return TrueFalse(is_true=src["is_true"]), EMPTY_PLAN


def export(src):
    return {"isTrue": src["is_true"]}


class TrueFalseData(DocumentData):
    is_true: Optional[bool] = None


def build(data):
    doc = parse_data(TrueFalseData, data)
    # unset stays unset, as on a freshly authored question
    return TrueFalse(is_true=doc.is_true), EMPTY_PLAN


def seed(src, question_id):
    return StudentAnswerTrueFalse(is_true=None), EMPTY_PLAN
