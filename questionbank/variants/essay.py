"""Free-text questions."""
from typing import Optional

from questionbank.models.orm import Essay, QuestionType, StudentAnswerEssay
from questionbank.services.post_plan import EMPTY_PLAN
from questionbank.services.projection import Nested
from questionbank.variants.common import DocumentData, parse_data

TYPE = QuestionType.ESSAY
RELATION = "essay"

OFFICIAL_FIELDS = {Essay: ("solution",)}
GUARDED_RELATIONS = {}


def public():
    return {"essay": Nested({"template": True})}


def official():
    return {"essay": Nested({"solution": True})}


def participant_answer():
    return {"essay": Nested({"content": True})}


def replicate(src):
    return Essay(solution=src["solution"], template=src["template"]), EMPTY_PLAN


def export(src):
    return {"solution": src["solution"], "template": src["template"]}


class EssayData(DocumentData):
    solution: Optional[str] = None
    template: Optional[str] = None


def build(data):
    doc = parse_data(EssayData, data)
    return Essay(solution=doc.solution, template=doc.template), EMPTY_PLAN


def seed(src, question_id):
    # participants start from the template
    return StudentAnswerEssay(content=src["template"]), EMPTY_PLAN
