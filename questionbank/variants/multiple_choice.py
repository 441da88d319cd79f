"""Single and multiple choice questions: an ordered list of options."""
from typing import List, Optional

from pydantic import Field

from questionbank.models.orm import (
    MultipleChoice, MultipleChoiceGradingPolicy, Option, QuestionType,
    StudentAnswerMultipleChoice,
)
from questionbank.services.post_plan import EMPTY_PLAN
from questionbank.services.projection import Nested
from questionbank.variants.common import DocumentData, enum_value, parse_data

TYPE = QuestionType.MULTIPLE_CHOICE
RELATION = "multiple_choice"

OFFICIAL_FIELDS = {Option: ("is_correct",)}
GUARDED_RELATIONS = {}


def public():
    return {
        "multiple_choice": Nested({
            "grading_policy": True,
            "activate_student_comment": True,
            "student_comment_label": True,
            "activate_selection_limit": True,
            "selection_limit": True,
            "options": Nested({"id": True, "order": True, "text": True}, order_by=("order",)),
        })
    }


def official():
    return {"multiple_choice": Nested({"options": Nested({"is_correct": True})})}


def participant_answer():
    # selected options are references to the question's own options
    return {
        "multiple_choice": Nested({
            "comment": True,
            "options": Nested({"id": True}, order_by=("order",)),
        })
    }


def replicate(src):
    record = MultipleChoice(
        grading_policy=src["grading_policy"],
        activate_student_comment=src["activate_student_comment"],
        student_comment_label=src["student_comment_label"],
        activate_selection_limit=src["activate_selection_limit"],
        selection_limit=src["selection_limit"],
        options=[
            Option(order=o["order"], text=o["text"], is_correct=o["is_correct"])
            for o in src["options"]
        ],
    )
    return record, EMPTY_PLAN


def export(src):
    return {
        "gradingPolicy": enum_value(src["grading_policy"]),
        "activateStudentComment": src["activate_student_comment"],
        "studentCommentLabel": src["student_comment_label"],
        "selectionLimit": (src["selection_limit"] or 0) if src["activate_selection_limit"] else 0,
        "options": [
            {"order": o["order"], "text": o["text"], "isCorrect": o["is_correct"]}
            for o in src["options"]
        ],
    }


class OptionData(DocumentData):
    order: Optional[int] = None
    text: Optional[str] = None
    is_correct: bool = False


class ChoiceData(DocumentData):
    grading_policy: MultipleChoiceGradingPolicy = MultipleChoiceGradingPolicy.ALL_OR_NOTHING
    activate_student_comment: bool = False
    student_comment_label: Optional[str] = None
    selection_limit: Optional[int] = Field(default=None, ge=0)
    options: List[OptionData] = []


def build(data):
    doc = parse_data(ChoiceData, data)
    limit = doc.selection_limit or 0
    record = MultipleChoice(
        grading_policy=doc.grading_policy,
        activate_student_comment=doc.activate_student_comment,
        student_comment_label=doc.student_comment_label,
        # a positive limit is what turns the limit on
        activate_selection_limit=limit > 0,
        selection_limit=limit,
        options=[
            Option(
                order=position if o.order is None else o.order,
                text=o.text,
                is_correct=o.is_correct,
            )
            for position, o in enumerate(doc.options)
        ],
    )
    return record, EMPTY_PLAN


def seed(src, question_id):
    return StudentAnswerMultipleChoice(), EMPTY_PLAN
