"""Embedded web snippets: markup, style and script fragments."""
from typing import Optional

from questionbank.models.orm import QuestionType, StudentAnswerWeb, Web
from questionbank.services.post_plan import EMPTY_PLAN
from questionbank.services.projection import Nested
from questionbank.variants.common import DocumentData, parse_data

TYPE = QuestionType.WEB
RELATION = "web"

PARTS = ("html", "css", "js")

OFFICIAL_FIELDS = {Web: tuple(f"solution_{part}" for part in PARTS)}
GUARDED_RELATIONS = {}


def public():
    return {"web": Nested({f"template_{part}": True for part in PARTS})}


def official():
    return {"web": Nested({f"solution_{part}": True for part in PARTS})}


def participant_answer():
    return {"web": Nested({part: True for part in PARTS})}


def replicate(src):
    values = {}
    for part in PARTS:
        values[f"template_{part}"] = src[f"template_{part}"]
        values[f"solution_{part}"] = src[f"solution_{part}"]
    return Web(**values), EMPTY_PLAN


def export(src):
    data = {}
    for prefix in ("template", "solution"):
        for part in PARTS:
            data[f"{prefix}{part.capitalize()}"] = src[f"{prefix}_{part}"]
    return data


class WebData(DocumentData):
    template_html: Optional[str] = None
    template_css: Optional[str] = None
    template_js: Optional[str] = None
    solution_html: Optional[str] = None
    solution_css: Optional[str] = None
    solution_js: Optional[str] = None


def build(data):
    doc = parse_data(WebData, data)
    return Web(**doc.model_dump()), EMPTY_PLAN


def seed(src, question_id):
    return StudentAnswerWeb(**{part: src[f"template_{part}"] for part in PARTS}), EMPTY_PLAN
