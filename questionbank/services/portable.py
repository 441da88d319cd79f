"""
Portable export and import of questions.

A portable document is the minimal JSON form of a question::

    {"type": "...", "title": "...", "content": "...", "data": {...}}

``data`` holds the variant's official fields only, with null and empty values
stripped. A bundle is ``{"questions": [document, ...]}``.
"""
import logging
import uuid
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from questionbank.core.config import settings
from questionbank.core.database import atomic
from questionbank.core.errors import MalformedDocument, UnresolvedReference
from questionbank.models.orm import (
    Group, Question, QuestionSource, QuestionStatus, QuestionType, QuestionUsageStatus,
)
from questionbank.services.hydrate import fetch_question
from questionbank.services.post_plan import execute
from questionbank.services.registry import describe, variant_record
from questionbank.services.views import get_view
from questionbank.variants.common import enum_value

logger = logging.getLogger(__name__)


class PortableDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: QuestionType
    title: Optional[str] = None
    content: Optional[str] = None
    data: Dict[str, Any]


# ---------- strip ----------

def strip(value):
    """Drop nulls, then empty lists and objects, recursively.

    Returns ``None`` when nothing is left. Other values, including ``False``,
    ``0`` and ``""``, are kept as they are.
    """
    if isinstance(value, (list, tuple)):
        kept = []
        for item in value:
            item = strip(item)
            if item is not None:
                kept.append(item)
        return kept or None
    if isinstance(value, dict):
        kept = {}
        for key, item in value.items():
            item = strip(item)
            if item is not None:
                kept[key] = item
        return kept or None
    return value


# ---------- export ----------

def serialize(graph: Dict[str, Any]) -> Dict[str, Any]:
    """Portable document of a question hydrated through ``bank_export``."""
    schema, record = variant_record(graph)
    payload = strip({
        "type": enum_value(graph["type"]),
        "title": graph["title"],
        "content": graph["content"],
        "data": schema.exporter(record),
    })
    document = {"type": payload["type"], "title": payload.get("title", "")}
    if payload.get("content"):
        document["content"] = payload["content"]
    document["data"] = payload.get("data") or {}
    return document


def _check_size(count: int) -> None:
    if count > settings.EXPORT_MAX_QUESTIONS:
        raise MalformedDocument(
            "questions", f"at most {settings.EXPORT_MAX_QUESTIONS} questions per request"
        )


def export_one(session: Session, question_id) -> Dict[str, Any]:
    return serialize(fetch_question(session, question_id, get_view("bank_export")))


def export_many(session: Session, question_ids) -> List[Dict[str, Any]]:
    ids = list(question_ids)
    _check_size(len(ids))
    spec = get_view("bank_export")
    documents = [serialize(fetch_question(session, question_id, spec)) for question_id in ids]
    logger.info(f"Exported {len(documents)} questions")
    return documents


def export_bundle(session: Session, question_ids) -> Dict[str, Any]:
    return {"questions": export_many(session, question_ids)}


# ---------- import ----------

def parse_document(raw: Any) -> PortableDocument:
    try:
        return PortableDocument.model_validate(raw)
    except ValidationError as exc:
        error = exc.errors()[0]
        field = ".".join(str(part) for part in error["loc"]) or "document"
        raise MalformedDocument(field, error["msg"]) from exc


def resolve_group(session: Session, group_ref) -> Group:
    """A group id, or the label of a group."""
    group = None
    try:
        group_id = group_ref if isinstance(group_ref, uuid.UUID) else uuid.UUID(str(group_ref))
    except ValueError:
        group_id = None
    if group_id is not None:
        group = session.get(Group, group_id)
    if group is None:
        group = session.scalar(select(Group).where(Group.label == str(group_ref)))
    if group is None:
        raise UnresolvedReference(f"Unknown group: {group_ref}")
    return group


def reconstruct(session: Session, raw: Any, group_id) -> Question:
    document = parse_document(raw)
    schema = describe(document.type)
    variant, plan = schema.importer(document.data)
    question = Question(
        group_id=group_id,
        type=document.type,
        title=document.title or "",
        content=document.content,
        status=QuestionStatus.ACTIVE,
        usage_status=QuestionUsageStatus.UNUSED,
        source=QuestionSource.BANK,
    )
    setattr(question, schema.relation, variant)
    session.add(question)
    session.flush()
    execute(session, plan, {"question_id": question.id})
    return question


def import_one(session: Session, document: Any, group_ref) -> Question:
    with atomic(session, "import"):
        group = resolve_group(session, group_ref)
        question = reconstruct(session, document, group.id)
    logger.info(f"Imported {question.type.value} question {question.id} into group {group.label}")
    return question


def import_bundle(session: Session, bundle: Any, group_ref) -> List[Question]:
    """Import every document of a bundle, all or nothing."""
    if not isinstance(bundle, dict) or not isinstance(bundle.get("questions"), list):
        raise MalformedDocument("questions", "expected a list of documents")
    _check_size(len(bundle["questions"]))
    questions = []
    with atomic(session, "import_bundle"):
        group = resolve_group(session, group_ref)
        for position, document in enumerate(bundle["questions"]):
            try:
                questions.append(reconstruct(session, document, group.id))
            except MalformedDocument as exc:
                raise MalformedDocument(f"questions.{position}.{exc.field}", exc.reason) from exc
    logger.info(f"Imported {len(questions)} questions into group {group.label}")
    return questions
