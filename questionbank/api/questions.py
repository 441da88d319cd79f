import uuid
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from questionbank.core.auth import TokenData, require_editor
from questionbank.core.database import get_db
from questionbank.models.orm import QuestionSource
from questionbank.services.hydrate import fetch_group_questions, fetch_question
from questionbank.services.portable import export_bundle, export_one, import_bundle, import_one
from questionbank.services.replication import replicate, replicate_many
from questionbank.services.views import get_view

router = APIRouter()


class CopyRequest(BaseModel):
    provenance: QuestionSource = QuestionSource.COPY
    title_prefix: Optional[str] = None


class ReplicateRequest(BaseModel):
    question_ids: List[uuid.UUID] = Field(min_length=1)
    provenance: QuestionSource = QuestionSource.EVAL
    title_prefix: Optional[str] = None


class ExportRequest(BaseModel):
    question_ids: List[uuid.UUID] = Field(min_length=1)


@router.get("/groups/{group_id}/questions")
def list_questions(group_id: uuid.UUID, user: TokenData = Depends(require_editor), db: Session = Depends(get_db)):
    return fetch_group_questions(db, group_id, get_view("listing_summary"))


@router.get("/questions/{question_id}")
def get_question(question_id: uuid.UUID, user: TokenData = Depends(require_editor), db: Session = Depends(get_db)):
    return fetch_question(db, question_id, get_view("editor_full"))


@router.get("/questions/{question_id}/preview")
def preview_question(
    question_id: uuid.UUID,
    reveal_official_answers: bool = False,
    user: TokenData = Depends(require_editor),
    db: Session = Depends(get_db),
):
    spec = get_view("composition_preview", reveal_official_answers=reveal_official_answers)
    return fetch_question(db, question_id, spec)


@router.post("/questions/{question_id}/copy")
def copy_question(
    question_id: uuid.UUID,
    payload: Optional[CopyRequest] = None,
    user: TokenData = Depends(require_editor),
    db: Session = Depends(get_db),
):
    payload = payload or CopyRequest()
    question = replicate(db, question_id, payload.provenance, payload.title_prefix)
    return {"question_id": question.id, "source_question_id": question_id, "source": question.source}


@router.post("/questions/replicate")
def replicate_questions(payload: ReplicateRequest, user: TokenData = Depends(require_editor), db: Session = Depends(get_db)):
    copies = replicate_many(db, payload.question_ids, payload.provenance, payload.title_prefix)
    return {"question_ids": [q.id for q in copies]}


@router.get("/questions/{question_id}/export")
def export_question(question_id: uuid.UUID, user: TokenData = Depends(require_editor), db: Session = Depends(get_db)):
    return export_one(db, question_id)


@router.post("/questions/export")
def export_questions(payload: ExportRequest, user: TokenData = Depends(require_editor), db: Session = Depends(get_db)):
    return export_bundle(db, payload.question_ids)


@router.post("/groups/{group_ref}/questions/import")
def import_questions(
    group_ref: str,
    bundle: Dict[str, Any] = Body(...),
    user: TokenData = Depends(require_editor),
    db: Session = Depends(get_db),
):
    """Accepts a bundle ``{"questions": [...]}`` or a single document."""
    if "questions" in bundle:
        questions = import_bundle(db, bundle, group_ref)
    else:
        questions = [import_one(db, bundle, group_ref)]
    return {"question_ids": [q.id for q in questions]}
