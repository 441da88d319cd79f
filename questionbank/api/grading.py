import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from questionbank.core.auth import TokenData, require_editor
from questionbank.core.database import get_db
from questionbank.services.hydrate import fetch_question
from questionbank.services.views import get_view

router = APIRouter()


@router.get("/questions/{question_id}")
def get_submissions(question_id: uuid.UUID, user: TokenData = Depends(require_editor), db: Session = Depends(get_db)):
    """Official answers next to every submission and its grading."""
    return fetch_question(db, question_id, get_view("grader_full"))


@router.get("/questions/{question_id}/export")
def export_submissions(
    question_id: uuid.UUID,
    include_submissions: bool = True,
    user: TokenData = Depends(require_editor),
    db: Session = Depends(get_db),
):
    return fetch_question(db, question_id, get_view("grader_export", include_submissions=include_submissions))
