import uuid
from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from questionbank.core.auth import TokenData, require_student
from questionbank.core.database import get_db
from questionbank.services.answers import record_choices, record_exact_match, seed_answer_sheet
from questionbank.services.hydrate import fetch_question, fetch_questions
from questionbank.services.views import get_view

router = APIRouter()


class JoinRequest(BaseModel):
    question_ids: List[uuid.UUID] = Field(min_length=1)


class ChoicesIn(BaseModel):
    option_ids: List[uuid.UUID]


class FieldValueIn(BaseModel):
    value: str


# Participants never pick a view: every endpoint is bound to one participant view.

@router.post("/join")
def join(payload: JoinRequest, user: TokenData = Depends(require_student), db: Session = Depends(get_db)):
    seed_answer_sheet(db, payload.question_ids, user.sub)
    return {"questions": fetch_questions(db, payload.question_ids, get_view("participant_join"))}


@router.get("/questions/{question_id}")
def get_question(question_id: uuid.UUID, user: TokenData = Depends(require_student), db: Session = Depends(get_db)):
    return fetch_question(db, question_id, get_view("participant_join"))


@router.get("/questions/{question_id}/answer")
def get_answer(question_id: uuid.UUID, user: TokenData = Depends(require_student), db: Session = Depends(get_db)):
    return fetch_question(db, question_id, get_view("participant_export", user_email=user.sub))


@router.put("/questions/{question_id}/answer/choices")
def put_choices(question_id: uuid.UUID, payload: ChoicesIn, user: TokenData = Depends(require_student), db: Session = Depends(get_db)):
    answer = record_choices(db, question_id, user.sub, payload.option_ids)
    return {"question_id": question_id, "status": answer.status}


@router.put("/questions/{question_id}/answer/exact-match/{field_id}")
def put_exact_match(
    question_id: uuid.UUID,
    field_id: uuid.UUID,
    payload: FieldValueIn,
    user: TokenData = Depends(require_student),
    db: Session = Depends(get_db),
):
    answer = record_exact_match(db, question_id, user.sub, field_id, payload.value)
    return {"question_id": question_id, "field_id": field_id, "status": answer.status}
