"""
Participant answer sheets.

Joining an evaluation seeds one answer per question with the variant's
starting data (templates, copies of template files, empty outputs) and an
ungraded grading. Answers reference the question's own options and fields;
references are validated before anything is written.
"""
import logging
from typing import Iterable, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from questionbank.core.database import atomic
from questionbank.core.errors import UnresolvedReference
from questionbank.models.orm import (
    ExactMatchField, GradingStatus, Option, StudentAnswer, StudentAnswerExactMatchField,
    StudentAnswerStatus, StudentQuestionGrading,
)
from questionbank.services.hydrate import fetch_question
from questionbank.services.post_plan import execute
from questionbank.services.registry import variant_record
from questionbank.services.views import get_view

logger = logging.getLogger(__name__)


def find_answer(session: Session, question_id, user_email: str):
    return session.scalar(
        select(StudentAnswer).where(
            StudentAnswer.question_id == question_id,
            StudentAnswer.user_email == user_email,
        )
    )


def _require_answer(session: Session, question_id, user_email: str) -> StudentAnswer:
    answer = find_answer(session, question_id, user_email)
    if answer is None:
        raise UnresolvedReference(f"No answer sheet for {user_email} on question {question_id}")
    return answer


def seed_answer_sheet(session: Session, question_ids: Iterable, user_email: str) -> List[StudentAnswer]:
    """Create the answers of ``user_email`` for each question; existing answers are kept."""
    spec = get_view("answer_seed")
    answers = []
    created = 0
    with atomic(session, "seed_answer_sheet"):
        for question_id in question_ids:
            existing = find_answer(session, question_id, user_email)
            if existing is not None:
                answers.append(existing)
                continue
            source = fetch_question(session, question_id, spec)
            schema, record = variant_record(source)
            answer = StudentAnswer(
                question_id=source["id"],
                user_email=user_email,
                status=StudentAnswerStatus.MISSING,
                grading=StudentQuestionGrading(status=GradingStatus.UNGRADED, points_obtained=0),
            )
            variant, plan = schema.seeder(record, source["id"])
            setattr(answer, schema.relation, variant)
            session.add(answer)
            session.flush()
            execute(session, plan, {"student_answer_id": answer.id})
            answers.append(answer)
            created += 1
    logger.info(f"Seeded {created} answers for {user_email} ({len(answers) - created} already present)")
    return answers


def record_choices(session: Session, question_id, user_email: str, option_ids: Iterable) -> StudentAnswer:
    """Replace the selected options of a choice answer."""
    wanted = set(option_ids)
    with atomic(session, "record_choices"):
        answer = _require_answer(session, question_id, user_email)
        if answer.multiple_choice is None:
            raise UnresolvedReference(f"Question {question_id} is not a choice question")
        options = session.scalars(
            select(Option).where(Option.question_id == question_id, Option.id.in_(wanted))
        ).all() if wanted else []
        unknown = wanted - {option.id for option in options}
        if unknown:
            raise UnresolvedReference(
                f"Options {sorted(str(o) for o in unknown)} do not belong to question {question_id}"
            )
        answer.multiple_choice.options = list(options)
        answer.status = StudentAnswerStatus.IN_PROGRESS if options else StudentAnswerStatus.MISSING
        session.flush()
    return answer


def record_exact_match(session: Session, question_id, user_email: str, field_id, value: str) -> StudentAnswer:
    with atomic(session, "record_exact_match"):
        answer = _require_answer(session, question_id, user_email)
        field = session.get(ExactMatchField, field_id)
        if field is None or field.question_id != answer.question_id or answer.exact_match is None:
            raise UnresolvedReference(f"Field {field_id} does not belong to question {question_id}")
        entry = session.get(StudentAnswerExactMatchField, (answer.id, field.id))
        if entry is None:
            entry = StudentAnswerExactMatchField(field_id=field.id)
            answer.exact_match.fields.append(entry)
        entry.value = value
        answer.status = StudentAnswerStatus.IN_PROGRESS
        session.flush()
    return answer
