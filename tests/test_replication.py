import uuid

import pytest
from sqlalchemy import event, func, select

from questionbank.core.errors import PartialWriteFailure, SourceNotFound, UnknownVariant
from questionbank.models.orm import (
    CodeToSolutionFile, CodeToTemplateFile, DatabaseQuery, DatabaseToSolutionQuery, File,
    Question, QuestionSource, QuestionType, QuestionUsageStatus, StudentPermission,
)
from questionbank.services.answers import seed_answer_sheet
from questionbank.services.hydrate import fetch_question
from questionbank.services.replication import replicate, replicate_many
from questionbank.services.views import get_view

VARIANTS = ["multipleChoice", "trueFalse", "essay", "web", "exactMatch", "codeWriting", "codeReading", "database"]

IDENTITY_KEYS = {"id", "question_id", "file_id", "query_id", "output_id", "source_question_id",
                 "created_at", "updated_at"}


def shape(value):
    """The graph without identities, for structural comparison."""
    if isinstance(value, dict):
        return {k: shape(v) for k, v in value.items() if k not in IDENTITY_KEYS}
    if isinstance(value, list):
        return [shape(v) for v in value]
    return value


def count(session, model):
    return session.scalar(select(func.count()).select_from(model))


@pytest.mark.parametrize("name", VARIANTS)
def test_copy_is_isomorphic(session, bank, name):
    copy = replicate(session, bank[name])
    spec = get_view("bank_export")
    original = fetch_question(session, bank[name], spec)
    replica = fetch_question(session, copy.id, spec)

    assert copy.id != bank[name]
    assert replica["source_question_id"] == bank[name]
    assert original.pop("source") == QuestionSource.BANK
    assert replica.pop("source") == QuestionSource.COPY
    assert shape(replica) == shape(original)


def test_copy_title_prefix_and_usage(session, bank):
    copy = replicate(session, bank["essay"], QuestionSource.EVAL, title_prefix="[Exam] ")
    assert copy.title == "[Exam] Explain"
    assert copy.usage_status == QuestionUsageStatus.NOT_APPLICABLE
    assert copy.group_id == bank["group"]
    assert [t.label for t in copy.tags] == ["graphs"]

    copy = replicate(session, bank["essay"], "COPY")
    assert copy.title == "Explain"
    assert copy.usage_status == QuestionUsageStatus.UNUSED


def test_code_writing_copy_links_new_files(session, bank):
    files_before = count(session, File)
    copy = replicate(session, bank["codeWriting"])

    templates = session.scalars(
        select(CodeToTemplateFile).where(CodeToTemplateFile.question_id == copy.id)
        .order_by(CodeToTemplateFile.order)
    ).all()
    solutions = session.scalars(
        select(CodeToSolutionFile).where(CodeToSolutionFile.question_id == copy.id)
    ).all()
    assert [(t.order, t.student_permission) for t in templates] == [
        (0, StudentPermission.UPDATE), (1, StudentPermission.HIDDEN),
    ]
    assert len(solutions) == 1
    assert count(session, File) == files_before + 3

    source_file_ids = set(session.scalars(select(File.id).where(File.question_id == bank["codeWriting"])))
    new_file_ids = {t.file_id for t in templates} | {s.file_id for s in solutions}
    assert not new_file_ids & source_file_ids
    assert all(session.get(File, fid).question_id == copy.id for fid in new_file_ids)


def test_database_copy_links_new_queries_and_outputs(session, bank):
    copy = replicate(session, bank["database"])
    links = session.scalars(
        select(DatabaseToSolutionQuery).where(DatabaseToSolutionQuery.question_id == copy.id)
    ).all()
    assert len(links) == 2
    queries = [session.get(DatabaseQuery, link.query_id) for link in links]
    assert sorted(q.order for q in queries) == [0, 1]
    assert all(q.question_id == copy.id for q in queries)
    linked_output = [link for link in links if link.output_id is not None]
    assert len(linked_output) == 1


def test_copy_never_carries_submissions(session, bank):
    seed_answer_sheet(session, [bank["essay"]], "ada@example.org")
    session.commit()
    copy = replicate(session, bank["essay"])
    assert fetch_question(session, copy.id, get_view("grader_full"))["student_answers"] == []


def test_failure_while_linking_files_leaves_no_rows(session, bank):
    before = {model: count(session, model)
              for model in (Question, File, CodeToTemplateFile, CodeToSolutionFile)}
    session.commit()
    inserted = []

    def fail_on_second_file(mapper, connection, target):
        inserted.append(target)
        if len(inserted) == 2:
            raise RuntimeError("disk full")

    event.listen(File, "before_insert", fail_on_second_file)
    try:
        with pytest.raises(PartialWriteFailure) as excinfo:
            replicate(session, bank["codeWriting"])
    finally:
        event.remove(File, "before_insert", fail_on_second_file)

    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert len(inserted) == 2
    after = {model: count(session, model) for model in before}
    assert after == before


def test_replicate_many_is_atomic(session, bank):
    before = count(session, Question)
    session.commit()
    with pytest.raises(SourceNotFound):
        replicate_many(session, [bank["essay"], uuid.uuid4()])
    assert count(session, Question) == before

    copies = replicate_many(session, [bank["web"], bank["trueFalse"]], title_prefix="")
    assert [c.source_question_id for c in copies] == [bank["web"], bank["trueFalse"]]
    assert all(c.source == QuestionSource.EVAL for c in copies)


def test_missing_source(session, bank):
    with pytest.raises(SourceNotFound):
        replicate(session, uuid.uuid4())


def test_record_not_matching_type_is_rejected(session, bank):
    question = session.get(Question, bank["essay"])
    question.type = QuestionType.WEB
    session.commit()
    with pytest.raises(UnknownVariant):
        replicate(session, bank["essay"])
