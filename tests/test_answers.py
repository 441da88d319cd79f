import uuid

import pytest
from sqlalchemy import func, select

from questionbank.core.errors import UnresolvedReference
from questionbank.models.orm import (
    DatabaseQuery, ExactMatchField, File, GradingStatus, Option, StudentAnswer,
    StudentAnswerCodeToFile, StudentAnswerStatus, StudentPermission,
)
from questionbank.services.answers import (
    find_answer, record_choices, record_exact_match, seed_answer_sheet,
)
from questionbank.services.hydrate import fetch_question
from questionbank.services.views import get_view

EMAIL = "ada@example.org"


def answer_graph(session, question_id, email=EMAIL):
    graph = fetch_question(session, question_id, get_view("participant_export", user_email=email))
    assert len(graph["student_answers"]) == 1
    return graph["student_answers"][0]


def option_ids(session, question_id):
    return session.scalars(select(Option.id).where(Option.question_id == question_id).order_by(Option.order)).all()


def test_seed_creates_one_ungraded_answer_per_question(session, bank):
    ids = [bank["essay"], bank["web"], bank["trueFalse"]]
    answers = seed_answer_sheet(session, ids, EMAIL)
    assert [a.question_id for a in answers] == ids
    assert all(a.status == StudentAnswerStatus.MISSING for a in answers)
    assert all(a.grading.status == GradingStatus.UNGRADED for a in answers)
    assert answer_graph(session, bank["essay"])["essay"] == {"content": "Write here"}
    assert answer_graph(session, bank["web"])["web"] == {"html": "<p></p>", "css": "", "js": None}
    assert answer_graph(session, bank["trueFalse"])["true_false"] == {"is_true": None}


def test_seed_is_idempotent(session, bank):
    first = seed_answer_sheet(session, [bank["essay"]], EMAIL)
    second = seed_answer_sheet(session, [bank["essay"], bank["trueFalse"]], EMAIL)
    assert second[0].id == first[0].id
    total = session.scalar(select(func.count()).select_from(StudentAnswer))
    assert total == 2


def test_seed_code_writing_copies_every_template_file(session, bank):
    files_before = session.scalar(select(func.count()).select_from(File))
    (answer,) = seed_answer_sheet(session, [bank["codeWriting"]], EMAIL)

    links = session.scalars(
        select(StudentAnswerCodeToFile).where(StudentAnswerCodeToFile.student_answer_id == answer.id)
        .order_by(StudentAnswerCodeToFile.order)
    ).all()
    assert [(l.file.path, l.student_permission) for l in links] == [
        ("main.py", StudentPermission.UPDATE), ("grader.py", StudentPermission.HIDDEN),
    ]
    assert session.scalar(select(func.count()).select_from(File)) == files_before + 2

    # the hidden copy exists but the participant never sees it
    code = answer_graph(session, bank["codeWriting"])["code"]
    assert [f["file"]["path"] for f in code["files"]] == ["main.py"]
    assert code["files"][0]["file"]["content"] == "# todo"


def test_seed_code_reading_starts_with_empty_outputs(session, bank):
    seed_answer_sheet(session, [bank["codeReading"]], EMAIL)
    outputs = answer_graph(session, bank["codeReading"])["code"]["outputs"]
    assert [(o["snippet"]["snippet"], o["output"]) for o in outputs] == [("print(1)", ""), ("print(2)", "")]
    assert all("output" not in o["snippet"] for o in outputs)


def test_seed_exact_match_starts_with_empty_values(session, bank):
    seed_answer_sheet(session, [bank["exactMatch"]], EMAIL)
    fields = answer_graph(session, bank["exactMatch"])["exact_match"]["fields"]
    assert [(f["field"]["statement"], f["value"]) for f in fields] == [("Capital of France", ""), ("2 + 2", "")]
    assert all("match_regex" not in f["field"] for f in fields)


def test_seed_database_copies_queries(session, bank):
    queries_before = session.scalar(select(func.count()).select_from(DatabaseQuery))
    seed_answer_sheet(session, [bank["database"]], EMAIL)
    queries = answer_graph(session, bank["database"])["database"]["queries"]

    assert [q["order"] for q in queries] == [0, 1]
    setup, editable = (q["query"] for q in queries)
    assert setup["content"] == "CREATE TABLE t (x int);"
    assert editable["content"] == "-- your query"
    assert "template" not in editable
    assert editable["output_tests"] == [{"test": "IGNORE_COLUMN_ORDER"}]
    assert session.scalar(select(func.count()).select_from(DatabaseQuery)) == queries_before + 2


def test_answers_are_scoped_to_their_participant(session, bank):
    seed_answer_sheet(session, [bank["essay"]], EMAIL)
    seed_answer_sheet(session, [bank["essay"]], "grace@example.org")
    assert answer_graph(session, bank["essay"])["user_email"] == EMAIL
    graph = fetch_question(session, bank["essay"], get_view("grader_full"))
    assert [a["user_email"] for a in graph["student_answers"]] == ["ada@example.org", "grace@example.org"]


def test_record_choices(session, bank):
    seed_answer_sheet(session, [bank["multipleChoice"]], EMAIL)
    first, second = option_ids(session, bank["multipleChoice"])

    answer = record_choices(session, bank["multipleChoice"], EMAIL, [second])
    assert answer.status == StudentAnswerStatus.IN_PROGRESS
    assert answer_graph(session, bank["multipleChoice"])["multiple_choice"]["options"] == [{"id": second}]

    answer = record_choices(session, bank["multipleChoice"], EMAIL, [])
    assert answer.status == StudentAnswerStatus.MISSING


def test_record_choices_rejects_foreign_options(session, bank):
    seed_answer_sheet(session, [bank["multipleChoice"]], EMAIL)
    (first, _) = option_ids(session, bank["multipleChoice"])
    record_choices(session, bank["multipleChoice"], EMAIL, [first])
    session.commit()

    with pytest.raises(UnresolvedReference):
        record_choices(session, bank["multipleChoice"], EMAIL, [first, uuid.uuid4()])
    assert answer_graph(session, bank["multipleChoice"])["multiple_choice"]["options"] == [{"id": first}]


def test_record_choices_needs_an_answer_sheet(session, bank):
    with pytest.raises(UnresolvedReference):
        record_choices(session, bank["multipleChoice"], EMAIL, [])
    seed_answer_sheet(session, [bank["essay"]], EMAIL)
    with pytest.raises(UnresolvedReference):
        record_choices(session, bank["essay"], EMAIL, [])


def test_record_exact_match(session, bank):
    seed_answer_sheet(session, [bank["exactMatch"]], EMAIL)
    field_ids = session.scalars(
        select(ExactMatchField.id).where(ExactMatchField.question_id == bank["exactMatch"])
        .order_by(ExactMatchField.order)
    ).all()

    record_exact_match(session, bank["exactMatch"], EMAIL, field_ids[1], "4")
    fields = answer_graph(session, bank["exactMatch"])["exact_match"]["fields"]
    assert [f["value"] for f in fields] == ["", "4"]
    assert find_answer(session, bank["exactMatch"], EMAIL).status == StudentAnswerStatus.IN_PROGRESS


def test_record_exact_match_rejects_foreign_field(session, bank):
    seed_answer_sheet(session, [bank["exactMatch"]], EMAIL)
    with pytest.raises(UnresolvedReference):
        record_exact_match(session, bank["exactMatch"], EMAIL, uuid.uuid4(), "x")
