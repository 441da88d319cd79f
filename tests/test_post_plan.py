from sqlalchemy import select

from questionbank.models.orm import (
    CodeToSolutionFile, CodeToTemplateFile, DatabaseQuery, DatabaseQueryOutput,
    DatabaseQueryOutputTest, DatabaseToSolutionQuery, File, QueryOutputType, StudentPermission,
)
from questionbank.services.post_plan import (
    EMPTY_PLAN, execute, plan_code_files, plan_solution_queries,
)


def test_plans_concatenate():
    templates = plan_code_files([{"order": 0, "path": "a.py", "content": ""}], [])
    solutions = plan_code_files([], [{"order": 0, "path": "a.py", "content": "pass"}])
    assert len(EMPTY_PLAN) == 0
    assert len(templates + solutions) == 2
    assert (templates + EMPTY_PLAN) == templates


def test_empty_plan_writes_nothing(session, bank):
    assert execute(session, EMPTY_PLAN, {"question_id": bank["codeWriting"]}) == []


def test_code_files_are_created_then_linked(session, bank):
    plan = plan_code_files(
        [{"order": 5, "path": "extra.py", "content": None, "student_permission": StudentPermission.VIEW}],
        [{"order": 1, "path": "extra.py", "content": "x = 1"}],
    )
    template_link, solution_link = execute(session, plan, {"question_id": bank["codeWriting"]})

    assert isinstance(template_link, CodeToTemplateFile)
    assert template_link.order == 5
    assert template_link.student_permission == StudentPermission.VIEW
    assert isinstance(solution_link, CodeToSolutionFile)

    template_file = session.get(File, template_link.file_id)
    assert template_file.question_id == bank["codeWriting"]
    assert template_file.content == ""
    assert session.get(File, solution_link.file_id).content == "x = 1"


def test_query_leaves_anchor_on_the_new_query(session, bank):
    plan = plan_solution_queries([{
        "query": {"order": 2, "title": "Count", "content": "SELECT count(*) FROM t;"},
        "output_tests": ["IGNORE_COLUMN_ORDER", "IGNORE_ROW_ORDER"],
        "output": {"output": None, "type": QueryOutputType.SCALAR},
    }])
    (link,) = execute(session, plan, {"question_id": bank["database"]})

    assert isinstance(link, DatabaseToSolutionQuery)
    query = session.get(DatabaseQuery, link.query_id)
    assert query.question_id == bank["database"]
    output = session.get(DatabaseQueryOutput, link.output_id)
    assert output.query_id == query.id
    tests = session.scalars(
        select(DatabaseQueryOutputTest.test).where(DatabaseQueryOutputTest.query_id == query.id)
        .order_by(DatabaseQueryOutputTest.test)
    ).all()
    assert tests == ["IGNORE_COLUMN_ORDER", "IGNORE_ROW_ORDER"]
