import os
import uuid

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "testing")

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from questionbank.core.database import init_db
from questionbank.models.orm import (
    Code, CodeQuestionType, CodeReading, CodeReadingSnippet, CodeToSolutionFile,
    CodeToTemplateFile, CodeWriting, Database, DatabaseQuery, DatabaseQueryOutput,
    DatabaseQueryOutputTest, DatabaseToSolutionQuery, Essay, ExactMatch, ExactMatchField,
    File, Group, MultipleChoice, Option, Question, QuestionTag, QuestionType,
    QueryOutputStatus, QueryOutputType, Sandbox, StudentPermission, Tag, TestCase,
    TrueFalse, Web,
)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # let SQLAlchemy drive BEGIN so that SAVEPOINTs behave on pysqlite
    @event.listens_for(engine, "connect")
    def _connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN")

    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)


@pytest.fixture
def session(session_factory):
    db = session_factory()
    yield db
    db.close()


def _question(group_id, qtype, title, **variant):
    qid = uuid.uuid4()
    return qid, Question(
        id=qid,
        group_id=group_id,
        type=qtype,
        title=title,
        content=f"Statement of {title}",
        scratchpad="editor notes",
        tags=[QuestionTag(group_id=group_id, label="graphs")],
        **variant,
    )


@pytest.fixture
def bank(session):
    """One group with two tags and one question per variant; returns their ids."""
    group = Group(id=uuid.uuid4(), label="Algorithms")
    session.add(group)
    session.add_all([Tag(group_id=group.id, label="graphs"), Tag(group_id=group.id, label="sorting")])
    session.flush()
    ids = {"group": group.id}

    ids["multipleChoice"], q = _question(
        group.id, QuestionType.MULTIPLE_CHOICE, "Pick one",
        multiple_choice=MultipleChoice(
            activate_selection_limit=False,
            selection_limit=0,
            options=[
                Option(order=0, text="A", is_correct=True),
                Option(order=1, text="B", is_correct=False),
            ],
        ),
    )
    session.add(q)

    ids["trueFalse"], q = _question(group.id, QuestionType.TRUE_FALSE, "Is it?", true_false=TrueFalse(is_true=True))
    session.add(q)

    ids["essay"], q = _question(
        group.id, QuestionType.ESSAY, "Explain",
        essay=Essay(solution="Because.", template="Write here"),
    )
    session.add(q)

    ids["web"], q = _question(
        group.id, QuestionType.WEB, "Style it",
        web=Web(template_html="<p></p>", template_css="", template_js=None,
                solution_html="<p>x</p>", solution_css="p { color: red; }", solution_js="run()"),
    )
    session.add(q)

    ids["exactMatch"], q = _question(
        group.id, QuestionType.EXACT_MATCH, "Fill in",
        exact_match=ExactMatch(fields=[
            ExactMatchField(order=0, statement="Capital of France", match_regex="^Paris$"),
            ExactMatchField(order=1, statement="2 + 2", match_regex="^4$"),
        ]),
    )
    session.add(q)

    writing_id = uuid.uuid4()
    ids["codeWriting"] = writing_id
    session.add(Question(
        id=writing_id,
        group_id=group.id,
        type=QuestionType.CODE,
        title="Write code",
        content="Implement main",
        tags=[QuestionTag(group_id=group.id, label="sorting")],
        code=Code(
            language="python",
            code_type=CodeQuestionType.CODE_WRITING,
            sandbox=Sandbox(image="python:3.12", before_all="pip install pytest"),
            code_writing=CodeWriting(
                code_check_enabled=True,
                test_cases=[
                    TestCase(index=1, exec="python main.py", input="1", expected_output="2"),
                    TestCase(index=2, exec="python main.py", input="2", expected_output="3"),
                ],
                template_files=[
                    CodeToTemplateFile(
                        order=0, student_permission=StudentPermission.UPDATE,
                        file=File(question_id=writing_id, path="main.py", content="# todo"),
                    ),
                    CodeToTemplateFile(
                        order=1, student_permission=StudentPermission.HIDDEN,
                        file=File(question_id=writing_id, path="grader.py", content="assert True"),
                    ),
                ],
                solution_files=[
                    CodeToSolutionFile(
                        order=0,
                        file=File(question_id=writing_id, path="main.py", content="print(int(input()) + 1)"),
                    ),
                ],
            ),
        ),
    ))

    ids["codeReading"], q = _question(
        group.id, QuestionType.CODE, "Read code",
        code=Code(
            language="python",
            code_type=CodeQuestionType.CODE_READING,
            code_reading=CodeReading(
                context_exec="python main.py",
                context_path="main.py",
                context="{{SNIPPET_FUNCTION_DECLARATIONS}}",
                student_output_test=True,
                snippets=[
                    CodeReadingSnippet(order=0, snippet="print(1)", output="1"),
                    CodeReadingSnippet(order=1, snippet="print(2)", output="2"),
                ],
            ),
        ),
    )
    session.add(q)

    database_id = uuid.uuid4()
    ids["database"] = database_id
    select_query_id = uuid.uuid4()
    session.add(Question(
        id=database_id,
        group_id=group.id,
        type=QuestionType.DATABASE,
        title="Query it",
        content="Select everything",
        database=Database(
            image="postgres:16",
            solution_queries=[
                DatabaseToSolutionQuery(query=DatabaseQuery(
                    question_id=database_id, order=0, title="Setup",
                    content="CREATE TABLE t (x int);", student_permission=StudentPermission.VIEW,
                )),
                DatabaseToSolutionQuery(
                    query=DatabaseQuery(
                        id=select_query_id, question_id=database_id, order=1, title="Select",
                        content="SELECT * FROM t;", template="-- your query",
                        student_permission=StudentPermission.UPDATE, test_query=True,
                        output_tests=[DatabaseQueryOutputTest(test="IGNORE_COLUMN_ORDER")],
                    ),
                    output=DatabaseQueryOutput(
                        query_id=select_query_id, output={"rows": []},
                        status=QueryOutputStatus.SUCCESS, type=QueryOutputType.TABULAR,
                    ),
                ),
            ],
        ),
    ))

    session.commit()
    return ids
