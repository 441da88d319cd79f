"""
Database questions: an image and ordered solution queries.

Each solution query is an independent row linked to its question, optionally
with an expected output, through a ``DatabaseToSolutionQuery`` join record.
"""
from typing import List, Optional

from questionbank.models.orm import (
    Database, DatabaseDBMS, QueryOutputStatus, QueryOutputType, QuestionType,
    StudentAnswerDatabase, StudentPermission,
)
from questionbank.services.post_plan import plan_answer_queries, plan_solution_queries
from questionbank.services.projection import Nested
from questionbank.variants.common import DocumentData, enum_value, parse_data

TYPE = QuestionType.DATABASE
RELATION = "database"

OFFICIAL_FIELDS = {Database: ("solution_queries",)}
GUARDED_RELATIONS = {}

QUERY_FIELDS = (
    "order", "title", "description", "content", "template", "lint_active",
    "lint_rules", "student_permission", "test_query",
)


def _query_select(fields=QUERY_FIELDS):
    select = {name: True for name in fields}
    select["output_tests"] = Nested({"test": True}, order_by=("test",))
    return select


def public():
    return {"database": Nested({"image": True})}


def official():
    return {
        "database": Nested({
            "solution_queries": Nested(
                {
                    "query_id": True,
                    "output_id": True,
                    "query": Nested(_query_select()),
                    "output": True,
                },
                order_by=("query.order",),
            ),
        })
    }


def participant_answer():
    fields = tuple(name for name in QUERY_FIELDS if name != "template")
    return {
        "database": Nested({
            "queries": Nested(
                {"order": True, "query_id": True, "query": Nested(_query_select(fields))},
                order_by=("order",),
            ),
        })
    }


def _query_values(query):
    return {name: query[name] for name in QUERY_FIELDS}


def _tests(query):
    return [t["test"] for t in query["output_tests"]]


def replicate(src):
    queries = []
    for sq in src["solution_queries"]:
        output = sq["output"]
        queries.append({
            "query": _query_values(sq["query"]),
            "output_tests": _tests(sq["query"]),
            "output": None if output is None else {
                "output": output["output"],
                "status": output["status"],
                "type": output["type"],
                "dbms": output["dbms"],
            },
        })
    return Database(image=src["image"]), plan_solution_queries(queries)


def export(src):
    solution_queries = []
    for sq in src["solution_queries"]:
        query = sq["query"]
        solution_queries.append({
            "order": query["order"],
            "title": query["title"],
            "description": query["description"],
            "lintActive": query["lint_active"],
            "lintRules": query["lint_rules"],
            "content": query["content"],
            "template": query["template"],
            "testQuery": query["test_query"],
            "studentPermission": enum_value(query["student_permission"]),
            "outputTests": _tests(query),
            "expectedOutputType": enum_value(sq["output"]["type"]) if sq["output"] else None,
        })
    return {"image": src["image"], "solutionQueries": solution_queries}


class SolutionQueryData(DocumentData):
    order: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None
    template: Optional[str] = None
    lint_active: bool = False
    lint_rules: Optional[str] = None
    student_permission: StudentPermission = StudentPermission.UPDATE
    test_query: bool = False
    output_tests: List[str] = []
    expected_output_type: Optional[QueryOutputType] = None


class DatabaseData(DocumentData):
    image: Optional[str] = None
    solution_queries: List[SolutionQueryData] = []


def build(data):
    doc = parse_data(DatabaseData, data)
    queries = []
    for position, q in enumerate(doc.solution_queries):
        values = q.model_dump(include=set(QUERY_FIELDS))
        if q.order is None:
            values["order"] = position
        queries.append({
            "query": values,
            "output_tests": list(q.output_tests),
            "output": None if q.expected_output_type is None else {
                "output": None,
                "status": QueryOutputStatus.NEUTRAL,
                "type": q.expected_output_type,
                "dbms": DatabaseDBMS.POSTGRES,
            },
        })
    return Database(image=doc.image or ""), plan_solution_queries(queries)


def seed(src, question_id):
    copies = []
    for sq in src["solution_queries"]:
        query = _query_values(sq["query"])
        # editable queries start from their template, the others show the official query
        if query["student_permission"] == StudentPermission.UPDATE:
            query["content"] = query["template"]
        query["template"] = None
        copies.append({"query": query, "output_tests": _tests(sq["query"])})
    return StudentAnswerDatabase(), plan_answer_queries(copies, question_id)
