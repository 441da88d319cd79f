"""
Executable code questions.

A code question is either *writing* (template files, official solution files
and test cases) or *reading* (snippets with official expected outputs). Files
are independent rows linked through join records, so they are created by a
post-plan once the question exists.
"""
from typing import List, Optional

from questionbank.models.orm import (
    Code, CodeQuestionType, CodeReading, CodeReadingSnippet, CodeWriting,
    QuestionType, Sandbox, StudentAnswerCode, StudentAnswerCodeReadingOutput,
    StudentPermission, TestCase,
)
from questionbank.services.post_plan import EMPTY_PLAN, plan_answer_files, plan_code_files
from questionbank.services.projection import UNFILTERED, Nested
from questionbank.variants.common import DocumentData, VISIBLE_TO_STUDENT, enum_value, parse_data

TYPE = QuestionType.CODE
RELATION = "code"

OFFICIAL_FIELDS = {
    CodeWriting: ("solution_files",),
    CodeReading: ("context_exec", "context_path", "context"),
    CodeReadingSnippet: ("output",),
}
GUARDED_RELATIONS = {
    (CodeWriting, "template_files"): VISIBLE_TO_STUDENT,
    (StudentAnswerCode, "files"): VISIBLE_TO_STUDENT,
}


def _file_link():
    return {"order": True, "student_permission": True, "file_id": True, "file": True}


def public():
    return {
        "code": Nested({
            "language": True,
            "code_type": True,
            "sandbox": True,
            "code_writing": Nested({
                "code_check_enabled": True,
                "template_files": Nested(
                    _file_link(), where=dict(VISIBLE_TO_STUDENT), order_by=("order",)
                ),
                "test_cases": Nested(
                    {"index": True, "exec": True, "input": True, "expected_output": True},
                    order_by=("index",),
                ),
            }),
            "code_reading": Nested({
                "student_output_test": True,
                "snippets": Nested({"id": True, "order": True, "snippet": True}, order_by=("order",)),
            }),
        })
    }


def official():
    return {
        "code": Nested({
            "code_writing": Nested({
                # editors see hidden template files too
                "template_files": Nested(_file_link(), where=UNFILTERED, order_by=("order",)),
                "solution_files": Nested(
                    {"order": True, "file_id": True, "file": True}, order_by=("order",)
                ),
            }),
            "code_reading": Nested({
                "context_exec": True,
                "context_path": True,
                "context": True,
                "snippets": Nested({"output": True}),
            }),
        })
    }


def participant_answer():
    return {
        "code": Nested({
            "code_type": True,
            "all_test_cases_passed": True,
            "files": Nested(_file_link(), where=dict(VISIBLE_TO_STUDENT), order_by=("order",)),
            "outputs": Nested(
                {
                    "snippet_id": True,
                    "output": True,
                    "status": True,
                    "snippet": Nested({"id": True, "order": True, "snippet": True}),
                },
                order_by=("snippet.order",),
            ),
        })
    }


# ---------- replication ----------

def _sandbox(src):
    if src is None:
        return None
    return Sandbox(image=src["image"], before_all=src["before_all"])


def _linked_files(links, with_permission=True):
    files = []
    for link in links:
        entry = {"order": link["order"], "path": link["file"]["path"], "content": link["file"]["content"]}
        if with_permission:
            entry["student_permission"] = link["student_permission"]
        files.append(entry)
    return files


def replicate(src):
    record = Code(language=src["language"], code_type=src["code_type"], sandbox=_sandbox(src["sandbox"]))
    plan = EMPTY_PLAN
    writing = src.get("code_writing")
    if writing is not None:
        record.code_writing = CodeWriting(
            code_check_enabled=writing["code_check_enabled"],
            test_cases=[
                TestCase(index=t["index"], exec=t["exec"], input=t["input"],
                         expected_output=t["expected_output"])
                for t in writing["test_cases"]
            ],
        )
        plan = plan_code_files(
            _linked_files(writing["template_files"]),
            _linked_files(writing["solution_files"], with_permission=False),
        )
    reading = src.get("code_reading")
    if reading is not None:
        record.code_reading = CodeReading(
            context_exec=reading["context_exec"],
            context_path=reading["context_path"],
            context=reading["context"],
            student_output_test=reading["student_output_test"],
            snippets=[
                CodeReadingSnippet(order=s["order"], snippet=s["snippet"], output=s["output"])
                for s in reading["snippets"]
            ],
        )
    return record, plan


# ---------- portable form ----------

def export(src):
    data = {
        "codeType": enum_value(src["code_type"]),
        "language": src["language"],
        "sandbox": None,
    }
    if src["sandbox"] is not None:
        data["sandbox"] = {"image": src["sandbox"]["image"], "beforeAll": src["sandbox"]["before_all"]}

    if src["code_type"] == CodeQuestionType.CODE_WRITING and src.get("code_writing"):
        writing = src["code_writing"]
        data.update({
            "codeCheckEnabled": writing["code_check_enabled"],
            "templateFiles": [
                {
                    "path": tf["file"]["path"],
                    "content": tf["file"]["content"],
                    "studentPermission": enum_value(tf["student_permission"]),
                }
                for tf in writing["template_files"]
            ],
            "solutionFiles": [
                {"path": sf["file"]["path"], "content": sf["file"]["content"]}
                for sf in writing["solution_files"]
            ],
            "testCases": [
                {
                    "index": t["index"],
                    "exec": t["exec"],
                    "input": t["input"],
                    "expectedOutput": t["expected_output"],
                }
                for t in writing["test_cases"]
            ],
        })
    elif src["code_type"] == CodeQuestionType.CODE_READING and src.get("code_reading"):
        reading = src["code_reading"]
        data.update({
            "studentOutputTest": reading["student_output_test"],
            "contextExec": reading["context_exec"],
            "contextPath": reading["context_path"],
            "context": reading["context"],
            "snippets": [
                {"order": s["order"], "snippet": s["snippet"], "output": s["output"]}
                for s in reading["snippets"]
            ],
        })
    return data


class SandboxData(DocumentData):
    image: Optional[str] = None
    before_all: Optional[str] = None


class FileData(DocumentData):
    path: str
    content: Optional[str] = None


class TemplateFileData(FileData):
    student_permission: StudentPermission = StudentPermission.UPDATE


class TestCaseData(DocumentData):
    index: Optional[int] = None
    exec: Optional[str] = None
    input: Optional[str] = None
    expected_output: Optional[str] = None


class SnippetData(DocumentData):
    order: Optional[int] = None
    snippet: Optional[str] = None
    output: Optional[str] = None


class CodeData(DocumentData):
    code_type: CodeQuestionType = CodeQuestionType.CODE_WRITING
    language: Optional[str] = None
    sandbox: Optional[SandboxData] = None
    code_check_enabled: bool = True
    template_files: List[TemplateFileData] = []
    solution_files: List[FileData] = []
    test_cases: List[TestCaseData] = []
    student_output_test: bool = False
    context_exec: Optional[str] = None
    context_path: Optional[str] = None
    context: Optional[str] = None
    snippets: List[SnippetData] = []


def _imported_files(entries, with_permission=True):
    files = []
    for position, entry in enumerate(entries):
        item = {"order": position, "path": entry.path, "content": entry.content or ""}
        if with_permission:
            item["student_permission"] = entry.student_permission
        files.append(item)
    return files


def build(data):
    doc = parse_data(CodeData, data)
    record = Code(
        language=doc.language,
        code_type=doc.code_type,
        sandbox=Sandbox(image=doc.sandbox.image or "", before_all=doc.sandbox.before_all)
        if doc.sandbox is not None else None,
    )
    plan = EMPTY_PLAN
    if doc.code_type == CodeQuestionType.CODE_WRITING:
        record.code_writing = CodeWriting(
            code_check_enabled=doc.code_check_enabled,
            test_cases=[
                TestCase(
                    index=position + 1 if t.index is None else t.index,
                    exec=t.exec or "",
                    input=t.input or "",
                    expected_output=t.expected_output or "",
                )
                for position, t in enumerate(doc.test_cases)
            ],
        )
        plan = plan_code_files(
            _imported_files(doc.template_files),
            _imported_files(doc.solution_files, with_permission=False),
        )
    else:
        record.code_reading = CodeReading(
            student_output_test=doc.student_output_test,
            context_exec=doc.context_exec,
            context_path=doc.context_path,
            context=doc.context,
            snippets=[
                CodeReadingSnippet(
                    order=position if s.order is None else s.order,
                    snippet=s.snippet,
                    output=s.output,
                )
                for position, s in enumerate(doc.snippets)
            ],
        )
    return record, plan


# ---------- answer sheet ----------

def seed(src, question_id):
    record = StudentAnswerCode(code_type=src["code_type"])
    plan = EMPTY_PLAN
    if src["code_type"] == CodeQuestionType.CODE_WRITING and src.get("code_writing"):
        # hidden files are copied as well; participant projections filter them
        plan = plan_answer_files(_linked_files(src["code_writing"]["template_files"]), question_id)
    elif src["code_type"] == CodeQuestionType.CODE_READING and src.get("code_reading"):
        record.outputs = [
            StudentAnswerCodeReadingOutput(snippet_id=s["id"], output="")
            for s in src["code_reading"]["snippets"]
        ]
    return record, plan
