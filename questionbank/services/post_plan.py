"""
Deferred create-then-link steps.

Some children can only be linked once their parent's new identity exists:
files attached to a code question through join rows, database queries linked
to their question together with an expected output, and the student copies
of both. Replication, import and answer seeding describe those children as a
``PostPlan`` and hand it to ``execute`` after the parent has been flushed.
"""
from dataclasses import dataclass, field
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from sqlalchemy.orm import Session

from questionbank.models.orm import (
    CodeToSolutionFile, CodeToTemplateFile, DatabaseQuery, DatabaseQueryOutput,
    DatabaseQueryOutputTest, DatabaseToSolutionQuery, File, StudentAnswerCodeToFile,
    StudentAnswerDatabaseToQuery, StudentPermission,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Leaf:
    """One row created by a step.

    ``link_field`` names the link-row column receiving this leaf's id.
    ``parent_fields`` are copied from the parent keys into the leaf itself.
    ``anchor_field`` receives the id of the step's first leaf.
    """

    model: type
    values: Mapping[str, Any]
    link_field: Optional[str] = None
    parent_fields: Tuple[str, ...] = ()
    anchor_field: Optional[str] = None


@dataclass(frozen=True)
class LinkStep:
    leaves: Tuple[Leaf, ...]
    link_model: type
    link_values: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PostPlan:
    steps: Tuple[LinkStep, ...] = ()

    def __add__(self, other: "PostPlan") -> "PostPlan":
        return PostPlan(self.steps + other.steps)

    def __len__(self) -> int:
        return len(self.steps)


EMPTY_PLAN = PostPlan()


def execute(session: Session, plan: PostPlan, parent: Mapping[str, Any]) -> List[Any]:
    """Run every step of ``plan`` under ``parent`` and return the link rows.

    Steps are independent of each other; they run one after the other on the
    caller's session and transaction, so any failure aborts the whole write.
    """
    links = []
    for number, step in enumerate(plan.steps, start=1):
        link_values: Dict[str, Any] = dict(step.link_values)
        link_values.update(parent)
        anchor_id = None
        for leaf in step.leaves:
            values = dict(leaf.values)
            for name in leaf.parent_fields:
                values[name] = parent[name]
            if leaf.anchor_field is not None:
                values[leaf.anchor_field] = anchor_id
            row = leaf.model(**values)
            session.add(row)
            session.flush()
            if anchor_id is None:
                anchor_id = row.id
            if leaf.link_field is not None:
                link_values[leaf.link_field] = row.id
        link = step.link_model(**link_values)
        session.add(link)
        session.flush()
        links.append(link)
        logger.debug(f"post-plan step {number}/{len(plan)} linked {step.link_model.__name__}")
    return links


# ---------- planners ----------
# Planners take normalized child dicts (snake_case, no identities).

def _file_leaf(file: Mapping[str, Any], parent_fields=("question_id",), **extra) -> Leaf:
    values = {"path": file["path"], "content": file.get("content") or ""}
    values.update(extra)
    return Leaf(File, values, link_field="file_id", parent_fields=parent_fields)


def plan_code_files(template_files: Iterable[Mapping], solution_files: Iterable[Mapping]) -> PostPlan:
    steps = []
    for tf in template_files:
        steps.append(LinkStep(
            leaves=(_file_leaf(tf),),
            link_model=CodeToTemplateFile,
            link_values={
                "order": tf["order"],
                "student_permission": tf.get("student_permission") or StudentPermission.UPDATE,
            },
        ))
    for sf in solution_files:
        steps.append(LinkStep(
            leaves=(_file_leaf(sf),),
            link_model=CodeToSolutionFile,
            link_values={"order": sf["order"]},
        ))
    return PostPlan(tuple(steps))


def _output_test_leaves(tests: Iterable[str]) -> Tuple[Leaf, ...]:
    return tuple(
        Leaf(DatabaseQueryOutputTest, {"test": test}, anchor_field="query_id")
        for test in tests
    )


def plan_solution_queries(queries: Iterable[Mapping]) -> PostPlan:
    """Each query is ``{"query": {...}, "output_tests": [...], "output": {...} | None}``."""
    steps = []
    for item in queries:
        leaves = [Leaf(DatabaseQuery, dict(item["query"]), link_field="query_id",
                       parent_fields=("question_id",))]
        leaves.extend(_output_test_leaves(item.get("output_tests") or ()))
        if item.get("output") is not None:
            leaves.append(Leaf(DatabaseQueryOutput, dict(item["output"]),
                               link_field="output_id", anchor_field="query_id"))
        steps.append(LinkStep(leaves=tuple(leaves), link_model=DatabaseToSolutionQuery))
    return PostPlan(tuple(steps))


def plan_answer_files(files: Iterable[Mapping], question_id) -> PostPlan:
    """Student copies of template files, linked to a student answer."""
    return PostPlan(tuple(
        LinkStep(
            leaves=(_file_leaf(f, parent_fields=(), question_id=question_id),),
            link_model=StudentAnswerCodeToFile,
            link_values={
                "order": f["order"],
                "student_permission": f.get("student_permission") or StudentPermission.UPDATE,
            },
        )
        for f in files
    ))


def plan_answer_queries(queries: Iterable[Mapping], question_id) -> PostPlan:
    """Student copies of solution queries, linked to a student answer."""
    steps = []
    for item in queries:
        query = dict(item["query"])
        query["question_id"] = question_id
        leaves = [Leaf(DatabaseQuery, query, link_field="query_id")]
        leaves.extend(_output_test_leaves(item.get("output_tests") or ()))
        steps.append(LinkStep(
            leaves=tuple(leaves),
            link_model=StudentAnswerDatabaseToQuery,
            link_values={"order": query.get("order", 0)},
        ))
    return PostPlan(tuple(steps))
