"""
Execute projection specs against the mapped model.

``hydrate`` walks a spec over a loaded instance and returns plain nested dicts
keyed by attribute name. Row filters and ordering of nested nodes are applied
in SQL, so rows a projection excludes are never loaded.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import inspect, select
from sqlalchemy.orm import MANYTOONE, Session, with_parent

from questionbank.core.errors import ProjectionError, SourceNotFound
from questionbank.models.orm import Question
from questionbank.services.projection import UNFILTERED, Nested, ProjectionSpec

logger = logging.getLogger(__name__)


def _column(cls, name: str):
    mapper = inspect(cls)
    if name not in mapper.column_attrs:
        raise ProjectionError(f"{cls.__name__} has no column {name!r}")
    return getattr(cls, name)


def _criterion(column, condition):
    if isinstance(condition, dict):
        if "not" in condition:
            value = condition["not"]
            return column.is_not(None) if value is None else column != value
        if "in" in condition:
            return column.in_(list(condition["in"]))
        raise ProjectionError(f"Unsupported condition on {column.key}: {condition!r}")
    if condition is None:
        return column.is_(None)
    return column == condition


def _apply_where(stmt, target, where):
    if where is None or where is UNFILTERED:
        return stmt
    for name, condition in where.items():
        stmt = stmt.where(_criterion(_column(target, name), condition))
    return stmt


def _apply_order(stmt, target, order_by: Optional[Iterable[str]]):
    for term in order_by or ():
        descending = term.startswith("-")
        path = term.lstrip("-")
        if "." in path:
            relation_name, column_name = path.split(".", 1)
            mapper = inspect(target)
            if relation_name not in mapper.relationships:
                raise ProjectionError(f"{target.__name__} has no relation {relation_name!r}")
            relation = getattr(target, relation_name)
            stmt = stmt.join(relation)
            column = _column(mapper.relationships[relation_name].mapper.class_, column_name)
        else:
            column = _column(target, path)
        stmt = stmt.order_by(column.desc() if descending else column.asc())
    # primary key last, for a stable order among ties
    for pk in inspect(target).primary_key:
        stmt = stmt.order_by(pk.asc())
    return stmt


def columns(instance) -> Dict[str, Any]:
    return {attr.key: getattr(instance, attr.key) for attr in inspect(type(instance)).column_attrs}


def _relation(session: Session, instance, relationship, node) -> Any:
    target = relationship.mapper.class_
    if relationship.direction is MANYTOONE:
        mapper = inspect(type(instance))
        if all(getattr(instance, mapper.get_property_by_column(c).key) is None
               for c in relationship.local_columns):
            return None
    stmt = select(target).where(with_parent(instance, getattr(type(instance), relationship.key)))
    if isinstance(node, Nested):
        stmt = _apply_where(stmt, target, node.where)
        stmt = _apply_order(stmt, target, node.order_by)
    else:
        stmt = _apply_order(stmt, target, None)
    rows = session.scalars(stmt).unique().all()

    def render(row):
        return columns(row) if node is True else hydrate(session, row, node.select)

    if relationship.uselist:
        return [render(row) for row in rows]
    return render(rows[0]) if rows else None


def hydrate(session: Session, instance, spec: ProjectionSpec) -> Dict[str, Any]:
    mapper = inspect(type(instance))
    result: Dict[str, Any] = {}
    for key, node in spec.items():
        if key in mapper.relationships:
            result[key] = _relation(session, instance, mapper.relationships[key], node)
        elif key in mapper.column_attrs:
            if node is not True:
                raise ProjectionError(f"{mapper.class_.__name__}.{key} is a column, not a relation")
            result[key] = getattr(instance, key)
        else:
            raise ProjectionError(f"{mapper.class_.__name__} has no attribute {key!r}")
    return result


def fetch_question(session: Session, question_id, spec: ProjectionSpec) -> Dict[str, Any]:
    question = session.get(Question, question_id)
    if question is None:
        raise SourceNotFound(question_id)
    return hydrate(session, question, spec)


def fetch_questions(session: Session, question_ids, spec: ProjectionSpec) -> List[Dict[str, Any]]:
    """Hydrate several questions, in the requested order."""
    return [fetch_question(session, question_id, spec) for question_id in question_ids]


def fetch_group_questions(session: Session, group_id, spec: ProjectionSpec) -> List[Dict[str, Any]]:
    questions = session.scalars(
        select(Question).where(Question.group_id == group_id).order_by(Question.created_at, Question.id)
    ).all()
    logger.debug(f"hydrating {len(questions)} questions of group {group_id}")
    return [hydrate(session, question, spec) for question in questions]
