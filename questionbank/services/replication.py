"""
Deep copy of a question graph under new identities.

A copy is fetched through the ``bank_export`` view (official data, no
submissions), rebuilt by the replicator of its variant, then completed by the
variant's post-plan once the new question id exists. The whole operation runs
inside one transaction.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from questionbank.core.config import settings
from questionbank.core.database import atomic
from questionbank.models.orm import (
    Question, QuestionSource, QuestionStatus, QuestionTag, QuestionUsageStatus,
)
from questionbank.services.hydrate import fetch_question
from questionbank.services.post_plan import execute
from questionbank.services.registry import variant_record
from questionbank.services.views import get_view

logger = logging.getLogger(__name__)


def _default_prefix(provenance: QuestionSource) -> str:
    return settings.COPY_TITLE_PREFIX if provenance == QuestionSource.COPY else ""


def build_question(source: Dict[str, Any], provenance: QuestionSource, title_prefix: str) -> Question:
    """Variant-independent part of a copy."""
    return Question(
        group_id=source["group_id"],
        type=source["type"],
        title=f"{title_prefix}{source['title']}",
        content=source["content"],
        scratchpad=source["scratchpad"],
        status=QuestionStatus.ACTIVE,
        usage_status=(
            QuestionUsageStatus.NOT_APPLICABLE
            if provenance == QuestionSource.EVAL else QuestionUsageStatus.UNUSED
        ),
        source=provenance,
        source_question_id=source["id"],
        tags=[QuestionTag(group_id=t["group_id"], label=t["label"]) for t in source["tags"]],
    )


def _replicate_graph(session: Session, source: Dict[str, Any], provenance, title_prefix) -> Question:
    schema, record = variant_record(source)
    question = build_question(source, provenance, title_prefix)
    variant, plan = schema.replicator(record)
    setattr(question, schema.relation, variant)
    session.add(question)
    session.flush()
    execute(session, plan, {"question_id": question.id})
    logger.debug(f"replicated {schema.type.value} question {source['id']} with {len(plan)} linked children")
    return question


def replicate(
    session: Session,
    question_id,
    provenance: QuestionSource = QuestionSource.COPY,
    title_prefix: Optional[str] = None,
) -> Question:
    provenance = QuestionSource(provenance)
    prefix = _default_prefix(provenance) if title_prefix is None else title_prefix
    with atomic(session, "replicate"):
        source = fetch_question(session, question_id, get_view("bank_export"))
        question = _replicate_graph(session, source, provenance, prefix)
    logger.info(f"Replicated question {question_id} as {question.id} ({provenance.value})")
    return question


def replicate_many(
    session: Session,
    question_ids: Iterable,
    provenance: QuestionSource = QuestionSource.EVAL,
    title_prefix: Optional[str] = None,
) -> List[Question]:
    """Copy several questions in one transaction; results follow the input order."""
    provenance = QuestionSource(provenance)
    prefix = _default_prefix(provenance) if title_prefix is None else title_prefix
    ids = list(question_ids)
    spec = get_view("bank_export")
    with atomic(session, "replicate_many"):
        copies = [
            _replicate_graph(session, fetch_question(session, question_id, spec), provenance, prefix)
            for question_id in ids
        ]
    logger.info(f"Replicated {len(copies)} questions ({provenance.value})")
    return copies
