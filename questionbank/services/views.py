"""
Named view catalog.

The fixed set of projections the rest of the application may request, one per
use case. Views are not built dynamically: a new use case means a new entry
here, which keeps every possible field exposure listed in one place and lets
``verify_catalog`` audit the participant-facing ones.
"""
from dataclasses import dataclass, field
import enum
import logging
from typing import Any, Callable, Dict

from questionbank.core.errors import ProjectionError
from questionbank.services.fragments import (
    all_participant_answers, base_fields, gradings, official_answers,
    participant_answers, tags, type_specific_public, usage_info,
)
from questionbank.services.projection import ProjectionSpec, compose
from questionbank.services.registry import exposed_official_fields

logger = logging.getLogger(__name__)


class Audience(str, enum.Enum):
    EDITOR = "editor"
    PARTICIPANT = "participant"
    GRADER = "grader"
    SYSTEM = "system"


@dataclass(frozen=True)
class NamedView:
    name: str
    audience: Audience
    builder: Callable[..., ProjectionSpec]
    description: str
    # parameters used when auditing the view
    sample_params: Dict[str, Any] = field(default_factory=dict)


def _editor_full():
    return compose(base_fields(True), tags(), usage_info(), type_specific_public(), official_answers())


def _listing_summary():
    return compose(base_fields(True), tags(), usage_info())


def _composition_preview(reveal_official_answers: bool = False):
    fragments = [base_fields(True), type_specific_public()]
    if reveal_official_answers:
        fragments.append(official_answers())
    return compose(*fragments)


def _participant_join():
    return compose(base_fields(), type_specific_public())


def _participant_export(user_email: str):
    return compose(base_fields(), type_specific_public(), participant_answers(user_email), gradings())


def _grader_full():
    return compose(
        base_fields(True), type_specific_public(), official_answers(),
        all_participant_answers(), gradings(),
    )


def _grader_export(include_submissions: bool = True):
    fragments = [base_fields(True), type_specific_public(), official_answers()]
    if include_submissions:
        fragments.extend([all_participant_answers(), gradings()])
    return compose(*fragments)


def _bank_export():
    # never carries submissions: copies and exports start from the question alone
    return compose(base_fields(True), tags(), type_specific_public(), official_answers())


def _answer_seed():
    return compose(base_fields(), type_specific_public(), official_answers())


CATALOG: Dict[str, NamedView] = {
    view.name: view
    for view in (
        NamedView("editor_full", Audience.EDITOR, _editor_full,
                  "Question editor: everything including official answers."),
        NamedView("listing_summary", Audience.EDITOR, _listing_summary,
                  "Question lists: base fields, tags and usage."),
        NamedView("composition_preview", Audience.EDITOR, _composition_preview,
                  "Preview of a composition, official answers on request."),
        NamedView("participant_join", Audience.PARTICIPANT, _participant_join,
                  "A participant taking an evaluation."),
        NamedView("participant_export", Audience.PARTICIPANT, _participant_export,
                  "A participant consulting their own answers and grades.",
                  sample_params={"user_email": "audit@example.org"}),
        NamedView("grader_full", Audience.GRADER, _grader_full,
                  "Grading: official answers, all submissions and gradings."),
        NamedView("grader_export", Audience.GRADER, _grader_export,
                  "Evaluation export for graders."),
        NamedView("bank_export", Audience.SYSTEM, _bank_export,
                  "Replication and portable export."),
        NamedView("answer_seed", Audience.SYSTEM, _answer_seed,
                  "Server-side answer sheet seeding, never returned to a client."),
    )
}


def get_view(name: str, **params) -> ProjectionSpec:
    return CATALOG[name].builder(**params)


def views_for(audience: Audience):
    return [view for view in CATALOG.values() if view.audience == audience]


def verify_catalog() -> None:
    """Raise ``ProjectionError`` if a participant view would expose official-answer data."""
    for view in views_for(Audience.PARTICIPANT):
        findings = exposed_official_fields(view.builder(**view.sample_params))
        if findings:
            raise ProjectionError(f"View {view.name!r} exposes: {'; '.join(findings)}")
    logger.info(f"View catalog verified: {len(CATALOG)} views")
