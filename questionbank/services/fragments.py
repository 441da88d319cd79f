"""
Projection fragment builders.

Each builder is a pure function of its parameters and returns a fresh spec.
Variant-dependent fragments are assembled from the registry, never from a
hard-coded list of fields.
"""
from questionbank.services.projection import Nested, ProjectionSpec, compose
from questionbank.services.registry import all_variants

EDITOR_FIELDS = (
    "title", "scratchpad", "group_id", "status", "usage_status", "source",
    "source_question_id", "created_at", "updated_at",
)


def base_fields(include_editor_info: bool = False) -> ProjectionSpec:
    spec = {"id": True, "type": True, "content": True}
    if include_editor_info:
        spec.update({name: True for name in EDITOR_FIELDS})
    return spec


def tags() -> ProjectionSpec:
    return {"tags": Nested({"group_id": True, "label": True}, order_by=("label",))}


def usage_info() -> ProjectionSpec:
    return {
        "usage_status": True,
        "last_used": True,
        "source": True,
        "source_question": Nested({"id": True, "title": True, "source": True}),
    }


def type_specific_public() -> ProjectionSpec:
    return compose(*(schema.public() for schema in all_variants()))


def official_answers() -> ProjectionSpec:
    return compose(*(schema.official() for schema in all_variants()))


def _answer_select() -> ProjectionSpec:
    return compose(
        {"id": True, "user_email": True, "status": True},
        *(schema.participant_answer() for schema in all_variants()),
    )


def participant_answers(user_email: str) -> ProjectionSpec:
    """Answers of one participant only."""
    return {"student_answers": Nested(_answer_select(), where={"user_email": user_email})}


def all_participant_answers() -> ProjectionSpec:
    return {"student_answers": Nested(_answer_select(), order_by=("user_email",))}


def gradings() -> ProjectionSpec:
    return {
        "student_answers": Nested({
            "grading": Nested({
                "status": True,
                "points_obtained": True,
                "comment": True,
                "signed_by": True,
            }),
        })
    }
