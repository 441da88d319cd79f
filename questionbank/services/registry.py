"""
Variant registry: the single source of truth for what each question variant
looks like, which of its fields are official-answer data, and how it is
replicated, exported, imported and seeded into an answer sheet.

Every member of ``QuestionType`` must have exactly one variant module; the
registry refuses to build otherwise, so a new variant cannot be added without
declaring its official fields.
"""
from dataclasses import dataclass
from types import ModuleType
from typing import Any, Callable, Dict, List, Mapping, Tuple

from sqlalchemy import inspect

from questionbank.core.errors import ProjectionError, UnknownVariant
from questionbank.models.orm import Question, QuestionType
from questionbank.services.projection import UNFILTERED, Nested, ProjectionSpec
from questionbank.variants import (
    code, database, essay, exact_match, multiple_choice, true_false, web,
)


@dataclass(frozen=True)
class VariantSchema:
    type: QuestionType
    relation: str
    public: Callable[[], ProjectionSpec]
    official: Callable[[], ProjectionSpec]
    participant_answer: Callable[[], ProjectionSpec]
    official_fields: Mapping[type, Tuple[str, ...]]
    guarded_relations: Mapping[Tuple[type, str], Dict[str, Any]]
    replicator: Callable
    exporter: Callable
    importer: Callable
    seeder: Callable


def _schema(module: ModuleType) -> VariantSchema:
    return VariantSchema(
        type=module.TYPE,
        relation=module.RELATION,
        public=module.public,
        official=module.official,
        participant_answer=module.participant_answer,
        official_fields=module.OFFICIAL_FIELDS,
        guarded_relations=module.GUARDED_RELATIONS,
        replicator=module.replicate,
        exporter=module.export,
        importer=module.build,
        seeder=module.seed,
    )


def _build(modules) -> Dict[QuestionType, VariantSchema]:
    registry: Dict[QuestionType, VariantSchema] = {}
    for module in modules:
        schema = _schema(module)
        if schema.type in registry:
            raise UnknownVariant(schema.type, f"Variant {schema.type.value!r} registered twice")
        registry[schema.type] = schema
    missing = [t for t in QuestionType if t not in registry]
    if missing:
        raise UnknownVariant(missing[0], f"No variant module for {', '.join(t.value for t in missing)}")
    # keep the enum order so composed specs are deterministic
    return {t: registry[t] for t in QuestionType}


REGISTRY = _build((multiple_choice, true_false, essay, web, exact_match, code, database))


def describe(tag) -> VariantSchema:
    try:
        return REGISTRY[QuestionType(tag)]
    except ValueError:
        raise UnknownVariant(tag)


def all_variants() -> List[VariantSchema]:
    return list(REGISTRY.values())


def variant_record(graph: Mapping[str, Any]) -> Tuple[VariantSchema, Dict[str, Any]]:
    """Return the schema and type-specific record of a hydrated question.

    Raises ``UnknownVariant`` when the record does not match ``type``.
    """
    schema = describe(graph["type"])
    record = graph.get(schema.relation)
    if record is None:
        raise UnknownVariant(
            graph["type"], f"Question {graph.get('id')} has no {schema.relation!r} record"
        )
    for other in all_variants():
        if other is not schema and graph.get(other.relation) is not None:
            raise UnknownVariant(
                graph["type"],
                f"Question {graph.get('id')} of type {schema.type.value!r} "
                f"also carries a {other.relation!r} record",
            )
    return schema, record


# ---------- leakage audit ----------

def official_field_index() -> Dict[type, set]:
    index: Dict[type, set] = {}
    for schema in all_variants():
        for cls, names in schema.official_fields.items():
            index.setdefault(cls, set()).update(names)
    return index


def guarded_relation_index() -> Dict[Tuple[type, str], Dict[str, Any]]:
    index = {}
    for schema in all_variants():
        index.update(schema.guarded_relations)
    return index


def _guarded(node, required: Dict[str, Any]) -> bool:
    if not isinstance(node, Nested) or node.where is None or node.where is UNFILTERED:
        return False
    return all(node.where.get(key) == value for key, value in required.items())


def exposed_official_fields(spec: ProjectionSpec, root: type = Question) -> List[str]:
    """List every official-answer field or unguarded relation ``spec`` would expose.

    The walk follows the mapped model, so a ``True`` node on a relation counts
    every column of the related rows.
    """
    official = official_field_index()
    guarded = guarded_relation_index()
    findings: List[str] = []

    def walk(cls, node_spec, path):
        mapper = inspect(cls)
        for key, node in node_spec.items():
            location = f"{path}.{key}" if path else key
            if key in official.get(cls, ()):
                findings.append(f"{location} ({cls.__name__}.{key} is official-answer data)")
                continue
            if key in mapper.relationships:
                target = mapper.relationships[key].mapper.class_
                if (cls, key) in guarded and not _guarded(node, guarded[(cls, key)]):
                    findings.append(f"{location} (requires filter {guarded[(cls, key)]!r})")
                if node is True:
                    for column in inspect(target).column_attrs:
                        if column.key in official.get(target, ()):
                            findings.append(f"{location}.{column.key} "
                                            f"({target.__name__}.{column.key} is official-answer data)")
                else:
                    walk(target, node.select, location)
            elif key not in mapper.column_attrs:
                raise ProjectionError(f"{cls.__name__} has no attribute {key!r}")

    walk(root, spec, "")
    return findings
