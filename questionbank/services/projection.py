"""
Projection specs: declarative "which fields and relations to fetch" trees.

A spec is a plain dict keyed by attribute name. Each value is either ``True``
(the scalar column, or every scalar column of a related row) or a ``Nested``
node carrying a sub-spec and optional ``where`` / ``order_by`` modifiers.

Specs are values. Builders return fresh trees and ``compose`` never mutates
its inputs, so fragments can be shared freely between views.
"""
import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

from questionbank.core.errors import ProjectionError


class _Unfiltered:
    """Explicit widening marker for ``Nested.where``."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNFILTERED"

    def __deepcopy__(self, memo):
        return self


UNFILTERED = _Unfiltered()

Where = Union[None, _Unfiltered, Dict[str, Any]]


@dataclass
class Nested:
    select: Dict[str, Any] = field(default_factory=dict)
    where: Where = None
    order_by: Optional[Tuple[str, ...]] = None

    def __post_init__(self):
        if isinstance(self.order_by, str):
            self.order_by = (self.order_by,)
        elif self.order_by is not None:
            self.order_by = tuple(self.order_by)


Node = Union[bool, Nested]
ProjectionSpec = Dict[str, Node]


def _check(key: str, node: Any) -> None:
    if node is not True and not isinstance(node, Nested):
        raise ProjectionError(f"Invalid projection node for {key!r}: {node!r}")


def _merge_where(left: Where, right: Where) -> Where:
    if left is UNFILTERED or right is UNFILTERED:
        return UNFILTERED
    if left is None:
        return copy.deepcopy(right)
    if right is None:
        return copy.deepcopy(left)
    merged = copy.deepcopy(left)
    merged.update(copy.deepcopy(right))
    return merged


def merge_node(key: str, left: Node, right: Node) -> Node:
    _check(key, left)
    _check(key, right)
    if left is True and right is True:
        return True
    if left is True:
        return copy.deepcopy(right)
    if right is True:
        return copy.deepcopy(left)
    return Nested(
        select=merge_specs(left.select, right.select),
        where=_merge_where(left.where, right.where),
        order_by=right.order_by if right.order_by is not None else left.order_by,
    )


def merge_specs(left: ProjectionSpec, right: ProjectionSpec) -> ProjectionSpec:
    """Deep union of two specs. Neither argument is modified."""
    result: ProjectionSpec = {}
    for key, node in left.items():
        _check(key, node)
        result[key] = copy.deepcopy(node)
    for key, node in right.items():
        if key in result:
            result[key] = merge_node(key, result[key], node)
        else:
            _check(key, node)
            result[key] = copy.deepcopy(node)
    return result


def compose(*fragments: ProjectionSpec) -> ProjectionSpec:
    result: ProjectionSpec = {}
    for fragment in fragments:
        result = merge_specs(result, fragment)
    return result
