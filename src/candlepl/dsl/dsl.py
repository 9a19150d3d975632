"""Declarative pattern definitions parsed into pattern values."""
from __future__ import annotations

from dataclasses import dataclass, field
from functools import reduce
from typing import Any, Dict, List, Optional, Union

from candlepl.config import SEQUENCE_BOUNDARY, BoundaryConvention
from candlepl.dsl.patterns import (
    Pattern,
    constrained_by,
    followed_by,
    overlay,
    span_length_between,
)
from candlepl.dsl.predicates import bar_pattern, registry, run_pattern


@dataclass
class PatternExpression:
    name: str
    params: Dict[str, Any]
    children: List["PatternExpression"]
    constraint: Dict[str, Any] = field(default_factory=dict)

    def build(self, boundary: Optional[BoundaryConvention] = None) -> Pattern:
        pattern = self._build_core(boundary or SEQUENCE_BOUNDARY)
        if self.constraint:
            pattern = constrained_by(
                pattern,
                span_length_between(
                    min_length=int(self.constraint.get("min_length", 1)),
                    max_length=_optional_int(self.constraint.get("max_length")),
                ),
            )
        return pattern

    def _build_core(self, boundary: BoundaryConvention) -> Pattern:
        if self.name == "FOLLOWED_BY":
            if len(self.children) < 2:
                raise ValueError("FOLLOWED_BY needs at least two children")
            local = BoundaryConvention(self.params["boundary"]) if "boundary" in self.params else boundary
            parts = [child.build(boundary) for child in self.children]
            return reduce(lambda left, right: followed_by(left, right, local), parts)
        if self.name == "OVERLAY":
            if len(self.children) < 2:
                raise ValueError("OVERLAY needs at least two children")
            parts = [child.build(boundary) for child in self.children]
            return reduce(overlay, parts)
        if self.name == "RUN":
            params = dict(self.params)
            min_length = int(params.pop("min_length", 1))
            max_length = _optional_int(params.pop("max_length", None))
            if self.children:
                if len(self.children) != 1:
                    raise ValueError("RUN takes a single predicate child")
                child = self.children[0]
                predicate, predicate_params = child.name, child.params
            elif "predicate" in params:
                predicate = params.pop("predicate")
                predicate_params = params
            else:
                raise ValueError("RUN needs a predicate child or 'predicate' param")
            return run_pattern(predicate, min_length=min_length, max_length=max_length, **predicate_params)
        if self.name in registry:
            if self.children:
                raise ValueError(f"Predicate {self.name} does not take children")
            return bar_pattern(self.name, **self.params)
        raise KeyError(f"Unknown pattern {self.name}")


def _optional_int(value: Any) -> Optional[int]:
    return int(value) if value is not None else None


def parse_pattern(definition: Dict[str, Any]) -> PatternExpression:
    name = definition.get("name")
    if not name:
        raise KeyError("Pattern definition needs a 'name'")
    params = definition.get("params", {}) or {}
    children_defs = definition.get("children", []) or []
    children = [parse_pattern(child) for child in children_defs]
    constraint = definition.get("constraint", {}) or {}
    return PatternExpression(name=str(name).upper(), params=dict(params), children=children, constraint=dict(constraint))


def build_pattern(
    definition: Union[Dict[str, Any], PatternExpression],
    boundary: Optional[BoundaryConvention] = None,
) -> Pattern:
    expression = definition if isinstance(definition, PatternExpression) else parse_pattern(definition)
    return expression.build(boundary)
