"""
ROI filter over inference results.

Filter conditions are small boolean expressions over result attributes:

    label == happy
    label=happy && confidence >= 0.5
    label != neutral || confidence > 0.9

Operators: ==, = (same as ==), !=, >, >=, <, <=. Conditions are joined
with && / || (or `and` / `or`); && binds tighter. An empty string matches
every result.
"""

from __future__ import annotations

import logging
import operator
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Sequence

from models.detection import BoundingBox
from models.result import Result


class FilterSyntaxError(ValueError):
    """Raised for conditions that cannot be parsed or evaluated."""


_OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "=": operator.eq,
    "!=": operator.ne,
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
}

# attribute -> operators it accepts
_ATTRIBUTE_OPERATORS = {
    "label": {"==", "=", "!="},
    "confidence": set(_OPERATORS),
}

_CONDITION_RE = re.compile(r"^\s*([A-Za-z_]\w*)\s*(==|!=|>=|<=|=|>|<)\s*(.*?)\s*$")
_OPERATOR_CHARS_RE = re.compile(r"[=!<>]")
_OR_RE = re.compile(r"\|\||\s+or\s+", re.IGNORECASE)
_AND_RE = re.compile(r"&&|\s+and\s+", re.IGNORECASE)


@dataclass(frozen=True)
class Condition:
    attribute: str
    op: str
    value: Any

    def evaluate(self, result: Result) -> bool:
        if not result.supports(self.attribute):
            raise FilterSyntaxError(
                f"{type(result).__name__} does not support attribute '{self.attribute}'"
            )
        return _OPERATORS[self.op](result.get_attribute(self.attribute), self.value)


def _parse_condition(text: str) -> Condition:
    m = _CONDITION_RE.match(text)
    if not m:
        raise FilterSyntaxError(f"Malformed condition: '{text.strip()}'")
    attribute, op, raw = m.group(1).lower(), m.group(2), m.group(3)

    if attribute not in _ATTRIBUTE_OPERATORS:
        raise FilterSyntaxError(f"Unknown filter attribute: '{attribute}'")
    if op not in _ATTRIBUTE_OPERATORS[attribute]:
        raise FilterSyntaxError(f"Operator '{op}' is not supported for '{attribute}'")

    value = raw.strip("'\"")
    if not value:
        raise FilterSyntaxError(f"Missing value in condition: '{text.strip()}'")
    if _OPERATOR_CHARS_RE.search(value):
        raise FilterSyntaxError(f"Unexpected operator in value of condition: '{text.strip()}'")

    if attribute == "confidence":
        try:
            return Condition(attribute, op, float(value))
        except ValueError:
            raise FilterSyntaxError(f"Confidence must be a number, got '{value}'") from None
    return Condition(attribute, op, value)


class RoiFilter:
    """
    Parsed filter: a disjunction of conjunctions of conditions.

    Raises:
        FilterSyntaxError: If `conditions` is malformed.
    """

    def __init__(self, conditions: str):
        self.conditions = conditions or ""
        self._clauses: List[List[Condition]] = []

        if not self.conditions.strip():
            return
        for clause in _OR_RE.split(self.conditions):
            if not clause.strip():
                raise FilterSyntaxError(f"Dangling '||' in '{self.conditions}'")
            parts = _AND_RE.split(clause)
            if any(not p.strip() for p in parts):
                raise FilterSyntaxError(f"Dangling '&&' in '{self.conditions}'")
            self._clauses.append([_parse_condition(p) for p in parts])

    @property
    def matches_all(self) -> bool:
        return not self._clauses

    def matches(self, result: Result) -> bool:
        if self.matches_all:
            return True
        return any(all(c.evaluate(result) for c in clause) for clause in self._clauses)

    def apply(self, results: Sequence[Result]) -> List[BoundingBox]:
        """ROIs of matching results, in store order."""
        return [r.get_location() for r in results if self.matches(r)]


def is_valid_filter_conditions(conditions: str) -> bool:
    try:
        RoiFilter(conditions)
    except FilterSyntaxError:
        return False
    return True


def filter_rois(results: Sequence[Result], conditions: str) -> List[BoundingBox]:
    """
    Evaluate `conditions` against `results` and return matching ROIs.

    A malformed condition is logged and yields an empty list.
    """
    try:
        return RoiFilter(conditions).apply(results)
    except FilterSyntaxError as e:
        logging.error(f"Invalid filter conditions '{conditions}': {e}")
        return []
