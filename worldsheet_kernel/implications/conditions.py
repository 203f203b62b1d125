"""Condition Evaluator — does a form-state field satisfy one Condition?"""

from typing import Any

from worldsheet_kernel.models.implication import Condition
from worldsheet_kernel.paths.accessor import MISSING, get_path


def matches(record: Any, condition: Condition) -> bool:
    """
    List-valued fields match if any element is one of ``condition.values``;
    scalar fields match if the value itself is. Missing fields never match,
    and no type coercion is performed.
    """
    value = get_path(record, condition.field)
    if value is MISSING:
        return False
    if isinstance(value, list):
        return any(v in condition.values for v in value)
    return value in condition.values
