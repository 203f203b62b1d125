"""
Implication Engine — surfaces suggested narrative consequences from a
species' biology and its environment.

Behavioral Contract:
- Stateless and idempotent: the same form state always yields the same
  implications in the same order.
- Full re-scan of the fixed rule table on every evaluation.
- Within a category, conditions are OR-combined; between the biology and
  environment categories, AND. An absent category is satisfied.
- A rule with no conditions in either category never fires.
- Output order is rule-table order. Overlapping rules all fire.
- Dismissal filters presentation only and never feeds back into evaluation.
"""

from typing import Any, Iterable, List, Optional

from worldsheet_kernel.implications.conditions import matches
from worldsheet_kernel.implications.rules import IMPLICATION_RULES
from worldsheet_kernel.models.implication import Condition, Implication, ImplicationRule
from worldsheet_kernel.paths.accessor import last_segment


def _category_ok(form_state: Any, conditions: Optional[List[Condition]]) -> bool:
    # An absent category is satisfied; an empty one can never be
    if conditions is None:
        return True
    return any(matches(form_state, c) for c in conditions)


def _matched_factors(form_state: Any, conditions: Optional[List[Condition]]) -> List[str]:
    """Leaf names of the individual conditions that matched."""
    return [
        last_segment(c.field)
        for c in conditions or []
        if matches(form_state, c)
    ]


def evaluate_rule(rule: ImplicationRule, form_state: Any) -> Optional[Implication]:
    """The Implication a single rule produces for ``form_state``, or None."""
    if not rule.biology_conditions and not rule.environment_conditions:
        return None

    if not _category_ok(form_state, rule.biology_conditions):
        return None
    if not _category_ok(form_state, rule.environment_conditions):
        return None

    return Implication(
        id=rule.id,
        perceived_constant=rule.perceived_constant,
        archetype_channel=rule.archetype_channel,
        explanation=rule.explanation,
        biology_factors=_matched_factors(form_state, rule.biology_conditions),
        environment_factors=_matched_factors(form_state, rule.environment_conditions),
        suggested_archetype_form=rule.suggested_archetype_form,
    )


class ImplicationEngine:
    """Evaluates a rule table against worksheet form state."""

    def __init__(self, rules: Optional[List[ImplicationRule]] = None):
        self._rules = list(IMPLICATION_RULES if rules is None else rules)

    @property
    def rules(self) -> List[ImplicationRule]:
        return list(self._rules)

    def evaluate(self, form_state: Any) -> List[Implication]:
        implications = []
        for rule in self._rules:
            implication = evaluate_rule(rule, form_state)
            if implication is not None:
                implications.append(implication)
        return implications


def visible_implications(
    implications: List[Implication],
    dismissed_ids: Iterable[str],
) -> List[Implication]:
    """Implications still to be shown after the user's dismissals."""
    dismissed = set(dismissed_ids)
    return [i for i in implications if i.id not in dismissed]


def generate_implications(form_state: Any) -> List[Implication]:
    """Evaluate the built-in rule table."""
    return ImplicationEngine().evaluate(form_state)
