"""Implication rules — biology + environment → perceived constants → archetypes."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Condition(BaseModel):
    """A field must hold (or, for list fields, contain) one of ``values``."""

    field: str
    values: List[str]


class ImplicationRule(BaseModel):
    """
    A static rule. Conditions are OR-combined within a category and the two
    categories are AND-combined. A rule with no conditions never fires.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    biology_conditions: Optional[List[Condition]] = None
    environment_conditions: Optional[List[Condition]] = None
    perceived_constant: str
    archetype_channel: str
    explanation: str
    suggested_archetype_form: Optional[str] = None


class Implication(BaseModel):
    """A fired rule plus the field names that made it fire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    perceived_constant: str
    archetype_channel: str
    explanation: str
    biology_factors: List[str] = []
    environment_factors: List[str] = []
    suggested_archetype_form: Optional[str] = None
