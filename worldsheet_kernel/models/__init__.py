"""Worldsheet Kernel data models."""

from worldsheet_kernel.models.config import KernelConfig
from worldsheet_kernel.models.implication import (
    Condition,
    Implication,
    ImplicationRule,
)
from worldsheet_kernel.models.links import LinkConfig
from worldsheet_kernel.models.worksheet import (
    LinkedWorksheetRef,
    LinkState,
    Worksheet,
)

__all__ = [
    "Condition",
    "Implication",
    "ImplicationRule",
    "KernelConfig",
    "LinkConfig",
    "LinkState",
    "LinkedWorksheetRef",
    "Worksheet",
]
