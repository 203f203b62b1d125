"""
ECR Import — pull environmental parameters from an Environmental Chain
Reaction worksheet into a xenomythology framework's planetary conditions.

ECR parameters are mapped field-by-field; a later mapping onto the same
target field overwrites an earlier one. Every read goes through the path
accessor, so a partial or malformed ECR payload yields a smaller import.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, NamedTuple, Optional

from worldsheet_kernel.models.worksheet import Worksheet
from worldsheet_kernel.paths.accessor import get_path, last_segment

ECR_TOOL = "environmental-chain-reaction"

PLANETARY_CONDITION_FIELDS = [
    "planetType",
    "atmosphericComposition",
    "dayNightCycle",
    "seasonalVariation",
    "stellarEnvironment",
    "skyAppearance",
    "environmentalVolatility",
    "geographicDiversity",
]


class ParameterMapping(NamedTuple):
    field: str
    transform: Callable[[str], str]


def _table(mapping: Dict[str, str], default: str) -> Callable[[str], str]:
    return lambda value: mapping.get(value, default)


PARAMETER_MAPPINGS: Dict[str, ParameterMapping] = {
    "gravity": ParameterMapping(
        "planetaryConditions.planetType",
        _table({"high": "super-earth", "low": "low-gravity"}, "rocky-terrestrial"),
    ),
    "rotation": ParameterMapping(
        "planetaryConditions.dayNightCycle",
        _table({"slow": "long", "fast": "regular", "locked": "tidally-locked"}, "regular"),
    ),
    "stellar": ParameterMapping(
        "planetaryConditions.stellarEnvironment",
        _table({"binary": "binary", "reddwarf": "m-class", "rogue": "rogue"}, "g-class"),
    ),
    "hydrosphere": ParameterMapping(
        "planetaryConditions.planetType",
        _table({"ocean": "ocean-world", "desert": "desert"}, "rocky-terrestrial"),
    ),
    "atmosphere": ParameterMapping(
        "planetaryConditions.atmosphericComposition",
        _table({"thick": "nitrogen-rich", "thin": "thin", "exotic": "methane-rich"}, "oxygen-rich"),
    ),
    "tilt": ParameterMapping(
        "planetaryConditions.seasonalVariation",
        _table({"none": "none", "extreme": "extreme", "chaotic": "chaotic"}, "strong"),
    ),
}


class ImportedParameter(NamedTuple):
    field: str          # Leaf name in planetaryConditions
    value: str
    source: str         # e.g. "rotation: locked"


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _selected_parameters(ecr_data: Any) -> List[tuple]:
    """(parameter type, specific value, source label) selected in the ECR worksheet."""
    mode = get_path(ecr_data, "parameter.mode")
    selected = []

    if mode == "single":
        param_type = _text(get_path(ecr_data, "parameter.type"))
        if param_type:
            specific = _text(get_path(ecr_data, "parameter.specificValue"))
            selected.append((param_type, specific, specific or "selected"))

    elif mode == "multiple":
        types = get_path(ecr_data, "parameter.types")
        specifics = get_path(ecr_data, "parameter.specificValues")
        if isinstance(types, list):
            for param_type in types:
                if not isinstance(param_type, str):
                    continue
                specific = ""
                if isinstance(specifics, dict):
                    specific = _text(specifics.get(param_type))
                selected.append((param_type, specific, specific or param_type))

    return selected


def mapped_parameters(ecr_data: Any) -> List[ImportedParameter]:
    mapped = []
    for param_type, specific, label in _selected_parameters(ecr_data):
        mapping = PARAMETER_MAPPINGS.get(param_type)
        if mapping is None:
            continue
        raw = specific or param_type
        mapped.append(ImportedParameter(
            field=last_segment(mapping.field),
            value=mapping.transform(raw),
            source=f"{param_type}: {label}",
        ))
    return mapped


def import_preview(ecr_data: Any) -> List[ImportedParameter]:
    """What an import would write, one row per mapped parameter."""
    preview = mapped_parameters(ecr_data)
    if get_path(ecr_data, "synthesis.storyPotential"):
        preview.append(ImportedParameter(
            field="skyAppearance",
            value="(Will populate sky description hints)",
            source="ECR synthesis",
        ))
    return preview


def import_from_ecr(
    ecr_worksheet: Worksheet,
    link: bool = True,
    now: Optional[datetime] = None,
) -> dict:
    """
    Partial xenomythology form state built from an ECR worksheet.

    ``planetaryConditions`` carries every known field, blank where the ECR
    worksheet supplies nothing. With ``link`` the import also records which
    ECR worksheet it came from and when.
    """
    conditions = {name: "" for name in PLANETARY_CONDITION_FIELDS}
    for parameter in mapped_parameters(ecr_worksheet.data):
        conditions[parameter.field] = parameter.value

    imported: Dict[str, Any] = {"planetaryConditions": conditions}
    if link:
        stamp = now or datetime.now(timezone.utc)
        imported["_linkedWorksheets"] = {
            "ecrWorksheetId": ecr_worksheet.id,
            "lastSyncedAt": stamp.isoformat(),
        }
    return imported


def merge_import(form_state: dict, imported: dict) -> dict:
    """
    Apply an import onto an existing form state. Blank imported values never
    overwrite values the user has already filled in.
    """
    merged = dict(form_state)
    current = merged.get("planetaryConditions")
    conditions = dict(current) if isinstance(current, dict) else {}
    for name, value in imported.get("planetaryConditions", {}).items():
        if value or name not in conditions:
            conditions[name] = value
    merged["planetaryConditions"] = conditions
    if "_linkedWorksheets" in imported:
        merged["_linkedWorksheets"] = imported["_linkedWorksheets"]
    return merged
