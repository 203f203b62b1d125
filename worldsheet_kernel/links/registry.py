"""
Link Registry — the declarative table of cross-worksheet links.

Maps a source tool-type to the link slots it offers. New tools opt into
linking by adding an entry here; sync and lifecycle code never change.
"""

from typing import Dict, List, Optional

from worldsheet_kernel.models.links import LinkConfig


class LinkConfigNotFound(KeyError):
    """Raised when a (tool, key) pair names no registered link slot."""
    pass


# Tool-type tags and their display names
TOOL_DISPLAY_NAMES: Dict[str, str] = {
    "planetary-profile": "Planetary Profile",
    "environmental-chain-reaction": "Environmental Chain Reaction",
    "evolutionary-biology": "Evolutionary Biology",
    "xenomythology-framework-builder": "Xenomythology Framework",
    "spacecraft-designer": "Spacecraft Designer",
    "propulsion-consequences-map": "Propulsion Consequences Map",
    "drake-equation-calculator": "Drake Equation Calculator",
}


def _link(**kwargs) -> LinkConfig:
    return LinkConfig(**kwargs)


WORKSHEET_LINKS: Dict[str, List[LinkConfig]] = {
    "environmental-chain-reaction": [
        _link(
            key="planet",
            target_tool="planetary-profile",
            label="Planet",
            sync_fields=[
                "stellarEnvironment.starType",
                "stellarEnvironment.tidalLocking",
                "physicalCharacteristics.surfaceGravity",
                "physicalCharacteristics.dayLength",
                "atmosphericComposition.primaryGases",
                "atmosphericComposition.atmosphericPressure",
                "temperatureProfile.averageSurfaceTemp",
                "hydrosphere.waterPresence",
            ],
            description="Link to a planet to import environmental parameters",
        ),
    ],
    "evolutionary-biology": [
        _link(
            key="planet",
            target_tool="planetary-profile",
            label="Home Planet",
            sync_fields=[
                "starType",
                "atmosphereType",
                "gravity",
                "dayLength",
                "orbitalPeriod",
                "temperature",
            ],
            description="Link to a planetary profile for environmental context",
        ),
        _link(
            key="ecr",
            target_tool="environmental-chain-reaction",
            label="Environment",
            sync_fields=[
                "primaryClimatePressures",
                "ecosystemComplexity",
                "initialChange",
                "cascadeEffects",
            ],
            description="Link to an environmental analysis for ecosystem data",
        ),
    ],
    "xenomythology-framework-builder": [
        _link(
            key="planet",
            target_tool="planetary-profile",
            label="Planet",
            sync_fields=["starType", "atmosphereType", "dayLength", "gravity"],
            description="Link to a planetary profile for world context",
        ),
        _link(
            key="ecr",
            target_tool="environmental-chain-reaction",
            label="Environment",
            sync_fields=["climate", "biomes", "hazards"],
            description="Link to an environmental analysis",
        ),
        _link(
            key="species",
            target_tool="evolutionary-biology",
            label="Species Biology",
            sync_fields=[
                "biochemistry.biochemicalBasis",
                "bodyPlan.symmetry",
                "sensory.primarySenses",
                "cognition.cognitionType",
                "social.socialStructure",
            ],
            description="Link to a species design for biological foundation",
        ),
    ],
    "spacecraft-designer": [
        _link(
            key="propulsion",
            target_tool="propulsion-consequences-map",
            label="Propulsion System",
            sync_fields=["propulsionType", "fuelType", "maxVelocity", "consequences"],
            description="Link to a propulsion analysis for drive specifications",
        ),
    ],
}


def configs_for(
    tool_type: str,
    registry: Optional[Dict[str, List[LinkConfig]]] = None,
) -> List[LinkConfig]:
    """All link slots offered by a tool; empty if it registers none."""
    table = WORKSHEET_LINKS if registry is None else registry
    return list(table.get(tool_type, []))


def config_for(
    tool_type: str,
    key: str,
    registry: Optional[Dict[str, List[LinkConfig]]] = None,
) -> Optional[LinkConfig]:
    """A single link slot, or None."""
    return next(
        (c for c in configs_for(tool_type, registry) if c.key == key), None
    )


def require_config(
    tool_type: str,
    key: str,
    registry: Optional[Dict[str, List[LinkConfig]]] = None,
) -> LinkConfig:
    config = config_for(tool_type, key, registry)
    if config is None:
        raise LinkConfigNotFound(f"No link '{key}' registered for tool '{tool_type}'")
    return config


def tool_display_name(tool_type: str) -> str:
    return TOOL_DISPLAY_NAMES.get(tool_type, tool_type)


def validate_link_registry(
    registry: Optional[Dict[str, List[LinkConfig]]] = None,
    known_tools: Optional[List[str]] = None,
) -> List[str]:
    """
    Check a link table for authoring defects.

    Returns a list of human-readable problems; an empty list means the table
    is well-formed. Nothing at runtime depends on this passing.
    """
    table = WORKSHEET_LINKS if registry is None else registry
    tools = set(TOOL_DISPLAY_NAMES if known_tools is None else known_tools)
    problems = []

    for source_tool, configs in table.items():
        if source_tool not in tools:
            problems.append(f"Unknown source tool '{source_tool}'")
        seen = set()
        for config in configs:
            if config.key in seen:
                problems.append(
                    f"Duplicate link key '{config.key}' in tool '{source_tool}'"
                )
            seen.add(config.key)
            if config.target_tool not in tools:
                problems.append(
                    f"Link '{source_tool}.{config.key}' targets unknown tool "
                    f"'{config.target_tool}'"
                )
            if not config.sync_fields:
                problems.append(f"Link '{source_tool}.{config.key}' syncs no fields")
            if len(set(config.sync_fields)) != len(config.sync_fields):
                problems.append(
                    f"Link '{source_tool}.{config.key}' lists a sync field twice"
                )
    return problems
