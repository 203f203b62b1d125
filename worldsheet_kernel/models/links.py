"""Link configuration — which tools may link to which, and what to copy."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class LinkConfig(BaseModel):
    """
    One link slot a source tool declares toward a target tool-type.

    ``sync_fields`` are dot-separated paths into the target worksheet's
    payload, e.g. ``"stellarEnvironment.starType"``.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    key: str                                # Unique within the source tool
    target_tool: str                        # Tool-type tag of the target
    label: str                              # Display label, e.g. "Home Planet"
    sync_fields: List[str]
    description: Optional[str] = None
