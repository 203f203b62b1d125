"""Kernel configuration."""

from pydantic import BaseModel, Field


class KernelConfig(BaseModel):
    """Configuration shared by the store, link service and API."""

    db_path: str = ":memory:"
    untitled_title: str = "Untitled"
    preview_limit: int = Field(ge=0, default=6)
    log_level: str = "INFO"
