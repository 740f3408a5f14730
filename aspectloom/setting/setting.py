"""Composer settings.

Validated view of the ``composer:`` section of ``aspectloom.yaml``.
"""

from functools import lru_cache
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from ..core.config.config_loader import load_unified_config


class ComposerSettings(BaseModel):
    """Layout and scoping rules for emitted ITD source."""

    model_config = ConfigDict(frozen=True)

    indent_unit: str = Field("    ", description="Text written once per indent level")
    newline: str = Field("\n", description="Line terminator")
    implicit_packages: List[str] = Field(
        default_factory=lambda: ["java.lang"],
        description="Packages whose types are usable without an import",
    )
    indent_blank_lines: bool = Field(
        True, description="Whether blank lines inside the aspect carry the current indent"
    )


@lru_cache(maxsize=1)
def get_settings() -> ComposerSettings:
    """Settings from configuration, cached until ``reload_configs()``."""
    section = load_unified_config().get("composer") or {}
    return ComposerSettings(**section)
