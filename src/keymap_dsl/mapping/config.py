from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class MappingConfig(BaseModel):
    """One ``[[map]]`` entry; every other attribute is a mapping option."""

    model_config = ConfigDict(extra="allow")

    key: str
    rhs: Optional[str] = None
    label: Optional[str] = None


class GroupConfig(BaseModel):
    options: Dict[str, Any] = Field(default_factory=dict)
    map: List[MappingConfig] = Field(default_factory=list)


class Config(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    version: int | None = None
    description: str | None = None
    register_: Dict[str, Any] = Field(default_factory=dict, alias="register")
    group: List[GroupConfig] = Field(default_factory=list)
    map: List[MappingConfig] = Field(default_factory=list)
