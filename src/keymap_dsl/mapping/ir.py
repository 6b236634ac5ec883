from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Optional, Set, TypeAlias, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class Modifier(str, Enum):
    """Modifier tokens understood by the `mod` option."""

    CTRL = "ctrl"
    ALT = "alt"
    SHIFT = "shift"
    LEADER = "leader"


class RhsKind(str, Enum):
    """How a string right-hand side is wrapped (`as` option)."""

    CMD = "cmd"
    LUA = "lua"
    CALL = "call"


Rhs: TypeAlias = Union[str, Callable[..., Any]]


class DeclarationError(ValueError):
    """Raised when a keymap declaration or an override table is malformed."""

    def __init__(self, key: str | None, reason: str):
        target = f"keymap {key!r}" if key is not None else "keymap overrides"
        super().__init__(f"invalid {target}: {reason}")
        self.key = key
        self.reason = reason


class MappingOptions(BaseModel):
    """Open option record attached to a declaration.

    Unknown attributes (``buffer``, ``nowait``, ``name``...) are kept as
    extras and passed through to the emitted record.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    modes: Optional[str] = Field(default=None, validation_alias=AliasChoices("modes", "mode"))
    remap: Optional[bool] = None
    noremap: Optional[bool] = None
    silent: Optional[bool] = None
    as_: Optional[RhsKind] = Field(default=None, validation_alias=AliasChoices("as", "as_"))
    plug: Optional[str] = None
    mod: Optional[Set[Modifier]] = None

    @field_validator("mod", mode="before")
    @classmethod
    def _single_modifier(cls, value: object) -> object:
        if isinstance(value, str):
            return {value}
        return value


class Declaration(BaseModel):
    """One pending keymap request."""

    key: str
    rhs: Optional[Rhs] = None
    label: Optional[str] = None
    options: MappingOptions = Field(default_factory=MappingOptions)


class GroupDelimiter:
    """Marks the end of a group sealed by ``Map.split``."""

    _instance: GroupDelimiter | None = None

    def __new__(cls) -> GroupDelimiter:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "GROUP_DELIMITER"


GROUP_DELIMITER = GroupDelimiter()
