from __future__ import annotations

from .dsl import Map, ModifiedMap, merge_options
from .frontend import MapFrontend
from .ir import (
    GROUP_DELIMITER,
    Declaration,
    DeclarationError,
    GroupDelimiter,
    MappingOptions,
    Modifier,
    RhsKind,
)

__all__ = [
    "GROUP_DELIMITER",
    "Declaration",
    "DeclarationError",
    "GroupDelimiter",
    "Map",
    "MapFrontend",
    "MappingOptions",
    "ModifiedMap",
    "Modifier",
    "RhsKind",
    "merge_options",
]
