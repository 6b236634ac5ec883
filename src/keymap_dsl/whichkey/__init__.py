from __future__ import annotations

from .backend import LEADER_PREFIX, WhichKeyBackend
from .models.record import KeymapRecord, KeymapSheet, RegisteredKeymap
from .registrar import RecordCollector, Registrar, as_registrar
from .render import render_lua

__all__ = [
    "LEADER_PREFIX",
    "KeymapRecord",
    "KeymapSheet",
    "RecordCollector",
    "RegisteredKeymap",
    "Registrar",
    "WhichKeyBackend",
    "as_registrar",
    "render_lua",
]
