from __future__ import annotations

from typing import Callable, Dict, List, Protocol

from .models.record import KeymapRecord, RegisteredKeymap

Registrar = Callable[[Dict[str, KeymapRecord]], None]


class SupportsRegister(Protocol):
    """Anything exposing which-key's ``register(mappings)`` entry point."""

    def register(self, mappings: Dict[str, KeymapRecord]) -> None: ...


class RecordCollector:
    """In-process registrar keeping every emitted record in order."""

    def __init__(self) -> None:
        self._keymaps: List[RegisteredKeymap] = []

    def __call__(self, mappings: Dict[str, KeymapRecord]) -> None:
        for key, record in mappings.items():
            self._keymaps.append(RegisteredKeymap(key=key, record=record))

    def __len__(self) -> int:
        return len(self._keymaps)

    @property
    def keymaps(self) -> List[RegisteredKeymap]:
        return list(self._keymaps)

    def clear(self) -> None:
        self._keymaps.clear()


def as_registrar(target: Registrar | SupportsRegister) -> Registrar:
    """Accept either a plain callable or an object with ``register``."""

    register = getattr(target, "register", None)
    if callable(register):
        return register
    if callable(target):
        return target
    raise TypeError(f"registrar must be callable or expose register(), got: {type(target).__name__}")
