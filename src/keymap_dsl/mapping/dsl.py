from __future__ import annotations

import copy
import logging
from collections import deque
from typing import Any, Callable, Deque, Dict, Iterator, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from keymap_dsl.whichkey.backend import WhichKeyBackend
from keymap_dsl.whichkey.models.record import KeymapRecord
from keymap_dsl.whichkey.registrar import RecordCollector, Registrar, SupportsRegister, as_registrar

from .ir import GROUP_DELIMITER, Declaration, DeclarationError, GroupDelimiter, MappingOptions, Modifier

logger = logging.getLogger(__name__)

Entry = Union[Declaration, GroupDelimiter]
SplitHook = Callable[[str, MappingOptions], None]
RegisterHook = Callable[[str, KeymapRecord], None]

# ctrl -> alt -> shift, never backwards; shift is terminal.
_CHAIN_ORDER: tuple[Modifier, ...] = (Modifier.CTRL, Modifier.ALT, Modifier.SHIFT)

# Record fields filled by lowering, never by option tables.
_RESERVED_OPTIONS = frozenset({"rhs", "label"})
_OPTION_SPELLINGS: tuple[tuple[str, ...], ...] = (("modes", "mode"), ("as", "as_"))


class Map:
    """
    Ordered accumulator of pending keymap declarations.

    ``keymap("Save")["w"] = {"rhs": "write", "as": "cmd"}`` declares a mapping,
    ``keymap.split(modes="n")`` seals the current group with shared options and
    ``keymap.register()`` lowers everything and hands it to the registrar.
    """

    def __init__(
        self,
        registrar: Registrar | SupportsRegister | None = None,
        *,
        backend: WhichKeyBackend | None = None,
    ) -> None:
        self._entries: Deque[Entry] = deque()
        self._pending_label: Optional[str] = None
        self.registrar = registrar if registrar is not None else RecordCollector()
        self._register = as_registrar(self.registrar)
        self._backend = backend or WhichKeyBackend()

    # -- labels -----------------------------------------------------------

    def describe(self, description: object = None) -> Map:
        """Set (or clear, with ``None``) the label of the next declaration."""

        self._pending_label = None if description is None else str(description)
        return self

    def __call__(self, description: object = None) -> Map:
        return self.describe(description)

    def __add__(self, more_description: object) -> Map:
        self._pending_label = (self._pending_label or "") + str(more_description)
        return self

    @property
    def pending_label(self) -> Optional[str]:
        return self._pending_label

    # -- declarations -----------------------------------------------------

    def set(self, key: object, value: Any, **options: Any) -> Declaration:
        return self._declare(key, value, options, modifiers=())

    def __setitem__(self, key: object, value: Any) -> None:
        self._declare(key, value, {}, modifiers=())

    @property
    def ctrl(self) -> ModifiedMap:
        return ModifiedMap(self, (Modifier.CTRL,))

    @property
    def alt(self) -> ModifiedMap:
        return ModifiedMap(self, (Modifier.ALT,))

    @property
    def shift(self) -> ModifiedMap:
        return ModifiedMap(self, (Modifier.SHIFT,))

    @property
    def leader(self) -> ModifiedMap:
        return ModifiedMap(self, (Modifier.LEADER,))

    def _declare(
        self,
        key: object,
        value: Any,
        options: Mapping[str, Any],
        *,
        modifiers: Tuple[Modifier, ...],
    ) -> Declaration:
        key = str(key)

        # the pending label belongs to exactly this declaration
        label, self._pending_label = self._pending_label, None

        rhs, value_label, raw = _normalize_value(key, value)
        raw.update(options)
        if raw.get("label") is not None:
            value_label = str(raw.pop("label"))
        raw.pop("label", None)
        if label is None:
            label = value_label

        if modifiers:
            raw["mod"] = _merge_modifiers(key, raw.get("mod"), modifiers)

        declaration = Declaration(
            key=key,
            rhs=rhs,
            label=label,
            options=_validate_options(key, raw),
        )
        self._entries.append(declaration)
        logger.debug("declared %r (label=%r)", key, label)
        return declaration

    # -- batch operations -------------------------------------------------

    def split(self, *, each: Optional[SplitHook] = None, **overrides: Any) -> None:
        """Apply overrides to the current group and seal it with a delimiter."""

        override = _validate_options(None, overrides) if overrides else None

        group: list[Declaration] = []
        for entry in reversed(self._entries):
            if entry is GROUP_DELIMITER:
                break
            group.append(entry)
        group.reverse()

        for declaration in group:
            if override is not None:
                merge_options(declaration.options, override)
            if each is not None:
                each(declaration.key, declaration.options)

        self._entries.append(GROUP_DELIMITER)
        logger.debug("sealed group of %d declaration(s)", len(group))

    def register(self, *, each: Optional[RegisterHook] = None, **overrides: Any) -> int:
        """Lower and emit every pending declaration; returns the record count.

        Unlike ``split``, the overrides given here reach every remaining
        declaration, delimiters included.
        """

        override = _validate_options(None, overrides) if overrides else None

        emitted = 0
        while self._entries:
            entry = self._entries.popleft()
            if entry is GROUP_DELIMITER:
                continue

            if override is not None:
                merge_options(entry.options, override)

            for keymap in self._backend.lower(entry):
                if each is not None:
                    each(keymap.key, keymap.record)
                self._register({keymap.key: keymap.record})
                emitted += 1

        logger.info("registered %d keymap record(s)", emitted)
        return emitted

    # -- inspection -------------------------------------------------------

    @property
    def entries(self) -> Tuple[Entry, ...]:
        return tuple(self._entries)

    def declarations(self) -> Iterator[Declaration]:
        for entry in self._entries:
            if isinstance(entry, Declaration):
                yield entry

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Map(entries={len(self._entries)}, pending_label={self._pending_label!r})"


class ModifiedMap:
    """Modifier-qualified entry point such as ``keymap.ctrl.alt``."""

    def __init__(self, owner: Map, modifiers: Tuple[Modifier, ...]) -> None:
        self._owner = owner
        self._modifiers = modifiers

    @property
    def modifiers(self) -> frozenset[Modifier]:
        return frozenset(self._modifiers)

    @property
    def ctrl(self) -> ModifiedMap:
        return self._chain(Modifier.CTRL)

    @property
    def alt(self) -> ModifiedMap:
        return self._chain(Modifier.ALT)

    @property
    def shift(self) -> ModifiedMap:
        return self._chain(Modifier.SHIFT)

    def _chain(self, modifier: Modifier) -> ModifiedMap:
        chained = [m for m in self._modifiers if m is not Modifier.LEADER]
        if chained and _CHAIN_ORDER.index(modifier) <= _CHAIN_ORDER.index(chained[-1]):
            raise AttributeError(f"{self._path()!r} cannot be followed by {modifier.value!r}")
        return ModifiedMap(self._owner, self._modifiers + (modifier,))

    def _path(self) -> str:
        return ".".join(m.value for m in self._modifiers)

    def set(self, key: object, value: Any, **options: Any) -> Declaration:
        return self._owner._declare(key, value, options, modifiers=self._modifiers)

    def __setitem__(self, key: object, value: Any) -> None:
        self._owner._declare(key, value, {}, modifiers=self._modifiers)

    def __repr__(self) -> str:
        return f"ModifiedMap({self._path()})"


def merge_options(target: MappingOptions, override: MappingOptions) -> None:
    """Merge ``override`` into ``target`` in place.

    ``modes`` is appended to an existing value, everything else replaces.
    """

    for name in override.model_fields_set:
        value = copy.deepcopy(getattr(override, name))
        if name == "modes" and target.modes:
            target.modes = target.modes + (value or "")
        else:
            setattr(target, name, value)

    for name, value in (override.model_extra or {}).items():
        setattr(target, name, copy.deepcopy(value))


def _normalize_value(key: str, value: Any) -> tuple[Any, Optional[str], Dict[str, Any]]:
    if isinstance(value, str) or callable(value):
        return value, None, {}

    if isinstance(value, Mapping):
        raw = dict(value)
        rhs = raw.pop("rhs", None)
        label = raw.pop("label", None)
        if rhs is not None and not (isinstance(rhs, str) or callable(rhs)):
            raise DeclarationError(key, f"rhs must be a string or callable, got: {type(rhs).__name__}")
        return rhs, None if label is None else str(label), raw

    if isinstance(value, (tuple, list)) and 1 <= len(value) <= 2:
        rhs = value[0]
        if not (isinstance(rhs, str) or callable(rhs)):
            raise DeclarationError(key, f"rhs must be a string or callable, got: {type(rhs).__name__}")
        label = str(value[1]) if len(value) == 2 and value[1] is not None else None
        return rhs, label, {}

    raise DeclarationError(
        key,
        f"expected a string, callable, mapping or (rhs, label) pair, got: {type(value).__name__}",
    )


def _merge_modifiers(key: str, existing: Any, modifiers: Tuple[Modifier, ...]) -> set[str]:
    if existing is None:
        existing = ()
    elif isinstance(existing, str):
        existing = (existing,)
    elif not isinstance(existing, (set, frozenset, list, tuple)):
        raise DeclarationError(key, f"mod must be a collection of modifiers, got: {type(existing).__name__}")
    merged = {str(getattr(m, "value", m)) for m in existing}
    merged.update(m.value for m in modifiers)
    return merged


def _validate_options(key: str | None, raw: Mapping[str, Any]) -> MappingOptions:
    if "each" in raw:
        raise DeclarationError(key, "'each' is only accepted by split() and register()")
    reserved = _RESERVED_OPTIONS.intersection(raw)
    if reserved:
        raise DeclarationError(key, f"{sorted(reserved)!r} cannot be passed as options")
    for spellings in _OPTION_SPELLINGS:
        given = [name for name in spellings if name in raw]
        if len(given) > 1:
            raise DeclarationError(key, f"conflicting options: {given!r}")
    try:
        return MappingOptions.model_validate(dict(raw))
    except ValidationError as exc:
        raise DeclarationError(key, str(exc)) from exc
