from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING, Any, Dict, Iterable, List

from .models.record import KeymapRecord, RegisteredKeymap

if TYPE_CHECKING:
    from keymap_dsl.mapping.ir import Declaration

logger = logging.getLogger(__name__)

LEADER_PREFIX = "<Leader>"

# First match wins.
_MODIFIER_PREFIXES: tuple[tuple[frozenset[str], str], ...] = (
    (frozenset({"ctrl", "alt", "shift"}), "C-M-S-"),
    (frozenset({"ctrl", "alt"}), "C-M-"),
    (frozenset({"ctrl", "shift"}), "C-S-"),
    (frozenset({"alt", "shift"}), "M-S-"),
    (frozenset({"ctrl"}), "C-"),
    (frozenset({"alt"}), "M-"),
    (frozenset({"shift"}), "S-"),
)

_RHS_WRAPPERS: dict[str, str] = {
    "cmd": "<Cmd>{}<CR>",
    "lua": "<Cmd>lua {}<CR>",
    "call": "<Cmd>call {}<CR>",
}


class WhichKeyBackend:
    """Lower pending declarations into which-key option records."""

    def __init__(self, *, leader_prefix: str = LEADER_PREFIX) -> None:
        self._leader_prefix = leader_prefix

    def lower(self, declaration: Declaration) -> List[RegisteredKeymap]:
        options = declaration.options
        rhs = declaration.rhs
        label = declaration.label

        if isinstance(rhs, str):
            if label is not None:
                wrapper = _RHS_WRAPPERS.get(_token(options.as_)) if options.as_ else None
                if wrapper is not None:
                    rhs = wrapper.format(rhs)
            else:
                # display-only entry: `key = "Label"`
                label, rhs = rhs, ""

            if options.plug is not None:
                rhs = f"<Plug>({options.plug}){rhs}"

        noremap = options.noremap
        if options.remap is not None:
            noremap = not options.remap

        key = self.resolve_key(declaration.key, options.mod or ())
        mode = options.modes or None

        fields: Dict[str, Any] = {
            "label": label,
            "noremap": noremap,
            "silent": options.silent,
            **(options.model_extra or {}),
        }

        if mode is None or len(mode) == 1:
            record = KeymapRecord(rhs=rhs, mode=mode, **fields)
            return [RegisteredKeymap(key=key, record=record)]

        logger.debug("splitting %r into modes %s", key, list(mode))
        # which-key keeps the table it receives, every mode needs its own copy
        return [
            RegisteredKeymap(
                key=key,
                record=KeymapRecord(rhs=rhs, mode=letter, **copy.deepcopy(fields)),
            )
            for letter in mode
        ]

    def resolve_key(self, key: str, modifiers: Iterable[object]) -> str:
        """Apply modifier and leader prefixes to a raw key name."""

        names = {_token(mod) for mod in modifiers}
        for required, prefix in _MODIFIER_PREFIXES:
            if required <= names:
                key = f"<{prefix}{key}>"
                break
        if "leader" in names:
            key = f"{self._leader_prefix}{key}"
        return key


def _token(value: object) -> str:
    return str(getattr(value, "value", value))
