from __future__ import annotations

from typing import Any, Iterable, List

from .models.record import RegisteredKeymap


def render_lua(keymaps: Iterable[RegisteredKeymap]) -> str:
    """Render emitted records as which-key ``register`` calls, one per line."""

    lines: List[str] = ["local wk = require('which-key')"]
    for keymap in keymaps:
        lines.append(f"wk.register {{ [{_lua_value(keymap.key)}] = {_lua_table(keymap)} }}")
    return "\n".join(lines) + "\n"


def _lua_table(keymap: RegisteredKeymap) -> str:
    table = keymap.record.to_table()
    parts: List[str] = []
    for name, value in table.items():
        if callable(value):
            raise TypeError(f"cannot render callable rhs of {keymap.key!r} as lua")
        rendered = _lua_value(value)
        if not isinstance(name, int):
            parts.append(f"{name} = {rendered}")
        elif 1 in table:
            parts.append(rendered)
        else:
            # label without rhs must not shift into slot 1
            parts.append(f"[{name}] = {rendered}")
    return "{ " + ", ".join(parts) + " }"


def _lua_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
        return f'"{escaped}"'
    raise TypeError(f"unsupported lua value: {type(value).__name__}")
