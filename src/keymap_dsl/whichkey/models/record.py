from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict


class KeymapRecord(BaseModel):
    """
    Final option record handed to the which-key style registration call.

    https://github.com/folke/which-key.nvim (``register`` mapping table)
    """

    model_config = ConfigDict(extra="allow")

    rhs: Optional[Union[str, Callable[..., Any]]] = None
    label: Optional[str] = None
    mode: Optional[str] = None
    noremap: Optional[bool] = None
    silent: Optional[bool] = None

    def to_table(self) -> Dict[Union[int, str], Any]:
        """Return the positional table form: ``{1: rhs, 2: label, mode=...}``."""

        table: Dict[Union[int, str], Any] = {}
        if self.rhs is not None:
            table[1] = self.rhs
        if self.label is not None:
            table[2] = self.label
        for name in ("mode", "noremap", "silent"):
            value = getattr(self, name)
            if value is not None:
                table[name] = value
        for name, value in (self.model_extra or {}).items():
            if value is not None:
                table[name] = value
        return table


class RegisteredKeymap(BaseModel):
    """One emitted ``{key: record}`` pair."""

    key: str
    record: KeymapRecord


class KeymapSheet(BaseModel):
    """Top-level document written by the compiler."""

    description: str
    keymaps: List[RegisteredKeymap]
