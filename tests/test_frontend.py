from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from keymap_dsl.mapping.config import Config
from keymap_dsl.mapping.dsl import Map
from keymap_dsl.mapping.frontend import MapFrontend
from keymap_dsl.mapping.ir import GROUP_DELIMITER, Declaration
from keymap_dsl.whichkey.registrar import RecordCollector

FIXTURE = Path(__file__).with_name("test_keymaps.toml")


def test_parse_config_declares_groups_then_ungrouped() -> None:
    frontend = MapFrontend()
    keymap = Map(RecordCollector())

    config = frontend.parse_config(frontend.load_toml(FIXTURE), keymap)

    assert config.description == "editor keymaps"
    assert [
        entry.key if isinstance(entry, Declaration) else entry for entry in keymap.entries
    ] == ["w", "q", GROUP_DELIMITER, "c", GROUP_DELIMITER, ","]

    first = next(keymap.declarations())
    assert first.label == "Save"
    assert first.options.modes == "n"


def test_register_uses_register_table() -> None:
    frontend = MapFrontend()
    collector = RecordCollector()
    keymap = Map(collector)
    config = frontend.parse_config(frontend.load_toml(FIXTURE), keymap)

    assert frontend.register(config, keymap) == 7
    assert len(keymap) == 0

    emitted = [(k.key, k.record.to_table()) for k in collector.keymaps]
    assert emitted[0] == ("<C-w>", {1: "<Cmd>write<CR>", 2: "Save", "mode": "n", "silent": True})
    assert emitted[1] == ("q", {1: "", 2: "Quit menu", "mode": "n", "silent": True})
    assert [key for key, _ in emitted[2:]] == ["c", "c", ",", ",", ","]
    assert emitted[2][1] == {
        1: "<Plug>(comment-toggle)",
        2: "Toggle comment",
        "mode": "n",
        "noremap": True,
        "silent": True,
    }
    assert [table["mode"] for _, table in emitted[4:]] == ["n", "v", "o"]
    assert all(table[1] == "<Leader>" and table["noremap"] is True for _, table in emitted[4:])


def test_hooks_are_rejected_in_config() -> None:
    frontend = MapFrontend()

    with pytest.raises(ValueError):
        frontend.parse_config({"group": [{"options": {"each": "print"}}]}, Map())

    keymap = Map()
    config = frontend.parse_config({"register": {"each": "print"}}, keymap)
    with pytest.raises(ValueError):
        frontend.register(config, keymap)


def test_mapping_without_key_is_invalid() -> None:
    with pytest.raises(ValidationError):
        MapFrontend().parse_config({"map": [{"rhs": "x"}]}, Map())


def test_register_table_is_read_by_alias() -> None:
    keymap = Map(RecordCollector())
    config = MapFrontend().parse_config({"register": {"silent": True}}, keymap)

    assert config.register_ == {"silent": True}
    assert "register_" in Config.model_fields
