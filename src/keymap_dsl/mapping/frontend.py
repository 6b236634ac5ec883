from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Mapping
import tomllib

from .config import Config, MappingConfig
from .dsl import Map

logger = logging.getLogger(__name__)


class MapFrontend:
    """Declare keymaps from a TOML config into a ``Map``."""

    def load_toml(self, path: str | Path) -> Dict[str, Any]:
        """Load a TOML config file into a dict."""

        path = Path(path)
        return tomllib.loads(path.read_text(encoding="utf-8"))

    def parse_config(self, config: Mapping[str, Any], keymap: Map) -> Config:
        cfg = Config.model_validate(config)

        # Groups: declared in order, each sealed with its own options
        for group in cfg.group:
            _reject_hooks(group.options)
            for mapping in group.map:
                _declare(keymap, mapping)
            keymap.split(**group.options)

        # Ungrouped mappings only get the [register] options
        for mapping in cfg.map:
            _declare(keymap, mapping)

        logger.debug("parsed %d group(s), %d pending entries", len(cfg.group), len(keymap))
        return cfg

    def register(self, config: Config, keymap: Map) -> int:
        _reject_hooks(config.register_)
        return keymap.register(**config.register_)


def _declare(keymap: Map, mapping: MappingConfig) -> None:
    value: Dict[str, Any] = dict(mapping.model_extra or {})
    _reject_hooks(value)
    if mapping.rhs is not None:
        value["rhs"] = mapping.rhs
    if mapping.label is not None:
        keymap.describe(mapping.label)
    keymap.set(mapping.key, value)


def _reject_hooks(options: Mapping[str, Any]) -> None:
    if "each" in options:
        raise ValueError("'each' hooks cannot be set from a config file")
