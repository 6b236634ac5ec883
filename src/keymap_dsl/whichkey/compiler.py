from __future__ import annotations

from pathlib import Path
from typing import List
import argparse
import logging

from keymap_dsl.mapping.dsl import Map
from keymap_dsl.mapping.frontend import MapFrontend

from .models.record import KeymapSheet, RegisteredKeymap
from .registrar import RecordCollector
from .render import render_lua

logger = logging.getLogger(__name__)


def compile_keymaps(in_path: str | Path) -> KeymapSheet:
    """Declare, split and register every keymap of a TOML file in memory."""

    in_path = Path(in_path)

    frontend = MapFrontend()
    collector = RecordCollector()
    keymap = Map(collector)

    config = frontend.parse_config(frontend.load_toml(in_path), keymap)
    frontend.register(config, keymap)

    keymaps: List[RegisteredKeymap] = collector.keymaps
    logger.info("compiled %d keymap record(s) from %s", len(keymaps), in_path)
    return KeymapSheet(description=config.description or "", keymaps=keymaps)


def compile_toml_config(
    in_path: str | Path,
    out_path: str | Path,
    *,
    output_format: str = "json",
    indent: int | None = 2,
) -> None:
    """End-to-end compilation: TOML file -> which-key JSON or Lua file."""

    sheet = compile_keymaps(in_path)

    if output_format == "json":
        text = sheet.model_dump_json(indent=indent, exclude_none=True) + "\n"
    elif output_format == "lua":
        text = render_lua(sheet.keymaps)
    else:
        raise ValueError(f"unsupported output format: {output_format!r}")

    Path(out_path).write_text(text, encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Generate which-key keymap records from a keymap config toml."
    )
    parser.add_argument("config", help="Keymap config toml path (e.g. keymaps.toml)")
    parser.add_argument("out", help="Output path")
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=("json", "lua"),
        default="json",
        help="Output format (default: json)",
    )
    parser.add_argument("--indent", type=int, default=2, help="JSON indent (default: 2)")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")

    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    compile_toml_config(args.config, args.out, output_format=args.output_format, indent=args.indent)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
