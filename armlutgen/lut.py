"""Generation of the ARM and THUMB opcode lookup tables."""

from __future__ import annotations

import argparse
import os
from pathlib import Path
from typing import Iterable, Sequence

from armlutgen.decode import DecodedInstruction, arm_decode, thumb_decode

__all__ = [
    "thumb_lut",
    "arm_lut",
    "render_thumb_lut",
    "render_arm_lut",
    "write_luts",
    "main",
]

THUMB_LUT_SIZE = 1024
ARM_LUT_SIZE = 4096
THUMB_LUT_FILE = "thumb_lut.rs"
ARM_LUT_FILE = "arm_lut.rs"

_IMPL_HEADER = "impl<I: MemoryInterface> Arm7tdmiCore<I> {\n"
_FOOTER = "    ];\n}\n"


def thumb_lut() -> list[DecodedInstruction]:
    """Decode every THUMB table slot; the index holds instruction bits 6..16."""
    return [thumb_decode(i << 6) for i in range(THUMB_LUT_SIZE)]


def arm_lut() -> list[DecodedInstruction]:
    """Decode every ARM table slot; the index holds bits 20..28 and 4..8."""
    return [
        arm_decode(((i & 0xFF0) << 16) | ((i & 0x00F) << 4))
        for i in range(ARM_LUT_SIZE)
    ]


def _entry(index: int, info_type: str, fmt_type: str, entry: DecodedInstruction, close: str) -> str:
    return (
        f"       /* {index:#x} */\n"
        f"        {info_type} {{\n"
        f"            handler_fn: Arm7tdmiCore::{entry.handler},\n"
        '            #[cfg(feature = "debugger")]\n'
        f"            fmt: {fmt_type}::{entry.fmt.value},\n"
        f"        {close}\n"
    )


def _render(
    entries: Iterable[DecodedInstruction],
    declaration: str,
    info_type: str,
    fmt_type: str,
    close: str,
) -> str:
    entries = list(entries)
    parts = [_IMPL_HEADER, declaration.format(count=len(entries))]
    parts.extend(
        _entry(index, info_type, fmt_type, entry, close)
        for index, entry in enumerate(entries)
    )
    parts.append(_FOOTER)
    return "".join(parts)


def render_thumb_lut(entries: Iterable[DecodedInstruction]) -> str:
    """Render the THUMB lookup table source text."""
    return _render(
        entries,
        "   pub const THUMB_LUT: [ThumbInstructionInfo<I>; {count}] = [\n",
        "ThumbInstructionInfo",
        "ThumbFormat",
        "},",
    )


def render_arm_lut(entries: Iterable[DecodedInstruction]) -> str:
    """Render the ARM lookup table source text."""
    return _render(
        entries,
        "    pub const ARM_LUT: [ArmInstructionInfo<I>; {count}] = [\n",
        "ArmInstructionInfo",
        "ArmFormat",
        "} ,",
    )


def write_luts(out_dir: str | os.PathLike[str]) -> tuple[Path, Path]:
    """Write both tables into out_dir and return the THUMB and ARM file paths."""
    directory = Path(out_dir)
    thumb_path = directory / THUMB_LUT_FILE
    arm_path = directory / ARM_LUT_FILE
    thumb_path.write_text(render_thumb_lut(thumb_lut()), encoding="utf-8")
    arm_path.write_text(render_arm_lut(arm_lut()), encoding="utf-8")
    return thumb_path, arm_path


def main(argv: Sequence[str] | None = None) -> int:
    """Command-line entry point: generate the tables into an output directory."""
    parser = argparse.ArgumentParser(
        prog="armlutgen",
        description="Generate the ARM and THUMB opcode lookup tables.",
    )
    parser.add_argument(
        "out_dir",
        nargs="?",
        default=os.environ.get("OUT_DIR"),
        help="output directory (defaults to $OUT_DIR)",
    )
    args = parser.parse_args(argv)
    if not args.out_dir:
        parser.error("no output directory given and OUT_DIR is not set")
    try:
        write_luts(args.out_dir)
    except OSError as exc:
        parser.exit(1, f"armlutgen: failed to write tables: {exc}\n")
    return 0