import pytest

from armlutgen.decode import ArmFormat, ThumbFormat, arm_decode, thumb_decode
from armlutgen.lut import (
    arm_lut,
    main,
    render_arm_lut,
    render_thumb_lut,
    thumb_lut,
    write_luts,
)


@pytest.fixture(scope="module")
def thumb_entries():
    return thumb_lut()


@pytest.fixture(scope="module")
def arm_entries():
    return arm_lut()


def test_table_sizes(thumb_entries, arm_entries):
    assert len(thumb_entries) == 1024
    assert len(arm_entries) == 4096


def test_thumb_table_matches_decoder(thumb_entries):
    assert all(entry == thumb_decode(i << 6) for i, entry in enumerate(thumb_entries))
    assert thumb_entries[0xDF00 >> 6].fmt is ThumbFormat.SWI


def test_arm_table_index_selects_key_bits(arm_entries):
    assert arm_entries[0x121].fmt is ArmFormat.BRANCH_EXCHANGE
    assert arm_entries[0xF00].fmt is ArmFormat.SOFTWARE_INTERRUPT
    assert arm_entries[0x009].fmt is ArmFormat.MULTIPLY


def test_arm_table_agrees_with_full_instructions(arm_entries):
    for insn in (0xE12FFF1E, 0xE5900000, 0xE1D000B0, 0xEA000000, 0xE0800001):
        index = ((insn >> 16) & 0xFF0) | ((insn >> 4) & 0xF)
        assert arm_entries[index].fmt is arm_decode(insn).fmt


def test_thumb_tables_cover_all_formats(thumb_entries):
    assert {entry.fmt for entry in thumb_entries} == set(ThumbFormat)


def test_arm_tables_cover_all_formats(arm_entries):
    assert {entry.fmt for entry in arm_entries} == set(ArmFormat)


def test_render_thumb_lut(thumb_entries):
    text = render_thumb_lut(thumb_entries)
    assert text.startswith("impl<I: MemoryInterface> Arm7tdmiCore<I> {\n")
    assert "pub const THUMB_LUT: [ThumbInstructionInfo<I>; 1024] = [" in text
    assert text.count("ThumbInstructionInfo {") == 1024
    assert text.endswith("    ];\n}\n")
    assert "handler_fn: Arm7tdmiCore::exec_thumb_swi," in text
    assert "fmt: ThumbFormat::Swi," in text


def test_render_arm_lut(arm_entries):
    text = render_arm_lut(arm_entries)
    assert "pub const ARM_LUT: [ArmInstructionInfo<I>; 4096] = [" in text
    assert text.count("fmt: ArmFormat::") == 4096
    assert text.count("} ,") == 4096
    assert "handler_fn: Arm7tdmiCore::exec_arm_bx," in text


def test_render_lists_entries_in_order(thumb_entries):
    text = render_thumb_lut(thumb_entries)
    positions = [text.index(f"/* {i:#x} */\n") for i in range(0, 1024, 97)]
    assert positions == sorted(positions)


def test_render_empty_table():
    text = render_arm_lut([])
    assert "; 0] = [" in text
    assert "ArmInstructionInfo {" not in text


def test_write_luts(tmp_path, thumb_entries, arm_entries):
    thumb_path, arm_path = write_luts(tmp_path)
    assert thumb_path == tmp_path / "thumb_lut.rs"
    assert arm_path == tmp_path / "arm_lut.rs"
    assert thumb_path.read_text(encoding="utf-8") == render_thumb_lut(thumb_entries)
    assert arm_path.read_text(encoding="utf-8") == render_arm_lut(arm_entries)


def test_main_with_argument(tmp_path, arm_entries):
    assert main([str(tmp_path)]) == 0
    assert (tmp_path / "arm_lut.rs").read_text(encoding="utf-8") == render_arm_lut(arm_entries)


def test_main_uses_out_dir_env(tmp_path, monkeypatch, thumb_entries):
    monkeypatch.setenv("OUT_DIR", str(tmp_path))
    assert main([]) == 0
    assert (tmp_path / "thumb_lut.rs").read_text(encoding="utf-8") == render_thumb_lut(
        thumb_entries
    )


def test_main_without_out_dir(monkeypatch):
    monkeypatch.delenv("OUT_DIR", raising=False)
    with pytest.raises(SystemExit) as info:
        main([])
    assert info.value.code == 2


def test_main_missing_directory(tmp_path):
    with pytest.raises(SystemExit) as info:
        main([str(tmp_path / "missing")])
    assert info.value.code == 1