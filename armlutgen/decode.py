"""Opcode decoding for ARM (32-bit) and THUMB (16-bit) instructions.

Each decoder maps an instruction word to its format and to the name and
compile-time arguments of the handler that executes it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

ArgValue = Union[bool, int]

__all__ = [
    "ThumbFormat",
    "ArmFormat",
    "DecodedInstruction",
    "thumb_decode",
    "arm_decode",
]


class ThumbFormat(Enum):
    """Instruction formats of the THUMB instruction set."""

    MOVE_SHIFTED_REG = "MoveShiftedReg"
    ADD_SUB = "AddSub"
    DATA_PROCESS_IMM = "DataProcessImm"
    ALU_OPS = "AluOps"
    HI_REG_OP_OR_BRANCH_EXCHANGE = "HiRegOpOrBranchExchange"
    LDR_PC = "LdrPc"
    LDR_STR_REG_OFFSET = "LdrStrRegOffset"
    LDR_STR_SHB = "LdrStrSHB"
    LDR_STR_IMM_OFFSET = "LdrStrImmOffset"
    LDR_STR_HALF_WORD = "LdrStrHalfWord"
    LDR_STR_SP = "LdrStrSp"
    LOAD_ADDRESS = "LoadAddress"
    ADD_SP = "AddSp"
    PUSH_POP = "PushPop"
    LDM_STM = "LdmStm"
    BRANCH_CONDITIONAL = "BranchConditional"
    SWI = "Swi"
    BRANCH = "Branch"
    BRANCH_LONG_WITH_LINK = "BranchLongWithLink"
    UNDEFINED = "Undefined"


class ArmFormat(Enum):
    """Instruction formats of the ARM instruction set."""

    BRANCH_EXCHANGE = "BranchExchange"
    BRANCH_LINK = "BranchLink"
    SOFTWARE_INTERRUPT = "SoftwareInterrupt"
    MULTIPLY = "Multiply"
    MULTIPLY_LONG = "MultiplyLong"
    SINGLE_DATA_TRANSFER = "SingleDataTransfer"
    HALFWORD_DATA_TRANSFER_REG_OFFSET = "HalfwordDataTransferRegOffset"
    HALFWORD_DATA_TRANSFER_IMMEDIATE_OFFSET = "HalfwordDataTransferImmediateOffset"
    DATA_PROCESSING = "DataProcessing"
    BLOCK_DATA_TRANSFER = "BlockDataTransfer"
    MOVE_FROM_STATUS = "MoveFromStatus"
    MOVE_TO_STATUS = "MoveToStatus"
    SINGLE_DATA_SWAP = "SingleDataSwap"
    UNDEFINED = "Undefined"


def _render_arg(value: ArgValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass(frozen=True)
class DecodedInstruction:
    """The format of an instruction and the handler that executes it."""

    fmt: Union[ThumbFormat, ArmFormat]
    name: str
    args: tuple[tuple[str, ArgValue], ...] = ()

    @property
    def handler(self) -> str:
        """The handler path, including its generic arguments if it has any."""
        if not self.args:
            return self.name
        rendered = ", ".join(_render_arg(value) for _, value in self.args)
        return f"{self.name}::<{rendered}>"

    def arg(self, key: str) -> ArgValue:
        """Return the value of the named handler argument."""
        for name, value in self.args:
            if name == key:
                return value
        raise KeyError(key)


def _bit(word: int, index: int) -> bool:
    return bool((word >> index) & 1)


def _bits(word: int, lo: int, hi: int) -> int:
    """Bits lo (inclusive) to hi (exclusive)."""
    return (word >> lo) & ((1 << (hi - lo)) - 1)


def thumb_decode(insn: int) -> DecodedInstruction:
    """Decode a 16-bit THUMB instruction."""
    if not 0 <= insn <= 0xFFFF:
        raise ValueError(f"THUMB instruction out of range: {insn:#x}")

    offset5 = _bits(insn, 6, 11)
    load = _bit(insn, 11)
    fmt = ThumbFormat

    def make(f: ThumbFormat, name: str, *args: tuple[str, ArgValue]) -> DecodedInstruction:
        return DecodedInstruction(f, name, tuple(args))

    if insn & 0xF800 == 0x1800:
        return make(
            fmt.ADD_SUB,
            "exec_thumb_add_sub",
            ("SUB", _bit(insn, 9)),
            ("IMM", _bit(insn, 10)),
            ("RN", _bits(insn, 6, 9)),
        )
    if insn & 0xE000 == 0x0000:
        return make(
            fmt.MOVE_SHIFTED_REG,
            "exec_thumb_move_shifted_reg",
            ("BS_OP", _bits(insn, 11, 13)),
            ("IMM", _bits(insn, 6, 11)),
        )
    if insn & 0xE000 == 0x2000:
        return make(
            fmt.DATA_PROCESS_IMM,
            "exec_thumb_data_process_imm",
            ("OP", _bits(insn, 11, 13)),
            ("RD", _bits(insn, 8, 11)),
        )
    if insn & 0xFC00 == 0x4000:
        return make(fmt.ALU_OPS, "exec_thumb_alu_ops", ("OP", _bits(insn, 6, 10)))
    if insn & 0xFC00 == 0x4400:
        return make(
            fmt.HI_REG_OP_OR_BRANCH_EXCHANGE,
            "exec_thumb_hi_reg_op_or_bx",
            ("OP", _bits(insn, 8, 10)),
            ("FLAG_H1", _bit(insn, 7)),
            ("FLAG_H2", _bit(insn, 6)),
        )
    if insn & 0xF800 == 0x4800:
        return make(fmt.LDR_PC, "exec_thumb_ldr_pc", ("RD", _bits(insn, 8, 11)))
    if insn & 0xF200 == 0x5000:
        return make(
            fmt.LDR_STR_REG_OFFSET,
            "exec_thumb_ldr_str_reg_offset",
            ("LOAD", load),
            ("RO", _bits(insn, 6, 9)),
            ("BYTE", _bit(insn, 10)),
        )
    if insn & 0xF200 == 0x5200:
        return make(
            fmt.LDR_STR_SHB,
            "exec_thumb_ldr_str_shb",
            ("RO", _bits(insn, 6, 9)),
            ("SIGN_EXTEND", _bit(insn, 10)),
            ("HALFWORD", _bit(insn, 11)),
        )
    if insn & 0xE000 == 0x6000:
        is_byte = _bit(insn, 12)
        offset = offset5 if is_byte else ((offset5 << 3) & 0xFF) >> 1
        return make(
            fmt.LDR_STR_IMM_OFFSET,
            "exec_thumb_ldr_str_imm_offset",
            ("LOAD", load),
            ("BYTE", is_byte),
            ("OFFSET", offset),
        )
    if insn & 0xF000 == 0x8000:
        return make(
            fmt.LDR_STR_HALF_WORD,
            "exec_thumb_ldr_str_halfword",
            ("LOAD", load),
            ("OFFSET", (offset5 << 1) & 0xFF),
        )
    if insn & 0xF000 == 0x9000:
        return make(
            fmt.LDR_STR_SP,
            "exec_thumb_ldr_str_sp",
            ("LOAD", load),
            ("RD", _bits(insn, 8, 11)),
        )
    if insn & 0xF000 == 0xA000:
        return make(
            fmt.LOAD_ADDRESS,
            "exec_thumb_load_address",
            ("SP", _bit(insn, 11)),
            ("RD", _bits(insn, 8, 11)),
        )
    if insn & 0xFF00 == 0xB000:
        return make(fmt.ADD_SP, "exec_thumb_add_sp", ("FLAG_S", _bit(insn, 7)))
    if insn & 0xF600 == 0xB400:
        return make(
            fmt.PUSH_POP,
            "exec_thumb_push_pop",
            ("POP", load),
            ("FLAG_R", _bit(insn, 8)),
        )
    if insn & 0xF000 == 0xC000:
        return make(
            fmt.LDM_STM,
            "exec_thumb_ldm_stm",
            ("LOAD", load),
            ("RB", _bits(insn, 8, 11)),
        )
    if insn & 0xFF00 == 0xDF00:
        return make(fmt.SWI, "exec_thumb_swi")
    if insn & 0xF000 == 0xD000:
        return make(
            fmt.BRANCH_CONDITIONAL,
            "exec_thumb_branch_with_cond",
            ("COND", _bits(insn, 8, 12)),
        )
    if insn & 0xF800 == 0xE000:
        return make(fmt.BRANCH, "exec_thumb_branch")
    if insn & 0xF000 == 0xF000:
        return make(
            fmt.BRANCH_LONG_WITH_LINK,
            "exec_thumb_branch_long_with_link",
            ("FLAG_LOW_OFFSET", _bit(insn, 11)),
        )
    return make(fmt.UNDEFINED, "thumb_undefined")


_ARM_UNDEFINED = DecodedInstruction(ArmFormat.UNDEFINED, "arm_undefined")


def _arm_multiply_group(insn: int) -> DecodedInstruction | None:
    key = (_bits(insn, 23, 26), _bits(insn, 4, 8))
    if key == (0b000, 0b1001):
        if _bit(insn, 22):
            return None
        return DecodedInstruction(
            ArmFormat.MULTIPLY,
            "exec_arm_mul_mla",
            (("UPDATE_FLAGS", _bit(insn, 20)), ("ACCUMULATE", _bit(insn, 21))),
        )
    if key == (0b001, 0b1001):
        return DecodedInstruction(
            ArmFormat.MULTIPLY_LONG,
            "exec_arm_mull_mlal",
            (
                ("UPDATE_FLAGS", _bit(insn, 20)),
                ("ACCUMULATE", _bit(insn, 21)),
                ("U_FLAG", _bit(insn, 22)),
            ),
        )
    if key == (0b010, 0b1001):
        if _bits(insn, 20, 22) != 0:
            return None
        return DecodedInstruction(
            ArmFormat.SINGLE_DATA_SWAP, "exec_arm_swp", (("BYTE", _bit(insn, 22)),)
        )
    if key == (0b010, 0b0001):
        if _bits(insn, 20, 23) != 0b010:
            return None
        return DecodedInstruction(ArmFormat.BRANCH_EXCHANGE, "exec_arm_bx")
    return None


def _arm_data_processing_group(insn: int) -> DecodedInstruction:
    special = _arm_multiply_group(insn)
    if special is not None:
        return special

    selector = (_bit(insn, 25), _bit(insn, 22), _bit(insn, 7), _bit(insn, 4))
    if selector in ((False, False, True, True), (False, True, True, True)):
        fmt, name = (
            (ArmFormat.HALFWORD_DATA_TRANSFER_IMMEDIATE_OFFSET, "exec_arm_ldr_str_hs_imm")
            if selector[1]
            else (ArmFormat.HALFWORD_DATA_TRANSFER_REG_OFFSET, "exec_arm_ldr_str_hs_reg")
        )
        return DecodedInstruction(
            fmt,
            name,
            (
                ("HS", (insn & 0b1100000) >> 5),
                ("LOAD", _bit(insn, 20)),
                ("WRITEBACK", _bit(insn, 21)),
                ("PRE_INDEX", _bit(insn, 24)),
                ("ADD", _bit(insn, 23)),
            ),
        )

    set_cond_flags = _bit(insn, 20)
    # PSR transfers are the TST/TEQ/CMP/CMN opcodes with the S bit clear.
    is_op_not_touching_rd = _bits(insn, 21, 25) & 0b1100 == 0b1000
    if not set_cond_flags and is_op_not_touching_rd:
        if _bit(insn, 21):
            return DecodedInstruction(
                ArmFormat.MOVE_TO_STATUS,
                "exec_arm_transfer_to_status",
                (("IMM", _bit(insn, 25)), ("SPSR_FLAG", _bit(insn, 22))),
            )
        return DecodedInstruction(
            ArmFormat.MOVE_FROM_STATUS, "exec_arm_mrs", (("SPSR_FLAG", _bit(insn, 22)),)
        )
    return DecodedInstruction(
        ArmFormat.DATA_PROCESSING,
        "exec_arm_data_processing",
        (
            ("OP", _bits(insn, 21, 25)),
            ("IMM", _bit(insn, 25)),
            ("SET_FLAGS", _bit(insn, 20)),
            ("SHIFT_BY_REG", _bit(insn, 4)),
        ),
    )


def arm_decode(insn: int) -> DecodedInstruction:
    """Decode a 32-bit ARM instruction."""
    if not 0 <= insn <= 0xFFFF_FFFF:
        raise ValueError(f"ARM instruction out of range: {insn:#x}")

    group = _bits(insn, 26, 28)
    if group == 0b00:
        return _arm_data_processing_group(insn)
    if group == 0b01:
        if _bit(insn, 25) and _bit(insn, 4):
            return _ARM_UNDEFINED
        return DecodedInstruction(
            ArmFormat.SINGLE_DATA_TRANSFER,
            "exec_arm_ldr_str",
            (
                ("LOAD", _bit(insn, 20)),
                ("WRITEBACK", _bit(insn, 21)),
                ("PRE_INDEX", _bit(insn, 24)),
                ("BYTE", _bit(insn, 22)),
                ("SHIFT", _bit(insn, 25)),
                ("ADD", _bit(insn, 23)),
                ("BS_OP", _bits(insn, 5, 7)),
                ("SHIFT_BY_REG", _bit(insn, 4)),
            ),
        )
    if group == 0b10:
        if _bit(insn, 25):
            return DecodedInstruction(
                ArmFormat.BRANCH_LINK, "exec_arm_b_bl", (("LINK", _bit(insn, 24)),)
            )
        return DecodedInstruction(
            ArmFormat.BLOCK_DATA_TRANSFER,
            "exec_arm_ldm_stm",
            (
                ("LOAD", _bit(insn, 20)),
                ("WRITEBACK", _bit(insn, 21)),
                ("FLAG_S", _bit(insn, 22)),
                ("ADD", _bit(insn, 23)),
                ("PRE_INDEX", _bit(insn, 24)),
            ),
        )
    # Coprocessor instructions are not implemented; only SWI remains.
    if _bit(insn, 25) and _bit(insn, 24):
        return DecodedInstruction(ArmFormat.SOFTWARE_INTERRUPT, "exec_arm_swi")
    return _ARM_UNDEFINED