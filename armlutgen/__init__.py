"""Decoders and lookup-table generators for ARM7TDMI ARM and THUMB opcodes."""

__version__ = "0.1.0"
__all__ = ["decode", "lut"]