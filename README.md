# armlutgen

`armlutgen` produces the opcode dispatch lookup tables that an ARM7TDMI CPU
core uses. It writes two tables:

- **THUMB**: 1024 entries, indexed by bits 6..15 of a 16-bit THUMB instruction.
- **ARM**: 4096 entries, indexed by bits 20..27 and 4..7 of a 32-bit ARM
  instruction.

Each entry names the instruction format, such as `DataProcessing` or
`BranchLongWithLink`, and the handler that executes it. The handler name
carries that handler's specialised parameters, for example
`exec_arm_b_bl::<true>`.

## Installation

```
pip install .
```

## Command line

```
armlutgen OUT_DIR
```

This writes `thumb_lut.rs` and `arm_lut.rs` into `OUT_DIR`. If no directory is
given, the `OUT_DIR` environment variable is used. If neither is set, the
command stops with a usage error. If a file cannot be written, it exits with
status 1.

## Library use

The `armlutgen.decode` module decodes single instructions. `thumb_decode` and
`arm_decode` each return a `DecodedInstruction`, which has these members:

- `fmt`: a `ThumbFormat` or `ArmFormat` member.
- `name`: the handler name.
- `args`: the handler's named arguments.
- `handler`: the full handler text.
- `arg(key)`: the value of one argument.

A value outside 16 bits (THUMB) or 32 bits (ARM) raises `ValueError`.

```python
from armlutgen.decode import arm_decode, thumb_decode, ArmFormat

decoded = arm_decode(0xEA000000)        # B <offset>
assert decoded.fmt is ArmFormat.BRANCH_LINK
print(decoded.handler)                  # exec_arm_b_bl::<false>
print(decoded.arg("LINK"))              # False

print(thumb_decode(0xDF00).handler)     # exec_thumb_swi
```

The `armlutgen.lut` module builds the tables in memory or renders them as text:

```python
from armlutgen.lut import thumb_lut, arm_lut, render_thumb_lut, render_arm_lut

thumb_entries = thumb_lut()   # 1024 DecodedInstruction values
arm_entries = arm_lut()       # 4096 DecodedInstruction values
source_text = render_arm_lut(arm_entries)
```

`write_luts` writes both table files to a directory. It returns the two file
paths, the THUMB table first:

```python
from armlutgen.lut import write_luts

thumb_path, arm_path = write_luts("generated")
```

## What it does not do

`armlutgen` only decodes instructions and generates tables. It does not execute
instructions, model memory or a CPU, or provide a debugger. Coprocessor
instructions decode as `Undefined`.

## Running the tests

```
pip install .[test]
pytest
```