# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Instruction table built from EVM bytecode."""

import re
from dataclasses import dataclass, field

PUSH1 = 0x60
PUSH32 = 0x7F

_LIBRARY_PLACEHOLDER = re.compile(r"__.{36}__")


@dataclass(frozen=True)
class InstructionTable:
    """Represent instruction start offsets of a bytecode blob.

    Attributes:
        offsets: Byte offset of each instruction, indexed by instruction number.
        byte_length: Total bytecode length in bytes.
    """

    offsets: tuple[int, ...]
    byte_length: int
    _index_by_offset: dict[int, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        index_by_offset = {offset: index for index, offset in enumerate(self.offsets)}
        object.__setattr__(self, "_index_by_offset", index_by_offset)

    def instruction_at(self, offset: int) -> int | None:
        """Return the instruction number starting exactly at ``offset``.

        Args:
            offset: Byte offset into the bytecode.

        Returns:
            Instruction number, or ``None`` if no instruction starts there.
        """
        return self._index_by_offset.get(offset)

    def __len__(self) -> int:
        return len(self.offsets)


def decode_hex(bytecode: str) -> bytes:
    """Decode a hex bytecode string.

    A ``0x`` prefix is optional and unlinked library placeholders decode to
    zero bytes.

    Args:
        bytecode: Hex string.

    Returns:
        Raw bytecode.

    Raises:
        ValueError: If the text is not valid hex.
    """
    text = bytecode.strip()
    if text[:2].lower() == "0x":
        text = text[2:]
    text = _LIBRARY_PLACEHOLDER.sub("0" * 40, text)
    return bytes.fromhex(text)


def build_instruction_table(code: bytes) -> InstructionTable:
    """Scan bytecode forward, recording where each instruction starts.

    ``PUSH1``..``PUSH32`` are followed by 1 to 32 data bytes which do not
    start instructions. A push truncated by the end of code still counts as
    one instruction.

    Args:
        code: Raw bytecode.

    Returns:
        Instruction table for the code.
    """
    offsets: list[int] = []
    pc = 0
    while pc < len(code):
        offsets.append(pc)
        opcode = code[pc]
        if PUSH1 <= opcode <= PUSH32:
            pc += opcode - PUSH1 + 1
        pc += 1
    return InstructionTable(offsets=tuple(offsets), byte_length=len(code))
