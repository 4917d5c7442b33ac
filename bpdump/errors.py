"""Exceptions raised while turning Blueprint exports into text."""

from __future__ import annotations


class DumpError(ValueError):
    """Base class for failures that abort a single export."""


class BytecodeUnavailable(DumpError):
    """The function's script bytecode was not loaded by the asset provider."""


class UnsupportedOpcode(DumpError):
    """An instruction tag outside the known opcode table was encountered."""

    def __init__(self, token: object, offset: int) -> None:
        label = f"0x{token:02X}" if isinstance(token, int) else repr(token)
        super().__init__(f"opcode {label} at 0x{offset:X} is not supported by the disassembler")
        self.token = token
        self.offset = offset


class MalformedStream(DumpError):
    """The instruction tree violates the layout of a serialized script."""
