"""
Hack Assembler Error Hierarchy
==============================

This module defines the exception hierarchy for the Hack assembler.
All exceptions inherit from HackError, allowing callers to catch every
assembler-related failure with a single except clause if desired.

Exception Hierarchy
-------------------
HackError (base)
└── AssemblerError (assembly-related)
    ├── UnrecognizedMnemonicError - bad comp/dest/jump text
    ├── InvalidSymbolError - text fails the symbol/constant grammar
    ├── DuplicateSymbolError - label bound at two different addresses
    ├── UndefinedSymbolError - symbol never resolved to an address
    ├── IntegerTooLargeError - A-command literal beyond 15 bits
    ├── ProgramTooLargeError - more instructions than ROM holds
    └── OutOfDataMemoryError - more variables than free RAM

Design Philosophy
-----------------
Errors are raised without a location by the symbol table and encoder,
which know nothing about source lines. The two-pass driver then attaches
the location of the line being processed (see AssemblerError.locate) and
re-raises. Only the first error of a run is ever reported.

Error messages follow this format:
    filename:line: error: description
        source_line_text
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class HackError(Exception):
    """
    Base exception for all Hack assembler errors.

        try:
            assembler.assemble_file("Prog.asm")
        except HackError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
    """
    filename: str
    line: int

    def __str__(self) -> str:
        """Format as 'filename:line' for error messages."""
        return f"{self.filename}:{self.line}"


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(HackError):
    """
    Base exception for all assembly errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def locate(
        self,
        location: SourceLocation,
        source_line: Optional[str] = None,
    ) -> "AssemblerError":
        """
        Attach a source location to an error raised without one.

        An error that already carries a location keeps it. Returns self so
        the caller can write ``raise error.locate(...)``.
        """
        if self.location is None:
            self.location = location
            self.source_line = source_line
            self.args = (self._format_message(),)
        return self

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            Prog.asm:7: error: unrecognized comp mnemonic 'D+2'
                D=D+2
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line.strip()}")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class UnrecognizedMnemonicError(AssemblerError):
    """
    Unknown text in one of the three fields of a C-command.

    Because any line not starting with '@' or '(' is classified as a
    C-command, this is also the error reported for most garbage lines.
    """

    def __init__(self, field: str, mnemonic: str, **kwargs):
        self.field = field
        self.mnemonic = mnemonic
        super().__init__(f"unrecognized {field} mnemonic '{mnemonic}'", **kwargs)


class InvalidSymbolError(AssemblerError):
    """
    Text that is neither a decimal constant nor a valid symbol.

    Symbols must match [A-Za-z][A-Za-z0-9_.$:]*.
    """

    def __init__(self, text: str, kind: str = "symbol/constant", **kwargs):
        self.text = text
        self.kind = kind
        super().__init__(f"invalid {kind} '{text}'", **kwargs)


class DuplicateSymbolError(AssemblerError):
    """
    Label bound to a second, different address.

    Also raised when a label reuses the name of a predefined symbol.
    """

    def __init__(
        self,
        symbol: str,
        address: Optional[int] = None,
        previous: Optional[str] = None,
        **kwargs,
    ):
        self.symbol = symbol
        self.address = address
        self.previous = previous

        if previous and "hint" not in kwargs:
            kwargs["hint"] = f"'{symbol}' is already bound to {previous}"

        super().__init__(f"duplicate symbol '{symbol}'", **kwargs)


class UndefinedSymbolError(AssemblerError):
    """
    Reference to a symbol with no resolved address.

    After variable resolution every operand symbol has an address, so
    seeing this from the driver signals an internal inconsistency.
    """

    def __init__(self, symbol: str, **kwargs):
        self.symbol = symbol
        super().__init__(f"undefined symbol '{symbol}'", **kwargs)


class IntegerTooLargeError(AssemblerError):
    """A-command constant that does not fit in 15 bits."""

    def __init__(self, value: int, **kwargs):
        self.value = value
        super().__init__(
            f"integer too large: {value} (0x{value:x})",
            hint="A-command constants range from 0 to 32767",
            **kwargs,
        )


class ProgramTooLargeError(AssemblerError):
    """Program needs more instruction words than ROM provides."""

    def __init__(self, limit: int, **kwargs):
        self.limit = limit
        super().__init__(f"ROM capacity exceeded ({limit} instructions)", **kwargs)


class OutOfDataMemoryError(AssemblerError):
    """More distinct variables than available RAM addresses."""

    def __init__(self, limit: int, **kwargs):
        self.limit = limit
        super().__init__(
            f"RAM capacity exceeded (more than {limit} variables)", **kwargs
        )
