"""
Hack Assembler - Toolchain for the Hack 16-bit Computer
=======================================================

This package assembles programs for the Hack computer, the 16-bit machine
built in the "Elements of Computing Systems" course. Source files (.asm)
become text files of binary machine words (.hack), one instruction per
line, ready for the CPU emulator.

Main Components
---------------
- **assembler**: Two-pass Hack assembler
    Source reader, symbol table, instruction encoder and driver

- **cli**: Command-line tools (hackasm)

Quick Start
-----------
Assemble a program:
    >>> from hack_asm import Assembler
    >>> asm = Assembler()
    >>> code = asm.assemble_file("Max.asm")
    >>> asm.write_hack("Max.hack")

Or use the command-line tool:
    $ hackasm Max.asm
    $ hackasm -c -u Max.asm build/

Memory Map
----------
- RAM 0..15: R0..R15 (SP, LCL, ARG, THIS, THAT alias R0..R4)
- RAM 16..0x3FFF: variables
- RAM 0x4000: SCREEN, RAM 0x6000: KBD
- ROM 0..0x7FFF: instructions
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from hack_asm.assembler import Assembler, assemble, assemble_file
from hack_asm.errors import (
    HackError,
    AssemblerError,
    SourceLocation,
    UnrecognizedMnemonicError,
    InvalidSymbolError,
    DuplicateSymbolError,
    UndefinedSymbolError,
    IntegerTooLargeError,
    ProgramTooLargeError,
    OutOfDataMemoryError,
)

__all__ = [
    # Version info
    "__version__",
    # Assembler
    "Assembler",
    "assemble",
    "assemble_file",
    # Exception hierarchy
    "HackError",
    "AssemblerError",
    "SourceLocation",
    "UnrecognizedMnemonicError",
    "InvalidSymbolError",
    "DuplicateSymbolError",
    "UndefinedSymbolError",
    "IntegerTooLargeError",
    "ProgramTooLargeError",
    "OutOfDataMemoryError",
]
