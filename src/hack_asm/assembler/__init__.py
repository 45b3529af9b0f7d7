"""
Hack Assembler
==============

This package translates Hack assembly language into Hack machine code:
text files with one 16-character binary word per instruction.

Main Components
---------------
- **Assembler**: Two-pass driver that orchestrates the assembly process
- **SourceReader**: Classifies source lines into commands
- **SymbolTable**: Labels, variables and predefined symbols
- **CodeGenerator**: Encodes instructions and writes them to a sink

Assembly Process
----------------
1. **Pass 1**: classify lines, check constants, bind labels to ROM
   addresses and declare the remaining operand symbols
2. **Resolution**: give every undeclared operand symbol a RAM address
   starting at 16
3. **Pass 2**: encode each A- and C-command

Example Usage
-------------
>>> from hack_asm.assembler import Assembler
>>> asm = Assembler()
>>> asm.assemble_string("@2\\nD=A\\n@3\\nD=D+A\\n@0\\nM=D")
['0000000000000010', '1110110000010000', '0000000000000011',
 '1110000010010000', '0000000000000000', '1110001100001000']
"""

from hack_asm.assembler.assembler import (
    Assembler,
    AssemblerState,
    AssemblyContext,
    MAX_PROGRAM_WORDS,
    SOURCE_LISTING_EOF,
    SOURCE_LISTING_HEADER,
    assemble,
    assemble_file,
    format_source_line,
)
from hack_asm.assembler.reader import (
    AddressCommand,
    Command,
    CommandType,
    ComputeCommand,
    EmptyCommand,
    LabelCommand,
    SourceReader,
    classify_line,
    is_constant,
    is_symbol,
    read_source,
    split_lines,
)
from hack_asm.assembler.symbols import (
    Address,
    AddressSpace,
    FIRST_AVAILABLE_RAM_ADDRESS,
    LAST_AVAILABLE_RAM_ADDRESS,
    PREDEFINED_SYMBOLS,
    SymbolTable,
)
from hack_asm.assembler.codegen import (
    CODE_LISTING_HEADER,
    CodeGenerator,
    EmittedWord,
    MAX_INT15,
    encode_address,
    encode_comp,
    encode_compute,
    encode_dest,
    encode_jump,
    format_code_line,
    format_label_line,
)

__all__ = [
    # Main class and functions
    "Assembler",
    "AssemblerState",
    "AssemblyContext",
    "assemble",
    "assemble_file",
    "MAX_PROGRAM_WORDS",
    # Source reader
    "SourceReader",
    "Command",
    "CommandType",
    "AddressCommand",
    "ComputeCommand",
    "LabelCommand",
    "EmptyCommand",
    "classify_line",
    "read_source",
    "split_lines",
    "is_constant",
    "is_symbol",
    # Symbol table
    "SymbolTable",
    "Address",
    "AddressSpace",
    "PREDEFINED_SYMBOLS",
    "FIRST_AVAILABLE_RAM_ADDRESS",
    "LAST_AVAILABLE_RAM_ADDRESS",
    # Code generator
    "CodeGenerator",
    "EmittedWord",
    "MAX_INT15",
    "encode_address",
    "encode_comp",
    "encode_dest",
    "encode_jump",
    "encode_compute",
    # Listings
    "SOURCE_LISTING_HEADER",
    "SOURCE_LISTING_EOF",
    "CODE_LISTING_HEADER",
    "format_source_line",
    "format_code_line",
    "format_label_line",
]
