"""
Hack Assembler - Main Interface
===============================

This module provides the Assembler class, the two-pass driver that turns
Hack assembly source into Hack machine code.

Assembly Process
----------------
1. **Pass 1**: classify every line and build the symbol table.
   - numeric A-command operands are range checked
   - symbolic A-command operands are declared (possibly as placeholders)
   - labels are bound to the ROM address of the next instruction
2. **Symbol resolution**: placeholders become variables in RAM from
   address 16; the reverse label index is built for listings.
3. **Pass 2**: re-read the source and emit one word per instruction.

The source is read once and buffered as lines, so both passes see
identical text even when the input is a non-seekable stream.

Example Usage
-------------
>>> from hack_asm.assembler import Assembler
>>> asm = Assembler()
>>> asm.assemble_string('''
... (LOOP)
...     @LOOP
...     0;JMP
... ''')
['0000000000000000', '1110101010000111']
>>> asm.get_label_index()
{0: 'LOOP'}
>>> asm.write_hack("Loop.hack")
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Callable, Optional, TextIO

from hack_asm.errors import (
    AssemblerError,
    IntegerTooLargeError,
    InvalidSymbolError,
    ProgramTooLargeError,
    SourceLocation,
)
from hack_asm.assembler.codegen import MAX_INT15, CodeGenerator, EmittedWord
from hack_asm.assembler.reader import (
    AddressCommand,
    Command,
    ComputeCommand,
    LabelCommand,
    SourceReader,
    is_constant,
    is_symbol,
    split_lines,
)
from hack_asm.assembler.symbols import SymbolTable

logger = logging.getLogger(__name__)


# Hack ROM holds 32K instructions
MAX_PROGRAM_WORDS = MAX_INT15 + 1

SourceListener = Callable[[int, Command], None]
CodeListener = Callable[[EmittedWord], None]
PassListener = Callable[[int], None]


# =============================================================================
# Driver State
# =============================================================================

class AssemblerState(Enum):
    """Where an Assembler is in its current (or last) run."""
    READY = auto()
    PASS1 = auto()
    RESOLVING_SYMBOLS = auto()
    PASS2 = auto()
    DONE = auto()
    FAILED = auto()


@dataclass
class AssemblyContext:
    """
    Mutable state owned by a single assembly run.

    Attributes:
        filename: Source name used in error locations
        lines: Buffered source lines, read by both passes
        symbols: Symbol table for this run
        rom_address: ROM address of the next instruction (pass 1)
        label_index: ROM address -> label name, built between passes
        codegen: Code generator used by pass 2
    """
    filename: str
    lines: list[str]
    symbols: SymbolTable = field(default_factory=SymbolTable)
    rom_address: int = 0
    label_index: dict[int, str] = field(default_factory=dict)
    codegen: Optional[CodeGenerator] = None


# =============================================================================
# Listing Helpers
# =============================================================================

SOURCE_LISTING_HEADER = (
    "line#:cmd|        source",
    "-----:---+-------------------------",
)

SOURCE_LISTING_EOF = "<<EOF>>"


def format_source_line(command: Command) -> str:
    """Format a classified line as 'line#: key |source'."""
    return f"{command.line:5d}: {command.command_type} |{command.source}"


# =============================================================================
# Assembler
# =============================================================================

class Assembler:
    """
    Two-pass Hack assembler.

    Every call to one of the assemble_* methods is an independent run with
    a fresh AssemblyContext. The results of the most recent run stay
    available through get_code(), get_label_index() and friends.

    Attributes:
        verbose: If True, print progress messages
    """

    def __init__(
        self,
        verbose: bool = False,
        source_listener: Optional[SourceListener] = None,
        code_listener: Optional[CodeListener] = None,
        pass_listener: Optional[PassListener] = None,
    ):
        """
        Initialize the assembler.

        Args:
            verbose: Enable verbose output
            source_listener: Called with (pass_number, command) for every
                             classified source line in each pass
            code_listener: Called with an EmittedWord for every generated
                           instruction
            pass_listener: Called with the pass number (1 or 2) as each
                           pass starts, before its first source line
        """
        self._verbose = verbose
        self._source_listener = source_listener
        self._code_listener = code_listener
        self._pass_listener = pass_listener
        self._state = AssemblerState.READY
        self._context: Optional[AssemblyContext] = None

    @property
    def state(self) -> AssemblerState:
        return self._state

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble_string(
        self,
        source: str,
        filename: str = "<input>",
        sink: Optional[TextIO] = None,
    ) -> list[str]:
        """
        Assemble source code from a string.

        Args:
            source: Hack assembly source
            filename: Virtual filename for error messages
            sink: Optional text stream receiving one word per line as
                  instructions are generated

        Returns:
            Generated machine code, one 16-character word per instruction

        Raises:
            AssemblerError: On the first error found; the error carries
                            the location of the offending line
        """
        return self._run(split_lines(source), filename, sink)

    def assemble_stream(
        self,
        stream: TextIO,
        filename: str = "<stream>",
        sink: Optional[TextIO] = None,
    ) -> list[str]:
        """Assemble source read (once) from a text stream."""
        return self._run(split_lines(stream.read()), filename, sink)

    def assemble_file(
        self,
        filepath: str | Path,
        sink: Optional[TextIO] = None,
    ) -> list[str]:
        """
        Assemble source code from a file.

        Raises:
            AssemblerError: If assembly fails
            FileNotFoundError: If source file not found
        """
        filepath = Path(filepath)

        if self._verbose:
            print(f"Assembling {filepath}...")

        source = filepath.read_text(encoding="utf-8")
        return self.assemble_string(source, str(filepath), sink)

    def _run(
        self,
        lines: list[str],
        filename: str,
        sink: Optional[TextIO],
    ) -> list[str]:
        context = AssemblyContext(filename=filename, lines=lines)
        self._context = context

        try:
            self._state = AssemblerState.PASS1
            self._pass1(context)

            self._state = AssemblerState.RESOLVING_SYMBOLS
            context.label_index = context.symbols.resolve_variables()

            self._state = AssemblerState.PASS2
            context.codegen = CodeGenerator(
                sink=sink,
                label_index=context.label_index,
                listener=self._code_listener,
            )
            self._pass2(context)
        except Exception:
            self._state = AssemblerState.FAILED
            raise

        self._state = AssemblerState.DONE

        if self._verbose:
            print(f"Generated {context.codegen.word_count} instructions")

        return context.codegen.words

    # =========================================================================
    # Pass 1: Symbol Collection
    # =========================================================================

    def _pass1(self, context: AssemblyContext) -> None:
        """
        First pass: size check constants, declare symbols, bind labels.

        A- and C-commands each occupy one ROM word; labels occupy none.
        """
        self._start_pass(1)
        reader = SourceReader(context.lines)

        for command in reader:
            if self._source_listener is not None:
                self._source_listener(1, command)

            try:
                self._pass1_command(context, command)
            except AssemblerError as e:
                self._locate(e, context, command)
                raise

        logger.debug(
            f"{context.filename}: pass 1 read {reader.line_number} lines, "
            f"{context.rom_address} instructions"
        )

    def _pass1_command(self, context: AssemblyContext, command: Command) -> None:
        if isinstance(command, AddressCommand):
            self._pass1_address(context, command.operand)
            self._advance_rom(context)

        elif isinstance(command, ComputeCommand):
            self._advance_rom(context)

        elif isinstance(command, LabelCommand):
            if not command.closed or not is_symbol(command.name):
                raise InvalidSymbolError(command.name, kind="label")
            context.symbols.declare_label(command.name, context.rom_address)

    @staticmethod
    def _pass1_address(context: AssemblyContext, operand: str) -> None:
        if is_constant(operand):
            value = int(operand)
            if value > MAX_INT15:
                raise IntegerTooLargeError(value)
        elif is_symbol(operand):
            context.symbols.declare_operand_symbol(operand)
        else:
            raise InvalidSymbolError(operand)

    @staticmethod
    def _advance_rom(context: AssemblyContext) -> None:
        context.rom_address += 1
        if context.rom_address > MAX_PROGRAM_WORDS:
            raise ProgramTooLargeError(MAX_PROGRAM_WORDS)

    # =========================================================================
    # Pass 2: Code Generation
    # =========================================================================

    def _pass2(self, context: AssemblyContext) -> None:
        """Second pass: generate one word per A- or C-command."""
        codegen = context.codegen
        self._start_pass(2)

        for command in SourceReader(context.lines):
            if self._source_listener is not None:
                self._source_listener(2, command)

            try:
                if isinstance(command, AddressCommand):
                    operand = command.operand
                    if is_constant(operand):
                        codegen.generate_address(int(operand), command=command)
                    else:
                        codegen.generate_address(
                            context.symbols.address_of(operand),
                            symbol=operand,
                            command=command,
                        )

                elif isinstance(command, ComputeCommand):
                    codegen.generate_compute(
                        command.comp, command.dest, command.jump, command=command
                    )
            except AssemblerError as e:
                self._locate(e, context, command)
                raise

        logger.debug(f"{context.filename}: pass 2 generated {codegen.word_count} words")

    def _start_pass(self, pass_number: int) -> None:
        if self._pass_listener is not None:
            self._pass_listener(pass_number)

    @staticmethod
    def _locate(
        error: AssemblerError,
        context: AssemblyContext,
        command: Command,
    ) -> AssemblerError:
        return error.locate(
            SourceLocation(context.filename, command.line), command.source
        )

    # =========================================================================
    # Output Methods
    # =========================================================================

    def _completed(self) -> AssemblyContext:
        if self._state is not AssemblerState.DONE or self._context is None:
            raise AssemblerError("no successful assembly run")
        return self._context

    def get_code(self) -> list[str]:
        """Machine code words from the last successful run."""
        return self._completed().codegen.words

    @property
    def word_count(self) -> int:
        return self._completed().codegen.word_count

    def get_label_index(self) -> dict[int, str]:
        """Reverse label index (ROM address -> label) from the last run."""
        if self._context is None:
            return {}
        return dict(self._context.label_index)

    def get_symbol_table(self) -> SymbolTable:
        if self._context is None:
            raise AssemblerError("no assembly run")
        return self._context.symbols

    def get_symbols(self) -> dict[str, int]:
        """
        Resolved symbols and their plain addresses (RAM or ROM).

        Entries still unresolved (after a failed pass 1) are omitted.
        """
        if self._context is None:
            return {}
        return {
            name: address.value
            for name, address in self._context.symbols.items()
            if address.is_resolved
        }

    def write_hack(self, filepath: str | Path) -> None:
        """
        Write the generated code as a .hack file.

        Each instruction is one line of 16 '0'/'1' characters.
        """
        words = self.get_code()
        with open(filepath, "w", encoding="utf-8", newline="\n") as f:
            for word in words:
                f.write(word + "\n")

        if self._verbose:
            print(f"Wrote {len(words)} instructions to {filepath}")


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, filename: str = "<input>") -> list[str]:
    """
    Convenience function to assemble source code.

    Raises:
        AssemblerError: If assembly fails
    """
    return Assembler().assemble_string(source, filename)


def assemble_file(filepath: str | Path) -> list[str]:
    """
    Convenience function to assemble a file.

    Raises:
        AssemblerError: If assembly fails
    """
    return Assembler().assemble_file(filepath)
