"""
Hack Machine Code Generator
===========================

This module encodes Hack instructions as 16-character binary words and
writes them to an output sink.

Instruction Formats
-------------------
```
A-instruction:  0 vvvvvvvvvvvvvvv          (15-bit unsigned value)
C-instruction:  1 1 1 a c1..c6 d1 d2 d3 j1 j2 j3
                      \\_comp_/ \\dest/ \\jump/
```

The comp field has 28 mnemonics. The ``a`` bit selects M (memory at A)
instead of A as the ALU's second operand. The dest bits are A, D and M
in that order. The jump bits are the <, = and > conditions.

Output Format
-------------
One instruction per line, exactly 16 ASCII '0'/'1' characters, MSB first,
in ROM order starting at address 0.
"""

from dataclasses import dataclass
from typing import Callable, Optional, TextIO

from hack_asm.errors import UnrecognizedMnemonicError
from hack_asm.assembler.reader import Command


WORD_BITS = 16

# Largest 15-bit unsigned integer (the A-instruction payload)
MAX_INT15 = (1 << 15) - 1

C_INSTRUCTION_PREFIX = "111"


# =============================================================================
# Field Tables
# =============================================================================

#            comp     a   c1..c6
COMP_CODES: dict[str, str] = {
    "0":     "0" + "101010",
    "1":     "0" + "111111",
    "-1":    "0" + "111010",
    "D":     "0" + "001100",
    "A":     "0" + "110000",
    "!D":    "0" + "001101",
    "!A":    "0" + "110001",
    "-D":    "0" + "001111",
    "-A":    "0" + "110011",
    "D+1":   "0" + "011111",
    "A+1":   "0" + "110111",
    "D-1":   "0" + "001110",
    "A-1":   "0" + "110010",
    "D+A":   "0" + "000010",
    "D-A":   "0" + "010011",
    "A-D":   "0" + "000111",
    "D&A":   "0" + "000000",
    "D|A":   "0" + "010101",
    "M":     "1" + "110000",
    "!M":    "1" + "110001",
    "-M":    "1" + "110011",
    "M+1":   "1" + "110111",
    "M-1":   "1" + "110010",
    "D+M":   "1" + "000010",
    "D-M":   "1" + "010011",
    "M-D":   "1" + "000111",
    "D&M":   "1" + "000000",
    "D|M":   "1" + "010101",
}

DEST_CODES: dict[str, str] = {
    "":    "000",
    "M":   "001",
    "D":   "010",
    "MD":  "011",
    "A":   "100",
    "AM":  "101",
    "AD":  "110",
    "AMD": "111",
}

JUMP_CODES: dict[str, str] = {
    "":    "000",
    "JGT": "001",
    "JEQ": "010",
    "JGE": "011",
    "JLT": "100",
    "JNE": "101",
    "JLE": "110",
    "JMP": "111",
}

_COMP_MNEMONICS = {code: mnemonic for mnemonic, code in COMP_CODES.items()}
_DEST_MNEMONICS = {code: mnemonic for mnemonic, code in DEST_CODES.items()}
_JUMP_MNEMONICS = {code: mnemonic for mnemonic, code in JUMP_CODES.items()}


# =============================================================================
# Field Encoders
# =============================================================================

def encode_comp(mnemonic: str) -> str:
    """
    Convert the comp part of a C-command to its 7 bits (a + c1..c6).

    Raises:
        UnrecognizedMnemonicError: If mnemonic is not one of the 28 comps
    """
    try:
        return COMP_CODES[mnemonic]
    except KeyError:
        raise UnrecognizedMnemonicError("comp", mnemonic) from None


def encode_dest(mnemonic: str) -> str:
    """Convert the dest part of a C-command to its 3 bits (A, D, M)."""
    try:
        return DEST_CODES[mnemonic]
    except KeyError:
        raise UnrecognizedMnemonicError("dest", mnemonic) from None


def encode_jump(mnemonic: str) -> str:
    """Convert the jump part of a C-command to its 3 bits."""
    try:
        return JUMP_CODES[mnemonic]
    except KeyError:
        raise UnrecognizedMnemonicError("jump", mnemonic) from None


def encode_address(value: int) -> str:
    """
    Build an A-instruction word.

    Raises:
        ValueError: If value is outside 0..MAX_INT15
    """
    if not 0 <= value <= MAX_INT15:
        raise ValueError(f"A-instruction value out of range: {value}")
    return "0" + format(value, "015b")


def encode_compute(comp: str, dest: str, jump: str) -> str:
    """Build a complete C-instruction word from its three mnemonics."""
    return C_INSTRUCTION_PREFIX + encode_comp(comp) + encode_dest(dest) + encode_jump(jump)


# =============================================================================
# Field Decoders
# =============================================================================

def decode_comp(bits: str) -> str:
    try:
        return _COMP_MNEMONICS[bits]
    except KeyError:
        raise UnrecognizedMnemonicError("comp", bits) from None


def decode_dest(bits: str) -> str:
    try:
        return _DEST_MNEMONICS[bits]
    except KeyError:
        raise UnrecognizedMnemonicError("dest", bits) from None


def decode_jump(bits: str) -> str:
    try:
        return _JUMP_MNEMONICS[bits]
    except KeyError:
        raise UnrecognizedMnemonicError("jump", bits) from None


def decode_address(word: str) -> int:
    """Value carried by an A-instruction word."""
    if len(word) != WORD_BITS or word[0] != "0":
        raise ValueError(f"not an A-instruction word: {word!r}")
    return int(word[1:], 2)


# =============================================================================
# Emitted Word
# =============================================================================

@dataclass(frozen=True)
class EmittedWord:
    """
    One generated instruction, as reported to code listeners.

    Attributes:
        address: ROM address of the instruction
        code: The 16-character binary word
        command: Source command it was generated from (None if unknown)
        label: Label bound to this ROM address, if any
        symbol: Symbol an A-command was resolved from, if any
    """
    address: int
    code: str
    command: Optional[Command] = None
    label: Optional[str] = None
    symbol: Optional[str] = None


CODE_LISTING_HEADER = (
    " ROM =   machine code   |     details",
    "-----=------------------+------------------------------",
)


def format_label_line(address: int, label: str) -> str:
    return f"{address:5d}={'':16s}  | label[{label}]"


def format_code_line(word: EmittedWord) -> str:
    """
    Format one generated word for the code listing.

    A-instructions show their value in decimal and hex (plus the symbol
    it came from); C-instructions show their three fields.
    """
    prefix = f"{word.address:5d}={word.code}  | "

    if word.code[0] == "0":
        value = decode_address(word.code)
        details = f"address[{value:5d}=0x{value:04x}]"
        if word.symbol is not None:
            details += f" @{word.symbol}"
        return prefix + details

    comp = decode_comp(word.code[3:10])
    dest = decode_dest(word.code[10:13])
    jump = decode_jump(word.code[13:16])

    details = f"comp[{comp:>3s}] "
    details += f"dest[{dest:>3s}]" if dest else " " * 9
    if jump:
        details += f" jump[{jump:>3s}]"
    return prefix + details


# =============================================================================
# Code Generator
# =============================================================================

class CodeGenerator:
    """
    Encodes instructions in ROM order and writes them to a sink.

    The generator keeps every word it emits (see words) and, when a sink
    is given, writes each one as a newline-terminated line as soon as it
    is generated.

    Usage:
        codegen = CodeGenerator(sink=out, label_index={0: "LOOP"})
        codegen.generate_address(0, symbol="LOOP")
        codegen.generate_compute("0", "", "JMP")
    """

    def __init__(
        self,
        sink: Optional[TextIO] = None,
        label_index: Optional[dict[int, str]] = None,
        listener: Optional[Callable[[EmittedWord], None]] = None,
    ):
        self._sink = sink
        self._label_index = dict(label_index or {})
        self._listener = listener
        self._words: list[str] = []

    @property
    def words(self) -> list[str]:
        return list(self._words)

    @property
    def word_count(self) -> int:
        return len(self._words)

    @property
    def rom_address(self) -> int:
        """ROM address the next generated word will occupy."""
        return len(self._words)

    def generate_address(
        self,
        value: int,
        symbol: Optional[str] = None,
        command: Optional[Command] = None,
    ) -> str:
        """Generate an A-instruction loading value."""
        return self._emit(encode_address(value), command, symbol)

    def generate_compute(
        self,
        comp: str,
        dest: str,
        jump: str,
        command: Optional[Command] = None,
    ) -> str:
        """
        Generate a C-instruction.

        Raises:
            UnrecognizedMnemonicError: If any field is unknown
        """
        return self._emit(encode_compute(comp, dest, jump), command, None)

    def _emit(self, code: str, command: Optional[Command], symbol: Optional[str]) -> str:
        address = len(self._words)

        if self._sink is not None:
            self._sink.write(code + "\n")
        self._words.append(code)

        if self._listener is not None:
            self._listener(EmittedWord(
                address=address,
                code=code,
                command=command,
                label=self._label_index.get(address),
                symbol=symbol,
            ))
        return code
