"""
Hack Assembly Source Reader
===========================

This module reads Hack assembly source one line at a time and classifies
each line into a Command.

Line Types
----------
| Source            | Command         | Listing key |
|-------------------|-----------------|-------------|
| ``@value``        | AddressCommand  | A           |
| ``dest=comp;jump``| ComputeCommand  | C           |
| ``(LABEL)``       | LabelCommand    | :           |
| blank / comment   | EmptyCommand    | #           |

Comments run from ``//`` to the end of the line. Classification looks
only at the first significant character, so any line that starts with
neither ``@`` nor ``(`` is a C-command. Garbage therefore surfaces later,
when the code generator fails to recognize the comp/dest/jump fields.

Example
-------
>>> from hack_asm.assembler.reader import read_source
>>> for command in read_source("@2\\nD=A  // load\\n(END)"):
...     print(command)
AddressCommand(line=1, operand='2')
ComputeCommand(line=2, dest='D', comp='A', jump='')
LabelCommand(line=3, name='END')
"""

import io
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, Union


COMMENT_MARKER = "//"


# =============================================================================
# Command Types
# =============================================================================

class CommandType(Enum):
    """
    Classification of a source line.

    The value is the single-character key shown in source listings.
    """
    A_COMMAND = "A"
    C_COMMAND = "C"
    L_COMMAND = ":"
    COMMENT_ONLY = "#"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class BaseCommand:
    """
    Fields shared by every classified line.

    Attributes:
        line: 1-based physical line number
        source: The raw line as read, without its line terminator
    """
    line: int
    source: str = field(default="", repr=False, compare=False)

    command_type = CommandType.COMMENT_ONLY


@dataclass(frozen=True)
class EmptyCommand(BaseCommand):
    """Blank or comment-only line."""

    command_type = CommandType.COMMENT_ONLY


@dataclass(frozen=True)
class AddressCommand(BaseCommand):
    """A-command: ``@operand`` where operand is a constant or symbol."""
    operand: str = ""

    command_type = CommandType.A_COMMAND

    @property
    def is_constant(self) -> bool:
        return is_constant(self.operand)


@dataclass(frozen=True)
class ComputeCommand(BaseCommand):
    """C-command: ``dest=comp;jump`` with dest and jump optional."""
    dest: str = ""
    comp: str = ""
    jump: str = ""

    command_type = CommandType.C_COMMAND


@dataclass(frozen=True)
class LabelCommand(BaseCommand):
    """
    Label declaration: ``(name)``.

    Attributes:
        name: Text between '(' and the final ')'
        closed: False when the line lacks the closing ')'
    """
    name: str = ""
    closed: bool = True

    command_type = CommandType.L_COMMAND


Command = Union[AddressCommand, ComputeCommand, LabelCommand, EmptyCommand]


# =============================================================================
# Lexical Helpers
# =============================================================================

def is_constant(text: str) -> bool:
    """True iff text is a non-empty run of ASCII decimal digits."""
    return text.isascii() and text.isdigit()


def is_symbol(text: str) -> bool:
    """True iff text matches [A-Za-z][A-Za-z0-9_.$:]*."""
    if not text or not text.isascii() or not text[0].isalpha():
        return False
    return all(ch.isalnum() or ch in "_.$:" for ch in text[1:])


def strip_comment(text: str) -> str:
    """Remove an end-of-line comment and surrounding whitespace."""
    comment_at = text.find(COMMENT_MARKER)
    if comment_at >= 0:
        text = text[:comment_at]
    return text.strip()


def classify_line(text: str, line_number: int) -> Command:
    """
    Classify one physical source line.

    Args:
        text: Raw source line (a trailing newline is ignored)
        line_number: 1-based line number to record on the command

    Returns:
        The classified Command
    """
    raw = text.rstrip("\r\n")
    code = strip_comment(raw)

    if not code:
        return EmptyCommand(line_number, raw)

    if code[0] == "@":
        return AddressCommand(line_number, raw, operand=code[1:])

    if code[0] == "(":
        closed = code.endswith(")") and len(code) > 1
        name = code[1:-1] if closed else code[1:]
        return LabelCommand(line_number, raw, name=name, closed=closed)

    equals_at = code.find("=")
    semi_at = code.find(";")

    dest = code[:equals_at].strip() if equals_at >= 0 else ""
    comp_start = equals_at + 1
    if semi_at >= 0:
        comp = code[comp_start:semi_at].strip()
        jump = code[semi_at + 1:].strip()
    else:
        comp = code[comp_start:].strip()
        jump = ""

    return ComputeCommand(line_number, raw, dest=dest, comp=comp, jump=jump)


# =============================================================================
# Source Reader
# =============================================================================

def split_lines(source: str) -> list[str]:
    """
    Split source text into physical lines.

    Only LF, CR and CRLF end a line. Form feeds and other characters
    that str.splitlines() treats as breaks stay inside the line.
    """
    return [line.rstrip("\n") for line in io.StringIO(source, newline=None)]


class SourceReader:
    """
    Forward-only reader producing one Command per physical line.

    A reader is consumed once; each assembler pass creates a new one over
    the same lines.

    Usage:
        reader = SourceReader(split_lines(source))
        for command in reader:
            print(reader.line_number, command.command_type)
    """

    def __init__(self, lines: Iterable[str]):
        self._lines = iter(lines)
        self._line_number = 0

    @property
    def line_number(self) -> int:
        """1-based number of the line most recently read (0 before the first)."""
        return self._line_number

    def __iter__(self) -> Iterator[Command]:
        return self

    def __next__(self) -> Command:
        text = next(self._lines)
        self._line_number += 1
        return classify_line(text, self._line_number)


def read_source(source: str) -> Iterator[Command]:
    """Classify every line of a source string."""
    return SourceReader(split_lines(source))
