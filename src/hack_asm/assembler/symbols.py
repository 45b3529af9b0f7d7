"""
Hack Symbol Table
=================

Maps symbol names to addresses in one of the two Hack address spaces:

- **RAM** (data memory): predefined registers and pointers, I/O maps and
  user variables
- **ROM** (program memory): labels, i.e. the address of an instruction

Each entry holds a tagged Address rather than a bare integer. For tools
expecting the classic single-integer table, Address.encoded gives the
sign-encoded form: RAM addresses are stored as themselves, ROM addresses
as ``-(rom + 1)`` and unresolved entries as UNRESOLVED_SENTINEL. For
example, a label at ROM 12 encodes to -13 while a variable at RAM 12
encodes to 12.

Lifecycle
---------
1. Created with the predefined symbols only.
2. Pass 1 declares operand symbols (unresolved placeholders) and labels.
3. resolve_variables() binds every remaining placeholder to RAM, in the
   order symbols were first declared, starting at address 16.
4. Pass 2 only reads through address_of().
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from hack_asm.errors import (
    AssemblerError,
    DuplicateSymbolError,
    OutOfDataMemoryError,
    UndefinedSymbolError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Memory Map Constants
# =============================================================================

# First RAM address available for variables (after R0..R15)
FIRST_AVAILABLE_RAM_ADDRESS = 16

# Last RAM address available for variables (before the screen map)
LAST_AVAILABLE_RAM_ADDRESS = 0x4000 - 1

# Sign-encoded marker for "declared but not yet resolved"
UNRESOLVED_SENTINEL = -(2 ** 31)

PREDEFINED_SYMBOLS: dict[str, int] = {
    "SP": 0,
    "LCL": 1,
    "ARG": 2,
    "THIS": 3,
    "THAT": 4,
    **{f"R{reg}": reg for reg in range(16)},
    "SCREEN": 0x4000,
    "KBD": 0x6000,
}

SECTION_SEPARATOR = "========"


# =============================================================================
# Address Variant
# =============================================================================

class AddressSpace(Enum):
    """The space an Address lives in."""
    RAM = "RAM"
    ROM = "ROM"
    UNRESOLVED = "???"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Address:
    """
    A symbol's binding: Ram(n), Rom(n) or Unresolved.

    Attributes:
        space: Which address space the value refers to
        value: Non-negative address (0 for unresolved entries)
    """
    space: AddressSpace
    value: int = 0

    @classmethod
    def ram(cls, value: int) -> "Address":
        return cls(AddressSpace.RAM, value)

    @classmethod
    def rom(cls, value: int) -> "Address":
        return cls(AddressSpace.ROM, value)

    @classmethod
    def unresolved(cls) -> "Address":
        return cls(AddressSpace.UNRESOLVED)

    @property
    def is_resolved(self) -> bool:
        return self.space is not AddressSpace.UNRESOLVED

    @property
    def is_rom(self) -> bool:
        return self.space is AddressSpace.ROM

    @property
    def encoded(self) -> int:
        """The classic sign-encoded integer for this binding."""
        if self.space is AddressSpace.UNRESOLVED:
            return UNRESOLVED_SENTINEL
        if self.space is AddressSpace.ROM:
            return -(self.value + 1)
        return self.value

    @classmethod
    def from_encoded(cls, encoded: int) -> "Address":
        """Inverse of Address.encoded."""
        if encoded == UNRESOLVED_SENTINEL:
            return cls.unresolved()
        if encoded < 0:
            return cls.rom(-(encoded + 1))
        return cls.ram(encoded)

    def __str__(self) -> str:
        if not self.is_resolved:
            return "unresolved"
        return f"{self.space} 0x{self.value:04x}"


# =============================================================================
# Symbol Table
# =============================================================================

class SymbolTable:
    """
    Hack assembler symbol table.

    Iteration follows insertion order: predefined symbols first, then user
    symbols in the order they were first declared. That order is also the
    order in which variables receive RAM addresses.

    Usage:
        table = SymbolTable()
        table.declare_operand_symbol("i")
        table.declare_label("LOOP", 4)
        labels = table.resolve_variables()
        table.address_of("i")      # 16
        labels[4]                  # 'LOOP'
    """

    def __init__(self):
        self._symbols: dict[str, Address] = {
            name: Address.ram(value) for name, value in PREDEFINED_SYMBOLS.items()
        }
        self._resolved = False

    # =========================================================================
    # Pass 1: Declarations
    # =========================================================================

    def declare_operand_symbol(self, name: str) -> None:
        """
        Declare a symbol used as an A-command operand.

        Inserts an unresolved placeholder unless the symbol is already
        known; an existing binding is never overwritten.
        """
        if name not in self._symbols:
            self._symbols[name] = Address.unresolved()

    def declare_label(self, name: str, program_address: int) -> None:
        """
        Bind a label to a ROM address.

        A forward reference (unresolved placeholder) is overwritten.
        Re-declaring the same label at the same address is accepted.

        Raises:
            DuplicateSymbolError: If the name is bound to anything else
        """
        new = Address.rom(program_address)
        existing = self._symbols.get(name)

        if existing is not None and existing.is_resolved and existing != new:
            if name in PREDEFINED_SYMBOLS:
                previous = f"predefined {existing}"
            else:
                previous = str(existing)
            raise DuplicateSymbolError(name, program_address, previous=previous)

        self._symbols[name] = new

    # =========================================================================
    # Resolution
    # =========================================================================

    def resolve_variables(self) -> dict[int, str]:
        """
        Bind every unresolved symbol to the next free RAM address.

        Must be called exactly once, between pass 1 and pass 2.

        Returns:
            Reverse label index mapping ROM address -> label name. When
            several labels share an address the last one in table order
            is kept.

        Raises:
            OutOfDataMemoryError: If variables do not fit in RAM 16..0x3FFF
        """
        if self._resolved:
            raise AssemblerError("symbol table already resolved")

        label_index: dict[int, str] = {}
        ram_address = FIRST_AVAILABLE_RAM_ADDRESS

        for name, address in self._symbols.items():
            if not address.is_resolved:
                if ram_address > LAST_AVAILABLE_RAM_ADDRESS:
                    raise OutOfDataMemoryError(
                        LAST_AVAILABLE_RAM_ADDRESS - FIRST_AVAILABLE_RAM_ADDRESS + 1
                    )
                self._symbols[name] = Address.ram(ram_address)
                ram_address += 1
            elif address.is_rom:
                if address.value in label_index:
                    logger.warning(
                        f"labels '{label_index[address.value]}' and '{name}' "
                        f"share ROM address {address.value}; listing shows '{name}'"
                    )
                label_index[address.value] = name

        self._resolved = True
        logger.debug(
            f"resolved {ram_address - FIRST_AVAILABLE_RAM_ADDRESS} variables, "
            f"{len(label_index)} label addresses"
        )
        return label_index

    @property
    def is_resolved(self) -> bool:
        return self._resolved

    # =========================================================================
    # Lookup
    # =========================================================================

    def address_of(self, name: str) -> int:
        """
        Get the plain address of a symbol, whichever space it is in.

        Raises:
            UndefinedSymbolError: If the symbol is unknown or unresolved
        """
        address = self._symbols.get(name)
        if address is None or not address.is_resolved:
            raise UndefinedSymbolError(name)
        return address.value

    def get(self, name: str) -> Address | None:
        return self._symbols.get(name)

    def is_label(self, name: str) -> bool:
        address = self._symbols.get(name)
        return address is not None and address.is_rom

    @staticmethod
    def is_predefined(name: str) -> bool:
        return name in PREDEFINED_SYMBOLS

    def items(self) -> Iterator[tuple[str, Address]]:
        return iter(self._symbols.items())

    def __contains__(self, name: object) -> bool:
        return name in self._symbols

    def __len__(self) -> int:
        return len(self._symbols)

    # =========================================================================
    # Listing
    # =========================================================================

    def dump(self, include_predefined: bool = False) -> list[str]:
        """
        Format the symbol table for listing.

        Sections are CONSTANTS (only with include_predefined), DATA and
        LABELS, each sorted by name and separated by SECTION_SEPARATOR.
        """
        lines: list[str] = []

        if include_predefined:
            lines.append("CONSTANTS:")
            for name in sorted(PREDEFINED_SYMBOLS):
                lines.append(self._dump_entry(name))
            lines.append(SECTION_SEPARATOR)

        user_symbols = sorted(
            name for name in self._symbols if name not in PREDEFINED_SYMBOLS
        )

        lines.append("DATA:")
        lines.extend(
            self._dump_entry(name) for name in user_symbols if not self.is_label(name)
        )
        lines.append(SECTION_SEPARATOR)
        lines.append("LABELS:")
        lines.extend(
            self._dump_entry(name) for name in user_symbols if self.is_label(name)
        )
        return lines

    def _dump_entry(self, name: str) -> str:
        address = self._symbols[name]
        if not address.is_resolved:
            return f"{name:>40}: {address.space}"
        return f"{name:>40}: {address.space} 0x{address.value:04x} ({address.value:5d})"
