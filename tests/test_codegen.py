# =============================================================================
# test_codegen.py - Instruction Encoder Unit Tests
# =============================================================================
# Tests for the Hack instruction encoder and code generator.
#
# Test coverage includes:
#   - comp/dest/jump field tables and their inverses
#   - A-instruction and C-instruction word layout
#   - Unrecognized mnemonic errors
#   - CodeGenerator sink output, ROM addressing and listener events
#   - Code listing formatting
# =============================================================================

import io

import pytest

from hack_asm.assembler.codegen import (
    COMP_CODES,
    DEST_CODES,
    JUMP_CODES,
    MAX_INT15,
    CodeGenerator,
    EmittedWord,
    decode_address,
    decode_comp,
    decode_dest,
    decode_jump,
    encode_address,
    encode_comp,
    encode_compute,
    encode_dest,
    encode_jump,
    format_code_line,
    format_label_line,
)
from hack_asm.errors import UnrecognizedMnemonicError


# =============================================================================
# Field Table Tests
# =============================================================================

class TestCompField:
    """Test the comp field encoder."""

    def test_table_has_28_mnemonics(self):
        """The Hack ALU exposes exactly 28 comp mnemonics."""
        assert len(COMP_CODES) == 28

    def test_codes_are_seven_distinct_bits(self):
        """Every comp code is 7 binary digits and no two collide."""
        codes = list(COMP_CODES.values())
        assert all(len(code) == 7 and set(code) <= {"0", "1"} for code in codes)
        assert len(set(codes)) == len(codes)

    @pytest.mark.parametrize("mnemonic,bits", [
        ("0", "0101010"),
        ("1", "0111111"),
        ("-1", "0111010"),
        ("D", "0001100"),
        ("A", "0110000"),
        ("D+A", "0000010"),
        ("D|A", "0010101"),
        ("M", "1110000"),
        ("D+M", "1000010"),
        ("M-D", "1000111"),
    ])
    def test_known_codes(self, mnemonic, bits):
        assert encode_comp(mnemonic) == bits

    def test_m_forms_only_differ_in_a_bit(self):
        """Each M mnemonic matches its A counterpart except for the a bit."""
        for mnemonic, code in COMP_CODES.items():
            if "M" in mnemonic:
                a_form = COMP_CODES[mnemonic.replace("M", "A")]
                assert code[0] == "1"
                assert a_form[0] == "0"
                assert code[1:] == a_form[1:]

    def test_unknown_comp(self):
        with pytest.raises(UnrecognizedMnemonicError) as exc_info:
            encode_comp("D+2")
        assert exc_info.value.field == "comp"
        assert exc_info.value.mnemonic == "D+2"

    def test_commuted_forms_are_not_accepted(self):
        """Only the canonical operand order is part of the language."""
        with pytest.raises(UnrecognizedMnemonicError):
            encode_comp("A+D")

    def test_decode_comp_inverts_encode(self):
        for mnemonic in COMP_CODES:
            assert decode_comp(encode_comp(mnemonic)) == mnemonic


class TestDestField:
    """Test the dest field encoder."""

    def test_bits_mark_each_register(self):
        """dest bits are set for A, D and M, in that order."""
        for mnemonic, bits in DEST_CODES.items():
            expected = "".join("1" if reg in mnemonic else "0" for reg in "ADM")
            assert encode_dest(mnemonic) == bits == expected

    def test_values_cover_zero_to_seven(self):
        assert sorted(int(bits, 2) for bits in DEST_CODES.values()) == list(range(8))

    def test_round_trip(self):
        for mnemonic in DEST_CODES:
            assert decode_dest(encode_dest(mnemonic)) == mnemonic

    @pytest.mark.parametrize("mnemonic", ["DM", "MA", "X", "null"])
    def test_unknown_dest(self, mnemonic):
        with pytest.raises(UnrecognizedMnemonicError) as exc_info:
            encode_dest(mnemonic)
        assert exc_info.value.field == "dest"


class TestJumpField:
    """Test the jump field encoder."""

    @pytest.mark.parametrize("mnemonic,value", [
        ("", 0), ("JGT", 1), ("JEQ", 2), ("JGE", 3),
        ("JLT", 4), ("JNE", 5), ("JLE", 6), ("JMP", 7),
    ])
    def test_jump_values(self, mnemonic, value):
        assert int(encode_jump(mnemonic), 2) == value

    def test_round_trip(self):
        for mnemonic in JUMP_CODES:
            assert decode_jump(encode_jump(mnemonic)) == mnemonic

    def test_unknown_jump(self):
        with pytest.raises(UnrecognizedMnemonicError) as exc_info:
            encode_jump("jmp")
        assert exc_info.value.field == "jump"
        assert "unrecognized jump mnemonic 'jmp'" in str(exc_info.value)

    def test_decode_rejects_bad_bits(self):
        with pytest.raises(UnrecognizedMnemonicError):
            decode_jump("1000")


# =============================================================================
# Word Layout Tests
# =============================================================================

class TestAddressInstruction:
    """Test A-instruction words."""

    @pytest.mark.parametrize("value,word", [
        (0, "0000000000000000"),
        (2, "0000000000000010"),
        (16, "0000000000010000"),
        (0x4000, "0100000000000000"),
        (MAX_INT15, "0111111111111111"),
    ])
    def test_encode(self, value, word):
        assert encode_address(value) == word

    @pytest.mark.parametrize("value", [0, 1, 255, 12345, 0x6000, MAX_INT15])
    def test_decode_recovers_value(self, value):
        word = encode_address(value)
        assert len(word) == 16
        assert word[0] == "0"
        assert decode_address(word) == value

    @pytest.mark.parametrize("value", [-1, MAX_INT15 + 1, 0x10000])
    def test_encode_rejects_out_of_range(self, value):
        with pytest.raises(ValueError):
            encode_address(value)

    def test_decode_rejects_c_instruction(self):
        with pytest.raises(ValueError):
            decode_address("1110101010000111")


class TestComputeInstruction:
    """Test C-instruction words."""

    @pytest.mark.parametrize("comp,dest,jump,word", [
        ("A", "D", "", "1110110000010000"),
        ("D+A", "D", "", "1110000010010000"),
        ("D", "M", "", "1110001100001000"),
        ("0", "", "JMP", "1110101010000111"),
        ("M", "D", "", "1111110000010000"),
        ("M+1", "M", "", "1111110111001000"),
        ("D|M", "AMD", "JNE", "1111010101111101"),
    ])
    def test_encode(self, comp, dest, jump, word):
        assert encode_compute(comp, dest, jump) == word

    def test_bad_field_is_reported(self):
        with pytest.raises(UnrecognizedMnemonicError) as exc_info:
            encode_compute("D", "Q", "")
        assert exc_info.value.field == "dest"


# =============================================================================
# Code Generator Tests
# =============================================================================

class TestCodeGenerator:
    """Test the CodeGenerator output sink and listener."""

    def test_writes_one_line_per_word(self):
        sink = io.StringIO()
        codegen = CodeGenerator(sink=sink)
        codegen.generate_address(2)
        codegen.generate_compute("A", "D", "")

        assert sink.getvalue() == "0000000000000010\n1110110000010000\n"
        assert codegen.words == ["0000000000000010", "1110110000010000"]
        assert codegen.word_count == 2

    def test_works_without_sink(self):
        codegen = CodeGenerator()
        assert codegen.generate_compute("0", "", "JMP") == "1110101010000111"
        assert codegen.words == ["1110101010000111"]

    def test_rom_address_tracks_next_word(self):
        codegen = CodeGenerator()
        assert codegen.rom_address == 0
        codegen.generate_address(5)
        codegen.generate_address(6)
        assert codegen.rom_address == 2

    def test_listener_receives_words_with_labels(self):
        events = []
        codegen = CodeGenerator(label_index={1: "LOOP"}, listener=events.append)
        codegen.generate_address(16, symbol="i")
        codegen.generate_compute("0", "", "JMP")

        assert events[0] == EmittedWord(0, "0000000000010000", symbol="i")
        assert events[1].address == 1
        assert events[1].label == "LOOP"
        assert events[1].symbol is None

    def test_failed_word_is_not_emitted(self):
        sink = io.StringIO()
        codegen = CodeGenerator(sink=sink)
        with pytest.raises(UnrecognizedMnemonicError):
            codegen.generate_compute("D*A", "D", "")
        assert sink.getvalue() == ""
        assert codegen.word_count == 0


# =============================================================================
# Listing Format Tests
# =============================================================================

class TestCodeListing:
    """Test code listing line formatting."""

    def test_address_line_with_symbol(self):
        line = format_code_line(EmittedWord(3, encode_address(16), symbol="i"))
        assert line == "    3=0000000000010000  | address[   16=0x0010] @i"

    def test_address_line_without_symbol(self):
        line = format_code_line(EmittedWord(0, encode_address(2)))
        assert line.endswith("address[    2=0x0002]")

    def test_compute_line_with_dest(self):
        line = format_code_line(EmittedWord(1, encode_compute("D+A", "D", "")))
        assert "comp[D+A]" in line
        assert "dest[  D]" in line
        assert "jump[" not in line

    def test_compute_line_with_jump(self):
        line = format_code_line(EmittedWord(1, encode_compute("0", "", "JMP")))
        assert "comp[  0]" in line
        assert "dest[" not in line
        assert line.endswith("jump[JMP]")

    def test_label_line(self):
        assert format_label_line(4, "END") == f"    4={'':16s}  | label[END]"
