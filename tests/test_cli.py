# =============================================================================
# test_cli.py - hackasm Command-Line Tests
# =============================================================================
# Tests for the hackasm command, run through click's CliRunner.
#
# Test coverage includes:
#   - Output file naming and placement
#   - Argument validation and exit codes
#   - Source, code and symbol listings
#   - Verbose and path reporting options
# =============================================================================

import pytest
from click.testing import CliRunner

from hack_asm import __version__
from hack_asm.cli.errors import ExitCode
from hack_asm.cli.hackasm import main, resolve_hack_file


PROGRAM = """\
// counter
@i
M=1
(LOOP)
@LOOP
0;JMP
"""

PROGRAM_CODE = (
    "0000000000010000\n"
    "1110111111001000\n"
    "0000000000000010\n"
    "1110101010000111\n"
)


@pytest.fixture
def asm_file(tmp_path):
    path = tmp_path / "Prog.asm"
    path.write_text(PROGRAM)
    return path


def run(*args):
    return CliRunner().invoke(main, [str(arg) for arg in args])


# =============================================================================
# Output File Tests
# =============================================================================

class TestOutputFile:
    """Test where and when the hack-file is written."""

    def test_writes_next_to_source(self, asm_file):
        result = run(asm_file)

        assert result.exit_code == ExitCode.SUCCESS
        assert (asm_file.parent / "Prog.hack").read_text() == PROGRAM_CODE

    def test_output_dir(self, asm_file, tmp_path):
        build = tmp_path / "build"
        build.mkdir()

        result = run(asm_file, build)

        assert result.exit_code == 0
        assert (build / "Prog.hack").read_text() == PROGRAM_CODE
        assert not (tmp_path / "Prog.hack").exists()

    def test_resolve_hack_file(self, tmp_path):
        asm = tmp_path / "src" / "Max.asm"
        assert resolve_hack_file(asm, None) == tmp_path / "src" / "Max.hack"
        assert resolve_hack_file(asm, tmp_path) == tmp_path / "Max.hack"


# =============================================================================
# Error Tests
# =============================================================================

class TestErrors:
    """Test exit codes for bad arguments and bad programs."""

    def test_wrong_extension(self, tmp_path):
        source = tmp_path / "Prog.txt"
        source.write_text(PROGRAM)

        result = run(source)

        assert result.exit_code == ExitCode.INVALID_ARGS
        assert "must have a '.asm' filename extension" in result.output
        assert not (tmp_path / "Prog.hack").exists()

    def test_missing_file(self, tmp_path):
        result = run(tmp_path / "Nope.asm")
        assert result.exit_code == 2

    def test_output_dir_must_exist(self, asm_file, tmp_path):
        result = run(asm_file, tmp_path / "missing")
        assert result.exit_code == 2

    def test_assembly_error(self, tmp_path):
        source = tmp_path / "Bad.asm"
        source.write_text("@1\nD=D+2\n")

        result = run(source)

        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "Assembly failed" in result.output
        assert ":2: error: unrecognized comp mnemonic 'D+2'" in result.output
        assert not (tmp_path / "Bad.hack").exists()

    def test_failed_run_keeps_old_hack_file(self, tmp_path):
        source = tmp_path / "Bad.asm"
        source.write_text("@99999\n")
        old = tmp_path / "Bad.hack"
        old.write_text("previous\n")

        result = run(source)

        assert result.exit_code == 1
        assert old.read_text() == "previous\n"


# =============================================================================
# Listing Tests
# =============================================================================

class TestListings:
    """Test the listing options."""

    def test_pass1_listing(self, asm_file):
        result = run("-1", asm_file)

        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[:2] == ["line#:cmd|        source", "-----:---+-------------------------"]
        assert "    1: # |// counter" in lines
        assert "    2: A |@i" in lines
        assert "    3: C |M=1" in lines
        assert "    4: : |(LOOP)" in lines
        assert lines[-1] == "<<EOF>>"

    def test_empty_source_listing(self, tmp_path):
        source = tmp_path / "Empty.asm"
        source.write_text("")

        result = run("-1", "-2", source)

        assert result.exit_code == 0
        assert result.output.splitlines() == [
            "line#:cmd|        source",
            "-----:---+-------------------------",
            "<<EOF>>",
            "line#:cmd|        source",
            "-----:---+-------------------------",
            "<<EOF>>",
        ]
        assert (tmp_path / "Empty.hack").read_text() == ""

    def test_both_passes(self, asm_file):
        result = run("-1", "-2", asm_file)
        assert result.output.count("<<EOF>>") == 2
        assert result.output.count("    2: A |@i") == 2

    def test_code_listing(self, asm_file):
        result = run("-c", asm_file)

        assert result.exit_code == 0
        assert " ROM =   machine code   |     details" in result.output
        assert "label[LOOP]" in result.output
        assert "    0=0000000000010000  | address[   16=0x0010] @i" in result.output
        assert "jump[JMP]" in result.output

    def test_user_symbols(self, asm_file):
        result = run("-u", asm_file)

        assert result.exit_code == 0
        assert "DATA:" in result.output
        assert "LABELS:" in result.output
        assert f"{'i':>40}: RAM 0x0010 (   16)" in result.output
        assert "CONSTANTS:" not in result.output

    def test_system_symbols(self, asm_file):
        result = run("-s", asm_file)

        assert "CONSTANTS:" in result.output
        assert "SCREEN" in result.output
        assert "DATA:" in result.output

    def test_symbols_follow_pass1_listing(self, asm_file):
        result = run("-1", "-u", "-2", asm_file)

        lines = result.output.splitlines()
        first_eof = lines.index("<<EOF>>")
        assert lines[first_eof + 1] == "DATA:"
        assert lines.count("DATA:") == 1
        assert lines[-1] == "<<EOF>>"


# =============================================================================
# Miscellaneous Option Tests
# =============================================================================

class TestOptions:
    """Test reporting options."""

    def test_show_paths(self, asm_file):
        result = run("-p", asm_file)

        assert f"asm-file:   {asm_file.resolve()}" in result.output
        assert "hack-file:  " in result.output
        assert "Prog.hack" in result.output

    def test_verbose(self, asm_file):
        result = run("-v", asm_file)

        assert result.exit_code == 0
        assert "Assembling" in result.output
        assert "Wrote 4 instructions to" in result.output
        assert "Defined 2 user symbols" in result.output

    def test_quiet_by_default(self, asm_file):
        assert run(asm_file).output == ""

    def test_version(self):
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help(self):
        result = CliRunner().invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "Generate a Hack binary file" in result.output
