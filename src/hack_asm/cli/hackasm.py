"""
hackasm - Hack Assembler Command-Line Interface
===============================================

This module implements the command-line interface for the Hack assembler.

Usage Examples
--------------
Basic assembly (writes Max.hack next to Max.asm):
    $ hackasm Max.asm

Into another directory:
    $ hackasm Max.asm build/

List the source as pass 1 reads it, then the generated code:
    $ hackasm -1 -c Max.asm

Dump user and system symbols:
    $ hackasm -s Max.asm
"""

from pathlib import Path
from typing import Optional

import click

from hack_asm import __version__
from hack_asm.assembler import (
    CODE_LISTING_HEADER,
    SOURCE_LISTING_EOF,
    SOURCE_LISTING_HEADER,
    Assembler,
    Command,
    EmittedWord,
    PREDEFINED_SYMBOLS,
    format_code_line,
    format_label_line,
    format_source_line,
)
from hack_asm.cli.errors import handle_cli_exception


ASM_SUFFIX = ".asm"
HACK_SUFFIX = ".hack"


# =============================================================================
# Listing Output
# =============================================================================

class ListingPrinter:
    """
    Echoes the listings requested on the command line.

    Each listed pass opens with a header as soon as the pass starts, even
    when the source is empty. The symbol dump is printed once, between the
    end of pass 1 and the start of pass 2.
    """

    def __init__(
        self,
        listed_passes: set[int],
        code_listing: bool,
        dump_symbols: bool,
        dump_system_symbols: bool,
    ):
        self.assembler: Optional[Assembler] = None
        self._listed_passes = listed_passes
        self._code_listing = code_listing
        self._dump_symbols = dump_symbols or dump_system_symbols
        self._dump_system_symbols = dump_system_symbols
        self._current_pass = 0
        self._code_header_shown = False
        self._symbols_dumped = False

    def on_pass(self, pass_number: int) -> None:
        self._enter_pass(pass_number)

    def on_source(self, pass_number: int, command: Command) -> None:
        if pass_number in self._listed_passes:
            click.echo(format_source_line(command))

    def on_code(self, word: EmittedWord) -> None:
        if not self._code_listing:
            return
        if not self._code_header_shown:
            for line in CODE_LISTING_HEADER:
                click.echo(line)
            self._code_header_shown = True
        if word.label is not None:
            click.echo(format_label_line(word.address, word.label))
        click.echo(format_code_line(word))

    def finish(self) -> None:
        """Close the listing of the last pass that produced output."""
        self._enter_pass(3)

    def _enter_pass(self, pass_number: int) -> None:
        if self._current_pass in self._listed_passes:
            click.echo(SOURCE_LISTING_EOF)
        if pass_number >= 2 and self._dump_symbols and not self._symbols_dumped:
            table = self.assembler.get_symbol_table()
            for line in table.dump(include_predefined=self._dump_system_symbols):
                click.echo(line)
            self._symbols_dumped = True
        if pass_number in self._listed_passes:
            for line in SOURCE_LISTING_HEADER:
                click.echo(line)
        self._current_pass = pass_number


def resolve_hack_file(asm_file: Path, output_dir: Optional[Path]) -> Path:
    """
    Determine the .hack file generated for an .asm file.

    Raises:
        click.BadParameter: If asm_file lacks the .asm extension
    """
    if asm_file.suffix != ASM_SUFFIX:
        raise click.BadParameter(
            f"asm-file ({asm_file}) must have a '{ASM_SUFFIX}' filename extension",
            param_hint="ASM_FILE",
        )
    directory = output_dir if output_dir is not None else asm_file.parent
    return directory / asm_file.with_suffix(HACK_SUFFIX).name


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "asm_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.argument(
    "output_dir",
    required=False,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.option(
    "-1", "--pass1-listing",
    is_flag=True,
    help="List the asm-file as read in pass 1",
)
@click.option(
    "-2", "--pass2-listing",
    is_flag=True,
    help="List the asm-file as read in pass 2",
)
@click.option(
    "-c", "--code-listing",
    is_flag=True,
    help="List the generated code of the hack-file",
)
@click.option(
    "-p", "--show-paths",
    is_flag=True,
    help="Show the pathnames of the asm-file and hack-file",
)
@click.option(
    "-u", "--user-symbols",
    is_flag=True,
    help="Dump user-defined symbols",
)
@click.option(
    "-s", "--system-symbols",
    is_flag=True,
    help="Dump system-defined symbols (implies -u)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="hackasm")
def main(
    asm_file: Path,
    output_dir: Optional[Path],
    pass1_listing: bool,
    pass2_listing: bool,
    code_listing: bool,
    show_paths: bool,
    user_symbols: bool,
    system_symbols: bool,
    verbose: bool,
) -> None:
    """
    Generate a Hack binary file from a Hack assembly code file.

    ASM_FILE is the Hack assembly source and must end with '.asm'.
    The generated hack-file has the same name with extension '.hack' and
    is placed in OUTPUT_DIR, which defaults to the asm-file's directory.

    \b
    Examples:
        hackasm Max.asm              # Outputs Max.hack
        hackasm Max.asm build/       # Outputs build/Max.hack
        hackasm -1 -c Max.asm        # Pass 1 source and code listings
    """
    try:
        hack_file = resolve_hack_file(asm_file, output_dir)

        if show_paths:
            click.echo(f"asm-file:   {asm_file.resolve()}")
            click.echo(f"hack-file:  {hack_file.resolve()}")

        listed_passes = {n for n, wanted in ((1, pass1_listing), (2, pass2_listing)) if wanted}
        printer = ListingPrinter(
            listed_passes,
            code_listing=code_listing,
            dump_symbols=user_symbols,
            dump_system_symbols=system_symbols,
        )

        asm = printer.assembler = Assembler(
            source_listener=printer.on_source,
            code_listener=printer.on_code,
            pass_listener=printer.on_pass,
        )
        if verbose:
            click.echo(f"Assembling {asm_file}...")

        asm.assemble_file(asm_file)
        printer.finish()

        # Only a successful run produces a hack-file
        asm.write_hack(hack_file)

        if verbose:
            symbol_count = len(asm.get_symbol_table()) - len(PREDEFINED_SYMBOLS)
            click.echo(f"Wrote {asm.word_count} instructions to {hack_file}")
            click.echo(f"Defined {symbol_count} user symbols")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
