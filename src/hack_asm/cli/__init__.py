"""
Hack Assembler Command-Line Interface
=====================================

This package provides the command-line tool for the Hack assembler:

- **hackasm**: assemble a .asm file into a .hack file

The tool is a Click-based CLI application with help text, optional
listings and consistent exit codes (see hack_asm.cli.errors).
"""

__all__ = ["hackasm"]
