"""
chip8dis - CHIP-8 Disassembler Command-Line Interface
=====================================================

This module implements the command-line interface for the CHIP-8
disassembler.

Usage Examples
--------------
Disassemble a ROM (loaded at $200):
    $ chip8dis maze.ch8

With base address:
    $ chip8dis fragment.bin --address 0x300

Limit number of instructions:
    $ chip8dis maze.ch8 --count 20

Output to file:
    $ chip8dis maze.ch8 -o maze.lst

Hex dump with disassembly:
    $ chip8dis maze.ch8 --hex

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import sys
from pathlib import Path
from typing import Optional

import click

from chip8_vm import __version__
from chip8_vm.disassembler import Chip8Disassembler


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file (default: stdout)",
)
@click.option(
    "-a", "--address",
    type=str,
    default="0x200",
    help="Base address for disassembly (hex with 0x or $ prefix, or decimal). Default: 0x200",
)
@click.option(
    "-c", "--count",
    type=int,
    default=None,
    help="Maximum number of instructions to disassemble (default: all)",
)
@click.option(
    "--hex",
    "show_hex",
    is_flag=True,
    help="Include hex dump before disassembly",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="chip8dis")
def main(
    input_file: Path,
    output: Optional[Path],
    address: str,
    count: Optional[int],
    show_hex: bool,
    verbose: bool,
) -> None:
    """
    Disassemble CHIP-8 bytecode.

    INPUT_FILE is the ROM image to disassemble.

    Words that are not valid instructions are listed as DW, and a
    trailing odd byte as DB.

    Examples:

        # Disassemble the first 20 instructions
        chip8dis maze.ch8 --count 20 -o maze.lst

        # Disassemble a fragment that lives at $300
        chip8dis sprite_code.bin --address 0x300
    """
    # Parse base address
    try:
        if address.lower().startswith("0x"):
            base_address = int(address, 16)
        elif address.startswith("$"):
            base_address = int(address[1:], 16)
        else:
            base_address = int(address)
    except ValueError:
        click.echo(f"Error: Invalid address '{address}'", err=True)
        sys.exit(1)

    if not 0 <= base_address <= 0xFFF:
        click.echo("Error: Address must be 0-4095 (0x000-0xFFF)", err=True)
        sys.exit(1)

    # Read input file
    try:
        data = input_file.read_bytes()
    except IOError as e:
        click.echo(f"Error reading {input_file}: {e}", err=True)
        sys.exit(1)

    if len(data) == 0:
        click.echo(f"Error: {input_file} is empty", err=True)
        sys.exit(1)

    if verbose:
        click.echo(f"Input file: {input_file} ({len(data)} bytes)", err=True)
        click.echo(f"Base address: ${base_address:03X}", err=True)

    output_lines = []

    # Header
    output_lines.append(f"; Disassembly of {input_file.name}")
    output_lines.append(f"; Size: {len(data)} bytes")
    output_lines.append(f"; Base address: ${base_address:03X}")
    output_lines.append("")

    if show_hex:
        output_lines.append("; Hex dump:")
        output_lines.append("; " + "-" * 60)
        for i in range(0, len(data), 16):
            addr = base_address + i
            chunk = data[i:i+16]
            hex_str = " ".join(f"{b:02X}" for b in chunk)
            output_lines.append(f"; ${addr:03X}: {hex_str}")
        output_lines.append("; " + "-" * 60)
        output_lines.append("")

    disasm = Chip8Disassembler()
    instructions = disasm.disassemble(data, start_address=base_address, count=count)
    for instr in instructions:
        output_lines.append(str(instr))

    # Write output
    result = "\n".join(output_lines) + "\n"

    if output:
        try:
            output.write_text(result, encoding='utf-8')
            if verbose:
                click.echo(f"Output written to: {output}", err=True)
        except IOError as e:
            click.echo(f"Error writing {output}: {e}", err=True)
            sys.exit(1)
    else:
        click.echo(result, nl=False)

    if verbose:
        click.echo(f"Instructions disassembled: {len(instructions)}", err=True)


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
