"""
cdtext - CD-Text Dump Inspector
===============================

This module implements the command-line interface for the CD-Text decoder.
It reads a dump of CD-Text sub-channel data (as returned by the READ
TOC/PMA/ATIP command, format 5) and prints what it contains.

Commands
--------
- **entries**: Print the reassembled entries, one per line
- **packs**: List every 18-byte pack with its decoded header fields
- **info**: Show a summary of the dump

Usage Examples
--------------
Print album and track titles:
    $ cdtext entries disc.cdt

Raw pack data without the 4-byte length header:
    $ cdtext --no-header entries packs.bin

Keep going past damaged packs, reading text as Latin-1:
    $ cdtext --on-error skip --encoding latin-1 entries disc.cdt

Include non-text packs (TOC, genre, ...) as hex:
    $ cdtext entries --binary disc.cdt

Dump the packs:
    $ cdtext packs disc.cdt

Environment
-----------
CDTEXT_ENCODING and CDTEXT_ON_ERROR set the defaults for --encoding and
--on-error.
"""

import logging
from pathlib import Path
from typing import Optional

import click

from cdtext import __version__
from cdtext.cli.errors import handle_cli_exception
from cdtext.config import ErrorPolicy, ParserConfig
from cdtext.parser import CDTextParser

logger = logging.getLogger(__name__)


# =============================================================================
# CLI Context
# =============================================================================

class Context:
    """
    Shared context for CLI commands.

    Stores the parse options given to the group.
    """

    def __init__(self) -> None:
        self.has_header: bool = True
        self.config: ParserConfig = ParserConfig.from_env()
        self.verbose: bool = False

    def setup_logging(self) -> None:
        """Configure logging based on verbosity."""
        level = logging.DEBUG if self.verbose else logging.WARNING
        logging.basicConfig(
            level=level,
            format="%(levelname)s: %(message)s",
        )

    def open(self, path: Path) -> CDTextParser:
        """Load a dump with the current options."""
        logger.debug(f"Reading {path} (header: {self.has_header})")
        return CDTextParser.from_file(path, has_header=self.has_header, config=self.config)


pass_context = click.make_pass_decorator(Context, ensure=True)

DUMP_FILE = click.Path(exists=True, dir_okay=False, path_type=Path)


# =============================================================================
# Main CLI Group
# =============================================================================

@click.group()
@click.version_option(__version__, "--version", "-V", prog_name="cdtext")
@click.option(
    "--no-header",
    is_flag=True,
    help="Input is bare pack data without the 4-byte length header",
)
@click.option(
    "-e", "--encoding",
    default=None,
    help="Text encoding (default: utf-8, or $CDTEXT_ENCODING)",
)
@click.option(
    "--on-error",
    type=click.Choice([p.value for p in ErrorPolicy], case_sensitive=False),
    default=None,
    help="Abort on undecodable packs, or skip them (default: raise)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@pass_context
def main(
    ctx: Context,
    no_header: bool,
    encoding: Optional[str],
    on_error: Optional[str],
    verbose: bool,
) -> None:
    """
    Decode CD-Text sub-channel dumps.

    \b
    Commands:
      entries   Print album/track entries
      packs     List raw packs
      info      Show dump summary

    \b
    Examples:
      cdtext entries disc.cdt
      cdtext --no-header packs packs.bin
      cdtext --on-error skip entries damaged.cdt
    """
    ctx.has_header = not no_header
    ctx.verbose = verbose
    if encoding:
        ctx.config.encoding = encoding
    if on_error:
        ctx.config.on_error = ErrorPolicy(on_error.lower())
    ctx.setup_logging()


# =============================================================================
# Entries Command
# =============================================================================

@main.command("entries")
@click.argument("dump_file", type=DUMP_FILE)
@click.option(
    "-b", "--binary",
    is_flag=True,
    help="Also list non-text packs (TOC, genre, ...) as hex",
)
@pass_context
def cmd_entries(ctx: Context, dump_file: Path, binary: bool) -> None:
    """
    Print the entries of a CD-Text dump.

    \b
    Output format:
      Album: Title: ALBUM TITLE
      Track #1: Performers: SOMEBODY
    """
    try:
        parser = ctx.open(dump_file)
        entries = parser.parse()
        if binary:
            # Non-text packs come from binary_entries() only
            entries = [e for e in entries if e.is_text] + parser.binary_entries()

        for entry in entries:
            click.echo(str(entry))

        if ctx.verbose:
            click.echo(f"{len(entries)} entries", err=True)

    except Exception as e:
        handle_cli_exception(e, ctx.verbose)


# =============================================================================
# Packs Command
# =============================================================================

@main.command("packs")
@click.argument("dump_file", type=DUMP_FILE)
@pass_context
def cmd_packs(ctx: Context, dump_file: Path) -> None:
    """
    List every pack in a CD-Text dump.

    Undecodable packs are listed with the reason.

    \b
    Output format:
      #    Category       Track      Seq Pos Blk DB Payload                              CRC
      0    Title          Album        0   0   0 -  41 4c 42 55 4d 20 54 49 54 4c 45 00  0000
    """
    try:
        parser = ctx.open(dump_file)

        click.echo(
            f"{'#':<4} {'Category':<14} {'Track':<10} {'Seq':>3} {'Pos':>3} "
            f"{'Blk':>3} DB {'Payload':<36} CRC"
        )
        for result in parser.packs():
            if not result.ok:
                click.echo(f"{result.index:<4} ERROR: {result.error.message}")
                continue
            pack = result.pack
            double_byte = "Y" if pack.is_double_byte else "-"
            click.echo(
                f"{result.index:<4} {pack.category.get_name():<14} {str(pack.track):<10} "
                f"{pack.sequence:>3} {pack.character_position:>3} {pack.block_number:>3} "
                f"{double_byte:<2} {pack.payload.hex(' '):<36} {pack.crc:04X}"
            )

    except Exception as e:
        handle_cli_exception(e, ctx.verbose)


# =============================================================================
# Info Command
# =============================================================================

@main.command("info")
@click.argument("dump_file", type=DUMP_FILE)
@pass_context
def cmd_info(ctx: Context, dump_file: Path) -> None:
    """
    Show a summary of a CD-Text dump.

    \b
    Output includes:
      - Declared and actual data length
      - Pack count and ignored trailing bytes
      - Packs per category
      - Language blocks and double-byte flag
    """
    try:
        parser = ctx.open(dump_file)
        info = parser.get_info()

        click.echo(f"CD-Text Information: {dump_file}")
        click.echo("=" * 40)
        if info["declared_length"] is not None:
            click.echo(f"Declared:    {info['declared_length']} bytes")
        click.echo(f"Pack data:   {info['data_bytes']} bytes")
        click.echo(f"Packs:       {info['pack_count']}")
        if info["trailing_bytes"]:
            click.echo(f"Trailing:    {info['trailing_bytes']} bytes (ignored)")
        if info["undecodable_packs"]:
            click.echo(f"Undecodable: {info['undecodable_packs']} packs")
        click.echo()
        click.echo("Categories:")
        for name, count in info["categories"].items():
            click.echo(f"  {name:<14} {count}")
        click.echo()
        blocks = ", ".join(str(b) for b in info["blocks"]) or "none"
        click.echo(f"Blocks:      {blocks}")
        click.echo(f"Double-byte: {'yes' if info['double_byte'] else 'no'}")

    except Exception as e:
        handle_cli_exception(e, ctx.verbose)


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
