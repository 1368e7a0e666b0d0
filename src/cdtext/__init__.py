"""
cdtext - CD-Text Sub-channel Decoder
====================================

This package decodes CD-Text, the metadata block stored in the lead-in of
audio CDs, into album and track titles, performers, songwriters, composers
and arrangers.

CD-Text arrives as a run of 18-byte packs. Strings are packed back to back
and routinely cross pack boundaries, so the interesting part of decoding is
putting them back together with the right track attached.

Main Components
---------------
- **records**: Category, TrackRef, Pack and Entry data structures
- **stream**: PackStream, a restartable sequence of pack decode results
- **parser**: EntryReassembler and the CDTextParser front end
- **config**: ParserConfig (encoding and error policy)
- **cli**: the ``cdtext`` command-line tool

Quick Start
-----------
    >>> from cdtext import CDTextParser
    >>> parser = CDTextParser.from_file("disc.cdt")
    >>> for entry in parser.parse():
    ...     print(entry)
    Album: Title: ALBUM TITLE
    Track #1: Title: FIRST SONG

Or from the shell:
    $ cdtext entries disc.cdt
"""

__version__ = "0.1.0"

# =============================================================================
# Public API Exports
# =============================================================================

from cdtext.config import ErrorPolicy, ParserConfig
from cdtext.errors import (
    BufferUnderrunError,
    CDTextError,
    InvalidTextError,
    PackError,
    UnknownCategoryError,
)
from cdtext.parser import (
    CDTextParser,
    EntryReassembler,
    parse_cdtext,
    parse_cdtext_file,
)
from cdtext.records import (
    PACK_SIZE,
    PAYLOAD_SIZE,
    TEXT_CATEGORIES,
    Category,
    Entry,
    Pack,
    TrackRef,
    decode_pack,
)
from cdtext.stream import PackResult, PackStream

__all__ = [
    # Version info
    "__version__",
    # Records
    "Category",
    "TrackRef",
    "Pack",
    "Entry",
    "decode_pack",
    "PACK_SIZE",
    "PAYLOAD_SIZE",
    "TEXT_CATEGORIES",
    # Stream
    "PackStream",
    "PackResult",
    # Parser
    "CDTextParser",
    "EntryReassembler",
    "parse_cdtext",
    "parse_cdtext_file",
    # Configuration
    "ParserConfig",
    "ErrorPolicy",
    # Exception hierarchy
    "CDTextError",
    "PackError",
    "UnknownCategoryError",
    "BufferUnderrunError",
    "InvalidTextError",
]
