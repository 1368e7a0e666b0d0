"""
CD-Text Parser
==============

This module turns a CD-Text buffer into a list of entries.

EntryReassembler
----------------
Text packs carry NUL-terminated strings back to back, without regard to
pack boundaries. The reassembler walks the pack stream pairwise
(previous pack, current pack). The current pack's character position says
how many characters of the string in progress were already carried by the
previous pack, which splits the previous payload into the tail of one
string (``before``) and the head of the next (``after``).

Short strings are often packed several to a pack. When ``before`` holds
exactly two NULs it ends one string and contains a whole second one, and
the second one belongs to the following track.

The walk stops at the first pack that is not a text category. Whatever has
been accumulated is flushed once at the end.

CDTextParser
------------
Front end for the two buffer layouts (with or without the 4-byte length
header) and for files on disk.

Usage Examples
--------------
Reading a dump taken with READ TOC/PMA/ATIP format 5:
    >>> from cdtext import CDTextParser
    >>> parser = CDTextParser.from_file("disc.cdt")
    >>> for entry in parser.parse():
    ...     print(entry)
    Album: Title: ALBUM TITLE

Raw pack data with no header, tolerating bad packs:
    >>> from cdtext import ParserConfig, ErrorPolicy
    >>> config = ParserConfig(on_error=ErrorPolicy.SKIP)
    >>> entries = parse_cdtext(data, config=config)
"""

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Union
import logging

from cdtext.config import ParserConfig
from cdtext.errors import BufferUnderrunError, InvalidTextError
from cdtext.records import (
    HEADER_SIZE,
    PAYLOAD_SIZE,
    Category,
    Entry,
    Pack,
    TrackRef,
)
from cdtext.stream import PackResult, PackStream

# Logger for this module
logger = logging.getLogger(__name__)

NUL = b"\x00"


# =============================================================================
# Entry Reassembler
# =============================================================================

class EntryReassembler:
    """
    Rebuilds entries from a stream of packs.

    One reassembler can run any number of passes; all pass state lives in
    local variables of reassemble().

    Attributes:
        config: Encoding and error policy
    """

    def __init__(self, config: Optional[ParserConfig] = None):
        self.config = config or ParserConfig()

    def reassemble(self, results: Iterable[PackResult]) -> list[Entry]:
        """
        Walk the pack stream and return the entries in stream order.

        Args:
            results: Pack decode results, e.g. a PackStream

        Returns:
            List of entries (empty if no pack could be decoded)

        Raises:
            UnknownCategoryError: On an undecodable pack (raise policy)
            InvalidTextError: On text that does not decode (raise policy)
        """
        entries: list[Entry] = []
        buffer = bytearray()
        previous: Optional[Pack] = None
        warned_double_byte = False

        for result in results:
            pack = self._accept(result)
            if pack is None:
                continue

            if pack.is_double_byte and pack.category.is_text and not warned_double_byte:
                logger.warning(
                    f"Pack {result.index} uses double-byte characters; "
                    f"decoding as {self.config.encoding}"
                )
                warned_double_byte = True

            if previous is None:
                previous = pack
                if not pack.category.is_text:
                    logger.debug(
                        f"First pack is {pack.category.get_name()}, no text to walk"
                    )
                    break
                continue

            if not pack.category.is_text:
                logger.debug(
                    f"Text walk ends at pack {result.index} "
                    f"({pack.category.get_name()})"
                )
                break

            self._step(previous, pack, buffer, entries)
            previous = pack

        if previous is not None:
            self._flush_final(previous, buffer, entries)

        return entries

    def _accept(self, result: PackResult) -> Optional[Pack]:
        """Return the decoded pack, or None if it is skipped."""
        if result.ok:
            return result.pack
        if not self.config.skip_errors:
            raise result.error
        logger.warning(f"Skipping undecodable {result.error}")
        return None

    def _step(
        self,
        previous: Pack,
        current: Pack,
        buffer: bytearray,
        entries: list[Entry],
    ) -> None:
        """Consume the previous pack's payload, split at the current pack."""
        index = max(0, PAYLOAD_SIZE - current.character_position)
        before = previous.payload[:index]
        after = previous.payload[index:]
        track = previous.track

        is_terminal = before.endswith(NUL)

        # Two NULs: one string ends here and a whole one for the next track
        # follows in the same segment.
        if before.count(NUL) == 2:
            head, _, before = before.partition(NUL)
            buffer += head
            entries.append(self._make_entry(track, previous.category, bytes(buffer)))
            buffer.clear()
            track = track.next()
            logger.debug(f"Two strings in one segment, continuing as {track}")

        if is_terminal:
            buffer += before.rstrip(NUL)
            entries.append(
                self._make_entry(track, previous.category, bytes(buffer).rstrip(NUL))
            )
            buffer.clear()
        else:
            buffer += before

        buffer += after

    def _flush_final(
        self,
        last: Pack,
        buffer: bytearray,
        entries: list[Entry],
    ) -> None:
        """Emit what is left: the buffer plus the last payload's text prefix."""
        if not last.category.is_text:
            # Only a non-text seed gets here; its payload is kept whole
            entries.append(Entry(track=last.track, category=last.category, data=last.payload))
            return

        buffer += last.text_prefix()
        if not buffer:
            logger.debug("Nothing left to flush")
            return
        entries.append(self._make_entry(last.track, last.category, bytes(buffer)))
        buffer.clear()

    def _make_entry(self, track: TrackRef, category: Category, data: bytes) -> Entry:
        """Build an entry, decoding the data for text categories."""
        if not category.is_text:
            return Entry(track=track, category=category, data=data)

        try:
            text = data.decode(self.config.encoding)
        except UnicodeDecodeError as e:
            if not self.config.skip_errors:
                raise InvalidTextError(
                    data, self.config.encoding, category.get_name(), str(track)
                ) from e
            logger.warning(
                f"{track}: {category.get_name()}: invalid {self.config.encoding} "
                f"text {data!r}, replacing undecodable bytes"
            )
            text = data.decode(self.config.encoding, errors="replace")

        return Entry(track=track, category=category, data=text)


# =============================================================================
# CD-Text Parser
# =============================================================================

@dataclass
class CDTextParser:
    """
    Parser for CD-Text buffers.

    Attributes:
        data: The raw buffer (borrowed, never modified)
        has_header: Whether the buffer starts with the 4-byte length header
        config: Encoding and error policy
        declared_length: Length field of the header (None without header)

    Example:
        >>> parser = CDTextParser.from_data_with_length(raw)
        >>> print(f"{len(parser.packs())} packs")
        >>> for entry in parser.parse():
        ...     print(entry)
    """
    # Raw buffer (not exposed in repr)
    data: Union[bytes, bytearray, memoryview] = field(repr=False)

    has_header: bool = False

    config: ParserConfig = field(default_factory=ParserConfig)

    # Length field from the header; informational only
    declared_length: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate the header, if any."""
        self.config.validate()
        self._view = memoryview(self.data)
        self._start = 0
        if self.has_header:
            self._parse_header()

    @classmethod
    def from_bytes(
        cls,
        data: Union[bytes, bytearray, memoryview],
        has_header: bool = False,
        config: Optional[ParserConfig] = None,
    ) -> "CDTextParser":
        """Create a parser over an in-memory buffer."""
        return cls(data=data, has_header=has_header, config=config or ParserConfig())

    @classmethod
    def from_data_with_length(
        cls,
        data: Union[bytes, bytearray, memoryview],
        config: Optional[ParserConfig] = None,
    ) -> "CDTextParser":
        """
        Create a parser over a buffer that starts with the length header.

        Header layout: 2-byte big-endian length of the data following the
        length field, then 2 reserved bytes. Packs start at byte 4.
        """
        return cls.from_bytes(data, has_header=True, config=config)

    @classmethod
    def from_file(
        cls,
        filepath: Union[str, Path],
        has_header: bool = True,
        config: Optional[ParserConfig] = None,
    ) -> "CDTextParser":
        """
        Create a parser from a dump on disk.

        Raises:
            FileNotFoundError: If the file doesn't exist
            BufferUnderrunError: If the header is truncated
        """
        data = Path(filepath).read_bytes()
        return cls.from_bytes(data, has_header=has_header, config=config)

    def _parse_header(self) -> None:
        """Read the 4-byte header and move the pack data start past it."""
        if len(self._view) < HEADER_SIZE:
            raise BufferUnderrunError(HEADER_SIZE, len(self._view), 0)

        self.declared_length = (self._view[0] << 8) | self._view[1]
        self._start = HEADER_SIZE

        # The length excludes the length field itself
        if self.declared_length + 2 != len(self._view):
            logger.warning(
                f"CD-Text length mismatch: header declares {self.declared_length}, "
                f"buffer holds {len(self._view) - 2}"
            )
        else:
            logger.debug(f"CD-Text header: {self.declared_length} bytes declared")

    @property
    def pack_data(self) -> memoryview:
        """The pack data, without the header."""
        return self._view[self._start:]

    def packs(self) -> PackStream:
        """Stream of pack decode results over the pack data."""
        return PackStream(self.pack_data)

    def parse(self) -> list[Entry]:
        """
        Reassemble all text entries.

        Returns:
            Entries in stream order

        Raises:
            UnknownCategoryError: On an undecodable pack (raise policy)
            InvalidTextError: On text that does not decode (raise policy)
        """
        stream = self.packs()
        if stream.trailing_bytes:
            logger.debug(f"Ignoring {stream.trailing_bytes} trailing bytes")
        return EntryReassembler(self.config).reassemble(stream)

    def binary_entries(self) -> list[Entry]:
        """
        One raw entry per decodable non-text pack.

        Raises:
            UnknownCategoryError: On an undecodable pack (raise policy)
        """
        entries = []
        for result in self.packs():
            if not result.ok:
                if not self.config.skip_errors:
                    raise result.error
                continue
            pack = result.pack
            if not pack.category.is_text:
                entries.append(Entry(track=pack.track, category=pack.category, data=pack.payload))
        return entries

    def get_info(self) -> dict:
        """
        Summarise the buffer without reassembling text.

        Returns:
            Dictionary with header length, pack counts and flags
        """
        stream = self.packs()
        categories: Counter = Counter()
        errors = 0
        double_byte = False
        blocks = set()

        for result in stream:
            if not result.ok:
                errors += 1
                continue
            categories[result.pack.category.get_name()] += 1
            blocks.add(result.pack.block_number)
            double_byte = double_byte or result.pack.is_double_byte

        return {
            "declared_length": self.declared_length,
            "data_bytes": len(self.pack_data),
            "pack_count": len(stream),
            "trailing_bytes": stream.trailing_bytes,
            "undecodable_packs": errors,
            "categories": dict(categories),
            "blocks": sorted(blocks),
            "double_byte": double_byte,
        }


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_cdtext(
    data: Union[bytes, bytearray, memoryview],
    has_header: bool = False,
    config: Optional[ParserConfig] = None,
) -> list[Entry]:
    """
    Parse a CD-Text buffer and return its entries.

    Example:
        >>> entries = parse_cdtext(raw, has_header=True)
    """
    return CDTextParser.from_bytes(data, has_header=has_header, config=config).parse()


def parse_cdtext_file(
    filepath: Union[str, Path],
    has_header: bool = True,
    config: Optional[ParserConfig] = None,
) -> list[Entry]:
    """Read a CD-Text dump from disk and return its entries."""
    return CDTextParser.from_file(filepath, has_header=has_header, config=config).parse()
