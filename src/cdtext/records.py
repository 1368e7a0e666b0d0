"""
CD-Text Record Definitions
==========================

This module defines the data structures for CD-Text sub-channel data as
read from the lead-in of an audio CD.

Pack Structure Overview
-----------------------
CD-Text is a sequence of fixed 18-byte packs:

    Offset  Size    Description
    ------  ----    -----------
    0       1       Category tag (0x80-0x8F)
    1       1       Track number (0 = whole album)
    2       1       Sequence counter
    3       1       Bits 0-3: character position
                    Bits 4-6: block number
                    Bit 7:    double-byte character flag
    4       12      Payload
    16      2       CRC (big-endian, not verified here)

Text categories pack NUL-terminated strings back to back, so a string may
start in one pack and end in a later one. Reassembly of those strings is
done by cdtext.parser; this module only describes single packs and the
finished entries.

Reference
---------
- MMC-3 / Red Book annex J (CD-Text mode)
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Union
import struct

from cdtext.errors import BufferUnderrunError, UnknownCategoryError


PACK_SIZE = 18
PAYLOAD_SIZE = 12
HEADER_SIZE = 4


# =============================================================================
# Enumeration Types
# =============================================================================

class Category(IntEnum):
    """
    Pack category identifiers (byte 0 of each pack).

    0x8A-0x8C are reserved by the format and deliberately absent: packs
    with those tags fail to decode.
    """
    TITLE = 0x80
    PERFORMERS = 0x81
    SONGWRITERS = 0x82
    COMPOSERS = 0x83
    ARRANGERS = 0x84
    MESSAGE = 0x85
    DISC_ID = 0x86
    GENRE = 0x87
    TOC = 0x88
    ADDITIONAL_TOC = 0x89
    CLOSED_INFO = 0x8D
    CODE = 0x8E
    BLOCK_SIZE_INFO = 0x8F

    @property
    def is_text(self) -> bool:
        """True for the categories whose payload is reassembled as text."""
        return self in TEXT_CATEGORIES

    def get_name(self) -> str:
        """Get a human-readable name for this category."""
        names = {
            Category.TITLE: "Title",
            Category.PERFORMERS: "Performers",
            Category.SONGWRITERS: "Songwriters",
            Category.COMPOSERS: "Composers",
            Category.ARRANGERS: "Arrangers",
            Category.MESSAGE: "Message",
            Category.DISC_ID: "DiscID",
            Category.GENRE: "Genre",
            Category.TOC: "TOC",
            Category.ADDITIONAL_TOC: "AdditionalTOC",
            Category.CLOSED_INFO: "ClosedInfo",
            Category.CODE: "Code",
            Category.BLOCK_SIZE_INFO: "BlockSizeInfo",
        }
        return names[self]


TEXT_CATEGORIES = frozenset({
    Category.TITLE,
    Category.PERFORMERS,
    Category.SONGWRITERS,
    Category.COMPOSERS,
    Category.ARRANGERS,
})


# =============================================================================
# Track Reference
# =============================================================================

@dataclass(frozen=True)
class TrackRef:
    """
    Track an entry refers to: the whole album, or one track.

    Stored as the raw track byte, where 0 means the whole album. Use
    TrackRef.WHOLE_ALBUM and TrackRef.track(n) rather than the
    constructor when the intent matters.
    """
    number: int = 0

    @classmethod
    def from_byte(cls, value: int) -> "TrackRef":
        """Map a raw track byte to a reference (0 = whole album)."""
        return cls(value)

    @classmethod
    def track(cls, number: int) -> "TrackRef":
        """Reference to a single track (1-99)."""
        if not 1 <= number <= 99:
            raise ValueError(f"Track numbers run from 1 to 99, got {number}")
        return cls(number)

    @property
    def is_whole_album(self) -> bool:
        return self.number == 0

    def next(self) -> "TrackRef":
        """
        Successor reference: whole album -> track 1, track n -> track n+1.

        Like from_byte(), this does not enforce the 1-99 range: numbers
        read from a disc are reported as-is, even past 99.
        """
        return TrackRef(self.number + 1)

    def __str__(self) -> str:
        if self.is_whole_album:
            return "Album"
        return f"Track #{self.number}"


TrackRef.WHOLE_ALBUM = TrackRef(0)


# =============================================================================
# Pack
# =============================================================================

@dataclass(frozen=True)
class Pack:
    """
    One decoded 18-byte CD-Text pack.

    Attributes:
        category: Pack category (byte 0)
        track: Track reference (byte 1)
        sequence: Sequence counter (byte 2)
        character_position: Characters of the current string carried in
            earlier packs, 0-15 (byte 3, bits 0-3)
        block_number: Language block, 0-7 (byte 3, bits 4-6)
        is_double_byte: Payload uses double-byte characters (byte 3, bit 7)
        payload: The 12 payload bytes
        crc: Stored checksum (bytes 16-17, big-endian)
    """
    category: Category
    track: TrackRef
    sequence: int
    character_position: int
    block_number: int
    is_double_byte: bool
    payload: bytes
    crc: int

    @classmethod
    def from_bytes(cls, data: Union[bytes, memoryview], offset: int = 0) -> "Pack":
        """
        Decode the pack starting at ``offset``.

        Args:
            data: Buffer holding the pack (only 18 bytes are read)
            offset: Start of the pack within ``data``

        Returns:
            The decoded Pack

        Raises:
            BufferUnderrunError: If fewer than 18 bytes remain at offset
            UnknownCategoryError: If byte 0 is not a known category tag
        """
        available = len(data) - offset
        if available < PACK_SIZE:
            raise BufferUnderrunError(PACK_SIZE, max(available, 0), offset)

        tag = data[offset]
        try:
            category = Category(tag)
        except ValueError:
            raise UnknownCategoryError(tag, offset=offset) from None

        flags = data[offset + 3]
        crc = struct.unpack_from(">H", data, offset + 16)[0]

        return cls(
            category=category,
            track=TrackRef.from_byte(data[offset + 1]),
            sequence=data[offset + 2],
            character_position=flags & 0x0F,
            block_number=(flags >> 4) & 0x07,
            is_double_byte=bool(flags & 0x80),
            payload=bytes(data[offset + 4:offset + 16]),
            crc=crc,
        )

    def to_bytes(self) -> bytes:
        """Serialize the pack back to its 18-byte wire layout."""
        flags = (
            (self.character_position & 0x0F)
            | ((self.block_number & 0x07) << 4)
            | (0x80 if self.is_double_byte else 0)
        )
        payload = self.payload[:PAYLOAD_SIZE].ljust(PAYLOAD_SIZE, b"\x00")
        return struct.pack(
            ">BBBB12sH",
            self.category,
            self.track.number,
            self.sequence,
            flags,
            payload,
            self.crc,
        )

    def text_prefix(self) -> bytes:
        """Payload up to (not including) its first NUL, or all of it."""
        return self.payload.split(b"\x00", 1)[0]


def decode_pack(data: Union[bytes, memoryview], offset: int = 0) -> Pack:
    """Decode one pack; see Pack.from_bytes()."""
    return Pack.from_bytes(data, offset)


# =============================================================================
# Entry
# =============================================================================

@dataclass(frozen=True)
class Entry:
    """
    A reassembled CD-Text entry.

    ``data`` is a str for the text categories (Title, Performers,
    Songwriters, Composers, Arrangers) and raw bytes for everything else.
    """
    track: TrackRef
    category: Category
    data: Union[str, bytes]

    @property
    def is_text(self) -> bool:
        return isinstance(self.data, str)

    def format_data(self) -> str:
        """Data as printable text; raw payloads are shown as hex."""
        if self.is_text:
            return self.data
        return self.data.hex(" ")

    def __str__(self) -> str:
        return f"{self.track}: {self.category.get_name()}: {self.format_data()}"
