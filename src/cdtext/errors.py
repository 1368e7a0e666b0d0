"""
CD-Text Error Hierarchy
=======================

This module defines the exception hierarchy for the cdtext package.
All exceptions inherit from CDTextError, allowing callers to catch every
decoding problem with a single except clause if desired.

Exception Hierarchy
-------------------
CDTextError (base)
├── PackError - a single 18-byte pack could not be decoded
│   └── UnknownCategoryError - tag byte is not a known category
├── BufferUnderrunError - not enough bytes left for a pack or header
└── InvalidTextError - accumulated text is not valid in the encoding

Design Philosophy
-----------------
Pack-level errors carry the byte offset of the pack (relative to the start
of the pack data, after any header has been stripped) and its index in the
pack stream. This lets callers report exactly which pack failed and why:

    pack 7 at offset 0x7E: unknown category tag 0x8A
"""

from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class CDTextError(Exception):
    """
    Base exception for all cdtext errors.

        try:
            entries = parse_cdtext_file("disc.cdt")
        except CDTextError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Pack Decoding Exceptions
# =============================================================================

class PackError(CDTextError):
    """
    A pack could not be decoded.

    Attributes:
        message: The error description
        offset: Byte offset of the pack within the pack data (optional)
        index: Index of the pack in the pack stream (optional)
    """

    def __init__(
        self,
        message: str,
        offset: Optional[int] = None,
        index: Optional[int] = None,
    ):
        self.message = message
        self.offset = offset
        self.index = index
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Prefix the message with the pack location when known."""
        location = []
        if self.index is not None:
            location.append(f"pack {self.index}")
        if self.offset is not None:
            location.append(f"at offset 0x{self.offset:X}")
        if location:
            return f"{' '.join(location)}: {self.message}"
        return self.message

    def at(self, index: int) -> "PackError":
        """Return the same error annotated with the pack's stream index."""
        self.index = index
        self.args = (self._format_message(),)
        return self


class UnknownCategoryError(PackError):
    """
    Tag byte does not match any known CD-Text category.

    Valid tags are 0x80-0x89 and 0x8D-0x8F. Anything else (including the
    reserved 0x8A-0x8C) cannot be decoded.
    """

    def __init__(
        self,
        tag: int,
        offset: Optional[int] = None,
        index: Optional[int] = None,
    ):
        self.tag = tag
        super().__init__(
            f"unknown category tag 0x{tag:02X}",
            offset=offset,
            index=index,
        )


# =============================================================================
# Buffer Exceptions
# =============================================================================

class BufferUnderrunError(CDTextError):
    """
    Fewer bytes remain than a structure needs.

    Raised when fewer than 18 bytes remain for a pack, or fewer than 4
    bytes are available for the optional length header.
    """

    def __init__(self, needed: int, available: int, offset: int = 0):
        self.needed = needed
        self.available = available
        self.offset = offset
        super().__init__(
            f"need {needed} bytes at offset 0x{offset:X}, "
            f"only {available} available"
        )


# =============================================================================
# Text Exceptions
# =============================================================================

class InvalidTextError(CDTextError):
    """
    Reassembled bytes are not valid text in the configured encoding.

    Attributes:
        data: The raw bytes that failed to decode
        encoding: The codec that was used
        category: Name of the category being decoded
        track: Display form of the track reference
    """

    def __init__(self, data: bytes, encoding: str, category: str, track: str):
        self.data = data
        self.encoding = encoding
        self.category = category
        self.track = track
        super().__init__(
            f"{track}: {category}: {data!r} is not valid {encoding} text"
        )
