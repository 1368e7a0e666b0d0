"""
Shared fixtures for the cdtext test suite.

Packs are built field by field through Pack.to_bytes() so each test states
exactly which header bits and payload bytes it relies on.
"""

import struct

import pytest

from cdtext.records import Category, Pack, TrackRef


def build_pack(
    payload: bytes = b"",
    category: Category = Category.TITLE,
    track: int = 0,
    position: int = 0,
    sequence: int = 0,
    block: int = 0,
    double_byte: bool = False,
    crc: int = 0,
) -> bytes:
    """Encode one 18-byte pack; the payload is NUL-padded to 12 bytes."""
    assert len(payload) <= 12, "payload longer than 12 bytes"
    return Pack(
        category=category,
        track=TrackRef.from_byte(track),
        sequence=sequence,
        character_position=position,
        block_number=block,
        is_double_byte=double_byte,
        payload=payload.ljust(12, b"\x00"),
        crc=crc,
    ).to_bytes()


def with_header(pack_data: bytes) -> bytes:
    """Prefix pack data with a consistent 4-byte length header."""
    return struct.pack(">HBB", len(pack_data) + 2, 0, 0) + pack_data


@pytest.fixture
def make_pack():
    """Factory fixture: make_pack(payload, category=..., track=..., position=...)."""
    return build_pack


@pytest.fixture
def header():
    """Factory fixture: header(pack_data) -> buffer with length header."""
    return with_header


@pytest.fixture
def album_buffer() -> bytes:
    """
    Album title plus two track titles, one string per pack.

    Every payload ends in NUL and none holds exactly two NULs, so no
    string crosses a pack boundary.
    """
    return b"".join([
        build_pack(b"ALBUM TITLE\x00", track=0),
        build_pack(b"FIRST SONG!\x00", track=1, sequence=1),
        build_pack(b"SECOND SONG\x00", track=2, sequence=2),
    ])
