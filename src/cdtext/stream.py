"""
Pack Stream
===========

Lazy sequence of pack decode results over a CD-Text buffer.

The stream slices the (header-stripped) buffer into consecutive,
non-overlapping 18-byte windows and decodes each one on demand. It holds
no iteration state of its own: every call to iter() starts again at the
first window and yields the same results, so one PackStream can be walked
any number of times.

A trailing window shorter than 18 bytes is never decoded; its size is
available as ``trailing_bytes``.
"""

from dataclasses import dataclass
from typing import Iterator, Optional, Union

from cdtext.errors import PackError
from cdtext.records import PACK_SIZE, Pack


@dataclass(frozen=True)
class PackResult:
    """
    Outcome of decoding one 18-byte window.

    Exactly one of ``pack`` and ``error`` is set.
    """
    index: int
    offset: int
    pack: Optional[Pack] = None
    error: Optional[PackError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Pack:
        """Return the pack, or raise the decode error."""
        if self.error is not None:
            raise self.error
        return self.pack


class PackStream:
    """
    Restartable iterator factory over the packs of a buffer.

    The buffer is borrowed through a memoryview; packs copy only their own
    12-byte payload.

    Example:
        >>> stream = PackStream(data)
        >>> len(stream)
        3
        >>> [result.pack.category for result in stream if result.ok]
    """

    def __init__(self, data: Union[bytes, bytearray, memoryview]):
        self._view = memoryview(data)

    def __len__(self) -> int:
        return len(self._view) // PACK_SIZE

    @property
    def trailing_bytes(self) -> int:
        """Bytes after the last whole pack (ignored)."""
        return len(self._view) % PACK_SIZE

    def __iter__(self) -> Iterator[PackResult]:
        for index in range(len(self)):
            offset = index * PACK_SIZE
            try:
                pack = Pack.from_bytes(self._view, offset)
            except PackError as e:
                yield PackResult(index=index, offset=offset, error=e.at(index))
            else:
                yield PackResult(index=index, offset=offset, pack=pack)

    def packs(self) -> Iterator[Pack]:
        """Iterate decoded packs, raising on the first undecodable one."""
        for result in self:
            yield result.unwrap()
