from __future__ import annotations
import logging
from typing import BinaryIO, Optional

logger = logging.getLogger(__name__)


class TruncatedSegmentError(IOError):
    """Raised in strict mode when a segment field runs past the end of the stream."""

    def __init__(self, position: int, expected: int, actual: int):
        super().__init__(
            f"Unexpected end of stream at offset {position}: "
            f"expected {expected} bytes, got {actual}"
        )
        self.position = position
        self.expected = expected
        self.actual = actual


class ByteSource:
    """
    Forward-only reader over a binary stream that counts consumed bytes.

    The position is the number of bytes actually returned by the underlying
    stream, so it also works for pipes and sockets that do not support tell().
    Errors raised by the stream (OSError) are never caught here.

    Multi-byte integers are big-endian. A short read fills the missing
    low-order bytes with zero unless the source is strict, in which case
    TruncatedSegmentError is raised.
    """

    def __init__(self, f: BinaryIO, strict: bool = False):
        self.f = f
        self.strict = strict
        self.position = 0

    def read_byte(self) -> Optional[int]:
        """Return the next byte, or None at end of stream."""
        data = self.f.read(1)
        if not data:
            return None
        self.position += 1
        return data[0]

    def read_bytes(self, count: int) -> bytes:
        start = self.position
        data = self._read_exactly(count)
        if len(data) != count:
            self._short_read(start, count, len(data))
        return data

    def read_uint(self, count: int) -> int:
        data = self.read_bytes(count)
        value = 0
        for byte in data:
            value = (value << 8) | byte
        # missing trailing bytes read as zero
        return value << (8 * (count - len(data)))

    def read_u8(self) -> int:
        return self.read_uint(1)

    def read_u16(self) -> int:
        return self.read_uint(2)

    def skip(self, count: int) -> int:
        """Consume up to count bytes and return how many were skipped."""
        skipped = len(self._read_exactly(count))
        if skipped != count and self.strict:
            raise TruncatedSegmentError(self.position, count, skipped)
        return skipped

    def _read_exactly(self, count: int) -> bytes:
        # BufferedReader may return fewer bytes than asked before end of stream
        chunks = []
        remaining = count
        while remaining > 0:
            chunk = self.f.read(remaining)
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)
            self.position += len(chunk)
        return b"".join(chunks)

    def _short_read(self, start: int, expected: int, actual: int) -> None:
        if self.strict:
            raise TruncatedSegmentError(start, expected, actual)
        logger.warning(
            "Truncated field at offset %d: expected %d bytes, got %d; missing bytes read as 0",
            start, expected, actual,
        )
