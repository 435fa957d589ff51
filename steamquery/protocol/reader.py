"""
Sequential little-endian reader over a reply datagram

All multi-byte values on the A2S wire are little endian. Strings are
NULL-terminated and UTF-8 encoded.
"""

import struct

from steamquery.errors import TruncatedData


_UINT8 = struct.Struct('<B')
_INT16 = struct.Struct('<h')
_INT32 = struct.Struct('<i')
_INT64 = struct.Struct('<q')
_FLOAT32 = struct.Struct('<f')


class ByteReader:
    """
    Forward-only cursor over an immutable byte buffer.

    Every read either returns a complete value and advances the offset, or
    raises TruncatedData and leaves the offset where it was.
    """

    def __init__(self, data: bytes, offset: int = 0):
        self._data = bytes(data)
        self._offset = offset

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def remaining(self) -> int:
        return len(self._data) - self._offset

    def _unpack(self, fmt: struct.Struct):
        if self.remaining < fmt.size:
            raise TruncatedData(self._offset, fmt.size, self.remaining)
        (value,) = fmt.unpack_from(self._data, self._offset)
        self._offset += fmt.size
        return value

    def read_uint8(self) -> int:
        return self._unpack(_UINT8)

    def read_int16(self) -> int:
        return self._unpack(_INT16)

    def read_int32(self) -> int:
        return self._unpack(_INT32)

    def read_int64(self) -> int:
        return self._unpack(_INT64)

    def read_float32(self) -> float:
        return self._unpack(_FLOAT32)

    def read_bytes(self, count: int) -> bytes:
        if count < 0:
            raise ValueError(f"Cannot read a negative number of bytes: {count}")
        if self.remaining < count:
            raise TruncatedData(self._offset, count, self.remaining)
        chunk = self._data[self._offset:self._offset + count]
        self._offset += count
        return chunk

    def read_string(self) -> str:
        """
        Read a NULL-terminated string.

        The raw bytes are collected up to the terminator and decoded in one
        go, so multi-byte UTF-8 sequences survive intact.

        Returns:
            Decoded string (terminator consumed, not included)
        """
        end = self._data.find(b'\x00', self._offset)
        if end == -1:
            raise TruncatedData(self._offset, None, self.remaining)

        raw = self._data[self._offset:end]
        self._offset = end + 1
        return raw.decode('utf-8', errors='replace')
