"""
Tests for the little-endian byte reader
"""

import struct

import pytest

from steamquery.errors import TruncatedData
from steamquery.protocol.reader import ByteReader


class TestFixedWidth:
    def test_reads_little_endian_and_advances(self):
        data = struct.pack('<Bhiqf', 0xFE, -2, 70000, -(2 ** 40), 1.5)
        reader = ByteReader(data)

        assert reader.read_uint8() == 0xFE
        assert reader.offset == 1
        assert reader.read_int16() == -2
        assert reader.read_int32() == 70000
        assert reader.read_int64() == -(2 ** 40)
        assert reader.read_float32() == 1.5
        assert reader.remaining == 0

    def test_short_read_raises_and_keeps_offset(self):
        reader = ByteReader(b'\x01\x02\x03')
        reader.read_uint8()

        with pytest.raises(TruncatedData) as excinfo:
            reader.read_int32()

        assert excinfo.value.offset == 1
        assert excinfo.value.needed == 4
        assert excinfo.value.available == 2
        assert reader.offset == 1
        assert reader.read_int16() == 0x0302

    def test_start_offset(self):
        reader = ByteReader(b'\xFF\xFF\xFF\xFF\x49\x11', 5)
        assert reader.read_uint8() == 0x11


class TestBytes:
    def test_read_bytes(self):
        reader = ByteReader(b'abcdef')
        assert reader.read_bytes(4) == b'abcd'
        assert reader.remaining == 2

    def test_read_bytes_short(self):
        reader = ByteReader(b'ab')
        with pytest.raises(TruncatedData):
            reader.read_bytes(3)

    def test_negative_count_rejected(self):
        reader = ByteReader(b'abcdef')
        reader.read_bytes(3)

        with pytest.raises(ValueError):
            reader.read_bytes(-2)

        assert reader.offset == 3


class TestStrings:
    def test_terminator_consumed(self):
        reader = ByteReader(b'map\x00next\x00')
        assert reader.read_string() == 'map'
        assert reader.offset == 4
        assert reader.read_string() == 'next'
        assert reader.remaining == 0

    def test_empty_string(self):
        reader = ByteReader(b'\x00\x07')
        assert reader.read_string() == ''
        assert reader.read_uint8() == 7

    def test_multibyte_utf8(self):
        name = 'Café Ünïcode 日本'
        reader = ByteReader(name.encode('utf-8') + b'\x00')
        assert reader.read_string() == name

    def test_invalid_utf8_is_replaced(self):
        reader = ByteReader(b'ab\xffcd\x00')
        assert reader.read_string() == 'ab\ufffdcd'

    def test_unterminated_string(self):
        reader = ByteReader(b'no terminator')
        with pytest.raises(TruncatedData) as excinfo:
            reader.read_string()

        assert excinfo.value.needed is None
        assert reader.offset == 0
