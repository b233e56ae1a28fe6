import pytest
from hfsize import bitmanip
from hfsize.bitmanip import InternalFormatError


def test_ints_are_big_endian():
    buf = bytearray(8)
    bitmanip.write_u8(buf, 0, 0xC4)
    bitmanip.write_u16(buf, 1, 0x0102)
    bitmanip.write_u32(buf, 3, 0x630BD4E9)
    assert buf == bytearray(b'\xC4\x01\x02\x63\x0B\xD4\xE9\x00')

def test_ints_never_grow_the_buffer():
    buf = bytearray(4)
    with pytest.raises(InternalFormatError):
        bitmanip.write_u32(buf, 1, 0)
    with pytest.raises(InternalFormatError):
        bitmanip.write_u16(buf, 3, 0)
    with pytest.raises(InternalFormatError):
        bitmanip.write_u8(buf, 4, 0)
    with pytest.raises(InternalFormatError):
        bitmanip.write_u8(buf, -1, 0)
    assert buf == bytearray(4)

def test_hex_ignores_whitespace():
    buf = bytearray(6)
    bitmanip.write_hex(buf, 1, '01f8 00\tf8\n 0e')
    assert buf == bytearray(b'\x00\x01\xf8\x00\xf8\x0e')

def test_hex_rejects_odd_length():
    buf = bytearray(4)
    with pytest.raises(InternalFormatError):
        bitmanip.write_hex(buf, 0, '01 2')
    assert buf == bytearray(4)

def test_hex_rejects_garbage():
    with pytest.raises(InternalFormatError):
        bitmanip.write_hex(bytearray(4), 0, 'zz')

def test_hex_overrun():
    buf = bytearray(2)
    with pytest.raises(InternalFormatError):
        bitmanip.write_hex(buf, 1, '0000')
    assert len(buf) == 2

def test_pad_up():
    assert bitmanip.pad_up(0, 512) == 0
    assert bitmanip.pad_up(1, 512) == 512
    assert bitmanip.pad_up(512, 512) == 512
    assert bitmanip.pad_up(513, 512) == 1024

def test_pstring():
    assert bitmanip.pstring(b'bob') == b'\x03bob'
    assert bitmanip.pstring(b'') == b'\x00'
    with pytest.raises(InternalFormatError):
        bitmanip.pstring(bytes(256))

def test_bits():
    assert bitmanip.bits(16, 3) == b'\xE0\x00'
    assert bitmanip.bits(16, 8) == b'\xFF\x00'
    assert bitmanip.bits(2048, 2) == b'\xC0' + bytes(255)
    assert bitmanip.bits(4096, 4096) == b'\xFF' * 512

def test_fields():
    f = bitmanip.Fields(('a', 'H'), (None, 'x'), ('b', 'L'), ('c', '4p'))
    assert f.offsets == {'a': 0, 'b': 3, 'c': 7}
    assert f.size == 11

    packed = f.pack(a=1, b=2, c=b'hi')
    assert packed == b'\x00\x01\x00\x00\x00\x00\x02\x02hi\x00'
    assert f.unpack_from(b'junk' + packed, 4) == {'a': 1, 'b': 2, 'c': b'hi'}

def test_fields_are_strict():
    f = bitmanip.Fields(('a', 'H'), ('b', 'B'))
    with pytest.raises(InternalFormatError):
        f.pack(a=1)
    with pytest.raises(InternalFormatError):
        f.pack(a=1, b=2, c=3)
    with pytest.raises(InternalFormatError):
        f.pack(a=70000, b=0)

def test_fields_pack_into():
    f = bitmanip.Fields(('a', 'H'),)
    buf = bytearray(4)
    f.pack_into(buf, 2, a=0x4244)
    assert buf == bytearray(b'\x00\x00BD')
    with pytest.raises(InternalFormatError):
        f.pack_into(buf, 3, a=0)
