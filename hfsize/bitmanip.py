import struct


class InternalFormatError(ValueError):
    pass


def _check_span(buf, offset, width):
    if offset < 0 or offset + width > len(buf):
        raise InternalFormatError('%d bytes at offset %d overrun %d-byte buffer' % (width, offset, len(buf)))


def write_u8(buf, offset, value):
    _check_span(buf, offset, 1)
    struct.pack_into('>B', buf, offset, value)


def write_u16(buf, offset, value):
    _check_span(buf, offset, 2)
    struct.pack_into('>H', buf, offset, value)


def write_u32(buf, offset, value):
    _check_span(buf, offset, 4)
    struct.pack_into('>L', buf, offset, value)


def write_hex(buf, offset, text):
    """Patch bytes given as a hex literal, e.g. "0000 000C", into buf"""
    digits = ''.join(text.split())
    if len(digits) % 2:
        raise InternalFormatError('odd number of hex digits: %r' % text)

    try:
        data = bytes.fromhex(digits)
    except ValueError:
        raise InternalFormatError('not a hex literal: %r' % text)

    _check_span(buf, offset, len(data))
    buf[offset:offset+len(data)] = data


def pad_up(size, factor):
    x = size + factor - 1
    return x - (x % factor)


def pstring(orig):
    if len(orig) > 255:
        raise InternalFormatError('pascal string too long: %r' % orig)
    return bytes([len(orig)]) + orig


def bits(ntotal, nset):
    """A bitmap of ntotal bits with the first nset set (ntotal must be a multiple of 8)"""
    nset = max(nset, 0)
    nset = min(nset, ntotal)
    a = b'\xFF' * (nset // 8)
    c = b'\x00' * ((ntotal-nset) // 8)
    if (len(a) + len(c)) * 8 < ntotal:
        b = [b'\x00', b'\x80', b'\xC0', b'\xE0', b'\xF0', b'\xF8', b'\xFC', b'\xFE', b'\xFF'][nset % 8]
        return b''.join([a,b,c])
    else:
        return b''.join([a,c])


class Fields:
    """Big-endian record declared as (name, struct format) pairs, laid end to end.

    A name of None marks filler, whose format must be pad bytes ('x').
    """

    def __init__(self, *fields):
        self.fields = fields
        self.format = '>' + ''.join(fmt for (name, fmt) in fields)
        self.size = struct.calcsize(self.format)
        self.names = [name for (name, fmt) in fields if name is not None]

        self.offsets = {}
        at = 0
        for name, fmt in fields:
            if name is not None:
                self.offsets[name] = at
            at += struct.calcsize('>' + fmt)

    def pack(self, **values):
        missing = [n for n in self.names if n not in values]
        unknown = [n for n in values if n not in self.offsets]
        if missing or unknown:
            raise InternalFormatError('missing %r, unknown %r' % (missing, unknown))

        try:
            return struct.pack(self.format, *(values[n] for n in self.names))
        except struct.error as e:
            raise InternalFormatError(str(e))

    def pack_into(self, buf, offset, **values):
        packed = self.pack(**values)
        _check_span(buf, offset, len(packed))
        buf[offset:offset+len(packed)] = packed

    def unpack_from(self, buf, offset=0):
        return dict(zip(self.names, struct.unpack_from(self.format, buf, offset)))
