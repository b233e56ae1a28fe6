import enum


class Signature(enum.Enum):
    """Finder type and creator, 4 bytes each"""

    STUFFIT = b'SITDSIT!'
    BINHEX = b'TEXTBNHQ'
    COMPACT_PRO = b'PACTCPCT'
    UNKNOWN = b'cccccccc'

    @property
    def type(self):
        return self.value[:4]

    @property
    def creator(self):
        return self.value[4:]


_BY_EXTENSION = {
    '.sit': Signature.STUFFIT,
    '.hqx': Signature.BINHEX,
    '.cpt': Signature.COMPACT_PRO,
}


def infer_signature(name):
    lower = name.lower()
    for ext, sig in _BY_EXTENSION.items():
        if lower.endswith(ext):
            return sig
    return Signature.UNKNOWN
