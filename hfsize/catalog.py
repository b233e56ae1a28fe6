"""Catalog file records, as a tagged union keyed by cdrType.

Each record knows its own key and data. pack() produces the leaf record
that goes into a catalog B*-tree node.
"""

import struct
from . import bitmanip, btree


ROOT_PARENT_CNID = 1
ROOT_CNID = 2

# cdrType
DIRECTORY = 1
FILE = 2
DIRECTORY_THREAD = 3
FILE_THREAD = 4

CATALOG_KEY_LEN = 37

DIR_REC = bitmanip.Fields(
    ('cdrType', 'B'),
    (None, 'x'),
    ('dirFlags', 'H'),
    ('dirVal', 'H'),
    ('dirDirID', 'L'),
    ('dirCrDat', 'L'),
    ('dirMdDat', 'L'),
    ('dirBkDat', 'L'),
    ('dirUsrInfo', '16s'),
    ('dirFndrInfo', '16s'),
    (None, '16x'),
)

THREAD_REC = bitmanip.Fields(
    ('cdrType', 'B'),
    (None, 'x'),
    (None, '8x'),
    ('thdParID', 'L'),
    ('thdCName', '32p'),
)

FILE_REC = bitmanip.Fields(
    ('cdrType', 'B'),
    (None, 'x'),
    ('filFlags', 'B'),
    ('filTyp', 'B'),
    ('filUsrWds', '16s'),
    ('filFlNum', 'L'),
    ('filStBlk', 'H'),
    ('filLgLen', 'L'),
    ('filPyLen', 'L'),
    ('filRStBlk', 'H'),
    ('filRLgLen', 'L'),
    ('filRPyLen', 'L'),
    ('filCrDat', 'L'),
    ('filMdDat', 'L'),
    ('filBkDat', 'L'),
    ('filFndrInfo', '16s'),
    ('filClpSize', 'H'),
    ('filExtRec', '12s'),
    ('filRExtRec', '12s'),
    (None, '4x'),
)

_LAYOUTS = {
    DIRECTORY: DIR_REC,
    FILE: FILE_REC,
    DIRECTORY_THREAD: THREAD_REC,
    FILE_THREAD: THREAD_REC,
}


def make_key(parid, name):
    key = struct.pack('>L', parid) + bitmanip.pstring(name)
    if len(key) & 1: key += bytes(1) # a thread key's null name is padded
    return key


def parse_record(rec):
    """Split a raw leaf record into (parid, name, cdrType, fields)"""
    rec_len = rec[0]
    key = rec[2:1+rec_len]
    val = rec[bitmanip.pad_up(1+rec_len, 2):]

    ckrParID, namelen = struct.unpack_from('>LB', key)
    ckrCName = key[5:5+namelen]

    cdrType = val[0]
    try:
        layout = _LAYOUTS[cdrType]
    except KeyError:
        raise ValueError('unknown catalog record type %d' % cdrType)

    return ckrParID, ckrCName, cdrType, layout.unpack_from(val)


class CatalogRecord:
    cdrType = None

    def __init__(self, parid, name):
        self.parid = parid
        self.name = name

    def key(self):
        return make_key(self.parid, self.name)

    def fields(self):
        raise NotImplementedError

    def value(self):
        return _LAYOUTS[self.cdrType].pack(cdrType=self.cdrType, **self.fields())

    def pack(self):
        return btree.pack_leaf_record(self.key(), self.value())


class DirectoryRecord(CatalogRecord):
    cdrType = DIRECTORY

    def __init__(self, parid, name, cnid, valence=0):
        super().__init__(parid, name)
        self.cnid = cnid
        self.valence = valence
        self.flags = 0
        self.crdate = self.mddate = self.bkdate = 0
        self.usrinfo = bytes(16)
        self.fndrinfo = bytes(16)

    def fields(self):
        return dict(
            dirFlags=self.flags, dirVal=self.valence, dirDirID=self.cnid,
            dirCrDat=self.crdate, dirMdDat=self.mddate, dirBkDat=self.bkdate,
            dirUsrInfo=self.usrinfo, dirFndrInfo=self.fndrinfo,
        )


class ThreadRecord(CatalogRecord):
    """Back-link from a directory CNID to the parent ID and name of its main record"""

    cdrType = DIRECTORY_THREAD

    def __init__(self, cnid, parent_cnid, parent_name):
        super().__init__(cnid, b'')
        self.parent_cnid = parent_cnid
        self.parent_name = parent_name

    def fields(self):
        return dict(thdParID=self.parent_cnid, thdCName=self.parent_name)


class FileRecord(CatalogRecord):
    cdrType = FILE

    def __init__(self, parid, name, cnid, signature):
        super().__init__(parid, name)
        self.cnid = cnid
        self.signature = signature
        self.flags = 0
        self.filetype = 0
        self.finder_flags = 0
        self.crdate = self.mddate = self.bkdate = 0

        self.data_extent = (0, 0)
        self.data_lglen = self.data_pylen = 0

    def usrwds(self):
        # FInfo: fdType, fdCreator, fdFlags, fdLocation, fdFldr
        return struct.pack('>8sHhhH', self.signature.value, self.finder_flags, 0, 0, 0)

    def fields(self):
        return dict(
            filFlags=self.flags, filTyp=self.filetype, filUsrWds=self.usrwds(),
            filFlNum=self.cnid,
            filStBlk=0, filLgLen=self.data_lglen, filPyLen=self.data_pylen,
            filRStBlk=0, filRLgLen=0, filRPyLen=0,
            filCrDat=self.crdate, filMdDat=self.mddate, filBkDat=self.bkdate,
            filFndrInfo=bytes(16), filClpSize=0,
            filExtRec=btree.pack_extent_record(self.data_extent),
            filRExtRec=btree.pack_extent_record(),
        )
