import collections
import logging
import struct
from . import bitmanip, btree, catalog
from .signature import infer_signature
from .sizes import (ALLOCATION_BLOCK_SIZE, BLOCKS_OVERHEAD, DEFAULT_CLUMP_SIZE, END_OF_BITMAP,
    SYSTEM_FILE_BLOCKS, SYSTEM_FILE_SIZE, allocation_blocks, check_size, image_size, physical_size)


log = logging.getLogger(__name__)

__all__ = ['FileMeta', 'File', 'Volume', 'build_image', 'write_image', 'image_chunks']


VOLUME_NAME = b'bob'
FILE_NAME = b'vintage' # the catalog name is fixed so that record offsets are too

BOOT_MARKER = '4c4b' # tags a raw image, not a bootable one

FIRST_BITMAP_BLOCK = 3
NEXT_CNID = 11
FILE_CNID = 16

FILE_TYPE_BYTE = 0xC4
FINDER_FLAGS = 0x0100 # kHasBeenInited

ROOT_CRDATE = 0x630BD4CC
ROOT_MDDATE = 0x630BD4E9
FILE_CRDATE = 0x630BD4E9
FILE_MDDATE = 0x630BD51E

# DInfo: frRect, frFlags, frLocation, frView
ROOT_WINDOW = '0000 0000 0000 0000  0100  0070 0248  0000'

EXTENTS_KEY_LEN = 7

MDB = bitmanip.Fields(
    ('drSigWord', '2s'),
    ('drCrDate', 'L'),
    ('drLsMod', 'L'),
    ('drAtrb', 'H'),
    ('drNmFls', 'H'),
    ('drVBMSt', 'H'),
    ('drAllocPtr', 'H'),
    ('drNmAlBlks', 'H'),
    ('drAlBlkSiz', 'L'),
    ('drClpSiz', 'L'),
    ('drAlBlSt', 'H'),
    ('drNxtCNID', 'L'),
    ('drFreeBks', 'H'),
    ('drVN', '28p'),
    ('drVolBkUp', 'L'),
    ('drVSeqNum', 'H'),
    ('drWrCnt', 'L'),
    ('drXTClpSiz', 'L'),
    ('drCTClpSiz', 'L'),
    ('drNmRtDirs', 'H'),
    ('drFilCnt', 'L'),
    ('drDirCnt', 'L'),
    ('drFndrInfo', '32s'),
    ('drVCSize', 'H'),
    ('drVBMCSize', 'H'),
    ('drCtlCSize', 'H'),
    ('drXTFlSize', 'L'),
    ('drXTExtRec', '12s'),
    ('drCTFlSize', 'L'),
    ('drCTExtRec', '12s'),
)


class FileMeta(collections.namedtuple('FileMeta', 'name logical_size')):
    __slots__ = ()

    @property
    def physical_size(self):
        return physical_size(self.logical_size)

    @property
    def signature(self):
        return infer_signature(self.name)


def make_boot_blocks():
    bootblocks = bytearray(2 * ALLOCATION_BLOCK_SIZE)
    bitmanip.write_hex(bootblocks, 0, BOOT_MARKER)
    return bytes(bootblocks)


def make_mdb(pysize):
    # overall layout:
    #   1. two boot blocks (sector 0)
    #   2. this block (sector 2)
    #   3. one bitmap block (sector 3)
    #   4. allocation blocks (sector 4): extents file, catalog file, the file
    vib = bytearray(ALLOCATION_BLOCK_SIZE)
    MDB.pack_into(vib, 0,
        drSigWord=b'BD', drCrDate=0, drLsMod=0, drAtrb=0, drNmFls=0,
        drVBMSt=FIRST_BITMAP_BLOCK, drAllocPtr=0,
        drNmAlBlks=BLOCKS_OVERHEAD + pysize // ALLOCATION_BLOCK_SIZE,
        drAlBlkSiz=ALLOCATION_BLOCK_SIZE, drClpSiz=DEFAULT_CLUMP_SIZE,
        drAlBlSt=END_OF_BITMAP, drNxtCNID=NEXT_CNID, drFreeBks=0,
        drVN=VOLUME_NAME, drVolBkUp=0, drVSeqNum=0, drWrCnt=0,
        drXTClpSiz=SYSTEM_FILE_SIZE, drCTClpSiz=SYSTEM_FILE_SIZE,
        drNmRtDirs=0, drFilCnt=1, drDirCnt=0,
        drFndrInfo=bytes(32), drVCSize=0, drVBMCSize=0, drCtlCSize=0,
        drXTFlSize=SYSTEM_FILE_SIZE, drXTExtRec=btree.pack_extent_record((0, SYSTEM_FILE_BLOCKS)),
        drCTFlSize=SYSTEM_FILE_SIZE, drCTExtRec=btree.pack_extent_record((SYSTEM_FILE_BLOCKS, SYSTEM_FILE_BLOCKS)),
    )
    return bytes(vib)


def make_bitmap():
    # never written again, so nothing is free
    return bitmanip.bits(ALLOCATION_BLOCK_SIZE * 8, ALLOCATION_BLOCK_SIZE * 8)


def make_extents_file():
    # three inline extents always suffice, so the tree stays empty
    return btree.make_btree([], bthKeyLen=EXTENTS_KEY_LEN, nnodes=SYSTEM_FILE_BLOCKS)


def catalog_records(meta):
    root = catalog.DirectoryRecord(catalog.ROOT_PARENT_CNID, VOLUME_NAME, catalog.ROOT_CNID, valence=1)
    root.crdate, root.mddate = ROOT_CRDATE, ROOT_MDDATE
    usrinfo = bytearray(16)
    bitmanip.write_hex(usrinfo, 0, ROOT_WINDOW)
    root.usrinfo = bytes(usrinfo)

    thread = catalog.ThreadRecord(catalog.ROOT_CNID, catalog.ROOT_PARENT_CNID, VOLUME_NAME)

    f = catalog.FileRecord(catalog.ROOT_CNID, FILE_NAME, FILE_CNID, meta.signature)
    f.filetype = FILE_TYPE_BYTE
    f.finder_flags = FINDER_FLAGS
    f.crdate, f.mddate = FILE_CRDATE, FILE_MDDATE
    f.data_extent = (BLOCKS_OVERHEAD, allocation_blocks(meta.logical_size))
    f.data_lglen, f.data_pylen = meta.logical_size, meta.physical_size

    # already in key order: (1, bob), (2, ""), (2, vintage)
    return [root, thread, f]


def make_catalog_file(meta):
    records = [r.pack() for r in catalog_records(meta)]
    return btree.make_btree(records, bthKeyLen=catalog.CATALOG_KEY_LEN, nnodes=SYSTEM_FILE_BLOCKS)


def image_chunks(data, meta):
    """Every piece of the volume image, in order, for a file that fits"""
    if len(data) != meta.logical_size:
        raise ValueError('got %d bytes of data for a %d-byte file' % (len(data), meta.logical_size))

    pysize = check_size(meta.logical_size)
    log.debug('%s: %d bytes, %d allocation blocks, %s',
        meta.name, meta.logical_size, pysize // ALLOCATION_BLOCK_SIZE, meta.signature.name)

    return [
        make_boot_blocks(),
        make_mdb(pysize),
        make_bitmap(),
        make_extents_file(),
        make_catalog_file(meta),
        bytes(data),
        bytes(pysize - meta.logical_size),
    ]


def build_image(data, meta):
    return b''.join(image_chunks(data, meta))


def write_image(data, meta, path):
    """Write the image to path, chunk by chunk, and return its length.

    There is no temporary file: a failed write leaves a truncated image.
    """
    finalchunks = image_chunks(data, meta)
    with open(path, 'wb') as f:
        for chunk in finalchunks:
            f.write(chunk)
    return image_size(meta.logical_size)


class File:
    def __init__(self):
        self.type = b'????'
        self.creator = b'????'
        self.flags = 0
        self.cnid = 0

        self.crdate = self.mddate = self.bkdate = 0

        self.rsrc = bytearray()
        self.data = bytearray()

    def __str__(self):
        typestr, creatorstr = (x.decode('mac_roman') for x in (self.type, self.creator))
        dstr, rstr = (repr(bytes(x)) if 1 <= len(x) <= 32 else '%db' % len(x) for x in (self.data, self.rsrc))
        return '[%s/%s] data=%s rsrc=%s' % (typestr, creatorstr, dstr, rstr)


class Volume(dict):
    """The root directory of a volume read back from an image, name to File"""

    def __init__(self):
        super().__init__()

        self.crdate = self.mddate = self.bkdate = 0
        self.name = 'Untitled'
        self.root_valence = 0

    def read(self, from_volume):
        mdb = MDB.unpack_from(from_volume, 2 * ALLOCATION_BLOCK_SIZE)
        if mdb['drSigWord'] != b'BD':
            raise ValueError('not an HFS volume: signature %r' % mdb['drSigWord'])

        self.name = mdb['drVN'].decode('mac_roman')
        self.crdate, self.mddate, self.bkdate = mdb['drCrDate'], mdb['drLsMod'], mdb['drVolBkUp']

        drAlBlSt, drAlBlkSiz = mdb['drAlBlSt'], mdb['drAlBlkSiz']
        block2offset = lambda block: ALLOCATION_BLOCK_SIZE*drAlBlSt + drAlBlkSiz*block

        def getfork(size, extrec):
            extents = [(a, b) for (a, b) in btree.unpack_extent_record(extrec) if b]
            if sum(b for (a, b) in extents) * drAlBlkSiz < size:
                raise ValueError('fork continues in the extents overflow file')
            fork = b''.join(from_volume[block2offset(a):block2offset(a+b)] for (a, b) in extents)
            if len(fork) < size:
                raise ValueError('image is truncated')
            return fork[:size]

        catalogfile = getfork(mdb['drCTFlSize'], mdb['drCTExtRec'])

        for rec in btree.dump_btree(catalogfile):
            ckrParID, ckrCName, cdrType, val = catalog.parse_record(rec)

            if cdrType == catalog.DIRECTORY and val['dirDirID'] == catalog.ROOT_CNID:
                self.root_valence = val['dirVal']

            elif cdrType == catalog.FILE and ckrParID == catalog.ROOT_CNID:
                f = File()
                f.cnid = val['filFlNum']
                f.crdate, f.mddate, f.bkdate = val['filCrDat'], val['filMdDat'], val['filBkDat']
                f.type, f.creator, f.flags = struct.unpack_from('>4s4sH', val['filUsrWds'])

                f.data = getfork(val['filLgLen'], val['filExtRec'])
                f.rsrc = getfork(val['filRLgLen'], val['filRExtRec'])

                self[ckrCName.decode('mac_roman')] = f

        return self
