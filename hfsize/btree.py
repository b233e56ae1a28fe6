import struct
from . import bitmanip


NODE_SIZE = 512

# ndType
HEADER_NODE = 0x01
LEAF_NODE = 0xFF

NODE_DESCRIPTOR = bitmanip.Fields(
    ('ndFLink', 'L'),
    ('ndBLink', 'L'),
    ('ndType', 'B'),
    ('ndNHeight', 'B'),
    ('ndNRecs', 'H'),
    (None, 'xx'),
)

HEADER_REC = bitmanip.Fields(
    ('bthDepth', 'H'),
    ('bthRoot', 'L'),
    ('bthNRecs', 'L'),
    ('bthFNode', 'L'),
    ('bthLNode', 'L'),
    ('bthNodeSize', 'H'),
    ('bthKeyLen', 'H'),
    ('bthNNodes', 'L'),
    ('bthFree', 'L'),
    (None, '76x'),
)

USER_REC_SIZE = 128
MAP_REC_SIZE = 256


class Node:
    def __init__(self, ndType, ndNHeight=0, records=()):
        self.ndFLink = self.ndBLink = 0
        self.ndType = ndType
        self.ndNHeight = ndNHeight
        self.records = list(records)

    def __bytes__(self):
        buf = bytearray(NODE_SIZE)

        next_left = NODE_DESCRIPTOR.size
        next_right = NODE_SIZE - 2

        for r in self.records:
            if next_left + len(r) > next_right - 2:
                raise ValueError('cannot fit these records in a B*-tree node')

            buf[next_left:next_left+len(r)] = r
            bitmanip.write_u16(buf, next_right, next_left)

            next_left += len(r)
            next_right -= 2

        bitmanip.write_u16(buf, next_right, next_left) # offset of free space

        NODE_DESCRIPTOR.pack_into(buf, 0,
            ndFLink=self.ndFLink, ndBLink=self.ndBLink,
            ndType=self.ndType, ndNHeight=self.ndNHeight, ndNRecs=len(self.records))

        return bytes(buf)


def pack_leaf_record(key, value):
    """Prefix key with its length byte and a reserved byte, keeping value word-aligned"""
    b = bytes([len(key)+1, 0, *key])
    if len(b) & 1: b += bytes(1)
    b += value
    return b


def pack_extent_record(*extents):
    """Up to three (first block, block count) pairs"""
    extents = list(extents) + [(0, 0)] * (3 - len(extents))
    if len(extents) != 3:
        raise bitmanip.InternalFormatError('an extent record holds 3 extents')
    return struct.pack('>HHHHHH', *(x for ext in extents for x in ext))


def unpack_extent_record(record):
    a, b, c, d, e, f = struct.unpack('>HHHHHH', record)
    return [(a, b), (c, d), (e, f)]


def make_btree(records, bthKeyLen, nnodes):
    """An HFS B*-tree with a header node and at most one leaf node.

    records are packed leaf records, already in key order. The file is
    nnodes long, with the nodes we do not use left free.
    """
    hnode = Node(HEADER_NODE)
    nodelist = [hnode]

    if records:
        leaf = Node(LEAF_NODE, 1, records)
        nodelist.append(leaf)
        bthDepth = bthRoot = bthFNode = bthLNode = 1
    else:
        bthDepth = bthRoot = bthFNode = bthLNode = 0

    if len(nodelist) > nnodes:
        raise ValueError('B*-tree needs %d nodes but has room for %d' % (len(nodelist), nnodes))

    header_rec = HEADER_REC.pack(
        bthDepth=bthDepth, bthRoot=bthRoot, bthNRecs=len(records),
        bthFNode=bthFNode, bthLNode=bthLNode,
        bthNodeSize=NODE_SIZE, bthKeyLen=bthKeyLen,
        bthNNodes=nnodes, bthFree=nnodes-len(nodelist),
    )

    # populate the bitmap (1 = used)
    map_rec = bitmanip.bits(MAP_REC_SIZE * 8, len(nodelist))

    hnode.records = [header_rec, bytes(USER_REC_SIZE), map_rec]

    nodelist.extend(bytes(NODE_SIZE) for _ in range(nnodes - len(nodelist)))
    return b''.join(bytes(node) for node in nodelist)


def split_node(buf, start):
    """Slice a btree node into records, excluding the node descriptor"""
    desc = NODE_DESCRIPTOR.unpack_from(buf, start)
    ndNRecs = desc['ndNRecs']
    offsets = list(reversed(struct.unpack_from('>%dH'%(ndNRecs+1), buf, start+NODE_SIZE-2*(ndNRecs+1))))
    starts = offsets[:-1]
    stops = offsets[1:]
    records = [bytes(buf[start+i_start:start+i_stop]) for (i_start, i_stop) in zip(starts, stops)]
    return desc, records


def read_header(buf):
    desc, records = split_node(buf, 0)
    if desc['ndType'] != HEADER_NODE:
        raise ValueError('node 0 is not a B*-tree header node')
    return HEADER_REC.unpack_from(records[0])


def dump_btree(buf):
    """Walk an HFS B*-tree, yielding the raw leaf records in order"""
    header = read_header(buf)
    if not header['bthNRecs']:
        return

    this_leaf = header['bthFNode']
    while True:
        desc, records = split_node(buf, NODE_SIZE*this_leaf)

        yield from records

        if this_leaf == header['bthLNode']:
            break
        this_leaf = desc['ndFLink']
