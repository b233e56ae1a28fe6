from . import bitmanip


ALLOCATION_BLOCK_SIZE = 512

# boot blocks (2), MDB (1) and bitmap (1) precede the allocation area
SYSTEM_SECTORS = 4

# drAlBlSt: the bitmap ends where allocation block 0 begins
END_OF_BITMAP = 4

# extents file and catalog file, in allocation blocks
SYSTEM_FILE_BLOCKS = 12
BLOCKS_OVERHEAD = 2 * SYSTEM_FILE_BLOCKS

DEFAULT_CLUMP_SIZE = 2048
SYSTEM_FILE_SIZE = SYSTEM_FILE_BLOCKS * ALLOCATION_BLOCK_SIZE

# one bitmap block can address this many allocation blocks
MAX_FILE_SIZE = (8 * (END_OF_BITMAP - 3) * ALLOCATION_BLOCK_SIZE - BLOCKS_OVERHEAD) * ALLOCATION_BLOCK_SIZE


class FileTooLargeError(ValueError):
    pass


def physical_size(logical_size):
    return bitmanip.pad_up(logical_size, ALLOCATION_BLOCK_SIZE)


def allocation_blocks(logical_size):
    return physical_size(logical_size) // ALLOCATION_BLOCK_SIZE


def check_size(logical_size):
    if logical_size > MAX_FILE_SIZE:
        raise FileTooLargeError('file too large: %d bytes (limit is %d)' % (logical_size, MAX_FILE_SIZE))
    return physical_size(logical_size)


def image_size(logical_size):
    return (SYSTEM_SECTORS + BLOCKS_OVERHEAD) * ALLOCATION_BLOCK_SIZE + physical_size(logical_size)
