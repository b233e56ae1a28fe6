import argparse
import logging
import os
from .main import FileMeta, write_image
from .sizes import check_size


OUTPUT_NAME = 'volume.img'

log = logging.getLogger(__name__)


def read_source(path):
    """Read the whole file, refusing it before reading if it cannot fit"""
    size = os.path.getsize(path)
    check_size(size)

    with open(path, 'rb') as f:
        data = f.read(size)
    if len(data) != size:
        raise OSError('failed to read complete file: %s' % path)

    return data, FileMeta(os.path.basename(path), size)


def main(args=None):
    parser = argparse.ArgumentParser(prog='HFSize', description='''
        Wrap a single file in a minimal read-only HFS volume,
        written to %s in the current directory.
    ''' % OUTPUT_NAME)

    parser.add_argument('source', metavar='FILE', help='file to place in the root directory')

    args = parser.parse_args(args)

    logging.basicConfig(level=logging.INFO, format='%(message)s')

    data, meta = read_source(args.source)
    written = write_image(data, meta, OUTPUT_NAME)

    log.info('%s: %d bytes (%s as %s)', OUTPUT_NAME, written, meta.name, meta.signature.name)
    return 0
