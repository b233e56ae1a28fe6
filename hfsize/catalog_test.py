import pytest
from hfsize import catalog
from hfsize.signature import Signature

def test_record_layouts():
    assert catalog.DIR_REC.size == 70
    assert catalog.THREAD_REC.size == 46
    assert catalog.FILE_REC.size == 102

    assert catalog.DIR_REC.offsets['dirCrDat'] == 10
    assert catalog.DIR_REC.offsets['dirUsrInfo'] == 22
    assert catalog.THREAD_REC.offsets['thdParID'] == 10
    assert catalog.THREAD_REC.offsets['thdCName'] == 14

    off = catalog.FILE_REC.offsets
    assert off['filTyp'] == 3
    assert off['filUsrWds'] == 4
    assert off['filFlNum'] == 20
    assert off['filLgLen'] == 26
    assert off['filPyLen'] == 30
    assert off['filCrDat'] == 44
    assert off['filClpSize'] == 72
    assert off['filExtRec'] == 74
    assert off['filRExtRec'] == 86

def test_keys():
    assert catalog.make_key(1, b'bob') == bytes.fromhex('00000001 03 626f62')
    assert catalog.make_key(2, b'') == bytes.fromhex('00000002 00 00')

def test_directory_record():
    d = catalog.DirectoryRecord(1, b'bob', 2, valence=1)
    rec = d.pack()
    assert len(rec) == 80
    assert rec[:12] == bytes.fromhex('09 00 00000001 03 626f62 01 00')

    parid, name, cdrType, val = catalog.parse_record(rec)
    assert (parid, name, cdrType) == (1, b'bob', catalog.DIRECTORY)
    assert val['cdrType'] == catalog.DIRECTORY
    assert val['dirDirID'] == 2
    assert val['dirVal'] == 1

def test_thread_record():
    t = catalog.ThreadRecord(2, 1, b'bob')
    rec = t.pack()
    assert len(rec) == 54
    assert rec[:8] == bytes.fromhex('07 00 00000002 00 00')
    assert catalog.parse_record(rec) == (2, b'', catalog.DIRECTORY_THREAD,
        {'cdrType': catalog.DIRECTORY_THREAD, 'thdParID': 1, 'thdCName': b'bob'})

def test_file_thread_reads_back():
    rec = bytearray(catalog.ThreadRecord(16, 2, b'vintage').pack())
    rec[8] = catalog.FILE_THREAD
    parid, name, cdrType, val = catalog.parse_record(bytes(rec))
    assert (parid, name, cdrType) == (16, b'', catalog.FILE_THREAD)
    assert (val['thdParID'], val['thdCName']) == (2, b'vintage')

def test_file_record():
    f = catalog.FileRecord(2, b'vintage', 16, Signature.BINHEX)
    f.data_extent = (24, 3)
    f.data_lglen, f.data_pylen = 1500, 1536
    rec = f.pack()
    assert len(rec) == 116

    parid, name, cdrType, val = catalog.parse_record(rec)
    assert (parid, name, cdrType) == (2, b'vintage', catalog.FILE)
    assert val['filUsrWds'][:8] == b'TEXTBNHQ'
    assert val['cdrType'] == catalog.FILE
    assert val['filFlNum'] == 16
    assert (val['filLgLen'], val['filPyLen']) == (1500, 1536)
    assert val['filExtRec'] == bytes.fromhex('0018 0003') + bytes(8)
    assert val['filRExtRec'] == bytes(12)
    assert (val['filRLgLen'], val['filRPyLen']) == (0, 0)

def test_unknown_record_type():
    rec = catalog.DirectoryRecord(1, b'bob', 2).pack()
    rec = rec[:10] + b'\x09' + rec[11:]
    with pytest.raises(ValueError):
        catalog.parse_record(rec)
