import hashlib

import pytest

from torrentcodec.bencode import BencodeDict, BencodeString, TrailingData, decode, encode, from_python
from torrentcodec.torrent.metainfo import SchemaViolation, TorrentMeta, info_hash, split_pieces

PIECES = bytes(range(20))


def make_torrent(info=None, **overrides):
    fields = {"length": 5, "name": "f", "piece length": 5, "pieces": PIECES}
    fields.update(info or {})
    root = {"announce": "http://t/", "info": fields}
    root.update(overrides)
    return from_python(root)


def test_minimal_torrent():
    meta = TorrentMeta.from_dict(make_torrent())

    assert meta.announce == "http://t/"
    assert meta.name == "f"
    assert meta.length == 5
    assert meta.total_length == 5
    assert meta.piece_length == 5
    assert meta.pieces == (PIECES,)
    assert meta.num_pieces == 1
    assert meta.last_piece_length == 5
    assert not meta.is_multi_file
    assert meta.announce_list is None

    expected_info = b"d6:lengthi5e4:name1:f12:piece lengthi5e6:pieces20:" + PIECES + b"e"
    assert meta.info_hash == hashlib.sha1(expected_info).digest()
    assert meta.info_hash_hex == hashlib.sha1(expected_info).hexdigest()


def test_info_hash_ignores_announce():
    a = TorrentMeta.from_dict(make_torrent())
    b = TorrentMeta.from_dict(make_torrent(announce="udp://other:80/announce"))
    assert a.info_hash == b.info_hash


def test_info_hash_follows_info_contents():
    a = TorrentMeta.from_dict(make_torrent())
    b = TorrentMeta.from_dict(make_torrent(info={"length": 6}))
    assert a.info_hash != b.info_hash


def test_info_hash_independent_of_source_key_order():
    pieces = b"20:" + PIECES
    ordered = b"d8:announce9:http://t/4:infod6:lengthi5e4:name1:f12:piece lengthi5e6:pieces" + pieces + b"ee"
    shuffled = b"d4:infod6:pieces" + pieces + b"4:name1:f6:lengthi5e12:piece lengthi5ee8:announce9:http://t/e"
    assert TorrentMeta.from_bytes(ordered).info_hash == TorrentMeta.from_bytes(shuffled).info_hash


def test_info_hash_function():
    info = make_torrent()[b"info"]
    assert info_hash(info) == hashlib.sha1(encode(info)).digest()


def test_piece_split_order():
    pieces = b"A" * 20 + b"B" * 20 + b"C" * 20
    meta = TorrentMeta.from_dict(make_torrent(info={"pieces": pieces, "length": 14, "piece length": 5}))
    assert meta.pieces == (b"A" * 20, b"B" * 20, b"C" * 20)
    assert meta.piece_hashes_hex()[1] == (b"B" * 20).hex()
    assert meta.last_piece_length == 4


def test_split_pieces():
    assert split_pieces(b"") == ()
    with pytest.raises(SchemaViolation):
        split_pieces(b"x" * 21)


@pytest.mark.parametrize("root, field", [
    (make_torrent(info={"pieces": b"x" * 19}), "info.pieces"),
    (make_torrent(info={"pieces": 5}), "info.pieces"),
    (make_torrent(info={"piece length": b"5"}), "info.piece length"),
    (make_torrent(info={"piece length": 0}), "info.piece length"),
    (make_torrent(info={"length": -1}), "info.length"),
    (make_torrent(announce=5), "announce"),
    (make_torrent(announce=b"\xff\xfe"), "announce"),
    (from_python({"announce": "http://t/", "info": []}), "info"),
])
def test_schema_violations(root, field):
    with pytest.raises(SchemaViolation) as excinfo:
        TorrentMeta.from_dict(root)
    assert excinfo.value.field == field


@pytest.mark.parametrize("key, field", [
    (b"announce", "announce"),
    (b"info", "info"),
])
def test_missing_top_level_field(key, field):
    root = dict(make_torrent().value)
    del root[key]
    with pytest.raises(SchemaViolation) as excinfo:
        TorrentMeta.from_dict(BencodeDict(root))
    assert excinfo.value.field == field


@pytest.mark.parametrize("key, field", [
    (b"length", "info.length"),
    (b"name", "info.name"),
    (b"piece length", "info.piece length"),
    (b"pieces", "info.pieces"),
])
def test_missing_info_field(key, field):
    root = make_torrent()
    info = dict(root[b"info"].value)
    del info[key]
    with pytest.raises(SchemaViolation) as excinfo:
        TorrentMeta.from_dict(BencodeDict({b"announce": root[b"announce"], b"info": BencodeDict(info)}))
    assert excinfo.value.field == field


def test_root_must_be_dict():
    with pytest.raises(SchemaViolation):
        TorrentMeta.from_dict(BencodeString(b"x"))


def test_schema_violation_is_value_error():
    with pytest.raises(ValueError):
        TorrentMeta.from_dict(make_torrent(info={"pieces": b"x"}))


def test_multi_file_torrent():
    root = from_python({
        "announce": "http://t/",
        "announce-list": [["http://t/"], ["udp://backup:6969"]],
        "info": {
            "name": "dir",
            "piece length": 16,
            "pieces": PIECES * 2,
            "files": [
                {"length": 10, "path": ["a", "b.txt"]},
                {"length": 12, "path": ["c.bin"]},
            ],
        },
    })
    meta = TorrentMeta.from_dict(root)

    assert meta.is_multi_file
    assert meta.length == 22
    assert [(f.path, f.length, f.offset) for f in meta.files] == [("a/b.txt", 10, 0), ("c.bin", 12, 10)]
    assert meta.announce_list == (("http://t/",), ("udp://backup:6969",))


def test_multi_file_entry_must_have_path():
    root = make_torrent(info={"files": [{"length": 1}]})
    with pytest.raises(SchemaViolation) as excinfo:
        TorrentMeta.from_dict(root)
    assert excinfo.value.field == "info.files[0].path"


def test_malformed_announce_list_ignored():
    meta = TorrentMeta.from_dict(make_torrent(**{"announce-list": [1, 2]}))
    assert meta.announce_list is None


def test_from_bytes_and_file(tmp_path):
    raw = encode(make_torrent())
    path = tmp_path / "sample.torrent"
    path.write_bytes(raw)

    meta = TorrentMeta.from_file(path)
    assert meta == TorrentMeta.from_bytes(raw)

    with pytest.raises(TrailingData):
        TorrentMeta.from_bytes(raw + b"\n")
    assert TorrentMeta.from_bytes(raw + b"\n", allow_trailing=True).length == 5


def test_encode_metadata_record():
    root = make_torrent(**{"announce-list": [["http://t/"]]})
    meta = TorrentMeta.from_dict(root)
    assert encode(meta) == encode(root)
    assert decode(encode(meta))[0] == root


def test_record_is_hashable():
    a = TorrentMeta.from_dict(make_torrent())
    b = TorrentMeta.from_dict(make_torrent())
    assert hash(a) == hash(b)
    assert len({a, b}) == 1


def test_record_is_frozen():
    meta = TorrentMeta.from_dict(make_torrent())
    with pytest.raises(AttributeError):
        meta.length = 10
