"""
Torrent metainfo projection and info hash computation.
"""
import hashlib
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from pathlib import Path
from typing import Optional, Tuple

from ..bencode import (
    DEFAULT_MAX_DEPTH,
    BencodeDict,
    BencodeInt,
    BencodeList,
    BencodeString,
    decode_value,
    encode,
)

PIECE_HASH_LENGTH = 20


class SchemaViolation(ValueError):
    """Raised when a decoded document does not have the torrent shape."""

    def __init__(self, field: str, reason: str = "missing or invalid"):
        super().__init__(f"Invalid torrent: '{field}' {reason}")
        self.field = field
        self.reason = reason


def info_hash(info: BencodeDict) -> bytes:
    """SHA-1 over the canonical encoding of the info dictionary."""
    return hashlib.sha1(encode(info)).digest()


def split_pieces(pieces: bytes) -> Tuple[bytes, ...]:
    """Splits the concatenated piece digests into 20-byte chunks, in piece order."""
    if len(pieces) % PIECE_HASH_LENGTH:
        raise SchemaViolation(
            "pieces", f"length {len(pieces)} is not a multiple of {PIECE_HASH_LENGTH}"
        )
    return tuple(pieces[i:i+PIECE_HASH_LENGTH] for i in range(0, len(pieces), PIECE_HASH_LENGTH))


# ------------------------------------------------------------
#   Field helpers
# ------------------------------------------------------------

def _require(d: BencodeDict, key: bytes, kind, field: str):
    node = d.get(key)
    if node is None:
        raise SchemaViolation(field, "missing")
    if not isinstance(node, kind):
        raise SchemaViolation(field, f"must be {kind.__name__}, got {type(node).__name__}")
    return node


def _utf8(node: BencodeString, field: str) -> str:
    try:
        return node.text()
    except UnicodeDecodeError as exc:
        raise SchemaViolation(field, "is not valid UTF-8") from exc


def _parse_announce_list(node) -> Optional[Tuple[Tuple[str, ...], ...]]:
    if not isinstance(node, BencodeList):
        return None

    tiers = []
    for tier in node:
        if not isinstance(tier, BencodeList):
            return None
        urls = []
        for u in tier:
            if not isinstance(u, BencodeString):
                return None
            try:
                urls.append(u.text())
            except UnicodeDecodeError:
                return None
        if urls:
            tiers.append(tuple(urls))
    return tuple(tiers) or None


def _parse_files(files_b: BencodeList) -> Tuple["TorrentFile", ...]:
    files = []
    offset = 0
    for index, f_entry in enumerate(files_b):
        field = f"info.files[{index}]"
        if not isinstance(f_entry, BencodeDict):
            raise SchemaViolation(field, "must be BencodeDict")
        length = _require(f_entry, b"length", BencodeInt, f"{field}.length").value
        if length < 0:
            raise SchemaViolation(f"{field}.length", "must not be negative")
        path_b = _require(f_entry, b"path", BencodeList, f"{field}.path")
        parts = []
        for p in path_b:
            if not isinstance(p, BencodeString):
                raise SchemaViolation(f"{field}.path", "must be a list of strings")
            parts.append(p.value.decode("utf-8", errors="replace"))
        if not parts:
            raise SchemaViolation(f"{field}.path", "must not be empty")
        files.append(TorrentFile(path="/".join(parts), length=length, offset=offset))
        offset += length
    return tuple(files)


@dataclass(frozen=True)
class TorrentFile:
    path: str
    length: int
    offset: int


@dataclass(frozen=True)
class TorrentMeta:
    """
    Fixed-shape view of a decoded torrent descriptor.

    Build it with ``from_dict``, ``from_bytes`` or ``from_file``; the
    instance is read-only afterwards.
    """
    announce: str
    name: str
    length: int
    piece_length: int
    pieces: Tuple[bytes, ...]
    files: Tuple[TorrentFile, ...]
    info: BencodeDict = dataclass_field(hash=False)
    info_hash: bytes
    announce_list: Optional[Tuple[Tuple[str, ...], ...]] = None

    @classmethod
    def from_dict(cls, root) -> "TorrentMeta":
        if not isinstance(root, BencodeDict):
            raise SchemaViolation("<root>", "must be a dictionary")

        # ------------------ ANNOUNCE URL ------------------
        announce = _utf8(_require(root, b"announce", BencodeString, "announce"), "announce")
        announce_list = _parse_announce_list(root.get(b"announce-list"))

        # ------------------ INFO ------------------
        info = _require(root, b"info", BencodeDict, "info")

        name_b = _require(info, b"name", BencodeString, "info.name")
        name = name_b.value.decode("utf-8", errors="replace")

        piece_length = _require(info, b"piece length", BencodeInt, "info.piece length").value
        if piece_length <= 0:
            raise SchemaViolation("info.piece length", "must be positive")

        pieces_b = _require(info, b"pieces", BencodeString, "info.pieces")
        try:
            pieces = split_pieces(pieces_b.value)
        except SchemaViolation as exc:
            raise SchemaViolation("info.pieces", exc.reason) from exc

        # ------------------ FILES ------------------
        if b"files" in info:
            files = _parse_files(_require(info, b"files", BencodeList, "info.files"))
            length = sum(f.length for f in files)
        else:
            length = _require(info, b"length", BencodeInt, "info.length").value
            if length < 0:
                raise SchemaViolation("info.length", "must not be negative")
            files = (TorrentFile(path=name, length=length, offset=0),)

        return cls(
            announce=announce,
            name=name,
            length=length,
            piece_length=piece_length,
            pieces=pieces,
            files=files,
            info=info,
            info_hash=info_hash(info),
            announce_list=announce_list,
        )

    @classmethod
    def from_bytes(cls, raw: bytes, allow_trailing: bool = False,
                   max_depth: int = DEFAULT_MAX_DEPTH) -> "TorrentMeta":
        root = decode_value(raw, allow_trailing=allow_trailing, max_depth=max_depth)
        return cls.from_dict(root)

    @classmethod
    def from_file(cls, path, **kwargs) -> "TorrentMeta":
        return cls.from_bytes(Path(path).read_bytes(), **kwargs)

    # ------------------ DERIVED ------------------

    @property
    def total_length(self) -> int:
        return self.length

    @property
    def num_pieces(self) -> int:
        return len(self.pieces)

    @property
    def is_multi_file(self) -> bool:
        return b"files" in self.info

    @property
    def last_piece_length(self) -> int:
        return (self.length % self.piece_length) or self.piece_length

    @property
    def info_hash_hex(self) -> str:
        return self.info_hash.hex()

    def piece_hashes_hex(self):
        return [p.hex() for p in self.pieces]

    def to_bencode(self) -> BencodeDict:
        """Rebuilds the top-level document (announce, announce-list, info)."""
        root = {b"announce": BencodeString(self.announce.encode()), b"info": self.info}
        if self.announce_list:
            root[b"announce-list"] = BencodeList(
                BencodeList(BencodeString(u.encode()) for u in tier)
                for tier in self.announce_list
            )
        return BencodeDict(root)

    def __repr__(self):
        return (
            f"TorrentMeta(name={self.name!r}, files={len(self.files)}, pieces={self.num_pieces}, "
            f"multi={self.is_multi_file}, announce={self.announce!r})"
        )
