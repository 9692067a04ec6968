"""
Bencode encoder for BitTorrent metainfo files.

Output is canonical: dictionary keys are always written sorted by their
raw bytes, whatever order the caller built them in.
"""
from .structure import BencodeDict, BencodeInt, BencodeList, BencodeString, BencodeType


def encode(obj) -> bytes:
    """Encodes a Python object, BencodeType or metadata record into bencoded bytes."""

    if isinstance(obj, BencodeType):
        return encode_node(obj)

    # bool is an int subclass; f"i{True}e" would be garbage
    if isinstance(obj, bool):
        raise TypeError("Cannot bencode object of type <class 'bool'>")

    if isinstance(obj, int):
        return encode_int(obj)

    if isinstance(obj, str):
        return encode_str(obj)

    if isinstance(obj, (bytes, bytearray, memoryview)):
        return encode_bytes(bytes(obj))

    if isinstance(obj, (list, tuple)):
        return encode_list(obj)

    if isinstance(obj, dict):
        return encode_dict(obj)

    to_bencode = getattr(obj, "to_bencode", None)
    if callable(to_bencode):
        return encode(to_bencode())

    raise TypeError(f"Cannot bencode object of type {type(obj)}")


def encode_node(node: BencodeType) -> bytes:
    """Encodes a Bencode tree node."""
    if isinstance(node, BencodeInt):
        return encode_int(node.value)

    if isinstance(node, BencodeString):
        return encode_bytes(node.value)

    if isinstance(node, BencodeList):
        return encode_list(node.value)

    if isinstance(node, BencodeDict):
        return encode_dict(node.value)

    raise TypeError(f"Unknown Bencode type {type(node)}")


# ------------------------------------------------------------
#   Encoding primitives
# ------------------------------------------------------------

def encode_int(n: int) -> bytes:
    """Encodes an integer to bencoded bytes (e.g., i123e)."""
    return b"i" + str(n).encode("ascii") + b"e"


def encode_bytes(b: bytes) -> bytes:
    """Encodes bytes to bencoded bytes (e.g., 4:spam)."""
    return str(len(b)).encode("ascii") + b":" + b


def encode_str(s: str) -> bytes:
    """Encodes a string to bencoded bytes (e.g., 4:spam)."""
    b = s.encode()
    return encode_bytes(b)


def encode_list(lst) -> bytes:
    """Encodes a list to bencoded bytes (e.g., l4:spame)."""
    encoded_items = b''.join(encode(x) for x in lst)
    return b"l" + encoded_items + b"e"


def encode_dict(d) -> bytes:
    """Encodes a dictionary to bencoded bytes (e.g., d3:cow3:moo4:spam4:eggse)."""
    entries = {}
    for key, val in d.items():
        if isinstance(key, str):
            key_bytes = key.encode()
        elif isinstance(key, (bytes, bytearray)):
            key_bytes = bytes(key)
        else:
            raise TypeError(f"Bencode dict keys must be str or bytes, not {type(key)}")
        if key_bytes in entries:
            raise ValueError(f"Duplicate dictionary key {key_bytes!r}")
        entries[key_bytes] = val

    parts = [b"d"]
    for key_bytes in sorted(entries):
        parts.append(encode_bytes(key_bytes))
        parts.append(encode(entries[key_bytes]))
    parts.append(b"e")

    return b"".join(parts)
