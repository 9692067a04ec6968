"""
Data structures for representing Bencoded types.

The four classes below are the whole grammar: every decoded tree is built
from them and nothing else. Instances are immutable once constructed.
"""
from types import MappingProxyType

__all__ = [
    "BencodeType",
    "BencodeInt",
    "BencodeString",
    "BencodeList",
    "BencodeDict",
    "from_python",
]


class BencodeType:
    """Base class for all Bencode data types."""
    __slots__ = ("_value",)

    @property
    def value(self):
        return self._value

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self._value == other._value

    def _init_value(self, value):
        object.__setattr__(self, "_value", value)

    def to_python(self):
        """Returns the plain Python equivalent (bytes, int, list or dict)."""
        raise NotImplementedError


class BencodeInt(BencodeType):
    """Represents a Bencoded integer."""
    __slots__ = ()

    def __init__(self, value: int):
        # bool is an int subclass but has no bencode form
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError("BencodeInt requires an integer.")
        self._init_value(int(value))

    def __hash__(self):
        return hash((BencodeInt, self._value))

    def __repr__(self):
        return f"BencodeInt({self._value})"

    def to_python(self):
        return self._value


class BencodeString(BencodeType):
    """Represents a Bencoded byte string."""
    __slots__ = ()

    def __init__(self, value: bytes):
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise TypeError("BencodeString requires bytes.")
        self._init_value(bytes(value))

    def __hash__(self):
        return hash((BencodeString, self._value))

    def __len__(self):
        return len(self._value)

    def __repr__(self):
        return f"BencodeString({self._value!r})"

    def text(self, encoding: str = "utf-8") -> str:
        """Decodes the raw bytes; raises UnicodeDecodeError on invalid input."""
        return self._value.decode(encoding)

    def to_python(self):
        return self._value


class BencodeList(BencodeType):
    """Represents a Bencoded list."""
    __slots__ = ()

    def __init__(self, value=()):
        if isinstance(value, (str, bytes, bytearray, dict, BencodeType)):
            raise TypeError("BencodeList requires a list.")
        items = tuple(value)
        for item in items:
            if not isinstance(item, BencodeType):
                raise TypeError("BencodeList items must be Bencode types.")
        self._init_value(items)

    __hash__ = None

    def __len__(self):
        return len(self._value)

    def __iter__(self):
        return iter(self._value)

    def __getitem__(self, index):
        return self._value[index]

    def __repr__(self):
        return f"BencodeList({list(self._value)!r})"

    def to_python(self):
        return [item.to_python() for item in self._value]


class BencodeDict(BencodeType):
    """
    Represents a Bencoded dictionary.

    Keys are raw bytes and keep the order they were given in. Equality
    ignores that order; the encoder sorts keys when writing.
    """
    __slots__ = ()

    def __init__(self, value=None):
        if value is None:
            value = {}
        if not isinstance(value, (dict, MappingProxyType)):
            raise TypeError("BencodeDict requires a dict.")
        # keys must be bytes (bencode requirement)
        for k, v in value.items():
            if not isinstance(k, (bytes, bytearray)):
                raise TypeError("BencodeDict keys must be bytes.")
            if not isinstance(v, BencodeType):
                raise TypeError("BencodeDict values must be Bencode types.")
        items = {bytes(k): v for k, v in value.items()}
        self._init_value(MappingProxyType(items))

    __hash__ = None

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return dict(self._value) == dict(other._value)

    def __len__(self):
        return len(self._value)

    def __iter__(self):
        return iter(self._value)

    def __contains__(self, key):
        return key in self._value

    def __getitem__(self, key):
        return self._value[key]

    def get(self, key, default=None):
        return self._value.get(key, default)

    def keys(self):
        return self._value.keys()

    def items(self):
        return self._value.items()

    def __repr__(self):
        return f"BencodeDict({dict(self._value)!r})"

    def to_python(self):
        return {k: v.to_python() for k, v in self._value.items()}


def from_python(obj) -> BencodeType:
    """
    Lifts a plain Python value into a Bencode tree.

    Strings are stored as their UTF-8 bytes. Existing Bencode nodes are
    returned unchanged.
    """
    if isinstance(obj, BencodeType):
        return obj

    if isinstance(obj, bool):
        raise TypeError("Cannot bencode a bool")

    if isinstance(obj, int):
        return BencodeInt(obj)

    if isinstance(obj, str):
        return BencodeString(obj.encode())

    if isinstance(obj, (bytes, bytearray, memoryview)):
        return BencodeString(obj)

    if isinstance(obj, (list, tuple)):
        return BencodeList(from_python(x) for x in obj)

    if isinstance(obj, dict):
        items = {}
        for key, val in obj.items():
            if isinstance(key, str):
                key = key.encode()
            elif not isinstance(key, (bytes, bytearray)):
                raise TypeError(f"Bencode dict keys must be str or bytes, not {type(key)}")
            key = bytes(key)
            if key in items:
                raise ValueError(f"Duplicate dictionary key {key!r}")
            items[key] = from_python(val)
        return BencodeDict(items)

    raise TypeError(f"Cannot bencode object of type {type(obj)}")
