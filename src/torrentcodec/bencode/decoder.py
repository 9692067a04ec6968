"""
Bencode decoder for BitTorrent metainfo files.
"""
import re

from .structure import BencodeDict, BencodeInt, BencodeList, BencodeString

DEFAULT_MAX_DEPTH = 256

_INT_RE = re.compile(rb"0|-?[1-9][0-9]*")
_DIGITS = b"0123456789"


class BencodeDecodeError(ValueError):
    """Base exception for Bencode decoding errors."""

    def __init__(self, message, position=None):
        if position is not None:
            message = f"{message} (at byte {position})"
        super().__init__(message)
        self.position = position


class UnknownValueTag(BencodeDecodeError):
    pass


class MalformedLength(BencodeDecodeError):
    pass


class MalformedInteger(BencodeDecodeError):
    pass


class TruncatedInput(BencodeDecodeError):
    pass


class NonStringKey(BencodeDecodeError):
    pass


class NestingTooDeep(BencodeDecodeError):
    pass


class TrailingData(BencodeDecodeError):
    pass


class BencodeDecoder:
    """
    Decodes Bencoded byte strings into Bencode types.

    The decoder walks a cursor over the input and never looks past the end
    of the value it is parsing, so ``remaining`` is exactly the unconsumed
    suffix after ``decode()`` returns.

    Lists and dictionaries are tracked on an explicit stack of open
    containers rather than by recursion, so ``max_depth`` is the only
    bound on nesting.
    """
    def __init__(self, data: bytes, max_depth: int = DEFAULT_MAX_DEPTH):
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"Bencode data must be bytes, not {type(data)}")
        if max_depth < 0:
            raise ValueError("max_depth must not be negative")
        self.data = bytes(data)
        self.i = 0  # cursor index
        self.max_depth = max_depth

    def decode(self):
        """Decodes one value starting at the cursor."""
        if self.i >= len(self.data):
            raise UnknownValueTag("Expected a value, got end of input", self.i)
        return self._parse_value()

    @property
    def remaining(self) -> bytes:
        return self.data[self.i:]

    # --------------------------
    # Low-level utilities
    # --------------------------

    def _peek(self):
        if self.i >= len(self.data):
            raise TruncatedInput("Unexpected end of input", self.i)
        return self.data[self.i:self.i+1]

    def _consume(self, n=1):
        """Moves cursor forward by n bytes and returns the consumed chunk."""
        chunk = self.data[self.i:self.i+n]
        self.i += n
        return chunk

    # --------------------------
    # Parsing functions
    # --------------------------

    def _parse_value(self):
        # open containers, innermost last: [items, pending_key]
        # items is a list for 'l' and a dict for 'd'
        stack = []

        while True:
            ch = self._peek()
            top = stack[-1] if stack else None
            in_dict = top is not None and isinstance(top[0], dict)

            if top is not None and ch == b'e':
                if in_dict and top[1] is not None:
                    raise UnknownValueTag(f"Dictionary key {top[1]!r} has no value", self.i)
                self._consume(1)  # skip 'e'
                stack.pop()
                value = BencodeDict(top[0]) if in_dict else BencodeList(top[0])

            elif in_dict and top[1] is None and not ch.isdigit():
                # keys MUST be strings
                if ch in (b'i', b'l', b'd'):
                    raise NonStringKey(f"Dictionary key starts with {ch!r}", self.i)
                raise UnknownValueTag(f"Invalid token {ch!r}", self.i)

            elif ch == b'l' or ch == b'd':
                if len(stack) >= self.max_depth:
                    raise NestingTooDeep(f"Nesting deeper than {self.max_depth} levels", self.i)
                self._consume(1)  # skip 'l' / 'd'
                stack.append([{} if ch == b'd' else [], None])
                continue

            elif ch == b'i':
                value = self._parse_int()

            elif ch.isdigit(): # Bencode strings start with length, which is a digit
                value = self._parse_string()

            else:
                raise UnknownValueTag(f"Invalid token {ch!r}", self.i)

            if not stack:
                return value

            items, key = stack[-1]
            if isinstance(items, list):
                items.append(value)
            elif key is None:
                stack[-1][1] = value.value
            else:
                # duplicate keys: last one wins
                items[key] = value
                stack[-1][1] = None

    def _parse_int(self):
        """Parses an integer from the Bencoded data."""
        start = self.i
        self._consume(1)  # skip 'i'

        end_pos = self.data.find(b'e', self.i)
        if end_pos == -1:
            raise TruncatedInput("Integer has no terminating 'e'", start)
        number_bytes = self.data[self.i:end_pos]

        if not _INT_RE.fullmatch(number_bytes):
            raise MalformedInteger(f"Invalid integer {number_bytes!r}", start)
        try:
            num = int(number_bytes)
        except ValueError as exc:
            # digit-count limit of int()
            raise MalformedInteger("Integer too large to convert", start) from exc

        self.i = end_pos + 1  # skip 'e'
        return BencodeInt(num)

    def _parse_string(self):
        """Parses a byte string from the Bencoded data."""
        start = self.i
        # read length until ':'
        pos = self.i
        while pos < len(self.data) and self.data[pos] in _DIGITS:
            pos += 1
        if pos >= len(self.data):
            raise TruncatedInput("String length has no ':'", start)
        if self.data[pos:pos+1] != b':':
            raise MalformedLength(f"Invalid string length {self.data[start:pos+1]!r}", start)

        try:
            length = int(self.data[start:pos])
        except ValueError as exc:
            raise MalformedLength("String length too large to convert", start) from exc

        self.i = pos + 1
        if length > len(self.data) - self.i:
            raise TruncatedInput(
                f"String declares {length} bytes, only {len(self.data) - self.i} left", start
            )
        string_bytes = self._consume(length)

        return BencodeString(string_bytes)


def decode(data: bytes, max_depth: int = DEFAULT_MAX_DEPTH):
    """
    Decodes the first Bencoded value in ``data``.

    Returns a ``(value, remaining)`` tuple where ``remaining`` holds the
    bytes after the value.
    """
    decoder = BencodeDecoder(data, max_depth)
    value = decoder.decode()
    return value, decoder.remaining


def decode_value(data: bytes, allow_trailing: bool = False,
                 max_depth: int = DEFAULT_MAX_DEPTH):
    """
    Convenience function to decode a buffer holding a single value.

    Leftover bytes after the value raise TrailingData unless
    ``allow_trailing`` is set.
    """
    decoder = BencodeDecoder(data, max_depth)
    value = decoder.decode()
    if decoder.remaining and not allow_trailing:
        raise TrailingData(f"{len(decoder.remaining)} bytes after value", decoder.i)
    return value
