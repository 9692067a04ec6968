"""
Bencode package for encoding and decoding BitTorrent data.
"""
from .decoder import (
    DEFAULT_MAX_DEPTH,
    BencodeDecodeError,
    BencodeDecoder,
    MalformedInteger,
    MalformedLength,
    NestingTooDeep,
    NonStringKey,
    TrailingData,
    TruncatedInput,
    UnknownValueTag,
    decode,
    decode_value,
)
from .encoder import encode
from .structure import (
    BencodeDict,
    BencodeInt,
    BencodeList,
    BencodeString,
    BencodeType,
    from_python,
)

__all__ = [
    'decode', 'decode_value', 'encode', 'from_python', 'BencodeDecoder',
    'DEFAULT_MAX_DEPTH',
    'BencodeType', 'BencodeInt', 'BencodeString', 'BencodeList', 'BencodeDict',
    'BencodeDecodeError', 'UnknownValueTag', 'MalformedLength', 'MalformedInteger',
    'TruncatedInput', 'NonStringKey', 'NestingTooDeep', 'TrailingData',
]
