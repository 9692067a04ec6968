"""
Torrent metainfo: field projection and info hash.
"""
from .metainfo import (
    PIECE_HASH_LENGTH,
    SchemaViolation,
    TorrentFile,
    TorrentMeta,
    info_hash,
    split_pieces,
)

__all__ = [
    'TorrentMeta', 'TorrentFile', 'SchemaViolation', 'info_hash', 'split_pieces',
    'PIECE_HASH_LENGTH',
]
