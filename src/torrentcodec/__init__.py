"""
Bencode codec and torrent metainfo extractor.
"""
__version__ = "0.1.0"
