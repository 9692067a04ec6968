"""
Command-line front end.

Usage:
    torrentcodec decode '<bencoded value>'
    torrentcodec info path/to/file.torrent
    torrentcodec hash path/to/file.torrent

``decode`` prints JSON. Byte strings that are valid UTF-8 print as text;
any other byte string prints as ``"hex:"`` followed by its lowercase hex
digits, so b"\\xff" prints as "hex:ff".
"""
import argparse
import json
import logging
import os
import sys
from pathlib import Path

from .bencode import DEFAULT_MAX_DEPTH, BencodeDecodeError, decode_value
from .torrent import SchemaViolation, TorrentMeta

logger = logging.getLogger(__name__)

HEX_PREFIX = "hex:"


def to_json_compatible(obj):
    """Plain Python tree -> JSON-friendly tree. Non UTF-8 bytes become "hex:..."."""
    if isinstance(obj, bytes):
        try:
            return obj.decode("utf-8")
        except UnicodeDecodeError:
            return HEX_PREFIX + obj.hex()
    if isinstance(obj, list):
        return [to_json_compatible(x) for x in obj]
    if isinstance(obj, dict):
        return {to_json_compatible(k): to_json_compatible(v) for k, v in obj.items()}
    return obj


def max_depth_arg(text: str) -> int:
    try:
        depth = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid depth {text!r}")
    if depth <= 0:
        raise argparse.ArgumentTypeError("depth must be positive")
    return depth


def cmd_decode(args) -> int:
    # argv bytes that are not UTF-8 arrive as surrogate escapes; undo them
    value = decode_value(
        os.fsencode(args.value), allow_trailing=args.allow_trailing, max_depth=args.max_depth
    )
    logger.debug("Decoded %s", type(value).__name__)
    print(json.dumps(to_json_compatible(value.to_python())))
    return 0


def _load(args) -> TorrentMeta:
    logger.info("Parsing torrent file: %s", args.torrent)
    meta = TorrentMeta.from_file(
        args.torrent, allow_trailing=args.allow_trailing, max_depth=args.max_depth
    )
    logger.debug("Parsed %r", meta)
    return meta


def cmd_info(args) -> int:
    meta = _load(args)
    print(f"Tracker URL: {meta.announce}")
    print(f"Length: {meta.length}")
    print(f"Info Hash: {meta.info_hash_hex}")
    print(f"Piece Length: {meta.piece_length}")
    print("Piece Hashes:")
    for digest in meta.piece_hashes_hex():
        print(digest)
    return 0


def cmd_hash(args) -> int:
    print(_load(args).info_hash_hex)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="torrentcodec", description="Decode bencode and inspect .torrent files."
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument("--max-depth", type=max_depth_arg, default=DEFAULT_MAX_DEPTH,
                        help="maximum list/dict nesting (default: %(default)s)")
    parser.add_argument("--allow-trailing", action="store_true",
                        help="ignore bytes after the top-level value")

    sub = parser.add_subparsers(dest="command", required=True)

    p_decode = sub.add_parser("decode", help="decode a bencoded value and print it as JSON")
    p_decode.add_argument("value", help="bencoded value, e.g. l4:spami42ee")
    p_decode.set_defaults(func=cmd_decode)

    p_info = sub.add_parser("info", help="print tracker, length, info hash and piece hashes")
    p_info.add_argument("torrent", type=Path, help="path to .torrent")
    p_info.set_defaults(func=cmd_info)

    p_hash = sub.add_parser("hash", help="print the info hash")
    p_hash.add_argument("torrent", type=Path, help="path to .torrent")
    p_hash.set_defaults(func=cmd_hash)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    try:
        return args.func(args)
    except (BencodeDecodeError, SchemaViolation) as exc:
        logger.error("%s: %s", type(exc).__name__, exc)
    except OSError as exc:
        logger.error("Cannot read %s: %s", getattr(args, "torrent", "?"), exc)
    except RecursionError:
        # decoding is iterative; converting, printing and re-encoding are not
        logger.error("Value nested too deeply to process; lower --max-depth")
    return 1


if __name__ == "__main__":
    sys.exit(main())
