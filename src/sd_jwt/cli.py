"""Command-line interface for sd-jwt."""

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from typing import Any, Optional

from . import __version__, carrier
from .combined import CombinedDocument
from .decoder import SDObjectDecoder
from .disclosure import Disclosure
from .encoder import SDObjectEncoder
from .errors import SDJWTError


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="sd-jwt",
        description="Selective disclosure encoding toolkit for JSON documents",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Encode subcommand
    encode_parser = subparsers.add_parser("encode", help="Encode a JSON document")
    encode_parser.add_argument("input", help="Input file (JSON format), '-' for stdin")
    encode_parser.add_argument("--hash-alg", default=None, help="Hash algorithm (default sha-256)")
    encode_parser.add_argument(
        "--decoys",
        nargs=2,
        type=float,
        metavar=("MIN", "MAX"),
        help="Decoy magnification range (0 0 disables decoys)",
    )
    encode_parser.add_argument(
        "--retain", nargs="+", metavar="NAME", help="Top-level claims to keep plain"
    )
    encode_parser.add_argument(
        "--include-alg", action="store_true", help="Add '_sd_alg' to the encoded object"
    )

    # Decode subcommand
    decode_parser = subparsers.add_parser(
        "decode", help="Decode a combined document without verifying signatures"
    )
    decode_parser.add_argument("input", help="Combined document, '-' for stdin")
    decode_parser.add_argument("--hash-alg", default=None, help="Hash algorithm fallback")

    # Disclosure subcommand
    disclosure_parser = subparsers.add_parser("disclosure", help="Inspect a disclosure")
    disclosure_parser.add_argument("input", help="base64url-encoded disclosure")

    # sd-hash subcommand
    sd_hash_parser = subparsers.add_parser("sd-hash", help="Compute the binding digest")
    sd_hash_parser.add_argument("input", help="Combined document, '-' for stdin")

    return parser


def _read_text(value: str) -> str:
    if value == "-":
        return sys.stdin.read().strip()
    return value.strip()


def _read_file(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as f:
        return f.read()


def _print_json(data: Any) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))


def _cmd_encode(args: argparse.Namespace) -> None:
    document = json.loads(_read_file(args.input))

    encoder = SDObjectEncoder(hash_alg=args.hash_alg, include_hash_algorithm=args.include_alg)
    if args.decoys is not None:
        encoder.set_decoy_magnification(*args.decoys)
    if args.retain is not None:
        encoder.retained_claims = set(args.retain)

    encoded = encoder.encode(document)
    _print_json(
        {
            "encoded": encoded,
            "disclosures": [d.wire_form for d in encoder.disclosures],
        }
    )


def _cmd_decode(args: argparse.Namespace) -> None:
    document = CombinedDocument.parse(_read_text(args.input))
    payload = carrier.read_payload(document.carrier)
    _print_json(SDObjectDecoder().decode(payload, document.disclosures, args.hash_alg))


def _cmd_disclosure(args: argparse.Namespace) -> None:
    disclosure = Disclosure.parse(args.input.strip())
    _print_json(
        {
            "salt": disclosure.salt,
            "claim_name": disclosure.claim_name,
            "claim_value": disclosure.claim_value,
            "digest": disclosure.digest(),
        }
    )


def _cmd_sd_hash(args: argparse.Namespace) -> None:
    print(CombinedDocument.parse(_read_text(args.input)).sd_hash)


_COMMANDS = {
    "encode": _cmd_encode,
    "decode": _cmd_decode,
    "disclosure": _cmd_disclosure,
    "sd-hash": _cmd_sd_hash,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    if not args.command:
        parser.print_help()
        return 0

    try:
        _COMMANDS[args.command](args)
    except (SDJWTError, ValueError, TypeError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
