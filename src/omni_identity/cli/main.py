"""Command-line interface for omni-identity."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version
from typing import Sequence

from omni_identity.cbor import IDENTITY_CBOR_TAG, decode_identity, encode_identity
from omni_identity.cli.config import CLIConfig, ConfigError, load_cli_config
from omni_identity.cli.identity import IdentityError, load_key_identity, load_or_create_key_identity
from omni_identity.errors import OmniIdentityError
from omni_identity.identity import Identity

EXIT_SUCCESS = 0
EXIT_VALIDATION_ERROR = 1


def _package_version() -> str:
    try:
        return pkg_version("omni-identity")
    except PackageNotFoundError:
        return "0.0.0+local"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="omni-identity")
    parser.add_argument(
        "--version",
        action="version",
        version=f"omni-identity {_package_version()}",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to CLI config TOML (default: ~/.omni_identity/config.toml)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log decoding details to stderr",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    version = sub.add_parser("version", help="Show package version")
    version.add_argument("--json", action="store_true", help="Print version details as JSON")

    init = sub.add_parser("init", help="Load or create the local Ed25519 key and print its identity")
    init.add_argument("--key-file", default=None, help="Path to PEM key file")
    init.add_argument("--json", action="store_true", help="Print identity details as JSON")

    show = sub.add_parser("show", help="Print the identity controlled by an existing key file")
    show.add_argument("--key-file", default=None, help="Path to PEM key file")
    show.add_argument("--subresource", type=int, default=None, help="Subresource id to derive")
    show.add_argument("--json", action="store_true", help="Print identity details as JSON")

    inspect = sub.add_parser("inspect", help="Decode an identity and describe it")
    inspect.add_argument("value", help="Identity text (or compact bytes as hex with --hex)")
    inspect.add_argument("--hex", action="store_true", help="Treat VALUE as hex compact bytes")
    inspect.add_argument("--json", action="store_true", help="Print identity details as JSON")

    subresource = sub.add_parser("subresource", help="Derive a subresource of an identity")
    subresource.add_argument("value", help="Identity text")
    subresource.add_argument("id", type=int, help="Subresource id")
    subresource.add_argument("--json", action="store_true", help="Print identity details as JSON")

    cbor_encode = sub.add_parser("cbor-encode", help="Encode an identity as a tagged CBOR item")
    cbor_encode.add_argument("value", help="Identity text")

    cbor_decode = sub.add_parser("cbor-decode", help="Decode a hex CBOR item into an identity")
    cbor_decode.add_argument("data", help="CBOR item as hex")
    cbor_decode.add_argument("--json", action="store_true", help="Print identity details as JSON")

    return parser


def _print_error(stderr, prefix: str, message: str, *, code: int) -> int:
    print(f"{prefix}: {message}", file=stderr)
    return code


def _describe(identity: Identity) -> dict[str, object]:
    return {
        "identity": identity.to_text(),
        "kind": identity.kind.value,
        "bytes_hex": identity.to_bytes().hex(),
        "subresource_id": identity.subresource_id,
        "can_sign": identity.can_sign,
        "can_be_dest": identity.can_be_dest,
    }


def _emit_identity(identity: Identity, *, as_json: bool, stdout) -> int:
    payload = _describe(identity)
    if as_json:
        print(json.dumps(payload, sort_keys=True), file=stdout)
        return EXIT_SUCCESS

    print(f"identity: {payload['identity']}", file=stdout)
    print(f"kind: {payload['kind']}", file=stdout)
    print(f"bytes: {payload['bytes_hex']}", file=stdout)
    if identity.is_subresource:
        print(f"subresource_id: {payload['subresource_id']}", file=stdout)
    return EXIT_SUCCESS


def _wants_json(args, config: CLIConfig) -> bool:
    return bool(getattr(args, "json", False)) or config.output == "json"


def _run_version(*, as_json: bool, stdout) -> int:
    payload = {
        "cli": "omni-identity",
        "version": _package_version(),
        "cbor_tag": IDENTITY_CBOR_TAG,
    }
    if as_json:
        print(json.dumps(payload, sort_keys=True), file=stdout)
    else:
        print(f"omni-identity {payload['version']}", file=stdout)
    return EXIT_SUCCESS


def _run_init(*, args, config: CLIConfig, stdout, stderr) -> int:
    key_file = args.key_file or config.key_file
    try:
        key_identity, created = load_or_create_key_identity(key_file)
    except IdentityError as exc:
        return _print_error(stderr, "identity error", str(exc), code=EXIT_VALIDATION_ERROR)

    if not _wants_json(args, config):
        status = "created" if created else "loaded"
        print(f"{status} key: {key_file}", file=stdout)
    return _emit_identity(key_identity.identity, as_json=_wants_json(args, config), stdout=stdout)


def _run_show(*, args, config: CLIConfig, stdout, stderr) -> int:
    key_file = args.key_file or config.key_file
    try:
        key_identity = load_key_identity(key_file)
    except IdentityError as exc:
        return _print_error(stderr, "identity error", str(exc), code=EXIT_VALIDATION_ERROR)

    if args.subresource is not None:
        key_identity = key_identity.with_subresource_id(args.subresource)
    return _emit_identity(key_identity.identity, as_json=_wants_json(args, config), stdout=stdout)


def _run_inspect(*, args, config: CLIConfig, stdout, stderr) -> int:
    try:
        if args.hex:
            identity = Identity.from_bytes(bytes.fromhex(args.value))
        else:
            identity = Identity.from_text(args.value)
    except ValueError as exc:
        return _print_error(stderr, "invalid identity", str(exc), code=EXIT_VALIDATION_ERROR)
    return _emit_identity(identity, as_json=_wants_json(args, config), stdout=stdout)


def _run_subresource(*, args, config: CLIConfig, stdout, stderr) -> int:
    try:
        identity = Identity.from_text(args.value)
    except OmniIdentityError as exc:
        return _print_error(stderr, "invalid identity", str(exc), code=EXIT_VALIDATION_ERROR)
    if identity.is_anonymous:
        return _print_error(
            stderr,
            "invalid identity",
            "anonymous identity has no subresources",
            code=EXIT_VALIDATION_ERROR,
        )
    return _emit_identity(
        identity.with_subresource_id(args.id), as_json=_wants_json(args, config), stdout=stdout
    )


def _run_cbor_encode(*, args, stdout, stderr) -> int:
    try:
        identity = Identity.from_text(args.value)
    except OmniIdentityError as exc:
        return _print_error(stderr, "invalid identity", str(exc), code=EXIT_VALIDATION_ERROR)
    print(encode_identity(identity).hex(), file=stdout)
    return EXIT_SUCCESS


def _run_cbor_decode(*, args, config: CLIConfig, stdout, stderr) -> int:
    try:
        identity = decode_identity(bytes.fromhex(args.data))
    except ValueError as exc:
        return _print_error(stderr, "invalid identity", str(exc), code=EXIT_VALIDATION_ERROR)
    return _emit_identity(identity, as_json=_wants_json(args, config), stdout=stdout)


def main(argv: Sequence[str] | None = None, *, stdout=sys.stdout, stderr=sys.stderr) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, stream=stderr, format="%(name)s: %(message)s")

    try:
        config = load_cli_config(args.config)
    except ConfigError as exc:
        return _print_error(stderr, "config error", str(exc), code=EXIT_VALIDATION_ERROR)

    if args.command == "version":
        return _run_version(as_json=_wants_json(args, config), stdout=stdout)

    if args.command == "init":
        return _run_init(args=args, config=config, stdout=stdout, stderr=stderr)

    if args.command == "show":
        return _run_show(args=args, config=config, stdout=stdout, stderr=stderr)

    if args.command == "inspect":
        return _run_inspect(args=args, config=config, stdout=stdout, stderr=stderr)

    if args.command == "subresource":
        return _run_subresource(args=args, config=config, stdout=stdout, stderr=stderr)

    if args.command == "cbor-encode":
        return _run_cbor_encode(args=args, stdout=stdout, stderr=stderr)

    if args.command == "cbor-decode":
        return _run_cbor_decode(args=args, config=config, stdout=stdout, stderr=stderr)

    print("unknown command", file=stderr)
    return EXIT_VALIDATION_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
