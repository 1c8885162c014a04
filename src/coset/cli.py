from __future__ import annotations

import argparse
import base64
import binascii
import sys
from pathlib import Path

from . import config
from .cose.codec import decode, encode
from .cose.sign import generate_keypair, sign, verify
from .crypto.keys import (
    deserialize_private,
    deserialize_public,
    serialize_private,
    serialize_public,
)
from .errors import CoseError
from .utils.logging import get_logger

log = get_logger()

OUTPUT_FORMATS = ("text", "hex", "base64")


def _aad(p: argparse.ArgumentParser, value: str | None) -> bytes:
    if not value:
        return b""
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        p.error("failed to extract extra AAD (expected base64)")
    return b""  # pragma: no cover - p.error exits


def _content(args: argparse.Namespace) -> bytes:
    if args.message is not None:
        return args.message.encode("utf-8")
    return Path(args.file).read_bytes()


def format_payload(payload: bytes, fmt: str) -> str:
    if fmt == "text":
        return payload.decode("utf-8", errors="replace")
    if fmt == "hex":
        return payload.hex()
    if fmt == "base64":
        return base64.b64encode(payload).decode("ascii")
    raise ValueError(f"Output format '{fmt}' not supported")


def cmd_keygen(args: argparse.Namespace) -> int:
    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    kp = generate_keypair(args.type)
    priv_path = out_dir / config.PRIVATE_KEY_FILE
    pub_path = out_dir / config.PUBLIC_KEY_FILE
    priv_path.write_bytes(serialize_private(kp))
    pub_path.write_bytes(serialize_public(kp))
    print(f"wrote {priv_path} and {pub_path}")
    return 0


def cmd_sign(args: argparse.Namespace) -> int:
    eaad = _aad(args.parser, args.aad)
    content = _content(args)
    out = Path(args.out)
    if args.key:
        kp = deserialize_private(Path(args.key).read_bytes())
    else:
        kp = generate_keypair(config.KEY_TYPE)
    msg = sign(kp, content, eaad, args.content_type, detached=args.detached)
    buf = encode(msg, tagged=not args.untagged)
    out.write_bytes(buf)
    print(f"wrote {out} ({len(buf)} bytes)")
    if not args.key:
        # ephemeral key: the verifier needs the public half
        pub_path = out.parent / config.PUBLIC_KEY_FILE
        pub_path.write_bytes(serialize_public(kp))
        print(f"wrote {pub_path}")
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    eaad = _aad(args.parser, args.aad)
    pk = deserialize_public(Path(args.key).read_bytes())
    msg = decode(Path(args.file).read_bytes())
    detached = Path(args.payload_file).read_bytes() if args.payload_file else None
    payload = verify(pk, msg, eaad, detached_payload=detached)
    print(format_payload(payload, args.output))
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser("coset", description="COSE_Sign1 (ES256) sign and verify")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_gen = sub.add_parser("keygen", help="Generate a key pair")
    p_gen.add_argument("--type", default=config.KEY_TYPE)
    p_gen.add_argument("--out-dir", dest="out_dir", default=".")
    p_gen.set_defaults(func=cmd_keygen)

    p_sign = sub.add_parser("sign", help="Sign a message or file")
    src = p_sign.add_mutually_exclusive_group(required=True)
    src.add_argument("-m", "--message", help="Message (string) to sign")
    src.add_argument("-f", "--file", help="File with content to sign")
    p_sign.add_argument("-k", "--key", help="Private key; a fresh key is generated if omitted")
    p_sign.add_argument("-e", "--aad", help="Extra AAD, base64 encoded")
    p_sign.add_argument("-t", "--content-type", dest="content_type", default=None)
    p_sign.add_argument("--detached", action="store_true", help="Leave the payload out of the envelope")
    p_sign.add_argument("--untagged", action="store_true", default=not config.TAGGED)
    p_sign.add_argument("--out", default=config.SIG_FILE)
    p_sign.set_defaults(func=cmd_sign, parser=p_sign)

    p_ver = sub.add_parser("verify", help="Verify an envelope and print its payload")
    p_ver.add_argument("-f", "--file", required=True, help="COSE_Sign1 envelope")
    p_ver.add_argument("-k", "--key", required=True, help="Public key")
    p_ver.add_argument("-e", "--aad", help="Extra AAD, base64 encoded")
    p_ver.add_argument("--payload-file", dest="payload_file", help="Detached payload")
    p_ver.add_argument("-o", "--output", choices=OUTPUT_FORMATS, default=config.OUTPUT_FORMAT)
    p_ver.set_defaults(func=cmd_verify, parser=p_ver)
    return p


def main(argv: list[str] | None = None) -> int:
    log.setLevel(config.LOG_LEVEL)
    p = build_parser()
    args = p.parse_args(argv)
    # argparse does not check defaults against choices
    if args.cmd == "verify" and args.output not in OUTPUT_FORMATS:
        p.error(f"output format {args.output!r} not supported (COSET_OUTPUT_FORMAT)")
    try:
        return args.func(args)
    except (CoseError, OSError) as e:
        log.debug("%s: %s", type(e).__name__, e)
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
