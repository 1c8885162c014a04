"""Key containers for the ES256 key pair.

A container is PEM armor whose label is the type tag and whose body is DER:

  EC PRIVATE KEY  -> SEC1 ECPrivateKey
  PUBLIC KEY      -> SubjectPublicKeyInfo

Loading fails closed on any other label (PKCS#8 "PRIVATE KEY" included).
Bytes left after the first container only produce a warning.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Tuple, Union

from asn1crypto import keys as asn1_keys
from asn1crypto import pem
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from ..errors import InvalidKeyType, UnsupportedKeyType
from ..utils.logging import get_logger
from .alg_registry import algorithm_for_key

PRIVATE_KEY_LABEL = "EC PRIVATE KEY"
PUBLIC_KEY_LABEL = "PUBLIC KEY"

_END_RE = re.compile(rb"-----END [A-Z0-9 ]+-----(\r\n|\n|\r)?")

log = get_logger()


@dataclass(frozen=True)
class KeyPair:
    private_key: ec.EllipticCurvePrivateKey

    @property
    def public_key(self) -> ec.EllipticCurvePublicKey:
        return self.private_key.public_key()

    @property
    def curve_name(self) -> str:
        return self.private_key.curve.name


PrivateKeyLike = Union[KeyPair, ec.EllipticCurvePrivateKey]
PublicKeyLike = Union[KeyPair, ec.EllipticCurvePrivateKey, ec.EllipticCurvePublicKey]


def private_key_of(key: PrivateKeyLike) -> ec.EllipticCurvePrivateKey:
    if isinstance(key, KeyPair):
        key = key.private_key
    if not isinstance(key, ec.EllipticCurvePrivateKey):
        raise UnsupportedKeyType(f"expected an EC private key, got {type(key).__name__}")
    algorithm_for_key(key)
    return key


def public_key_of(key: PublicKeyLike) -> ec.EllipticCurvePublicKey:
    if isinstance(key, KeyPair):
        key = key.public_key
    elif isinstance(key, ec.EllipticCurvePrivateKey):
        key = key.public_key()
    if not isinstance(key, ec.EllipticCurvePublicKey):
        raise UnsupportedKeyType(f"expected an EC public key, got {type(key).__name__}")
    algorithm_for_key(key)
    return key


def _unarmor(data: Union[bytes, str], expected_label: str) -> bytes:
    if isinstance(data, str):
        data = data.encode("ascii", errors="replace")
    try:
        label, _headers, der = pem.unarmor(data)
    except (ValueError, TypeError) as e:
        raise InvalidKeyType("no PEM key container found") from e
    if label != expected_label:
        raise InvalidKeyType(f"invalid key type {label!r}, expected {expected_label!r}")
    m = _END_RE.search(data)
    rest = data[m.end():] if m else b""
    if rest:
        log.warning("%d bytes trailing in key container", len(rest))
    return der


def serialize_private(key: PrivateKeyLike) -> bytes:
    sk = private_key_of(key)
    der = sk.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return pem.armor(PRIVATE_KEY_LABEL, der)


def serialize_public(key: PublicKeyLike) -> bytes:
    pk = public_key_of(key)
    der = pk.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return pem.armor(PUBLIC_KEY_LABEL, der)


def _check_sec1(der: bytes) -> None:
    # SEC1 only; PKCS#8 bodies under an "EC PRIVATE KEY" label are rejected
    try:
        parsed = asn1_keys.ECPrivateKey.load(der, strict=True)
        version = parsed["version"].native
        _ = parsed["private_key"].native
    except (ValueError, TypeError) as e:
        raise InvalidKeyType("container body is not a SEC1 EC private key") from e
    if version != "ecPrivkeyVer1":
        raise InvalidKeyType("container body is not a SEC1 EC private key")


def _check_curve(key) -> None:
    # a key on another curve is bad container content
    try:
        algorithm_for_key(key)
    except UnsupportedKeyType as e:
        raise InvalidKeyType(f"container holds a key on {key.curve.name}") from e


def deserialize_private(data: Union[bytes, str]) -> KeyPair:
    der = _unarmor(data, PRIVATE_KEY_LABEL)
    _check_sec1(der)
    try:
        sk = serialization.load_der_private_key(der, password=None)
    except (ValueError, TypeError) as e:
        raise InvalidKeyType("failed to parse EC private key") from e
    if not isinstance(sk, ec.EllipticCurvePrivateKey):
        raise InvalidKeyType(f"expected an EC private key, got {type(sk).__name__}")
    _check_curve(sk)
    return KeyPair(sk)


def deserialize_public(data: Union[bytes, str]) -> ec.EllipticCurvePublicKey:
    der = _unarmor(data, PUBLIC_KEY_LABEL)
    try:
        pk = serialization.load_der_public_key(der)
    except (ValueError, TypeError) as e:
        raise InvalidKeyType("failed to parse public key") from e
    if not isinstance(pk, ec.EllipticCurvePublicKey):
        raise InvalidKeyType(f"expected an EC public key, got {type(pk).__name__}")
    _check_curve(pk)
    return pk


def serialize_keypair(key: KeyPair) -> Tuple[bytes, bytes]:
    """Return (private container, public container)."""
    return serialize_private(key), serialize_public(key)


__all__ = [
    "KeyPair",
    "private_key_of",
    "public_key_of",
    "PRIVATE_KEY_LABEL",
    "PUBLIC_KEY_LABEL",
    "serialize_private",
    "serialize_public",
    "serialize_keypair",
    "deserialize_private",
    "deserialize_public",
]
