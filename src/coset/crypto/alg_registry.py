"""Algorithm registry for COSE_Sign1 signing.

Supported algorithms:
  - ES256 (COSE alg -7): ECDSA over P-256 with SHA-256

Each entry is an Algorithm descriptor; the signature engine only talks to
the descriptor (digest, signature width) and the Signer/Verifier objects it
builds, so adding a curve means adding a descriptor here.

Lookups:
  get_algorithm(alg_id)        -> Algorithm, or UnsupportedAlgorithm
  algorithm_for_curve(curve_id) -> Algorithm, or UnsupportedKeyType
  algorithm_for_key(key)        -> Algorithm, or UnsupportedKeyType
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Any, Dict

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec

from ..errors import UnsupportedAlgorithm, UnsupportedKeyType


@dataclass(frozen=True)
class Algorithm:
    name: str
    cose_id: int
    curve: ec.EllipticCurve
    hash: hashes.HashAlgorithm
    coord_size: int

    @property
    def signature_size(self) -> int:
        # r || s, each left-padded to the coordinate width
        return 2 * self.coord_size

    def digest(self, data: bytes) -> bytes:
        return hashlib.new(self.hash.name, data).digest()

    def signer(self, private_key: ec.EllipticCurvePrivateKey):
        from .signer import EcdsaSigner

        return EcdsaSigner(private_key, self)

    def verifier(self, public_key: ec.EllipticCurvePublicKey):
        from .signer import EcdsaVerifier

        return EcdsaVerifier(public_key, self)


ES256 = Algorithm(
    name="ES256",
    cose_id=-7,
    curve=ec.SECP256R1(),
    hash=hashes.SHA256(),
    coord_size=32,
)

_BY_ID: Dict[Any, Algorithm] = {ES256.cose_id: ES256}

# "ecdsa" is the key type name used by the command line tool
_BY_CURVE: Dict[str, Algorithm] = {
    "p-256": ES256,
    "ecdsa": ES256,
    "secp256r1": ES256,
    "prime256v1": ES256,
}


def get_algorithm(alg_id: Any) -> Algorithm:
    if isinstance(alg_id, bool) or not isinstance(alg_id, (int, str)) or alg_id not in _BY_ID:
        raise UnsupportedAlgorithm(f"unsupported COSE algorithm: {alg_id!r}")
    return _BY_ID[alg_id]


def algorithm_for_curve(curve_id: str) -> Algorithm:
    alg = _BY_CURVE.get(str(curve_id).lower())
    if alg is None:
        raise UnsupportedKeyType(f"unsupported key type: {curve_id!r}")
    return alg


def algorithm_for_key(key: Any) -> Algorithm:
    if not isinstance(key, (ec.EllipticCurvePrivateKey, ec.EllipticCurvePublicKey)):
        raise UnsupportedKeyType(f"expected an EC key, got {type(key).__name__}")
    for alg in _BY_ID.values():
        if key.curve.name == alg.curve.name:
            return alg
    raise UnsupportedKeyType(f"unsupported curve: {key.curve.name}")


__all__ = [
    "Algorithm",
    "ES256",
    "get_algorithm",
    "algorithm_for_curve",
    "algorithm_for_key",
]
