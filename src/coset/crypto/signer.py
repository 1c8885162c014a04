from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from cryptography.exceptions import InternalError, InvalidSignature
from cryptography.hazmat.primitives.asymmetric import ec, utils

from ..errors import RandomSourceFailure

if TYPE_CHECKING:  # pragma: no cover
    from .alg_registry import Algorithm


@runtime_checkable
class Signer(Protocol):
    def sign(self, digest: bytes) -> bytes: ...


@runtime_checkable
class Verifier(Protocol):
    def verify(self, digest: bytes, signature: bytes) -> bool: ...


@dataclass
class EcdsaSigner:
    """Signs a precomputed digest; output is fixed-width r || s, not DER."""

    private_key: ec.EllipticCurvePrivateKey
    algorithm: "Algorithm"

    def sign(self, digest: bytes) -> bytes:
        try:
            der = self.private_key.sign(digest, ec.ECDSA(utils.Prehashed(self.algorithm.hash)))
        except InternalError as e:
            # nonce generation draws from the OpenSSL CSPRNG
            raise RandomSourceFailure("ECDSA signing failed in the crypto backend") from e
        r, s = utils.decode_dss_signature(der)
        n = self.algorithm.coord_size
        return r.to_bytes(n, "big") + s.to_bytes(n, "big")


@dataclass
class EcdsaVerifier:
    public_key: ec.EllipticCurvePublicKey
    algorithm: "Algorithm"

    def verify(self, digest: bytes, signature: bytes) -> bool:
        n = self.algorithm.coord_size
        if len(signature) != 2 * n:
            return False
        r = int.from_bytes(signature[:n], "big")
        s = int.from_bytes(signature[n:], "big")
        der = utils.encode_dss_signature(r, s)
        try:
            self.public_key.verify(der, digest, ec.ECDSA(utils.Prehashed(self.algorithm.hash)))
            return True
        except InvalidSignature:
            return False


__all__ = ["Signer", "Verifier", "EcdsaSigner", "EcdsaVerifier"]
