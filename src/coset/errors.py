"""Error taxonomy for COSE_Sign1 handling.

Every error is a ValueError subclass so callers that only care about
"bad input" can keep catching ValueError.
"""
from __future__ import annotations


class CoseError(ValueError):
    """Base class for all coset errors."""


class UnsupportedKeyType(CoseError):
    """Unknown curve/key type requested, or key object on the wrong curve."""


class InvalidKeyType(CoseError):
    """Key container carries the wrong type tag or cannot be parsed."""


class RandomSourceFailure(CoseError):
    """The CSPRNG backing key generation or ECDSA nonces failed."""


class DecodeError(CoseError):
    pass


class MalformedEnvelope(DecodeError):
    """Structural decode failure of a COSE_Sign1 envelope."""


class VerificationError(CoseError):
    pass


class MalformedSignature(VerificationError):
    """Signature bytes are not exactly 2 * coordinate width."""


class UnsupportedAlgorithm(VerificationError):
    """Protected header declares an algorithm this engine does not implement."""


class SignatureInvalid(VerificationError):
    """Cryptographic mismatch."""


__all__ = [
    "CoseError",
    "UnsupportedKeyType",
    "InvalidKeyType",
    "RandomSourceFailure",
    "DecodeError",
    "MalformedEnvelope",
    "VerificationError",
    "MalformedSignature",
    "UnsupportedAlgorithm",
    "SignatureInvalid",
]
