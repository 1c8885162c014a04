from __future__ import annotations

from typing import Any, Dict, Optional, Union

from cryptography.exceptions import InternalError
from cryptography.hazmat.primitives.asymmetric import ec

from ..crypto.alg_registry import (
    ES256,
    algorithm_for_curve,
    algorithm_for_key,
    get_algorithm,
)
from ..crypto.keys import (
    KeyPair,
    PrivateKeyLike,
    PublicKeyLike,
    private_key_of,
    public_key_of,
)
from ..errors import (
    MalformedEnvelope,
    MalformedSignature,
    RandomSourceFailure,
    SignatureInvalid,
    UnsupportedKeyType,
)
from ..utils.logging import get_logger
from .model import (
    HDR_ALG,
    HDR_CONTENT_TYPE,
    HDR_CRIT,
    HDR_KID,
    SIG_CONTEXT,
    Sign1Message,
    decode_protected,
    det_cbor_dumps,
    encode_protected,
    validate_header,
)

# Protected labels this engine knows how to process when listed in crit
_UNDERSTOOD = {HDR_ALG, HDR_CONTENT_TYPE, HDR_KID}

log = get_logger()


def sig_structure(protected_bstr: bytes, payload: bytes, external_aad: bytes = b"") -> bytes:
    # Sig_structure = ["Signature1", protected, external_aad:bstr, payload]
    arr = [SIG_CONTEXT, bytes(protected_bstr), bytes(external_aad), bytes(payload)]
    return det_cbor_dumps(arr)


def generate_keypair(curve_id: str = "P-256") -> KeyPair:
    alg = algorithm_for_curve(curve_id)
    try:
        sk = ec.generate_private_key(alg.curve)
    except InternalError as e:
        raise RandomSourceFailure("key generation failed in the crypto backend") from e
    log.debug("generated %s key pair", alg.curve.name)
    return KeyPair(sk)


def sign(
    private_key: PrivateKeyLike,
    payload: bytes,
    external_aad: bytes = b"",
    content_type: Union[str, int, None] = None,
    *,
    unprotected: Optional[Dict[Any, Any]] = None,
    detached: bool = False,
) -> Sign1Message:
    """Create a COSE_Sign1 message over payload.

    Protected header: alg (1) = ES256, plus content type (3) when given.
    With detached=True the payload is signed but left out of the message
    and must be handed to verify() out-of-band.
    """
    sk = private_key_of(private_key)
    alg = algorithm_for_key(sk)
    if not isinstance(payload, (bytes, bytearray)):
        raise TypeError("payload must be bytes")

    protected_map: Dict[Any, Any] = {HDR_ALG: alg.cose_id}
    if content_type not in (None, ""):
        protected_map[HDR_CONTENT_TYPE] = content_type
    protected_bstr = encode_protected(protected_map)

    unprot = dict(unprotected or {})
    validate_header(unprot)
    dup = set(unprot) & set(protected_map)
    if dup:
        raise MalformedEnvelope(f"labels {sorted(dup, key=str)} present in both header buckets")

    to_sign = sig_structure(protected_bstr, payload, external_aad or b"")
    signature = alg.signer(sk).sign(alg.digest(to_sign))
    log.debug("signed %d byte payload with %s (detached=%s)", len(payload), alg.name, detached)
    return Sign1Message(
        protected=protected_bstr,
        unprotected=unprot,
        payload=None if detached else bytes(payload),
        signature=signature,
    )


def _check_crit(prot: Dict[Any, Any]) -> None:
    crit = prot.get(HDR_CRIT)
    if crit is None:
        return
    for label in crit:
        if label not in prot:
            raise MalformedEnvelope(f"critical header {label!r} missing from protected header")
        if label not in _UNDERSTOOD:
            raise MalformedEnvelope(f"unknown critical header parameter {label!r}")


def verify(
    public_key: PublicKeyLike,
    message: Sign1Message,
    external_aad: bytes = b"",
    *,
    detached_payload: Optional[bytes] = None,
) -> bytes:
    """Verify a COSE_Sign1 message and return its payload.

    For a detached message the payload must be passed as detached_payload.
    Raises UnsupportedAlgorithm, MalformedSignature, SignatureInvalid or
    MalformedEnvelope; never returns on failure.
    """
    prot = decode_protected(message.protected)
    # alg gate comes before any crypto
    alg = get_algorithm(prot.get(HDR_ALG))
    _check_crit(prot)

    pk = public_key_of(public_key)
    if algorithm_for_key(pk) is not alg:
        raise UnsupportedKeyType(f"key curve {pk.curve.name} does not match {alg.name}")

    if message.payload is None:
        if detached_payload is None:
            raise MalformedEnvelope("detached payload required for verification")
        payload = bytes(detached_payload)
    else:
        if detached_payload is not None:
            raise MalformedEnvelope("payload is embedded; detached payload not allowed")
        payload = message.payload

    to_verify = sig_structure(message.protected, payload, external_aad or b"")

    if len(message.signature) != alg.signature_size:
        raise MalformedSignature(
            f"signature is {len(message.signature)} bytes, expected {alg.signature_size}"
        )

    if not alg.verifier(pk).verify(alg.digest(to_verify), message.signature):
        log.debug("signature check failed for %s", alg.name)
        raise SignatureInvalid("bad signature")
    return payload


__all__ = ["ES256", "generate_keypair", "sig_structure", "sign", "verify"]
