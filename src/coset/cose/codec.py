from __future__ import annotations

import cbor2

from ..errors import MalformedEnvelope
from .model import (
    COSE_SIGN1_TAG,
    Sign1Message,
    det_cbor_dumps,
    det_cbor_loads,
    validate_header,
)


def encode(message: Sign1Message, *, tagged: bool = True) -> bytes:
    """Serialize a Sign1Message to its canonical CBOR form.

    With tagged=True (default) the array is wrapped in CBOR tag 18
    (COSE_Sign1_Tagged).
    """
    if not isinstance(message.protected, (bytes, bytearray)):
        raise MalformedEnvelope("protected header must be bstr")
    if not isinstance(message.signature, (bytes, bytearray)):
        raise MalformedEnvelope("signature must be bstr")
    if message.payload is not None and not isinstance(message.payload, (bytes, bytearray)):
        raise MalformedEnvelope("payload must be bstr or nil")
    validate_header(message.unprotected)
    arr = [
        bytes(message.protected),
        message.unprotected,
        None if message.payload is None else bytes(message.payload),
        bytes(message.signature),
    ]
    if tagged:
        return det_cbor_dumps(cbor2.CBORTag(COSE_SIGN1_TAG, arr))
    return det_cbor_dumps(arr)


def decode(data: bytes) -> Sign1Message:
    """Parse COSE_Sign1 (tagged or untagged). Purely syntactic: no alg or signature checks."""
    obj = det_cbor_loads(data)
    if isinstance(obj, cbor2.CBORTag):
        if obj.tag != COSE_SIGN1_TAG:
            raise MalformedEnvelope(f"unexpected CBOR tag {obj.tag}")
        obj = obj.value
    if not (isinstance(obj, list) and len(obj) == 4):
        raise MalformedEnvelope("bad COSE_Sign1 structure")
    protected, unprotected, payload, signature = obj
    if not isinstance(protected, bytes):
        raise MalformedEnvelope("protected header must be bstr")
    if not isinstance(unprotected, dict):
        raise MalformedEnvelope("unprotected header must be a map")
    if payload is not None and not isinstance(payload, bytes):
        raise MalformedEnvelope("payload must be bstr or nil")
    if not isinstance(signature, bytes):
        raise MalformedEnvelope("signature must be bstr")
    validate_header(unprotected)
    return Sign1Message(
        protected=protected,
        unprotected=unprotected,
        payload=payload,
        signature=signature,
    )


__all__ = ["encode", "decode"]
