from __future__ import annotations

import io
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import cbor2

from ..errors import MalformedEnvelope


COSE_SIGN1_TAG = 18
SIG_CONTEXT = "Signature1"

# COSE common header parameter labels (RFC 9052 section 3.1)
HDR_ALG = 1
HDR_CRIT = 2
HDR_CONTENT_TYPE = 3
HDR_KID = 4
HDR_IV = 5
HDR_PARTIAL_IV = 6


def det_cbor_dumps(obj: Any) -> bytes:
    return cbor2.dumps(
        obj,
        canonical=True,
        timezone=None,
        datetime_as_timestamp=False,
        value_sharing=False,
        default=None,
    )


def det_cbor_loads(data: bytes) -> Any:
    """Decode exactly one CBOR item; trailing bytes are an error."""
    if not isinstance(data, (bytes, bytearray)):
        raise MalformedEnvelope("CBOR input must be bytes")
    fp = io.BytesIO(bytes(data))
    try:
        obj = cbor2.CBORDecoder(fp).decode()
    except (cbor2.CBORDecodeError, ValueError, EOFError) as e:
        raise MalformedEnvelope(f"invalid CBOR: {e}") from e
    trailing = len(data) - fp.tell()
    if trailing:
        raise MalformedEnvelope(f"{trailing} bytes trailing after CBOR item")
    return obj


def validate_header(header: Dict[Any, Any]) -> None:
    if not isinstance(header, dict):
        raise MalformedEnvelope("header must be a CBOR map")
    for label, value in header.items():
        if isinstance(label, bool) or not isinstance(label, (int, str)):
            raise MalformedEnvelope(f"header label {label!r} must be int or tstr")
        if label == HDR_ALG:
            if isinstance(value, bool) or not isinstance(value, (int, str)):
                raise MalformedEnvelope("alg must be int or tstr")
        elif label == HDR_CRIT:
            if not isinstance(value, (list, tuple)) or not value:
                raise MalformedEnvelope("crit must be a non-empty array")
            if any(isinstance(v, bool) or not isinstance(v, (int, str)) for v in value):
                raise MalformedEnvelope("crit entries must be header labels")
        elif label == HDR_CONTENT_TYPE:
            if isinstance(value, bool) or not isinstance(value, (int, str)):
                raise MalformedEnvelope("content type must be tstr or uint")
            if isinstance(value, int) and value < 0:
                raise MalformedEnvelope("content type must be tstr or uint")
        elif label in (HDR_KID, HDR_IV, HDR_PARTIAL_IV):
            if not isinstance(value, (bytes, bytearray)):
                raise MalformedEnvelope(f"header {label} must be bstr")


def encode_protected(header: Dict[Any, Any]) -> bytes:
    """Serialize a protected header map. An empty map is the zero-length bstr."""
    validate_header(header)
    if not header:
        return b""
    return det_cbor_dumps(header)


def decode_protected(data: bytes) -> Dict[Any, Any]:
    if len(data) == 0:
        return {}
    header = det_cbor_loads(data)
    if not isinstance(header, dict):
        raise MalformedEnvelope("protected header must be a CBOR map")
    validate_header(header)
    return header


@dataclass(frozen=True)
class Sign1Message:
    """COSE_Sign1 = [protected: bstr, unprotected: map, payload: bstr / nil, signature: bstr].

    payload is None for a detached payload.
    """

    protected: bytes
    unprotected: Dict[Any, Any] = field(default_factory=dict)
    payload: Optional[bytes] = None
    signature: bytes = b""

    @property
    def protected_header(self) -> Dict[Any, Any]:
        return decode_protected(self.protected)

    @property
    def detached(self) -> bool:
        return self.payload is None
