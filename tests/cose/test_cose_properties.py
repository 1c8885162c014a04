import dataclasses

import pytest
from hypothesis import given, settings, strategies as st

from coset.cose.codec import decode, encode
from coset.cose.model import Sign1Message, encode_protected
from coset.cose.sign import generate_keypair, sign, verify
from coset.errors import SignatureInvalid

KP = generate_keypair("P-256")

payloads = st.binary(max_size=256)
aads = st.binary(max_size=64)
content_types = st.one_of(st.none(), st.text(min_size=1, max_size=30))

# Labels above 6 carry no type rules, so any scalar is allowed
header_values = st.one_of(
    st.integers(min_value=-(2**31), max_value=2**31),
    st.text(max_size=20),
    st.binary(max_size=20),
)
unprotected_maps = st.dictionaries(
    keys=st.integers(min_value=7, max_value=10_000),
    values=header_values,
    max_size=5,
)


@settings(max_examples=50, deadline=None)
@given(payloads, aads, content_types)
def test_sign_verify_roundtrip(payload, aad, ct):
    msg = sign(KP, payload, aad, ct)
    assert verify(KP.public_key, decode(encode(msg)), aad) == payload


@settings(max_examples=50, deadline=None)
@given(
    payload=st.one_of(st.none(), payloads),
    unprotected=unprotected_maps,
    signature=st.binary(max_size=96),
    tagged=st.booleans(),
)
def test_codec_roundtrip_and_determinism(payload, unprotected, signature, tagged):
    m = Sign1Message(
        protected=encode_protected({1: -7}),
        unprotected=unprotected,
        payload=payload,
        signature=signature,
    )
    buf = encode(m, tagged=tagged)
    assert buf == encode(m, tagged=tagged)
    assert decode(buf) == m


@settings(max_examples=40, deadline=None)
@given(st.binary(min_size=1, max_size=128), st.data())
def test_any_payload_bit_flip_fails(payload, data):
    msg = sign(KP, payload)
    i = data.draw(st.integers(min_value=0, max_value=len(payload) - 1))
    bit = data.draw(st.integers(min_value=0, max_value=7))
    ba = bytearray(payload)
    ba[i] ^= 1 << bit
    with pytest.raises(SignatureInvalid):
        verify(KP.public_key, dataclasses.replace(msg, payload=bytes(ba)))


@settings(max_examples=40, deadline=None)
@given(st.binary(max_size=32), st.data())
def test_any_aad_bit_flip_fails(aad, data):
    msg = sign(KP, b"hello", aad)
    if aad:
        i = data.draw(st.integers(min_value=0, max_value=len(aad) - 1))
        ba = bytearray(aad)
        ba[i] ^= 1 << data.draw(st.integers(min_value=0, max_value=7))
        other = bytes(ba)
    else:
        other = b"\x00"
    with pytest.raises(SignatureInvalid):
        verify(KP.public_key, msg, other)


@settings(max_examples=40, deadline=None)
@given(st.integers(min_value=0, max_value=63), st.integers(min_value=0, max_value=7))
def test_any_signature_bit_flip_fails(i, bit):
    msg = sign(KP, b"hello", b"", "text/plain")
    ba = bytearray(msg.signature)
    ba[i] ^= 1 << bit
    with pytest.raises(SignatureInvalid):
        verify(KP.public_key, dataclasses.replace(msg, signature=bytes(ba)))
