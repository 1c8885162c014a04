import pytest
from cryptography.hazmat.primitives.asymmetric import ec

from coset.crypto.alg_registry import (
    ES256,
    algorithm_for_curve,
    algorithm_for_key,
    get_algorithm,
)
from coset.crypto.signer import EcdsaSigner, EcdsaVerifier, Signer, Verifier
from coset.errors import UnsupportedAlgorithm, UnsupportedKeyType


def test_es256_descriptor():
    assert ES256.cose_id == -7
    assert ES256.signature_size == 64
    assert ES256.curve.name == "secp256r1"
    assert len(ES256.digest(b"abc")) == 32


def test_lookup_by_id():
    assert get_algorithm(-7) is ES256


@pytest.mark.parametrize("alg_id", [-8, -35, 7, True, "ES256", None, [-7]])
def test_unknown_ids(alg_id):
    with pytest.raises(UnsupportedAlgorithm):
        get_algorithm(alg_id)


def test_lookup_by_curve():
    assert algorithm_for_curve("ECDSA") is ES256
    with pytest.raises(UnsupportedKeyType):
        algorithm_for_curve("P-521")


def test_lookup_by_key():
    sk = ec.generate_private_key(ec.SECP256R1())
    assert algorithm_for_key(sk) is ES256
    assert algorithm_for_key(sk.public_key()) is ES256
    with pytest.raises(UnsupportedKeyType):
        algorithm_for_key(ec.generate_private_key(ec.SECP521R1()))
    with pytest.raises(UnsupportedKeyType):
        algorithm_for_key("key")


def test_signer_verifier_capabilities():
    sk = ec.generate_private_key(ec.SECP256R1())
    s = ES256.signer(sk)
    v = ES256.verifier(sk.public_key())
    assert isinstance(s, EcdsaSigner) and isinstance(s, Signer)
    assert isinstance(v, EcdsaVerifier) and isinstance(v, Verifier)
    digest = ES256.digest(b"message")
    sig = s.sign(digest)
    assert len(sig) == 64
    assert v.verify(digest, sig) is True
    assert v.verify(ES256.digest(b"other"), sig) is False
    assert v.verify(digest, sig[:-1]) is False
