import pytest

from osauth.errors import SignatureError
from osauth.token import AuthToken, HMACSigner, Ed25519Signer, NoopSigner, canonical_body


def make_token():
    return AuthToken(srv="avatar", sid="abc123")


def test_noop_signer_accepts_everything():
    signer = NoopSigner()
    token = make_token()
    signer.sign(token)
    assert not token.has_property("Sig")
    assert signer.verify(token)
    assert signer.verify(AuthToken.from_string("anything!"))


def test_canonical_body_excludes_signature_and_empty_values():
    token = make_token()
    token.add_property("Sig", "xyz")
    token.add_property("Empty", "")
    body = canonical_body(token).decode("utf-8")
    assert "Sig" not in body
    assert "Empty" not in body
    assert body.startswith('{"Exp"')


class TestHMACSigner:

    def test_sign_and_verify(self):
        signer = HMACSigner("test-secret")
        token = make_token()
        signer.sign(token)
        assert token.get_property("Sig")
        assert signer.verify(token)

    def test_verify_after_wire_round_trip(self):
        signer = HMACSigner("test-secret")
        token = make_token()
        signer.sign(token)
        assert signer.verify(AuthToken.from_string(token.token))

    def test_tampered_token_rejected(self):
        signer = HMACSigner("test-secret")
        token = make_token()
        signer.sign(token)
        token.sid = "someone-else"
        assert not signer.verify(token)

    def test_wrong_key_rejected(self):
        token = make_token()
        HMACSigner("key-one").sign(token)
        assert not HMACSigner("key-two").verify(token)

    def test_unsigned_and_opaque_rejected(self):
        signer = HMACSigner("test-secret")
        assert not signer.verify(make_token())
        assert not signer.verify(AuthToken.from_string("opaque!"))
        token = make_token()
        token.add_property("Sig", "@@not-base64@@")
        assert not signer.verify(token)

    def test_opaque_cannot_be_signed(self):
        with pytest.raises(SignatureError):
            HMACSigner("test-secret").sign(AuthToken.opaque("raw"))

    def test_empty_key_rejected(self):
        with pytest.raises(SignatureError):
            HMACSigner("")


class TestEd25519Signer:

    def test_sign_and_verify(self):
        signer = Ed25519Signer()
        token = make_token()
        signer.sign(token)
        assert token.get_property("Kid") == signer.key_id
        assert signer.verify(token)
        assert signer.verifier().verify(AuthToken.from_string(token.token))

    def test_tampered_token_rejected(self):
        signer = Ed25519Signer()
        token = make_token()
        signer.sign(token)
        token.srv = "other"
        assert not signer.verify(token)

    def test_other_key_rejected(self):
        token = make_token()
        Ed25519Signer().sign(token)
        assert not Ed25519Signer().verify(token)

    def test_verify_only_cannot_sign(self):
        verifier = Ed25519Signer().verifier()
        with pytest.raises(SignatureError):
            verifier.sign(make_token())
