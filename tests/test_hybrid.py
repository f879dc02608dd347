"""Tests for crypto/hybrid.py module."""

import base64
import struct
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from kubeseal_raw.crypto.hybrid import NONCE_BYTES, SESSION_KEY_BYTES, hybrid_encrypt, seal_value
from kubeseal_raw.crypto.keys import load_public_key
from kubeseal_raw.exceptions import CryptoError
from kubeseal_raw.models import PublicKey, WireFormat

LABEL = b"default/example"


@pytest.fixture(scope="module")
def public_key(cert_pem):
    return load_public_key(cert_pem)


def _split(blob: bytes) -> tuple[int, bytes, bytes]:
    (length,) = struct.unpack(">H", blob[:2])
    return length, blob[2 : 2 + length], blob[2 + length :]


class TestHybridEncryptFraming:
    """Tests for the binary layout of sealed blobs."""

    def test_length_prefix_matches_wrapped_key(self, public_key):
        """Test the 2-byte prefix holds the RSA ciphertext length."""
        blob = hybrid_encrypt(public_key, b"very_secret_secret", LABEL)
        length, wrapped_key, _ = _split(blob)

        assert length == 256
        assert len(wrapped_key) == 256

    def test_sealed_secrets_format_size(self, public_key):
        """Test the default format stores no nonce: prefix + key + plaintext + tag."""
        plaintext = b"very_secret_secret"
        blob = hybrid_encrypt(public_key, plaintext, LABEL)
        assert len(blob) == 2 + 256 + len(plaintext) + 16

    def test_labeled_aead_format_size(self, public_key):
        """Test the labeled-aead format frames the nonce after the wrapped key."""
        plaintext = b"very_secret_secret"
        blob = hybrid_encrypt(public_key, plaintext, LABEL, wire_format=WireFormat.LABELED_AEAD)
        assert len(blob) == 2 + 256 + NONCE_BYTES + len(plaintext) + 16

    def test_labeled_aead_nonce_from_random_source(self, public_key):
        """Test the framed nonce is drawn from the injected random source."""
        draws = iter([b"k" * SESSION_KEY_BYTES, b"n" * NONCE_BYTES])
        blob = hybrid_encrypt(
            public_key,
            b"data",
            LABEL,
            random_bytes=lambda size: next(draws),
            wire_format=WireFormat.LABELED_AEAD,
        )
        _, _, rest = _split(blob)
        assert rest[:NONCE_BYTES] == b"n" * NONCE_BYTES


class TestHybridEncryptRoundTrip:
    """Tests that sealed values open with the matching private key and label."""

    @pytest.mark.parametrize("wire_format", list(WireFormat))
    def test_round_trip(self, public_key, unseal, wire_format):
        """Test a sealed value unseals to the original plaintext."""
        sealed = seal_value(public_key, "very_secret_secret", LABEL, wire_format=wire_format)
        assert unseal(sealed, LABEL, wire_format) == b"very_secret_secret"

    def test_empty_label_round_trip(self, public_key, unseal):
        """Test cluster-wide (empty label) values round-trip."""
        sealed = seal_value(public_key, b"\x00binary\xff", b"")
        assert unseal(sealed, b"") == b"\x00binary\xff"

    def test_empty_plaintext(self, public_key, unseal):
        """Test an empty value can be sealed."""
        sealed = seal_value(public_key, "", LABEL)
        assert unseal(sealed, LABEL) == b""

    def test_wrong_label_fails(self, public_key, unseal):
        """Test a value sealed for one identity does not open under another."""
        sealed = seal_value(public_key, "secret", LABEL)
        with pytest.raises(ValueError):
            unseal(sealed, b"default/other")

    def test_labeled_aead_binds_label_to_payload(self, public_key, rsa_private_key):
        """Test the payload itself rejects a different label in labeled-aead format."""
        blob = hybrid_encrypt(public_key, b"secret", LABEL, wire_format=WireFormat.LABELED_AEAD)
        _, wrapped_key, rest = _split(blob)
        session_key = rsa_private_key.decrypt(
            wrapped_key,
            padding.OAEP(mgf=padding.MGF1(algorithm=hashes.SHA256()), algorithm=hashes.SHA256(), label=LABEL),
        )
        aead = AESGCM(session_key)

        assert aead.decrypt(rest[:NONCE_BYTES], rest[NONCE_BYTES:], LABEL) == b"secret"
        with pytest.raises(InvalidTag):
            aead.decrypt(rest[:NONCE_BYTES], rest[NONCE_BYTES:], b"default/other")


class TestHybridEncryptRandomness:
    """Tests for the use of fresh randomness."""

    def test_repeated_seals_differ(self, public_key, unseal):
        """Test sealing the same input twice gives different ciphertexts that both open."""
        first = seal_value(public_key, "very_secret_secret", LABEL)
        second = seal_value(public_key, "very_secret_secret", LABEL)

        assert first != second
        assert unseal(first, LABEL) == unseal(second, LABEL) == b"very_secret_secret"

    def test_injected_random_source_drives_session_key(self, public_key):
        """Test a fixed random source gives a fixed payload ciphertext."""
        fixed = lambda size: b"\x01" * size  # noqa: E731
        first = hybrid_encrypt(public_key, b"payload", LABEL, random_bytes=fixed)
        second = hybrid_encrypt(public_key, b"payload", LABEL, random_bytes=fixed)

        assert _split(first)[2] == _split(second)[2]

    def test_base64_output(self, public_key):
        """Test output is standard padded base64."""
        sealed = seal_value(public_key, "x", LABEL)
        assert base64.b64decode(sealed, validate=True)
        assert len(sealed) % 4 == 0

    def test_short_random_source(self, public_key):
        """Test a random source returning too few bytes is an encryption failure."""
        with pytest.raises(CryptoError) as exc_info:
            hybrid_encrypt(public_key, b"payload", LABEL, random_bytes=lambda size: b"")
        assert exc_info.value.reason == "encrypt-failed"


class TestHybridEncryptErrors:
    """Tests for surfaced encryption failures."""

    def test_wrap_failure(self):
        """Test an OAEP failure is reported as wrap-failed."""
        key = MagicMock(key_size=512)
        key.encrypt.side_effect = ValueError("Encryption failed")
        public_key = PublicKey(key=key, not_after=datetime(2099, 1, 1, tzinfo=timezone.utc))

        with pytest.raises(CryptoError) as exc_info:
            hybrid_encrypt(public_key, b"payload", LABEL)

        assert exc_info.value.reason == "wrap-failed"
        assert "512-bit" in str(exc_info.value)
