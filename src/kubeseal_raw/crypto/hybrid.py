"""Hybrid RSA-OAEP + AES-256-GCM sealing.

Blob layout::

    [2-byte big-endian wrapped key length][RSA-OAEP wrapped session key][AES-GCM ciphertext + tag]

In the ``labeled-aead`` format the 12-byte GCM nonce sits between the
wrapped key and the ciphertext, and the label is also used as GCM
associated data. The default ``sealed-secrets`` format is the one the
sealed-secrets controller unseals: the session key is used exactly once, so
the nonce is all zeroes and is not stored.
"""

import base64
import os
import struct
from collections.abc import Callable

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from kubeseal_raw.exceptions import CryptoError
from kubeseal_raw.models import PublicKey, WireFormat

SESSION_KEY_BYTES = 32
NONCE_BYTES = 12
_LENGTH_PREFIX = struct.Struct(">H")
_ZERO_NONCE = bytes(NONCE_BYTES)

RandomSource = Callable[[int], bytes]


def _draw(random_bytes: RandomSource, size: int) -> bytes:
    data = random_bytes(size)
    if len(data) != size:
        raise CryptoError(
            f"random source returned {len(data)} bytes, expected {size}",
            reason=CryptoError.ENCRYPT_FAILED,
        )
    return data


def _wrap_session_key(public_key: PublicKey, session_key: bytes, label: bytes) -> bytes:
    oaep = padding.OAEP(
        mgf=padding.MGF1(algorithm=hashes.SHA256()),
        algorithm=hashes.SHA256(),
        label=label or None,
    )
    try:
        return public_key.key.encrypt(session_key, oaep)
    except ValueError as err:
        raise CryptoError(
            f"failed to wrap session key with a {public_key.key.key_size}-bit RSA key: {err}",
            reason=CryptoError.WRAP_FAILED,
        ) from err


def hybrid_encrypt(
    public_key: PublicKey,
    plaintext: bytes,
    label: bytes,
    *,
    random_bytes: RandomSource = os.urandom,
    wire_format: WireFormat = WireFormat.SEALED_SECRETS,
) -> bytes:
    """Seal plaintext so that only the matching private key and label can open it.

    Args:
        public_key: RSA key of the sealing certificate.
        plaintext: Bytes to seal.
        label: Encryption label from encryption_label().
        random_bytes: Secure random source, called as ``random_bytes(n)``.
        wire_format: Framing of the returned blob.

    Returns:
        The framed binary blob.

    Raises:
        CryptoError: If wrapping the session key or encrypting the payload fails.

    """
    session_key = _draw(random_bytes, SESSION_KEY_BYTES)

    if wire_format is WireFormat.LABELED_AEAD:
        nonce = _draw(random_bytes, NONCE_BYTES)
        associated_data: bytes | None = label
    else:
        nonce = _ZERO_NONCE
        associated_data = None

    try:
        ciphertext = AESGCM(session_key).encrypt(nonce, plaintext, associated_data)
    except (ValueError, OverflowError) as err:
        raise CryptoError(f"failed to encrypt payload: {err}", reason=CryptoError.ENCRYPT_FAILED) from err

    wrapped_key = _wrap_session_key(public_key, session_key, label)

    framed = [_LENGTH_PREFIX.pack(len(wrapped_key)), wrapped_key]
    if wire_format is WireFormat.LABELED_AEAD:
        framed.append(nonce)
    framed.append(ciphertext)
    return b"".join(framed)


def seal_value(
    public_key: PublicKey,
    plaintext: str | bytes,
    label: bytes,
    *,
    random_bytes: RandomSource = os.urandom,
    wire_format: WireFormat = WireFormat.SEALED_SECRETS,
) -> str:
    """Seal a value and return the blob as standard padded base64 text.

    Strings are encoded as UTF-8 before sealing.

    Raises:
        CryptoError: If sealing fails.

    """
    data = plaintext.encode() if isinstance(plaintext, str) else plaintext
    blob = hybrid_encrypt(public_key, data, label, random_bytes=random_bytes, wire_format=wire_format)
    return base64.b64encode(blob).decode("ascii")
