"""Cryptography subpackage.

This package contains the sealing key loader, the encryption label
builder and the hybrid RSA/AES sealer.
"""

from kubeseal_raw.crypto.hybrid import hybrid_encrypt, seal_value
from kubeseal_raw.crypto.keys import load_public_key
from kubeseal_raw.crypto.labels import encryption_label, parse_scope

__all__ = [
    # keys
    "load_public_key",
    # labels
    "encryption_label",
    "parse_scope",
    # hybrid
    "hybrid_encrypt",
    "seal_value",
]
