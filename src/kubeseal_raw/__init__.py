"""kubeseal-raw: seal raw secret values for the sealed-secrets controller.

This package seals plaintext values into ciphertext that only the
sealed-secrets controller's private key can unseal, without needing
the kubeseal binary.

Example usage:
    from kubeseal_raw import SealingScope, seal_one, seal_many

    sealed = seal_one("example", "default", SealingScope.STRICT, pem, "very_secret_secret")
    sealed_items = seal_many("example", "default", SealingScope.STRICT, pem, {"user": "admin"})
"""

__version__ = "0.1.0"

from kubeseal_raw.core.sealer import Sealer, seal_many, seal_one
from kubeseal_raw.crypto import encryption_label, hybrid_encrypt, load_public_key, parse_scope, seal_value
from kubeseal_raw.exceptions import (
    CertificateSourceError,
    ClusterConnectionError,
    ControllerNotFoundError,
    CryptoError,
    KeyLoadError,
    KubesealRawError,
    SealError,
    SecretParsingError,
    ValidationError,
)
from kubeseal_raw.models import PublicKey, SealedItem, SealingScope, SealRequest, SealResult, WireFormat
from kubeseal_raw.resources import RawResource, RawsResource

__all__ = [
    # Version
    "__version__",
    # Entry points
    "seal_one",
    "seal_many",
    # Classes
    "Sealer",
    "RawResource",
    "RawsResource",
    # Engine components
    "load_public_key",
    "parse_scope",
    "encryption_label",
    "hybrid_encrypt",
    "seal_value",
    # Models
    "PublicKey",
    "SealingScope",
    "SealRequest",
    "SealedItem",
    "SealResult",
    "WireFormat",
    # Exceptions
    "KubesealRawError",
    "KeyLoadError",
    "ValidationError",
    "CryptoError",
    "SealError",
    "CertificateSourceError",
    "ClusterConnectionError",
    "ControllerNotFoundError",
    "SecretParsingError",
]
