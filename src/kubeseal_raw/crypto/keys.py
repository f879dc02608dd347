"""Sealing certificate loading.

Turns the PEM text of the controller certificate into the RSA public key
used for sealing, rejecting bundles that hold no certificate, non-RSA keys
and expired certificates.
"""

from datetime import datetime, timezone

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import dsa, ec, ed448, ed25519
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey

from kubeseal_raw.exceptions import KeyLoadError
from kubeseal_raw.models import PublicKey

_KEY_TYPE_NAMES = (
    (ec.EllipticCurvePublicKey, "ECDSA"),
    (ed25519.Ed25519PublicKey, "Ed25519"),
    (ed448.Ed448PublicKey, "Ed448"),
    (dsa.DSAPublicKey, "DSA"),
)


def _key_type_name(key: object) -> str:
    for key_type, name in _KEY_TYPE_NAMES:
        if isinstance(key, key_type):
            return name
    return type(key).__name__


def _format_expiry(moment: datetime) -> str:
    return f"{moment:%B} {moment.day}, {moment.year}"


def load_public_key(pem_text: str | bytes, *, now: datetime | None = None) -> PublicKey:
    """Load the RSA sealing key from a PEM certificate bundle.

    Only the first certificate of a bundle is used.

    Args:
        pem_text: PEM encoded certificate(s).
        now: Reference time for the expiry check. Defaults to the current UTC time.

    Returns:
        PublicKey holding the RSA key and the certificate's expiry.

    Raises:
        KeyLoadError: If no certificate can be parsed, the key is not RSA,
            or the certificate has expired.

    """
    data = pem_text.encode() if isinstance(pem_text, str) else pem_text

    try:
        certificates = x509.load_pem_x509_certificates(data)
    except ValueError as err:
        raise KeyLoadError(f"failed to read any certificates: {err}", reason=KeyLoadError.PARSE) from err

    if not certificates:
        raise KeyLoadError("failed to read any certificates", reason=KeyLoadError.PARSE)

    certificate = certificates[0]
    try:
        key = certificate.public_key()
    except ValueError as err:
        raise KeyLoadError(f"failed to read certificate public key: {err}", reason=KeyLoadError.PARSE) from err
    except UnsupportedAlgorithm as err:
        raise KeyLoadError(
            f"expected RSA public key but found an unsupported key algorithm: {err}",
            reason=KeyLoadError.UNSUPPORTED_KEY_TYPE,
        ) from err

    if not isinstance(key, RSAPublicKey):
        raise KeyLoadError(
            f"expected RSA public key but found {_key_type_name(key)}",
            reason=KeyLoadError.UNSUPPORTED_KEY_TYPE,
        )

    not_after = certificate.not_valid_after_utc
    current = now if now is not None else datetime.now(timezone.utc)
    if not_after < current:
        raise KeyLoadError(
            f"failed to encrypt using an expired certificate on {_format_expiry(not_after)}",
            reason=KeyLoadError.EXPIRED,
        )

    return PublicKey(key=key, not_after=not_after)
