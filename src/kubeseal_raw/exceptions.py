"""Custom exceptions for kubeseal-raw.

This module defines the exception hierarchy used throughout the application
to provide meaningful error messages and proper error handling.

Every sealing error carries a short machine-readable ``reason`` next to the
human readable message, so callers can branch on the failure kind without
parsing text.
"""


class KubesealRawError(Exception):
    """Base exception for all kubeseal-raw errors.

    All custom exceptions in this package inherit from this class,
    allowing callers to catch all kubeseal-raw errors with a single
    except clause if desired.
    """

    reason: str = "error"

    def __init__(self, message: str, *, reason: str | None = None) -> None:
        super().__init__(message)
        if reason is not None:
            self.reason = reason


class KeyLoadError(KubesealRawError):
    """Raised when the sealing certificate cannot be turned into a public key.

    Reasons:
    - ``parse``: the PEM text holds no readable certificate
    - ``unsupported-key-type``: the certificate key is not RSA
    - ``expired``: the certificate's validity ended before now
    """

    PARSE = "parse"
    UNSUPPORTED_KEY_TYPE = "unsupported-key-type"
    EXPIRED = "expired"


class ValidationError(KubesealRawError):
    """Raised when sealing input is rejected before any cryptography runs.

    Reasons:
    - ``invalid-scope``: the scope is not one of strict, namespace-wide, cluster-wide
    - ``missing-field``: a name or namespace required by the scope is empty
    - ``invalid-payload``: a resource attribute holds the wrong shape of value
    """

    INVALID_SCOPE = "invalid-scope"
    MISSING_FIELD = "missing-field"
    INVALID_PAYLOAD = "invalid-payload"


class CryptoError(KubesealRawError):
    """Raised when hybrid encryption of a value fails.

    Reasons:
    - ``wrap-failed``: RSA-OAEP could not wrap the session key
    - ``encrypt-failed``: AES-GCM could not encrypt the payload
    """

    WRAP_FAILED = "wrap-failed"
    ENCRYPT_FAILED = "encrypt-failed"


class SealError(KubesealRawError):
    """Raised when a seal request fails at any stage.

    Attributes:
        stage: The pipeline stage that failed (``load-key``, ``label`` or ``encrypt``).
        item_key: Key of the failing item for multi-value requests, else None.
        cause: The underlying KeyLoadError, ValidationError or CryptoError.

    """

    LOAD_KEY = "load-key"
    LABEL = "label"
    ENCRYPT = "encrypt"

    def __init__(self, stage: str, cause: KubesealRawError, *, item_key: str | None = None) -> None:
        self.stage = stage
        self.cause = cause
        self.item_key = item_key
        if item_key is None:
            message = f"{stage} failed: {cause}"
        else:
            message = f"{stage} failed for item '{item_key}': {cause}"
        super().__init__(message, reason=cause.reason)


class CertificateSourceError(KubesealRawError):
    """Raised when the sealing certificate cannot be read.

    This can occur when:
    - The certificate file does not exist or is unreadable
    - The certificate URL cannot be fetched
    """


class ClusterConnectionError(KubesealRawError):
    """Raised when connection to the Kubernetes cluster fails.

    This can occur when:
    - The kubeconfig is invalid or missing
    - The cluster is unreachable
    - Authentication fails
    """


class ControllerNotFoundError(KubesealRawError):
    """Raised when the SealedSecrets controller or its key is not found in the cluster.

    This typically means:
    - The sealed-secrets controller is not installed
    - The controller is installed but not properly labeled
    - The user doesn't have permission to list services or secrets
    """


class SecretParsingError(KubesealRawError):
    """Raised when parsing a secret file fails.

    This can occur when:
    - The file does not exist
    - The file is not valid YAML
    - The YAML does not represent a valid Kubernetes secret
    """
