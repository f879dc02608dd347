"""Data models for kubeseal-raw.

This module provides type-safe data structures for the sealing engine,
replacing loosely-typed dictionaries with proper Python data classes.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum, IntEnum
from typing import NamedTuple

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey


class SealingScope(IntEnum):
    """Identity binding granularity of a sealed value.

    The integer values match the scope numbers used by the sealed-secrets
    tooling (0 strict, 1 namespace-wide, 2 cluster-wide).
    """

    STRICT = 0
    NAMESPACE_WIDE = 1
    CLUSTER_WIDE = 2

    @property
    def label_name(self) -> str:
        """The dashed name used on the command line and in annotations."""
        return self.name.lower().replace("_", "-")


class WireFormat(str, Enum):
    """Binary framing produced by the hybrid sealer.

    Inherits from str to allow direct use as a CLI choice.
    """

    SEALED_SECRETS = "sealed-secrets"
    LABELED_AEAD = "labeled-aead"


class ControllerInfo(NamedTuple):
    """Information about the SealedSecrets controller.

    Attributes:
        name: The controller service name.
        namespace: The namespace where the controller is deployed.

    """

    name: str
    namespace: str


@dataclass(frozen=True, slots=True)
class PublicKey:
    """An RSA sealing key and the expiry of the certificate it came from.

    Attributes:
        key: The RSA public key.
        not_after: Timezone-aware UTC end of the certificate's validity.

    """

    key: RSAPublicKey
    not_after: datetime


Payload = str | bytes | Mapping[str, str | bytes]


@dataclass(frozen=True, slots=True)
class SealRequest:
    """Parameters for sealing one value or a mapping of values.

    Attributes:
        name: The name of the secret the values belong to.
        namespace: The Kubernetes namespace of the secret.
        scope: The sealing scope, either a SealingScope or its raw integer.
        pubkey_pem: PEM text of the controller's sealing certificate.
        payload: A single plaintext or a mapping of item key to plaintext.

    """

    name: str
    namespace: str
    scope: SealingScope | int
    pubkey_pem: str
    payload: Payload

    @property
    def is_multi(self) -> bool:
        """Whether the payload is a key to plaintext mapping."""
        return isinstance(self.payload, Mapping)


@dataclass(frozen=True, slots=True)
class SealedItem:
    """Ciphertext for one plaintext and the identity it was bound to.

    Attributes:
        ciphertext: Base64 encoded sealed blob.
        name: Secret name the label was built from.
        namespace: Secret namespace the label was built from.
        scope: Scope the label was built with.

    """

    ciphertext: str
    name: str
    namespace: str
    scope: SealingScope

    def __str__(self) -> str:
        return self.ciphertext


@dataclass(frozen=True, slots=True)
class SealResult:
    """Outcome of a successful seal request.

    Attributes:
        sealed: One SealedItem, or a mapping of item key to SealedItem.
        sealed_at: UTC time at which sealing completed.

    """

    sealed: SealedItem | Mapping[str, SealedItem]
    sealed_at: datetime

    def ciphertexts(self) -> str | dict[str, str]:
        """Return the bare base64 ciphertext(s) in the shape of the request payload."""
        if isinstance(self.sealed, SealedItem):
            return self.sealed.ciphertext
        return {key: item.ciphertext for key, item in self.sealed.items()}
