"""Sealer facade class.

This module provides the Sealer class which serves as the main entry point
for sealing operations, coordinating key loading, label derivation and
hybrid encryption for one value or a mapping of values.
"""

import os
from collections.abc import Callable, Mapping
from datetime import datetime, timezone

from kubeseal_raw.crypto.hybrid import RandomSource, seal_value
from kubeseal_raw.crypto.keys import load_public_key
from kubeseal_raw.crypto.labels import encryption_label, parse_scope
from kubeseal_raw.exceptions import CryptoError, KeyLoadError, SealError, ValidationError
from kubeseal_raw.models import PublicKey, SealedItem, SealingScope, SealRequest, SealResult, WireFormat

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Sealer:
    """Seals secret values for a sealed-secrets controller.

    A Sealer holds only immutable configuration, so one instance can be
    shared between threads. Every call parses the certificate again and
    draws fresh randomness for each value.

    Attributes:
        random_bytes: Secure random source used for session keys and nonces.
        wire_format: Framing of the produced blobs.
        clock: Returns the current UTC time; used for the certificate expiry
            check and the completion timestamp.

    """

    def __init__(
        self,
        *,
        random_bytes: RandomSource = os.urandom,
        wire_format: WireFormat = WireFormat.SEALED_SECRETS,
        clock: Clock = _utcnow,
    ) -> None:
        self.random_bytes = random_bytes
        self.wire_format = wire_format
        self.clock = clock

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return f"Sealer(wire_format={self.wire_format.value!r})"

    def _load_key(self, pem_text: str) -> PublicKey:
        try:
            return load_public_key(pem_text, now=self.clock())
        except KeyLoadError as err:
            raise SealError(SealError.LOAD_KEY, err) from err

    @staticmethod
    def _build_label(request: SealRequest) -> tuple[SealingScope, bytes]:
        try:
            scope = parse_scope(request.scope)
            return scope, encryption_label(request.name, request.namespace, scope)
        except ValidationError as err:
            raise SealError(SealError.LABEL, err) from err

    def _seal_item(
        self,
        public_key: PublicKey,
        plaintext: str | bytes,
        label: bytes,
        request: SealRequest,
        scope: SealingScope,
        item_key: str | None = None,
    ) -> SealedItem:
        try:
            ciphertext = seal_value(
                public_key,
                plaintext,
                label,
                random_bytes=self.random_bytes,
                wire_format=self.wire_format,
            )
        except CryptoError as err:
            raise SealError(SealError.ENCRYPT, err, item_key=item_key) from err
        return SealedItem(ciphertext=ciphertext, name=request.name, namespace=request.namespace, scope=scope)

    def seal_one(self, request: SealRequest) -> SealResult:
        """Seal the single plaintext of a request.

        Args:
            request: SealRequest whose payload is a str or bytes value.

        Returns:
            SealResult holding one SealedItem.

        Raises:
            SealError: If the key, the label or the encryption fails.
            TypeError: If the payload is a mapping.

        """
        if request.is_multi:
            raise TypeError("seal_one() expects a single plaintext; use seal_many() for mappings")

        public_key = self._load_key(request.pubkey_pem)
        scope, label = self._build_label(request)
        item = self._seal_item(public_key, request.payload, label, request, scope)  # type: ignore[arg-type]
        return SealResult(sealed=item, sealed_at=self.clock())

    def seal_many(self, request: SealRequest) -> SealResult:
        """Seal every value of a mapping under one key and one label.

        Items are sealed in sorted key order. The first failing item aborts
        the whole request and nothing sealed before it is returned.

        Args:
            request: SealRequest whose payload maps item keys to plaintexts.

        Returns:
            SealResult mapping every input key to its SealedItem.

        Raises:
            SealError: If the key or the label fails, or any item fails to
                encrypt (``item_key`` names the item).
            TypeError: If the payload is not a mapping.

        """
        if not isinstance(request.payload, Mapping):
            raise TypeError("seal_many() expects a mapping of item key to plaintext")

        public_key = self._load_key(request.pubkey_pem)
        scope, label = self._build_label(request)

        sealed: dict[str, SealedItem] = {}
        for key in sorted(request.payload):
            sealed[key] = self._seal_item(public_key, request.payload[key], label, request, scope, key)

        return SealResult(sealed=sealed, sealed_at=self.clock())

    def seal(self, request: SealRequest) -> SealResult:
        """Seal a request, dispatching on the shape of its payload."""
        if request.is_multi:
            return self.seal_many(request)
        return self.seal_one(request)


def seal_one(
    name: str,
    namespace: str,
    scope: SealingScope | int,
    pubkey_pem: str,
    plaintext: str | bytes,
) -> str:
    """Seal one value and return its base64 ciphertext.

    Raises:
        SealError: If sealing fails.

    """
    request = SealRequest(name=name, namespace=namespace, scope=scope, pubkey_pem=pubkey_pem, payload=plaintext)
    result = Sealer().seal_one(request)
    return str(result.ciphertexts())


def seal_many(
    name: str,
    namespace: str,
    scope: SealingScope | int,
    pubkey_pem: str,
    values: Mapping[str, str | bytes],
) -> dict[str, str]:
    """Seal a mapping of values and return item key to base64 ciphertext.

    Raises:
        SealError: If sealing any value fails; no partial mapping is returned.

    """
    request = SealRequest(name=name, namespace=namespace, scope=scope, pubkey_pem=pubkey_pem, payload=values)
    result = Sealer().seal_many(request)
    return dict(result.ciphertexts())  # type: ignore[arg-type]
