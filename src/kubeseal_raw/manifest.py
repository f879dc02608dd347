"""SealedSecret manifest rendering and Secret file parsing.

This module renders sealed values into a SealedSecret resource, appends
ArgoCD annotations, and reads plain Kubernetes Secret manifests whose
values should be sealed.
"""

import base64
import binascii
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from kubeseal_raw.exceptions import SecretParsingError
from kubeseal_raw.models import SealingScope

_API_VERSION = "bitnami.com/v1alpha1"
_ARGO_SYNC_KEY = "argocd.argoproj.io/sync-options"
_ARGO_SKIP_OPTION = "SkipDryRunOnMissingResource"

# The controller reads these to decide which label to unseal with
_SCOPE_ANNOTATIONS: dict[SealingScope, str] = {
    SealingScope.NAMESPACE_WIDE: "sealedsecrets.bitnami.com/namespace-wide",
    SealingScope.CLUSTER_WIDE: "sealedsecrets.bitnami.com/cluster-wide",
}


def build_sealed_secret(
    name: str,
    namespace: str,
    scope: SealingScope,
    encrypted_data: Mapping[str, str],
    secret_type: str | None = None,
) -> dict[str, Any]:
    """Build a SealedSecret document.

    Args:
        name: Secret name.
        namespace: Secret namespace. Omitted from metadata when empty.
        scope: Scope the values were sealed with.
        encrypted_data: Item key to base64 ciphertext.
        secret_type: Optional type of the unsealed Secret (e.g. ``Opaque``).

    Returns:
        The SealedSecret as a plain dictionary ready for YAML dumping.

    """
    metadata: dict[str, Any] = {"name": name}
    if namespace:
        metadata["namespace"] = namespace
    if scope in _SCOPE_ANNOTATIONS:
        metadata["annotations"] = {_SCOPE_ANNOTATIONS[scope]: "true"}

    template: dict[str, Any] = {"metadata": dict(metadata)}
    if secret_type:
        template["type"] = secret_type

    return {
        "apiVersion": _API_VERSION,
        "kind": "SealedSecret",
        "metadata": metadata,
        "spec": {
            "encryptedData": dict(sorted(encrypted_data.items())),
            "template": template,
        },
    }


def append_argo_annotation(document: dict[str, Any]) -> dict[str, Any]:
    """Add the ArgoCD SkipDryRunOnMissingResource sync option to a document.

    This allows ArgoCD to process repositories with SealedSecrets
    before the controller is deployed in the cluster. An existing
    SkipDryRunOnMissingResource option is replaced, other options are kept.

    Args:
        document: The SealedSecret document, modified in place.

    Returns:
        The same document.

    """
    annotations: dict[str, str] = document["metadata"].setdefault("annotations", {})

    options = [opt.strip() for opt in annotations.get(_ARGO_SYNC_KEY, "").split(",") if opt.strip()]
    options = [opt for opt in options if not opt.startswith(f"{_ARGO_SKIP_OPTION}=")]

    annotations[_ARGO_SYNC_KEY] = ",".join([f"{_ARGO_SKIP_OPTION}=true", *options])
    return document


def write_manifest(document: Mapping[str, Any], path: Path) -> None:
    """Dump a document to a YAML file."""
    with path.open("w") as stream:
        yaml.safe_dump(dict(document), stream, sort_keys=False)


def parse_secret_file(secret_path: str | Path) -> dict[str, Any]:
    """Parse a single-document Kubernetes Secret YAML file.

    Args:
        secret_path: Path to the secret file.

    Returns:
        The parsed YAML document as a dictionary.

    Raises:
        SecretParsingError: If the file does not exist, is empty, contains
            multiple documents, contains malformed YAML, or is not a Secret.

    """
    try:
        with open(secret_path) as stream:
            docs = [doc for doc in yaml.safe_load_all(stream) if doc is not None]
    except FileNotFoundError as err:
        raise SecretParsingError(f"Secret file '{secret_path}' does not exist") from err
    except yaml.YAMLError as err:
        raise SecretParsingError(f"Secret file '{secret_path}' contains malformed YAML: {err}") from err

    if not docs:
        raise SecretParsingError(f"Secret file '{secret_path}' is empty")
    if len(docs) > 1:
        raise SecretParsingError(
            f"File '{secret_path}' contains multiple YAML documents. Only single document files are supported."
        )

    document = docs[0]
    if not isinstance(document, dict) or document.get("kind") != "Secret":
        raise SecretParsingError(f"File '{secret_path}' is not a Kubernetes Secret manifest")
    if not isinstance(document.get("metadata"), dict) or not document["metadata"].get("name"):
        raise SecretParsingError(f"Secret in '{secret_path}' has no metadata.name")
    return document


def secret_values(document: Mapping[str, Any]) -> dict[str, bytes]:
    """Collect the plaintext values of a Secret document.

    ``data`` entries are base64 decoded; ``stringData`` entries win over
    ``data`` entries with the same key, as on the API server.

    Raises:
        SecretParsingError: If a ``data`` entry is not valid base64.

    """
    values: dict[str, bytes] = {}
    for key, encoded in (document.get("data") or {}).items():
        try:
            values[key] = base64.b64decode(str(encoded), validate=True)
        except binascii.Error as err:
            raise SecretParsingError(f"Secret data '{key}' is not valid base64") from err
    for key, text in (document.get("stringData") or {}).items():
        values[key] = str(text).encode()
    return values
