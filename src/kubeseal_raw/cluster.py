"""Sealing certificate lookup through the Kubernetes API.

Used when no ``--cert`` is given: the sealed-secrets controller is located
by its service label and the certificate of its newest active sealing key
is read straight from the key secret, so no port-forward to the controller
is needed.
"""

import base64
from typing import Any

import click
import questionary
from icecream import ic
from kubernetes import client, config
from kubernetes.client.exceptions import ApiException
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import MaxRetryError

from kubeseal_raw import console
from kubeseal_raw.exceptions import ClusterConnectionError, ControllerNotFoundError
from kubeseal_raw.models import ControllerInfo
from kubeseal_raw.styles import POINTER, PROMPT_STYLE, QMARK

CONTROLLER_SELECTOR = "app.kubernetes.io/name=sealed-secrets"
ACTIVE_KEY_SELECTOR = "sealedsecrets.bitnami.com/sealed-secrets-key=active"


class Cluster:
    """A kubeconfig context with a discovered sealed-secrets controller.

    Attributes:
        context: Name of the kubeconfig context in use.
        controller: Service name and namespace of the controller.

    """

    def __init__(self, *, select_context: bool) -> None:
        """Load the kubeconfig and locate the controller.

        Args:
            select_context: Prompt for a context instead of using the
                current one. Keyword only.

        Raises:
            ClusterConnectionError: If the kubeconfig or the cluster is unusable.
            ControllerNotFoundError: If no controller service exists.
            click.Abort: If the context prompt is cancelled.

        """
        self.context: str = self._choose_context(prompt=select_context)
        config.load_kube_config(context=self.context)
        self.controller: ControllerInfo = self._discover_controller()

    def __repr__(self) -> str:
        return f"Cluster(context={self.context!r}, controller={self.controller!r})"

    @staticmethod
    def _choose_context(*, prompt: bool) -> str:
        try:
            contexts, current = config.list_kube_config_contexts()
        except ConfigException as e:
            raise ClusterConnectionError(f"Invalid or missing kubeconfig: {e}") from e

        if not prompt:
            chosen = str(current["name"])
        else:
            chosen = questionary.select(
                "Select context to work with",
                choices=[entry["name"] for entry in contexts],
                style=PROMPT_STYLE,
                pointer=POINTER,
                qmark=QMARK,
            ).ask()
            if chosen is None:
                console.warning("Context selection cancelled.")
                raise click.Abort()

        console.action(f"Working with {console.highlight(chosen)} cluster")
        return chosen

    @staticmethod
    def _discover_controller() -> ControllerInfo:
        with console.spinner("Searching for SealedSecrets controller..."):
            try:
                services: list[Any] = (
                    client.CoreV1Api().list_service_for_all_namespaces(label_selector=CONTROLLER_SELECTOR).items
                )
            except MaxRetryError as e:
                raise ClusterConnectionError(f"Failed to connect to the Kubernetes cluster: {e.reason}") from e
            except ApiException as e:
                raise ClusterConnectionError(f"Failed to list sealed-secrets services: {e.status} {e.reason}") from e

        # the chart also installs a "-metrics" service with the same label
        candidates = [svc for svc in services if "metrics" not in svc.metadata.name]
        ic([f"{svc.metadata.namespace}/{svc.metadata.name}" for svc in candidates])
        if not candidates:
            console.error("No controller found")
            raise ControllerNotFoundError("SealedSecrets controller not found in the cluster")

        found = ControllerInfo(name=candidates[0].metadata.name, namespace=candidates[0].metadata.namespace)
        if len(candidates) > 1:
            console.warning(f"Multiple controllers found, using {console.highlight(f'{found.namespace}/{found.name}')}")
        else:
            console.success(f"Found controller: {console.highlight(f'{found.namespace}/{found.name}')}")
        return found

    def fetch_certificate(self) -> str:
        """Read the PEM certificate of the controller's newest active sealing key.

        The controller seals with its most recently created key, so that is
        the certificate new values must be sealed with.

        Raises:
            ClusterConnectionError: If the key secrets cannot be listed.
            ControllerNotFoundError: If the controller has no active sealing key.

        """
        namespace = self.controller.namespace
        try:
            secrets = client.CoreV1Api().list_namespaced_secret(namespace, label_selector=ACTIVE_KEY_SELECTOR).items
        except (ApiException, MaxRetryError) as e:
            raise ClusterConnectionError(f"Failed to list sealing keys in namespace {namespace}: {e}") from e

        keys = [secret for secret in secrets if secret.type == "kubernetes.io/tls" and secret.data]
        if not keys:
            raise ControllerNotFoundError("No active sealed-secrets sealing key found in the cluster")

        newest = max(keys, key=lambda secret: secret.metadata.creation_timestamp)
        console.info(f"Using sealing key {console.highlight(newest.metadata.name)}")
        return base64.b64decode(newest.data["tls.crt"]).decode()
