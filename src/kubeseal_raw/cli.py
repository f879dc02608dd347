#!/usr/bin/env python
"""Command-line interface for kubeseal-raw.

This module provides the main CLI entry point for the kubeseal-raw tool,
handling command-line argument parsing, collecting the values to seal and
the sealing certificate, and writing the sealed output.
"""

import sys
from pathlib import Path

import click
import questionary
import yaml
from icecream import ic

from kubeseal_raw import __version__, console
from kubeseal_raw.certs import read_certificate
from kubeseal_raw.cluster import Cluster
from kubeseal_raw.core.sealer import Sealer
from kubeseal_raw.crypto.labels import parse_scope
from kubeseal_raw.exceptions import (
    CertificateSourceError,
    ClusterConnectionError,
    ControllerNotFoundError,
    SealError,
    SecretParsingError,
    ValidationError,
)
from kubeseal_raw.manifest import (
    append_argo_annotation,
    build_sealed_secret,
    parse_secret_file,
    secret_values,
    write_manifest,
)
from kubeseal_raw.models import SealingScope, SealRequest, SealResult, WireFormat
from kubeseal_raw.styles import PROMPT_STYLE, QMARK


def parse_literals(literals: tuple[str, ...]) -> dict[str, bytes]:
    """Turn ``key=value`` options into items.

    Raises:
        click.BadParameter: If an entry has no ``=`` or an empty key.

    """
    items: dict[str, bytes] = {}
    for entry in literals:
        key, sep, value = entry.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"'{entry}' must be in key=value format", param_hint="--from-literal")
        items[key] = value.encode()
    return items


def read_files(files: tuple[str, ...]) -> dict[str, bytes]:
    """Turn ``[key=]path`` options into items; the key defaults to the file name.

    Raises:
        click.BadParameter: If a file cannot be read.

    """
    items: dict[str, bytes] = {}
    for entry in files:
        key, sep, path = entry.partition("=")
        if not sep:
            key, path = Path(entry).name, entry
        try:
            items[key] = Path(path).expanduser().read_bytes()
        except OSError as err:
            raise click.BadParameter(f"Cannot read '{path}': {err.strerror}", param_hint="--from-file") from err
    return items


def load_certificate(cert: str | None, *, select_context: bool) -> str:
    """Read the sealing certificate from a file/URL or fetch it from the cluster."""
    if cert is not None:
        console.info("Working in detached mode")
        return read_certificate(cert)
    return Cluster(select_context=select_context).fetch_certificate()


def write_sealed_manifest(
    result: SealResult,
    request: SealRequest,
    output: str,
    secret_type: str | None,
) -> None:
    """Render sealed items into a SealedSecret manifest file."""
    scope = parse_scope(request.scope)
    document = build_sealed_secret(
        name=request.name,
        namespace=request.namespace,
        scope=scope,
        encrypted_data=result.ciphertexts(),  # type: ignore[arg-type]
        secret_type=secret_type,
    )
    console.step("Appending ArgoCD annotations")
    append_argo_annotation(document)
    write_manifest(document, Path(output))

    console.newline()
    console.summary_panel(
        "Sealed Secret Created",
        {
            "Name": request.name,
            "Namespace": request.namespace or "-",
            "Scope": scope.label_name,
            "Keys": ", ".join(result.ciphertexts()),
            "Output": output,
        },
    )


@click.command(
    help="Seal raw secret values for the sealed-secrets controller",
    context_settings={"auto_envvar_prefix": "KUBESEAL_RAW"},
)
@click.option("--version", "-v", required=False, is_flag=True, help="print version")
@click.option("--debug", required=False, is_flag=True, help="print debug information")
@click.option("--cert", "-c", required=False, help="certificate file or URL to seal with")
@click.option("--select", required=False, is_flag=True, default=False, help="prompt for context select")
@click.option("--name", "-n", default="", help="name of the secret")
@click.option("--namespace", default="", help="namespace of the secret")
@click.option("--scope", default="strict", show_default=True, help="strict|namespace-wide|cluster-wide or 0|1|2")
@click.option("--value", required=False, help="single value to seal")
@click.option("--from-literal", "literals", multiple=True, help="key=value item to seal")
@click.option("--from-file", "files", multiple=True, help="[key=]path of a file to seal")
@click.option("--secret-file", required=False, help="Kubernetes Secret manifest to seal")
@click.option(
    "--wire-format",
    type=click.Choice([wire_format.value for wire_format in WireFormat]),
    default=WireFormat.SEALED_SECRETS.value,
    show_default=True,
    help="binary framing of sealed values",
)
@click.option("--manifest", "-o", "output", required=False, help="write a SealedSecret manifest to this file")
def cli(
    version: bool,
    debug: bool,
    cert: str | None,
    select: bool,
    name: str,
    namespace: str,
    scope: str,
    value: str | None,
    literals: tuple[str, ...],
    files: tuple[str, ...],
    secret_file: str | None,
    wire_format: str,
    output: str | None,
) -> None:
    """Process CLI arguments and seal the requested values.

    A single ``--value`` (or a prompted value) is printed as base64
    ciphertext. Named items from ``--from-literal``, ``--from-file`` or
    ``--secret-file`` are printed as a YAML mapping, or written as a
    SealedSecret manifest with ``--manifest``.

    """
    if not debug:
        ic.disable()

    if version:
        click.echo(__version__)
        return

    try:
        sealing_scope: SealingScope = parse_scope(scope)
    except ValidationError as e:
        raise click.BadParameter(str(e), param_hint="--scope") from None

    items: dict[str, bytes] = {}
    secret_type: str | None = None
    if secret_file:
        try:
            document = parse_secret_file(secret_file)
            items.update(secret_values(document))
        except SecretParsingError as e:
            raise click.ClickException(str(e)) from None
        name = name or document["metadata"]["name"]
        namespace = namespace or document["metadata"].get("namespace", "")
        secret_type = document.get("type")
    items.update(read_files(files))
    items.update(parse_literals(literals))
    ic(name, namespace, sealing_scope, sorted(items))

    if items and value is not None:
        raise click.UsageError("--value cannot be combined with named items")
    if not items and output:
        raise click.UsageError("--manifest requires named items (--from-literal, --from-file or --secret-file)")
    if not items and value is None:
        value = questionary.password("Provide secret value", style=PROMPT_STYLE, qmark=QMARK).ask()
        if value is None:
            console.warning("Secret value prompt cancelled.")
            raise click.Abort()

    try:
        pem = load_certificate(cert, select_context=select)
    except CertificateSourceError as e:
        raise click.ClickException(str(e)) from None
    except (ClusterConnectionError, ControllerNotFoundError) as e:
        console.error(f"Cluster connection failed: {e}")
        sys.exit(1)

    request = SealRequest(
        name=name,
        namespace=namespace,
        scope=sealing_scope,
        pubkey_pem=pem,
        payload=items if items else value,  # type: ignore[arg-type]
    )
    sealer = Sealer(wire_format=WireFormat(wire_format))
    ic(sealer)

    try:
        with console.spinner("Sealing..."):
            result = sealer.seal(request)
    except SealError as e:
        raise click.ClickException(str(e)) from None

    if output:
        write_sealed_manifest(result, request, output, secret_type)
    elif request.is_multi:
        click.echo(yaml.safe_dump(result.ciphertexts(), sort_keys=True), nl=False)
    else:
        click.echo(result.ciphertexts())


if __name__ == "__main__":
    cli()
