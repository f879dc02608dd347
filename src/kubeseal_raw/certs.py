"""Sealing certificate sources.

This module reads the controller's PEM certificate from a local file or
an http(s) URL, the same inputs ``kubeseal --cert`` accepts.
"""

from pathlib import Path

import requests
from icecream import ic

from kubeseal_raw.exceptions import CertificateSourceError

_URL_SCHEMES = ("http://", "https://")


def is_url(source: str) -> bool:
    """Return True if the certificate source is an http(s) URL."""
    return source.lower().startswith(_URL_SCHEMES)


def _fetch_url(url: str) -> str:
    try:
        response = requests.get(url, timeout=60)
        response.raise_for_status()
    except requests.RequestException as err:
        raise CertificateSourceError(f"Failed to fetch certificate from {url}: {err}") from err
    return response.text


def _read_file(path: Path) -> str:
    try:
        return path.read_text()
    except FileNotFoundError as err:
        raise CertificateSourceError(f"Certificate file '{path}' does not exist") from err
    except OSError as err:
        raise CertificateSourceError(f"Cannot read certificate file '{path}': {err.strerror}") from err


def read_certificate(source: str) -> str:
    """Read PEM certificate text from a file path or URL.

    Args:
        source: Local path or http(s) URL of the certificate.

    Returns:
        The PEM text. It is not parsed here.

    Raises:
        CertificateSourceError: If the certificate cannot be read.

    """
    ic(source)
    if is_url(source):
        return _fetch_url(source)
    return _read_file(Path(source).expanduser())
