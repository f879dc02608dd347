"""Shared test fixtures for kubeseal-raw tests."""

import base64
import struct
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.x509.oid import NameOID

from kubeseal_raw.models import ControllerInfo, WireFormat


def _certificate_pem(private_key, *, not_before: datetime, not_after: datetime) -> str:
    subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "sealed-secret")])
    certificate = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(subject)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_before)
        .not_valid_after(not_after)
        .sign(private_key, hashes.SHA256())
    )
    return certificate.public_bytes(serialization.Encoding.PEM).decode()


@pytest.fixture(scope="session")
def rsa_private_key():
    """RSA-2048 key standing in for the controller's sealing key."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def ec_private_key():
    """Elliptic-curve key for unsupported key type checks."""
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def cert_pem(rsa_private_key):
    """Valid self-signed certificate for the RSA key."""
    now = datetime.now(timezone.utc)
    return _certificate_pem(rsa_private_key, not_before=now - timedelta(days=1), not_after=now + timedelta(days=3650))


@pytest.fixture(scope="session")
def expired_cert_pem(rsa_private_key):
    """Certificate for the RSA key that expired on 2020-06-15."""
    return _certificate_pem(
        rsa_private_key,
        not_before=datetime(2019, 6, 15, tzinfo=timezone.utc),
        not_after=datetime(2020, 6, 15, tzinfo=timezone.utc),
    )


@pytest.fixture(scope="session")
def ec_cert_pem(ec_private_key):
    """Valid certificate carrying an elliptic-curve key."""
    now = datetime.now(timezone.utc)
    return _certificate_pem(ec_private_key, not_before=now - timedelta(days=1), not_after=now + timedelta(days=365))


@pytest.fixture
def cert_file(tmp_path, cert_pem):
    """Valid certificate written to disk."""
    path = tmp_path / "sealed-secrets.crt"
    path.write_text(cert_pem)
    return path


@pytest.fixture(scope="session")
def unseal(rsa_private_key):
    """Open a sealed value the way the controller does; for round-trip checks only."""

    def _unseal(sealed: str, label: bytes, wire_format: WireFormat = WireFormat.SEALED_SECRETS) -> bytes:
        blob = base64.b64decode(sealed)
        (length,) = struct.unpack(">H", blob[:2])
        wrapped_key, rest = blob[2 : 2 + length], blob[2 + length :]
        session_key = rsa_private_key.decrypt(
            wrapped_key,
            padding.OAEP(
                mgf=padding.MGF1(algorithm=hashes.SHA256()),
                algorithm=hashes.SHA256(),
                label=label or None,
            ),
        )
        if wire_format is WireFormat.LABELED_AEAD:
            return AESGCM(session_key).decrypt(rest[:12], rest[12:], label)
        return AESGCM(session_key).decrypt(bytes(12), rest, None)

    return _unseal


@pytest.fixture
def mock_kube_contexts():
    """Mock kubernetes config contexts."""
    with patch("kubernetes.config.list_kube_config_contexts") as mock:
        mock.return_value = ([{"name": "test-context"}], {"name": "test-context"})
        yield mock


@pytest.fixture
def mock_kube_config():
    """Mock kubernetes config loading."""
    with patch("kubernetes.config.load_kube_config") as mock:
        yield mock


@pytest.fixture
def mock_controller():
    """Mock SealedSecrets controller discovery."""
    with patch("kubeseal_raw.cluster.Cluster._discover_controller") as mock:
        mock.return_value = ControllerInfo(name="sealed-secrets-controller", namespace="kube-system")
        yield mock


@pytest.fixture
def cluster_mocks(mock_kube_contexts, mock_kube_config, mock_controller):
    """Combined fixture for creating a Cluster instance without cluster access."""
    return {
        "contexts": mock_kube_contexts,
        "config": mock_kube_config,
        "controller": mock_controller,
    }


@pytest.fixture
def sample_secret_yaml():
    """Sample secret YAML content."""
    return """apiVersion: v1
kind: Secret
metadata:
  name: test-secret
  namespace: default
type: Opaque
data:
  username: dXNlcm5hbWU=
  password: cGFzc3dvcmQ=
stringData:
  token: plain-token
"""
