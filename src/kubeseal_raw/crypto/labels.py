"""Scope parsing and encryption label derivation.

The label is bound into both the key wrap and the payload encryption, so a
value sealed for one name/namespace cannot be unsealed under another one.
"""

from kubeseal_raw.exceptions import ValidationError
from kubeseal_raw.models import SealingScope

_SCOPE_NAMES: dict[str, SealingScope] = {scope.label_name: scope for scope in SealingScope}


def parse_scope(value: SealingScope | int | str) -> SealingScope:
    """Convert a raw scope value into a SealingScope.

    Accepts a SealingScope, its integer value (0, 1, 2), the integer as a
    string, or the dashed scope name (``strict``, ``namespace-wide``,
    ``cluster-wide``).

    Raises:
        ValidationError: If the value does not name one of the three scopes.

    """
    if isinstance(value, SealingScope):
        return value

    # bool is an int subclass; True must not silently mean namespace-wide
    if isinstance(value, int) and not isinstance(value, bool):
        try:
            return SealingScope(value)
        except ValueError:
            pass
    elif isinstance(value, str):
        text = value.strip().lower()
        if text in _SCOPE_NAMES:
            return _SCOPE_NAMES[text]
        # only a short ASCII digit run can name a scope; int() rejects "²"
        if text.isascii() and text.isdigit() and len(text) <= 3:
            return parse_scope(int(text))

    raise ValidationError(
        f"invalid sealing scope {value!r}: expected 0 (strict), 1 (namespace-wide) or 2 (cluster-wide)",
        reason=ValidationError.INVALID_SCOPE,
    )


def encryption_label(name: str, namespace: str, scope: SealingScope | int | str) -> bytes:
    """Build the encryption label for a secret.

    Args:
        name: Secret name. Required for strict scope.
        namespace: Secret namespace. Required for strict and namespace-wide scopes.
        scope: Sealing scope, validated with parse_scope.

    Returns:
        ``namespace/name`` for strict, ``namespace`` for namespace-wide and an
        empty label for cluster-wide scope, UTF-8 encoded.

    Raises:
        ValidationError: If the scope is invalid or a required field is empty.

    """
    scope = parse_scope(scope)

    match scope:
        case SealingScope.STRICT:
            _require(name=name, namespace=namespace)
            return f"{namespace}/{name}".encode()
        case SealingScope.NAMESPACE_WIDE:
            _require(namespace=namespace)
            return namespace.encode()
        case SealingScope.CLUSTER_WIDE:
            return b""


def _require(**fields: str) -> None:
    missing = [field for field, value in fields.items() if not value]
    if missing:
        raise ValidationError(
            f"{', '.join(missing)} must not be empty",
            reason=ValidationError.MISSING_FIELD,
        )
