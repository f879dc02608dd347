"""Declarative resource lifecycle adapter.

Maps the create/read/update/delete hooks of a declarative provider onto the
sealer. Sealed ciphertext cannot be inspected or reversed, so create and
update both re-seal the plan while read and delete leave state untouched.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from kubeseal_raw.core.sealer import Sealer
from kubeseal_raw.exceptions import ValidationError
from kubeseal_raw.models import SealRequest

# Go's time.RFC850 layout: "Monday, 02-Jan-06 15:04:05 MST"
_RFC850 = "%A, %d-%b-%y %H:%M:%S %Z"


def format_last_updated(moment: datetime) -> str:
    """Format a completion timestamp the way provider state records it."""
    return moment.strftime(_RFC850)


class _SealedResource:
    """Shared lifecycle for the raw and raws resources."""

    type_name: str = ""
    payload_attribute: str = ""
    multi: bool = False

    def __init__(self, sealer: Sealer | None = None) -> None:
        self.sealer = sealer if sealer is not None else Sealer()

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return f"{type(self).__name__}(sealer={self.sealer!r})"

    def _request(self, plan: Mapping[str, Any]) -> SealRequest:
        required = ("name", "namespace", self.payload_attribute, "scope", "pubkey")
        missing = [attribute for attribute in required if plan.get(attribute) is None]
        if missing:
            raise ValidationError(
                f"{self.type_name}: missing required attribute(s): {', '.join(missing)}",
                reason=ValidationError.MISSING_FIELD,
            )
        payload = plan[self.payload_attribute]
        if isinstance(payload, Mapping) != self.multi:
            expected = "a mapping of key to value" if self.multi else "a single value"
            raise ValidationError(
                f"{self.type_name}: attribute '{self.payload_attribute}' must be {expected}",
                reason=ValidationError.INVALID_PAYLOAD,
            )
        return SealRequest(
            name=plan["name"],
            namespace=plan["namespace"],
            scope=plan["scope"],
            pubkey_pem=plan["pubkey"],
            payload=payload,
        )

    def create(self, plan: Mapping[str, Any]) -> dict[str, Any]:
        """Seal the plan and return the resulting state.

        Raises:
            ValidationError: If a required attribute is absent.
            SealError: If sealing fails. No state is produced.

        """
        request = self._request(plan)
        result = self.sealer.seal_many(request) if self.multi else self.sealer.seal_one(request)
        return {
            **plan,
            "sealed": result.ciphertexts(),
            "last_updated": format_last_updated(result.sealed_at),
        }

    def update(self, plan: Mapping[str, Any]) -> dict[str, Any]:
        """Re-seal the plan; identical to create()."""
        return self.create(plan)

    @staticmethod
    def read(state: Mapping[str, Any]) -> dict[str, Any]:
        """Return the stored state unchanged."""
        return dict(state)

    @staticmethod
    def delete(state: Mapping[str, Any]) -> None:  # noqa: ARG004
        """Nothing to clean up; sealed values only live in the caller's state."""
        return None


class RawResource(_SealedResource):
    """Seals one value: ``secret`` -> ``sealed``."""

    type_name = "sealedsecret_raw"
    payload_attribute = "secret"


class RawsResource(_SealedResource):
    """Seals a mapping of values: ``values`` -> ``sealed``."""

    type_name = "sealedsecret_raws"
    payload_attribute = "values"
    multi = True
