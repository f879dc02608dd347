"""Core sealing subpackage.

This package contains the Sealer facade class along with the two plain
entry points used by callers that only need ciphertext back.
"""

from kubeseal_raw.core.sealer import Sealer, seal_many, seal_one

__all__ = [
    "Sealer",
    "seal_one",
    "seal_many",
]
