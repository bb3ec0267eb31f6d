"""Domain entities for hookline.

Entities are pure Python dataclasses and constants that describe an
invocation. They have no dependencies on the rest of the package.
"""

from hookline.domain.entities.invocation_context import (
    ChainPhase,
    InvocationContext,
    InvocationState,
)

__all__ = [
    "ChainPhase",
    "InvocationContext",
    "InvocationState",
]
