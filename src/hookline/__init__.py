"""hookline - ordered before/after/trailing callbacks for existing operations.

Attach pluggable behavior (validation, enrichment, auditing) to a method
after the fact, without changing its call sites.
"""

__version__ = "0.1.0"

from hookline.core.context import get_current_invocation
from hookline.core.interception import (
    InterceptionDecorator,
    InterceptionRecord,
    InterceptionRegistry,
    Pipeline,
    add_after,
    add_before,
    add_trailing,
    default_registry,
    get_original,
    pipeline,
    register_interception,
)
from hookline.domain.entities.invocation_context import (
    ChainPhase,
    InvocationContext,
    InvocationState,
)

__all__ = [
    "__version__",
    "InterceptionRegistry",
    "InterceptionRecord",
    "InterceptionDecorator",
    "Pipeline",
    "pipeline",
    "default_registry",
    "register_interception",
    "add_before",
    "add_after",
    "add_trailing",
    "get_original",
    "get_current_invocation",
    "ChainPhase",
    "InvocationContext",
    "InvocationState",
]
