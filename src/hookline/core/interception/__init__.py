"""Interception core module.

Replaces an operation with a pipeline running before callbacks, the
original operation and after callbacks, threading each result into the
next step, plus trailing callbacks the caller never waits for.

IMPORTANT: This is a STABLE API CONTRACT. The public interfaces in
           this module should not have breaking changes.

Example usage:
    from hookline.core.interception import InterceptionRegistry

    registry = InterceptionRegistry()

    registry.add_before(service, "save", validate)
    registry.add_after(service, "save", enrich)
    registry.add_trailing(service, "save", audit)

    # The call site does not change
    saved = await service.save(record)
"""

from hookline.core.interception.chain_executor import run_chain
from hookline.core.interception.interception_decorator import InterceptionDecorator
from hookline.core.interception.interception_record import (
    ErrorHandler,
    InterceptionRecord,
)
from hookline.core.interception.interception_registry import (
    InterceptionRegistry,
    add_after,
    add_before,
    add_trailing,
    default_registry,
    get_original,
    register_interception,
)
from hookline.core.interception.pipeline import Pipeline, pipeline

__all__ = [
    # Registry
    "InterceptionRegistry",
    "InterceptionRecord",
    "ErrorHandler",
    "default_registry",
    "register_interception",
    "add_before",
    "add_after",
    "add_trailing",
    "get_original",
    # Execution
    "Pipeline",
    "pipeline",
    "run_chain",
    # Decorator
    "InterceptionDecorator",
]
