"""Current invocation tracking using ContextVars.

Chain steps receive a single value, so the invocation they belong to
(owner, operation, phase) is made available here instead of through
explicit parameter passing. asyncio copies the context into every task,
which keeps concurrent invocations isolated from each other.
"""

from contextvars import ContextVar, Token
from typing import Optional

from hookline.domain.entities.invocation_context import InvocationContext

_current_invocation: ContextVar[Optional[InvocationContext]] = ContextVar(
    "current_invocation", default=None
)


def get_current_invocation() -> Optional[InvocationContext]:
    """Get the invocation context of the running chain.

    Returns:
        The current InvocationContext or None outside of a chain.
    """
    return _current_invocation.get()


def set_current_invocation(context: InvocationContext) -> Token:
    """Set the current invocation context.

    Args:
        context: The InvocationContext to set.

    Returns:
        Token to pass to reset_current_invocation().
    """
    return _current_invocation.set(context)


def reset_current_invocation(token: Token) -> None:
    """Restore the invocation context that was active before set_current_invocation()."""
    _current_invocation.reset(token)
