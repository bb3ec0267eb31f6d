"""Chain executor - sequential composition of sync and async callables.

Given ``[f1, f2, ..., fn]`` the executor produces ``fn(...f2(f1(args)))``.
Each step may return a plain value or an awaitable; awaitables are
awaited before the next step starts, plain values never suspend.
"""

import inspect
from typing import Any, Callable, Optional, Sequence

from hookline.core.logging import get_logger

logger = get_logger(__name__)


async def run_chain(
    steps: Sequence[Callable],
    args: Sequence[Any] = (),
    kwargs: Optional[dict[str, Any]] = None,
    *,
    on_step: Optional[Callable[[int], None]] = None,
    log_steps: bool = False,
) -> Any:
    """Run ``steps`` in order, threading each result into the next step.

    The first step is called with the full call arguments. Every later step
    receives exactly one positional argument: the resolved result of the
    step before it.

    An exception raised by a step, synchronously or from the awaitable it
    returned, stops the chain. It propagates unchanged; no further step
    runs.

    Args:
        steps: Callables to run, in order.
        args: Positional arguments for the first step.
        kwargs: Keyword arguments for the first step.
        on_step: Called with the step index right before each step runs.
        log_steps: Emit a debug entry per step.

    Returns:
        The resolved result of the last step. For an empty chain, the
        first positional argument, or None when there is none.

    Example:
        result = await run_chain([parse, validate, save], (payload,))
    """
    if not steps:
        return args[0] if args else None

    result: Any = None
    for index, step in enumerate(steps):
        if on_step is not None:
            on_step(index)

        if log_steps:
            logger.debug(
                "Running chain step",
                step_index=index,
                step=getattr(step, "__qualname__", repr(step)),
            )

        if index == 0:
            result = step(*args, **(kwargs or {}))
        else:
            result = step(result)

        if inspect.isawaitable(result):
            result = await result

    return result
