"""Pipeline - the callable installed in place of an intercepted operation.

A Pipeline wraps an InterceptionRecord. Calling it runs the primary chain
(before callbacks, the original operation, after callbacks) and returns
its result to the caller. Once the primary chain succeeded, the trailing
callbacks run in a separate asyncio task the caller never waits for.

Pipelines are normally created by InterceptionRegistry.register_interception,
which installs them on the owner under the operation's name. They can also
be built explicitly around a function:

    @pipeline
    async def save(record):
        ...

    save.add_before(validate)
    save.add_trailing(audit)

    await save({"title": "Hello"})
"""

import functools
import inspect
from typing import TYPE_CHECKING, Any, Callable, Optional

from hookline.core.context import reset_current_invocation, set_current_invocation
from hookline.core.interception.chain_executor import run_chain
from hookline.core.interception.interception_record import (
    ErrorHandler,
    InterceptionRecord,
)
from hookline.core.logging import get_logger
from hookline.domain.entities.invocation_context import ChainPhase, InvocationContext

if TYPE_CHECKING:
    from hookline.core.interception.interception_registry import InterceptionRegistry

logger = get_logger(__name__)

F = Callable[..., Any]


class Pipeline:
    """Replacement for an intercepted operation.

    Has the same external signature as the operation it replaces, but
    calling it returns a coroutine.

    Attributes:
        record: The InterceptionRecord holding the callbacks and original.
    """

    def __init__(self, record: InterceptionRecord, registry: "InterceptionRegistry") -> None:
        """Initialize the pipeline.

        Args:
            record: Record to run. Read on every call, so callbacks added
                    later apply to all later calls.
            registry: Registry providing settings, the fallback error
                      handler and trailing task tracking.
        """
        functools.update_wrapper(self, record.original, updated=())
        self.record = record
        self._registry = registry

    @classmethod
    def wrap(
        cls,
        func: F,
        error_handler: Optional[ErrorHandler] = None,
        registry: Optional["InterceptionRegistry"] = None,
    ) -> "Pipeline":
        """Build a standalone pipeline around ``func``.

        Nothing is patched; the returned pipeline is called directly.

        Args:
            func: The operation to augment.
            error_handler: Sink for failures of this pipeline's chains.
            registry: Registry to use. Defaults to the default registry.

        Returns:
            A Pipeline with empty callback lists.
        """
        if registry is None:
            from hookline.core.interception.interception_registry import default_registry

            registry = default_registry

        record = InterceptionRecord(
            name=getattr(func, "__name__", repr(func)),
            original=func,
            error_handler=error_handler,
            bind_instance=inspect.isfunction(func),
        )
        record.mark_installed()
        return cls(record, registry)

    @property
    def original(self) -> F:
        """The wrapped operation, bypassing every callback."""
        return self.record.original

    def add_before(self, callback: F) -> F:
        """Append a callback to run before the original operation."""
        self.record.before.append(callback)
        return callback

    def add_after(self, callback: F) -> F:
        """Append a callback to run after the original operation."""
        self.record.after.append(callback)
        return callback

    def add_trailing(self, callback: F) -> F:
        """Append a callback to run once the primary chain succeeded."""
        self.record.trailing.append(callback)
        return callback

    def __get__(self, instance: Any, owner: Optional[type] = None) -> Any:
        """Bind to ``instance`` when installed on a class."""
        if instance is None or not self.record.bind_instance:
            return self
        return functools.partial(self._invoke, instance)

    async def __call__(self, *args: Any, **kwargs: Any) -> Any:
        """Run the pipeline."""
        return await self._invoke(None, *args, **kwargs)

    def __repr__(self) -> str:
        record = self.record
        return (
            f"<Pipeline {record.name} before={len(record.before)} "
            f"after={len(record.after)} trailing={len(record.trailing)}>"
        )

    async def _invoke(self, receiver: Any, *args: Any, **kwargs: Any) -> Any:
        record = self.record
        settings = self._registry.settings

        steps, original_index, after_index = record.primary_chain()
        trailing = record.trailing_chain()

        if receiver is not None:
            steps[original_index] = record.original.__get__(receiver, type(receiver))

        context = InvocationContext(
            operation=record.name,
            owner=receiver if receiver is not None else record.owner,
        )

        def on_step(index: int) -> None:
            if index < original_index:
                context.enter_phase(ChainPhase.BEFORE)
            elif index < after_index:
                context.enter_phase(ChainPhase.ORIGINAL)
            else:
                context.enter_phase(ChainPhase.AFTER)

        token = set_current_invocation(context)
        try:
            try:
                result = await run_chain(
                    steps,
                    args,
                    kwargs,
                    on_step=on_step,
                    log_steps=settings.log_chain_steps,
                )
            except Exception as e:
                context.settle(False, e)
                await self._route_primary_failure(e, context)
                return None
            context.settle(True)
        finally:
            reset_current_invocation(token)

        if trailing:
            self._registry.track(
                self._run_trailing(trailing, result, context.for_trailing())
            )

        return result

    def _resolve_error_handler(self) -> Optional[ErrorHandler]:
        return self.record.error_handler or self._registry.error_handler

    async def _route_primary_failure(
        self, error: Exception, context: InvocationContext
    ) -> None:
        """Send a primary chain failure to the error handler.

        Without a handler the error is re-raised to the caller, unless
        ``reraise_unhandled`` is disabled. A handler that raises makes its
        exception reach the caller.
        """
        handler = self._resolve_error_handler()

        if handler is None:
            logger.error(
                "Interception chain failed",
                phase=context.phase,
                handled=False,
                error=str(error),
                error_type=type(error).__name__,
            )
            if self._registry.settings.reraise_unhandled:
                raise error
            return

        logger.warning(
            "Interception chain failed",
            phase=context.phase,
            handled=True,
            error=str(error),
            error_type=type(error).__name__,
        )
        outcome = handler(error)
        if inspect.isawaitable(outcome):
            await outcome

    async def _run_trailing(
        self, steps: list[F], seed: Any, context: InvocationContext
    ) -> None:
        """Run the trailing chain. Never raises."""
        token = set_current_invocation(context)
        try:
            await run_chain(
                steps,
                (seed,),
                on_step=lambda index: context.enter_phase(ChainPhase.TRAILING),
                log_steps=self._registry.settings.log_chain_steps,
            )
        except Exception as e:
            context.finish(False, e)
            handler = self._resolve_error_handler()
            if handler is None:
                logger.error(
                    "Trailing chain failed",
                    phase=context.phase,
                    handled=False,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                return

            logger.warning(
                "Trailing chain failed",
                phase=context.phase,
                handled=True,
                error=str(e),
                error_type=type(e).__name__,
            )
            try:
                outcome = handler(e)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception:
                logger.exception("Error handler failed for trailing chain")
        else:
            context.finish(True)
        finally:
            reset_current_invocation(token)


def pipeline(
    func: Optional[F] = None,
    *,
    error_handler: Optional[ErrorHandler] = None,
    registry: Optional["InterceptionRegistry"] = None,
) -> Any:
    """Decorator building a standalone Pipeline around a function.

    Usable bare (``@pipeline``) or with options
    (``@pipeline(error_handler=report)``).
    """
    if func is not None:
        return Pipeline.wrap(func, error_handler=error_handler, registry=registry)

    def decorator(f: F) -> Pipeline:
        return Pipeline.wrap(f, error_handler=error_handler, registry=registry)

    return decorator
