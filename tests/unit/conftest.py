"""Pytest configuration for unit tests."""

import asyncio
import copy
from typing import Any

import pytest

from hookline.core.config import Settings
from hookline.core.interception import InterceptionRegistry


class CustomError(Exception):
    """Error type carrying an extra field, used to check error identity."""

    def __init__(self, message: str = "Default Custom Error Message", code: int = 0) -> None:
        super().__init__(message)
        self.code = code


class CallTracker:
    """Operations and callbacks that record their calls in a shared trace.

    Mirrors a typical service object: ``method`` is the operation being
    intercepted, the remaining methods are sync and async callbacks with
    different behaviors.
    """

    def __init__(self) -> None:
        self.trace: list[str] = []
        self.args: dict[str, list[Any]] = {}
        self.method_return_value: Any = "method"

    def _record(self, name: str, *args: Any) -> None:
        self.trace.append(name)
        self.args[name] = list(args)

    async def method(self, *args: Any) -> Any:
        """The intercepted operation."""
        self._record("method", *args)
        return self.method_return_value

    def test1(self, opts: Any) -> str:
        """Plain synchronous callback."""
        self._record("test1", opts)
        return "test1"

    async def test2(self, opts: Any) -> dict:
        """Async callback returning a fresh value."""
        self._record("test2", opts)
        return {"test2": "test2"}

    async def test3(self, opts: Any) -> Any:
        """Async callback extending its input."""
        self._record("test3", opts)
        new_opts = copy.deepcopy(opts)
        new_opts["test3"] = "test3"
        return new_opts

    async def test4(self, opts: Any) -> Any:
        """Async callback extending its input after a real suspension."""
        self._record("test4", opts)
        new_opts = copy.deepcopy(opts)
        new_opts["test4"] = "test4"
        await asyncio.sleep(0.003)
        return new_opts

    async def fail_async(self, opts: Any) -> Any:
        """Async callback that raises."""
        self._record("fail_async", opts)
        raise ValueError("fail_async")

    def fail_sync(self, opts: Any) -> Any:
        """Sync callback that raises."""
        self._record("fail_sync", opts)
        raise ValueError("fail_sync")

    def fail_custom(self, opts: Any) -> Any:
        """Sync callback raising a custom error."""
        self._record("fail_custom", opts)
        raise CustomError("fail_custom", code=42)

    async def fail_delayed(self, opts: Any) -> Any:
        """Async callback that raises after a suspension."""
        self._record("fail_delayed", opts)
        await asyncio.sleep(0.003)
        raise RuntimeError("fail_delayed")


@pytest.fixture
def settings() -> Settings:
    """Settings for tests, independent of the environment."""
    return Settings(environment="testing", log_chain_steps=True)


@pytest.fixture
def registry(settings: Settings) -> InterceptionRegistry:
    """A fresh registry without error handler."""
    return InterceptionRegistry(settings=settings)


@pytest.fixture
def tracker() -> CallTracker:
    """A fresh call tracker."""
    return CallTracker()
