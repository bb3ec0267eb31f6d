"""Unit tests for pipelines built without patching an owner."""

import pytest

from hookline.core.interception import Pipeline, pipeline


class TestPipelineWrap:
    """Tests for Pipeline.wrap() and the @pipeline decorator."""

    @pytest.mark.asyncio
    async def test_wrap_runs_callbacks(self, registry) -> None:
        """Test that a wrapped function runs its callbacks when called."""

        def square(value):
            return value * value

        squared = Pipeline.wrap(square, registry=registry)
        squared.add_before(lambda value: value + 1)
        squared.add_after(lambda value: -value)

        assert await squared(2) == -9
        assert square(2) == 4

    @pytest.mark.asyncio
    async def test_original_bypasses_callbacks(self, registry) -> None:
        """Test that .original is the undecorated function."""

        def echo(value):
            return value

        echoed = Pipeline.wrap(echo, registry=registry)
        echoed.add_before(lambda value: value * 2)

        assert echoed.original is echo
        assert echoed.original(3) == 3
        assert await echoed(3) == 6

    def test_record_is_installed_without_owner(self, registry) -> None:
        """Test the record of a standalone pipeline."""

        def echo(value):
            return value

        echoed = Pipeline.wrap(echo, registry=registry)

        assert echoed.record.installed is True
        assert echoed.record.owner is None
        assert echoed.record.name == "echo"
        assert echoed.__wrapped__ is echo

    @pytest.mark.asyncio
    async def test_bare_decorator(self) -> None:
        """Test @pipeline without arguments."""

        @pipeline
        async def greet(name):
            return f"hello {name}"

        greet.add_after(str.title)

        assert isinstance(greet, Pipeline)
        assert await greet("ada") == "Hello Ada"

    @pytest.mark.asyncio
    async def test_decorator_with_error_handler(self, registry) -> None:
        """Test @pipeline with an error handler."""
        received = []

        @pipeline(error_handler=received.append, registry=registry)
        def explode(value):
            raise ArithmeticError(value)

        assert await explode("boom") is None
        assert [error.args for error in received] == [("boom",)]

    @pytest.mark.asyncio
    async def test_decorated_method_binds_instance(self, registry) -> None:
        """Test @pipeline on a method defined in a class body."""

        class Account:
            def __init__(self, balance):
                self.balance = balance

            @pipeline(registry=registry)
            def deposit(self, amount):
                self.balance += amount
                return self.balance

        Account.deposit.add_before(abs)

        account = Account(10)

        assert await account.deposit(-5) == 15
        assert account.balance == 15

    def test_repr_shows_callback_counts(self, registry) -> None:
        """Test the pipeline repr."""

        def echo(value):
            return value

        echoed = Pipeline.wrap(echo, registry=registry)
        echoed.add_before(echo)
        echoed.add_trailing(echo)

        assert repr(echoed) == "<Pipeline echo before=1 after=0 trailing=1>"
