"""Tests for the asynchronous parse path."""

import asyncio

import pytest

from dataknobs_schema import (
    AsyncRequiredError,
    SchemaValidationError,
    array,
    number,
    object_,
    promise,
    string,
)


async def is_positive(value):
    await asyncio.sleep(0)
    return value > 0


class TestSyncRejection:
    """Test that synchronous parses refuse asynchronous nodes."""

    def test_async_refinement(self):
        """Test that safe_parse raises instead of returning a result."""
        schema = number().refine(is_positive)

        with pytest.raises(AsyncRequiredError) as exc_info:
            schema.safe_parse(1)
        assert exc_info.value.context == {"kind": "custom"}

    def test_async_transform(self):
        """Test that an asynchronous transform needs parse_async."""
        async def double(value):
            return value * 2

        with pytest.raises(AsyncRequiredError):
            number().transform(double).parse(1)

    def test_promise_with_awaitable(self):
        """Test that a promise node cannot await in a synchronous parse."""
        async def produce():
            return 5

        with pytest.raises(AsyncRequiredError):
            promise(number()).safe_parse(produce())

    def test_promise_with_plain_value(self):
        """Test that a plain value is validated synchronously."""
        assert promise(number()).parse(5) == 5

    def test_sync_failure_before_async_check(self):
        """Test that a structural failure never reaches the async check."""
        result = number().refine(is_positive).safe_parse("x")

        assert result.issues[0].code == "invalid_type"


class TestAsyncParse:
    """Test parse_async and safe_parse_async."""

    @pytest.mark.asyncio
    async def test_async_refinement(self):
        """Test awaiting a refinement."""
        schema = number().refine(is_positive)

        assert await schema.parse_async(2) == 2
        result = await schema.safe_parse_async(-2)
        assert result.issues[0].code == "custom"

    @pytest.mark.asyncio
    async def test_parse_async_raises(self):
        """Test that parse_async raises the aggregate error."""
        with pytest.raises(SchemaValidationError):
            await number().refine(is_positive).parse_async(-1)

    @pytest.mark.asyncio
    async def test_sync_schema(self):
        """Test that synchronous schemas also work asynchronously."""
        assert await string().min(1).parse_async("a") == "a"

    @pytest.mark.asyncio
    async def test_async_transform(self):
        """Test awaiting a transform."""
        async def double(value):
            await asyncio.sleep(0)
            return value * 2

        assert await number().transform(double).pipe(number().gt(3)).parse_async(2) == 4

    @pytest.mark.asyncio
    async def test_promise(self):
        """Test awaiting a promise input."""
        async def produce():
            return "x"

        assert await promise(string()).parse_async(produce()) == "x"
        result = await promise(number()).safe_parse_async(produce())
        assert result.issues[0].expected == "number"

    @pytest.mark.asyncio
    async def test_issue_order_follows_positions(self):
        """Test that issues follow declared order, not completion order."""
        delays = {-1: 0.03, -2: 0.02, -3: 0.01}

        async def slow_positive(value):
            await asyncio.sleep(delays[value])
            return value > 0

        result = await array(number().refine(slow_positive)).safe_parse_async([-1, -2, -3])

        assert [issue.path for issue in result.issues] == [(0,), (1,), (2,)]

    @pytest.mark.asyncio
    async def test_siblings_run_concurrently(self):
        """Test that sibling async checks are awaited together."""
        active = 0
        peak = 0

        async def tracked(value):
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1
            return True

        schema = object_({"a": string().refine(tracked), "b": string().refine(tracked)})

        assert await schema.parse_async({"a": "x", "b": "y"}) == {"a": "x", "b": "y"}
        assert peak == 2

    @pytest.mark.asyncio
    async def test_async_checks_keep_order(self):
        """Test that sync checks after an async check still run in order."""
        schema = number().refine(is_positive).lt(10)

        result = await schema.safe_parse_async(-20)
        assert [issue.code for issue in result.issues] == ["custom"]

        result = await schema.safe_parse_async(20)
        assert [issue.code for issue in result.issues] == ["too_big"]

    @pytest.mark.asyncio
    async def test_abort_early(self):
        """Test that abort_early stops at the first failing position."""
        schema = array(number().refine(is_positive))

        result = await schema.safe_parse_async([-1, -2, 3], abort_early=True)
        assert len(result.issues) == 1

        result = await schema.safe_parse_async([-1, -2, 3])
        assert len(result.issues) == 2
