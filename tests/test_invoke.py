"""Tests for perch._internal.invoke — sync/async call helper."""

import pytest

from perch._internal.invoke import invoke


class TestInvoke:
    @pytest.mark.anyio
    async def test_sync(self) -> None:
        assert await invoke(lambda x: x * 2, 21) == 42

    @pytest.mark.anyio
    async def test_async(self) -> None:
        async def double(x: int) -> int:
            return x * 2

        assert await invoke(double, 21) == 42

    @pytest.mark.anyio
    async def test_kwargs(self) -> None:
        def greet(*, name: str) -> str:
            return f"hi {name}"

        assert await invoke(greet, name="ada") == "hi ada"
