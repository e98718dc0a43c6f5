"""Invoke helpers — call sync or async capabilities uniformly.

View handles and pipeline steps can be ``def`` or ``async def``. Any code
that calls one must handle both cases. This module provides a single
helper so the sync/async check lives in exactly one place.

Usage::

    from perch._internal.invoke import invoke

    result = await invoke(view.activate, routed)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it's awaitable.

    Works with both sync and async callables::

        # sync — returns immediately, no await needed
        class Banner:
            def activate(self, routed):
                self.text = routed.component

        # async — returns coroutine, awaited automatically
        class Feed:
            async def activate(self, routed):
                self.items = await load(routed.params)
    """
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
