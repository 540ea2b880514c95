"""Invoke helpers — call sync or async handlers uniformly.

Handlers and filters can be ``def`` or ``async def``. The dispatcher
calls both through this helper so the sync/async check lives in
exactly one place.

Usage::

    from switchyard._internal.invoke import invoke

    await invoke(handler, writer, request)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's a coroutine.

    Works with both sync and async callables::

        def hello(w, r):
            ...

        async def hello(w, r):
            await w.write("hello")
    """
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
