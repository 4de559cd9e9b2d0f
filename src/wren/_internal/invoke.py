"""Invoke helpers — call sync or async user callables uniformly.

Route components, middleware callbacks, metadata functions and lazy
loaders can all be ``def`` or ``async def``. Any code that calls one of
them goes through this helper so the sync/async check lives in exactly
one place.

Usage::

    from wren._internal.invoke import invoke

    nodes = await invoke(component, **props)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it is awaitable.

    Works with both sync and async callables::

        # sync component: returns its template immediately
        def Home():
            return "Home"

        # async component: awaited before its template is used
        async def UserPage():
            user = await load_user()
            return f"User {user.name}"
    """
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
